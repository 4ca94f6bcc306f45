"""Serialize a normalized presentation tree into an email payload.

Both representations come out of the same recursive pass over the same
tree, so they can differ in formatting but never in content:

- ``html`` keeps node order and the inline styles exactly as written by
  ``shared/transport.py``; tables also get legacy ``cellpadding`` /
  ``align`` attributes for clients that ignore the CSS box model.
- ``plain_text`` keeps block boundaries (blank line between blocks,
  tab-separated cells, one line per row) and drops styles and images.
"""

from __future__ import annotations

import html as html_mod
from dataclasses import dataclass

from shared.presentation import (
    BUTTON,
    CELL,
    HEADING,
    IMAGE,
    PARAGRAPH,
    ROW,
    TABLE,
    Block,
)

# Consecutive siblings with these roles are separated by a single newline
# in the plain-text rendering instead of a blank line.
_TIGHT_ROLES = {"title", "subtitle", "compact", "signature"}


@dataclass(frozen=True)
class EmailPayload:
    html: str
    plain_text: str

    def to_dict(self) -> dict:
        return {"html": self.html, "plain_text": self.plain_text}


def _esc_text(text: str) -> str:
    return html_mod.escape(text, quote=False).replace("\n", "<br>")


def _attr_str(attrs: dict[str, object]) -> str:
    parts = []
    for name, value in attrs.items():
        if value is None or value == "":
            continue
        parts.append(f'{name}="{html_mod.escape(str(value), quote=True)}"')
    return (" " + " ".join(parts)) if parts else ""


def _join_text(children: list[Block], texts: list[str]) -> str:
    out = ""
    prev: Block | None = None
    for child, text in zip(children, texts):
        if not text:
            continue
        if out:
            tight = prev is not None and prev.role in _TIGHT_ROLES and child.role in _TIGHT_ROLES
            out += "\n" if tight else "\n\n"
        out += text
        prev = child
    return out


def _heading_level(value) -> int:
    try:
        return min(max(int(value), 1), 3)
    except (TypeError, ValueError):
        return 3


def _render(block: Block) -> tuple[str, str]:
    """Return (html, plain_text) for *block* and its subtree."""
    style = block.attributes.get("style", "")
    rendered = [_render(child) for child in block.children]
    child_html = "".join(h for h, _ in rendered)
    child_texts = [t for _, t in rendered]

    if block.kind == IMAGE:
        a = block.attributes
        markup = "<img" + _attr_str({
            "src": a.get("src", ""),
            "alt": a.get("alt", ""),
            "width": a.get("width"),
            "height": a.get("height"),
            "style": style,
        }) + ">"
        return markup, ""

    if block.kind == TABLE:
        attrs = {"width": "100%", "cellpadding": "8", "cellspacing": "0", "border": "0", "style": style}
        text = "\n".join(t for t in child_texts if t)
        return f"<table{_attr_str(attrs)}>{child_html}</table>", text

    if block.kind == ROW:
        text = "\t".join(child_texts)
        return f"<tr{_attr_str({'style': style})}>{child_html}</tr>", text.rstrip("\t")

    if block.kind == CELL:
        align = "right" if block.role == "value" else None
        inner_text = " ".join(t for t in [block.text, *child_texts] if t)
        markup = f"<td{_attr_str({'align': align, 'style': style})}>{_esc_text(block.text)}{child_html}</td>"
        return markup, inner_text

    if block.kind == HEADING:
        tag = f"h{_heading_level(block.attributes.get('level', 2))}"
    elif block.kind == PARAGRAPH:
        tag = "p"
    elif block.kind == BUTTON:
        tag = "span"
    else:
        tag = "div"

    own_text = block.text
    text = _join_text(block.children, child_texts)
    if own_text:
        text = f"{own_text}\n{text}" if text else own_text
    markup = f"<{tag}{_attr_str({'style': style})}>{_esc_text(own_text)}{child_html}</{tag}>"
    return markup, text


def build(tree: Block) -> EmailPayload:
    """Serialize a normalized tree into HTML and plain text in one pass."""
    markup, text = _render(tree)
    return EmailPayload(html=markup, plain_text=text.strip())


def wrap_html_document(fragment: str, title: str = "") -> str:
    """Wrap an HTML fragment in a minimal standalone document."""
    title_tag = f"<title>{html_mod.escape(title)}</title>" if title else ""
    return (
        '<!DOCTYPE html><html><head><meta charset="utf-8">'
        f"{title_tag}</head><body>{fragment}</body></html>"
    )


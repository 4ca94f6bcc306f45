"""Presentation tree for deal documents.

A document template turns a deal record into a tree of ``Block`` nodes.
The same tree feeds two renderings:

- ``render_screen_html``: class-styled markup for the on-screen preview
  (classes are defined in ``shared/theme.py``).
- the transport pipeline (``shared/transport.py`` then
  ``shared/email_payload.py``): inline-styled markup that survives being
  pasted into a third-party email composer.

Blocks flagged ``transportable=False`` are interactive-only (buttons,
navigation hints) and never leave the on-screen view.

Usage::

    from shared.presentation import container, heading, paragraph

    tree = container(
        heading("Settlement Statement", level=1, role="title"),
        paragraph("Hi Pat,"),
    )
"""

from __future__ import annotations

import copy
import html as html_mod
from dataclasses import dataclass, field
from typing import Any, Iterator

# Kinds a template may produce.
HEADING = "heading"
PARAGRAPH = "paragraph"
TABLE = "table"
ROW = "row"
CELL = "cell"
IMAGE = "image"
CONTAINER = "container"
BUTTON = "button"

BLOCK_KINDS: tuple[str, ...] = (
    HEADING,
    PARAGRAPH,
    TABLE,
    ROW,
    CELL,
    IMAGE,
    CONTAINER,
    BUTTON,
)


@dataclass
class Block:
    """One node of a presentation tree."""

    kind: str
    attributes: dict[str, Any] = field(default_factory=dict)
    transportable: bool = True
    children: list[Block] = field(default_factory=list)
    text: str = ""

    @property
    def role(self) -> str:
        return str(self.attributes.get("role", ""))

    def clone(self) -> Block:
        """Deep copy; the clone shares no mutable state with the original."""
        return copy.deepcopy(self)

    def walk(self) -> Iterator[Block]:
        """Yield this block and all descendants, depth-first, in order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def text_content(self, separator: str = " ") -> str:
        """Concatenate the text of every block in the subtree."""
        parts = [b.text for b in self.walk() if b.text]
        return separator.join(parts)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "attributes": copy.deepcopy(self.attributes),
            "transportable": self.transportable,
            "text": self.text,
            "children": [c.to_dict() for c in self.children],
        }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _attrs(role: str, extra: dict[str, Any]) -> dict[str, Any]:
    attrs: dict[str, Any] = {}
    if role:
        attrs["role"] = role
    attrs.update({k: v for k, v in extra.items() if v is not None})
    return attrs


def heading(text: str, level: int = 2, role: str = "", **attrs: Any) -> Block:
    return Block(HEADING, _attrs(role, {"level": level, **attrs}), text=text)


def paragraph(text: str, role: str = "", **attrs: Any) -> Block:
    return Block(PARAGRAPH, _attrs(role, attrs), text=text)


def cell(text: str, role: str = "", **attrs: Any) -> Block:
    return Block(CELL, _attrs(role, attrs), text=text)


def row(*cells: Block | str, role: str = "") -> Block:
    children = [c if isinstance(c, Block) else cell(c) for c in cells]
    return Block(ROW, _attrs(role, {}), children=children)


def table(*rows: Block, role: str = "") -> Block:
    return Block(TABLE, _attrs(role, {}), children=list(rows))


def key_value_table(pairs: list[tuple[str, str]], role: str = "") -> Block:
    """Two-column label/value table, the layout used by every dates list."""
    return table(
        *[row(cell(label, role="label"), cell(value, role="value")) for label, value in pairs],
        role=role,
    )


def image(
    src: str,
    alt: str = "",
    width: int | None = None,
    height: int | None = None,
    role: str = "",
) -> Block:
    """Image block. *width*/*height* are the natural pixel dimensions, if known."""
    return Block(IMAGE, _attrs(role, {"src": src, "alt": alt, "width": width, "height": height}))


def container(*children: Block, role: str = "", transportable: bool = True) -> Block:
    return Block(CONTAINER, _attrs(role, {}), transportable=transportable, children=list(children))


def button(label: str, action: str = "", role: str = "primary-action") -> Block:
    """Interactive control. Never transportable."""
    return Block(BUTTON, _attrs(role, {"action": action or None}), transportable=False, text=label)


# ---------------------------------------------------------------------------
# On-screen rendering
# ---------------------------------------------------------------------------

_SCREEN_TAGS = {
    HEADING: "h{level}",
    PARAGRAPH: "p",
    TABLE: "table",
    ROW: "tr",
    CELL: "td",
    CONTAINER: "div",
    BUTTON: "button",
}


def _screen_classes(block: Block) -> str:
    classes = [f"dd-{block.kind}"]
    if block.role:
        classes.append(f"dd-role-{block.role}")
    if not block.transportable:
        classes.append("dd-no-email")
    return " ".join(classes)


def render_screen_html(block: Block) -> str:
    """Render a tree as class-styled markup for the interactive preview."""
    esc = html_mod.escape
    cls = _screen_classes(block)

    if block.kind == IMAGE:
        attrs = block.attributes
        return (
            f'<img class="{cls}" src="{esc(str(attrs.get("src", "")))}" '
            f'alt="{esc(str(attrs.get("alt", "")))}">'
        )

    tag = _SCREEN_TAGS.get(block.kind, "div")
    if block.kind == HEADING:
        tag = tag.format(level=min(max(int(block.attributes.get("level", 2)), 1), 3))

    inner = esc(block.text).replace("\n", "<br>")
    inner += "".join(render_screen_html(c) for c in block.children)
    extra = ""
    if block.kind == BUTTON and block.attributes.get("action"):
        extra = f' data-action="{esc(str(block.attributes["action"]))}"'
    return f'<{tag} class="{cls}"{extra}>{inner}</{tag}>'

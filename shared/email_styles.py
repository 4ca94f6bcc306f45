"""Inline style table for email-bound deal documents.

Email renderers ignore class-based and cascading stylesheets, drop CSS
custom properties and often strip ``<style>`` blocks. Every block that
leaves the app therefore carries a literal ``style`` attribute computed
here from its ``kind``, heading ``level``, ``role`` and image width.

The kind table must cover every kind in ``BLOCK_KINDS``. A kind or role
without a rule raises ``StyleMappingError`` in strict mode. In
non-strict mode (production) it is logged and a generic style is used
so the content still ships.
"""

from __future__ import annotations

import logging

from shared.presentation import (
    BLOCK_KINDS,
    BUTTON,
    CELL,
    CONTAINER,
    HEADING,
    IMAGE,
    PARAGRAPH,
    ROW,
    TABLE,
    Block,
)

logger = logging.getLogger(__name__)


class StyleMappingError(Exception):
    """A block kind or role has no inline style rule."""


KIND_STYLES: dict[str, str] = {
    HEADING: "margin: 24px 0 12px 0; padding: 0; font-weight: bold; line-height: 1.3; color: #111827;",
    PARAGRAPH: "margin: 16px 0; line-height: 1.6; color: #374151;",
    TABLE: "width: 100%; border-collapse: collapse; border-spacing: 0; margin: 16px 0;",
    ROW: "border-bottom: 1px solid #e5e7eb;",
    CELL: "padding: 8px 4px; border-bottom: 1px solid #e5e7eb; vertical-align: top; color: #374151;",
    IMAGE: "display: block; margin: 0; height: auto; border: 0;",
    CONTAINER: "margin: 0; padding: 0;",
    BUTTON: (
        "display: inline-block; padding: 10px 16px; border-radius: 6px; "
        "background: #f43f5e; color: #ffffff; font-weight: bold; text-decoration: none;"
    ),
}

HEADING_SIZES: dict[int, str] = {
    1: "font-size: 30px;",
    2: "font-size: 22px;",
    3: "font-size: 18px;",
}

ROLE_STYLES: dict[str, str] = {
    # Letter header: logo next to title/subtitle
    "header": "margin: 0 0 24px 0;",
    "logo": "vertical-align: middle;",
    "title": "margin: 0; font-size: 30px; line-height: 1.2;",
    "subtitle": "margin: 0; padding: 0; font-size: 16px; line-height: 1.2; color: #6b7280;",
    # Body
    "card": "padding: 32px; background: #ffffff; border: 1px solid #e5e7eb; border-radius: 8px;",
    "section": "margin: 24px 0 0 0;",
    "callout": "margin: 16px 0; padding: 16px; background: #f9fafb; border-radius: 8px;",
    "compact": "margin: 0; padding: 0; line-height: 1.5;",
    "muted": "font-size: 14px; color: #6b7280;",
    "strong": "font-weight: bold;",
    "signature": "margin: 0; line-height: 1.3;",
    # Tables
    "dates": "max-width: 640px;",
    "label": "font-weight: 600;",
    "value": "text-align: right;",
    "metrics": "text-align: center;",
    "metric-value": "font-size: 28px; font-weight: bold; color: #111827; text-align: center;",
    "metric-label": "font-size: 14px; color: #6b7280; text-align: center;",
    # Interactive-only
    "primary-action": "",
    "navigation": "",
}

FALLBACK_STYLE = "margin: 0 0 12px 0; line-height: 1.5; color: #374151;"


def _mapping_gap(message: str, strict: bool) -> None:
    if strict:
        logger.error(message)
        raise StyleMappingError(message)
    logger.warning("%s; using a generic inline style", message)


def style_for(block: Block, *, strict: bool = True) -> str:
    """Compute the inline style declaration for one block."""
    base = KIND_STYLES.get(block.kind)
    if base is None:
        _mapping_gap(f"No inline style rule for block kind {block.kind!r}", strict)
        base = FALLBACK_STYLE
    parts = [base]

    if block.kind == HEADING:
        raw_level = block.attributes.get("level", 2)
        try:
            level = int(raw_level)
        except (TypeError, ValueError):
            _mapping_gap(f"Heading level {raw_level!r} is not a number", strict)
            level = 3
        parts.append(HEADING_SIZES.get(level, HEADING_SIZES[3]))

    role = block.role
    if role:
        role_style = ROLE_STYLES.get(role)
        if role_style is None:
            _mapping_gap(f"No inline style rule for role {role!r} on {block.kind!r}", strict)
        else:
            parts.append(role_style)

    if block.kind == IMAGE and block.attributes.get("width"):
        width = int(block.attributes["width"])
        parts.append(f"width: {width}px; max-width: {width}px;")

    return " ".join(p for p in parts if p)


def missing_kinds(kinds: tuple[str, ...] | list[str] | set[str] = BLOCK_KINDS) -> set[str]:
    """Kinds among *kinds* that have no rule in ``KIND_STYLES``."""
    return {k for k in kinds if k not in KIND_STYLES}


def check_style_table(kinds: tuple[str, ...] | list[str] | set[str] = BLOCK_KINDS) -> None:
    """Raise ``StyleMappingError`` if any of *kinds* is unmapped."""
    gaps = missing_kinds(kinds)
    if gaps:
        raise StyleMappingError(f"Unmapped block kinds: {', '.join(sorted(gaps))}")

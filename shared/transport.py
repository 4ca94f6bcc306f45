"""Transport normalizer: make a presentation tree safe to paste into email.

``normalize`` works on a deep clone and never touches the tree that is
on screen. In order it:

1. prunes every non-transportable block together with its subtree,
2. swaps each image for a size-bounded embedded copy (or keeps the
   original reference if the image cannot be loaded),
3. writes an explicit inline ``style`` on every remaining block from
   the table in ``shared/email_styles.py``.

Running it again on its own output changes nothing.
"""

from __future__ import annotations

import logging
from typing import Callable

from shared.email_styles import check_style_table, style_for
from shared.image_raster import ImageReference, RasterizedImage, rasterize_or_fallback, resize
from shared.presentation import CONTAINER, IMAGE, Block
from shared.settings import get_settings

logger = logging.getLogger(__name__)

Resizer = Callable[[str, int], RasterizedImage]

# Attribute set on images once the raster step has run (True) or fallen back (False).
RASTERIZED_ATTR = "rasterized"


def prune(block: Block) -> Block | None:
    """Drop non-transportable blocks in place. Returns None if *block* itself goes."""
    if not block.transportable:
        return None
    kept = []
    for child in block.children:
        pruned = prune(child)
        if pruned is not None:
            kept.append(pruned)
    block.children = kept
    return block


def _optional_int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def substitute_images(block: Block, target_width: int, resizer: Resizer) -> int:
    """Rasterize every unprocessed image in place. Returns how many were handled."""
    handled = 0
    for node in block.walk():
        if node.kind != IMAGE or RASTERIZED_ATTR in node.attributes:
            continue
        attrs = node.attributes
        reference = ImageReference(
            str(attrs.get("src", "")),
            _optional_int(attrs.get("width")),
            _optional_int(attrs.get("height")),
        )
        result = rasterize_or_fallback(reference, target_width, resizer=resizer)
        attrs["src"] = result.data_uri
        attrs["width"] = result.width or None
        attrs["height"] = result.height or None
        attrs[RASTERIZED_ATTR] = result.rasterized
        handled += 1
    return handled


def materialize_styles(block: Block, *, strict: bool) -> None:
    """Replace class styling with an inline ``style`` on every node."""
    if strict:
        check_style_table({node.kind for node in block.walk()})
    for node in block.walk():
        node.attributes.pop("class", None)
        node.attributes["style"] = style_for(node, strict=strict)


def normalize(
    tree: Block,
    *,
    target_width: int | None = None,
    resizer: Resizer | None = None,
    strict: bool | None = None,
) -> Block:
    """Return an email-safe copy of *tree*."""
    settings = get_settings()
    target_width = target_width or settings.logo_width_px
    strict = settings.strict_style_mapping if strict is None else strict

    result = prune(tree.clone())
    if result is None:
        logger.debug("Root block is not transportable; normalized tree is empty")
        result = Block(CONTAINER)

    images = substitute_images(result, target_width, resizer or resize)
    materialize_styles(result, strict=strict)
    logger.debug("Normalized tree: %d blocks, %d images", sum(1 for _ in result.walk()), images)
    return result


def is_transport_safe(tree: Block) -> bool:
    """True if no node is interactive-only and every node has an inline style."""
    return all(
        node.transportable and "style" in node.attributes and "class" not in node.attributes
        for node in tree.walk()
    )

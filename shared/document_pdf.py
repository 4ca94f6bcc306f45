"""PDF export of a deal document.

The PDF is built from the same email-safe tree that Copy & Email sends
(``shared/transport.normalize``), so interactive blocks never appear
and the logo is the downsampled copy. Layout follows the letter views:
1-inch margins, logo and title block, then the card body. Tables are
drawn with fpdf2's table API, one PDF table per ``table`` block.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging

from fpdf import FPDF

from shared.presentation import CELL, CONTAINER, HEADING, IMAGE, PARAGRAPH, ROW, TABLE, Block
from shared.transport import RASTERIZED_ATTR, Resizer, normalize

logger = logging.getLogger(__name__)

_MARGIN_MM = 25.4
_PX_TO_MM = 25.4 / 96
_FONT = "Helvetica"

_HEADING_PT = {1: 20, 2: 15, 3: 13}

# Core PDF fonts are latin-1 only
_TYPOGRAPHIC = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2022": "-",
    "\u2026": "...",
})


def _latin1(text: str) -> str:
    return text.translate(_TYPOGRAPHIC).encode("latin-1", "replace").decode("latin-1")


def _image_bytes(block: Block) -> bytes | None:
    src = str(block.attributes.get("src", ""))
    if not block.attributes.get(RASTERIZED_ATTR) or not src.startswith("data:"):
        return None
    _, _, payload = src.partition(",")
    try:
        return base64.b64decode(payload)
    except (binascii.Error, ValueError):
        return None


class _DocumentPDF(FPDF):
    def __init__(self) -> None:
        super().__init__()
        self.set_margins(_MARGIN_MM, _MARGIN_MM, _MARGIN_MM)  # must precede add_page
        self.set_auto_page_break(auto=True, margin=_MARGIN_MM)
        self.add_page()
        self.set_font(_FONT, "", 11)

    @property
    def body_width(self) -> float:
        return self.w - self.l_margin - self.r_margin

    def write_text(self, text: str, *, size: float = 11, style: str = "", gap: float = 2) -> None:
        if not text:
            return
        self.set_font(_FONT, style, size)
        self.set_x(self.l_margin)
        self.multi_cell(self.body_width, size * 0.5, _latin1(text), new_x="LMARGIN", new_y="NEXT")
        self.ln(gap)

    def write_image(self, block: Block) -> None:
        data = _image_bytes(block)
        if data is None:
            src = str(block.attributes.get("src", ""))
            logger.info("Leaving un-rasterized image out of the PDF: %s", src[:80])
            return
        width_px = int(block.attributes.get("width") or 0) or 175
        self.image(io.BytesIO(data), x=self.l_margin, w=width_px * _PX_TO_MM)
        self.ln(4)

    def write_table(self, block: Block) -> None:
        rows = [r for r in block.children if r.kind == ROW]
        if not rows:
            return
        self.set_font(_FONT, "", 10)
        with self.table(
            borders_layout="HORIZONTAL_LINES",
            first_row_as_headings=False,
            line_height=6,
            width=self.body_width,
        ) as pdf_table:
            for r in rows:
                pdf_row = pdf_table.row()
                for c in r.children:
                    if c.kind == CELL:
                        pdf_row.cell(_latin1(c.text_content()))
        self.ln(3)


def _render(pdf: _DocumentPDF, block: Block) -> None:
    role = block.role
    if block.kind == HEADING:
        level = block.attributes.get("level", 2)
        size = _HEADING_PT.get(level if isinstance(level, int) else 3, 13)
        pdf.ln(2)
        pdf.write_text(block.text, size=size, style="B")
    elif block.kind == PARAGRAPH:
        if role == "subtitle" or role == "muted":
            pdf.set_text_color(107, 114, 128)
            pdf.write_text(block.text, size=10)
            pdf.set_text_color(0, 0, 0)
        elif role == "signature":
            pdf.write_text(block.text, gap=0)
        else:
            pdf.write_text(block.text, style="B" if role == "strong" else "")
    elif block.kind == TABLE:
        pdf.write_table(block)
    elif block.kind == IMAGE:
        pdf.write_image(block)
    elif block.kind == CONTAINER:
        if role == "section":
            pdf.ln(3)
        for child in block.children:
            _render(pdf, child)
    else:
        pdf.write_text(block.text_content())


def build_document_pdf(tree: Block, *, title: str = "", resizer: Resizer | None = None) -> bytes:
    """Render *tree* as a PDF and return the file bytes."""
    email_tree = normalize(tree, resizer=resizer)
    pdf = _DocumentPDF()
    if title:
        pdf.set_title(_latin1(title))
    _render(pdf, email_tree)
    data = bytes(pdf.output())
    logger.debug("Built PDF %r (%d bytes)", title, len(data))
    return data

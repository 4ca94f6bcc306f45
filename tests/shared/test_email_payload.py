"""Tests for shared/email_payload.py — HTML + plain text serialization."""

from __future__ import annotations

import re

from shared.email_payload import EmailPayload, build, wrap_html_document
from shared.image_raster import RasterizedImage
from shared.presentation import (
    button,
    container,
    heading,
    image,
    key_value_table,
    paragraph,
)
from shared.transport import normalize


def _resizer(uri: str, width: int) -> RasterizedImage:
    return RasterizedImage("data:image/png;base64,AAAA", width, 88)


def _visible_text(html: str) -> str:
    return re.sub(r"<[^>]+>", " ", html)


class TestBuild:
    def test_pruned_button_leaves_only_paragraph(self):
        tree = container(button("Copy & Email"), paragraph("Thanks"))
        payload = build(normalize(tree))
        assert payload.plain_text == "Thanks"
        assert "Copy &amp; Email" not in payload.html
        assert "Thanks" in payload.html

    def test_every_html_element_has_inline_style(self):
        tree = container(
            container(image("logo.png", role="logo"), heading("Title", level=1, role="title"), role="header"),
            key_value_table([("Closing date:", "06/30/2026")], role="dates"),
        )
        payload = build(normalize(tree, resizer=_resizer))
        tags = re.findall(r"<(div|h1|img|table|tr|td|p)\b([^>]*)>", payload.html)
        assert tags
        for tag, attrs in tags:
            assert 'style="' in attrs, tag

    def test_content_matches_between_representations(self):
        tree = container(
            heading("Important Dates", level=1, role="title"),
            paragraph("Keep Track of Your Closing Timeline", role="subtitle"),
            paragraph("Hi Pat & Jordan,"),
            key_value_table([("Closing Date:", "06/30/2026"), ("Possession:", "07/02/2026")]),
            paragraph("Thanks"),
        )
        payload = build(normalize(tree))
        for text in ("Important Dates", "Keep Track", "Closing Date:", "06/30/2026", "Thanks"):
            assert text in payload.plain_text
        visible = _visible_text(payload.html)
        assert "Hi Pat &amp; Jordan," in visible
        assert "Hi Pat & Jordan," in payload.plain_text

    def test_plain_text_block_boundaries(self):
        tree = container(
            heading("Clear to Close", level=1, role="title"),
            paragraph("Notification for Pat", role="subtitle"),
            paragraph("Hey Pat,"),
            key_value_table([("Closing:", "06/30"), ("Possession:", "07/02")]),
        )
        payload = build(normalize(tree))
        assert payload.plain_text == (
            "Clear to Close\n"
            "Notification for Pat\n"
            "\n"
            "Hey Pat,\n"
            "\n"
            "Closing:\t06/30\n"
            "Possession:\t07/02"
        )

    def test_images_have_no_plain_text(self):
        payload = build(normalize(container(image("logo.png"), paragraph("Body")), resizer=_resizer))
        assert payload.plain_text == "Body"
        assert 'src="data:image/png;base64,AAAA"' in payload.html
        assert 'width="175"' in payload.html

    def test_value_cells_align_right(self):
        payload = build(normalize(key_value_table([("A", "B")])))
        assert '<td align="right"' in payload.html

    def test_newlines_become_breaks(self):
        payload = build(normalize(paragraph("line one\nline two")))
        assert "line one<br>line two" in payload.html
        assert payload.plain_text == "line one\nline two"

    def test_non_numeric_heading_level_in_production(self):
        tree = normalize(container(heading("Dates", level="two"), paragraph("x")), strict=False)
        payload = build(tree)
        assert payload.html.startswith('<div style="')
        assert "<h3 style=" in payload.html
        assert payload.plain_text == "Dates\n\nx"

    def test_to_dict(self):
        assert EmailPayload("<p>x</p>", "x").to_dict() == {"html": "<p>x</p>", "plain_text": "x"}


class TestWrapHtmlDocument:
    def test_wraps_fragment_with_title(self):
        doc = wrap_html_document("<p>x</p>", title="A & B")
        assert doc.startswith("<!DOCTYPE html>")
        assert "<title>A &amp; B</title>" in doc
        assert "<body><p>x</p></body>" in doc

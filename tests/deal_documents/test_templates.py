"""Tests for deal-documents/app/templates.py — the shipped deal documents.

Every template is run through the full transport pipeline so a style
table gap or an interactive block leaking into email shows up here.
"""

from __future__ import annotations

import html as html_mod
import re
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "deal-documents"))

from app import templates as templates_mod
from app.deal_record import DealRecord, format_currency

from shared.document_pdf import build_document_pdf
from shared.document_template import get_template, list_templates
from shared.email_payload import build
from shared.email_styles import missing_kinds
from shared.image_raster import RasterizedImage
from shared.transport import is_transport_safe, normalize

TEMPLATE_IDS = [
    "settlement-statement",
    "agent-letter",
    "important-dates",
    "deposit-letter",
    "ad-results",
    "title-letter",
    "clear-to-close",
]


def _resizer(uri: str, width: int) -> RasterizedImage:
    return RasterizedImage("data:image/png;base64,AAAA", width, 60)


@pytest.fixture()
def deal(sample_deal_data):
    return DealRecord(**sample_deal_data)


@pytest.fixture()
def email_for(deal):
    def _email(template_id: str, record: DealRecord | None = None):
        template = get_template(template_id)
        return build(normalize(template.render(record or deal), resizer=_resizer, strict=True))

    return _email


# ── registry ─────────────────────────────────────────────────────────────


class TestRegistry:
    def test_all_templates_registered(self):
        ids = {t.template_id for t in list_templates()}
        assert set(TEMPLATE_IDS) <= ids

    def test_templates_have_titles(self):
        for template_id in TEMPLATE_IDS:
            assert get_template(template_id).title


# ── shared shape ─────────────────────────────────────────────────────────


@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
class TestEveryTemplate:
    def test_every_kind_has_a_style(self, template_id, deal):
        tree = get_template(template_id).render(deal)
        assert missing_kinds({b.kind for b in tree.walk()}) == set()

    def test_normalizes_strictly(self, template_id, deal):
        tree = get_template(template_id).render(deal)
        assert is_transport_safe(normalize(tree, resizer=_resizer, strict=True))

    def test_has_logo_and_copy_button_on_screen(self, template_id, deal):
        tree = get_template(template_id).render(deal)
        kinds = [b.kind for b in tree.walk()]
        assert "image" in kinds
        buttons = [b for b in tree.walk() if b.kind == "button"]
        assert any(b.attributes.get("action") == templates_mod.COPY_AND_EMAIL_ACTION for b in buttons)
        assert all(not b.transportable for b in buttons)

    def test_email_has_no_controls(self, template_id, email_for):
        payload = email_for(template_id)
        assert "Copy &amp; Email" not in payload.html
        assert "My Properties" not in payload.plain_text
        assert 'src="data:image/png;base64,AAAA"' in payload.html

    def test_subject_is_non_empty(self, template_id, deal):
        assert get_template(template_id).subject(deal).strip()

    def test_ends_with_listing_agent_signature(self, template_id, email_for):
        text = email_for(template_id).plain_text
        assert text.rstrip().endswith("email: robin@listings.example.com")
        assert "Thanks\n\nRobin" in text

    def test_plain_text_carries_every_visible_word(self, template_id, email_for):
        payload = email_for(template_id)
        visible = html_mod.unescape(re.sub(r"<[^>]+>", " ", payload.html))
        assert visible.split() == payload.plain_text.split()

    def test_exports_pdf(self, template_id, deal, make_data_uri):
        logo = make_data_uri(175, 60)
        template = get_template(template_id)
        data = build_document_pdf(
            template.render(deal),
            title=template.subject(deal),
            resizer=lambda uri, width: RasterizedImage(logo, width, 60),
        )
        assert data.startswith(b"%PDF-")


# ── subjects & recipients ────────────────────────────────────────────────


class TestAddressing:
    @pytest.mark.parametrize(
        "template_id, subject",
        [
            ("settlement-statement", "Settlement Statement for 123 Main St"),
            ("agent-letter", 'Transaction Summary for "123 Main St"'),
            ("important-dates", "Important Dates for Your Property Sale - 123 Main St"),
            ("deposit-letter", "Deposit Confirmation - 123 Main St"),
            ("ad-results", "Facebook Ad Results - 123 Main St"),
            ("title-letter", "Title Information - 123 Main St"),
            ("clear-to-close", "Clear to Close - 123 Main St"),
        ],
    )
    def test_subject(self, template_id, subject, deal):
        assert get_template(template_id).subject(deal) == subject

    def test_seller_documents_go_to_seller(self, deal):
        for template_id in ("settlement-statement", "important-dates", "ad-results"):
            assert get_template(template_id).recipient(deal) == "pat@example.com"

    def test_agent_documents_go_to_buyer_agent(self, deal):
        for template_id in ("agent-letter", "deposit-letter"):
            assert get_template(template_id).recipient(deal) == "casey@buyers.example.com"

    def test_title_letter_leaves_recipient_blank(self, deal):
        assert get_template("title-letter").recipient(deal) == ""

    def test_clear_to_close_goes_to_both(self, deal):
        assert (
            get_template("clear-to-close").recipient(deal)
            == "pat@example.com, casey@buyers.example.com"
        )

    def test_clear_to_close_skips_missing_addresses(self, deal):
        no_agent = deal.model_copy(update={"agent_email": ""})
        assert get_template("clear-to-close").recipient(no_agent) == "pat@example.com"


# ── content ──────────────────────────────────────────────────────────────


class TestContent:
    def test_agent_letter_dates_table(self, email_for):
        text = email_for("agent-letter").plain_text
        assert "Hi Casey," in text
        assert "Closing date:\t06/30/2026" in text
        assert "Final walk-through:\t06/29/2026" in text
        assert "Capital Title" in text

    def test_important_dates_marks_missing_dates(self, deal, email_for):
        text = email_for("important-dates", deal.model_copy(update={"final_walk_through": ""})).plain_text
        assert "Final walk-through:\tTBD" in text
        assert "Hi Pat & Jordan," in text

    def test_settlement_statement_faq(self, email_for):
        text = email_for("settlement-statement").plain_text
        for question, _ in templates_mod.SettlementStatementTemplate.FAQ:
            assert question in text

    def test_deposit_letter_amount(self, email_for):
        text = email_for("deposit-letter").plain_text
        assert "the $5,000 deposit for 123 Main St" in text
        assert "Notice to Casey Lee" in text

    def test_deposit_letter_without_agent(self, deal, email_for):
        text = email_for("deposit-letter", deal.model_copy(update={"agent_name": ""})).plain_text
        assert "Notice to Buyer's Agent" in text
        assert "Hey there," in text

    def test_ad_results_metrics(self, email_for):
        text = email_for("ad-results").plain_text
        assert "12,500\t30,100\t410\t7" in text
        assert "Reach\tViews\tLink Clicks\tLeads" in text
        assert "Total ad spend: $150" in text

    def test_ad_results_without_data(self, deal, email_for):
        empty = deal.model_copy(update={"ad_reach": 0, "ad_impressions": 0, "ad_clicks": 0, "ad_leads": 0})
        assert "No Facebook ad data found" in email_for("ad-results", empty).plain_text

    def test_title_letter_sections(self, email_for):
        text = email_for("title-letter").plain_text
        for section in ("Property & Seller", "Contract Details", "Listing Agent", "Buyer's Agent", "Lender"):
            assert section in text
        assert "Sale Price:\t$325,000" in text
        assert "City, State, Zip:\tColumbus, OH 43215" in text


# ── DealRecord ───────────────────────────────────────────────────────────


class TestDealRecord:
    def test_full_address(self, deal):
        assert deal.full_address == "123 Main St, Columbus, OH 43215"

    def test_seller_first_names(self, deal):
        assert deal.seller_first_names == "Pat & Jordan"
        assert DealRecord(name="Pat Morgan, Jordan Lee").seller_first_names == "Pat & Jordan"
        assert DealRecord().seller_first_names == "there"

    def test_buyer_agent_first_name(self, deal):
        assert deal.buyer_agent_first_name == "Casey"

    def test_is_immutable(self, deal):
        with pytest.raises(Exception):
            deal.name = "Someone Else"

    def test_ignores_unknown_keys(self, sample_deal_data):
        record = DealRecord(**sample_deal_data, created_at="2026-01-01", legacy_field=1)
        assert not hasattr(record, "legacy_field")

    def test_format_currency(self):
        assert format_currency(None) == ""
        assert format_currency(5000) == "$5,000"
        assert format_currency(1234.5) == "$1,234.50"

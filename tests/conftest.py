"""Shared fixtures for all tests."""

from __future__ import annotations

import base64
import io
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

import shared.config_store as config_mod
from shared.settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings so env overrides in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def tmp_config_dir(tmp_path: Path):
    """Provide a temporary config directory and patch the config store to use it."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    with patch.object(config_mod, "CONFIG_DIR", config_dir):
        yield config_dir


@pytest.fixture()
def make_image_bytes():
    """Factory: encoded image bytes of the given size, mode and format."""

    def _make(width: int, height: int, mode: str = "RGB", fmt: str = "PNG") -> bytes:
        color = (200, 30, 60, 128) if mode == "RGBA" else (200, 30, 60)
        buf = io.BytesIO()
        Image.new(mode, (width, height), color).save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture()
def make_data_uri(make_image_bytes):
    """Factory: base64 data URI for a generated image."""

    def _make(width: int, height: int, mode: str = "RGB", fmt: str = "PNG") -> str:
        data = make_image_bytes(width, height, mode, fmt)
        mime = "image/png" if fmt == "PNG" else "image/jpeg"
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"

    return _make


@pytest.fixture()
def sample_deal_data():
    """Field values for a typical deal in contract."""
    return {
        "id": "deal0001",
        "name": "Pat Morgan & Jordan Morgan",
        "seller_email": "pat@example.com",
        "seller_phone": "614-555-0100",
        "street_address": "123 Main St",
        "city": "Columbus",
        "state": "OH",
        "zip": "43215",
        "agent_name": "Casey Lee",
        "agent_email": "casey@buyers.example.com",
        "agent_phone": "614-555-0111",
        "listing_agent_name": "Robin Hale",
        "listing_agent_phone": "614-555-0122",
        "listing_agent_email": "robin@listings.example.com",
        "lending_officer": "Dana Fox",
        "lending_officer_email": "dana@lender.example.com",
        "title_company_name": "Capital Title",
        "title_processor": "Sam Ortiz",
        "title_phone": "614-555-0133",
        "title_email": "closings@capitaltitle.example.com",
        "offer_price": 325000,
        "deposit": 5000,
        "deposit_collection": "Capital Title",
        "closing_date": "06/30/2026",
        "possession": "07/02/2026",
        "preapproval_due": "05/20/2026",
        "loan_commitment_due": "06/15/2026",
        "inspection_period_end": "05/27/2026",
        "remedy_period_end": "06/01/2026",
        "title_commitment_due": "06/10/2026",
        "earnest_money_due": "05/22/2026",
        "final_walk_through": "06/29/2026",
        "ad_reach": 12500,
        "ad_impressions": 30100,
        "ad_clicks": 410,
        "ad_leads": 7,
        "ad_spend": 150.0,
    }

"""Tests for deal-documents/app/api.py — FastAPI endpoints."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from shared.clipboard import TEXT_MIME, MemoryClipboard, UnsupportedClipboard
from shared.image_raster import RasterizedImage

_TOOL_DIR = str(Path(__file__).resolve().parent.parent.parent / "deal-documents")


def _resizer(uri: str, width: int, **kwargs) -> RasterizedImage:
    return RasterizedImage("data:image/png;base64,AAAA", width, 60)


@pytest.fixture(autouse=True)
def _isolate_stores(tmp_path, tmp_config_dir):
    sys.path.insert(0, _TOOL_DIR)
    for k in list(sys.modules.keys()):
        if k == "app" or k.startswith("app."):
            del sys.modules[k]

    import app.deals as deals_mod
    import shared.transport as transport_mod

    data_dir = tmp_path / "deals"
    with patch.object(deals_mod, "DATA_DIR", data_dir), \
         patch.object(transport_mod, "resize", _resizer):
        yield

    try:
        sys.path.remove(_TOOL_DIR)
    except ValueError:
        pass


@pytest.fixture()
def api():
    from app.api import app as _app
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture()
def client(api):
    return TestClient(api)


@pytest.fixture()
def board(api):
    from app.api import get_clipboard_backend

    board = MemoryClipboard()
    api.dependency_overrides[get_clipboard_backend] = lambda: board
    return board


@pytest.fixture()
def opener(api):
    from app.api import get_link_opener

    opener = MagicMock(return_value=True)
    api.dependency_overrides[get_link_opener] = lambda: opener
    return opener


# ── Templates & mail clients ──────────────────────────────────────────────


def test_list_templates(client):
    resp = client.get("/api/templates")
    assert resp.status_code == 200
    ids = [t["id"] for t in resp.json()]
    assert "settlement-statement" in ids
    assert "clear-to-close" in ids


def test_list_mail_clients_defaults(client):
    resp = client.get("/api/mail-clients")
    assert resp.status_code == 200
    data = resp.json()
    assert [c["id"] for c in data["clients"]] == ["gmail", "outlook", "yahoo", "default"]
    assert data["preference"] == "default"
    assert data["effective"] == "default"


def test_set_mail_client(client):
    resp = client.put("/api/mail-client", json={"client_id": "outlook"})
    assert resp.status_code == 200
    assert client.get("/api/mail-clients").json()["preference"] == "outlook"


def test_set_unknown_mail_client(client):
    resp = client.put("/api/mail-client", json={"client_id": "carrier-pigeon"})
    assert resp.status_code == 400


def test_reset_mail_client(client):
    client.put("/api/mail-client", json={"client_id": "gmail"})
    resp = client.delete("/api/mail-client")
    assert resp.status_code == 200
    assert resp.json() == {"preference": "default"}
    assert client.get("/api/mail-clients").json()["preference"] == "default"


# ── Deals ─────────────────────────────────────────────────────────────────


def test_deal_crud(client, sample_deal_data):
    resp = client.post("/api/deals", json=sample_deal_data)
    assert resp.status_code == 200
    assert resp.json()["id"] == "deal0001"

    listed = client.get("/api/deals").json()
    assert [d["id"] for d in listed] == ["deal0001"]

    fetched = client.get("/api/deals/deal0001").json()
    assert fetched["street_address"] == "123 Main St"

    assert client.delete("/api/deals/deal0001").status_code == 200
    assert client.get("/api/deals/deal0001").status_code == 404


def test_save_deal_assigns_id(client):
    resp = client.post("/api/deals", json={"name": "Pat"})
    assert resp.status_code == 200
    assert resp.json()["id"]


def test_get_missing_deal(client):
    assert client.get("/api/deals/nope").status_code == 404


def test_save_deal_rejects_path_like_id(client, tmp_path):
    resp = client.post("/api/deals", json={"id": "../../escaped", "name": "Pat"})
    assert resp.status_code == 400
    assert not list(tmp_path.rglob("escaped.json"))
    assert not (tmp_path.parent / "escaped.json").exists()


def test_path_like_id_is_not_found(client):
    assert client.get("/api/deals/deal.0001").status_code == 404
    assert client.delete("/api/deals/deal.0001").status_code == 404


# ── Documents ─────────────────────────────────────────────────────────────


def test_render_inline_deal(client, sample_deal_data):
    resp = client.post("/api/documents/deposit-letter/render", json={"deal": sample_deal_data})
    assert resp.status_code == 200
    data = resp.json()
    assert data["subject"] == "Deposit Confirmation - 123 Main St"
    assert data["recipient"] == "casey@buyers.example.com"
    assert "dd-no-email" in data["html"]
    assert data["tree"]["kind"] == "container"


def test_render_saved_deal(client, sample_deal_data):
    client.post("/api/deals", json=sample_deal_data)
    resp = client.post("/api/documents/agent-letter/render", json={"deal_id": "deal0001"})
    assert resp.status_code == 200
    assert resp.json()["subject"] == 'Transaction Summary for "123 Main St"'


def test_render_unknown_template(client, sample_deal_data):
    resp = client.post("/api/documents/nope/render", json={"deal": sample_deal_data})
    assert resp.status_code == 404


def test_render_unknown_deal(client):
    resp = client.post("/api/documents/agent-letter/render", json={"deal_id": "missing"})
    assert resp.status_code == 404


def test_render_without_deal(client):
    resp = client.post("/api/documents/agent-letter/render", json={})
    assert resp.status_code == 400


def test_payload(client, sample_deal_data):
    resp = client.post(
        "/api/documents/important-dates/payload",
        json={"deal": sample_deal_data, "client_id": "gmail"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["link"].startswith("https://mail.google.com/mail/?view=cm&to=pat@example.com")
    assert "style=" in data["html"]
    assert "Copy &amp; Email" not in data["html"]
    assert "Closing Date:\t06/30/2026" in data["plain_text"]


def test_payload_leaves_dispatch_to_the_caller(client, board, opener, sample_deal_data):
    resp = client.post("/api/documents/deposit-letter/payload", json={"deal": sample_deal_data})
    data = resp.json()
    assert set(data) >= {"html", "plain_text", "link", "subject", "recipient"}
    assert board.read(TEXT_MIME) is None
    opener.assert_not_called()


def test_copy_and_email_success(client, board, opener, sample_deal_data):
    resp = client.post("/api/documents/title-letter/copy-and-email", json={"deal": sample_deal_data})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "sent"
    assert data["link"] == "mailto:?subject=Title%20Information%20-%20123%20Main%20St"
    opener.assert_called_once_with(data["link"])
    assert "Contract Details" in board.read(TEXT_MIME)


def test_copy_and_email_clipboard_failure(client, api, opener, sample_deal_data):
    from app.api import get_clipboard_backend

    api.dependency_overrides[get_clipboard_backend] = lambda: UnsupportedClipboard("denied")
    resp = client.post("/api/documents/clear-to-close/copy-and-email", json={"deal": sample_deal_data})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "failed"
    assert data["notification"]["title"] == "Could not copy - try again"
    opener.assert_not_called()


def test_copy_and_email_popup_blocked(client, board, opener, sample_deal_data):
    opener.return_value = False
    resp = client.post("/api/documents/ad-results/copy-and-email", json={"deal": sample_deal_data})
    data = resp.json()
    assert data["status"] == "copied"
    assert data["notification"]["title"] == "Pop-ups blocked - open your email manually"
    assert data["link"].startswith("mailto:pat@example.com?subject=Facebook%20Ad%20Results")
    assert board.read(TEXT_MIME)


def test_document_pdf(client, make_data_uri, sample_deal_data):
    import shared.transport as transport_mod

    logo = make_data_uri(175, 60)
    with patch.object(transport_mod, "resize", lambda uri, width: RasterizedImage(logo, width, 60)):
        resp = client.post("/api/documents/deposit-letter/pdf", json={"deal": sample_deal_data})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert 'filename="deposit-letter.pdf"' in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF-")


def test_document_pdf_unknown_template(client, sample_deal_data):
    resp = client.post("/api/documents/nope/pdf", json={"deal": sample_deal_data})
    assert resp.status_code == 404

"""FastAPI backend for the Deal Documents tool.

Provides endpoints for template and mail client listing, the mail client
preference, deal CRUD, and the document operations: on-screen render,
email payload preview, PDF export and the full Copy & Email pipeline.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from shared.clipboard import ClipboardBackend, get_clipboard
from shared.copy_and_email import send_document
from shared.document_pdf import build_document_pdf
from shared.document_template import DocumentTemplate, get_template, list_templates
from shared.email_payload import build
from shared.mail_clients import (
    compose_link,
    get_mail_client,
    get_mail_client_preference,
    list_mail_clients,
    reset_mail_client_preference,
    set_mail_client_preference,
)
from shared.presentation import render_screen_html
from shared.settings import get_settings
from shared.transport import normalize

from app import templates as _templates  # noqa: F401  (registers the templates)
from app.deal_record import DealRecord
from app.deals import delete_deal, list_deals, load_deal, save_deal

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Deal Documents API")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class MailClientRequest(BaseModel):
    client_id: str


class DocumentRequest(BaseModel):
    """Either an inline deal or the id of a saved one."""

    deal_id: str = ""
    deal: DealRecord | None = None
    client_id: str | None = None


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_clipboard_backend() -> ClipboardBackend:
    return get_clipboard()


def get_link_opener() -> Callable[[str], bool]:
    return webbrowser.open_new_tab


def _resolve_template(template_id: str) -> DocumentTemplate:
    template = get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template '{template_id}' not found")
    return template


def _resolve_deal(req: DocumentRequest) -> DealRecord:
    if req.deal is not None:
        return req.deal
    if not req.deal_id:
        raise HTTPException(status_code=400, detail="Provide either 'deal' or 'deal_id'")
    deal = load_deal(req.deal_id)
    if deal is None:
        raise HTTPException(status_code=404, detail="Deal not found")
    return deal


# ---------------------------------------------------------------------------
# Template & mail client endpoints
# ---------------------------------------------------------------------------

@app.get("/api/templates")
def api_list_templates() -> list[dict]:
    """List all document templates."""
    return [t.to_dict() for t in list_templates()]


@app.get("/api/mail-clients")
def api_list_mail_clients() -> dict:
    """List supported mail clients and the current preference."""
    preference = get_mail_client_preference()
    return {
        "clients": [c.to_dict() for c in list_mail_clients()],
        "preference": preference,
        "effective": get_mail_client(preference).id,
    }


@app.put("/api/mail-client")
def api_set_mail_client(req: MailClientRequest) -> dict:
    """Persist the mail client preference."""
    try:
        set_mail_client_preference(req.client_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"preference": req.client_id}


@app.delete("/api/mail-client")
def api_reset_mail_client() -> dict:
    """Forget the stored preference; dispatch goes back to the default client."""
    reset_mail_client_preference()
    return {"preference": get_mail_client_preference()}


# ---------------------------------------------------------------------------
# Deal endpoints
# ---------------------------------------------------------------------------

@app.get("/api/deals")
def api_list_deals() -> list[dict]:
    return list_deals()


@app.get("/api/deals/{deal_id}")
def api_get_deal(deal_id: str) -> dict:
    deal = load_deal(deal_id)
    if deal is None:
        raise HTTPException(status_code=404, detail="Deal not found")
    return deal.model_dump()


@app.post("/api/deals")
def api_save_deal(deal: DealRecord) -> dict:
    """Save or update a deal. An id is assigned when missing."""
    try:
        saved = save_deal(deal)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return saved.model_dump()


@app.delete("/api/deals/{deal_id}")
def api_delete_deal(deal_id: str) -> dict:
    if delete_deal(deal_id):
        return {"status": "deleted", "id": deal_id}
    raise HTTPException(status_code=404, detail="Deal not found")


# ---------------------------------------------------------------------------
# Document endpoints
# ---------------------------------------------------------------------------

@app.post("/api/documents/{template_id}/render")
def api_render_document(template_id: str, req: DocumentRequest) -> dict:
    """Render a document for on-screen display."""
    template = _resolve_template(template_id)
    deal = _resolve_deal(req)
    tree = template.render(deal)
    return {
        "template_id": template.template_id,
        "title": template.title,
        "subject": template.subject(deal),
        "recipient": template.recipient(deal),
        "html": render_screen_html(tree),
        "tree": tree.to_dict(),
    }


@app.post("/api/documents/{template_id}/payload")
def api_document_payload(template_id: str, req: DocumentRequest) -> dict:
    """Return the email payload and composer link without touching the clipboard."""
    template = _resolve_template(template_id)
    deal = _resolve_deal(req)
    subject = template.subject(deal)
    recipient = template.recipient(deal)
    payload = build(normalize(template.render(deal)))
    return {
        "subject": subject,
        "recipient": recipient,
        "link": compose_link(recipient, subject, req.client_id),
        **payload.to_dict(),
    }


@app.post("/api/documents/{template_id}/copy-and-email")
def api_copy_and_email(
    template_id: str,
    req: DocumentRequest,
    clipboard: ClipboardBackend = Depends(get_clipboard_backend),
    opener: Callable[[str], bool] = Depends(get_link_opener),
) -> dict:
    """Run the full pipeline on the server host.

    The clipboard and the composer tab belong to the machine running the
    API: with the default ``memory`` backend the entry lands in this
    process only, and the link opener is the server's ``webbrowser``.
    Remote clients should call ``/payload`` and do the clipboard write
    and ``window.open`` in the browser, as the dashboard button does.
    Failures are reported in the outcome, not as HTTP errors.
    """
    template = _resolve_template(template_id)
    deal = _resolve_deal(req)
    outcome = send_document(
        template,
        deal,
        clipboard=clipboard,
        opener=opener,
        client_id=req.client_id,
    )
    logger.info("Copy & Email %s for deal %s: %s", template_id, deal.id or "<inline>", outcome.status)
    return outcome.to_dict()


@app.post("/api/documents/{template_id}/pdf")
def api_document_pdf(template_id: str, req: DocumentRequest) -> Response:
    """Export the email-safe document as a PDF file."""
    template = _resolve_template(template_id)
    deal = _resolve_deal(req)
    pdf_bytes = build_document_pdf(template.render(deal), title=template.subject(deal))
    filename = f"{template.template_id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

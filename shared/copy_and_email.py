"""Copy-and-email: the one user action every deal document exposes.

The steps run strictly in order and each one gates the next:

1. normalize the on-screen tree into an email-safe copy,
2. build the HTML + plain-text payload,
3. commit it to the clipboard as one entry,
4. open the preferred mail client's composer.

If the clipboard write fails the composer is never opened. If the
composer cannot be opened the clipboard still holds the document, so the
user is told to open their email manually. Exactly one notification is
produced per invocation.

Usage::

    from shared.copy_and_email import send_document

    outcome = send_document(template, deal)
    if not outcome.ok:
        show(outcome.notification.title)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from shared.clipboard import ClipboardBackend, ClipboardError, ClipboardWriter
from shared.document_template import DocumentTemplate
from shared.email_payload import EmailPayload, build
from shared.mail_clients import DispatchError, dispatch
from shared.presentation import Block
from shared.transport import Resizer, normalize

logger = logging.getLogger(__name__)

STATUS_SENT = "sent"
STATUS_COPIED = "copied"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    level: str = "success"  # success | warning | error

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "level": self.level}


@dataclass(frozen=True)
class CopyEmailOutcome:
    """Result of one copy-and-email invocation."""

    status: str
    notification: Notification
    link: str = ""
    payload: EmailPayload | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SENT

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "notification": self.notification.to_dict(),
            "link": self.link,
            "payload": self.payload.to_dict() if self.payload else None,
        }


def copy_and_email(
    tree: Block,
    recipient: str,
    subject: str,
    *,
    clipboard: ClipboardBackend | None = None,
    opener: Callable[[str], bool] | None = None,
    rasterizer: Resizer | None = None,
    target_width: int | None = None,
    client_id: str | None = None,
) -> CopyEmailOutcome:
    """Put *tree* on the clipboard and open an email composer for it.

    ``StyleMappingError`` from the normalizer is not caught: a document
    with unmapped blocks is a programming error, not a user-facing one.
    """
    normalized = normalize(tree, target_width=target_width, resizer=rasterizer)
    payload = build(normalized)

    try:
        ClipboardWriter(clipboard).write(payload)
    except ClipboardError:
        return CopyEmailOutcome(
            STATUS_FAILED,
            Notification("Could not copy - try again", "The document was not copied.", "error"),
            payload=payload,
        )

    try:
        link = dispatch(recipient, subject, client_id=client_id, opener=opener)
    except DispatchError as exc:
        logger.warning("Composer did not open: %s", exc)
        return CopyEmailOutcome(
            STATUS_COPIED,
            Notification(
                "Pop-ups blocked - open your email manually",
                "The document is on your clipboard. Paste it into a new email.",
                "warning",
            ),
            link=exc.link,
            payload=payload,
        )

    return CopyEmailOutcome(
        STATUS_SENT,
        Notification("Copied to clipboard", "Paste the document into the email that just opened."),
        link=link,
        payload=payload,
    )


def send_document(template: DocumentTemplate, deal: Any, **kwargs: Any) -> CopyEmailOutcome:
    """Render *template* for *deal* and run ``copy_and_email`` on it."""
    return copy_and_email(
        template.render(deal),
        template.recipient(deal),
        template.subject(deal),
        **kwargs,
    )

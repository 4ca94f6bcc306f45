"""Mail client registry and dispatcher.

The registry is static configuration: each supported mail application
with a deep-link template. The user's choice is one client id persisted
in the JSON config store (``data/config/deal-documents.json``), read on
every dispatch so a change is visible immediately.

Usage::

    from shared.mail_clients import dispatch, set_mail_client_preference

    set_mail_client_preference("gmail")
    link = dispatch("buyer@example.com", "Settlement Statement")
"""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import asdict, dataclass
from typing import Callable
from urllib.parse import quote

from shared.config_store import delete_config_value, get_config_value, set_config_value

logger = logging.getLogger(__name__)

PREFERENCES_TOOL = "deal-documents"
PREFERENCE_KEY = "mail_client"


class DispatchError(Exception):
    """The composed deep link could not be opened.

    The payload is already on the clipboard; ``link`` lets the user open
    the composer manually.
    """

    def __init__(self, message: str, link: str = "") -> None:
        super().__init__(message)
        self.link = link


@dataclass(frozen=True)
class MailClient:
    id: str
    label: str
    url_template: str  # placeholders: {recipient}, {subject} (already URL-escaped)

    def compose(self, recipient: str, subject: str) -> str:
        return self.url_template.format(
            recipient=quote(recipient, safe="@,"),
            subject=quote(subject, safe=""),
        )

    def to_dict(self) -> dict:
        return asdict(self)


MAIL_CLIENTS: tuple[MailClient, ...] = (
    MailClient("gmail", "Gmail", "https://mail.google.com/mail/?view=cm&to={recipient}&su={subject}"),
    MailClient("outlook", "Outlook", "https://outlook.live.com/mail/0/deeplink/compose?to={recipient}&subject={subject}"),
    MailClient("yahoo", "Yahoo Mail", "https://compose.mail.yahoo.com/?to={recipient}&subject={subject}"),
    MailClient("default", "System Default", "mailto:{recipient}?subject={subject}"),
)

DEFAULT_MAIL_CLIENT_ID = "default"

_BY_ID = {c.id: c for c in MAIL_CLIENTS}


def list_mail_clients() -> list[MailClient]:
    return list(MAIL_CLIENTS)


def get_mail_client(client_id: str | None) -> MailClient:
    """Look up a client. Unknown or stale ids resolve to the default client."""
    client = _BY_ID.get(client_id or "")
    if client is None:
        if client_id:
            logger.warning("Unknown mail client %r; using %s", client_id, DEFAULT_MAIL_CLIENT_ID)
        client = _BY_ID[DEFAULT_MAIL_CLIENT_ID]
    return client


# ---------------------------------------------------------------------------
# Preference
# ---------------------------------------------------------------------------

def get_mail_client_preference() -> str:
    """Return the stored client id, or the default when none is stored.

    The value is returned as stored, even if it is no longer registered;
    ``get_mail_client`` handles that case.
    """
    value = get_config_value(PREFERENCES_TOOL, PREFERENCE_KEY, None)
    return value if isinstance(value, str) and value else DEFAULT_MAIL_CLIENT_ID


def set_mail_client_preference(client_id: str) -> None:
    """Persist the user's choice. Raises ValueError for ids not in the registry."""
    if client_id not in _BY_ID:
        raise ValueError(f"Unknown mail client: {client_id!r}")
    set_config_value(PREFERENCES_TOOL, PREFERENCE_KEY, client_id)
    logger.info("Mail client preference set to %s", client_id)


def reset_mail_client_preference() -> bool:
    """Remove the stored choice. Returns True if one was stored."""
    removed = delete_config_value(PREFERENCES_TOOL, PREFERENCE_KEY)
    if removed:
        logger.info("Mail client preference cleared")
    return removed


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def compose_link(recipient: str, subject: str, client_id: str | None = None) -> str:
    """Build the deep link for *client_id* (or the stored preference).

    *recipient* may be empty (the user fills it in); *subject* may not.
    """
    if not subject or not subject.strip():
        raise ValueError("subject must be non-empty")
    client = get_mail_client(client_id if client_id is not None else get_mail_client_preference())
    return client.compose(recipient.strip(), subject)


def dispatch(
    recipient: str,
    subject: str,
    *,
    client_id: str | None = None,
    opener: Callable[[str], bool] | None = None,
) -> str:
    """Open the composer for the preferred client in a new browser tab.

    Returns the link that was opened. Raises ``DispatchError`` (carrying
    the link) when the opener reports failure, e.g. no browser available.
    """
    link = compose_link(recipient, subject, client_id)
    opener = opener or webbrowser.open_new_tab
    try:
        opened = opener(link)
    except (webbrowser.Error, OSError) as exc:
        raise DispatchError(f"Could not open email client: {exc}", link) from exc
    if opened is False:
        raise DispatchError("Could not open email client", link)
    logger.info("Opened email composer for %r", subject)
    return link

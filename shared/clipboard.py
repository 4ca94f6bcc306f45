"""Multi-format clipboard writer for email payloads.

A payload is committed as ONE clipboard entry carrying both
``text/html`` and ``text/plain``: rich-text paste targets get the HTML,
plain-text targets get the text. Never two sequential writes.

Backends:

- ``MemoryClipboard``: process-wide entry, last writer wins. Used by the
  API service (the browser does the real clipboard write) and by tests.
- ``WindowsClipboard``: pywin32, ``HTML Format`` + ``CF_UNICODETEXT`` set
  inside a single open/empty/set/close transaction.
- ``UnsupportedClipboard``: stands in for ``system`` on platforms with
  no multi-format support; every write raises ``ClipboardError``.

Any failure surfaces as ``ClipboardError``. There is no retry.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import Protocol

from shared.email_payload import EmailPayload
from shared.settings import get_settings

logger = logging.getLogger(__name__)

HTML_MIME = "text/html"
TEXT_MIME = "text/plain"


class ClipboardError(Exception):
    """The clipboard entry could not be written."""


class ClipboardBackend(Protocol):
    def write_entry(self, entry: dict[str, str]) -> None: ...


def build_cf_html(fragment: str) -> str:
    """Build a Windows ``HTML Format`` string with correct byte offsets."""
    start_marker = "<!--StartFragment-->"
    end_marker = "<!--EndFragment-->"
    header_template = (
        "Version:0.9\r\n"
        "StartHTML:{:08d}\r\n"
        "EndHTML:{:08d}\r\n"
        "StartFragment:{:08d}\r\n"
        "EndFragment:{:08d}\r\n"
    )
    prefix = "<html><body>" + start_marker
    suffix = end_marker + "</body></html>"

    header_len = len(header_template.format(0, 0, 0, 0).encode("utf-8"))
    start_html = header_len
    start_fragment = start_html + len(prefix.encode("utf-8"))
    end_fragment = start_fragment + len(fragment.encode("utf-8"))
    end_html = end_fragment + len(suffix.encode("utf-8"))

    header = header_template.format(start_html, end_html, start_fragment, end_fragment)
    return header + prefix + fragment + suffix


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryClipboard:
    """In-process clipboard. One entry; each write replaces it whole."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entry: dict[str, str] = {}

    def write_entry(self, entry: dict[str, str]) -> None:
        with self._lock:
            self._entry = dict(entry)

    def read(self, mime: str = TEXT_MIME) -> str | None:
        with self._lock:
            return self._entry.get(mime)

    def formats(self) -> list[str]:
        with self._lock:
            return list(self._entry)

    def clear(self) -> None:
        with self._lock:
            self._entry = {}


class UnsupportedClipboard:
    def __init__(self, reason: str) -> None:
        self.reason = reason

    def write_entry(self, entry: dict[str, str]) -> None:
        raise ClipboardError(self.reason)


class WindowsClipboard:
    """Win32 clipboard via pywin32."""

    def write_entry(self, entry: dict[str, str]) -> None:
        import pywintypes
        import win32clipboard
        import win32con

        try:
            cf_html = win32clipboard.RegisterClipboardFormat("HTML Format")
            win32clipboard.OpenClipboard()
        except pywintypes.error as exc:
            raise ClipboardError(f"Clipboard is not available: {exc.strerror}") from exc
        try:
            win32clipboard.EmptyClipboard()
            if HTML_MIME in entry:
                # Custom formats take bytes
                win32clipboard.SetClipboardData(
                    cf_html, build_cf_html(entry[HTML_MIME]).encode("utf-8")
                )
            if TEXT_MIME in entry:
                win32clipboard.SetClipboardText(entry[TEXT_MIME], win32con.CF_UNICODETEXT)
        except pywintypes.error as exc:
            # Leave nothing half-written behind
            win32clipboard.EmptyClipboard()
            raise ClipboardError(f"Clipboard rejected the data: {exc.strerror}") from exc
        finally:
            win32clipboard.CloseClipboard()


_memory_clipboard = MemoryClipboard()


def get_clipboard(backend: str | None = None) -> ClipboardBackend:
    """Return the configured clipboard backend (``memory`` or ``system``)."""
    name = (backend or get_settings().clipboard_backend).lower()
    if name == "memory":
        return _memory_clipboard
    if name == "system":
        if sys.platform == "win32":
            return WindowsClipboard()
        return UnsupportedClipboard(
            f"Rich-text clipboard is not supported on {sys.platform}; use the browser view"
        )
    raise ValueError(f"Unknown clipboard backend: {name!r}")


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

class ClipboardWriter:
    """Commit an ``EmailPayload`` to a backend as one multi-format entry."""

    def __init__(self, backend: ClipboardBackend | None = None) -> None:
        self.backend = backend if backend is not None else get_clipboard()

    def write(self, payload: EmailPayload) -> None:
        entry = {HTML_MIME: payload.html, TEXT_MIME: payload.plain_text}
        try:
            self.backend.write_entry(entry)
        except ClipboardError as exc:
            logger.error("Clipboard write failed: %s", exc)
            raise
        except OSError as exc:
            logger.error("Clipboard write failed: %s", exc)
            raise ClipboardError(str(exc)) from exc
        logger.debug("Clipboard entry written (%d chars html)", len(payload.html))

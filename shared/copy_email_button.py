"""Browser-side "Copy & Email" button for deal document dashboards.

Streamlit runs on the server, so the real clipboard write has to happen
in the user's browser. This component embeds the already-normalized
payload and, on click, writes it as ONE ``ClipboardItem`` holding both
``text/html`` and ``text/plain``. Only after that write resolves does it
open the mail client link in a new tab; a failed write never opens the
composer.

Usage::

    from shared.copy_email_button import render_copy_email_button

    outcome = copy_and_email(tree, recipient, subject, opener=lambda _: True)
    render_copy_email_button(outcome.payload, outcome.link)
"""

from __future__ import annotations

import html as html_mod
import json

import streamlit.components.v1 as components

from shared.email_payload import EmailPayload

COPY_FAILED_MESSAGE = "Could not copy - try again"
POPUP_BLOCKED_MESSAGE = "Pop-ups blocked - open your email manually"
SUCCESS_MESSAGE = "Copied! Paste into the email that just opened."


def build_button_html(payload: EmailPayload, link: str, label: str = "Copy & Email") -> str:
    """Return the self-contained HTML/JS snippet for the button."""
    # json.dumps output is safe inside <script> once "</" is broken up
    data = json.dumps(
        {"html": payload.html, "text": payload.plain_text, "link": link}
    ).replace("</", "<\\/")
    return f"""
    <div style="display:flex; align-items:center; gap:10px; font-family:Inter,sans-serif;">
        <button id="ddCopyBtn" style="
            background:#f43f5e; color:white; border:none; border-radius:6px;
            padding:8px 16px; font-size:13px; font-weight:600; cursor:pointer;
            font-family:Inter,sans-serif;
        ">&#9993; {html_mod.escape(label)}</button>
        <span id="ddCopyStatus" style="font-size:12px; color:#666;"></span>
        <a id="ddManualLink" href="#" target="_blank" rel="noopener"
           style="display:none; font-size:12px;">Open email</a>
    </div>
    <script>
    (function() {{
        var DATA = {data};
        var btn = document.getElementById('ddCopyBtn');
        var status = document.getElementById('ddCopyStatus');
        var manual = document.getElementById('ddManualLink');
        btn.addEventListener('click', function() {{
            btn.disabled = true;
            status.textContent = 'Copying...';
            manual.style.display = 'none';
            var item;
            try {{
                item = new ClipboardItem({{
                    'text/html': new Blob([DATA.html], {{type: 'text/html'}}),
                    'text/plain': new Blob([DATA.text], {{type: 'text/plain'}})
                }});
            }} catch (err) {{
                status.textContent = {json.dumps(COPY_FAILED_MESSAGE)};
                btn.disabled = false;
                return;
            }}
            navigator.clipboard.write([item]).then(function() {{
                var win = window.open(DATA.link, '_blank');
                if (!win) {{
                    status.textContent = {json.dumps(POPUP_BLOCKED_MESSAGE)};
                    manual.href = DATA.link;
                    manual.style.display = 'inline';
                }} else {{
                    status.textContent = {json.dumps(SUCCESS_MESSAGE)};
                }}
                btn.disabled = false;
            }}).catch(function() {{
                status.textContent = {json.dumps(COPY_FAILED_MESSAGE)};
                btn.disabled = false;
            }});
        }});
    }})();
    </script>
    """


def render_copy_email_button(payload: EmailPayload, link: str, label: str = "Copy & Email") -> None:
    components.html(build_button_html(payload, link, label), height=50)

"""Deal Documents — Streamlit dashboard.

Pick a deal and a document, preview it, and send it with one click:
"Copy & Email" puts the formatted document on the clipboard and opens
the preferred mail client with the recipient and subject filled in.
Works entirely offline without the API server.
"""

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import streamlit as st

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))
from shared.copy_email_button import render_copy_email_button
from shared.document_pdf import build_document_pdf
from shared.document_template import get_template, list_templates
from shared.email_payload import build, wrap_html_document
from shared.mail_clients import (
    compose_link,
    get_mail_client,
    get_mail_client_preference,
    list_mail_clients,
    set_mail_client_preference,
)
from shared.presentation import render_screen_html
from shared.theme import render_nav_bar, render_theme_css
from shared.transport import normalize

from app import templates as _templates  # noqa: F401  (registers the templates)
from app.deal_record import DealRecord
from app.deals import list_deals, load_deal, save_deal

# -- Page config --------------------------------------------------------------

st.set_page_config(
    page_title="Deal Documents",
    layout="wide",
    initial_sidebar_state="expanded",
)

render_theme_css()
render_nav_bar("Deal Documents")


def _on_mail_client_change() -> None:
    set_mail_client_preference(st.session_state["inp_mail_client"])


# -- Sidebar -------------------------------------------------------------------

with st.sidebar:
    st.markdown("#### Deals")
    saved_deals = list_deals()
    labels_map = {
        d["id"]: f"{d['street_address'] or 'No address'} -- {d['name'] or 'Unnamed'}"
        for d in saved_deals
    }
    selected_deal_id = st.selectbox(
        "Deal",
        options=[""] + list(labels_map),
        format_func=lambda x: labels_map.get(x, "Select..."),
        label_visibility="collapsed",
    )

    with st.expander("New deal"):
        with st.form("new_deal", clear_on_submit=True):
            new_name = st.text_input("Seller name(s)")
            new_email = st.text_input("Seller email")
            new_street = st.text_input("Street address")
            new_city = st.text_input("City")
            new_state = st.text_input("State")
            new_zip = st.text_input("Zip")
            new_agent = st.text_input("Buyer's agent")
            new_agent_email = st.text_input("Buyer's agent email")
            new_closing = st.text_input("Closing date")
            if st.form_submit_button("Save deal", type="primary"):
                saved = save_deal(
                    DealRecord(
                        name=new_name,
                        seller_email=new_email,
                        street_address=new_street,
                        city=new_city,
                        state=new_state,
                        zip=new_zip,
                        agent_name=new_agent,
                        agent_email=new_agent_email,
                        closing_date=new_closing,
                    )
                )
                st.success(f"Saved deal {saved.id}")
                st.rerun()

    st.markdown("#### Email")
    clients = list_mail_clients()
    client_ids = [c.id for c in clients]
    current = get_mail_client(get_mail_client_preference()).id
    st.selectbox(
        "Open emails in",
        options=client_ids,
        index=client_ids.index(current),
        format_func=lambda cid: get_mail_client(cid).label,
        key="inp_mail_client",
        on_change=_on_mail_client_change,
    )


# -- Main ----------------------------------------------------------------------

deal = load_deal(selected_deal_id) if selected_deal_id else None
if deal is None:
    st.info("Select a deal in the sidebar, or create one, to prepare documents.")
    st.stop()

templates = {t.template_id: t for t in list_templates()}
template_id = st.radio(
    "Document",
    options=list(templates),
    format_func=lambda tid: templates[tid].title,
    horizontal=True,
)
template = get_template(template_id)

tree = template.render(deal)
subject = template.subject(deal)
recipient = template.recipient(deal)

_preview_col, _send_col = st.columns([3, 1], gap="large")

with _preview_col:
    st.markdown(
        f'<div class="dd-preview">{render_screen_html(tree)}</div>',
        unsafe_allow_html=True,
    )

with _send_col:
    st.markdown(f"**To:** {recipient or '(you choose)'}")
    st.markdown(f"**Subject:** {subject}")

    payload = build(normalize(tree))
    link = compose_link(recipient, subject)
    render_copy_email_button(payload, link)

    st.download_button(
        "Download email HTML",
        data=wrap_html_document(payload.html, subject),
        file_name=f"{template.template_id}.html",
        mime="text/html",
        use_container_width=True,
    )
    st.download_button(
        "Download PDF",
        data=build_document_pdf(tree, title=subject),
        file_name=f"{template.template_id}.pdf",
        mime="application/pdf",
        use_container_width=True,
    )
    with st.expander("Plain text"):
        st.text(payload.plain_text)

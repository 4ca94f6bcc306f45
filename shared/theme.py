"""Screen stylesheet and navigation bar for the deal documents dashboard.

The ``dd-*`` classes style the on-screen preview produced by
``shared.presentation.render_screen_html``. None of this reaches an email:
the transport pipeline replaces classes with inline styles.
"""

from __future__ import annotations

import html as html_mod

import streamlit as st

# ---------------------------------------------------------------------------
# Shared CSS
# ---------------------------------------------------------------------------

_BASE_CSS = """\
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700;800&display=swap');

/* Hide Streamlit chrome */
#MainMenu, footer,
div[data-testid="stToolbar"] { display: none !important; }

.stApp {
    font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
}

/* Navigation bar */
.nav-bar {
    display: flex;
    align-items: center;
    padding: 10px 4px;
    margin: -1rem 0 1.2rem 0;
    border-bottom: 1px solid rgba(0,0,0,0.07);
}
.nav-title {
    flex: 1;
    text-align: center;
    font-size: 1.15rem;
    font-weight: 700;
    color: #111827;
    letter-spacing: -0.02em;
}
.nav-brokerage {
    font-weight: 400;
    color: #6b7280;
    font-size: 0.85rem;
    margin-left: 8px;
}

/* Document preview */
.dd-preview {
    max-width: 760px;
    margin: 0 auto;
}
.dd-heading { margin: 24px 0 12px 0; font-weight: 700; color: #111827; }
.dd-paragraph { margin: 16px 0; line-height: 1.6; color: #374151; }
.dd-table { width: 100%; border-collapse: collapse; margin: 16px 0; }
.dd-cell { padding: 8px 4px; border-bottom: 1px solid #e5e7eb; vertical-align: top; }
.dd-image { display: block; height: auto; }

.dd-role-header { display: flex; align-items: center; gap: 24px; margin-bottom: 24px; }
.dd-role-logo { width: 175px; flex-shrink: 0; }
.dd-role-title { margin: 0; font-size: 30px; line-height: 1.2; }
.dd-role-subtitle { margin: 0; font-size: 16px; color: #6b7280; }
.dd-role-card {
    padding: 32px;
    background: #fff;
    border: 1px solid #e5e7eb;
    border-radius: 8px;
    box-shadow: 0 1px 4px rgba(0,0,0,0.04);
}
.dd-role-callout { padding: 16px; background: #f9fafb; border-radius: 8px; }
.dd-role-compact, .dd-role-signature { margin: 0; line-height: 1.4; }
.dd-role-muted { font-size: 14px; color: #6b7280; }
.dd-role-label { font-weight: 600; }
.dd-role-value { text-align: right; }
.dd-role-metric-value { font-size: 28px; font-weight: 700; text-align: center; }
.dd-role-metric-label { font-size: 14px; color: #6b7280; text-align: center; }

/* Interactive-only controls, never part of the email */
.dd-no-email {
    display: inline-block;
    margin-top: 16px;
    padding: 8px 16px;
    border: none;
    border-radius: 6px;
    background: #f43f5e;
    color: #fff;
    font-weight: 600;
}
"""


def render_theme_css(extra_css: str = "") -> None:
    """Inject the shared stylesheet. Pass *extra_css* for page-specific rules."""
    css = _BASE_CSS
    if extra_css:
        css += "\n" + extra_css
    st.markdown(f"<style>\n{css}\n</style>", unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Navigation bar
# ---------------------------------------------------------------------------

def render_nav_bar(tool_title: str, brokerage_name: str = "") -> None:
    """Render the navigation bar with a centered title."""
    brokerage = (
        f'<span class="nav-brokerage">&mdash; {html_mod.escape(brokerage_name)}</span>'
        if brokerage_name
        else ""
    )
    st.markdown(
        f'<div class="nav-bar"><div class="nav-title">'
        f"{html_mod.escape(tool_title)}{brokerage}</div></div>",
        unsafe_allow_html=True,
    )

"""Deal record: the flat, read-only input to every document template.

Dates are stored as display strings that have already been computed
(closing date plus the contract's day counts, etc.). Templates only
print them.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

_NAME_SPLIT = re.compile(r"\s*[&,]\s*")


def _first_word(name: str) -> str:
    parts = name.split()
    return parts[0] if parts else ""


class DealRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""

    # Seller / owner
    name: str = ""
    seller_email: str = ""
    seller_phone: str = ""

    # Property
    street_address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    # Buyer's agent
    agent_name: str = ""
    agent_email: str = ""
    agent_phone: str = ""

    # Listing agent (the sender)
    listing_agent_name: str = ""
    listing_agent_phone: str = ""
    listing_agent_email: str = ""

    # Lender and title company
    lending_officer: str = ""
    lending_officer_email: str = ""
    title_company_name: str = ""
    title_processor: str = ""
    title_phone: str = ""
    title_email: str = ""

    # Money
    offer_price: float | None = None
    deposit: float | None = None
    deposit_collection: str = ""

    # Derived dates
    closing_date: str = ""
    possession: str = ""
    preapproval_due: str = ""
    loan_commitment_due: str = ""
    inspection_period_end: str = ""
    remedy_period_end: str = ""
    title_commitment_due: str = ""
    earnest_money_due: str = ""
    final_walk_through: str = ""

    # Ad performance
    ad_reach: int = 0
    ad_impressions: int = 0
    ad_clicks: int = 0
    ad_leads: int = 0
    ad_spend: float = 0.0

    @property
    def full_address(self) -> str:
        """``123 Main St, Springfield, IL 62701`` with empty parts skipped."""
        locality = " ".join(p for p in (self.state, self.zip) if p)
        return ", ".join(p for p in (self.street_address, self.city, locality) if p)

    @property
    def seller_first_names(self) -> str:
        """First names of every seller joined with ``&``, e.g. ``Pat & Jordan``."""
        names = [_first_word(n) for n in _NAME_SPLIT.split(self.name or "")]
        names = [n for n in names if n]
        return " & ".join(names) or "there"

    @property
    def buyer_agent_first_name(self) -> str:
        return _first_word(self.agent_name) or "there"

    @property
    def listing_agent_first_name(self) -> str:
        return _first_word(self.listing_agent_name)


def format_currency(amount: float | None) -> str:
    """``$12,500`` for whole dollars, ``$12,500.50`` otherwise; blank for None."""
    if amount is None:
        return ""
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"

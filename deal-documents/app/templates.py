"""Deal document templates.

Each template turns a ``DealRecord`` into a presentation tree with the
same outer shape:

- navigation hints (on-screen only)
- header: brokerage logo, title and subtitle
- card: greeting, body sections, sign-off and listing agent signature
- the "Copy & Email" button (on-screen only)

Only the card contents, the subject line and the recipient differ from
one document to the next. Importing this module registers every
template in ``shared.document_template``.
"""

from __future__ import annotations

from shared.document_template import DocumentTemplate, register_template
from shared.presentation import (
    Block,
    button,
    cell,
    container,
    heading,
    image,
    key_value_table,
    paragraph,
    row,
    table,
)
from shared.settings import get_settings

from app.deal_record import DealRecord, format_currency

COPY_AND_EMAIL_ACTION = "copy-and-email"


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _or_tbd(value: str) -> str:
    return value or "TBD"


def _navigation() -> Block:
    return container(
        button("My Properties", action="navigate:properties", role="navigation"),
        button("Property Info", action="navigate:property", role="navigation"),
        role="navigation",
        transportable=False,
    )


def _header(title: str, subtitle: str) -> Block:
    return container(
        image(get_settings().logo_uri, alt="Brokerage logo", role="logo"),
        container(
            heading(title, level=1, role="title"),
            paragraph(subtitle, role="subtitle"),
        ),
        role="header",
    )


def _signature(deal: DealRecord) -> Block:
    lines = [
        paragraph("Thanks"),
        paragraph(deal.listing_agent_first_name),
    ]
    contact = [paragraph(deal.listing_agent_name, role="signature")]
    if deal.listing_agent_phone:
        contact.append(paragraph(f"cell: {deal.listing_agent_phone}", role="signature"))
    if deal.listing_agent_email:
        contact.append(paragraph(f"email: {deal.listing_agent_email}", role="signature"))
    return container(*lines, container(*contact, role="section"))


def _section(title: str, *body: Block, level: int = 2) -> Block:
    return container(heading(title, level=level), *body, role="section")


def _document(title: str, subtitle: str, *body: Block) -> Block:
    return container(
        _navigation(),
        _header(title, subtitle),
        container(*body, role="card"),
        button("Copy & Email", action=COPY_AND_EMAIL_ACTION),
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

class SettlementStatementTemplate(DocumentTemplate):
    template_id = "settlement-statement"
    title = "Settlement Statement"
    description = "Walks the seller through the common questions on their settlement statement."

    FAQ = [
        (
            "Tax Proration",
            "Property taxes here are billed six months in arrears, so the most recent bill you "
            "paid covered an earlier period. At closing your taxes are brought current through "
            "the day of closing, which is usually the largest adjustment on the statement.",
        ),
        (
            "Closing Protection Coverage",
            "Closing protection is an optional state-backed fund that insures your payoff in the "
            "unlikely event the title company mishandles it. The fee is small and paying it is "
            "your choice. Either way, confirm with your lender a few business days after "
            "closing that the loan shows as paid off.",
        ),
        (
            "Escrow Funds",
            "If your property taxes are escrowed, your lender refunds the remaining balance after "
            "it receives the payoff. Lenders have 30 days to send it. The title company will ask "
            "for a forwarding address so the check reaches you.",
        ),
        (
            "Utilities",
            "Utilities are not handled at closing. Schedule final readings for the day of "
            "possession and have the accounts taken out of your name as of that date.",
        ),
    ]

    def render(self, deal: DealRecord) -> Block:
        sections = [_section(q, paragraph(a), level=3) for q, a in self.FAQ]
        return _document(
            self.title,
            deal.full_address,
            paragraph(f"Hi {deal.seller_first_names},"),
            paragraph(
                f"Attached is the settlement statement for {deal.street_address}. "
                "Below are answers to the questions we are asked most often."
            ),
            *sections,
            paragraph("Let me know if you have any questions."),
            _signature(deal),
        )

    def subject(self, deal: DealRecord) -> str:
        return f"Settlement Statement for {deal.street_address}"

    def recipient(self, deal: DealRecord) -> str:
        return deal.seller_email


class AgentLetterTemplate(DocumentTemplate):
    template_id = "agent-letter"
    title = "Transaction Summary"
    description = "Introduces the buyer's agent to the title company and the contract dates."

    def dates(self, deal: DealRecord) -> list[tuple[str, str]]:
        return [
            ("Closing date:", deal.closing_date),
            ("Possession Date:", deal.possession),
            ("Pre-approval Due:", deal.preapproval_due),
            ("Loan Commitment due:", deal.loan_commitment_due),
            ("Home Inspection period ends:", deal.inspection_period_end),
            ("Buyers Request to Remedy period ends:", deal.remedy_period_end),
            ("Title Commitment due:", deal.title_commitment_due),
            ("Earnest Money due:", deal.earnest_money_due),
            ("Final walk-through:", deal.final_walk_through),
        ]

    def render(self, deal: DealRecord) -> Block:
        title_company = container(
            heading(deal.title_company_name or "Title Company", level=3, role="compact"),
            paragraph(deal.title_processor, role="compact"),
            paragraph("Processor", role="muted"),
            paragraph(f"Phone: {deal.title_phone}", role="compact"),
            paragraph(deal.title_email, role="compact"),
            role="callout",
        )
        return _document(
            self.title,
            deal.full_address,
            paragraph(f"Hi {deal.buyer_agent_first_name},"),
            paragraph(
                f"We are in contract on {deal.full_address}. I look forward to working with you "
                "and your team to close this one. Below is the title company and the contract "
                "dates I have."
            ),
            title_company,
            _section("Important Dates", key_value_table(self.dates(deal), role="dates")),
            _signature(deal),
        )

    def subject(self, deal: DealRecord) -> str:
        return f'Transaction Summary for "{deal.street_address}"'

    def recipient(self, deal: DealRecord) -> str:
        return deal.agent_email


class ImportantDatesTemplate(DocumentTemplate):
    template_id = "important-dates"
    title = "Important Dates"
    description = "The seller's closing timeline."

    def render(self, deal: DealRecord) -> Block:
        pairs = [
            ("Closing Date:", _or_tbd(deal.closing_date)),
            ("Possession given to buyer:", _or_tbd(deal.possession or deal.closing_date)),
            ("Home Inspection to be completed by:", _or_tbd(deal.inspection_period_end)),
            ("Buyers Request to Remedy to be completed by:", _or_tbd(deal.remedy_period_end)),
            ("Final walk-through:", _or_tbd(deal.final_walk_through)),
        ]
        return _document(
            self.title,
            "Keep Track of Your Closing Timeline",
            paragraph(f"Hi {deal.seller_first_names},"),
            paragraph(
                f"Congratulations on getting {deal.street_address} under contract. "
                "Here are the dates to keep an eye on between now and closing."
            ),
            _section("Your Timeline", key_value_table(pairs, role="dates")),
            paragraph(
                "Plan to have the home empty and broom clean by possession, and call your "
                "utility companies to schedule final readings for that day."
            ),
            _signature(deal),
        )

    def subject(self, deal: DealRecord) -> str:
        return f"Important Dates for Your Property Sale - {deal.street_address}"

    def recipient(self, deal: DealRecord) -> str:
        return deal.seller_email


class DepositLetterTemplate(DocumentTemplate):
    template_id = "deposit-letter"
    title = "Deposit Confirmation"
    description = "Asks the buyer's agent to confirm the earnest money deposit."

    def render(self, deal: DealRecord) -> Block:
        amount = format_currency(deal.deposit)
        deposit = f"the {amount} deposit" if amount else "the deposit"
        body = [
            paragraph(f"Hey {deal.buyer_agent_first_name},"),
            paragraph(
                f"Just a quick note to make sure {deposit} for {deal.street_address} has been made."
            ),
        ]
        if deal.deposit_collection:
            body.append(paragraph(f"Deposit held by: {deal.deposit_collection}", role="muted"))
        body += [paragraph("If you would confirm."), _signature(deal)]
        subtitle = f"Notice to {deal.agent_name}" if deal.agent_name else "Notice to Buyer's Agent"
        return _document(self.title, subtitle, *body)

    def subject(self, deal: DealRecord) -> str:
        return f"Deposit Confirmation - {deal.street_address}"

    def recipient(self, deal: DealRecord) -> str:
        return deal.agent_email


class AdResultsTemplate(DocumentTemplate):
    template_id = "ad-results"
    title = "Facebook Ad Results"
    description = "Reports paid social ad performance to the seller."

    def metrics(self, deal: DealRecord) -> list[tuple[str, str]]:
        return [
            ("Reach", f"{deal.ad_reach:,}"),
            ("Views", f"{deal.ad_impressions:,}"),
            ("Link Clicks", f"{deal.ad_clicks:,}"),
            ("Leads", f"{deal.ad_leads:,}"),
        ]

    def render(self, deal: DealRecord) -> Block:
        has_data = any((deal.ad_reach, deal.ad_impressions, deal.ad_clicks, deal.ad_leads))
        if has_data:
            pairs = self.metrics(deal)
            results = [
                table(
                    row(*[cell(value, role="metric-value") for _, value in pairs]),
                    row(*[cell(label, role="metric-label") for label, _ in pairs]),
                    role="metrics",
                )
            ]
            if deal.ad_spend:
                results.append(
                    paragraph(f"Total ad spend: {format_currency(deal.ad_spend)}", role="muted")
                )
        else:
            results = [paragraph("No Facebook ad data found for this property.", role="muted")]

        return _document(
            self.title,
            deal.full_address,
            paragraph(f"Hi {deal.seller_first_names},"),
            paragraph(
                "The more buyers who see your home, the better our chances of finding the right "
                "one. Along with the listing sites, we ran a paid campaign for your home on "
                "Facebook and Instagram and wanted to share the results."
            ),
            _section("Campaign Results", *results),
            paragraph("Let me know if you have any questions."),
            _signature(deal),
        )

    def subject(self, deal: DealRecord) -> str:
        return f"Facebook Ad Results - {deal.street_address}"

    def recipient(self, deal: DealRecord) -> str:
        return deal.seller_email


class TitleLetterTemplate(DocumentTemplate):
    """Opening package for the title company. The user picks the recipient."""

    template_id = "title-letter"
    title = "Title Letter"
    description = "Sends the contract and contact details to the title company."

    def render(self, deal: DealRecord) -> Block:
        seller = [
            ("Property Address:", deal.street_address),
            ("City, State, Zip:", f"{deal.city}, {deal.state} {deal.zip}".strip(", ")),
            ("Seller Name:", deal.name),
        ]
        if deal.seller_phone:
            seller.append(("Seller Phone:", deal.seller_phone))
        if deal.seller_email:
            seller.append(("Seller Email:", deal.seller_email))

        contract = [
            ("Sale Price:", format_currency(deal.offer_price)),
            ("Closing Date:", _or_tbd(deal.closing_date)),
            ("Deposit Amount:", format_currency(deal.deposit)),
        ]
        listing = [
            ("Name:", deal.listing_agent_name),
            ("Phone:", deal.listing_agent_phone),
            ("Email:", deal.listing_agent_email),
        ]
        buyer_agent = [
            ("Name:", deal.agent_name),
            ("Phone:", deal.agent_phone),
            ("Email:", deal.agent_email),
        ]

        body = [
            _section("Property & Seller", key_value_table(seller)),
            _section("Contract Details", key_value_table(contract)),
            _section("Listing Agent", key_value_table(listing)),
            _section("Buyer's Agent", key_value_table(buyer_agent)),
        ]
        if deal.lending_officer:
            lender = [("Loan Officer:", deal.lending_officer), ("Email:", deal.lending_officer_email)]
            body.append(_section("Lender", key_value_table(lender)))
        body.append(_signature(deal))
        return _document(self.title, "Title Company Information", *body)

    def subject(self, deal: DealRecord) -> str:
        return f"Title Information - {deal.street_address}"


class ClearToCloseTemplate(DocumentTemplate):
    template_id = "clear-to-close"
    title = "Clear to Close"
    description = "Tells the seller the buyer's loan is cleared and what happens next."

    def render(self, deal: DealRecord) -> Block:
        return _document(
            self.title,
            f"Notification for {deal.name or 'client'}",
            paragraph(f"Hey {deal.seller_first_names},"),
            paragraph(
                "The buyer's lender has issued a \"Clear to Close\". The loan has been fully "
                "reviewed by underwriting, and all that is left is closing."
            ),
            _section(
                "Next Step",
                paragraph(
                    "You will get a copy of the settlement statement to review, normally the day "
                    "before closing, and we will schedule you to sign your side of the paperwork."
                ),
            ),
            _section(
                "Scheduling Your Closing",
                paragraph(
                    f"You can sign any day before {_or_tbd(deal.closing_date)}. Signing early does "
                    "not change the transfer or possession date. Let me know a time that works "
                    "and bring a photo ID."
                ),
            ),
            _section(
                "Your Money",
                paragraph(
                    "Proceeds are released once the buyer has signed and their funds have "
                    "arrived at the title company."
                ),
            ),
            _section(
                "Wiring Your Funds",
                paragraph(
                    "The title company will never change wiring instructions by email. Confirm "
                    f"any instructions by phone with {deal.title_company_name or 'the title company'}."
                ),
            ),
            paragraph("Let me know if you have any questions."),
            _signature(deal),
        )

    def subject(self, deal: DealRecord) -> str:
        return f"Clear to Close - {deal.street_address}"

    def recipient(self, deal: DealRecord) -> str:
        return ", ".join(e for e in (deal.seller_email, deal.agent_email) if e)


for _template in (
    SettlementStatementTemplate(),
    AgentLetterTemplate(),
    ImportantDatesTemplate(),
    DepositLetterTemplate(),
    AdResultsTemplate(),
    TitleLetterTemplate(),
    ClearToCloseTemplate(),
):
    register_template(_template)

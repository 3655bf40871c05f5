from __future__ import annotations

import re
from html import escape
from pathlib import Path
from typing import Any, Dict, List, Optional

from studioquote.core.render import format_date, format_inr, render_list, team_string
from studioquote.server.schemas.quotation import CalculatedTotals, QuotationData
from studioquote.totals_calculator import PricingConfig

# Project root (the directory holding templates/)
ROOT = Path(__file__).resolve().parents[2]
TEMPLATE_PATH = ROOT / "templates" / "quotation_document.html"

TO_BE_CONFIRMED = "<span class='muted'>To be confirmed by client</span>"

_PLACEHOLDER_RE = re.compile(r"\[\[[a-zA-Z0-9_]+\]\]")


def paid_label_for(config: PricingConfig) -> str:
    return "Payments Received" if config.payment_tracking == "milestones" else "Advance Paid"


def build_events_html(data: QuotationData, skill_names: Dict[str, str]) -> str:
    """
    One block per event. Date and venue only show when the operator marked
    them as decided; otherwise the client still has to confirm.
    """
    blocks: List[str] = []
    for index, event in enumerate(data.events, start=1):
        if event.is_date_decided and event.date:
            when = escape(format_date(event.date))
            if event.time_range:
                when += " • " + escape(event.time_range)
        else:
            when = TO_BE_CONFIRMED

        if event.is_venue_decided and event.venue:
            venue = escape(event.venue)
        else:
            venue = TO_BE_CONFIRMED

        blocks.append(
            "<div class='event'>"
            f"<div class='event-title'>📍 {escape(event.name or f'Event {index}')}</div>"
            "<div class='event-grid'>"
            f"<p><b>Date:</b> {when}</p>"
            f"<p><b>Venue:</b> {venue}</p>"
            f"<p><b>Coverage:</b> {escape(event.duration)}</p>"
            f"<p><b>Price:</b> {format_inr(event.approx_cost)}</p>"
            f"<p class='wide'><b>Team:</b> {team_string(event.team, skill_names)}</p>"
            "</div>"
            "</div>"
        )
    return "\n      ".join(blocks)


def build_summary_html(
    data: QuotationData,
    totals: CalculatedTotals,
    *,
    paid_label: str = "Advance Paid",
) -> str:
    """
    The package summary box. Discount, add-ons, tax and paid lines only
    appear when they are non-zero; grand total and balance always do.
    """
    fin = data.financials
    add_ons_total = sum(a.price for a in data.add_ons)

    def line(label: str, value: str, css: str = "line") -> str:
        return f"<div class='{css}'><span>{label}</span><span>{value}</span></div>"

    rows = [line(escape(fin.package_name or "Package"), format_inr(fin.base_amount), "line package")]
    if fin.discount:
        # a negative discount is a surcharge; show it with its sign flipped
        sign = "- " if fin.discount > 0 else "+ "
        rows.append(line("Discount", sign + format_inr(abs(fin.discount)), "line discount"))
    if add_ons_total > 0:
        rows.append(line("Additional Services (Add-ons)", "+ " + format_inr(add_ons_total)))
    if totals.tax_amount:
        rows.append(line("Tax", "+ " + format_inr(totals.tax_amount)))
    rows.append(line("Grand Total", format_inr(totals.grand_total), "line total"))
    if totals.total_paid > 0:
        rows.append(line(escape(paid_label), "- " + format_inr(totals.total_paid), "line paid"))
    rows.append(line("Balance Due", format_inr(totals.balance_due), "line balance"))
    return "".join(rows)


def build_add_ons_html(data: QuotationData) -> str:
    if not data.add_ons:
        return ""
    rows = "".join(
        "<tr>"
        f"<td>{escape(a.service)}</td>"
        f"<td>{escape(a.description)}</td>"
        f"<td class='num'>{format_inr(a.price)}</td>"
        "</tr>"
        for a in data.add_ons
    )
    return (
        "<h3>Optional Add-ons</h3>"
        "<table class='add-ons'><thead><tr>"
        "<th>Service</th><th>Description</th><th class='num'>Price</th>"
        f"</tr></thead><tbody>{rows}</tbody></table>"
    )


def build_context_from_quotation(
    data: QuotationData,
    totals: CalculatedTotals,
    *,
    skill_names: Optional[Dict[str, str]] = None,
    studio_name: str = "Mera Studio & Films",
    paid_label: str = "Advance Paid",
) -> Dict[str, str]:
    """
    Context dict with every field the template uses. All values are final
    HTML (already escaped / formatted).
    """
    c = data.client
    m = data.meta
    skill_names = skill_names or {}

    payment_terms_html = ""
    if m.payment_terms.strip():
        payment_terms_html = (
            "<p class='label'>Payment Schedule</p>" + render_list(m.payment_terms)
        )

    context: Dict[str, str] = {
        "studio_name": escape(studio_name),
        "quo_number": escape(c.quo_number),
        "document_date": escape(format_date(c.date)),
        "valid_till": escape(format_date(c.valid_till)),
        "prepared_for": escape(c.name.split("&")[0].strip()),
        "status": escape(c.status.value),
        "client_name": escape(c.name),
        "client_company": escape(c.company or "-"),
        "client_phone": escape(c.phone),
        "client_email": escape(c.email),
        "client_address": escape(c.address or "-"),
        "client_locations": escape(c.locations),
        "tagline": escape(c.tagline),
        "events_html": build_events_html(data, skill_names),
        "summary_html": build_summary_html(data, totals, paid_label=paid_label),
        "add_ons_html": build_add_ons_html(data),
        "deliverables_html": render_list(m.deliverables),
        "payment_terms_html": payment_terms_html,
        "delivery_timeline_html": render_list(m.delivery_timeline),
        "bank_details": escape(m.bank_details),
        "terms_html": render_list(m.terms),
        "client_sign_name": escape(m.client_sign_name or "Client Signature"),
        "studio_sign_name": escape(m.studio_sign_name),
        "grand_total": format_inr(totals.grand_total),
        "balance_due": format_inr(totals.balance_due),
    }
    return context


def render_quotation_html(context: Dict[str, Any], template_path: Optional[Path] = None) -> str:
    """
    Reads the HTML template and replaces every [[key]] with its context value.
    Placeholders without a value are removed.
    """
    html = Path(template_path or TEMPLATE_PATH).read_text(encoding="utf-8")

    for key, value in context.items():
        html = html.replace(f"[[{key}]]", str(value))

    return _PLACEHOLDER_RE.sub("", html)

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from studioquote.server.schemas.quotation import (
    AddOn,
    ClientDetails,
    EventItem,
    Financials,
    PaymentMilestone,
    QuotationData,
    TeamMember,
    TermsAndDeliverables,
)

VALIDITY_DAYS = 14

DELIVERABLES = """All Edited Photos (Approx 2500–3500 across events)
Wedding Cinematic Film (5–10 minutes)
Sangeet Film (5–7 minutes)
Full Wedding Video (1.5–2.5 hours)
Sangeet Full Video (1–1.5 hours)
Reels (3 Custom Reels – 20–30 sec each)
Premium Wedding Album – 40 Sheets
Mini Album – 1 Piece
Premium Pen Drive + Box
Online Cloud Gallery"""

DELIVERY_TIMELINE = """Photos: 10–12 Days
Videos: 25–30 Days
Albums: 10–15 Days After Selection"""

BANK_DETAILS = """A/C: XXXXXXXX1234
IFSC: BARB0XXXXXX
UPI: merastudio@ybl"""

TERMS = """Booking is confirmed only after advance payment.
Extra hours are chargeable as per studio policy.
Travel & stay for outstation events must be arranged by the client.
Video/music selection is client’s responsibility.
Studio may use selected photos/videos for portfolio.
All disputes subject to Varanasi jurisdiction."""


def sample_quotation(today: Optional[date] = None) -> QuotationData:
    """
    The template every new quotation starts from: a two-event wedding
    package (Haldi 25000 + Sangeet 40000), 5000 discount, one LED wall add-on.
    """
    today = today or date.today()

    events = [
        EventItem(
            id="1",
            name="Haldi Ceremony",
            date="2026-11-24",
            time_range="10:00 AM – 2:00 PM",
            venue="Lucknow (Home)",
            duration="4–5 Hours",
            team=[TeamMember(skill_id="s1"), TeamMember(skill_id="s2")],
            notes="Day function – mostly family ritual coverage.",
            approx_cost=25000,
        ),
        EventItem(
            id="2",
            name="Sangeet Ceremony",
            date="2026-11-25",
            time_range="5:00 PM – 11:00 PM",
            venue="Lucknow Banquet",
            duration="5–6 Hours",
            team=[
                TeamMember(skill_id="s1"),
                TeamMember(skill_id="s3"),
                TeamMember(skill_id="s2"),
            ],
            approx_cost=40000,
        ),
    ]

    # Milestone amounts as computed against a grand total of 75000
    milestones = [
        PaymentMilestone(
            id="1", name="Booking Advance", type="percentage", value=30, amount=22500,
            is_paid=True, paid_at="2025-01-05", method="UPI",
        ),
        PaymentMilestone(
            id="2", name="Wedding Day", type="percentage", value=40, amount=30000,
            due_date="2026-11-29",
        ),
        PaymentMilestone(
            id="3", name="Final Delivery", type="percentage", value=30, amount=22500,
        ),
    ]

    return QuotationData(
        client=ClientDetails(
            name="Rahul Sharma & Priya Verma",
            phone="+91-9876543210",
            email="rahul.priya@example.com",
            tagline="Wedding Coverage – Lucknow & Varanasi",
            locations="Lucknow (Haldi, Sangeet, Wedding) & Varanasi (Reception)",
            reference="Instagram / Friend Reference",
            date=today.isoformat(),
            valid_till=(today + timedelta(days=VALIDITY_DAYS)).isoformat(),
            quo_number="QUO-2025-0012",
        ),
        events=events,
        financials=Financials(
            package_name="Complete Mix Package – Haldi + Sangeet + Wedding + Reception",
            base_amount=65000,
            discount=5000,
            advance_amount=22500,
            payment_milestones=milestones,
            notes="Includes travel within city limits and standard editing.",
        ),
        add_ons=[
            AddOn(id="1", service="LED Wall Live", description="Live projection setup with LED", price=15000),
        ],
        meta=TermsAndDeliverables(
            deliverables=DELIVERABLES,
            delivery_timeline=DELIVERY_TIMELINE,
            bank_details=BANK_DETAILS,
            terms=TERMS,
            client_sign_name="Rahul Sharma",
            studio_sign_name="Mera Studio & Films – Authorized Signatory",
        ),
    )

# studioquote/server/schemas/quotation.py
from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from studioquote.core.amounts import to_amount, to_optional_rate, to_price


def new_id(prefix: str) -> str:
    """Id in the style 'ev-1732442400123-3fa2'."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:4]}"


class QuoteModel(BaseModel):
    """
    Base model: accepts both snake_case and camelCase keys (approxCost,
    baseAmount ...) and serializes camelCase towards the front-end.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


# ==============================
# CLIENT
# ==============================

class QuotationStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"
    ON_HOLD = "On Hold"


class ClientDetails(QuoteModel):
    id: Optional[str] = None          # link to a ClientMaster, if picked from the list
    name: str = ""
    company: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    tagline: str = ""
    locations: str = ""
    reference: str = ""
    date: str = ""                    # issue date, YYYY-MM-DD
    valid_till: str = ""
    quo_number: str = ""
    status: QuotationStatus = QuotationStatus.DRAFT


class ClientMaster(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("client"))
    name: str
    company: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    notes: str = ""


# ==============================
# TEAM / SKILLS / TEMPLATES
# ==============================

class SkillMaster(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("skill"))
    name: str
    description: str = ""


class TeamMember(QuoteModel):
    skill_id: str
    count: int = 1

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, v):
        return max(1, int(to_amount(v)))


def _unique_team(team: List[TeamMember]) -> List[TeamMember]:
    # First entry per skill wins.
    seen = set()
    out: List[TeamMember] = []
    for member in team:
        if member.skill_id in seen:
            continue
        seen.add(member.skill_id)
        out.append(member)
    return out


class EventTemplate(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("tmpl"))
    name: str
    default_duration: str = ""
    default_team: List[TeamMember] = Field(default_factory=list)
    default_cost: float = 0.0
    description: str = ""

    @field_validator("default_cost", mode="before")
    @classmethod
    def _coerce_cost(cls, v):
        return to_price(v)

    @field_validator("default_team")
    @classmethod
    def _dedupe_team(cls, v):
        return _unique_team(v)


# ==============================
# EVENTS & ADD-ONS
# ==============================

class EventItem(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("ev"))
    name: str = "New Event"
    is_date_decided: bool = True
    date: str = ""
    time_range: str = ""
    is_venue_decided: bool = True
    venue: str = ""
    duration: str = ""
    team: List[TeamMember] = Field(default_factory=list)
    notes: str = ""
    approx_cost: float = 0.0

    @field_validator("approx_cost", mode="before")
    @classmethod
    def _coerce_cost(cls, v):
        return to_price(v)

    @field_validator("team")
    @classmethod
    def _dedupe_team(cls, v):
        return _unique_team(v)


class AddOn(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("add"))
    service: str = ""
    description: str = ""
    price: float = 0.0

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, v):
        return to_price(v)


# ==============================
# FINANCIALS
# ==============================

class PaymentMethod(str, Enum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"
    OTHER = "Other"


MilestoneType = Literal["percentage", "fixed"]


class PaymentMilestone(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("pm"))
    name: str = "New Phase"
    type: MilestoneType = "percentage"
    value: float = 0.0      # percentage points or fixed currency, as entered
    amount: float = 0.0     # derived, see totals_calculator.recalculate_milestone
    due_date: str = ""
    is_paid: bool = False
    paid_at: Optional[str] = None
    method: Optional[PaymentMethod] = None
    proof_file: Optional[str] = None   # data URL

    @field_validator("value", "amount", mode="before")
    @classmethod
    def _coerce_numbers(cls, v):
        return to_amount(v)


class Financials(QuoteModel):
    package_name: str = ""
    base_amount: float = 0.0     # kept equal to the event cost sum by sync_base_amount
    discount: float = 0.0
    tax_rate: Optional[float] = None
    advance_amount: float = 0.0
    payment_milestones: List[PaymentMilestone] = Field(default_factory=list)
    notes: str = ""

    @field_validator("base_amount", "discount", "advance_amount", mode="before")
    @classmethod
    def _coerce_numbers(cls, v):
        return to_amount(v)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _coerce_rate(cls, v):
        return to_optional_rate(v)


class TermsAndDeliverables(QuoteModel):
    deliverables: str = ""
    delivery_timeline: str = ""
    bank_details: str = ""
    payment_terms: str = ""
    terms: str = ""
    client_sign_name: str = ""
    studio_sign_name: str = ""


# ==============================
# AGGREGATE
# ==============================

class QuotationData(QuoteModel):
    client: ClientDetails = Field(default_factory=ClientDetails)
    events: List[EventItem] = Field(default_factory=list)
    financials: Financials = Field(default_factory=Financials)
    add_ons: List[AddOn] = Field(default_factory=list)
    meta: TermsAndDeliverables = Field(default_factory=TermsAndDeliverables)


class CalculatedTotals(QuoteModel):
    package_after_discount: float
    tax_amount: Optional[float] = None
    grand_total: float
    total_paid: float
    balance_due: float
    total_event_cost: float


class HistoryLog(QuoteModel):
    id: str = Field(default_factory=lambda: new_id("h"))
    timestamp: str
    user: str
    action: str


class QuotationRecord(QuoteModel):
    id: str
    created_at: str
    updated_at: str
    data: QuotationData
    history: List[HistoryLog] = Field(default_factory=list)


class DashboardRow(QuoteModel):
    id: str
    quo_number: str
    client_name: str
    date: str
    status: QuotationStatus
    grand_total: float

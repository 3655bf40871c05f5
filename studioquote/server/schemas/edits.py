# studioquote/server/schemas/edits.py
"""
Request bodies for field-by-field edits. Every field is optional; only the
ones the client actually sent are applied (model_dump(exclude_unset=True)).
"""
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from studioquote.core.amounts import to_amount, to_optional_rate, to_price
from studioquote.server.schemas.quotation import (
    MilestoneType,
    PaymentMethod,
    QuotationStatus,
    QuoteModel,
    TeamMember,
)


class PatchModel(QuoteModel):
    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ClientPatch(PatchModel):
    name: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tagline: Optional[str] = None
    locations: Optional[str] = None
    reference: Optional[str] = None
    date: Optional[str] = None
    valid_till: Optional[str] = None
    status: Optional[QuotationStatus] = None


class EventPatch(PatchModel):
    name: Optional[str] = None
    is_date_decided: Optional[bool] = None
    date: Optional[str] = None
    time_range: Optional[str] = None
    is_venue_decided: Optional[bool] = None
    venue: Optional[str] = None
    duration: Optional[str] = None
    team: Optional[List[TeamMember]] = None
    notes: Optional[str] = None
    approx_cost: Optional[float] = None

    @field_validator("approx_cost", mode="before")
    @classmethod
    def _coerce_cost(cls, v):
        return to_price(v)


class AddOnPatch(PatchModel):
    service: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, v):
        return to_price(v)


class FinancialsPatch(PatchModel):
    package_name: Optional[str] = None
    discount: Optional[float] = None
    advance_amount: Optional[float] = None
    tax_rate: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("discount", "advance_amount", mode="before")
    @classmethod
    def _coerce_numbers(cls, v):
        return to_amount(v)

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _coerce_rate(cls, v):
        return to_optional_rate(v)


class MetaPatch(PatchModel):
    deliverables: Optional[str] = None
    delivery_timeline: Optional[str] = None
    bank_details: Optional[str] = None
    payment_terms: Optional[str] = None
    terms: Optional[str] = None
    client_sign_name: Optional[str] = None
    studio_sign_name: Optional[str] = None


class MilestonePatch(PatchModel):
    name: Optional[str] = None
    type: Optional[MilestoneType] = None
    value: Optional[float] = None
    due_date: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v):
        return to_amount(v)


class TeamMemberIn(QuoteModel):
    """Either an existing skill_id or a skill_name (created if new)."""
    skill_id: Optional[str] = None
    skill_name: Optional[str] = None
    count: int = 1

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, v):
        return max(1, int(to_amount(v)))


class TeamCountIn(QuoteModel):
    count: Any = 1


class PaymentIn(QuoteModel):
    is_paid: bool = True
    paid_at: Optional[str] = None
    method: Optional[PaymentMethod] = None


class RefineIn(QuoteModel):
    text: str
    context: str = Field(default="Quotation", description="Section the text belongs to")


class RefineOut(QuoteModel):
    text: str
    refined: bool

"""
Financial model for a studio quotation.

Core idea:
- Base amount = sum of all event costs. It is stored on the quotation and
  kept in sync by sync_base_amount(), not computed on read.
- Package after discount = base amount - discount (no floor at zero).
- Grand total = package after discount + add-ons, optionally with tax on top.
- Paid = the advance amount OR the sum of paid milestones, depending on
  which payment-tracking mode the deployment runs. Never both.
- Balance due = grand total - paid (may go negative, meaning credit owed).

Nothing in here raises on bad numbers: anything non-numeric counts as 0.

Typical flow in an editor session:
  1) mutate the event list
  2) sync_base_amount(data)
  3) totals = compute_totals(data, config)
  4) recalculate_milestone(milestone, totals.grand_total) for the milestone
     the operator is editing
"""

from dataclasses import dataclass
from typing import Iterable

from studioquote.core.amounts import to_amount
from studioquote.server.schemas.quotation import (
    CalculatedTotals,
    PaymentMilestone,
    QuotationData,
)

PAYMENT_TRACKING_MODES = ("advance", "milestones")


@dataclass
class PricingConfig:
    # Tax on (package after discount + add-ons); off by default
    apply_tax: bool = False
    default_tax_rate: float = 18.0        # used when the quotation has no tax_rate
    # "advance": total paid = financials.advance_amount
    # "milestones": total paid = sum of paid milestone amounts
    payment_tracking: str = "advance"

    def __post_init__(self) -> None:
        if self.payment_tracking not in PAYMENT_TRACKING_MODES:
            raise ValueError(
                f"payment_tracking must be one of {PAYMENT_TRACKING_MODES}, "
                f"got {self.payment_tracking!r}"
            )

    @classmethod
    def from_settings(cls, settings) -> "PricingConfig":
        return cls(
            apply_tax=settings.apply_tax,
            default_tax_rate=settings.default_tax_rate,
            payment_tracking=settings.payment_tracking,
        )


def _sum_amounts(values: Iterable) -> float:
    return sum((to_amount(v) for v in values), 0.0)


def total_event_cost(data: QuotationData) -> float:
    return _sum_amounts(e.approx_cost for e in data.events)


def total_add_ons(data: QuotationData) -> float:
    return _sum_amounts(a.price for a in data.add_ons)


def total_paid(data: QuotationData, config: PricingConfig) -> float:
    fin = data.financials
    if config.payment_tracking == "milestones":
        return _sum_amounts(m.amount for m in fin.payment_milestones if m.is_paid)
    return to_amount(fin.advance_amount)


def compute_totals(data: QuotationData, config: PricingConfig | None = None) -> CalculatedTotals:
    """
    Derives the totals summary for a quotation.

    Strategy:
    1. Sum event costs and add-on prices.
    2. Package after discount from the STORED base amount (see sync_base_amount).
    3. Grand total = package after discount + add-ons (+ tax in tax mode).
    4. Paid according to the configured payment-tracking mode.
    5. Balance due = grand total - paid.

    Pure: does not touch `data`, same input gives the same output.
    """
    config = config or PricingConfig()
    fin = data.financials

    event_cost = total_event_cost(data)
    add_ons = total_add_ons(data)

    package_after_discount = to_amount(fin.base_amount) - to_amount(fin.discount)
    taxable = package_after_discount + add_ons

    tax_amount = None
    if config.apply_tax:
        rate = fin.tax_rate if fin.tax_rate is not None else config.default_tax_rate
        tax_amount = taxable * to_amount(rate) / 100
        grand_total = taxable + tax_amount
    else:
        grand_total = taxable

    paid = total_paid(data, config)

    return CalculatedTotals(
        package_after_discount=package_after_discount,
        tax_amount=tax_amount,
        grand_total=grand_total,
        total_paid=paid,
        balance_due=grand_total - paid,
        total_event_cost=event_cost,
    )


def sync_base_amount(data: QuotationData) -> bool:
    """
    Writes the event cost sum into financials.base_amount if it differs.

    Must run after every change to the event list and before the next read
    of the totals. Returns True when a write happened.
    """
    event_cost = total_event_cost(data)
    if event_cost != data.financials.base_amount:
        data.financials.base_amount = event_cost
        return True
    return False


def recalculate_milestone(milestone: PaymentMilestone, grand_total: float) -> float:
    """
    percentage -> grand_total * value / 100
    fixed      -> value

    Only the milestone passed in is refreshed; others keep whatever amount
    they were last computed with.
    """
    value = to_amount(milestone.value)
    if milestone.type == "percentage":
        amount = to_amount(grand_total) * value / 100
    else:
        amount = value
    milestone.amount = amount
    return amount


def refresh_milestones(data: QuotationData, grand_total: float) -> int:
    """
    Recomputes every milestone against `grand_total`. Only called on explicit
    operator request. Returns the number of amounts that changed.
    """
    changed = 0
    for milestone in data.financials.payment_milestones:
        before = milestone.amount
        if recalculate_milestone(milestone, grand_total) != before:
            changed += 1
    return changed

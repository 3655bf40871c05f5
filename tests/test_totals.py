import pytest

from studioquote.server.schemas.quotation import (
    AddOn,
    EventItem,
    Financials,
    PaymentMilestone,
    QuotationData,
)
from studioquote.totals_calculator import (
    PricingConfig,
    compute_totals,
    recalculate_milestone,
    refresh_milestones,
    sync_base_amount,
)


def test_scenario_a_no_tax(scenario_a):
    t = compute_totals(scenario_a)
    assert scenario_a.financials.base_amount == 65000
    assert t.total_event_cost == 65000
    assert t.package_after_discount == 60000
    assert t.grand_total == 75000
    assert t.tax_amount is None


def test_scenario_b_advance(scenario_a):
    scenario_a.financials.advance_amount = 50000
    t = compute_totals(scenario_a)
    assert t.total_paid == 50000
    assert t.balance_due == 25000


def test_scenario_c_percentage_milestone():
    m = PaymentMilestone(type="percentage", value=30)
    assert recalculate_milestone(m, 75000) == 22500
    assert m.amount == 22500


def test_fixed_milestone_amount_is_value():
    m = PaymentMilestone(type="fixed", value=12000)
    recalculate_milestone(m, 75000)
    assert m.amount == 12000


def test_scenario_d_discount_exceeds_base_is_not_clamped():
    data = QuotationData(
        events=[EventItem(approx_cost=15000)],
        financials=Financials(base_amount=15000, discount=20000),
    )
    t = compute_totals(data)
    assert t.package_after_discount == -5000
    assert t.grand_total == -5000
    assert t.balance_due == -5000


def test_overpayment_gives_negative_balance(scenario_a):
    scenario_a.financials.advance_amount = 80000
    assert compute_totals(scenario_a).balance_due == -5000


def test_tax_mode_uses_quotation_rate(scenario_a):
    scenario_a.financials.tax_rate = 18
    t = compute_totals(scenario_a, PricingConfig(apply_tax=True))
    assert t.tax_amount == pytest.approx(13500)
    assert t.grand_total == pytest.approx((60000 + 15000) * (1 + 18 / 100))


def test_tax_mode_falls_back_to_default_rate(scenario_a):
    t = compute_totals(scenario_a, PricingConfig(apply_tax=True, default_tax_rate=5))
    assert t.grand_total == pytest.approx(78750)


def test_tax_rate_on_quotation_ignored_without_tax_mode(scenario_a):
    scenario_a.financials.tax_rate = 18
    assert compute_totals(scenario_a).grand_total == 75000


def test_milestone_mode_sums_paid_milestones_only(scenario_a):
    scenario_a.financials.advance_amount = 99999
    scenario_a.financials.payment_milestones = [
        PaymentMilestone(value=30, amount=22500, is_paid=True),
        PaymentMilestone(value=40, amount=30000, is_paid=False),
        PaymentMilestone(type="fixed", value=5000, amount=5000, is_paid=True),
    ]
    t = compute_totals(scenario_a, PricingConfig(payment_tracking="milestones"))
    assert t.total_paid == 27500
    assert t.balance_due == 47500


def test_advance_mode_ignores_paid_milestones(scenario_a):
    scenario_a.financials.payment_milestones = [
        PaymentMilestone(value=30, amount=22500, is_paid=True),
    ]
    assert compute_totals(scenario_a).total_paid == 0


def test_unknown_payment_tracking_mode_rejected():
    with pytest.raises(ValueError):
        PricingConfig(payment_tracking="both")


def test_compute_totals_is_pure_and_idempotent(scenario_a):
    before = scenario_a.model_dump()
    first = compute_totals(scenario_a)
    second = compute_totals(scenario_a)
    assert first == second
    assert scenario_a.model_dump() == before


def test_totals_use_stored_base_amount_until_synced():
    data = QuotationData(
        events=[EventItem(approx_cost=10000)],
        financials=Financials(base_amount=0),
    )
    assert compute_totals(data).package_after_discount == 0
    sync_base_amount(data)
    assert compute_totals(data).package_after_discount == 10000


def test_non_numeric_costs_coerce_to_zero():
    data = QuotationData.model_validate({
        "events": [{"approxCost": "abc"}, {"approxCost": ""}, {"approxCost": None}, {"approxCost": "2500"}],
        "addOns": [{"price": "n/a"}, {"price": -300}],
        "financials": {"discount": "", "advanceAmount": "lots"},
    })
    sync_base_amount(data)
    t = compute_totals(data)
    assert t.total_event_cost == 2500
    assert t.grand_total == 2500
    assert t.total_paid == 0


def test_huge_integer_costs_coerce_to_zero():
    data = QuotationData.model_validate({
        "events": [{"approxCost": 10**400}, {"approxCost": 1000}],
        "financials": {"discount": 10**400},
    })
    sync_base_amount(data)
    t = compute_totals(data)
    assert data.events[0].approx_cost == 0
    assert t.total_event_cost == 1000
    assert t.grand_total == 1000


def test_compute_totals_tolerates_unvalidated_values():
    # model_construct skips validation: the calculator still must not raise
    fin = Financials.model_construct(base_amount="oops", discount=None, advance_amount="x",
                                     tax_rate=None, payment_milestones=[])
    data = QuotationData.model_construct(
        events=[EventItem.model_construct(approx_cost="bad")],
        add_ons=[AddOn.model_construct(price=None)],
        financials=fin,
    )
    t = compute_totals(data)
    assert t.grand_total == 0
    assert t.balance_due == 0


def test_sync_base_amount_writes_only_when_different(scenario_a):
    assert sync_base_amount(scenario_a) is False
    scenario_a.events[0].approx_cost = 30000
    assert sync_base_amount(scenario_a) is True
    assert scenario_a.financials.base_amount == 70000
    assert sync_base_amount(scenario_a) is False


def test_sync_with_no_events_sets_zero():
    data = QuotationData(financials=Financials(base_amount=5000))
    assert sync_base_amount(data) is True
    assert data.financials.base_amount == 0


def test_refresh_milestones_recomputes_all():
    data = QuotationData(financials=Financials(payment_milestones=[
        PaymentMilestone(value=50, amount=1),
        PaymentMilestone(type="fixed", value=700, amount=700),
    ]))
    assert refresh_milestones(data, 1000) == 1
    assert [m.amount for m in data.financials.payment_milestones] == [500, 700]

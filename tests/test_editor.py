import pytest

from studioquote.server.schemas.quotation import (
    AddOn,
    EventItem,
    EventTemplate,
    Financials,
    PaymentMilestone,
    QuotationData,
    TeamMember,
)
from studioquote.services.quotation_editor import QuotationEditor
from studioquote.totals_calculator import PricingConfig


def _editor_with_milestones(scenario_a):
    scenario_a.financials.payment_milestones = [
        PaymentMilestone(id="m1", value=30, amount=22500),
        PaymentMilestone(id="m2", value=40, amount=30000),
    ]
    return QuotationEditor(scenario_a)


def test_editor_works_on_a_copy(scenario_a):
    ed = QuotationEditor(scenario_a)
    ed.update_event("e1", approx_cost=99999)
    assert scenario_a.events[0].approx_cost == 25000


def test_editor_syncs_stale_base_amount_on_open():
    data = QuotationData(
        events=[EventItem(approx_cost=1000), EventItem(approx_cost=2000)],
        financials=Financials(base_amount=0),
    )
    ed = QuotationEditor(data)
    assert ed.data.financials.base_amount == 3000


def test_event_edits_keep_base_amount_in_sync(scenario_a):
    ed = QuotationEditor(scenario_a)
    ed.update_event("e1", approx_cost=30000)
    assert ed.data.financials.base_amount == 70000
    assert ed.totals().grand_total == 80000

    ed.add_event(EventItem(id="e3", approx_cost=5000))
    assert ed.data.financials.base_amount == 75000

    ed.remove_event("e2")
    assert ed.data.financials.base_amount == 35000


def test_add_event_defaults(scenario_a):
    ed = QuotationEditor(scenario_a)
    ev = ed.add_event()
    assert ev.name == "New Event"
    assert ev.id.startswith("ev-")
    assert ev.approx_cost == 0
    assert ed.data.financials.base_amount == 65000


def test_event_cost_text_is_coerced(scenario_a):
    ed = QuotationEditor(scenario_a)
    ed.update_event("e2", approx_cost="not a number")
    assert ed.get_event("e2").approx_cost == 0
    assert ed.data.financials.base_amount == 25000


def test_add_with_existing_id_rejected(scenario_a):
    scenario_a.financials.payment_milestones = [PaymentMilestone(id="m1", value=30)]
    ed = QuotationEditor(scenario_a)

    with pytest.raises(ValueError):
        ed.add_event(EventItem(id="e1", approx_cost=1000))
    with pytest.raises(ValueError):
        ed.add_add_on(AddOn(id="a1", price=500))
    with pytest.raises(ValueError):
        ed.add_milestone(PaymentMilestone(id="m1", value=10))

    assert [e.id for e in ed.data.events] == ["e1", "e2"]
    assert [a.id for a in ed.data.add_ons] == ["a1"]
    assert [m.id for m in ed.data.financials.payment_milestones] == ["m1"]
    assert ed.data.financials.base_amount == 65000


def test_add_event_from_template_copies_team_and_cost(scenario_a):
    tmpl = EventTemplate(
        id="t3",
        name="Wedding",
        default_duration="10–12 Hours",
        default_cost=85000,
        default_team=[TeamMember(skill_id="s1"), TeamMember(skill_id="s4", count=2)],
    )
    ed = QuotationEditor(scenario_a)
    ev = ed.add_event_from_template(tmpl)

    assert ev.name == "Wedding"
    assert ev.duration == "10–12 Hours"
    assert ev.is_date_decided is False
    assert ev.is_venue_decided is False
    assert [(m.skill_id, m.count) for m in ev.team] == [("s1", 1), ("s4", 2)]
    assert ed.data.financials.base_amount == 150000

    # the template keeps its own team
    ev.team[0].count = 5
    assert tmpl.default_team[0].count == 1


def test_team_member_unique_per_skill(scenario_a):
    ed = QuotationEditor(scenario_a)
    assert ed.add_team_member("e1", "s1") is True
    assert ed.add_team_member("e1", "s1", 3) is False
    assert [m.skill_id for m in ed.get_event("e1").team] == ["s1"]


def test_team_count_never_below_one(scenario_a):
    ed = QuotationEditor(scenario_a)
    ed.add_team_member("e1", "s3")
    assert ed.set_team_count("e1", "s3", 0).count == 1
    assert ed.set_team_count("e1", "s3", "abc").count == 1
    assert ed.set_team_count("e1", "s3", "4").count == 4


def test_remove_team_member(scenario_a):
    ed = QuotationEditor(scenario_a)
    ed.add_team_member("e1", "s1")
    ed.remove_team_member("e1", "s1")
    assert ed.get_event("e1").team == []
    with pytest.raises(KeyError):
        ed.remove_team_member("e1", "s1")


def test_unknown_event_raises_key_error(scenario_a):
    ed = QuotationEditor(scenario_a)
    with pytest.raises(KeyError):
        ed.update_event("nope", name="x")


def test_unknown_field_rejected(scenario_a):
    ed = QuotationEditor(scenario_a)
    with pytest.raises(ValueError):
        ed.update_event("e1", colour="red")


def test_base_amount_not_directly_editable(scenario_a):
    ed = QuotationEditor(scenario_a)
    with pytest.raises(ValueError):
        ed.update_financials(base_amount=1)
    ed.update_financials(discount=10000, advance_amount="20,000")
    t = ed.totals()
    assert t.grand_total == 70000
    assert t.balance_due == 50000


def test_add_ons_change_grand_total(scenario_a):
    ed = QuotationEditor(scenario_a)
    extra = ed.add_add_on()
    ed.update_add_on(extra.id, service="Drone", price=7000)
    assert ed.totals().grand_total == 82000
    ed.remove_add_on("a1")
    assert ed.totals().grand_total == 67000


def test_edited_milestone_recalculated_others_stale(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    ed.update_event("e1", approx_cost=35000)   # grand total 75000 -> 85000

    m1 = ed.update_milestone("m1", value=50)
    assert m1.amount == 42500
    # m2 was not edited and still holds the amount from the old total
    assert ed.get_milestone("m2").amount == 30000


def test_milestone_rename_does_not_recalculate(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    ed.update_event("e1", approx_cost=35000)
    m1 = ed.update_milestone("m1", name="Booking")
    assert m1.amount == 22500


def test_milestone_amount_cannot_be_set_directly(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    m1 = ed.update_milestone("m1", amount=1, value=10)
    assert m1.amount == 7500


def test_switch_milestone_to_fixed(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    m2 = ed.update_milestone("m2", type="fixed", value=12000)
    assert m2.amount == 12000


def test_add_milestone_computes_amount(scenario_a):
    ed = QuotationEditor(scenario_a)
    m = ed.add_milestone(PaymentMilestone(name="Final", value=20))
    assert m.amount == 15000
    blank = ed.add_milestone()
    assert blank.amount == 0
    assert len(ed.data.financials.payment_milestones) == 2


def test_refresh_milestones_is_explicit(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    ed.update_event("e1", approx_cost=35000)
    assert ed.refresh_milestones() == 2
    assert [m.amount for m in ed.data.financials.payment_milestones] == [25500, 34000]


def test_record_payment_and_undo(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    m = ed.record_payment("m1", paid_at="2026-01-05", method="UPI", proof_file="data:x")
    assert m.is_paid is True
    assert m.method.value == "UPI"

    m = ed.record_payment("m1", is_paid=False)
    assert m.is_paid is False
    assert m.paid_at is None
    assert m.method is None
    assert m.proof_file is None


def test_paid_milestones_count_only_in_milestone_mode(scenario_a):
    scenario_a.financials.payment_milestones = [PaymentMilestone(id="m1", value=30, amount=22500)]
    scenario_a.financials.advance_amount = 10000
    ed = QuotationEditor(scenario_a, PricingConfig(payment_tracking="milestones"))
    assert ed.totals().total_paid == 0
    ed.record_payment("m1")
    assert ed.totals().total_paid == 22500
    assert ed.totals().balance_due == 52500


def test_remove_milestone(scenario_a):
    ed = _editor_with_milestones(scenario_a)
    ed.remove_milestone("m1")
    assert [m.id for m in ed.data.financials.payment_milestones] == ["m2"]
    with pytest.raises(KeyError):
        ed.get_milestone("m1")

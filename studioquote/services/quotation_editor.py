from __future__ import annotations

from typing import Any, Dict, List, Optional

from studioquote.server.schemas.quotation import (
    AddOn,
    CalculatedTotals,
    ClientMaster,
    EventItem,
    EventTemplate,
    PaymentMethod,
    PaymentMilestone,
    QuotationData,
    TeamMember,
)
from studioquote.totals_calculator import (
    PricingConfig,
    compute_totals,
    recalculate_milestone,
    refresh_milestones,
    sync_base_amount,
)

# Financial fields the operator may edit directly. base_amount is not one of
# them; it follows the events.
EDITABLE_FINANCIALS = ("package_name", "discount", "advance_amount", "tax_rate", "notes")


def _apply(model: Any, fields: Dict[str, Any]) -> None:
    """Field-by-field assignment; unknown field names are rejected."""
    for key, value in fields.items():
        if key == "id":
            continue
        if key not in type(model).model_fields:
            raise ValueError(f"Unknown field '{key}' for {type(model).__name__}")
        setattr(model, key, value)


def _find(items: List[Any], item_id: str, label: str) -> Any:
    for item in items:
        if item.id == item_id:
            return item
    raise KeyError(f"{label} '{item_id}' not found")


def _append_new(items: List[Any], item: Any, label: str) -> Any:
    if any(existing.id == item.id for existing in items):
        raise ValueError(f"{label} '{item.id}' already exists")
    items.append(item)
    return item


class QuotationEditor:
    """
    Editing session over one quotation.

    Holds its own deep copy of the data (the "editor buffer"); nothing is
    written back to the store until the caller saves. Every change to the
    event list re-syncs financials.base_amount before returning, so the next
    totals() call always sees the synchronized value.
    """

    def __init__(self, data: QuotationData, config: Optional[PricingConfig] = None) -> None:
        self.data = data.model_copy(deep=True)
        self.config = config or PricingConfig()
        sync_base_amount(self.data)

    # ------------------------------------------------------------------
    #  TOTALS
    # ------------------------------------------------------------------
    def totals(self) -> CalculatedTotals:
        return compute_totals(self.data, self.config)

    # ------------------------------------------------------------------
    #  CLIENT & META
    # ------------------------------------------------------------------
    def update_client(self, **fields: Any) -> None:
        _apply(self.data.client, fields)

    def select_client(self, client: ClientMaster) -> None:
        """Copies contact fields from the client master into this quotation."""
        c = self.data.client
        c.id = client.id
        c.name = client.name
        c.company = client.company or ""
        c.phone = client.phone
        c.email = client.email

    def update_meta(self, **fields: Any) -> None:
        _apply(self.data.meta, fields)

    # ------------------------------------------------------------------
    #  EVENTS (each mutation ends with the base-amount sync)
    # ------------------------------------------------------------------
    def _events_changed(self) -> None:
        sync_base_amount(self.data)

    def set_events(self, events: List[EventItem]) -> None:
        self.data.events = list(events)
        self._events_changed()

    def add_event(self, event: Optional[EventItem] = None) -> EventItem:
        event = _append_new(self.data.events, event or EventItem(), "Event")
        self._events_changed()
        return event

    def add_event_from_template(self, template: EventTemplate) -> EventItem:
        """
        New event pre-filled from a template: name, duration, a copy of the
        default team and the default cost. Date and venue start undecided.
        """
        event = EventItem(
            name=template.name,
            is_date_decided=False,
            is_venue_decided=False,
            duration=template.default_duration,
            team=[m.model_copy() for m in template.default_team],
            approx_cost=template.default_cost,
        )
        return self.add_event(event)

    def get_event(self, event_id: str) -> EventItem:
        return _find(self.data.events, event_id, "Event")

    def update_event(self, event_id: str, **fields: Any) -> EventItem:
        event = self.get_event(event_id)
        _apply(event, fields)
        self._events_changed()
        return event

    def remove_event(self, event_id: str) -> None:
        self.data.events.remove(self.get_event(event_id))
        self._events_changed()

    # ------------------------------------------------------------------
    #  TEAM
    # ------------------------------------------------------------------
    def add_team_member(self, event_id: str, skill_id: str, count: int = 1) -> bool:
        """Adds a skill to the event team. Returns False if it was already there."""
        event = self.get_event(event_id)
        if any(m.skill_id == skill_id for m in event.team):
            return False
        event.team = event.team + [TeamMember(skill_id=skill_id, count=count)]
        return True

    def set_team_count(self, event_id: str, skill_id: str, count: Any) -> TeamMember:
        event = self.get_event(event_id)
        for member in event.team:
            if member.skill_id == skill_id:
                member.count = count
                return member
        raise KeyError(f"Skill '{skill_id}' not in team of event '{event_id}'")

    def remove_team_member(self, event_id: str, skill_id: str) -> None:
        event = self.get_event(event_id)
        team = [m for m in event.team if m.skill_id != skill_id]
        if len(team) == len(event.team):
            raise KeyError(f"Skill '{skill_id}' not in team of event '{event_id}'")
        event.team = team

    # ------------------------------------------------------------------
    #  ADD-ONS
    # ------------------------------------------------------------------
    def add_add_on(self, add_on: Optional[AddOn] = None) -> AddOn:
        return _append_new(self.data.add_ons, add_on or AddOn(), "Add-on")

    def update_add_on(self, add_on_id: str, **fields: Any) -> AddOn:
        add_on = _find(self.data.add_ons, add_on_id, "Add-on")
        _apply(add_on, fields)
        return add_on

    def remove_add_on(self, add_on_id: str) -> None:
        self.data.add_ons.remove(_find(self.data.add_ons, add_on_id, "Add-on"))

    # ------------------------------------------------------------------
    #  FINANCIALS
    # ------------------------------------------------------------------
    def update_financials(self, **fields: Any) -> None:
        for key in fields:
            if key not in EDITABLE_FINANCIALS:
                raise ValueError(f"Financial field '{key}' is not editable")
        _apply(self.data.financials, fields)

    # ------------------------------------------------------------------
    #  MILESTONES
    # ------------------------------------------------------------------
    def get_milestone(self, milestone_id: str) -> PaymentMilestone:
        return _find(self.data.financials.payment_milestones, milestone_id, "Milestone")

    def add_milestone(self, milestone: Optional[PaymentMilestone] = None) -> PaymentMilestone:
        milestone = milestone or PaymentMilestone()
        milestones = self.data.financials.payment_milestones
        if any(m.id == milestone.id for m in milestones):
            raise ValueError(f"Milestone '{milestone.id}' already exists")
        if "value" in milestone.model_fields_set or "type" in milestone.model_fields_set:
            recalculate_milestone(milestone, self.totals().grand_total)
        milestones.append(milestone)
        return milestone

    def update_milestone(self, milestone_id: str, **fields: Any) -> PaymentMilestone:
        """
        Updates one milestone. If its type or value changed, its amount is
        recomputed against the current grand total. Other milestones are
        left untouched.
        """
        milestone = self.get_milestone(milestone_id)
        fields.pop("amount", None)
        _apply(milestone, fields)
        if "type" in fields or "value" in fields:
            recalculate_milestone(milestone, self.totals().grand_total)
        return milestone

    def remove_milestone(self, milestone_id: str) -> None:
        milestones = self.data.financials.payment_milestones
        milestones.remove(self.get_milestone(milestone_id))

    def record_payment(
        self,
        milestone_id: str,
        *,
        is_paid: bool = True,
        paid_at: Optional[str] = None,
        method: Optional[PaymentMethod] = None,
        proof_file: Optional[str] = None,
    ) -> PaymentMilestone:
        milestone = self.get_milestone(milestone_id)
        milestone.is_paid = is_paid
        if is_paid:
            milestone.paid_at = paid_at
            milestone.method = method
            if proof_file is not None:
                milestone.proof_file = proof_file
        else:
            milestone.paid_at = None
            milestone.method = None
            milestone.proof_file = None
        return milestone

    def refresh_milestones(self) -> int:
        """Operator action: recompute every milestone against today's grand total."""
        return refresh_milestones(self.data, self.totals().grand_total)

from contextlib import contextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from studioquote.server.schemas.edits import (
    AddOnPatch,
    ClientPatch,
    EventPatch,
    FinancialsPatch,
    MetaPatch,
    MilestonePatch,
    PaymentIn,
    TeamCountIn,
    TeamMemberIn,
)
from studioquote.server.schemas.quotation import (
    AddOn,
    CalculatedTotals,
    DashboardRow,
    EventItem,
    HistoryLog,
    PaymentMilestone,
    QuotationData,
    QuotationRecord,
)
from studioquote.server.state import get_masters, get_pricing_config, get_store
from studioquote.services.masters import MasterRegistry
from studioquote.services.payment_proof import encode_proof_file
from studioquote.services.quotation_editor import QuotationEditor
from studioquote.services.quotation_store import QuotationStore
from studioquote.totals_calculator import PricingConfig, compute_totals

router = APIRouter(prefix="/quotations", tags=["quotations"])


# ==============================
# HELPERS
# ==============================

@contextmanager
def service_errors():
    """KeyError -> 404, ValueError (incl. pydantic validation) -> 400."""
    try:
        yield
    except KeyError as e:
        detail = e.args[0] if e.args else "Not found"
        raise HTTPException(status_code=404, detail=str(detail))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _record(store: QuotationStore, quotation_id: str) -> QuotationRecord:
    with service_errors():
        return store.get(quotation_id)


def _open_editor(store: QuotationStore, quotation_id: str, config: PricingConfig) -> QuotationEditor:
    return QuotationEditor(_record(store, quotation_id).data, config)


def _commit(store: QuotationStore, quotation_id: str, editor: QuotationEditor) -> QuotationRecord:
    return store.save(quotation_id, editor.data)


# ==============================
# LIST / CREATE / DELETE
# ==============================

@router.get("", response_model=List[DashboardRow], summary="Dashboard list")
def list_quotations(
    search: Optional[str] = Query(default=None),
    store: QuotationStore = Depends(get_store),
):
    return store.dashboard_rows(search)


@router.post("", response_model=QuotationRecord, status_code=201, summary="New quotation")
def create_quotation(store: QuotationStore = Depends(get_store)):
    return store.create_quotation()


@router.get("/{quotation_id}", response_model=QuotationRecord)
def get_quotation(quotation_id: str, store: QuotationStore = Depends(get_store)):
    return _record(store, quotation_id)


@router.delete("/{quotation_id}", status_code=204)
def delete_quotation(quotation_id: str, store: QuotationStore = Depends(get_store)):
    with service_errors():
        store.delete(quotation_id)
    return Response(status_code=204)


@router.put("/{quotation_id}/data", response_model=QuotationRecord, summary="Replace and save editor data")
def replace_quotation_data(
    quotation_id: str,
    payload: QuotationData,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    _record(store, quotation_id)
    editor = QuotationEditor(payload, config)
    return _commit(store, quotation_id, editor)


@router.post("/{quotation_id}/save", response_model=QuotationRecord, summary="Save current state")
def save_quotation(
    quotation_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    """Re-syncs the base amount and saves; bumps updatedAt even without changes."""
    return _commit(store, quotation_id, _open_editor(store, quotation_id, config))


@router.get("/{quotation_id}/totals", response_model=CalculatedTotals)
def get_totals(
    quotation_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    return compute_totals(_record(store, quotation_id).data, config)


@router.get("/{quotation_id}/history", response_model=List[HistoryLog])
def get_history(quotation_id: str, store: QuotationStore = Depends(get_store)):
    return _record(store, quotation_id).history


# ==============================
# CLIENT / FINANCIALS / META
# ==============================

@router.patch("/{quotation_id}/client", response_model=QuotationRecord)
def patch_client(
    quotation_id: str,
    payload: ClientPatch,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.update_client(**payload.changes())
    return _commit(store, quotation_id, editor)


@router.post("/{quotation_id}/client/select/{client_id}", response_model=QuotationRecord)
def select_client(
    quotation_id: str,
    client_id: str,
    store: QuotationStore = Depends(get_store),
    masters: MasterRegistry = Depends(get_masters),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.select_client(masters.clients.get(client_id))
    return _commit(store, quotation_id, editor)


@router.patch("/{quotation_id}/financials", response_model=QuotationRecord)
def patch_financials(
    quotation_id: str,
    payload: FinancialsPatch,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.update_financials(**payload.changes())
    return _commit(store, quotation_id, editor)


@router.patch("/{quotation_id}/meta", response_model=QuotationRecord)
def patch_meta(
    quotation_id: str,
    payload: MetaPatch,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.update_meta(**payload.changes())
    return _commit(store, quotation_id, editor)


# ==============================
# EVENTS & TEAM
# ==============================

@router.post("/{quotation_id}/events", response_model=QuotationRecord, status_code=201)
def add_event(
    quotation_id: str,
    payload: Optional[EventItem] = None,
    template_id: Optional[str] = Query(default=None),
    store: QuotationStore = Depends(get_store),
    masters: MasterRegistry = Depends(get_masters),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        if template_id:
            editor.add_event_from_template(masters.templates.get(template_id))
        else:
            editor.add_event(payload)
    return _commit(store, quotation_id, editor)


@router.patch("/{quotation_id}/events/{event_id}", response_model=QuotationRecord)
def patch_event(
    quotation_id: str,
    event_id: str,
    payload: EventPatch,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.update_event(event_id, **payload.changes())
    return _commit(store, quotation_id, editor)


@router.delete("/{quotation_id}/events/{event_id}", response_model=QuotationRecord)
def delete_event(
    quotation_id: str,
    event_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.remove_event(event_id)
    return _commit(store, quotation_id, editor)


@router.post("/{quotation_id}/events/{event_id}/team", response_model=QuotationRecord)
def add_team_member(
    quotation_id: str,
    event_id: str,
    payload: TeamMemberIn,
    store: QuotationStore = Depends(get_store),
    masters: MasterRegistry = Depends(get_masters),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        if payload.skill_id:
            skill = masters.skills.get(payload.skill_id)
        elif payload.skill_name:
            skill = masters.ensure_skill(payload.skill_name)
        else:
            raise ValueError("skill_id or skill_name required")
        editor.add_team_member(event_id, skill.id, payload.count)
    return _commit(store, quotation_id, editor)


@router.put("/{quotation_id}/events/{event_id}/team/{skill_id}", response_model=QuotationRecord)
def set_team_count(
    quotation_id: str,
    event_id: str,
    skill_id: str,
    payload: TeamCountIn,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.set_team_count(event_id, skill_id, payload.count)
    return _commit(store, quotation_id, editor)


@router.delete("/{quotation_id}/events/{event_id}/team/{skill_id}", response_model=QuotationRecord)
def remove_team_member(
    quotation_id: str,
    event_id: str,
    skill_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.remove_team_member(event_id, skill_id)
    return _commit(store, quotation_id, editor)


# ==============================
# ADD-ONS
# ==============================

@router.post("/{quotation_id}/add-ons", response_model=QuotationRecord, status_code=201)
def add_add_on(
    quotation_id: str,
    payload: Optional[AddOn] = None,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.add_add_on(payload)
    return _commit(store, quotation_id, editor)


@router.patch("/{quotation_id}/add-ons/{add_on_id}", response_model=QuotationRecord)
def patch_add_on(
    quotation_id: str,
    add_on_id: str,
    payload: AddOnPatch,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.update_add_on(add_on_id, **payload.changes())
    return _commit(store, quotation_id, editor)


@router.delete("/{quotation_id}/add-ons/{add_on_id}", response_model=QuotationRecord)
def delete_add_on(
    quotation_id: str,
    add_on_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.remove_add_on(add_on_id)
    return _commit(store, quotation_id, editor)


# ==============================
# PAYMENT MILESTONES
# ==============================

@router.post("/{quotation_id}/milestones", response_model=QuotationRecord, status_code=201)
def add_milestone(
    quotation_id: str,
    payload: Optional[PaymentMilestone] = None,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.add_milestone(payload)
    return _commit(store, quotation_id, editor)


@router.post("/{quotation_id}/milestones/refresh", response_model=QuotationRecord)
def refresh_milestones(
    quotation_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    editor.refresh_milestones()
    return _commit(store, quotation_id, editor)


@router.patch("/{quotation_id}/milestones/{milestone_id}", response_model=QuotationRecord)
def patch_milestone(
    quotation_id: str,
    milestone_id: str,
    payload: MilestonePatch,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.update_milestone(milestone_id, **payload.changes())
    return _commit(store, quotation_id, editor)


@router.delete("/{quotation_id}/milestones/{milestone_id}", response_model=QuotationRecord)
def delete_milestone(
    quotation_id: str,
    milestone_id: str,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.remove_milestone(milestone_id)
    return _commit(store, quotation_id, editor)


@router.post("/{quotation_id}/milestones/{milestone_id}/payment", response_model=QuotationRecord)
def record_payment(
    quotation_id: str,
    milestone_id: str,
    payload: PaymentIn,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        editor.record_payment(
            milestone_id,
            is_paid=payload.is_paid,
            paid_at=payload.paid_at,
            method=payload.method,
        )
    return _commit(store, quotation_id, editor)


@router.put("/{quotation_id}/milestones/{milestone_id}/proof", response_model=QuotationRecord)
async def upload_payment_proof(
    quotation_id: str,
    milestone_id: str,
    request: Request,
    store: QuotationStore = Depends(get_store),
    config: PricingConfig = Depends(get_pricing_config),
):
    """Raw request body = the proof file; Content-Type is kept in the data URL."""
    content = await request.body()
    editor = _open_editor(store, quotation_id, config)
    with service_errors():
        milestone = editor.get_milestone(milestone_id)
        milestone.proof_file = encode_proof_file(content, request.headers.get("content-type"))
    return _commit(store, quotation_id, editor)

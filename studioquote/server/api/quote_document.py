from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from studioquote.server.api.quotations import _record
from studioquote.server.settings.config import settings
from studioquote.server.state import get_masters, get_pricing_config, get_store
from studioquote.services.masters import MasterRegistry
from studioquote.services.quotation_store import QuotationStore
from studioquote.services.quote_document import (
    build_context_from_quotation,
    paid_label_for,
    render_quotation_html,
)
from studioquote.totals_calculator import PricingConfig, compute_totals

router = APIRouter(prefix="/quotations", tags=["documents"])


@router.get(
    "/{quotation_id}/document",
    response_class=HTMLResponse,
    summary="Printable proposal (HTML)",
)
def get_quotation_document(
    quotation_id: str,
    store: QuotationStore = Depends(get_store),
    masters: MasterRegistry = Depends(get_masters),
    config: PricingConfig = Depends(get_pricing_config),
):
    data = _record(store, quotation_id).data

    ctx = build_context_from_quotation(
        data,
        compute_totals(data, config),
        skill_names=masters.skill_names(),
        studio_name=settings.studio_name,
        paid_label=paid_label_for(config),
    )
    return HTMLResponse(content=render_quotation_html(ctx))

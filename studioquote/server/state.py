from typing import Optional

from studioquote.server.settings.config import settings
from studioquote.services.masters import MasterRegistry
from studioquote.services.quotation_store import QuotationStore
from studioquote.services.text_refiner import TextRefiner
from studioquote.totals_calculator import PricingConfig

# Process-wide session state. Nothing here survives a restart.
_store: Optional[QuotationStore] = None
_masters: Optional[MasterRegistry] = None
_refiner: Optional[TextRefiner] = None


def get_pricing_config() -> PricingConfig:
    return PricingConfig.from_settings(settings)


def init_state(*, seed: bool = True) -> None:
    """(Re)creates the store and master registries; seeds the sample quotation."""
    global _store, _masters, _refiner
    _masters = MasterRegistry.from_defaults()
    _store = QuotationStore(get_pricing_config(), user=settings.history_user)
    _refiner = None
    if seed:
        _store.seed_sample()


def get_store() -> QuotationStore:
    if _store is None:
        init_state()
    return _store


def get_masters() -> MasterRegistry:
    if _masters is None:
        init_state()
    return _masters


def get_refiner() -> TextRefiner:
    global _refiner
    if _refiner is None:
        _refiner = TextRefiner()
    return _refiner

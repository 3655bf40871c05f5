# tests/conftest.py
import os, sys
# put the project root (the directory holding "studioquote") first on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from studioquote.server.schemas.quotation import (
    AddOn,
    EventItem,
    Financials,
    QuotationData,
)


@pytest.fixture
def scenario_a() -> QuotationData:
    """Two events 25000 + 40000, discount 5000, one 15000 add-on, no tax."""
    return QuotationData(
        events=[
            EventItem(id="e1", name="Haldi", approx_cost=25000),
            EventItem(id="e2", name="Sangeet", approx_cost=40000),
        ],
        financials=Financials(base_amount=65000, discount=5000),
        add_ons=[AddOn(id="a1", service="LED Wall Live", price=15000)],
    )

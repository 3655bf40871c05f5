from __future__ import annotations

import random
import time
from datetime import date
from typing import Callable, List, Optional

from studioquote.server.schemas.quotation import (
    DashboardRow,
    HistoryLog,
    QuotationData,
    QuotationRecord,
)
from studioquote.services.history import build_history_entry, diff_watched_fields, now_iso
from studioquote.services.sample_data import sample_quotation
from studioquote.totals_calculator import PricingConfig, compute_totals, sync_base_amount

SAMPLE_ID = "Q-SAMPLE-001"


def _new_record_id() -> str:
    return f"Q{int(time.time() * 1000)}-{random.randint(0, 999)}"


def _new_quo_number(today: date) -> str:
    return f"QUO-{today.year}-{random.randint(0, 9999):04d}"


class QuotationStore:
    """
    In-memory list of quotation records, newest first.

    Lives as long as the process does. Deleting a quotation drops it from the
    active list; history entries are never removed from a record.
    """

    def __init__(
        self,
        config: Optional[PricingConfig] = None,
        *,
        user: str = "Admin User",
        template_factory: Callable[[], QuotationData] = sample_quotation,
    ) -> None:
        self.config = config or PricingConfig()
        self.user = user
        self.template_factory = template_factory
        self._records: List[QuotationRecord] = []

    # ==============================
    # READ
    # ==============================

    def list_records(self) -> List[QuotationRecord]:
        return list(self._records)

    def get(self, record_id: str) -> QuotationRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise KeyError(f"Quotation '{record_id}' not found")

    def dashboard_rows(self, search: Optional[str] = None) -> List[DashboardRow]:
        """
        One row per quotation with its grand total. `search` matches the
        client name or quotation number, case-insensitive.
        """
        needle = (search or "").strip().lower()
        rows: List[DashboardRow] = []
        for record in self._records:
            client = record.data.client
            if needle and needle not in client.name.lower() and needle not in client.quo_number.lower():
                continue
            rows.append(
                DashboardRow(
                    id=record.id,
                    quo_number=client.quo_number,
                    client_name=client.name,
                    date=client.date,
                    status=client.status,
                    grand_total=compute_totals(record.data, self.config).grand_total,
                )
            )
        return rows

    # ==============================
    # WRITE
    # ==============================

    def seed_sample(self) -> QuotationRecord:
        """Installs the sample quotation if the list is empty."""
        if self._records:
            return self._records[0]
        ts = now_iso()
        record = QuotationRecord(
            id=SAMPLE_ID,
            created_at=ts,
            updated_at=ts,
            data=self.template_factory(),
            history=[HistoryLog(id="h1", timestamp=ts, user="System", action="Initial Quotation Created")],
        )
        self._records.insert(0, record)
        return record

    def create_quotation(self) -> QuotationRecord:
        """
        New record from the blank template: fresh quotation number, no add-ons.
        """
        data = self.template_factory()
        data.client.quo_number = _new_quo_number(date.today())
        data.add_ons = []
        sync_base_amount(data)

        ts = now_iso()
        record = QuotationRecord(
            id=_new_record_id(),
            created_at=ts,
            updated_at=ts,
            data=data,
            history=[HistoryLog(timestamp=ts, user=self.user, action="Created new quotation")],
        )
        self._records.insert(0, record)
        return record

    def save(self, record_id: str, data: QuotationData) -> QuotationRecord:
        """
        Commits an editor buffer. Adds one history entry if any watched field
        changed (see history.diff_watched_fields), always bumps updated_at.
        """
        record = self.get(record_id)
        new_data = data.model_copy(deep=True)

        entry = build_history_entry(diff_watched_fields(record.data, new_data), self.user)
        if entry is not None:
            record.history.insert(0, entry)

        record.data = new_data
        record.updated_at = now_iso()
        return record

    def delete(self, record_id: str) -> None:
        self._records.remove(self.get(record_id))

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from studioquote.server.schemas.quotation import HistoryLog, QuotationData


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _fmt_number(value: float) -> str:
    # 65000.0 -> "65000", 1250.5 -> "1250.5"
    return str(int(value)) if float(value).is_integer() else str(value)


def diff_watched_fields(old: QuotationData, new: QuotationData) -> List[str]:
    """
    Change digest between two saved versions of a quotation.

    Only these fields are watched:
      - client name
      - base amount
      - number of add-ons
      - advance amount

    Anything else can change without showing up here; this is a digest,
    not an audit trail.
    """
    changes: List[str] = []

    if old.client.name != new.client.name:
        changes.append(f'Client Name: "{old.client.name}" → "{new.client.name}"')

    if old.financials.base_amount != new.financials.base_amount:
        changes.append(
            f"Base Amount: {_fmt_number(old.financials.base_amount)}"
            f" → {_fmt_number(new.financials.base_amount)}"
        )

    if len(old.add_ons) != len(new.add_ons):
        changes.append("Add-ons updated")

    if old.financials.advance_amount != new.financials.advance_amount:
        changes.append(
            f"Advance Amount: {_fmt_number(old.financials.advance_amount)}"
            f" → {_fmt_number(new.financials.advance_amount)}"
        )

    return changes


def build_history_entry(changes: List[str], user: str) -> Optional[HistoryLog]:
    """One log entry per save, or None when no watched field changed."""
    if not changes:
        return None
    return HistoryLog(timestamp=now_iso(), user=user, action="\n".join(changes))

# studioquote/core/render.py
"""
Formatters for the printed proposal.
- Money in rupees with Indian digit grouping (1,00,000), no decimals
- Dates as "24 Nov 2026"
- Multi-line text fields as bullet lists
- Event team as "1 Candid Photographer, 1 Cinematographer"
All output is HTML-escaped here; the document template inserts it as-is.
"""

from datetime import date
from html import escape
from typing import Dict, Iterable, List

RUPEE = "₹"
UNKNOWN_SKILL = "Unknown Skill"

# ---------- Formatters ----------

def _group_indian(int_str: str) -> str:
    """Group digits the Indian way: last three, then pairs. 1234567 -> 12,34,567."""
    s = "".join(ch for ch in int_str if ch.isdigit())
    if len(s) <= 3:
        return s
    head, tail = s[:-3], s[-3:]
    parts: List[str] = []
    while len(head) > 2:
        parts.append(head[-2:])
        head = head[:-2]
    if head:
        parts.append(head)
    return ",".join(reversed(parts)) + "," + tail

def format_inr(value: float) -> str:
    """75000 -> ₹75,000 ; -5000 -> -₹5,000 ; rounded half up to whole rupees."""
    v = float(value or 0.0)
    rounded = int(abs(v) + 0.5)
    sign = "-" if v < 0 and rounded else ""
    return "{}{}{}".format(sign, RUPEE, _group_indian(str(rounded)))

def format_date(value: str) -> str:
    """'2026-11-24' -> '24 Nov 2026'. Anything unparseable is returned unchanged."""
    if not value:
        return ""
    try:
        d = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return "{} {}".format(d.day, d.strftime("%b %Y"))

# ---------- HTML fragments ----------

def render_list(text: str) -> str:
    lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
    if not lines:
        return ""
    items = "".join("<li>{}</li>".format(escape(line)) for line in lines)
    return "<ul class='list'>{}</ul>".format(items)

def team_string(team: Iterable, skill_names: Dict[str, str]) -> str:
    members = list(team or [])
    if not members:
        return "-"
    return escape(", ".join(
        "{} {}".format(m.count, skill_names.get(m.skill_id, UNKNOWN_SKILL))
        for m in members
    ))

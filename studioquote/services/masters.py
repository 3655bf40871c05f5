from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from studioquote.server.schemas.quotation import ClientMaster, EventTemplate, SkillMaster

# Project root (the directory holding knowledge/)
ROOT = Path(__file__).resolve().parents[2]

DEFAULTS_PATH = ROOT / "knowledge" / "studio_defaults.yaml"

M = TypeVar("M", bound=BaseModel)


@lru_cache(maxsize=1)
def _load_raw_defaults_yaml() -> Any:
    """
    Reads the master-data YAML once and caches it.
    A missing or broken file behaves like an empty catalog.
    """
    if not DEFAULTS_PATH.exists():
        print(f"[masters] No defaults file at {DEFAULTS_PATH}", file=sys.stderr)
        return {}

    try:
        with DEFAULTS_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        print(f"[masters] Could not read {DEFAULTS_PATH}: {e}", file=sys.stderr)
        return {}

    return data


def _parse_section(raw: Any, key: str, model: Type[M]) -> List[M]:
    if not isinstance(raw, dict):
        return []
    rows = raw.get(key) or []
    if not isinstance(rows, list):
        return []

    out: List[M] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            continue
        try:
            out.append(model.model_validate(row))
        except ValidationError as e:
            print(f"[masters] Skipping {key}[{idx}]: {e}", file=sys.stderr)
    return out


def load_default_masters() -> Dict[str, list]:
    """
    Returns the seeded master data:
      {"clients": [...], "skills": [...], "event_templates": [...]}
    """
    raw = _load_raw_defaults_yaml()
    return {
        "clients": _parse_section(raw, "clients", ClientMaster),
        "skills": _parse_section(raw, "skills", SkillMaster),
        "event_templates": _parse_section(raw, "event_templates", EventTemplate),
    }


class _Collection(Generic[M]):
    """Ordered in-memory list of records keyed by `id`."""

    def __init__(self, model: Type[M], label: str, items: Optional[List[M]] = None) -> None:
        self.model = model
        self.label = label
        self._items: List[M] = list(items or [])

    def list(self) -> List[M]:
        return list(self._items)

    def get(self, item_id: str) -> M:
        for item in self._items:
            if item.id == item_id:
                return item
        raise KeyError(f"{self.label} '{item_id}' not found")

    def add(self, item: M) -> M:
        if any(existing.id == item.id for existing in self._items):
            raise ValueError(f"{self.label} '{item.id}' already exists")
        self._items.append(item)
        return item

    def update(self, item_id: str, **fields: Any) -> M:
        current = self.get(item_id)
        # camelCase keys from the API -> field names
        aliases = {f.alias: name for name, f in self.model.model_fields.items() if f.alias}
        fields = {aliases.get(k, k): v for k, v in fields.items()}
        merged = {**current.model_dump(), **fields, "id": item_id}
        updated = self.model.model_validate(merged)
        self._items[self._items.index(current)] = updated
        return updated

    def delete(self, item_id: str) -> None:
        self._items.remove(self.get(item_id))


class MasterRegistry:
    """
    Clients, skills and event templates for the studio.
    Quotations only copy from these; editing a master never rewrites
    an existing quotation.
    """

    def __init__(
        self,
        *,
        clients: Optional[List[ClientMaster]] = None,
        skills: Optional[List[SkillMaster]] = None,
        templates: Optional[List[EventTemplate]] = None,
    ) -> None:
        self.clients = _Collection(ClientMaster, "Client", clients)
        self.skills = _Collection(SkillMaster, "Skill", skills)
        self.templates = _Collection(EventTemplate, "Template", templates)

    @classmethod
    def from_defaults(cls) -> "MasterRegistry":
        d = load_default_masters()
        return cls(
            clients=d["clients"],
            skills=d["skills"],
            templates=d["event_templates"],
        )

    def ensure_skill(self, name: str) -> SkillMaster:
        """
        Returns the skill with this name (case-insensitive) or creates it.
        Empty names are rejected.
        """
        clean = (name or "").strip()
        if not clean:
            raise ValueError("Skill name must not be empty")

        for skill in self.skills.list():
            if skill.name.lower() == clean.lower():
                return skill
        return self.skills.add(SkillMaster(name=clean))

    def skill_names(self) -> Dict[str, str]:
        return {s.id: s.name for s in self.skills.list()}

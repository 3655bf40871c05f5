import pytest

from studioquote.server.schemas.quotation import ClientMaster, EventTemplate, SkillMaster
from studioquote.services.masters import MasterRegistry, load_default_masters


def test_defaults_loaded_from_yaml():
    d = load_default_masters()
    assert [s.id for s in d["skills"]][:3] == ["s1", "s2", "s3"]
    assert {c.id for c in d["clients"]} == {"c1", "c2"}

    wedding = next(t for t in d["event_templates"] if t.id == "t3")
    assert wedding.default_cost == 85000
    assert len(wedding.default_team) == 4


def test_ensure_skill_case_insensitive():
    reg = MasterRegistry(skills=[SkillMaster(id="s1", name="Candid Photographer")])
    assert reg.ensure_skill("  candid photographer ").id == "s1"

    drone = reg.ensure_skill("Drone Pilot")
    assert drone.id.startswith("skill-")
    assert reg.ensure_skill("DRONE PILOT").id == drone.id
    assert len(reg.skills.list()) == 2


def test_ensure_skill_rejects_empty_name():
    with pytest.raises(ValueError):
        MasterRegistry().ensure_skill("   ")


def test_collection_crud():
    reg = MasterRegistry(clients=[ClientMaster(id="c1", name="Amit")])
    with pytest.raises(ValueError):
        reg.clients.add(ClientMaster(id="c1", name="Again"))

    updated = reg.clients.update("c1", phone="123", company="Acme")
    assert (updated.name, updated.phone, updated.company) == ("Amit", "123", "Acme")

    reg.clients.delete("c1")
    with pytest.raises(KeyError):
        reg.clients.get("c1")


def test_template_update_accepts_camel_case_keys():
    reg = MasterRegistry(templates=[EventTemplate(id="t1", name="Haldi", default_cost=25000)])
    t = reg.templates.update("t1", defaultCost="30000", id="ignored")
    assert t.id == "t1"
    assert t.default_cost == 30000


def test_template_team_deduplicated():
    t = EventTemplate.model_validate({
        "name": "Wedding",
        "defaultTeam": [{"skillId": "s1", "count": 2}, {"skillId": "s1", "count": 5}],
    })
    assert [(m.skill_id, m.count) for m in t.default_team] == [("s1", 2)]


def test_editing_master_does_not_touch_quotation(scenario_a):
    from studioquote.services.quotation_editor import QuotationEditor

    reg = MasterRegistry(clients=[ClientMaster(id="c1", name="Amit", phone="1")])
    ed = QuotationEditor(scenario_a)
    ed.select_client(reg.clients.get("c1"))
    reg.clients.update("c1", name="Someone Else")
    assert ed.data.client.name == "Amit"
    assert ed.data.client.id == "c1"

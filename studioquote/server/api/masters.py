from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response

from studioquote.server.api.quotations import service_errors
from studioquote.server.schemas.quotation import ClientMaster, EventTemplate, SkillMaster
from studioquote.server.state import get_masters
from studioquote.services.masters import MasterRegistry

router = APIRouter(tags=["masters"])


# ==============================
# CLIENTS
# ==============================

@router.get("/clients", response_model=List[ClientMaster])
def list_clients(masters: MasterRegistry = Depends(get_masters)):
    return masters.clients.list()


@router.post("/clients", response_model=ClientMaster, status_code=201)
def create_client(payload: ClientMaster, masters: MasterRegistry = Depends(get_masters)):
    with service_errors():
        return masters.clients.add(payload)


@router.patch("/clients/{client_id}", response_model=ClientMaster)
def update_client(
    client_id: str,
    payload: Dict[str, Any] = Body(...),
    masters: MasterRegistry = Depends(get_masters),
):
    with service_errors():
        return masters.clients.update(client_id, **payload)


@router.delete("/clients/{client_id}", status_code=204)
def delete_client(client_id: str, masters: MasterRegistry = Depends(get_masters)):
    with service_errors():
        masters.clients.delete(client_id)
    return Response(status_code=204)


# ==============================
# SKILLS
# ==============================

@router.get("/skills", response_model=List[SkillMaster])
def list_skills(masters: MasterRegistry = Depends(get_masters)):
    return masters.skills.list()


@router.post("/skills", response_model=SkillMaster, status_code=201)
def create_skill(payload: SkillMaster, masters: MasterRegistry = Depends(get_masters)):
    """Same name (any case) returns the existing skill instead of a duplicate."""
    with service_errors():
        return masters.ensure_skill(payload.name)


@router.delete("/skills/{skill_id}", status_code=204)
def delete_skill(skill_id: str, masters: MasterRegistry = Depends(get_masters)):
    with service_errors():
        masters.skills.delete(skill_id)
    return Response(status_code=204)


# ==============================
# EVENT TEMPLATES
# ==============================

@router.get("/templates", response_model=List[EventTemplate])
def list_templates(masters: MasterRegistry = Depends(get_masters)):
    return masters.templates.list()


@router.post("/templates", response_model=EventTemplate, status_code=201)
def create_template(payload: EventTemplate, masters: MasterRegistry = Depends(get_masters)):
    with service_errors():
        return masters.templates.add(payload)


@router.patch("/templates/{template_id}", response_model=EventTemplate)
def update_template(
    template_id: str,
    payload: Dict[str, Any] = Body(...),
    masters: MasterRegistry = Depends(get_masters),
):
    with service_errors():
        return masters.templates.update(template_id, **payload)


@router.delete("/templates/{template_id}", status_code=204)
def delete_template(template_id: str, masters: MasterRegistry = Depends(get_masters)):
    with service_errors():
        masters.templates.delete(template_id)
    return Response(status_code=204)

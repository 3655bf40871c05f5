from fastapi import APIRouter, Depends

from studioquote.server.schemas.edits import RefineIn, RefineOut
from studioquote.server.state import get_refiner
from studioquote.services.text_refiner import TextRefiner

router = APIRouter(tags=["refine"])


@router.post("/refine", response_model=RefineOut, summary="Polish quotation copy with the LLM")
def refine(payload: RefineIn, refiner: TextRefiner = Depends(get_refiner)):
    out = refiner.refine(payload.text, payload.context)
    return RefineOut(text=out, refined=refiner.configured and out != payload.text)

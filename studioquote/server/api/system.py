from fastapi import APIRouter, Request
from fastapi.routing import APIRoute

from studioquote.server.settings.config import settings
from studioquote.server.state import get_pricing_config

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    config = get_pricing_config()
    return {
        "status": "ok",
        "app": settings.app_name,
        "environment": settings.environment,
        "pricing": {
            "apply_tax": config.apply_tax,
            "default_tax_rate": config.default_tax_rate,
            "payment_tracking": config.payment_tracking,
        },
    }


@router.get("/__debug/routes")
def list_routes(request: Request):
    out = []
    for r in request.app.routes:
        if isinstance(r, APIRoute):
            fn = r.endpoint
            out.append({
                "path": r.path,
                "methods": sorted(r.methods or []),
                "name": r.name,
                "endpoint": f"{fn.__module__}.{fn.__name__}",
            })
    return out

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studioquote.server.api import masters, quotations, refine, system
from studioquote.server.api.quote_document import router as quote_document_router
from studioquote.server.settings.config import settings
from studioquote.server.state import get_store, init_state


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_state()
    print(
        f"[main] {settings.app_name} ready, {len(get_store().list_records())} quotation(s) loaded",
        file=sys.stderr,
    )
    yield
    print("[main] Shutting down, in-memory quotations are discarded", file=sys.stderr)


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

# CORS so the browser front-end can talk to the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.frontend_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(system.router)
app.include_router(quote_document_router)    # /quotations/{id}/document
app.include_router(quotations.router)        # /quotations...
app.include_router(masters.router)           # /clients, /skills, /templates
app.include_router(refine.router)            # /refine

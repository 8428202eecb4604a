from fastapi import FastAPI
from contextlib import asynccontextmanager

from billdesk import __version__
from billdesk.core.config import settings
from billdesk.core.database import Base, engine
from billdesk.core.logging_config import configure_logging

import billdesk.models  # Ensure models are registered

from billdesk.routes.clients import client_router
from billdesk.routes.invoices import invoice_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ---- STARTUP ----
    configure_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)

    yield

app = FastAPI(
    title="Billdesk API",
    version=__version__,
    lifespan=lifespan
)

API_PREFIX = settings.API_PREFIX

app.include_router(client_router, prefix=API_PREFIX)
app.include_router(invoice_router, prefix=API_PREFIX)


@app.get(f"{API_PREFIX}/health")
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}

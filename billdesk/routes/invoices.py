# billdesk/routes/invoices.py
from functools import lru_cache
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from billdesk.core.access import RequestContext
from billdesk.core.auth_dependencies import require_permission
from billdesk.core.config import settings
from billdesk.core.database import SessionLocal, get_db
from billdesk.core.permissions import Permissions
from billdesk.schemas.common import PaginationParams, PaginatedResponse
from billdesk.schemas.invoices import (
    InvoiceCreate,
    InvoiceDocumentResponse,
    InvoiceFilter,
    InvoiceResponse,
    InvoiceStatusUpdate,
)
from billdesk.services.document_service import BackgroundTaskQueue, InvoiceDocumentService
from billdesk.services.invoice_service import InvoiceService
from billdesk.services.storage import LocalObjectStore

invoice_router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"]
)


@lru_cache()
def get_document_service() -> InvoiceDocumentService:
    return InvoiceDocumentService(SessionLocal, LocalObjectStore(settings.DOCUMENT_STORAGE_DIR))


# -----------------------------
# GENERATE INVOICE
# -----------------------------
@invoice_router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_invoice(
    data: InvoiceCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_permission(Permissions.GENERATE_INVOICE)),
):
    return InvoiceService.create(db, data.client_id, data, context=context)


@invoice_router.get(
    "",
    response_model=PaginatedResponse[InvoiceResponse],
    dependencies=[Depends(require_permission(Permissions.READ_INVOICE))]
)
def list_invoices(
    filters: InvoiceFilter = Depends(),
    pagination: PaginationParams = Depends(),
    db: Session = Depends(get_db),
):
    total, items = InvoiceService.list(db, filters, pagination)
    return {
        "total": total,
        "page": pagination.page,
        "page_size": pagination.page_size,
        "items": items,
    }


@invoice_router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    dependencies=[Depends(require_permission(Permissions.READ_INVOICE))]
)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
):
    return InvoiceService.get(db, invoice_id)


# -----------------------------
# CHANGE STATUS
# -----------------------------
@invoice_router.patch(
    "/{invoice_id}/status",
    response_model=InvoiceResponse,
)
def change_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    documents: InvoiceDocumentService = Depends(get_document_service),
    context: RequestContext = Depends(require_permission(Permissions.UPDATE_INVOICE_STATUS)),
):
    """
    Optimistic update: `version` must match the invoice's current version,
    otherwise 409. Completing an invoice queues its PDF.
    """
    invoice, needs_document = InvoiceService.change_status(
        db=db,
        invoice_id=invoice_id,
        new_status=data.status,
        expected_version=data.version,
        context=context,
    )
    if needs_document:
        documents.schedule(db, invoice, BackgroundTaskQueue(background_tasks))
    return invoice


@invoice_router.get(
    "/{invoice_id}/document",
    response_model=InvoiceDocumentResponse,
    dependencies=[Depends(require_permission(Permissions.READ_INVOICE_DOCUMENT))]
)
def get_invoice_document(
    invoice_id: int,
    db: Session = Depends(get_db),
):
    InvoiceService.get(db, invoice_id)
    return InvoiceDocumentService.latest(db, invoice_id)

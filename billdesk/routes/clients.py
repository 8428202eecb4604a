# billdesk/routes/clients.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from billdesk.core.access import RequestContext
from billdesk.core.auth_dependencies import require_permission
from billdesk.core.database import get_db
from billdesk.core.permissions import Permissions
from billdesk.schemas.clients import ClientCreate, ClientResponse
from billdesk.schemas.common import PaginationParams, PaginatedResponse
from billdesk.schemas.invoices import InvoiceAmount, InvoiceResponse
from billdesk.services.client_service import ClientService
from billdesk.services.invoice_service import InvoiceService

client_router = APIRouter(
    prefix="/clients",
    tags=["Clients"]
)


@client_router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_client(
    data: ClientCreate,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_permission(Permissions.CREATE_CLIENT)),
):
    return ClientService.create(db, data, context=context)


@client_router.get(
    "",
    response_model=PaginatedResponse[ClientResponse],
    dependencies=[Depends(require_permission(Permissions.READ_CLIENT))]
)
def list_clients(
    pagination: PaginationParams = Depends(),
    db: Session = Depends(get_db),
):
    total, items = ClientService.list(db, pagination)
    return {
        "total": total,
        "page": pagination.page,
        "page_size": pagination.page_size,
        "items": items,
    }


@client_router.get(
    "/{client_id}",
    response_model=ClientResponse,
    dependencies=[Depends(require_permission(Permissions.READ_CLIENT))]
)
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
):
    return ClientService.get(db, client_id)


@client_router.get(
    "/{client_id}/invoices",
    response_model=list[InvoiceResponse],
    dependencies=[Depends(require_permission(Permissions.READ_INVOICE))]
)
def list_client_invoices(
    client_id: int,
    db: Session = Depends(get_db),
):
    return InvoiceService.list_by_client(db, client_id)


@client_router.post(
    "/{client_id}/invoices",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_client_invoice(
    client_id: int,
    data: InvoiceAmount,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(require_permission(Permissions.GENERATE_INVOICE)),
):
    return InvoiceService.create(db, client_id, data, context=context)

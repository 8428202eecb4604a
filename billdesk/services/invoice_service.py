# billdesk/services/invoice_service.py
import logging
import secrets
from datetime import datetime, timezone
from fastapi import status, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from billdesk.core.access import RequestContext
from billdesk.core.audit import audit_log
from billdesk.core.config import settings
from billdesk.models.clients import Client, Invoice, InvoiceStatus
from billdesk.schemas.common import PaginationParams
from billdesk.schemas.invoices import InvoiceAmount, InvoiceFilter

logger = logging.getLogger(__name__)

# status -> statuses it may move to
ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.PENDING: frozenset({InvoiceStatus.COMPLETED, InvoiceStatus.CANCELLED}),
    InvoiceStatus.COMPLETED: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


def new_invoice_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"INV-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"


class InvoiceService:

    @staticmethod
    def create(db: Session, client_id: int, data: InvoiceAmount, context: RequestContext) -> Invoice:
        client = db.query(Client).filter_by(id=client_id).first()
        if not client:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Client not found")

        invoice = Invoice(
            number=new_invoice_number(),
            client_id=client.id,
            amount=data.amount,
            currency=data.currency or settings.DEFAULT_CURRENCY,
            status=InvoiceStatus.PENDING,
        )
        try:
            db.add(invoice)
            db.commit()
            db.refresh(invoice)
        except Exception:
            db.rollback()
            logger.exception("Failed to create invoice for client %s", client_id)
            raise

        audit_log(
            "CREATE", "Invoice", invoice.id, context.actor_id,
            {"client_id": client_id, "amount": str(data.amount)},
            ip_address=context.ip_address,
        )
        return invoice

    @staticmethod
    def get(db: Session, invoice_id: int) -> Invoice:
        invoice = db.query(Invoice).filter_by(id=invoice_id).first()
        if not invoice:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Invoice not found")
        return invoice

    @staticmethod
    def list_by_client(db: Session, client_id: int):
        if not db.query(Client.id).filter_by(id=client_id).first():
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Client not found")
        return (
            db.query(Invoice)
            .filter_by(client_id=client_id)
            .order_by(Invoice.id.desc())
            .all()
        )

    @staticmethod
    def list(db: Session, filters: InvoiceFilter, pagination: PaginationParams):
        query = db.query(Invoice)

        if filters.status is not None:
            query = query.filter(Invoice.status == filters.status)
        if filters.client_id is not None:
            query = query.filter(Invoice.client_id == filters.client_id)
        if filters.created_from is not None:
            query = query.filter(Invoice.created_at >= filters.created_from)
        if filters.created_to is not None:
            query = query.filter(Invoice.created_at <= filters.created_to)

        total = query.count()
        items = (
            query
            .order_by(Invoice.id.desc())
            .offset(pagination.offset)
            .limit(pagination.page_size)
            .all()
        )
        return total, items

    @staticmethod
    def change_status(
        db: Session,
        invoice_id: int,
        new_status: InvoiceStatus,
        expected_version: int,
        context: RequestContext,
    ) -> tuple[Invoice, bool]:
        """
        Move an invoice to `new_status` if the caller saw the current version.

        Returns the invoice and whether a document has to be generated
        (PENDING -> COMPLETED). A concurrent writer that committed first
        bumps the version, so the loser gets 409 and must re-read.
        """
        invoice = InvoiceService.get(db, invoice_id)

        if invoice.version != expected_version:
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                detail=f"Invoice was modified (current version {invoice.version})",
            )

        previous = invoice.status
        if new_status not in ALLOWED_TRANSITIONS[previous]:
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                detail=f"Cannot move invoice from {previous.value} to {new_status.value}",
            )

        invoice.status = new_status
        try:
            db.commit()
        except StaleDataError:
            db.rollback()
            logger.warning("Concurrent update on invoice %s", invoice_id)
            raise HTTPException(status.HTTP_409_CONFLICT, detail="Invoice was modified concurrently")
        except Exception:
            db.rollback()
            logger.exception("Failed to update invoice %s", invoice_id)
            raise
        db.refresh(invoice)

        audit_log(
            "STATUS CHANGE", "Invoice", invoice.id, context.actor_id,
            {"from": previous.value, "to": new_status.value, "version": invoice.version},
            ip_address=context.ip_address,
        )
        needs_document = previous == InvoiceStatus.PENDING and new_status == InvoiceStatus.COMPLETED
        return invoice, needs_document

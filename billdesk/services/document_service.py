# billdesk/services/document_service.py
"""
Invoice document generation.

Completing an invoice submits a job to a `DocumentQueue`. The queue is best
effort: jobs run independently of the request, with no ordering or
exactly-once guarantee. Idempotency comes from the one-row-per-version
constraint on `invoice_documents`.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from billdesk.core.audit import audit_log
from billdesk.models.clients import Invoice
from billdesk.models.documents import DocumentStatus, InvoiceDocument
from billdesk.services.pdf import render_invoice_pdf
from billdesk.services.storage import ObjectStore

logger = logging.getLogger(__name__)


class DocumentQueue(Protocol):
    def submit(self, job: Callable, *args) -> None: ...


class BackgroundTaskQueue:
    """Runs jobs after the response has been sent."""

    def __init__(self, background_tasks: BackgroundTasks):
        self.background_tasks = background_tasks

    def submit(self, job: Callable, *args) -> None:
        self.background_tasks.add_task(job, *args)


class InlineQueue:
    def submit(self, job: Callable, *args) -> None:
        job(*args)


def document_key(invoice: Invoice) -> str:
    return f"invoices/{invoice.client_id}/{invoice.number}-v{invoice.version}.pdf"


class InvoiceDocumentService:

    def __init__(
        self,
        session_factory: sessionmaker,
        store: ObjectStore,
        renderer: Callable[[Invoice], bytes] = render_invoice_pdf,
    ):
        self.session_factory = session_factory
        self.store = store
        self.renderer = renderer

    def request(self, db: Session, invoice: Invoice) -> InvoiceDocument:
        """Create the document row for the invoice's current version, or return the existing one."""
        existing = (
            db.query(InvoiceDocument)
            .filter_by(invoice_id=invoice.id, invoice_version=invoice.version)
            .first()
        )
        if existing:
            return existing

        document = InvoiceDocument(
            invoice_id=invoice.id,
            invoice_version=invoice.version,
            status=DocumentStatus.QUEUED,
            attempts=0,
        )
        try:
            db.add(document)
            db.commit()
        except IntegrityError:
            # lost the race against another request for the same version
            db.rollback()
            return (
                db.query(InvoiceDocument)
                .filter_by(invoice_id=invoice.id, invoice_version=invoice.version)
                .one()
            )
        db.refresh(document)
        return document

    def schedule(self, db: Session, invoice: Invoice, queue: DocumentQueue) -> InvoiceDocument:
        document = self.request(db, invoice)
        if document.status != DocumentStatus.RENDERED:
            queue.submit(self.generate, document.id)
            logger.info("Queued document %s for invoice %s v%s", document.id, invoice.id, invoice.version)
        return document

    def generate(self, document_id: int) -> None:
        """Render and store one document. Failures are recorded on the row, not raised."""
        db = self.session_factory()
        try:
            document = db.query(InvoiceDocument).filter_by(id=document_id).first()
            if not document:
                logger.error("Document %s vanished before generation", document_id)
                return
            if document.status == DocumentStatus.RENDERED:
                return

            document.attempts += 1
            invoice = document.invoice
            try:
                data = self.renderer(invoice)
                key = self.store.put(document_key(invoice), data, "application/pdf")
            except Exception as e:
                logger.exception("Document generation failed for invoice %s", invoice.id)
                document.status = DocumentStatus.FAILED
                document.error = str(e)[:1000]
            else:
                document.status = DocumentStatus.RENDERED
                document.storage_key = key
                document.error = None
                audit_log("RENDER", "InvoiceDocument", document.id, None, {"key": key})
            document.completed_at = datetime.now(timezone.utc)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Could not record outcome of document %s", document_id)
        finally:
            db.close()

    @staticmethod
    def latest(db: Session, invoice_id: int) -> InvoiceDocument:
        document = (
            db.query(InvoiceDocument)
            .filter_by(invoice_id=invoice_id)
            .order_by(InvoiceDocument.id.desc())
            .first()
        )
        if not document:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="No document generated for this invoice")
        return document

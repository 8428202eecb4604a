# billdesk/models/documents.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SAEnum, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from billdesk.core.database import Base
import enum

__all__ = ["DocumentStatus", "InvoiceDocument"]


class DocumentStatus(str, enum.Enum):
    QUEUED = "QUEUED"
    RENDERED = "RENDERED"
    FAILED = "FAILED"


class InvoiceDocument(Base):
    __tablename__ = "invoice_documents"
    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    invoice_version = Column(Integer, nullable=False)
    status = Column(
        SAEnum(DocumentStatus, name="document_status_enum", create_constraint=True),
        nullable=False,
        default=DocumentStatus.QUEUED,
    )
    storage_key = Column(String(255))
    error = Column(Text)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True))

    invoice = relationship("Invoice", back_populates="documents")

    __table_args__ = (
        UniqueConstraint("invoice_id", "invoice_version", name="uq_invoice_documents_invoice_version"),
    )

# billdesk/models/clients.py
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum as SAEnum, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from billdesk.core.database import Base
import enum

__all__ = ["InvoiceStatus", "Client", "Invoice"]


class InvoiceStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Client(Base):
    __tablename__ = "clients"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    phone = Column(String(40))
    address = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    # relationships
    invoices = relationship(
        "Invoice",
        back_populates="client",
        order_by="Invoice.id.desc()",
    )

    def __repr__(self):
        return f"<Client {self.id} {self.name}>"


class Invoice(Base):
    __tablename__ = "invoices"
    id = Column(Integer, primary_key=True)
    number = Column(String(32), unique=True, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(
        SAEnum(InvoiceStatus, name="invoice_status_enum", create_constraint=True),
        nullable=False,
        default=InvoiceStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    version = Column(Integer, nullable=False)
    # relationships
    client = relationship("Client", back_populates="invoices")
    documents = relationship(
        "InvoiceDocument",
        back_populates="invoice",
        order_by="InvoiceDocument.id",
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
    )
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Invoice {self.number} ({self.status})>"

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from billdesk.models.clients import InvoiceStatus
from billdesk.models.documents import DocumentStatus


# ---- INVOICES ----
class InvoiceAmount(BaseModel):
    amount: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @field_validator("currency")
    def upper_currency(cls, value):
        return value.upper() if value else value


class InvoiceCreate(InvoiceAmount):
    client_id: int = Field(..., description="Billed client")


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus
    version: int = Field(..., ge=1, description="Version the caller last read")


class InvoiceResponse(BaseModel):
    id: int
    number: str
    client_id: int
    amount: Decimal
    currency: str
    status: InvoiceStatus
    created_at: datetime
    updated_at: Optional[datetime]
    version: int

    model_config = ConfigDict(from_attributes=True)


class InvoiceFilter(BaseModel):
    status: Optional[InvoiceStatus] = None
    client_id: Optional[int] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None


# ---- DOCUMENTS ----
class InvoiceDocumentResponse(BaseModel):
    id: int
    invoice_id: int
    invoice_version: int
    status: DocumentStatus
    storage_key: Optional[str]
    error: Optional[str]
    attempts: int
    created_at: datetime
    completed_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

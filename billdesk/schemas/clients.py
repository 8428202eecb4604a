from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, EmailStr


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: Optional[EmailStr] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=40)
    address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ClientCreate(ClientBase):
    pass


class ClientResponse(ClientBase):
    id: int
    created_at: datetime

"""Serial number schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from wms.models.serialization import SerialStatus
from wms.schemas.base import BaseResponseSchema, BaseCreateSchema


class SerialNumberCreate(BaseCreateSchema):
    """One unit to register."""
    product_id: UUID
    serial_number: str = Field(..., min_length=1, max_length=100)
    variant_id: Optional[UUID] = None
    warehouse_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    status: SerialStatus = SerialStatus.AVAILABLE
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    supplier_batch: Optional[str] = Field(None, max_length=50)
    internal_batch: Optional[str] = Field(None, max_length=50)
    cost_price: Optional[Decimal] = None
    selling_price: Optional[Decimal] = None
    current_location: Optional[str] = Field(None, max_length=100)


class SerialNumberBulkCreate(BaseCreateSchema):
    serial_numbers: List[SerialNumberCreate] = Field(..., min_length=1)


class SerialStatusUpdate(BaseCreateSchema):
    """Set one status on a batch of serials, addressed by serial string."""
    serial_numbers: List[str] = Field(..., min_length=1)
    status: SerialStatus
    transaction_id: Optional[UUID] = None


class SerialNumberResponse(BaseResponseSchema):
    id: UUID
    tenant_id: UUID
    product_id: UUID
    variant_id: Optional[UUID] = None
    serial_number: str
    warehouse_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    status: SerialStatus
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    supplier_batch: Optional[str] = None
    internal_batch: Optional[str] = None
    cost_price: Optional[Decimal] = None
    selling_price: Optional[Decimal] = None
    current_location: Optional[str] = None
    last_transaction_id: Optional[UUID] = None
    updated_at: datetime


class SerialOperationResponse(BaseModel):
    success: bool
    count: int = 0
    message: str = ""
    # UNKNOWN_SERIAL, INVALID_TRANSITION or STORE_ERROR when success is False
    error_code: Optional[str] = None

"""Stock reservation schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from wms.models.reservation import ReservationStatus
from wms.schemas.base import BaseResponseSchema, BaseCreateSchema


class ReservationRequest(BaseCreateSchema):
    """Request to hold stock for a reference document."""
    product_id: UUID
    warehouse_id: UUID
    quantity: Decimal = Field(..., gt=0)
    reference_type: str = Field(..., max_length=50)
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    reference_id: Optional[UUID] = None
    reference_number: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[date] = None
    notes: Optional[str] = None


class ReservationResponse(BaseResponseSchema):
    id: UUID
    tenant_id: UUID
    product_id: UUID
    variant_id: Optional[UUID] = None
    warehouse_id: UUID
    bin_id: Optional[UUID] = None
    reserved_quantity: Decimal
    reference_type: str
    reference_id: Optional[UUID] = None
    reference_number: Optional[str] = None
    reserved_by: Optional[UUID] = None
    reservation_date: date
    expiry_date: Optional[date] = None
    status: ReservationStatus
    released_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


class ReservationCapacity(BaseModel):
    """How a requested reservation compares with current stock."""
    current_stock: Decimal
    reserved_quantity: Decimal
    requested_quantity: Decimal
    remaining_after: Decimal

    @property
    def is_over_reserved(self) -> bool:
        return self.remaining_after < 0

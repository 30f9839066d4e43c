"""Pick list schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from wms.models.picklist import PickListStatus, PickPriority, PickLineStatus
from wms.schemas.base import BaseResponseSchema, BaseCreateSchema


class PickListItemRequest(BaseCreateSchema):
    """One line to pick. Order in the request becomes the pick sequence."""
    product_id: UUID
    warehouse_id: UUID
    required_quantity: Decimal = Field(..., gt=0)
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    uom_id: Optional[UUID] = None
    pick_instructions: Optional[str] = None


class PickListGenerateRequest(BaseCreateSchema):
    warehouse_id: UUID
    items: List[PickListItemRequest] = Field(..., min_length=1)
    priority_level: PickPriority = PickPriority.NORMAL
    special_instructions: Optional[str] = None


class PickQuantityUpdate(BaseCreateSchema):
    picked_quantity: Decimal = Field(..., ge=0)


class PickListDetailResponse(BaseResponseSchema):
    id: UUID
    pick_list_id: UUID
    product_id: UUID
    variant_id: Optional[UUID] = None
    warehouse_id: UUID
    bin_id: Optional[UUID] = None
    required_quantity: Decimal
    picked_quantity: Decimal
    uom_id: Optional[UUID] = None
    pick_sequence: int
    pick_instructions: Optional[str] = None
    status: PickLineStatus
    notes: Optional[str] = None


class PickListResponse(BaseResponseSchema):
    id: UUID
    tenant_id: UUID
    pick_list_number: str
    pick_list_date: date
    warehouse_id: UUID
    picker_id: Optional[UUID] = None
    status: PickListStatus
    priority_level: PickPriority
    special_instructions: Optional[str] = None
    created_at: datetime

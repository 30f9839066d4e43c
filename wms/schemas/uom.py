"""Unit-of-measure conversion schemas."""
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from wms.schemas.base import BaseCreateSchema


class UOMConversion(BaseModel):
    """Factor relating two units for one product: ``to = from * factor``."""
    from_uom_id: UUID
    to_uom_id: UUID
    conversion_factor: Decimal = Field(..., gt=0)
    product_id: Optional[UUID] = None


class UOMConvertRequest(BaseCreateSchema):
    """Convert a quantity using a product's configured units."""
    product_id: UUID
    quantity: Decimal
    from_uom_id: UUID
    to_uom_id: UUID


class UOMConversionResult(BaseModel):
    """
    Outcome of a conversion.

    ``is_converted`` is False when no conversion path existed and the input
    quantity was passed through unchanged.
    """
    quantity: Decimal
    from_uom_id: UUID
    to_uom_id: UUID
    is_converted: bool


class UOMConversionListResponse(BaseModel):
    product_id: UUID
    conversions: List[UOMConversion]

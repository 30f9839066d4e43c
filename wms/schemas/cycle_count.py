"""Physical count schemas."""
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from wms.schemas.base import BaseCreateSchema
from wms.schemas.stock import MovementResult


class AdjustmentDecision(str, Enum):
    """What to do with a counted line."""
    NO_CHANGE = "NO_CHANGE"
    ADJUST_TO_COUNT = "ADJUST_TO_COUNT"
    INVESTIGATE = "INVESTIGATE"


class CountLine(BaseCreateSchema):
    product_id: UUID
    system_quantity: Decimal = Field(..., ge=0)
    counted_quantity: Decimal = Field(..., ge=0)
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    reason_for_variance: Optional[str] = None
    # Overrides the automatic decision, e.g. after an investigation
    adjustment_decision: Optional[AdjustmentDecision] = None


class CountLineEvaluation(BaseModel):
    product_id: UUID
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    system_quantity: Decimal
    counted_quantity: Decimal
    variance_quantity: Decimal
    adjustment_decision: AdjustmentDecision
    adjustment_quantity: Decimal


class CountAdjustmentRequest(BaseCreateSchema):
    warehouse_id: UUID
    lines: List[CountLine] = Field(..., min_length=1)
    reference_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class CountAdjustmentResult(BaseModel):
    """Outcome of posting a count: one movement per direction that had lines."""
    success: bool
    evaluations: List[CountLineEvaluation] = Field(default_factory=list)
    inbound: Optional[MovementResult] = None
    outbound: Optional[MovementResult] = None
    message: str = ""

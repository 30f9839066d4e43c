"""Physical count endpoints."""
from typing import List

from fastapi import APIRouter, HTTPException, status

from wms.api.deps import DB, Context
from wms.schemas.cycle_count import (
    CountLine,
    CountLineEvaluation,
    CountAdjustmentRequest,
    CountAdjustmentResult,
)
from wms.services.cycle_count_service import CycleCountService

router = APIRouter()


@router.post("/evaluate", response_model=List[CountLineEvaluation])
async def evaluate_count(lines: List[CountLine], db: DB, context: Context):
    """Variance and decision per counted line. Nothing is written."""
    return CycleCountService(db, context).evaluate(lines)


@router.post("/adjustments", response_model=CountAdjustmentResult)
async def post_count_adjustments(data: CountAdjustmentRequest, db: DB, context: Context):
    result = await CycleCountService(db, context).post_count_adjustments(data)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=result.model_dump(mode="json"),
        )
    return result

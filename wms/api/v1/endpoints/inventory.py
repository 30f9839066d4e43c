"""
Inventory API endpoints.

- Stock position (derived from transaction details)
- Point-in-time validation of a requested movement
- Atomic movement recording
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from wms.api.deps import DB, Context
from wms.schemas.stock import (
    StockPosition,
    StockValidationRequest,
    StockValidationResult,
    MovementRequest,
    MovementResult,
)
from wms.services.inventory_service import InventoryService

router = APIRouter()

MOVEMENT_ERROR_STATUS = {
    "INSUFFICIENT_STOCK": status.HTTP_409_CONFLICT,
    "UNKNOWN_PRODUCT": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_RESERVATION": status.HTTP_409_CONFLICT,
    "STORE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_movement(result: MovementResult) -> None:
    """Map a failed movement to an HTTP error carrying the result body."""
    if result.success:
        return
    raise HTTPException(
        status_code=MOVEMENT_ERROR_STATUS.get(result.error_code, status.HTTP_400_BAD_REQUEST),
        detail=result.model_dump(mode="json"),
    )


@router.get("/stock-position", response_model=StockPosition)
async def get_stock_position(
    db: DB,
    context: Context,
    product_id: UUID = Query(...),
    warehouse_id: UUID = Query(...),
    variant_id: Optional[UUID] = Query(None),
    bin_id: Optional[UUID] = Query(None),
):
    """Current, reserved, held and available stock for a position."""
    service = InventoryService(db, context)
    position = await service.get_stock_position(product_id, warehouse_id, variant_id, bin_id)
    if position is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to fetch current stock position",
        )
    return position


@router.post("/validate", response_model=StockValidationResult)
async def validate_stock_transaction(data: StockValidationRequest, db: DB, context: Context):
    """
    Check a movement against current stock without writing anything.

    The answer can be stale by the time a movement is recorded; use
    POST /movements to validate and write atomically.
    """
    service = InventoryService(db, context)
    return await service.validate_stock_transaction(
        product_id=data.product_id,
        warehouse_id=data.warehouse_id,
        quantity=data.quantity,
        transaction_type=data.transaction_type,
        variant_id=data.variant_id,
        bin_id=data.bin_id,
    )


@router.post("/movements", response_model=MovementResult, status_code=status.HTTP_201_CREATED)
async def record_movement(data: MovementRequest, db: DB, context: Context):
    """Validate and write a stock movement in one transaction."""
    service = InventoryService(db, context)
    result = await service.record_movement(data)
    raise_for_movement(result)
    return result

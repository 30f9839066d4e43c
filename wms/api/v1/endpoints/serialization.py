"""Serial number endpoints."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from wms.api.deps import DB, Context
from wms.schemas.serialization import (
    SerialNumberBulkCreate,
    SerialStatusUpdate,
    SerialNumberResponse,
    SerialOperationResponse,
)
from wms.services.serialization import SerialNumberService

router = APIRouter()

SERIAL_ERROR_STATUS = {
    "UNKNOWN_SERIAL": status.HTTP_404_NOT_FOUND,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "STORE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
}


@router.get("/available", response_model=List[SerialNumberResponse])
async def get_available_serial_numbers(
    db: DB,
    context: Context,
    product_id: UUID = Query(...),
    warehouse_id: UUID = Query(...),
    variant_id: Optional[UUID] = Query(None),
):
    return await SerialNumberService(db, context).get_available_serial_numbers(
        product_id, warehouse_id, variant_id
    )


@router.post("", response_model=SerialOperationResponse, status_code=status.HTTP_201_CREATED)
async def create_serial_numbers(data: SerialNumberBulkCreate, db: DB, context: Context):
    """Register a batch of serial numbers. Duplicates reject the whole batch."""
    if not await SerialNumberService(db, context).create_serial_numbers(data.serial_numbers):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Serial numbers could not be registered",
        )
    return SerialOperationResponse(
        success=True,
        count=len(data.serial_numbers),
        message="Serial numbers registered",
    )


@router.post("/status", response_model=SerialOperationResponse)
async def update_serial_number_status(data: SerialStatusUpdate, db: DB, context: Context):
    """Move a batch of serials to one status. All or none."""
    outcome = await SerialNumberService(db, context).change_serial_status(
        data.serial_numbers, data.status, data.transaction_id
    )
    if not outcome.success:
        raise HTTPException(
            status_code=SERIAL_ERROR_STATUS.get(outcome.error_code, status.HTTP_400_BAD_REQUEST),
            detail=outcome.message,
        )
    return outcome

"""Pick list API endpoints for warehouse picking operations."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from wms.api.deps import DB, Context
from wms.schemas.picklist import (
    PickListGenerateRequest,
    PickListResponse,
    PickListDetailResponse,
    PickQuantityUpdate,
)
from wms.services.picklist_service import PickListService, CLOSED_LINE_STATUSES

router = APIRouter()


@router.post("", response_model=PickListResponse, status_code=status.HTTP_201_CREATED)
async def generate_pick_list(data: PickListGenerateRequest, db: DB, context: Context):
    """Create a pick list; lines are sequenced in request order."""
    pick_list = await PickListService(db, context).generate_pick_list(data)
    if pick_list is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pick list could not be generated",
        )
    return pick_list


@router.get("/{pick_list_id}/details", response_model=List[PickListDetailResponse])
async def get_pick_list_details(pick_list_id: UUID, db: DB, context: Context):
    return await PickListService(db, context).get_pick_list_details(pick_list_id)


@router.patch("/details/{detail_id}")
async def update_pick_quantity(
    detail_id: UUID,
    data: PickQuantityUpdate,
    db: DB,
    context: Context,
):
    """Record the quantity picked so far."""
    service = PickListService(db, context)
    line = await service.get_pick_line(detail_id)
    if line is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pick line not found",
        )
    if line.status in CLOSED_LINE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Pick line is closed ({line.status})",
        )
    if not await service.update_pick_quantity(detail_id, data.picked_quantity):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Pick quantity could not be recorded",
        )
    return {"success": True, "detail_id": str(detail_id)}


@router.post("/details/{detail_id}/close", response_model=PickListDetailResponse)
async def close_pick_line(detail_id: UUID, db: DB, context: Context):
    """Close a line as COMPLETED or SHORT against its required quantity."""
    detail = await PickListService(db, context).close_pick_line(detail_id)
    if detail is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pick line not found",
        )
    return detail

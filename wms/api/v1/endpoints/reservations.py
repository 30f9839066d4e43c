"""Stock reservation endpoints."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from wms.api.deps import DB, Context
from wms.schemas.reservation import ReservationRequest, ReservationResponse
from wms.services.stock_reservation_service import StockReservationService

router = APIRouter()


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(data: ReservationRequest, db: DB, context: Context):
    reservation = await StockReservationService(db, context).create_reservation(data)
    if reservation is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Reservation could not be created",
        )
    return reservation


async def _close_reservation(service: StockReservationService, reservation_id: UUID, fulfill: bool):
    if await service.get_reservation(reservation_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reservation {reservation_id} not found",
        )
    close = service.fulfill_reservation if fulfill else service.release_reservation
    if not await close(reservation_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Reservation {reservation_id} is not active",
        )
    return {"success": True, "reservation_id": str(reservation_id)}


@router.post("/{reservation_id}/release")
async def release_reservation(reservation_id: UUID, db: DB, context: Context):
    """Release a reservation. Releasing an already released reservation succeeds."""
    return await _close_reservation(StockReservationService(db, context), reservation_id, fulfill=False)


@router.post("/{reservation_id}/fulfill")
async def fulfill_reservation(reservation_id: UUID, db: DB, context: Context):
    return await _close_reservation(StockReservationService(db, context), reservation_id, fulfill=True)


@router.get("/active", response_model=List[ReservationResponse])
async def get_active_reservations(
    db: DB,
    context: Context,
    product_id: UUID = Query(...),
    warehouse_id: UUID = Query(...),
    variant_id: Optional[UUID] = Query(None),
):
    return await StockReservationService(db, context).get_active_reservations(
        product_id, warehouse_id, variant_id
    )

"""
Quality Control API Endpoints.

- QC holds (create, list active, release, reject)
- Damage assessments
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from wms.api.deps import DB, Context
from wms.schemas.quality_control import (
    QCHoldCreate,
    QCHoldResolve,
    QCHoldResponse,
    DamageAssessmentCreate,
    DamageAssessmentResponse,
)
from wms.services.quality_control_service import QualityControlService

router = APIRouter()


# ============================================================================
# QC HOLDS
# ============================================================================

@router.post("/holds", response_model=QCHoldResponse, status_code=status.HTTP_201_CREATED)
async def create_qc_hold(data: QCHoldCreate, db: DB, context: Context):
    hold = await QualityControlService(db, context).create_qc_hold(data)
    if hold is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="QC hold could not be created",
        )
    return hold


@router.get("/holds/active", response_model=List[QCHoldResponse])
async def get_active_qc_holds(
    db: DB,
    context: Context,
    product_id: UUID = Query(...),
    warehouse_id: UUID = Query(...),
):
    return await QualityControlService(db, context).get_active_qc_holds(product_id, warehouse_id)


async def _resolve_hold(service: QualityControlService, hold_id: UUID, outcome: str, notes):
    if await service.get_hold(hold_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"QC hold {hold_id} not found",
        )
    resolve = service.release_qc_hold if outcome == "release" else service.reject_qc_hold
    if not await resolve(hold_id, notes):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"QC hold {hold_id} is already resolved",
        )
    return {"success": True, "hold_id": str(hold_id)}


@router.post("/holds/{hold_id}/release")
async def release_qc_hold(
    hold_id: UUID,
    db: DB,
    context: Context,
    data: Optional[QCHoldResolve] = None,
):
    return await _resolve_hold(
        QualityControlService(db, context), hold_id, "release", data.notes if data else None
    )


@router.post("/holds/{hold_id}/reject")
async def reject_qc_hold(
    hold_id: UUID,
    db: DB,
    context: Context,
    data: Optional[QCHoldResolve] = None,
):
    return await _resolve_hold(
        QualityControlService(db, context), hold_id, "reject", data.notes if data else None
    )


# ============================================================================
# DAMAGE ASSESSMENTS
# ============================================================================

@router.post(
    "/damage-assessments",
    response_model=DamageAssessmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_damage_assessment(data: DamageAssessmentCreate, db: DB, context: Context):
    assessment = await QualityControlService(db, context).create_damage_assessment(data)
    if assessment is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Damage assessment could not be recorded",
        )
    return assessment


@router.get("/damage-assessments", response_model=List[DamageAssessmentResponse])
async def get_damage_assessments(
    db: DB,
    context: Context,
    warehouse_id: UUID = Query(...),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
):
    return await QualityControlService(db, context).get_damage_assessments(
        warehouse_id, from_date, to_date
    )

"""
Quality Control Schemas.

Pydantic schemas for QC holds and damage assessments.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field

from wms.models.quality_control import HoldStatus, DamageSeverity, DamageAction
from wms.schemas.base import BaseResponseSchema, BaseCreateSchema


# ============================================================================
# QC HOLD SCHEMAS
# ============================================================================

class QCHoldCreate(BaseCreateSchema):
    """Schema for creating QC hold."""
    product_id: UUID
    warehouse_id: UUID
    hold_quantity: Decimal = Field(..., gt=0)
    hold_reason: str = Field(..., min_length=1, max_length=255)
    variant_id: Optional[UUID] = None
    bin_id: Optional[UUID] = None
    serial_number: Optional[str] = Field(None, max_length=100)
    hold_date: Optional[date] = None
    inspector_id: Optional[UUID] = None
    inspection_notes: Optional[str] = None
    related_transaction_id: Optional[UUID] = None


class QCHoldResolve(BaseCreateSchema):
    """Schema for releasing or rejecting a hold."""
    notes: Optional[str] = None


class QCHoldResponse(BaseResponseSchema):
    """Response schema for QC hold."""
    id: UUID
    tenant_id: UUID
    product_id: UUID
    variant_id: Optional[UUID] = None
    warehouse_id: UUID
    bin_id: Optional[UUID] = None
    serial_number: Optional[str] = None
    hold_quantity: Decimal
    hold_reason: str
    hold_date: date
    inspector_id: Optional[UUID] = None
    inspection_notes: Optional[str] = None
    status: HoldStatus
    release_date: Optional[date] = None
    released_by: Optional[UUID] = None
    release_notes: Optional[str] = None
    related_transaction_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


# ============================================================================
# DAMAGE ASSESSMENT SCHEMAS
# ============================================================================

class DamageAssessmentCreate(BaseCreateSchema):
    """Schema for recording damaged stock."""
    warehouse_id: UUID
    product_id: UUID
    damaged_quantity: Decimal = Field(..., gt=0)
    damage_type: str = Field(..., max_length=50)
    damage_severity: DamageSeverity
    assessment_date: date
    variant_id: Optional[UUID] = None
    serial_number: Optional[str] = Field(None, max_length=100)
    damage_description: Optional[str] = None
    estimated_loss_value: Optional[Decimal] = None
    action_taken: Optional[DamageAction] = None
    insurance_claim_number: Optional[str] = Field(None, max_length=50)
    related_transaction_id: Optional[UUID] = None


class DamageAssessmentResponse(BaseResponseSchema):
    id: UUID
    tenant_id: UUID
    warehouse_id: UUID
    product_id: UUID
    variant_id: Optional[UUID] = None
    serial_number: Optional[str] = None
    damaged_quantity: Decimal
    damage_type: str
    damage_severity: DamageSeverity
    damage_description: Optional[str] = None
    assessed_by: Optional[UUID] = None
    assessment_date: date
    estimated_loss_value: Optional[Decimal] = None
    action_taken: Optional[DamageAction] = None
    insurance_claim_number: Optional[str] = None
    related_transaction_id: Optional[UUID] = None
    created_at: datetime

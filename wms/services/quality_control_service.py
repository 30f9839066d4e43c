"""
Quality Control Service.

QC holds take a quantity out of sellable stock while it is inspected:
- create_qc_hold: ON_HOLD
- release_qc_hold: ON_HOLD -> RELEASED (stock becomes sellable again)
- reject_qc_hold: ON_HOLD -> REJECTED

RELEASED and REJECTED are terminal. Resolving an already-resolved hold
returns False and leaves its release stamp untouched.

Damage assessments record what was found damaged and what was done with it.
"""
import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wms.core.tenant_context import RequestContext
from wms.models.quality_control import (
    QualityControlHold,
    DamageAssessment,
    HoldStatus,
)
from wms.schemas.quality_control import QCHoldCreate, DamageAssessmentCreate

logger = logging.getLogger(__name__)


async def sum_active_holds(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    product_id: uuid.UUID,
    warehouse_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = None,
    bin_id: Optional[uuid.UUID] = None,
) -> Decimal:
    """Total quantity currently ON_HOLD. Raises on store errors."""
    query = select(func.coalesce(func.sum(QualityControlHold.hold_quantity), 0)).where(
        QualityControlHold.tenant_id == tenant_id,
        QualityControlHold.product_id == product_id,
        QualityControlHold.warehouse_id == warehouse_id,
        QualityControlHold.status == HoldStatus.ON_HOLD.value,
    )
    if variant_id:
        query = query.where(QualityControlHold.variant_id == variant_id)
    if bin_id:
        query = query.where(QualityControlHold.bin_id == bin_id)

    result = await db.execute(query)
    return Decimal(result.scalar() or 0)


class QualityControlService:
    """Service for QC holds and damage assessments."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    # ========================================================================
    # QC HOLDS
    # ========================================================================

    async def create_qc_hold(self, data: QCHoldCreate) -> Optional[QualityControlHold]:
        """Put a quantity on hold."""
        values = data.model_dump(exclude_none=True)
        values.setdefault("hold_date", date.today())

        hold = QualityControlHold(**self.context.stamp(
            status=HoldStatus.ON_HOLD.value,
            **values,
        ))
        try:
            self.db.add(hold)
            await self.db.commit()
            await self.db.refresh(hold)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating QC hold for product {data.product_id}: {e}")
            return None

        logger.info(
            f"QC hold {hold.id} on product {data.product_id} at warehouse {data.warehouse_id}: "
            f"{data.hold_reason}"
        )
        return hold

    async def get_hold(
        self, hold_id: uuid.UUID, for_update: bool = False
    ) -> Optional[QualityControlHold]:
        """Fetch one hold. Raises on store errors. ``for_update`` locks and reloads the row."""
        query = select(QualityControlHold).where(
            QualityControlHold.id == hold_id,
            QualityControlHold.tenant_id == self.context.tenant_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _resolve(
        self,
        hold_id: uuid.UUID,
        outcome: HoldStatus,
        notes: Optional[str],
    ) -> bool:
        try:
            # Locked so concurrent release/reject cannot both pass the status check
            hold = await self.get_hold(hold_id, for_update=True)
            if not hold:
                logger.warning(f"QC hold {hold_id} not found")
                return False

            if hold.status != HoldStatus.ON_HOLD.value:
                logger.warning(
                    f"QC hold {hold_id} already {hold.status}, cannot mark {outcome.value}"
                )
                return False

            hold.status = outcome.value
            hold.release_date = date.today()
            hold.release_notes = notes
            hold.released_by = self.context.actor_id
            hold.updated_by = self.context.actor_id
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error resolving QC hold {hold_id}: {e}")
            return False

        logger.info(f"QC hold {hold_id} {outcome.value}")
        return True

    async def release_qc_hold(self, hold_id: uuid.UUID, notes: Optional[str] = None) -> bool:
        """Release a hold back to sellable stock. False if unknown or already resolved."""
        return await self._resolve(hold_id, HoldStatus.RELEASED, notes)

    async def reject_qc_hold(self, hold_id: uuid.UUID, notes: Optional[str] = None) -> bool:
        """Reject held stock. False if unknown or already resolved."""
        return await self._resolve(hold_id, HoldStatus.REJECTED, notes)

    async def get_active_qc_holds(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
    ) -> List[QualityControlHold]:
        """Holds still ON_HOLD for a product at a warehouse, newest first."""
        try:
            result = await self.db.execute(
                select(QualityControlHold)
                .where(
                    QualityControlHold.tenant_id == self.context.tenant_id,
                    QualityControlHold.product_id == product_id,
                    QualityControlHold.warehouse_id == warehouse_id,
                    QualityControlHold.status == HoldStatus.ON_HOLD.value,
                )
                .order_by(QualityControlHold.hold_date.desc(), QualityControlHold.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching QC holds for product {product_id}: {e}")
            return []

    async def get_held_quantity(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        bin_id: Optional[uuid.UUID] = None,
    ) -> Optional[Decimal]:
        try:
            return await sum_active_holds(
                self.db, self.context.tenant_id, product_id, warehouse_id, variant_id, bin_id
            )
        except SQLAlchemyError as e:
            logger.error(f"Error summing QC holds for product {product_id}: {e}")
            return None

    # ========================================================================
    # DAMAGE ASSESSMENTS
    # ========================================================================

    async def create_damage_assessment(
        self, data: DamageAssessmentCreate
    ) -> Optional[DamageAssessment]:
        values = data.model_dump(exclude_none=True)
        values["damage_severity"] = data.damage_severity.value
        if data.action_taken:
            values["action_taken"] = data.action_taken.value

        assessment = DamageAssessment(**self.context.stamp(
            assessed_by=self.context.actor_id,
            **values,
        ))
        try:
            self.db.add(assessment)
            await self.db.commit()
            await self.db.refresh(assessment)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error recording damage for product {data.product_id}: {e}")
            return None

        logger.info(
            f"Damage assessment {assessment.id}: {data.damage_severity.value} "
            f"on product {data.product_id} at warehouse {data.warehouse_id}"
        )
        return assessment

    async def get_damage_assessments(
        self,
        warehouse_id: uuid.UUID,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[DamageAssessment]:
        """Assessments at a warehouse, newest first, optionally within a date range."""
        query = select(DamageAssessment).where(
            DamageAssessment.tenant_id == self.context.tenant_id,
            DamageAssessment.warehouse_id == warehouse_id,
        )
        if from_date:
            query = query.where(DamageAssessment.assessment_date >= from_date)
        if to_date:
            query = query.where(DamageAssessment.assessment_date <= to_date)

        try:
            result = await self.db.execute(
                query.order_by(DamageAssessment.assessment_date.desc(), DamageAssessment.created_at.desc())
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching damage assessments for warehouse {warehouse_id}: {e}")
            return []

"""Service for generating pick lists and recording picks."""
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wms.core.tenant_context import RequestContext
from wms.models.picklist import (
    PickList,
    PickListDetail,
    PickListStatus,
    PickLineStatus,
)
from wms.schemas.picklist import PickListGenerateRequest

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

CLOSED_LINE_STATUSES = frozenset({PickLineStatus.COMPLETED.value, PickLineStatus.SHORT.value})


class PickListService:
    """Service for pick list generation and picking."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    # ==================== PICK LIST NUMBER GENERATION ====================

    def generate_pick_list_number(self) -> str:
        """Generate unique pick list number: PL-YYYYMMDDHHMMSSffffff"""
        return f"PL-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S%f')}"

    # ==================== PICK LIST CRUD ====================

    async def generate_pick_list(self, request: PickListGenerateRequest) -> Optional[PickList]:
        """
        Create a pick list header and one line per requested item.

        Lines are sequenced in request order (1-based); no route optimization
        is applied. Every line starts PENDING with nothing picked.
        """
        pick_list = PickList(**self.context.stamp(
            pick_list_number=self.generate_pick_list_number(),
            warehouse_id=request.warehouse_id,
            status=PickListStatus.DRAFT.value,
            priority_level=request.priority_level.value,
            special_instructions=request.special_instructions,
        ))
        for sequence, item in enumerate(request.items, start=1):
            pick_list.details.append(PickListDetail(**self.context.stamp(
                product_id=item.product_id,
                variant_id=item.variant_id,
                warehouse_id=item.warehouse_id,
                bin_id=item.bin_id,
                required_quantity=item.required_quantity,
                picked_quantity=ZERO,
                uom_id=item.uom_id,
                pick_sequence=sequence,
                pick_instructions=item.pick_instructions,
                status=PickLineStatus.PENDING.value,
            )))

        try:
            self.db.add(pick_list)
            await self.db.commit()
            await self.db.refresh(pick_list)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error generating pick list for warehouse {request.warehouse_id}: {e}")
            return None

        logger.info(
            f"Generated pick list {pick_list.pick_list_number} with {len(request.items)} line(s)"
        )
        return pick_list

    async def get_pick_list_details(self, pick_list_id: uuid.UUID) -> List[PickListDetail]:
        """Lines of a pick list in pick sequence."""
        try:
            result = await self.db.execute(
                select(PickListDetail)
                .where(
                    PickListDetail.pick_list_id == pick_list_id,
                    PickListDetail.tenant_id == self.context.tenant_id,
                )
                .order_by(PickListDetail.pick_sequence)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching lines of pick list {pick_list_id}: {e}")
            return []

    async def get_pick_line(self, detail_id: uuid.UUID) -> Optional[PickListDetail]:
        """One pick line of the tenant. Raises on store errors."""
        result = await self.db.execute(
            select(PickListDetail).where(
                PickListDetail.id == detail_id,
                PickListDetail.tenant_id == self.context.tenant_id,
            )
        )
        return result.scalar_one_or_none()

    # ==================== PICKING ====================

    async def update_pick_quantity(self, detail_id: uuid.UUID, picked_quantity: Decimal) -> bool:
        """
        Record the quantity picked so far on a line.

        Status becomes PARTIAL when anything is picked, otherwise PENDING.
        Use close_pick_line to classify a line as COMPLETED or SHORT.
        """
        if picked_quantity < 0:
            return False

        try:
            detail = await self.get_pick_line(detail_id)
            if not detail:
                logger.warning(f"Pick line {detail_id} not found")
                return False
            if detail.status in CLOSED_LINE_STATUSES:
                logger.warning(f"Pick line {detail_id} is closed ({detail.status})")
                return False

            detail.picked_quantity = picked_quantity
            detail.status = (
                PickLineStatus.PARTIAL.value if picked_quantity > 0 else PickLineStatus.PENDING.value
            )
            detail.updated_by = self.context.actor_id
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating pick line {detail_id}: {e}")
            return False

        return True

    async def close_pick_line(
        self, detail_id: uuid.UUID, notes: Optional[str] = None
    ) -> Optional[PickListDetail]:
        """
        Close a line: COMPLETED when the required quantity was picked, SHORT otherwise.
        Returns None if the line does not exist.
        """
        try:
            detail = await self.get_pick_line(detail_id)
            if not detail:
                logger.warning(f"Pick line {detail_id} not found")
                return None

            picked = detail.picked_quantity or ZERO
            if picked >= detail.required_quantity:
                detail.status = PickLineStatus.COMPLETED.value
            else:
                detail.status = PickLineStatus.SHORT.value
                logger.warning(
                    f"Pick line {detail_id} short by {detail.required_quantity - picked}"
                )
            if notes:
                detail.notes = notes
            detail.updated_by = self.context.actor_id
            await self.db.commit()
            await self.db.refresh(detail)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error closing pick line {detail_id}: {e}")
            return None

        return detail

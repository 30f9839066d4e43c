"""
Serial Number Service.

Tracks individual units of serialized products:
- Registers serial numbers against a product (tenant-stamped)
- Lists units available at a warehouse
- Moves a batch of units to a new status in one database transaction

Status moves follow SERIAL_STATUS_TRANSITIONS. A batch is rejected as a
whole if any serial is unknown or any single move is not allowed.
"""
import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wms.core.tenant_context import RequestContext
from wms.models.serialization import (
    ProductSerialNumber,
    SerialStatus,
    SERIAL_STATUS_TRANSITIONS,
)
from wms.schemas.serialization import SerialNumberCreate, SerialOperationResponse

logger = logging.getLogger(__name__)


def can_transition(current: str, target: str) -> bool:
    """Whether a unit in ``current`` status may move to ``target``. Same status is allowed."""
    if current == target:
        return True
    return target in SERIAL_STATUS_TRANSITIONS.get(current, set())


class SerialNumberService:
    """Service for serial number tracking."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def get_available_serial_numbers(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> List[ProductSerialNumber]:
        """Units in AVAILABLE status at a warehouse, oldest registration first."""
        query = select(ProductSerialNumber).where(
            ProductSerialNumber.tenant_id == self.context.tenant_id,
            ProductSerialNumber.product_id == product_id,
            ProductSerialNumber.warehouse_id == warehouse_id,
            ProductSerialNumber.status == SerialStatus.AVAILABLE.value,
        )
        if variant_id:
            query = query.where(ProductSerialNumber.variant_id == variant_id)

        try:
            result = await self.db.execute(
                query.order_by(ProductSerialNumber.created_at, ProductSerialNumber.serial_number)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching available serials for product {product_id}: {e}")
            return []

    async def get_serial(self, serial_number: str) -> Optional[ProductSerialNumber]:
        try:
            result = await self.db.execute(
                select(ProductSerialNumber).where(
                    ProductSerialNumber.tenant_id == self.context.tenant_id,
                    ProductSerialNumber.serial_number == serial_number,
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching serial {serial_number}: {e}")
            return None

    async def change_serial_status(
        self,
        serial_numbers: Sequence[str],
        status: SerialStatus,
        transaction_id: Optional[uuid.UUID] = None,
    ) -> SerialOperationResponse:
        """
        Set ``status`` (and the transaction link) on every listed serial.

        All-or-none: nothing is written when a serial is unknown to the
        tenant (UNKNOWN_SERIAL) or a move is not allowed (INVALID_TRANSITION).
        """
        wanted = set(serial_numbers)
        if not wanted:
            return SerialOperationResponse(
                success=False, error_code="UNKNOWN_SERIAL", message="No serial numbers given"
            )

        target = SerialStatus(status).value
        try:
            result = await self.db.execute(
                select(ProductSerialNumber)
                .where(
                    ProductSerialNumber.tenant_id == self.context.tenant_id,
                    ProductSerialNumber.serial_number.in_(sorted(wanted)),
                )
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            units = list(result.scalars().all())

            missing = sorted(wanted - {unit.serial_number for unit in units})
            if missing:
                await self.db.rollback()
                logger.warning(f"Serial status update rejected, unknown serial(s): {missing}")
                return SerialOperationResponse(
                    success=False,
                    error_code="UNKNOWN_SERIAL",
                    message=f"Unknown serial(s): {', '.join(missing)}",
                )

            blocked = [f"{u.serial_number} ({u.status})" for u in units if not can_transition(u.status, target)]
            if blocked:
                await self.db.rollback()
                logger.warning(f"Serial status update to {target} rejected for: {', '.join(blocked)}")
                return SerialOperationResponse(
                    success=False,
                    error_code="INVALID_TRANSITION",
                    message=f"Cannot move to {target}: {', '.join(blocked)}",
                )

            for unit in units:
                unit.status = target
                unit.updated_by = self.context.actor_id
                if transaction_id:
                    unit.last_transaction_id = transaction_id

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating status of {len(wanted)} serial(s) to {target}: {e}")
            return SerialOperationResponse(
                success=False, error_code="STORE_ERROR", message="Error updating serial numbers"
            )

        logger.info(f"Moved {len(units)} serial(s) to {target}")
        return SerialOperationResponse(success=True, count=len(units), message=f"Moved to {target}")

    async def update_serial_number_status(
        self,
        serial_numbers: Sequence[str],
        status: SerialStatus,
        transaction_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """Bulk status change; True only if every serial moved."""
        outcome = await self.change_serial_status(serial_numbers, status, transaction_id)
        return outcome.success

    async def create_serial_numbers(self, serials: Sequence[SerialNumberCreate]) -> bool:
        """Register serial numbers. A duplicate serial fails the whole batch."""
        if not serials:
            return False

        try:
            for item in serials:
                data = item.model_dump()
                data["status"] = SerialStatus(data["status"]).value
                self.db.add(ProductSerialNumber(**self.context.stamp(**data)))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Duplicate serial number in batch of {len(serials)}: {e.orig}")
            return False
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating {len(serials)} serial number(s): {e}")
            return False

        logger.info(f"Registered {len(serials)} serial number(s)")
        return True

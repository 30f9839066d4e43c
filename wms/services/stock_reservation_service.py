"""
Stock Reservation Service.

Soft holds on stock for a reference document (sales order, transfer, ...).

Flow:
1. create_reservation() - document tentatively claims stock
2. fulfill_reservation() - outbound movement consumed the stock (or pass the
   reservation in MovementRequest.reservation_ids to fulfil it with the movement)
3. release_reservation() - document cancelled

Reservations past their expiry date stop counting immediately and are
flipped to EXPIRED by the scheduled job (see wms.jobs.reservation_jobs).

Over-reservation (active reservations above current stock) is allowed by
default and logged; set RESERVATION_ENFORCE_AVAILABILITY to refuse it.
"""
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Collection, List, Optional

from sqlalchemy import select, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wms.config import settings
from wms.core.tenant_context import RequestContext
from wms.models.reservation import StockReservation, ReservationStatus
from wms.schemas.reservation import ReservationRequest, ReservationCapacity
from wms.services.inventory_service import InventoryService, format_quantity

logger = logging.getLogger(__name__)


def _active_conditions(
    tenant_id: uuid.UUID,
    product_id: uuid.UUID,
    warehouse_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = None,
    bin_id: Optional[uuid.UUID] = None,
    as_of: Optional[date] = None,
) -> list:
    as_of = as_of or date.today()
    conditions = [
        StockReservation.tenant_id == tenant_id,
        StockReservation.product_id == product_id,
        StockReservation.warehouse_id == warehouse_id,
        StockReservation.status == ReservationStatus.ACTIVE.value,
        or_(StockReservation.expiry_date.is_(None), StockReservation.expiry_date >= as_of),
    ]
    if variant_id:
        conditions.append(StockReservation.variant_id == variant_id)
    if bin_id:
        conditions.append(StockReservation.bin_id == bin_id)
    return conditions


async def sum_active_reservations(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    product_id: uuid.UUID,
    warehouse_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = None,
    bin_id: Optional[uuid.UUID] = None,
    exclude_ids: Optional[Collection[uuid.UUID]] = None,
) -> Decimal:
    """
    Total quantity held by active, unexpired reservations. Raises on store errors.

    ``exclude_ids`` leaves out reservations being consumed by the caller.
    """
    conditions = _active_conditions(tenant_id, product_id, warehouse_id, variant_id, bin_id)
    if exclude_ids:
        conditions.append(StockReservation.id.notin_(list(exclude_ids)))

    result = await db.execute(
        select(func.coalesce(func.sum(StockReservation.reserved_quantity), 0)).where(*conditions)
    )
    return Decimal(result.scalar() or 0)


class StockReservationService:
    """Manages soft stock reservations for the current tenant."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def get_reservation(
        self, reservation_id: uuid.UUID, for_update: bool = False
    ) -> Optional[StockReservation]:
        """
        Fetch one reservation. Raises on store errors.

        ``for_update`` locks the row and reloads it even if the session
        already holds a copy, so status checks see the committed state.
        """
        query = select(StockReservation).where(
            StockReservation.id == reservation_id,
            StockReservation.tenant_id == self.context.tenant_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _capacity(self, request: ReservationRequest) -> ReservationCapacity:
        """Compare a request with current stock. Raises on store errors."""
        inventory = InventoryService(self.db, self.context)
        current_stock = await inventory.compute_current_stock(
            request.product_id, request.warehouse_id, request.variant_id, request.bin_id
        )
        reserved = await sum_active_reservations(
            self.db, self.context.tenant_id,
            request.product_id, request.warehouse_id, request.variant_id, request.bin_id,
        )
        return ReservationCapacity(
            current_stock=current_stock,
            reserved_quantity=reserved,
            requested_quantity=request.quantity,
            remaining_after=current_stock - reserved - request.quantity,
        )

    async def check_reservation_capacity(
        self, request: ReservationRequest
    ) -> Optional[ReservationCapacity]:
        """How much stock would remain unreserved after this request. None on store failure."""
        try:
            return await self._capacity(request)
        except SQLAlchemyError as e:
            logger.error(f"Error checking reservation capacity for product {request.product_id}: {e}")
            return None

    async def create_reservation(self, request: ReservationRequest) -> Optional[StockReservation]:
        """
        Create a reservation.

        Returns None if the write fails, or if availability enforcement is on
        and the request exceeds unreserved stock.
        """
        try:
            if settings.RESERVATION_ENFORCE_AVAILABILITY:
                # Serialize competing reservations on the product
                inventory = InventoryService(self.db, self.context)
                await inventory.lock_products([request.product_id])

            capacity = await self._capacity(request)
            if capacity.is_over_reserved:
                if settings.RESERVATION_ENFORCE_AVAILABILITY:
                    await self.db.rollback()
                    logger.warning(
                        f"Refused reservation for product {request.product_id}: "
                        f"current {format_quantity(capacity.current_stock)}, "
                        f"reserved {format_quantity(capacity.reserved_quantity)}, "
                        f"requested {format_quantity(request.quantity)}"
                    )
                    return None
                logger.warning(
                    f"Over-reserving product {request.product_id} at warehouse {request.warehouse_id} "
                    f"by {format_quantity(-capacity.remaining_after)} "
                    f"({request.reference_type} {request.reference_number or request.reference_id})"
                )

            reservation = StockReservation(**self.context.stamp(
                product_id=request.product_id,
                variant_id=request.variant_id,
                warehouse_id=request.warehouse_id,
                bin_id=request.bin_id,
                reserved_quantity=request.quantity,
                reference_type=request.reference_type,
                reference_id=request.reference_id,
                reference_number=request.reference_number,
                reserved_by=self.context.actor_id,
                expiry_date=request.expiry_date,
                status=ReservationStatus.ACTIVE.value,
                notes=request.notes,
            ))
            self.db.add(reservation)
            await self.db.commit()
            await self.db.refresh(reservation)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error creating reservation for product {request.product_id}: {e}")
            return None

        logger.info(
            f"Reserved {format_quantity(request.quantity)} of product {request.product_id} "
            f"for {request.reference_type} {request.reference_number or request.reference_id}"
        )
        return reservation

    async def _close(self, reservation_id: uuid.UUID, target: ReservationStatus) -> bool:
        """Move an ACTIVE reservation to ``target``. Already in ``target`` is a no-op."""
        try:
            reservation = await self.get_reservation(reservation_id, for_update=True)
            if not reservation:
                logger.warning(f"Reservation {reservation_id} not found")
                return False

            if reservation.status == target.value:
                return True

            if reservation.status != ReservationStatus.ACTIVE.value:
                logger.warning(
                    f"Cannot mark reservation {reservation_id} {target.value}: "
                    f"status is {reservation.status}"
                )
                return False

            now = datetime.now(timezone.utc)
            reservation.status = target.value
            reservation.released_at = now
            reservation.updated_by = self.context.actor_id
            reservation.updated_at = now
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error updating reservation {reservation_id} to {target.value}: {e}")
            return False

        logger.info(f"Reservation {reservation_id} {target.value.lower()}")
        return True

    async def release_reservation(self, reservation_id: uuid.UUID) -> bool:
        """Release a reservation. Releasing twice is a no-op that still returns True."""
        return await self._close(reservation_id, ReservationStatus.RELEASED)

    async def fulfill_reservation(self, reservation_id: uuid.UUID) -> bool:
        """Mark a reservation consumed by its outbound movement."""
        return await self._close(reservation_id, ReservationStatus.FULFILLED)

    async def get_active_reservations(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
    ) -> List[StockReservation]:
        """Active, unexpired reservations for a product at a warehouse."""
        try:
            result = await self.db.execute(
                select(StockReservation)
                .where(*_active_conditions(self.context.tenant_id, product_id, warehouse_id, variant_id))
                .order_by(StockReservation.reservation_date, StockReservation.created_at)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error fetching reservations for product {product_id}: {e}")
            return []

    async def get_reserved_quantity(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        bin_id: Optional[uuid.UUID] = None,
    ) -> Optional[Decimal]:
        """Total actively reserved quantity. None on store failure."""
        try:
            return await sum_active_reservations(
                self.db, self.context.tenant_id, product_id, warehouse_id, variant_id, bin_id
            )
        except SQLAlchemyError as e:
            logger.error(f"Error summing reservations for product {product_id}: {e}")
            return None

    async def expire_reservations(self, as_of: Optional[date] = None) -> int:
        """Flip ACTIVE reservations whose expiry date has passed to EXPIRED."""
        as_of = as_of or date.today()
        now = datetime.now(timezone.utc)
        try:
            result = await self.db.execute(
                update(StockReservation)
                .where(
                    StockReservation.tenant_id == self.context.tenant_id,
                    StockReservation.status == ReservationStatus.ACTIVE.value,
                    StockReservation.expiry_date.is_not(None),
                    StockReservation.expiry_date < as_of,
                )
                .values(
                    status=ReservationStatus.EXPIRED.value,
                    released_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error expiring reservations for tenant {self.context.tenant_id}: {e}")
            return 0

        count = result.rowcount or 0
        if count:
            logger.info(f"Expired {count} reservation(s) for tenant {self.context.tenant_id}")
        return count

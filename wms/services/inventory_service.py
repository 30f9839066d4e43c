"""
Inventory Service: stock position derivation, movement validation and
movement recording.

Stock is never stored. The position of product x warehouse (x variant x bin)
is the signed sum of its transaction-detail quantities, where the parent
transaction type decides the sign:

    inbound  (PURCHASE_IN, PURCHASE_RETURN_IN, TRANSFER_IN, ADJUSTMENT_IN)  -> +
    outbound (SALE_OUT, SALE_RETURN_OUT, TRANSFER_OUT, ADJUSTMENT_OUT)      -> -
    anything else                                                           -> 0

Type names are matched case-insensitively.

``validate_stock_transaction`` is a point-in-time check without locks; stock
can change between the check and a later write. ``record_movement`` is the
safe path: it locks the product rows, re-derives the position and writes the
movement in the same database transaction, together with the receiving side
of a transfer and the reservations the movement consumes.
"""
import logging
import uuid
from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wms.config import settings
from wms.core.tenant_context import RequestContext
from wms.models.inventory import (
    InventoryTransaction,
    InventoryTransactionDetail,
    TransactionType,
    INBOUND_TRANSACTION_TYPES,
    OUTBOUND_TRANSACTION_TYPES,
)
from wms.models.product import Product
from wms.models.reservation import StockReservation, ReservationStatus
from wms.schemas.stock import (
    StockPosition,
    StockValidationResult,
    MovementRequest,
    MovementResult,
    MovementLineFailure,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

PositionKey = Tuple[uuid.UUID, Optional[uuid.UUID], Optional[uuid.UUID]]


def format_quantity(value: Decimal) -> str:
    """Render a quantity without trailing zeros: Decimal('60.0000') -> '60'."""
    value = Decimal(value)
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return format(value.normalize(), "f")


def normalize_txn_type(txn_type) -> str:
    """Canonical form of a transaction type: 'purchase_in' -> 'PURCHASE_IN'."""
    txn_type = getattr(txn_type, "value", txn_type)
    return str(txn_type or "").strip().upper()


def signed_quantity(txn_type: Optional[str], quantity: Optional[Decimal]) -> Decimal:
    """Quantity with the sign implied by the transaction type."""
    quantity = Decimal(quantity or 0)
    txn_type = normalize_txn_type(txn_type)
    if txn_type in INBOUND_TRANSACTION_TYPES:
        return quantity
    if txn_type in OUTBOUND_TRANSACTION_TYPES:
        return -quantity
    return ZERO


def sum_stock_movements(rows: Iterable[Tuple[Optional[str], Optional[Decimal]]]) -> Decimal:
    """Signed sum of (txn_type, quantity) rows."""
    total = ZERO
    for txn_type, quantity in rows:
        total += signed_quantity(txn_type, quantity)
    return total


def is_inbound(txn_type) -> bool:
    return normalize_txn_type(txn_type) in INBOUND_TRANSACTION_TYPES


class InventoryService:
    """Service for stock position and movement operations."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    # ==================== STOCK POSITION ====================

    async def compute_current_stock(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        bin_id: Optional[uuid.UUID] = None,
    ) -> Decimal:
        """Signed sum of the matching transaction details. Raises on store errors."""
        query = (
            select(InventoryTransaction.txn_type, InventoryTransactionDetail.quantity)
            .join(InventoryTransaction, InventoryTransactionDetail.txn_id == InventoryTransaction.id)
            .where(
                InventoryTransactionDetail.tenant_id == self.context.tenant_id,
                InventoryTransactionDetail.product_id == product_id,
                InventoryTransactionDetail.to_warehouse_id == warehouse_id,
            )
        )
        if variant_id:
            query = query.where(InventoryTransactionDetail.variant_id == variant_id)
        if bin_id:
            query = query.where(InventoryTransactionDetail.bin_id == bin_id)

        result = await self.db.execute(query)
        return sum_stock_movements(result.all())

    async def _build_position(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        bin_id: Optional[uuid.UUID] = None,
        exclude_reservation_ids: Sequence[uuid.UUID] = (),
    ) -> StockPosition:
        """Assemble a position. Raises on store errors."""
        current_stock = await self.compute_current_stock(product_id, warehouse_id, variant_id, bin_id)

        reserved_stock = ZERO
        if settings.STOCK_SUBTRACT_RESERVATIONS:
            from wms.services.stock_reservation_service import sum_active_reservations
            reserved_stock = await sum_active_reservations(
                self.db, self.context.tenant_id, product_id, warehouse_id, variant_id, bin_id,
                exclude_ids=exclude_reservation_ids,
            )

        held_stock = ZERO
        if settings.STOCK_SUBTRACT_QC_HOLDS:
            from wms.services.quality_control_service import sum_active_holds
            held_stock = await sum_active_holds(
                self.db, self.context.tenant_id, product_id, warehouse_id, variant_id, bin_id
            )

        return StockPosition(
            product_id=product_id,
            warehouse_id=warehouse_id,
            variant_id=variant_id,
            bin_id=bin_id,
            current_stock=current_stock,
            reserved_stock=reserved_stock,
            held_stock=held_stock,
            available_stock=current_stock - reserved_stock - held_stock,
        )

    async def get_stock_position(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        variant_id: Optional[uuid.UUID] = None,
        bin_id: Optional[uuid.UUID] = None,
    ) -> Optional[StockPosition]:
        """
        Get the current stock position.

        Returns None when the position cannot be determined (store failure).
        Callers must treat None as "cannot validate", not as zero stock.
        """
        try:
            return await self._build_position(product_id, warehouse_id, variant_id, bin_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Error fetching stock position for product {product_id} "
                f"at warehouse {warehouse_id}: {e}"
            )
            return None

    # ==================== VALIDATION ====================

    async def validate_stock_transaction(
        self,
        product_id: uuid.UUID,
        warehouse_id: uuid.UUID,
        quantity: Decimal,
        transaction_type: str,
        variant_id: Optional[uuid.UUID] = None,
        bin_id: Optional[uuid.UUID] = None,
    ) -> StockValidationResult:
        """
        Check a requested movement against the current position.

        Inbound types (matched case-insensitively) are always valid. Every
        other type, including unrecognised ones, must not exceed available stock.
        """
        quantity = Decimal(quantity)
        if quantity < 0:
            return StockValidationResult(
                is_valid=False,
                message=f"Quantity must not be negative: {format_quantity(quantity)}",
            )

        position = await self.get_stock_position(product_id, warehouse_id, variant_id, bin_id)
        if position is None:
            return StockValidationResult(
                is_valid=False,
                current_stock=ZERO,
                available_stock=ZERO,
                message="Unable to fetch current stock position",
            )

        if is_inbound(transaction_type):
            return StockValidationResult(
                is_valid=True,
                current_stock=position.current_stock,
                available_stock=position.available_stock,
                message="Inward transaction - stock will increase",
            )

        if quantity > position.available_stock:
            return StockValidationResult(
                is_valid=False,
                current_stock=position.current_stock,
                available_stock=position.available_stock,
                message=(
                    f"Insufficient stock. Available: {format_quantity(position.available_stock)}, "
                    f"Required: {format_quantity(quantity)}"
                ),
            )

        return StockValidationResult(
            is_valid=True,
            current_stock=position.current_stock,
            available_stock=position.available_stock,
            message="Transaction valid",
        )

    # ==================== MOVEMENTS ====================

    def _generate_txn_number(self) -> str:
        """Generate unique transaction number: TXN-YYYYMMDDHHMMSS-XXXXXX"""
        now = datetime.now(timezone.utc)
        return f"TXN-{now.strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:6].upper()}"

    async def lock_products(self, product_ids: List[uuid.UUID]) -> set:
        """
        Lock product rows so concurrent movements on the same products queue up.
        Rows are locked in id order to avoid deadlocks.
        """
        result = await self.db.execute(
            select(Product.id)
            .where(
                Product.id.in_(product_ids),
                Product.tenant_id == self.context.tenant_id,
            )
            .order_by(Product.id)
            .with_for_update()
        )
        return set(result.scalars().all())

    async def _lock_reservations(
        self, request: MovementRequest
    ) -> Tuple[List[StockReservation], Optional[str]]:
        """
        Lock the reservations a movement consumes.

        Returns (reservations, problem); ``problem`` is set when one is
        unknown, no longer active, or not for this warehouse and products.
        """
        wanted = set(request.reservation_ids)
        result = await self.db.execute(
            select(StockReservation)
            .where(
                StockReservation.id.in_(sorted(wanted, key=str)),
                StockReservation.tenant_id == self.context.tenant_id,
            )
            .order_by(StockReservation.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        reservations = list(result.scalars().all())

        missing = wanted - {r.id for r in reservations}
        if missing:
            return reservations, f"Unknown reservation(s): {', '.join(sorted(str(m) for m in missing))}"

        today = date.today()
        products = {line.product_id for line in request.lines}
        for reservation in reservations:
            expired = reservation.expiry_date is not None and reservation.expiry_date < today
            if reservation.status != ReservationStatus.ACTIVE.value or expired:
                status = ReservationStatus.EXPIRED.value if expired else reservation.status
                return reservations, f"Reservation {reservation.id} is not active ({status})"
            if reservation.warehouse_id != request.warehouse_id or reservation.product_id not in products:
                return reservations, f"Reservation {reservation.id} does not match this movement"

        return reservations, None

    def _build_transaction(
        self,
        request: MovementRequest,
        txn_type: str,
        warehouse_id: uuid.UUID,
        counterpart_id: Optional[uuid.UUID],
        receiving: bool = False,
    ) -> InventoryTransaction:
        """Header plus one detail per line, affecting ``warehouse_id``."""
        transaction = InventoryTransaction(**self.context.stamp(
            txn_number=self._generate_txn_number(),
            txn_type=txn_type,
            reference_type=request.reference_type,
            reference_id=request.reference_id,
            reference_number=request.reference_number,
            notes=request.notes,
        ))
        for line in request.lines:
            transaction.details.append(InventoryTransactionDetail(**self.context.stamp(
                product_id=line.product_id,
                variant_id=line.variant_id,
                bin_id=line.counterpart_bin_id if receiving else line.bin_id,
                from_warehouse_id=counterpart_id,
                to_warehouse_id=warehouse_id,
                quantity=line.quantity,
                unit_cost=line.unit_cost,
                uom_id=line.uom_id,
            )))
        return transaction

    async def record_movement(self, request: MovementRequest) -> MovementResult:
        """
        Validate and write a stock movement atomically.

        Outbound lines are checked against the position re-derived after the
        product locks are held. Lines hitting the same position are checked
        cumulatively. Reservations listed in ``reservation_ids`` are left out
        of that position and marked FULFILLED in the same transaction.

        A TRANSFER_OUT with ``counterpart_warehouse_id`` also writes the
        TRANSFER_IN at the counterpart warehouse. Nothing is written unless
        every line passes.
        """
        txn_type = normalize_txn_type(request.transaction_type)
        product_ids = sorted({line.product_id for line in request.lines}, key=str)

        try:
            locked = await self.lock_products(product_ids)
            missing = [str(pid) for pid in product_ids if pid not in locked]
            if missing:
                await self.db.rollback()
                return MovementResult(
                    success=False,
                    error_code="UNKNOWN_PRODUCT",
                    message=f"Unknown product(s): {', '.join(missing)}",
                )

            reservations: List[StockReservation] = []
            if request.reservation_ids:
                reservations, problem = await self._lock_reservations(request)
                if problem:
                    await self.db.rollback()
                    logger.warning(f"Rejected {txn_type} movement: {problem}")
                    return MovementResult(
                        success=False, error_code="INVALID_RESERVATION", message=problem
                    )
            consumed_ids = [r.id for r in reservations]

            failures: List[MovementLineFailure] = []
            if not is_inbound(txn_type):
                available: Dict[PositionKey, Decimal] = {}
                consumed: Dict[PositionKey, Decimal] = defaultdict(lambda: ZERO)

                for line_number, line in enumerate(request.lines, start=1):
                    key = (line.product_id, line.variant_id, line.bin_id)
                    if key not in available:
                        position = await self._build_position(
                            line.product_id, request.warehouse_id, line.variant_id, line.bin_id,
                            exclude_reservation_ids=consumed_ids,
                        )
                        available[key] = position.available_stock

                    remaining = available[key] - consumed[key]
                    if line.quantity > remaining:
                        failures.append(MovementLineFailure(
                            line_number=line_number,
                            product_id=line.product_id,
                            available_stock=remaining,
                            required_quantity=line.quantity,
                            message=(
                                f"Insufficient stock. Available: {format_quantity(remaining)}, "
                                f"Required: {format_quantity(line.quantity)}"
                            ),
                        ))
                    consumed[key] += line.quantity

            if failures:
                await self.db.rollback()
                logger.warning(
                    f"Rejected {txn_type} movement at warehouse {request.warehouse_id}: "
                    f"{len(failures)} line(s) short"
                )
                return MovementResult(
                    success=False,
                    error_code="INSUFFICIENT_STOCK",
                    message=f"Insufficient stock for {len(failures)} line(s)",
                    failed_lines=failures,
                )

            transaction = self._build_transaction(
                request, txn_type, request.warehouse_id, request.counterpart_warehouse_id
            )
            self.db.add(transaction)

            receipt = None
            if txn_type == TransactionType.TRANSFER_OUT.value and request.counterpart_warehouse_id:
                receipt = self._build_transaction(
                    request,
                    TransactionType.TRANSFER_IN.value,
                    request.counterpart_warehouse_id,
                    request.warehouse_id,
                    receiving=True,
                )
                self.db.add(receipt)

            now = datetime.now(timezone.utc)
            for reservation in reservations:
                reservation.status = ReservationStatus.FULFILLED.value
                reservation.released_at = now
                reservation.updated_by = self.context.actor_id
                reservation.updated_at = now

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error recording {txn_type} movement at warehouse {request.warehouse_id}: {e}")
            return MovementResult(
                success=False, error_code="STORE_ERROR", message="Error recording stock movement"
            )

        logger.info(
            f"Recorded {txn_type} {transaction.txn_number} with {len(request.lines)} line(s) "
            f"at warehouse {request.warehouse_id}"
            + (f", receipt {receipt.txn_number} at {request.counterpart_warehouse_id}" if receipt else "")
            + (f", fulfilled {len(consumed_ids)} reservation(s)" if consumed_ids else "")
        )
        return MovementResult(
            success=True,
            transaction_id=transaction.id,
            txn_number=transaction.txn_number,
            counterpart_transaction_id=receipt.id if receipt else None,
            counterpart_txn_number=receipt.txn_number if receipt else None,
            fulfilled_reservation_ids=consumed_ids,
            message="Movement recorded",
        )

"""Stock reservation tests."""
import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import update

from wms.models import ReservationStatus, StockReservation
from wms.schemas.reservation import ReservationRequest
from wms.services.stock_reservation_service import StockReservationService
from tests.conftest import WAREHOUSE_ID


def _request(product_id, quantity, **extra):
    return ReservationRequest(
        product_id=product_id,
        warehouse_id=WAREHOUSE_ID,
        quantity=Decimal(str(quantity)),
        reference_type="SALES_ORDER",
        reference_number="SO-1001",
        **extra,
    )


async def test_create_reservation_is_active_and_stamped(db, context, stocked_product):
    reservation = await StockReservationService(db, context).create_reservation(
        _request(stocked_product.id, 10)
    )

    assert reservation is not None
    assert reservation.status == ReservationStatus.ACTIVE.value
    assert reservation.tenant_id == context.tenant_id
    assert reservation.reserved_by == context.actor_id
    assert reservation.reserved_quantity == Decimal("10")


async def test_over_reservation_allowed_with_warning(db, context, stocked_product, caplog):
    service = StockReservationService(db, context)

    with caplog.at_level(logging.WARNING, logger="wms.services.stock_reservation_service"):
        reservation = await service.create_reservation(_request(stocked_product.id, 75))

    assert reservation is not None
    assert "Over-reserving" in caplog.text


async def test_over_reservation_refused_when_enforced(db, context, stocked_product, stock_flags):
    stock_flags.RESERVATION_ENFORCE_AVAILABILITY = True
    product_id = stocked_product.id
    service = StockReservationService(db, context)

    assert await service.create_reservation(_request(product_id, 50)) is not None
    assert await service.create_reservation(_request(product_id, 11)) is None
    assert await service.get_reserved_quantity(product_id, WAREHOUSE_ID) == Decimal("50")


async def test_capacity_reports_remaining(db, context, stocked_product):
    service = StockReservationService(db, context)
    await service.create_reservation(_request(stocked_product.id, 20))

    capacity = await service.check_reservation_capacity(_request(stocked_product.id, 50))

    assert capacity.current_stock == Decimal("60")
    assert capacity.reserved_quantity == Decimal("20")
    assert capacity.remaining_after == Decimal("-10")
    assert capacity.is_over_reserved is True


async def test_release_is_idempotent(db, context, stocked_product):
    service = StockReservationService(db, context)
    reservation = await service.create_reservation(_request(stocked_product.id, 5))

    assert await service.release_reservation(reservation.id) is True
    released_at = (await service.get_reservation(reservation.id)).released_at

    assert await service.release_reservation(reservation.id) is True
    again = await service.get_reservation(reservation.id)
    assert again.status == ReservationStatus.RELEASED.value
    assert again.released_at == released_at


async def test_release_unknown_reservation(db, context):
    assert await StockReservationService(db, context).release_reservation(uuid.uuid4()) is False


async def test_fulfilled_reservation_cannot_be_released(db, context, stocked_product):
    service = StockReservationService(db, context)
    reservation = await service.create_reservation(_request(stocked_product.id, 5))

    assert await service.fulfill_reservation(reservation.id) is True
    assert await service.release_reservation(reservation.id) is False
    assert (await service.get_reservation(reservation.id)).status == ReservationStatus.FULFILLED.value


async def test_close_rechecks_committed_status(db, context, stocked_product):
    service = StockReservationService(db, context)
    reservation = await service.create_reservation(_request(stocked_product.id, 5))
    reservation_id = reservation.id

    # Fulfilled elsewhere; the copy held by this session still says ACTIVE
    await db.execute(
        update(StockReservation)
        .where(StockReservation.id == reservation_id)
        .values(status=ReservationStatus.FULFILLED.value)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    assert reservation.status == ReservationStatus.ACTIVE.value

    assert await service.release_reservation(reservation_id) is False
    assert (await service.get_reservation(reservation_id)).status == ReservationStatus.FULFILLED.value


async def test_active_reservations_exclude_released_and_expired(db, context, stocked_product):
    service = StockReservationService(db, context)
    kept = await service.create_reservation(_request(stocked_product.id, 5))
    released = await service.create_reservation(_request(stocked_product.id, 6))
    await service.create_reservation(
        _request(stocked_product.id, 7, expiry_date=date.today() - timedelta(days=1))
    )
    await service.release_reservation(released.id)

    active = await service.get_active_reservations(stocked_product.id, WAREHOUSE_ID)

    assert [r.id for r in active] == [kept.id]
    assert await service.get_reserved_quantity(stocked_product.id, WAREHOUSE_ID) == Decimal("5")


async def test_expire_reservations_flips_past_due(db, context, other_context, stocked_product):
    service = StockReservationService(db, context)
    overdue = await service.create_reservation(
        _request(stocked_product.id, 3, expiry_date=date.today() - timedelta(days=2))
    )
    current = await service.create_reservation(
        _request(stocked_product.id, 4, expiry_date=date.today())
    )

    # Another tenant's run touches nothing here
    assert await StockReservationService(db, other_context).expire_reservations() == 0

    overdue_id, current_id = overdue.id, current.id
    assert await service.expire_reservations() == 1
    db.expire_all()
    assert (await service.get_reservation(overdue_id)).status == ReservationStatus.EXPIRED.value
    assert (await service.get_reservation(current_id)).status == ReservationStatus.ACTIVE.value


async def test_reservations_are_tenant_scoped(db, context, other_context, stocked_product):
    reservation = await StockReservationService(db, context).create_reservation(
        _request(stocked_product.id, 5)
    )
    foreign = StockReservationService(db, other_context)

    assert await foreign.get_reservation(reservation.id) is None
    assert await foreign.release_reservation(reservation.id) is False
    assert await foreign.get_active_reservations(stocked_product.id, WAREHOUSE_ID) == []

"""Background job tests."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from wms.jobs import reservation_jobs  # noqa: F401
from wms.jobs.tenant_job_runner import TenantJobRunner, registered_jobs
from wms.models import StockReservation, ReservationStatus
from tests.conftest import TENANT_ID, OTHER_TENANT_ID, WAREHOUSE_ID, make_product


async def _overdue(db, product, tenant_id):
    reservation = StockReservation(
        tenant_id=tenant_id,
        product_id=product.id,
        warehouse_id=WAREHOUSE_ID,
        reserved_quantity=Decimal("1"),
        reference_type="SALES_ORDER",
        status=ReservationStatus.ACTIVE.value,
        expiry_date=date.today() - timedelta(days=1),
    )
    db.add(reservation)
    await db.commit()
    return reservation


def test_expiry_job_is_registered():
    assert "expire_reservations" in registered_jobs()


async def test_expiry_job_runs_for_every_tenant(db, session_factory):
    mine = await make_product(db, tenant_id=TENANT_ID)
    theirs = await make_product(db, tenant_id=OTHER_TENANT_ID)
    await _overdue(db, mine, TENANT_ID)
    await _overdue(db, theirs, OTHER_TENANT_ID)

    summary = await TenantJobRunner(session_factory=session_factory, max_concurrent=1).run_job("expire_reservations")

    assert summary["tenant_count"] == 2
    assert summary["successful"] == 2
    assert sorted(r["output"] for r in summary["results"]) == [1, 1]


async def test_runner_skips_without_tenants(session_factory):
    summary = await TenantJobRunner(session_factory=session_factory, max_concurrent=1).run_job("expire_reservations")
    assert summary["status"] == "skipped"


async def test_unknown_job_rejected(session_factory):
    with pytest.raises(ValueError):
        await TenantJobRunner(session_factory=session_factory, max_concurrent=1).run_job("no_such_job")

"""
Pytest configuration and fixtures.

Each test gets its own in-memory SQLite database (aiosqlite, StaticPool) with
all tables created from the models.
"""
import os
import uuid
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wms import models  # noqa: F401
from wms.config import settings
from wms.core.tenant_context import RequestContext
from wms.database import Base, get_db
from wms.models import Product, UnitOfMeasure, InventoryTransaction, InventoryTransactionDetail


TENANT_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_TENANT_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")
ACTOR_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")
WAREHOUSE_ID = uuid.UUID("44444444-4444-4444-4444-444444444444")


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def context():
    return RequestContext(tenant_id=TENANT_ID, actor_id=ACTOR_ID)


@pytest.fixture
def other_context():
    return RequestContext(tenant_id=OTHER_TENANT_ID, actor_id=ACTOR_ID)


@pytest.fixture
def stock_flags(monkeypatch):
    """Reset stock-related flags to their defaults for each test."""
    monkeypatch.setattr(settings, "STOCK_SUBTRACT_RESERVATIONS", False)
    monkeypatch.setattr(settings, "STOCK_SUBTRACT_QC_HOLDS", False)
    monkeypatch.setattr(settings, "RESERVATION_ENFORCE_AVAILABILITY", False)
    monkeypatch.setattr(settings, "COUNT_INVESTIGATE_THRESHOLD", 10)
    return settings


@pytest.fixture(autouse=True)
def _default_flags(stock_flags):
    return stock_flags


async def make_product(db, tenant_id=TENANT_ID, code=None, **fields) -> Product:
    product = Product(
        tenant_id=tenant_id,
        product_code=code or f"P-{uuid.uuid4().hex[:8]}",
        product_name="Test product",
        **fields,
    )
    db.add(product)
    await db.commit()
    return product


async def make_uom(db, code, tenant_id=TENANT_ID) -> UnitOfMeasure:
    uom = UnitOfMeasure(tenant_id=tenant_id, uom_code=code, uom_name=code)
    db.add(uom)
    await db.commit()
    return uom


async def post_transaction(
    db,
    product_id,
    txn_type,
    quantity,
    warehouse_id=WAREHOUSE_ID,
    tenant_id=TENANT_ID,
    variant_id=None,
    bin_id=None,
):
    """Write a transaction with one detail line directly, bypassing validation."""
    txn = InventoryTransaction(
        tenant_id=tenant_id,
        txn_number=f"TXN-TEST-{uuid.uuid4().hex[:10]}",
        txn_type=txn_type,
    )
    txn.details.append(InventoryTransactionDetail(
        tenant_id=tenant_id,
        product_id=product_id,
        variant_id=variant_id,
        bin_id=bin_id,
        to_warehouse_id=warehouse_id,
        quantity=Decimal(str(quantity)),
    ))
    db.add(txn)
    await db.commit()
    return txn


@pytest.fixture
async def product(db):
    return await make_product(db)


@pytest.fixture
async def stocked_product(db, product):
    """Product with 50 in, 30 in and 20 out at WAREHOUSE_ID: 60 on hand."""
    await post_transaction(db, product.id, "PURCHASE_IN", 50)
    await post_transaction(db, product.id, "TRANSFER_IN", 30)
    await post_transaction(db, product.id, "SALE_OUT", 20)
    return product


@pytest.fixture
async def client(session_factory):
    from wms.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def tenant_headers():
    return {"X-Tenant-ID": str(TENANT_ID), "X-User-ID": str(ACTOR_ID)}

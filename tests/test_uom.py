"""Unit-of-measure conversion tests."""
import uuid
from decimal import Decimal

from wms.schemas.uom import UOMConversion
from wms.services.uom_service import (
    UOMService,
    build_uom_conversions,
    convert_quantity,
    try_convert_quantity,
)
from tests.conftest import make_product, make_uom, OTHER_TENANT_ID

PCS = uuid.uuid4()
BOX = uuid.uuid4()
CASE = uuid.uuid4()

CONVERSIONS = [UOMConversion(from_uom_id=PCS, to_uom_id=BOX, conversion_factor=Decimal("0.25"))]


def test_same_unit_returns_quantity_unchanged():
    result = try_convert_quantity(Decimal("7.5"), PCS, PCS, [])
    assert result.quantity == Decimal("7.5")
    assert result.is_converted is True


def test_direct_conversion_multiplies():
    assert convert_quantity(Decimal("8"), PCS, BOX, CONVERSIONS) == Decimal("2")


def test_reverse_conversion_divides():
    assert convert_quantity(Decimal("2"), BOX, PCS, CONVERSIONS) == Decimal("8")


def test_missing_conversion_is_flagged_not_raised():
    result = try_convert_quantity(Decimal("3"), PCS, CASE, CONVERSIONS)
    assert result.is_converted is False
    assert result.quantity == Decimal("3")
    # Fallback keeps the caller's quantity
    assert convert_quantity(Decimal("3"), PCS, CASE, CONVERSIONS) == Decimal("3")


async def test_conversions_built_from_product_configuration(db, context):
    pcs = await make_uom(db, "PCS")
    box = await make_uom(db, "BOX")
    kg = await make_uom(db, "KG")
    product = await make_product(
        db,
        base_uom_id=pcs.id,
        primary_uom_id=box.id,
        secondary_uom_id=kg.id,
        primary_to_secondary_factor=Decimal("4"),
        secondary_to_base_factor=Decimal("0.5"),
    )

    conversions = await UOMService(db, context).get_uom_conversions(product.id)

    by_target = {c.to_uom_id: c.conversion_factor for c in conversions}
    assert by_target == {box.id: Decimal("0.25"), kg.id: Decimal("2")}
    assert all(c.from_uom_id == pcs.id for c in conversions)


async def test_no_rule_when_unit_equals_base(db, context):
    pcs = await make_uom(db, "PCS")
    product = await make_product(db, base_uom_id=pcs.id, primary_uom_id=pcs.id)

    assert await UOMService(db, context).get_uom_conversions(product.id) == []


async def test_missing_factor_treated_as_one(db, context):
    pcs = await make_uom(db, "PCS")
    box = await make_uom(db, "BOX")
    product = await make_product(db, base_uom_id=pcs.id, primary_uom_id=box.id)

    conversions = build_uom_conversions(product)
    assert len(conversions) == 1
    assert conversions[0].conversion_factor == Decimal("1")


async def test_unknown_or_foreign_product_has_no_conversions(db, context):
    pcs = await make_uom(db, "PCS", tenant_id=OTHER_TENANT_ID)
    box = await make_uom(db, "BOX", tenant_id=OTHER_TENANT_ID)
    foreign = await make_product(
        db, tenant_id=OTHER_TENANT_ID, base_uom_id=pcs.id, primary_uom_id=box.id
    )
    service = UOMService(db, context)

    assert await service.get_uom_conversions(uuid.uuid4()) == []
    assert await service.get_uom_conversions(foreign.id) == []


async def test_service_convert_reports_unconverted(db, context):
    pcs = await make_uom(db, "PCS")
    box = await make_uom(db, "BOX")
    product = await make_product(
        db, base_uom_id=pcs.id, primary_uom_id=box.id, primary_to_secondary_factor=Decimal("4")
    )
    service = UOMService(db, context)

    converted = await service.convert(product.id, Decimal("12"), pcs.id, box.id)
    assert converted.is_converted is True
    assert converted.quantity == Decimal("3")

    unconverted = await service.convert(product.id, Decimal("12"), pcs.id, uuid.uuid4())
    assert unconverted.is_converted is False
    assert unconverted.quantity == Decimal("12")

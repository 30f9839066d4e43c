"""Pick list tests."""
import uuid
from decimal import Decimal

from wms.models import PickLineStatus, PickListStatus, PickPriority
from wms.schemas.picklist import PickListGenerateRequest, PickListItemRequest
from wms.services.picklist_service import PickListService
from tests.conftest import WAREHOUSE_ID, make_product


async def _generate(db, context, *quantities):
    products = [await make_product(db) for _ in quantities]
    request = PickListGenerateRequest(
        warehouse_id=WAREHOUSE_ID,
        priority_level=PickPriority.HIGH,
        items=[
            PickListItemRequest(
                product_id=p.id,
                warehouse_id=WAREHOUSE_ID,
                bin_id=uuid.uuid4(),
                required_quantity=Decimal(str(q)),
            )
            for p, q in zip(products, quantities)
        ],
    )
    service = PickListService(db, context)
    return service, await service.generate_pick_list(request), products


async def test_lines_follow_input_order(db, context):
    service, pick_list, products = await _generate(db, context, 4, 2, 9)

    assert pick_list.pick_list_number.startswith("PL-")
    assert pick_list.status == PickListStatus.DRAFT.value
    assert pick_list.priority_level == PickPriority.HIGH.value

    details = await service.get_pick_list_details(pick_list.id)
    assert [d.pick_sequence for d in details] == [1, 2, 3]
    assert [d.product_id for d in details] == [p.id for p in products]
    assert all(d.picked_quantity == 0 for d in details)
    assert all(d.status == PickLineStatus.PENDING.value for d in details)


async def test_pick_list_numbers_are_unique(db, context):
    _, first, _ = await _generate(db, context, 1)
    _, second, _ = await _generate(db, context, 1)
    assert first.pick_list_number != second.pick_list_number


async def test_update_pick_quantity_derives_status(db, context):
    service, pick_list, _ = await _generate(db, context, 10)
    line = (await service.get_pick_list_details(pick_list.id))[0]

    assert await service.update_pick_quantity(line.id, Decimal("4")) is True
    assert (await service.get_pick_list_details(pick_list.id))[0].status == PickLineStatus.PARTIAL.value

    assert await service.update_pick_quantity(line.id, Decimal("0")) is True
    assert (await service.get_pick_list_details(pick_list.id))[0].status == PickLineStatus.PENDING.value

    # Picking everything is still PARTIAL until the line is closed
    assert await service.update_pick_quantity(line.id, Decimal("10")) is True
    assert (await service.get_pick_list_details(pick_list.id))[0].status == PickLineStatus.PARTIAL.value


async def test_update_unknown_line(db, context):
    assert await PickListService(db, context).update_pick_quantity(uuid.uuid4(), Decimal("1")) is False


async def test_close_line_completed_or_short(db, context):
    service, pick_list, _ = await _generate(db, context, 10, 10)
    full, partial = await service.get_pick_list_details(pick_list.id)
    await service.update_pick_quantity(full.id, Decimal("10"))
    await service.update_pick_quantity(partial.id, Decimal("6"))

    assert (await service.close_pick_line(full.id)).status == PickLineStatus.COMPLETED.value
    assert (await service.close_pick_line(partial.id)).status == PickLineStatus.SHORT.value

    # Closed lines no longer take quantities
    assert await service.update_pick_quantity(partial.id, Decimal("10")) is False


async def test_pick_lines_are_tenant_scoped(db, context, other_context):
    service, pick_list, _ = await _generate(db, context, 3)
    line = (await service.get_pick_list_details(pick_list.id))[0]
    foreign = PickListService(db, other_context)

    assert await foreign.get_pick_list_details(pick_list.id) == []
    assert await foreign.update_pick_quantity(line.id, Decimal("1")) is False
    assert await foreign.close_pick_line(line.id) is None

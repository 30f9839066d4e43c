"""QC hold and damage assessment tests."""
import uuid
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import update

from wms.models import HoldStatus, DamageSeverity, DamageAction, QualityControlHold
from wms.schemas.quality_control import QCHoldCreate, DamageAssessmentCreate
from wms.services.quality_control_service import QualityControlService
from tests.conftest import WAREHOUSE_ID


def _hold(product_id, quantity=5):
    return QCHoldCreate(
        product_id=product_id,
        warehouse_id=WAREHOUSE_ID,
        hold_quantity=Decimal(str(quantity)),
        hold_reason="Inbound inspection",
        inspection_notes="Seal broken on two cartons",
    )


async def test_create_hold_starts_on_hold(db, context, product):
    hold = await QualityControlService(db, context).create_qc_hold(_hold(product.id))

    assert hold.status == HoldStatus.ON_HOLD.value
    assert hold.hold_date == date.today()
    assert hold.tenant_id == context.tenant_id
    assert hold.inspection_notes == "Seal broken on two cartons"


async def test_release_stamps_resolution(db, context, product):
    service = QualityControlService(db, context)
    hold = await service.create_qc_hold(_hold(product.id))

    assert await service.release_qc_hold(hold.id, "Passed inspection") is True

    hold = await service.get_hold(hold.id)
    assert hold.status == HoldStatus.RELEASED.value
    assert hold.release_date == date.today()
    assert hold.release_notes == "Passed inspection"
    assert hold.released_by == context.actor_id


async def test_terminal_hold_cannot_be_resolved_again(db, context, product):
    service = QualityControlService(db, context)
    hold = await service.create_qc_hold(_hold(product.id))
    await service.reject_qc_hold(hold.id, "Water damage")

    assert await service.release_qc_hold(hold.id, "Second try") is False
    assert await service.reject_qc_hold(hold.id, "Again") is False

    hold = await service.get_hold(hold.id)
    assert hold.status == HoldStatus.REJECTED.value
    assert hold.release_notes == "Water damage"


async def test_resolve_rechecks_committed_status(db, context, product):
    service = QualityControlService(db, context)
    hold = await service.create_qc_hold(_hold(product.id))
    hold_id = hold.id

    # Released elsewhere; the copy held by this session still says ON_HOLD
    await db.execute(
        update(QualityControlHold)
        .where(QualityControlHold.id == hold_id)
        .values(status=HoldStatus.RELEASED.value)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    assert hold.status == HoldStatus.ON_HOLD.value

    assert await service.reject_qc_hold(hold_id, "Late reject") is False
    assert (await service.get_hold(hold_id)).status == HoldStatus.RELEASED.value


async def test_resolve_unknown_hold(db, context):
    assert await QualityControlService(db, context).release_qc_hold(uuid.uuid4()) is False


async def test_active_holds_and_held_quantity(db, context, product):
    service = QualityControlService(db, context)
    first = await service.create_qc_hold(_hold(product.id, 5))
    second = await service.create_qc_hold(_hold(product.id, 3))
    await service.release_qc_hold(first.id)

    active = await service.get_active_qc_holds(product.id, WAREHOUSE_ID)

    assert [h.id for h in active] == [second.id]
    assert await service.get_held_quantity(product.id, WAREHOUSE_ID) == Decimal("3")


async def test_holds_are_tenant_scoped(db, context, other_context, product):
    hold = await QualityControlService(db, context).create_qc_hold(_hold(product.id))
    foreign = QualityControlService(db, other_context)

    assert await foreign.release_qc_hold(hold.id) is False
    assert await foreign.get_active_qc_holds(product.id, WAREHOUSE_ID) == []


async def test_damage_assessments_by_date_range(db, context, product):
    service = QualityControlService(db, context)
    today = date.today()
    for days_ago in (0, 5, 40):
        await service.create_damage_assessment(DamageAssessmentCreate(
            warehouse_id=WAREHOUSE_ID,
            product_id=product.id,
            damaged_quantity=Decimal("1"),
            damage_type="CRUSHED",
            damage_severity=DamageSeverity.MAJOR,
            assessment_date=today - timedelta(days=days_ago),
            action_taken=DamageAction.WRITE_OFF,
        ))

    recent = await service.get_damage_assessments(WAREHOUSE_ID, from_date=today - timedelta(days=30))
    all_rows = await service.get_damage_assessments(WAREHOUSE_ID)

    assert [a.assessment_date for a in recent] == [today, today - timedelta(days=5)]
    assert len(all_rows) == 3
    assert all_rows[0].damage_severity == "MAJOR"
    assert all_rows[0].assessed_by == context.actor_id

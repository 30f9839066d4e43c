"""
Physical Count Service.

Compares counted quantities with system quantities and posts the
differences as ADJUSTMENT_IN / ADJUSTMENT_OUT movements.

Decision per line (variance = counted - system):
- 0                                   -> NO_CHANGE
- |variance| > COUNT_INVESTIGATE_THRESHOLD -> INVESTIGATE (nothing posted)
- otherwise                           -> ADJUST_TO_COUNT
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from wms.config import settings
from wms.core.tenant_context import RequestContext
from wms.models.inventory import TransactionType
from wms.schemas.cycle_count import (
    AdjustmentDecision,
    CountLine,
    CountLineEvaluation,
    CountAdjustmentRequest,
    CountAdjustmentResult,
)
from wms.schemas.stock import MovementLine, MovementRequest
from wms.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def evaluate_count_line(
    system_quantity: Decimal,
    counted_quantity: Decimal,
    threshold: Optional[Decimal] = None,
) -> tuple:
    """Return (variance, decision, adjustment quantity) for one counted line."""
    if threshold is None:
        threshold = Decimal(settings.COUNT_INVESTIGATE_THRESHOLD)

    variance = Decimal(counted_quantity) - Decimal(system_quantity)
    if variance == 0:
        return variance, AdjustmentDecision.NO_CHANGE, ZERO
    if abs(variance) > threshold:
        return variance, AdjustmentDecision.INVESTIGATE, ZERO
    return variance, AdjustmentDecision.ADJUST_TO_COUNT, variance


def evaluate_line(line: CountLine) -> CountLineEvaluation:
    variance, decision, adjustment = evaluate_count_line(line.system_quantity, line.counted_quantity)

    # Explicit decision from the counter wins
    if line.adjustment_decision is not None:
        decision = line.adjustment_decision
        adjustment = variance if decision == AdjustmentDecision.ADJUST_TO_COUNT else ZERO

    return CountLineEvaluation(
        product_id=line.product_id,
        variant_id=line.variant_id,
        bin_id=line.bin_id,
        system_quantity=line.system_quantity,
        counted_quantity=line.counted_quantity,
        variance_quantity=variance,
        adjustment_decision=decision,
        adjustment_quantity=adjustment,
    )


class CycleCountService:
    """Service for physical count evaluation and adjustment posting."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    def evaluate(self, lines: List[CountLine]) -> List[CountLineEvaluation]:
        return [evaluate_line(line) for line in lines]

    async def post_count_adjustments(self, request: CountAdjustmentRequest) -> CountAdjustmentResult:
        """
        Post ADJUST_TO_COUNT lines as stock movements.

        Losses are posted first as one ADJUSTMENT_OUT; gains follow as one
        ADJUSTMENT_IN only if the losses went through. Each movement is
        atomic on its own.
        """
        evaluations = self.evaluate(request.lines)
        gains: List[MovementLine] = []
        losses: List[MovementLine] = []
        for evaluation in evaluations:
            if evaluation.adjustment_decision != AdjustmentDecision.ADJUST_TO_COUNT:
                continue
            if evaluation.adjustment_quantity > 0:
                target = gains
            elif evaluation.adjustment_quantity < 0:
                target = losses
            else:
                continue
            target.append(MovementLine(
                product_id=evaluation.product_id,
                variant_id=evaluation.variant_id,
                bin_id=evaluation.bin_id,
                quantity=abs(evaluation.adjustment_quantity),
            ))

        investigate = sum(
            1 for e in evaluations if e.adjustment_decision == AdjustmentDecision.INVESTIGATE
        )
        if investigate:
            logger.warning(
                f"{investigate} counted line(s) at warehouse {request.warehouse_id} need investigation"
            )

        if not gains and not losses:
            return CountAdjustmentResult(
                success=True, evaluations=evaluations, message="No adjustments to post"
            )

        inventory = InventoryService(self.db, self.context)
        result = CountAdjustmentResult(success=True, evaluations=evaluations)

        if losses:
            result.outbound = await inventory.record_movement(self._movement(
                request, TransactionType.ADJUSTMENT_OUT, losses
            ))
            if not result.outbound.success:
                result.success = False
                result.message = f"Count losses not posted: {result.outbound.message}"
                return result

        if gains:
            result.inbound = await inventory.record_movement(self._movement(
                request, TransactionType.ADJUSTMENT_IN, gains
            ))
            if not result.inbound.success:
                result.success = False
                result.message = f"Count gains not posted: {result.inbound.message}"
                return result

        logger.info(
            f"Posted count adjustments at warehouse {request.warehouse_id}: "
            f"{len(gains)} gain(s), {len(losses)} loss(es)"
        )
        result.message = "Adjustments posted"
        return result

    def _movement(
        self,
        request: CountAdjustmentRequest,
        txn_type: TransactionType,
        lines: List[MovementLine],
    ) -> MovementRequest:
        return MovementRequest(
            transaction_type=txn_type,
            warehouse_id=request.warehouse_id,
            lines=lines,
            reference_type="PHYSICAL_COUNT",
            reference_number=request.reference_number,
            notes=request.notes,
        )

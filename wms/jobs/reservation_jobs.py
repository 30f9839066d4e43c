"""
Reservation Jobs

- expire_reservations: flips ACTIVE reservations past their expiry date to EXPIRED
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from wms.core.tenant_context import RequestContext
from wms.jobs.tenant_job_runner import tenant_job
from wms.services.stock_reservation_service import StockReservationService

logger = logging.getLogger(__name__)


@tenant_job("expire_reservations")
async def expire_reservations_job(session: AsyncSession, context: RequestContext) -> int:
    count = await StockReservationService(session, context).expire_reservations()
    if count:
        logger.info(f"Tenant {context.tenant_id}: expired {count} reservation(s)")
    return count

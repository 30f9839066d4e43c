"""
Tenant-Aware Job Runner

Runs background jobs once per tenant. Tenant tables are shared, so a
"tenant" here is any tenant id that owns product rows; each run gets its
own session and a RequestContext without an actor.

Architecture:
- Jobs are registered with the @tenant_job decorator
- TenantJobRunner iterates through the known tenants
- Failures in one tenant don't affect others

Usage:
    @tenant_job("expire_reservations")
    async def expire_reservations_job(session, context):
        ...
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from functools import wraps
from typing import Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wms.core.tenant_context import RequestContext

logger = logging.getLogger(__name__)

# Registry of tenant-aware jobs
_tenant_jobs: Dict[str, Callable] = {}


def tenant_job(name: str):
    """
    Decorator to register a tenant-aware background job.

    The decorated function receives:
    - session: AsyncSession for the run
    - context: RequestContext carrying the tenant id
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(session: AsyncSession, context: RequestContext):
            return await func(session, context)

        _tenant_jobs[name] = wrapper
        logger.debug(f"Registered tenant job: {name}")
        return wrapper
    return decorator


def registered_jobs() -> List[str]:
    return list(_tenant_jobs.keys())


class TenantJobRunner:
    """
    Executes background jobs across all tenants.

    - Error isolation (one tenant failure doesn't affect others)
    - Bounded concurrency
    """

    def __init__(self, session_factory: Optional[Callable] = None, max_concurrent: int = 5):
        if session_factory is None:
            from wms.database import async_session_factory
            session_factory = async_session_factory
        self.session_factory = session_factory
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def get_active_tenants(self) -> List[uuid.UUID]:
        """Tenant ids that own at least one product."""
        from wms.models.product import Product

        async with self.session_factory() as session:
            result = await session.execute(
                select(Product.tenant_id).distinct().order_by(Product.tenant_id)
            )
            return list(result.scalars().all())

    async def run_job_for_tenant(
        self,
        job_name: str,
        job_func: Callable,
        tenant_id: uuid.UUID,
    ) -> dict:
        start_time = datetime.now(timezone.utc)
        result = {
            "tenant_id": str(tenant_id),
            "job": job_name,
            "status": "pending",
            "error": None,
            "output": None,
        }

        try:
            async with self._semaphore:
                async with self.session_factory() as session:
                    result["output"] = await job_func(session, RequestContext(tenant_id=tenant_id))
                    result["status"] = "success"
        except Exception as e:
            result["status"] = "failed"
            result["error"] = str(e)
            logger.error(f"Job '{job_name}' failed for tenant {tenant_id}: {e}")

        result["duration_ms"] = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
        return result

    async def run_job(self, job_name: str) -> dict:
        """Run a registered job for every tenant and summarize the results."""
        if job_name not in _tenant_jobs:
            raise ValueError(f"Unknown job: {job_name}. Registered: {registered_jobs()}")

        job_func = _tenant_jobs[job_name]
        tenants = await self.get_active_tenants()
        if not tenants:
            logger.info(f"No tenants found. Job '{job_name}' skipped.")
            return {"job": job_name, "status": "skipped", "tenant_count": 0}

        results = await asyncio.gather(*[
            self.run_job_for_tenant(job_name, job_func, tenant_id) for tenant_id in tenants
        ])

        successful = sum(1 for r in results if r["status"] == "success")
        return {
            "job": job_name,
            "status": "completed",
            "tenant_count": len(tenants),
            "successful": successful,
            "failed": len(tenants) - successful,
            "results": results,
        }


async def run_tenant_job(job_name: str, session_factory: Optional[Callable] = None) -> dict:
    """Convenience function to run a tenant job."""
    return await TenantJobRunner(session_factory=session_factory).run_job(job_name)

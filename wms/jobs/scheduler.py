"""
APScheduler configuration.

Background jobs run across all tenants through the TenantJobRunner.
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from wms.config import settings

logger = logging.getLogger(__name__)

jobstores = {
    'default': MemoryJobStore()
}

executors = {
    'default': AsyncIOExecutor(),
}

job_defaults = {
    'coalesce': True,  # Combine multiple pending executions into one
    'max_instances': 1,  # Only one instance of each job at a time
    'misfire_grace_time': 60,
}

scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
    timezone='UTC'
)


async def run_tenant_aware_job(job_name: str):
    """Called by APScheduler; delegates to the TenantJobRunner."""
    from wms.jobs.tenant_job_runner import run_tenant_job

    try:
        result = await run_tenant_job(job_name)
        logger.info(
            f"Job '{job_name}' completed: "
            f"{result.get('successful', 0)}/{result.get('tenant_count', 0)} tenants successful"
        )
    except Exception as e:
        logger.error(f"Job '{job_name}' failed: {e}")


def start_scheduler():
    """Start the background job scheduler."""
    if scheduler.running:
        return

    # Registers @tenant_job functions
    from wms.jobs import reservation_jobs  # noqa: F401

    scheduler.add_job(
        run_tenant_aware_job,
        'interval',
        minutes=settings.RESERVATION_EXPIRY_INTERVAL_MINUTES,
        args=['expire_reservations'],
        id='expire_reservations',
        name='[Multi-Tenant] Expire Stock Reservations',
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Background job scheduler started")

    for job in scheduler.get_jobs():
        logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background job scheduler stopped")


def get_job_status():
    """Get status of all scheduled jobs."""
    return [
        {
            'id': job.id,
            'name': job.name,
            'next_run_time': str(job.next_run_time) if job.next_run_time else None,
            'trigger': str(job.trigger),
        }
        for job in scheduler.get_jobs()
    ]

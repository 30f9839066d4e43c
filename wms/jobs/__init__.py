"""
Background Jobs Module

Handles scheduled tasks for:
- Reservation expiry
"""

from wms.jobs.scheduler import scheduler, start_scheduler, shutdown_scheduler

__all__ = [
    "scheduler",
    "start_scheduler",
    "shutdown_scheduler",
]

"""
Tenant middleware for multi-tenant request handling
"""
from fastapi import Request
import logging

logger = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-ID"
ACTOR_HEADER = "X-User-ID"


async def tenant_middleware(request: Request, call_next):
    """
    Copy tenant and actor identifiers from headers onto request.state.

    Authentication is handled upstream (API gateway / auth service), which
    is responsible for setting both headers. Validation of the values happens
    in the ``get_request_context`` dependency so that public routes such as
    /health work without them.
    """
    request.state.tenant_id = request.headers.get(TENANT_HEADER)
    request.state.actor_id = request.headers.get(ACTOR_HEADER)

    if request.state.tenant_id:
        logger.debug(f"Tenant identified by header: {request.state.tenant_id}")

    return await call_next(request)

from typing import Annotated
import logging

from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wms.database import get_db
from wms.core.tenant_context import RequestContext, NoTenantContextError


logger = logging.getLogger(__name__)


async def get_request_context(request: Request) -> RequestContext:
    """
    Dependency to get the tenant/actor context for the current request.

    The tenant middleware copies X-Tenant-ID / X-User-ID onto request.state.
    """
    try:
        return RequestContext.from_values(
            getattr(request.state, "tenant_id", None),
            getattr(request.state, "actor_id", None),
        )
    except NoTenantContextError as e:
        logger.warning(f"Rejected request without tenant context: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


# Type aliases for cleaner dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]
Context = Annotated[RequestContext, Depends(get_request_context)]

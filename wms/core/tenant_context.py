"""
Request context for multi-tenant stock operations.

Every service receives a RequestContext instead of reading an ambient
"current company" or "current user". All tenant tables are shared, so
isolation depends on each query filtering by ``tenant_id``.

Key Principles:
1. NEVER query a tenant table without ``Model.tenant_id == context.tenant_id``
2. ALWAYS stamp ``tenant_id`` and ``created_by`` on inserts
3. The actor id is optional (system jobs run without one)

Usage:

    context = RequestContext(tenant_id=tenant_uuid, actor_id=user_uuid)
    service = InventoryService(db, context)
    position = await service.get_stock_position(product_id, warehouse_id)
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


class NoTenantContextError(Exception):
    """Raised when code requires tenant context but none is provided."""
    pass


@dataclass(frozen=True)
class RequestContext:
    """Owning tenant and acting user for one request or job run."""
    tenant_id: uuid.UUID
    actor_id: Optional[uuid.UUID] = None

    @classmethod
    def from_values(cls, tenant_id: Any, actor_id: Any = None) -> "RequestContext":
        """
        Build a context from raw header/state values.

        Raises:
            NoTenantContextError: If tenant id is missing or not a UUID
        """
        if not tenant_id:
            raise NoTenantContextError("Tenant context is required")
        try:
            tenant_uuid = tenant_id if isinstance(tenant_id, uuid.UUID) else uuid.UUID(str(tenant_id))
        except ValueError:
            raise NoTenantContextError(f"Invalid tenant id: {tenant_id}")

        actor_uuid = None
        if actor_id:
            try:
                actor_uuid = actor_id if isinstance(actor_id, uuid.UUID) else uuid.UUID(str(actor_id))
            except ValueError:
                logger.warning(f"Ignoring invalid actor id: {actor_id}")

        return cls(tenant_id=tenant_uuid, actor_id=actor_uuid)

    def stamp(self, **values: Any) -> dict:
        """Return insert values with tenant and creator filled in."""
        values["tenant_id"] = self.tenant_id
        values.setdefault("created_by", self.actor_id)
        return values

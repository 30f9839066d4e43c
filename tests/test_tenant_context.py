"""Request context tests."""
import uuid

import pytest

from wms.core.tenant_context import NoTenantContextError, RequestContext


def test_from_header_values():
    tenant, actor = uuid.uuid4(), uuid.uuid4()
    context = RequestContext.from_values(str(tenant), str(actor))
    assert context == RequestContext(tenant_id=tenant, actor_id=actor)


@pytest.mark.parametrize("value", [None, "", "tenant-1"])
def test_missing_or_invalid_tenant(value):
    with pytest.raises(NoTenantContextError):
        RequestContext.from_values(value)


def test_invalid_actor_is_dropped():
    context = RequestContext.from_values(str(uuid.uuid4()), "someone")
    assert context.actor_id is None


def test_stamp_sets_tenant_and_creator():
    context = RequestContext(tenant_id=uuid.uuid4(), actor_id=uuid.uuid4())
    values = context.stamp(quantity=1, tenant_id=uuid.uuid4())

    assert values["tenant_id"] == context.tenant_id
    assert values["created_by"] == context.actor_id
    assert values["quantity"] == 1

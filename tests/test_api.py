"""HTTP API tests."""
import uuid
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import WAREHOUSE_ID, OTHER_TENANT_ID


async def test_health_and_root(client):
    root = await client.get("/")
    assert root.status_code == 200
    assert "version" in root.json()


async def test_tenant_header_required(client, stocked_product):
    response = await client.get(
        "/api/v1/inventory/stock-position",
        params={"product_id": str(stocked_product.id), "warehouse_id": str(WAREHOUSE_ID)},
    )
    assert response.status_code == 400


async def test_invalid_tenant_header_rejected(client, stocked_product):
    response = await client.get(
        "/api/v1/inventory/stock-position",
        params={"product_id": str(stocked_product.id), "warehouse_id": str(WAREHOUSE_ID)},
        headers={"X-Tenant-ID": "not-a-uuid"},
    )
    assert response.status_code == 400


async def test_stock_position(client, tenant_headers, stocked_product):
    response = await client.get(
        "/api/v1/inventory/stock-position",
        params={"product_id": str(stocked_product.id), "warehouse_id": str(WAREHOUSE_ID)},
        headers=tenant_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert Decimal(str(body["current_stock"])) == 60
    assert Decimal(str(body["available_stock"])) == 60


async def test_stock_position_other_tenant_sees_nothing(client, stocked_product):
    response = await client.get(
        "/api/v1/inventory/stock-position",
        params={"product_id": str(stocked_product.id), "warehouse_id": str(WAREHOUSE_ID)},
        headers={"X-Tenant-ID": str(OTHER_TENANT_ID)},
    )
    assert Decimal(str(response.json()["current_stock"])) == 0


async def test_validate(client, tenant_headers, stocked_product):
    response = await client.post(
        "/api/v1/inventory/validate",
        json={
            "product_id": str(stocked_product.id),
            "warehouse_id": str(WAREHOUSE_ID),
            "quantity": "70",
            "transaction_type": "SALE_OUT",
        },
        headers=tenant_headers,
    )

    assert response.status_code == 200
    assert response.json()["is_valid"] is False
    assert response.json()["message"] == "Insufficient stock. Available: 60, Required: 70"


async def test_movement_conflict_on_shortage(client, tenant_headers, stocked_product):
    payload = {
        "transaction_type": "SALE_OUT",
        "warehouse_id": str(WAREHOUSE_ID),
        "lines": [{"product_id": str(stocked_product.id), "quantity": "61"}],
    }

    response = await client.post("/api/v1/inventory/movements", json=payload, headers=tenant_headers)
    assert response.status_code == 409

    payload["lines"][0]["quantity"] = "60"
    response = await client.post("/api/v1/inventory/movements", json=payload, headers=tenant_headers)
    assert response.status_code == 201
    assert response.json()["success"] is True


async def test_movement_requires_positive_quantity(client, tenant_headers, stocked_product):
    response = await client.post(
        "/api/v1/inventory/movements",
        json={
            "transaction_type": "PURCHASE_IN",
            "warehouse_id": str(WAREHOUSE_ID),
            "lines": [{"product_id": str(stocked_product.id), "quantity": "0"}],
        },
        headers=tenant_headers,
    )
    assert response.status_code == 422


async def test_reservation_lifecycle(client, tenant_headers, stocked_product):
    created = await client.post(
        "/api/v1/reservations",
        json={
            "product_id": str(stocked_product.id),
            "warehouse_id": str(WAREHOUSE_ID),
            "quantity": "5",
            "reference_type": "SALES_ORDER",
        },
        headers=tenant_headers,
    )
    assert created.status_code == 201
    reservation_id = created.json()["id"]

    active = await client.get(
        "/api/v1/reservations/active",
        params={"product_id": str(stocked_product.id), "warehouse_id": str(WAREHOUSE_ID)},
        headers=tenant_headers,
    )
    assert [r["id"] for r in active.json()] == [reservation_id]

    for _ in range(2):
        released = await client.post(f"/api/v1/reservations/{reservation_id}/release", headers=tenant_headers)
        assert released.status_code == 200

    fulfilled = await client.post(f"/api/v1/reservations/{reservation_id}/fulfill", headers=tenant_headers)
    assert fulfilled.status_code == 409

    missing = await client.post(f"/api/v1/reservations/{uuid.uuid4()}/release", headers=tenant_headers)
    assert missing.status_code == 404


async def test_serial_number_flow(client, tenant_headers, product):
    created = await client.post(
        "/api/v1/serial-numbers",
        json={"serial_numbers": [
            {"product_id": str(product.id), "serial_number": "SN-A", "warehouse_id": str(WAREHOUSE_ID)},
            {"product_id": str(product.id), "serial_number": "SN-B", "warehouse_id": str(WAREHOUSE_ID)},
        ]},
        headers=tenant_headers,
    )
    assert created.status_code == 201

    sold = await client.post(
        "/api/v1/serial-numbers/status",
        json={"serial_numbers": ["SN-A"], "status": "SOLD"},
        headers=tenant_headers,
    )
    assert sold.status_code == 200

    illegal = await client.post(
        "/api/v1/serial-numbers/status",
        json={"serial_numbers": ["SN-A", "SN-B"], "status": "AVAILABLE"},
        headers=tenant_headers,
    )
    assert illegal.status_code == 409

    available = await client.get(
        "/api/v1/serial-numbers/available",
        params={"product_id": str(product.id), "warehouse_id": str(WAREHOUSE_ID)},
        headers=tenant_headers,
    )
    assert [s["serial_number"] for s in available.json()] == ["SN-B"]


async def test_qc_hold_flow(client, tenant_headers, product):
    created = await client.post(
        "/api/v1/quality-control/holds",
        json={
            "product_id": str(product.id),
            "warehouse_id": str(WAREHOUSE_ID),
            "hold_quantity": "3",
            "hold_reason": "Inspection",
        },
        headers=tenant_headers,
    )
    assert created.status_code == 201
    assert created.json()["status"] == "ON_HOLD"
    hold_id = created.json()["id"]

    released = await client.post(
        f"/api/v1/quality-control/holds/{hold_id}/release",
        json={"notes": "OK"},
        headers=tenant_headers,
    )
    assert released.status_code == 200

    again = await client.post(f"/api/v1/quality-control/holds/{hold_id}/reject", headers=tenant_headers)
    assert again.status_code == 409

    missing = await client.post(
        f"/api/v1/quality-control/holds/{uuid.uuid4()}/release", headers=tenant_headers
    )
    assert missing.status_code == 404


async def test_damage_assessment_flow(client, tenant_headers, product):
    created = await client.post(
        "/api/v1/quality-control/damage-assessments",
        json={
            "warehouse_id": str(WAREHOUSE_ID),
            "product_id": str(product.id),
            "damaged_quantity": "2",
            "damage_type": "CRUSHED",
            "damage_severity": "MINOR",
            "assessment_date": "2026-10-01",
        },
        headers=tenant_headers,
    )
    assert created.status_code == 201

    listed = await client.get(
        "/api/v1/quality-control/damage-assessments",
        params={"warehouse_id": str(WAREHOUSE_ID), "from_date": "2026-09-01"},
        headers=tenant_headers,
    )
    assert len(listed.json()) == 1


async def test_pick_list_flow(client, tenant_headers, product):
    created = await client.post(
        "/api/v1/picklists",
        json={
            "warehouse_id": str(WAREHOUSE_ID),
            "items": [
                {"product_id": str(product.id), "warehouse_id": str(WAREHOUSE_ID), "required_quantity": "4"},
                {"product_id": str(product.id), "warehouse_id": str(WAREHOUSE_ID), "required_quantity": "1"},
            ],
        },
        headers=tenant_headers,
    )
    assert created.status_code == 201
    pick_list_id = created.json()["id"]

    details = (await client.get(f"/api/v1/picklists/{pick_list_id}/details", headers=tenant_headers)).json()
    assert [d["pick_sequence"] for d in details] == [1, 2]

    first = details[0]["id"]
    picked = await client.patch(
        f"/api/v1/picklists/details/{first}", json={"picked_quantity": "2"}, headers=tenant_headers
    )
    assert picked.status_code == 200

    closed = await client.post(f"/api/v1/picklists/details/{first}/close", headers=tenant_headers)
    assert closed.json()["status"] == "SHORT"


async def test_physical_count_evaluate(client, tenant_headers, product):
    response = await client.post(
        "/api/v1/physical-count/evaluate",
        json=[{"product_id": str(product.id), "system_quantity": "10", "counted_quantity": "8"}],
        headers=tenant_headers,
    )

    assert response.status_code == 200
    assert response.json()[0]["adjustment_decision"] == "ADJUST_TO_COUNT"


async def test_uom_convert_reports_missing_conversion(client, tenant_headers, product):
    response = await client.post(
        "/api/v1/uom/convert",
        json={
            "product_id": str(product.id),
            "quantity": "5",
            "from_uom_id": str(uuid.uuid4()),
            "to_uom_id": str(uuid.uuid4()),
        },
        headers=tenant_headers,
    )

    assert response.status_code == 200
    assert response.json()["is_converted"] is False


def _break_store(monkeypatch):
    async def fail(self, *args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(AsyncSession, "execute", fail)


async def test_validate_accepts_lowercase_types(client, tenant_headers, stocked_product):
    body = {
        "product_id": str(stocked_product.id),
        "warehouse_id": str(WAREHOUSE_ID),
        "quantity": "70",
    }

    inbound = await client.post(
        "/api/v1/inventory/validate", json={**body, "transaction_type": "purchase_in"}, headers=tenant_headers
    )
    assert inbound.json()["is_valid"] is True

    outbound = await client.post(
        "/api/v1/inventory/validate", json={**body, "transaction_type": "sale_out"}, headers=tenant_headers
    )
    assert outbound.json()["is_valid"] is False


async def test_movement_with_invalid_reservation_conflicts(client, tenant_headers, stocked_product):
    response = await client.post(
        "/api/v1/inventory/movements",
        json={
            "transaction_type": "SALE_OUT",
            "warehouse_id": str(WAREHOUSE_ID),
            "lines": [{"product_id": str(stocked_product.id), "quantity": "1"}],
            "reservation_ids": [str(uuid.uuid4())],
        },
        headers=tenant_headers,
    )
    assert response.status_code == 409


async def test_transfer_movement_returns_receipt(client, tenant_headers, stocked_product):
    response = await client.post(
        "/api/v1/inventory/movements",
        json={
            "transaction_type": "TRANSFER_OUT",
            "warehouse_id": str(WAREHOUSE_ID),
            "counterpart_warehouse_id": str(uuid.uuid4()),
            "lines": [{"product_id": str(stocked_product.id), "quantity": "10"}],
        },
        headers=tenant_headers,
    )
    assert response.status_code == 201
    assert response.json()["counterpart_txn_number"].startswith("TXN-")


async def test_pick_quantity_unknown_or_closed_line(client, tenant_headers, product):
    missing = await client.patch(
        f"/api/v1/picklists/details/{uuid.uuid4()}", json={"picked_quantity": "1"}, headers=tenant_headers
    )
    assert missing.status_code == 404

    created = await client.post(
        "/api/v1/picklists",
        json={
            "warehouse_id": str(WAREHOUSE_ID),
            "items": [{"product_id": str(product.id), "warehouse_id": str(WAREHOUSE_ID), "required_quantity": "2"}],
        },
        headers=tenant_headers,
    )
    details = (await client.get(f"/api/v1/picklists/{created.json()['id']}/details", headers=tenant_headers)).json()
    line = details[0]["id"]
    await client.post(f"/api/v1/picklists/details/{line}/close", headers=tenant_headers)

    closed = await client.patch(
        f"/api/v1/picklists/details/{line}", json={"picked_quantity": "2"}, headers=tenant_headers
    )
    assert closed.status_code == 409


async def test_serial_status_unknown_serial_not_found(client, tenant_headers):
    response = await client.post(
        "/api/v1/serial-numbers/status",
        json={"serial_numbers": ["SN-NOPE"], "status": "SOLD"},
        headers=tenant_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Unknown serial(s): SN-NOPE"


async def test_store_errors_map_to_unavailable(client, tenant_headers, monkeypatch):
    _break_store(monkeypatch)

    paths = [
        ("post", f"/api/v1/reservations/{uuid.uuid4()}/release", None),
        ("post", f"/api/v1/quality-control/holds/{uuid.uuid4()}/release", None),
        ("patch", f"/api/v1/picklists/details/{uuid.uuid4()}", {"picked_quantity": "1"}),
        ("post", "/api/v1/serial-numbers/status", {"serial_numbers": ["SN-1"], "status": "SOLD"}),
    ]
    for method, path, body in paths:
        response = await client.request(method.upper(), path, json=body, headers=tenant_headers)
        assert response.status_code == 503, path

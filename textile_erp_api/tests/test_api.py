from textile_erp.core.deps import get_tenant_context


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["message"] == "Healthy"


def test_api_info_lists_resources(client):
    body = client.get("/api/v1").json()
    assert "Inventory" in body["details"]["resources"]
    assert "Purchase orders" in body["details"]["resources"]
    assert "Payments" in body["details"]["resources"]
    assert "Health" not in body["details"]["resources"]


def test_tenant_echo(client):
    tenant = "8a1f3c52-4d0e-4b7a-9c1e-2f6d5b3a7e10"
    response = client.get("/api/v1/health/tenant", headers={"X-Tenant-ID": tenant})
    assert response.status_code == 200
    assert response.json()["tenant_id"] == tenant


def test_missing_tenant_header_uses_error_envelope(client):
    response = client.get("/api/v1/health/tenant", headers={"X-Correlation-ID": "req-42"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Tenant context required"
    assert body["error"]["type"] == "http_error"
    assert body["correlation_id"] == "req-42"
    assert response.headers["X-Correlation-ID"] == "req-42"


def test_malformed_tenant_header(client):
    response = client.get("/api/v1/health/tenant", headers={"X-Tenant-ID": "acme"})
    assert response.status_code == 400
    assert "valid UUID" in response.json()["message"]


def test_validation_errors_use_envelope(client, as_role):
    as_role("OWNER")
    response = client.get("/api/v1/inventory/movements", params={"limit": "many"})
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "validation_error"


def test_tenant_routes_require_a_token(client):
    response = client.get(
        "/api/v1/inventory/movement-types",
        headers={"X-Tenant-ID": "8a1f3c52-4d0e-4b7a-9c1e-2f6d5b3a7e10"},
    )
    assert response.status_code == 401


def test_reports_need_a_manager(client, as_role):
    as_role("VIEWER")
    response = client.get("/api/v1/reports/profit-loss")
    assert response.status_code == 403
    assert response.json()["message"] == "Insufficient permissions"


def test_location_changes_need_an_admin(client, as_role):
    as_role("MANAGER")
    response = client.post("/api/v1/locations", json={"name": "Store 2", "type": "STORE"})
    assert response.status_code == 403



def test_payment_cancellation_needs_an_admin(client, as_role):
    as_role("MANAGER")
    response = client.patch("/api/v1/payments/PAY0001/cancel", json={"reason": "Duplicate entry"})
    assert response.status_code == 403


def test_purchase_orders_are_raised_by_managers(client, as_role):
    as_role("EMPLOYEE")
    response = client.post(
        "/api/v1/purchase-orders",
        json={"po_date": "2026-03-02", "items": [{"item_code": "YRN-40S", "quantity": "5", "unit_cost": "12"}]},
    )
    assert response.status_code == 403


def test_payment_amount_must_be_positive(client, as_role):
    as_role("OWNER")
    response = client.post(
        "/api/v1/payments",
        json={
            "reference_type": "INVOICE",
            "reference_id": "3f1c2a9e-5b7d-4e08-9a61-c2d4e6f80b13",
            "amount": "0",
            "payment_method": "CASH",
        },
    )
    assert response.status_code == 422

def test_movement_type_options(client, as_role):
    as_role("OPERATOR")
    response = client.get("/api/v1/inventory/movement-types")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert {"value": "TRANSFER_IN", "label": "Transfer In"} in body["data"]


def test_overrides_are_cleared_between_tests(client):
    from textile_erp.api.main import app

    assert get_tenant_context not in app.dependency_overrides

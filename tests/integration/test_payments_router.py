import pytest
from fastapi.testclient import TestClient

from hyperpay_backend.errors import ConfigurationError, GatewayError

FRONTEND = "https://shop.example.com"


def _fill_cart(store):
    store.add_cart_item("b1", "s1", {"id": "i1", "productId": "p1", "quantity": 2, "supplierId": "s1"})
    store.add_cart_item("b1", "s1", {"id": "i2", "productId": "p2", "quantity": 1, "supplierId": "s1"})


# --- POST /api/create-checkout ---

def test_create_checkout_returns_checkout_id(client: TestClient, gateway):
    resp = client.post("/api/create-checkout", json={"amount": "92", "name": "Ali Hassan", "city": "Jeddah"})

    assert resp.status_code == 200
    assert resp.json() == {"checkoutId": "8ac7a4c9_checkout"}
    sent = gateway.created[0]
    assert sent["amount"] == "92.00"
    assert sent["entityId"] == "test-entity"
    assert sent["billing.city"] == "Jeddah"
    assert sent["customer.email"] == "buyer@example.com"


def test_create_checkout_missing_name_is_400_without_gateway_call(client: TestClient, gateway):
    resp = client.post("/api/create-checkout", json={"amount": "92"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: name or amount"}
    assert gateway.created == []


@pytest.mark.parametrize("amount", ["1e30", "0.001", "-3"])
def test_create_checkout_out_of_range_amount_is_400(client: TestClient, gateway, amount):
    resp = client.post("/api/create-checkout", json={"amount": amount, "name": "Ali"})

    assert resp.status_code == 400
    assert "error" in resp.json()
    assert gateway.created == []


def test_create_checkout_sends_street_as_street1(client: TestClient, gateway):
    client.post("/api/create-checkout", json={"amount": "10", "name": "Ali", "street": "Olaya Street"})
    assert gateway.created[0]["billing.street1"] == "Olaya Street"
    assert "billing.street" not in gateway.created[0]


def test_create_checkout_invalid_json_is_400(client: TestClient, gateway):
    resp = client.post("/api/create-checkout", content=b"not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert gateway.created == []


def test_create_checkout_gateway_error_is_500_with_details(client: TestClient, gateway):
    gateway.error = GatewayError("HyperPay request failed",
                                 details={"result": {"code": "200.300.404", "description": "invalid parameter"}})

    resp = client.post("/api/create-checkout", json={"amount": "92", "name": "Ali"})

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "HyperPay request failed",
        "details": {"result": {"code": "200.300.404", "description": "invalid parameter"}},
    }


def test_create_checkout_configuration_error_is_500(client: TestClient, gateway):
    gateway.error = ConfigurationError("HYPERPAY_ACCESS_TOKEN ou HYPERPAY_ENTITY_ID manquant")
    resp = client.post("/api/create-checkout", json={"amount": "92", "name": "Ali"})
    assert resp.status_code == 500
    assert "error" in resp.json()


# --- GET /api/payment-status ---

def test_payment_status_declined_redirects_to_failure(client: TestClient, gateway, store, payment_factory, resource_path):
    _fill_cart(store)
    gateway.payment = payment_factory(code="100.396.101", description="Cancelled by user")

    resp = client.get("/api/payment-status",
                      params={"resourcePath": resource_path, "buyerId": "b1", "supplierId": "s1"},
                      follow_redirects=False)

    assert resp.status_code == 302
    assert resp.headers["location"] == f"{FRONTEND}/payment-failed?error=100.396.101&message=Cancelled%20by%20user"
    assert store.orders == {}
    assert len(store.cart("b1", "s1")) == 2


def test_payment_status_approved_creates_order_and_redirects(client: TestClient, gateway, store, resource_path):
    _fill_cart(store)

    resp = client.get("/api/payment-status",
                      params={"resourcePath": resource_path, "buyerId": "b1", "supplierId": "s1"},
                      follow_redirects=False)

    assert resp.status_code == 302
    assert resp.headers["location"] == f"{FRONTEND}/order-details/8ac7a4a1_tx1?supplierId=s1"
    assert gateway.fetched == [resource_path]
    order = store.orders["8ac7a4a1_tx1"]
    assert order["order_status"] == "Paid"
    assert [i["id"] for i in order["items"]] == ["i1", "i2"]
    assert store.cart("b1", "s1") == []


def test_payment_status_accepts_user_id_alias(client: TestClient, store, resource_path):
    _fill_cart(store)

    resp = client.get("/api/payment-status",
                      params={"resourcePath": resource_path, "userId": "b1", "supplierId": "s1"},
                      follow_redirects=False)

    assert resp.status_code == 302
    assert store.orders["8ac7a4a1_tx1"]["buyer_id"] == "b1"


def test_payment_status_repeated_redirect_keeps_one_order(client: TestClient, store, resource_path):
    _fill_cart(store)
    params = {"resourcePath": resource_path, "buyerId": "b1", "supplierId": "s1"}

    first = client.get("/api/payment-status", params=params, follow_redirects=False)
    second = client.get("/api/payment-status", params=params, follow_redirects=False)

    assert first.headers["location"] == second.headers["location"]
    assert list(store.orders) == ["8ac7a4a1_tx1"]
    assert len(store.orders["8ac7a4a1_tx1"]["items"]) == 2


def test_payment_status_missing_params_is_400(client: TestClient, gateway, resource_path):
    resp = client.get("/api/payment-status", params={"resourcePath": resource_path, "buyerId": "b1"},
                      follow_redirects=False)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing resourcePath, buyerId or supplierId"}
    assert gateway.fetched == []


def test_payment_status_gateway_error_is_plain_500(client: TestClient, gateway, store, resource_path):
    _fill_cart(store)
    gateway.error = GatewayError("HyperPay request failed", details="timed out")

    resp = client.get("/api/payment-status",
                      params={"resourcePath": resource_path, "buyerId": "b1", "supplierId": "s1"},
                      follow_redirects=False)

    assert resp.status_code == 500
    assert resp.text == "Error verifying payment"
    assert store.calls == []


def test_payment_status_store_error_is_plain_500(client: TestClient, store, resource_path):
    _fill_cart(store)
    store.fail_on = "create"

    resp = client.get("/api/payment-status",
                      params={"resourcePath": resource_path, "buyerId": "b1", "supplierId": "s1"},
                      follow_redirects=False)

    assert resp.status_code == 500
    assert resp.text == "Error verifying payment"
    assert len(store.cart("b1", "s1")) == 2


def test_payment_status_unexpected_error_is_plain_500(client: TestClient, gateway, resource_path):
    gateway.error = RuntimeError("boom")

    resp = client.get("/api/payment-status",
                      params={"resourcePath": resource_path, "buyerId": "b1", "supplierId": "s1"},
                      follow_redirects=False)

    assert resp.status_code == 500
    assert resp.text == "Error verifying payment"


# --- POST /api/verify-payment ---

def test_verify_payment_returns_status_without_persistence(client: TestClient, store, resource_path):
    _fill_cart(store)

    resp = client.post("/api/verify-payment", json={"resourcePath": resource_path})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["transactionId"] == "8ac7a4a1_tx1"
    assert body["result"] == {"code": "000.100.112", "description": "Request successfully processed"}
    assert body["amount"] == "92.00"
    assert body["paymentType"] == "DB"
    assert body["cardBrand"] == "VISA"
    assert body["customerName"] == "Ali"
    assert body["customerEmail"] == "ali@example.com"
    assert body["billing"]["city"] == "Riyadh"
    assert body["resourcePath"] == resource_path
    assert store.calls == []
    assert len(store.cart("b1", "s1")) == 2


def test_verify_payment_declined_is_still_200(client: TestClient, gateway, payment_factory, resource_path):
    gateway.payment = payment_factory(code="800.100.151", description="transaction declined (invalid card)")

    resp = client.post("/api/verify-payment", json={"resourcePath": resource_path})

    assert resp.status_code == 200
    assert resp.json()["result"]["code"] == "800.100.151"


def test_verify_payment_missing_resource_path_is_400(client: TestClient, gateway):
    resp = client.post("/api/verify-payment", json={})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Missing resourcePath"}
    assert gateway.fetched == []


def test_verify_payment_gateway_error_is_500(client: TestClient, gateway, resource_path):
    gateway.error = GatewayError("HyperPay request failed", details={"result": {"code": "700.400.580"}})

    resp = client.post("/api/verify-payment", json={"resourcePath": resource_path})

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Verification failed",
        "details": {"result": {"code": "700.400.580"}},
    }



@pytest.mark.parametrize("resource_path", [123, ["/v1/payments/x"], {"path": "/v1/payments/x"}])
def test_verify_payment_non_string_resource_path_is_400(client: TestClient, gateway, resource_path):
    resp = client.post("/api/verify-payment", json={"resourcePath": resource_path})

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert gateway.fetched == []


def test_verify_payment_malformed_gateway_body_keeps_envelope(client: TestClient, gateway, payment_factory,
                                                              resource_path):
    gateway.payment = {**payment_factory(), "card": "VISA"}

    resp = client.post("/api/verify-payment", json={"resourcePath": resource_path})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Verification failed"}

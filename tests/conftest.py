import os

# Pas de Redis en tests: à poser avant la construction de l'app
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Any, Dict, Generator, List, Optional
from fastapi.testclient import TestClient

from hyperpay_backend.app_setup.factory import create_app
from hyperpay_backend.config import Settings
from hyperpay_backend.errors import StoreError
from hyperpay_backend.payments.models import GatewaySession, GatewayTransactionResult, Order


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


class InMemoryOrderStore:
    """Store en mémoire avec la même interface que SupabaseOrderStore."""

    def __init__(self):
        self.carts: Dict[tuple, List[Dict[str, Any]]] = {}
        self.orders: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.fail_on: Optional[str] = None

    def add_cart_item(self, buyer_id: str, supplier_id: str, item: Dict[str, Any]) -> None:
        self.carts.setdefault((buyer_id, supplier_id), []).append(dict(item))

    def cart(self, buyer_id: str, supplier_id: str) -> List[Dict[str, Any]]:
        return self.carts.get((buyer_id, supplier_id), [])

    def _maybe_fail(self, op: str) -> None:
        self.calls.append(op)
        if self.fail_on == op:
            raise StoreError(f"{op} failed")

    def fetch_cart_items(self, buyer_id, supplier_id):
        self._maybe_fail("fetch")
        return sorted((dict(i) for i in self.cart(buyer_id, supplier_id)), key=lambda i: str(i.get("id")))

    def create_order(self, order: Order) -> bool:
        self._maybe_fail("create")
        if order.transaction_id in self.orders:
            return False
        self.orders[order.transaction_id] = order.to_record()
        return True

    def get_order(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        self._maybe_fail("get")
        return self.orders.get(transaction_id)

    def delete_cart_items(self, buyer_id, supplier_id, item_ids) -> int:
        self._maybe_fail("delete")
        ids = set(i for i in item_ids if i is not None)
        if not ids:
            return 0
        before = self.cart(buyer_id, supplier_id)
        remaining = [i for i in before if i.get("id") not in ids]
        self.carts[(buyer_id, supplier_id)] = remaining
        return len(before) - len(remaining)

    def table_status(self, name: str) -> Dict[str, Any]:
        return {"ok": True, "rows": 0}


class StubGateway:
    """Passerelle factice: enregistre les appels, renvoie des réponses configurées."""

    def __init__(self):
        self.created: List[Dict[str, str]] = []
        self.fetched: List[str] = []
        self.checkout_id = "8ac7a4c9_checkout"
        self.payment: Dict[str, Any] = make_payment()
        self.error: Optional[Exception] = None

    def create_checkout(self, params):
        self.created.append(dict(params))
        if self.error:
            raise self.error
        return GatewaySession(checkout_id=self.checkout_id)

    def fetch_resource_status(self, resource_path):
        self.fetched.append(resource_path)
        if self.error:
            raise self.error
        return GatewayTransactionResult.from_gateway(self.payment)

    def close(self):
        pass


def make_payment(code: str = "000.100.112", description: str = "Request successfully processed",
                 transaction_id: str = "8ac7a4a1_tx1") -> Dict[str, Any]:
    """Réponse HyperPay type pour GET {resourcePath}."""
    return {
        "id": transaction_id,
        "paymentType": "DB",
        "paymentBrand": "VISA",
        "amount": "92.00",
        "currency": "SAR",
        "result": {"code": code, "description": description},
        "card": {"bin": "420000", "last4Digits": "0000", "brand": "VISA"},
        "customer": {"givenName": "Ali", "surname": "Ali", "email": "ali@example.com"},
        "billing": {"street1": "King Fahad Road", "city": "Riyadh", "country": "SA"},
    }


RESOURCE_PATH = "/v1/checkouts/8ac7a4c9_checkout/payment"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        hyperpay_env="test",
        access_token="test-token",
        entity_id="test-entity",
        currency="SAR",
        frontend_url="https://shop.example.com",
        supabase_url="https://project.supabase.co",
        supabase_service_key="service-key",
    )


@pytest.fixture
def store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def app(settings, gateway, store):
    return create_app(settings, gateway=gateway, store=store)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def resource_path() -> str:
    return RESOURCE_PATH


@pytest.fixture
def payment_factory():
    return make_payment

import json
from decimal import Decimal
from typing import Any, Dict, Generator, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.app_setup.factory import create_app
from storefront.infra.http_client import create_http_client
from storefront.infra.storage import MemoryStorage
from storefront.payments import RedirectNavigator
from storefront.shell import StorefrontShell

COMMERCE_BASE_URL = "http://commerce.test"
T0 = 1_700_000_000_000


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class FakeCommerceApi:
    """
    API commerce simulée (httpx.MockTransport): panier serveur, sessions de checkout,
    statuts de paiement. Journalise chaque appel (méthode, chemin) et chaque corps reçu.
    """

    def __init__(self):
        self.products: Dict[str, Dict[str, Any]] = {
            "101": {
                "id": 101,
                "title": "MongoDB: The Definitive Guide",
                "author": "Shannon Bradshaw",
                "price": 39.99,
                "stock": 25,
                "imageUrl": "test-image.jpg",
                "description": "Guide complet",
            },
            "102": {
                "id": 102,
                "title": "Fluent Python",
                "author": "Luciano Ramalho",
                "price": 55.5,
                "discountPrice": 49.9,
                "stock": 3,
                "imageUrl": "fluent.jpg",
                "description": "Python idiomatique",
            },
        }
        self.cart: Dict[str, Dict[str, Any]] = {}
        self.payment_statuses: Dict[str, str] = {}
        self.calls: List[Tuple[str, str]] = []
        self.bodies: List[Tuple[str, str, Any]] = []
        self.failures: Dict[Tuple[str, str], Any] = {}
        self.session_id = "cs_test_123"
        self.session_url = "https://pay.processor.test/c/cs_test_123"

    # --- helpers de test ---
    def count(self, method: str, path: str) -> int:
        return sum(1 for c in self.calls if c == (method, path))

    def calls_to(self, prefix: str) -> List[Tuple[str, str]]:
        return [c for c in self.calls if c[1].startswith(prefix)]

    def fail(self, method: str, path: str, failure: Any = "network") -> None:
        """failure: "network" (ConnectError), httpx.Response, ou dict renvoyé en 200."""
        self.failures[(method, path)] = failure

    def heal(self, method: str, path: str) -> None:
        self.failures.pop((method, path), None)

    def cart_body(self) -> Dict[str, Any]:
        items = list(self.cart.values())
        total = sum((Decimal(str(it["unitPrice"])) * it["quantity"] for it in items), Decimal("0"))
        return {
            "items": [dict(it) for it in items],
            "totalItems": sum(it["quantity"] for it in items),
            "totalAmount": float(total),
        }

    # --- transport ---
    def handler(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append((method, path))
        body = json.loads(request.content) if request.content else None
        self.bodies.append((method, path, body))

        failure = self.failures.get((method, path))
        if failure == "network":
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(failure, httpx.Response):
            return failure
        if isinstance(failure, dict):
            return httpx.Response(200, json=failure)

        if method == "GET" and path == "/api/products":
            return httpx.Response(200, json={"success": True, "products": list(self.products.values())})
        if method == "GET" and path == "/api/cart":
            return httpx.Response(200, json={"success": True, "cart": self.cart_body()})
        if method == "POST" and path == "/api/cart":
            return self._add(body or {})
        if method == "DELETE" and path.startswith("/api/cart/"):
            product_id = path.rsplit("/", 1)[-1]
            if product_id not in self.cart:
                return httpx.Response(404, json={"success": False, "message": "Produit absent du panier"})
            del self.cart[product_id]
            return httpx.Response(200, json={"success": True, "cart": self.cart_body()})
        if method == "POST" and path == "/api/clear-cart":
            self.cart.clear()
            return httpx.Response(200, json={"success": True})
        if method == "POST" and path == "/create-checkout-session":
            return httpx.Response(
                200, json={"success": True, "sessionUrl": self.session_url, "sessionId": self.session_id}
            )
        if method == "GET" and path.startswith("/api/check-payment-status/"):
            sid = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={"paymentStatus": self.payment_statuses.get(sid, "pending")})
        return httpx.Response(404, json={"success": False})

    def _add(self, body: Dict[str, Any]) -> httpx.Response:
        key = str(body.get("productId"))
        product = self.products.get(key)
        if not product:
            return httpx.Response(404, json={"success": False, "message": "Produit introuvable"})
        line = self.cart.get(key) or {
            "productId": product["id"],
            "title": product["title"],
            "author": product["author"],
            "unitPrice": product.get("discountPrice", product["price"]),
            "quantity": 0,
            "imageUrl": product["imageUrl"],
        }
        # Le serveur plafonne au stock disponible
        line["quantity"] = min(line["quantity"] + int(body.get("quantity") or 1), product["stock"])
        self.cart[key] = line
        return httpx.Response(200, json={"success": True, "cart": self.cart_body()})


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def commerce_api() -> FakeCommerceApi:
    return FakeCommerceApi()


@pytest.fixture
def http_client(commerce_api) -> httpx.AsyncClient:
    return create_http_client(base_url=COMMERCE_BASE_URL, transport=httpx.MockTransport(commerce_api.handler))


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def navigator() -> RedirectNavigator:
    return RedirectNavigator()


@pytest.fixture
def shell(http_client, storage, navigator, clock) -> StorefrontShell:
    return StorefrontShell(http_client, storage, navigator, clock=clock)


@pytest.fixture
def app(http_client):
    fastapi_app = create_app()
    fastapi_app.state.http_client = http_client
    fastapi_app.state.storage = MemoryStorage()
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


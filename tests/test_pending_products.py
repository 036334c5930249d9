# tests/test_pending_products.py
import pytest

from conftest import paddy
from farmdesk.errors import FarmApiError
from farmdesk.services.admin.pending_products_service import (
    APPROVED_PRODUCT_KEY,
    REJECT_REASON,
    PendingProductsService,
)
from farmdesk.services.product_service import ProductService


class Catalog:
    """Minimal stateful /products backend."""

    def __init__(self, backend, products, honours_paddy_filter=True):
        self.products = {p["_id"]: p for p in products}
        self.honours_paddy_filter = honours_paddy_filter
        backend.on("GET", "/products", self.list)
        for pid in self.products:
            backend.on("PUT", f"/products/{pid}/status", self.status)

    def list(self, call):
        if "isProcessedRice" in call.query and not self.honours_paddy_filter:
            return 200, {"products": []}
        out = [p for p in self.products.values() if p["status"] == call.query.get("status")]
        if call.query.get("isProcessedRice") == "false":
            out = [p for p in out if not p["isProcessedRice"]]
        return 200, {"products": out}

    def status(self, call):
        pid = call.path.split("/")[2]
        self.products[pid]["status"] = call.body["status"]
        self.products[pid]["statusReason"] = call.body["reason"]
        return 200, {"message": f"Product status updated to {call.body['status']}", "product": self.products[pid]}


@pytest.fixture
def session_store():
    return {}


@pytest.fixture
def service(api, session_store):
    return PendingProductsService(ProductService(api), session_store)


def test_load_uses_strict_paddy_query(backend, service):
    Catalog(backend, [paddy("P1"), paddy("P2")])

    state = service.load()

    assert [p.id for p in state.pending()] == ["P1", "P2"]
    calls = backend.calls_to("GET", "/products")
    assert len(calls) == 1
    assert calls[0].query["status"] == "pending"
    assert calls[0].query["showAll"] == "true"
    assert calls[0].query["isProcessedRice"] == "false"
    assert calls[0].query["_t"].isdigit()


def test_empty_strict_query_falls_back_to_client_side_filter(backend, service):
    Catalog(
        backend,
        [
            paddy("P1"),
            paddy("R1", name="Sona Masuri Rice", isProcessedRice=True, paddySource="P0"),
        ],
        honours_paddy_filter=False,
    )

    state = service.load()

    assert [p.id for p in state.pending()] == ["P1"]
    first, second = backend.calls_to("GET", "/products")
    assert "isProcessedRice" not in second.query
    assert int(second.query["_t"]) == int(first.query["_t"]) + 1


def test_approve_hands_over_without_changing_status(backend, service, session_store):
    Catalog(backend, [paddy("P1", farmer_id="F1")])

    query = service.start_approval("P1", "F1")

    assert query == {"productId": "P1", "farmerId": "F1", "from": "pending-products"}
    assert session_store[APPROVED_PRODUCT_KEY] == "P1"
    assert backend.calls_to("PUT", "/products/P1/status") == []


def test_approved_product_is_hidden_once(backend, service, session_store):
    # the server has not caught up yet and still lists P1 as pending
    Catalog(backend, [paddy("P1"), paddy("P2")])
    session_store[APPROVED_PRODUCT_KEY] = "P1"

    assert [p.id for p in service.load().pending()] == ["P2"]
    assert APPROVED_PRODUCT_KEY not in session_store
    assert [p.id for p in service.load().pending()] == ["P1", "P2"]


def test_reject_then_refetch_excludes_product(backend, service):
    catalog = Catalog(backend, [paddy("P1"), paddy("P2")])

    change = service.reject("P1")
    assert backend.calls_to("GET", "/products") == []
    state = service.load(change)

    (put,) = backend.calls_to("PUT", "/products/P1/status")
    assert put.body == {"status": "rejected", "reason": REJECT_REASON}
    assert catalog.products["P1"]["status"] == "rejected"
    assert [p.id for p in state.pending()] == ["P2"]
    # refetch happened after the status update
    assert backend.calls[-1].method == "GET"


def test_reject_excludes_product_even_if_server_lags(backend, service):
    Catalog(backend, [paddy("P1"), paddy("P2")])
    backend.on("PUT", "/products/P1/status", (200, {"message": "queued"}))

    state = service.load(service.reject("P1", "Moisture too high"))

    assert [p.id for p in state.pending()] == ["P2"]
    assert state.by_id("P1").statusReason == "Moisture too high"


def test_reject_failure_propagates(backend, service):
    Catalog(backend, [paddy("P1")])
    backend.on("PUT", "/products/P1/status", (403, {"message": "Not authorized"}))

    with pytest.raises(FarmApiError) as exc:
        service.reject("P1")

    assert exc.value.status_code == 403

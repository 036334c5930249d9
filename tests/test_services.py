# tests/test_services.py
import pytest
from pydantic import ValidationError

from conftest import paddy
from farmdesk.models.inventory_models import StockAdjustment
from farmdesk.models.product_models import ProductCreate
from farmdesk.models.review_models import ReviewCreate
from farmdesk.services.inventory_service import InventoryService
from farmdesk.services.product_service import ProductService
from farmdesk.services.review_service import ReviewService
from farmdesk.services.task_service import TaskService


def test_product_flags_are_sent_as_lowercase_strings(backend, api):
    backend.on("GET", "/products", (200, {"products": []}))

    ProductService(api).get_products(status="approved", showAll=True, isProcessedRice=False, category=None)

    assert backend.calls[0].query == {"status": "approved", "showAll": "true", "isProcessedRice": "false"}


def test_farmer_ref_resolves_populated_and_bare(backend, api):
    backend.on(
        "GET",
        "/products/farmer/F1",
        (200, {"products": [paddy("P1", farmer_id="F1"), dict(paddy("P2"), farmer="F1")]}),
    )

    products = ProductService(api).get_products_by_farmer("F1")

    assert [p.farmer_id for p in products] == ["F1", "F1"]
    assert [p.farmer_name for p in products] == ["Ravi", "Unknown"]


def test_create_product_requires_long_description():
    with pytest.raises(ValidationError):
        ProductCreate(name="Rice", description="short", price=10, availableQuantity=5)


def test_status_update_body(backend, api):
    backend.on("PUT", "/products/P1/status", (200, {"message": "Product status updated to approved"}))

    assert ProductService(api).update_product_status("P1", "approved", "ok") is None
    assert backend.calls[0].body == {"status": "approved", "reason": "ok"}


def test_unknown_status_is_rejected_before_sending(backend, api):
    with pytest.raises(ValidationError):
        ProductService(api).update_product_status("P1", "archived")
    assert backend.calls == []


def _strict_adjust(call):
    body = call.body or {}
    if not body.get("quantity") or not body.get("reason") or not body.get("type"):
        return 400, {"message": "Quantity, reason, and adjustment type are required"}
    if body["type"] not in ("purchase", "sale", "adjustment", "return", "loss"):
        return 400, {"message": "Invalid adjustment type"}
    return 200, {"data": {"_id": "INV1", "quantity": 500 + body["quantity"]}}


def test_adjust_inventory_stock(backend, api):
    backend.on("POST", "/inventory/INV1/adjust", _strict_adjust)

    item = InventoryService(api).adjust_inventory_stock(
        "INV1", StockAdjustment(quantity=-20, reason="Spillage", type="loss")
    )

    assert item.quantity == 480
    assert backend.calls[0].body == {"quantity": -20, "reason": "Spillage", "type": "loss"}


def test_adjustment_type_defaults_to_adjustment(backend, api):
    backend.on("POST", "/inventory/INV1/adjust", _strict_adjust)

    InventoryService(api).adjust_inventory_stock("INV1", StockAdjustment(quantity=5, reason="Recount"))

    assert backend.calls[0].body["type"] == "adjustment"


def test_invalid_adjustments():
    with pytest.raises(ValidationError):
        StockAdjustment(quantity=0, reason="noop")
    with pytest.raises(ValidationError):
        StockAdjustment(quantity=5, reason="Recount", type="theft")


def test_inventory_lists(backend, api):
    backend.on("GET", "/inventory/low-stock", (200, {"data": [{"_id": "INV1", "quantity": 10}]}))
    backend.on("GET", "/inventory/metrics", (200, {"data": {"totalItems": 4}}))

    service = InventoryService(api)

    assert [i.id for i in service.get_low_stock_items()] == ["INV1"]
    assert service.get_inventory_metrics() == {"totalItems": 4}


def test_task_filters_drop_blanks(backend, api):
    backend.on("GET", "/tasks", (200, {"data": [{"_id": "T1", "title": "Dry paddy", "assignedTo": {"name": "Sita"}}]}))

    tasks = TaskService(api).get_all_tasks(status="pending", priority="", category=None)

    assert backend.calls[0].query == {"status": "pending"}
    assert tasks[0].assignee_name == "Sita"


def test_task_note(backend, api):
    backend.on("POST", "/tasks/T1/notes", (200, {"data": {"_id": "T1"}}))

    TaskService(api).add_task_note("T1", "Moisture at 14%")

    assert backend.calls[0].body == {"note": "Moisture at 14%"}


def test_reviews(backend, api):
    backend.on("GET", "/reviews/product/R1", (200, {"reviews": [{"_id": "RV1", "rating": 4, "comment": "Good", "user": {"name": "Meena"}}]}))
    backend.on("PUT", "/reviews/RV1/helpful", (200, {"helpful": 3}))

    service = ReviewService(api)
    (review,) = service.get_product_reviews("R1")

    assert review.author_name == "Meena"
    assert service.mark_review_as_helpful("RV1") == {"helpful": 3}


@pytest.mark.parametrize("rating", [0, 6])
def test_review_rating_bounds(rating):
    with pytest.raises(ValidationError):
        ReviewCreate(product="R1", rating=rating, comment="Fine")

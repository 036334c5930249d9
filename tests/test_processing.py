# tests/test_processing.py
import pytest

from conftest import paddy
from farmdesk.errors import FormValidationError
from farmdesk.models.product_models import Product
from farmdesk.services.admin.processing_service import (
    PaddyProcessingService,
    apply_conversion_rate,
    build_rice_product,
    draft_from_paddy,
    js_round,
    validate_draft,
)
from farmdesk.services.product_service import ProductService


def _paddy(**overrides):
    return Product.model_validate(paddy("P1", status="approved", **overrides))


@pytest.fixture
def service(api):
    return PaddyProcessingService(ProductService(api))


@pytest.mark.parametrize("value, expected", [(0.5, 1), (2.5, 3), (69.5, 70), (-0.5, 0), (70.49, 70)])
def test_js_round_rounds_half_up(value, expected):
    assert js_round(value) == expected


def test_default_rate_yields_seventy_percent():
    draft = draft_from_paddy(_paddy(availableQuantity=100, stockQuantity=100))

    assert draft.conversionRate == 0.7
    assert draft.availableQuantity == 70
    assert draft.stockQuantity == 70


def test_draft_from_paddy():
    draft = draft_from_paddy(_paddy(farmerPrice=50, availableQuantity=200, stockQuantity=180))

    assert draft.name == "Sona Masuri Rice"
    assert draft.description == (
        "Processed rice from premium quality Sona Masuri Paddy. Freshly harvested paddy from the delta"
    )
    assert draft.price == 75
    assert draft.availableQuantity == 140
    assert draft.stockQuantity == 126
    assert draft.paddySource == "P1"
    assert draft.images == ["https://img.test/paddy.jpg"]


def test_changing_rate_recomputes_from_available_quantity():
    source = _paddy(availableQuantity=200, stockQuantity=180)
    draft = draft_from_paddy(source)

    draft = apply_conversion_rate(draft, source, 0.65)

    assert draft.conversionRate == 0.65
    assert draft.availableQuantity == 130
    assert draft.stockQuantity == 130


def test_rice_product_carries_paddy_lineage():
    source = _paddy(farmerPrice=50, availableQuantity=200)
    rice = build_rice_product(draft_from_paddy(source), source)

    body = rice.model_dump(exclude_none=True)
    assert body["isProcessedRice"] is True
    assert body["paddySource"] == "P1"
    assert body["paddyToRiceConversion"] == {"rate": 0.7, "processingCost": 8}
    assert body["farmer"] == "F1"
    assert body["organicCertified"] is True
    assert body["harvestedDate"] == "2026-09-30"
    assert body["availableQuantity"] == 140
    assert body["price"] == 75


def test_validate_draft():
    draft = draft_from_paddy(_paddy()).model_copy(
        update={"name": "  ", "description": "short", "price": 0, "availableQuantity": None}
    )

    assert set(validate_draft(draft)) == {"name", "description", "price", "availableQuantity"}


def test_process_creates_new_rice_product(backend, service):
    backend.on("POST", "/products", lambda call: (201, {"message": "Product created successfully", "product": dict(call.body, _id="R1", status="approved")}))
    source = _paddy(farmerPrice=50, availableQuantity=200)

    created = service.process(source, draft_from_paddy(source))

    assert created.id == "R1"
    assert created.isProcessedRice is True
    assert created.paddySource == "P1"
    (call,) = backend.calls_to("POST", "/products")
    assert call.body["availableQuantity"] == 140
    assert call.body["price"] == 75


def test_quantity_override_is_not_capped(backend, service):
    backend.on("POST", "/products", lambda call: (201, {"product": dict(call.body, _id="R2")}))
    source = _paddy(availableQuantity=200)
    draft = draft_from_paddy(source).model_copy(update={"availableQuantity": 10000})

    service.process(source, draft)

    assert backend.calls_to("POST", "/products")[0].body["availableQuantity"] == 10000


def test_invalid_draft_is_not_sent(backend, service):
    source = _paddy()
    draft = draft_from_paddy(source).model_copy(update={"description": "too short"})

    with pytest.raises(FormValidationError) as exc:
        service.process(source, draft)

    assert exc.value.message == "Description must be at least 10 characters long"
    assert backend.calls == []


@pytest.mark.parametrize(
    "doc",
    [
        paddy("P1", status="pending"),
        paddy("P1", status="rejected"),
        paddy("P1", status="approved", isProcessedRice=True, paddySource="P0"),
    ],
)
def test_only_approved_paddy_is_processable(backend, service, doc):
    backend.on("GET", "/products/P1", (200, {"product": doc}))

    with pytest.raises(FormValidationError):
        service.get_processable_paddy("P1")


def test_list_approved_paddy_query(backend, service):
    backend.on("GET", "/products", (200, {"products": [paddy("P1", status="approved")]}))

    assert [p.id for p in service.list_approved_paddy()] == ["P1"]
    (call,) = backend.calls
    assert call.query["status"] == "approved"
    assert call.query["isProcessedRice"] == "false"
    assert call.query["showAll"] == "true"

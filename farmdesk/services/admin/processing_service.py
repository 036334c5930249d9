# farmdesk/services/admin/processing_service.py
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmdesk.errors import FormValidationError
from farmdesk.models.product_models import APPROVED, PaddyConversion, ProcessedRiceCreate, Product
from farmdesk.services.product_service import ProductService, cache_buster

logger = logging.getLogger(__name__)

DEFAULT_CONVERSION_RATE = 0.7
RICE_PRICE_MARKUP = 1.5
# share of the markup booked as milling cost
PROCESSING_COST_SHARE = 0.3


def js_round(value: float) -> int:
    """Half rounds up, like the storefront's Math.round. round() would give 2 for 2.5."""
    return int(math.floor(value + 0.5))


class ProcessingDraft(BaseModel):
    """The rice product being prepared from one paddy. Quantities may be overridden freely."""
    model_config = ConfigDict(extra="ignore")

    paddySource: str
    name: str = ""
    description: str = ""
    category: Optional[str] = None
    riceType: Optional[str] = None
    price: Optional[float] = None
    availableQuantity: Optional[float] = None
    stockQuantity: Optional[float] = None
    conversionRate: float = DEFAULT_CONVERSION_RATE
    images: List[str] = Field(default_factory=list)

    @field_validator("price", "availableQuantity", "stockQuantity", mode="before")
    @classmethod
    def _number(cls, v):
        if v is None or v == "":
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    @field_validator("conversionRate", mode="before")
    @classmethod
    def _rate(cls, v):
        try:
            return float(v)
        except (TypeError, ValueError):
            return DEFAULT_CONVERSION_RATE


def draft_from_paddy(paddy: Product, rate: float = DEFAULT_CONVERSION_RATE) -> ProcessingDraft:
    base_name = paddy.name.replace("Paddy", "", 1).strip()
    return ProcessingDraft(
        paddySource=paddy.id,
        name=f"{base_name} Rice",
        description=f"Processed rice from premium quality {paddy.name}. {paddy.description}",
        category=paddy.category,
        riceType=paddy.riceType,
        price=js_round(paddy.farmerPrice * RICE_PRICE_MARKUP),
        availableQuantity=js_round(paddy.availableQuantity * rate),
        stockQuantity=js_round(paddy.stockQuantity * rate),
        conversionRate=rate,
        images=list(paddy.images),
    )


def apply_conversion_rate(draft: ProcessingDraft, paddy: Product, rate: float) -> ProcessingDraft:
    """Both quantities follow the paddy's available quantity once the rate is touched."""
    qty = js_round(paddy.availableQuantity * rate)
    data = draft.model_dump()
    data.update(conversionRate=rate, availableQuantity=qty, stockQuantity=qty)
    return ProcessingDraft.model_validate(data)


def validate_draft(draft: ProcessingDraft) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not draft.name.strip():
        errors["name"] = "Product name is required"
    if len(draft.description or "") < 10:
        errors["description"] = "Description must be at least 10 characters long"
    if not draft.price or draft.price <= 0:
        errors["price"] = "Price must be greater than 0"
    if not draft.availableQuantity or draft.availableQuantity <= 0:
        errors["availableQuantity"] = "Available quantity must be greater than 0"
    return errors


def build_rice_product(draft: ProcessingDraft, paddy: Product) -> ProcessedRiceCreate:
    processing_cost = js_round((draft.price - paddy.farmerPrice) * PROCESSING_COST_SHARE)
    return ProcessedRiceCreate(
        name=draft.name,
        description=draft.description,
        category=draft.category,
        riceType=draft.riceType,
        price=draft.price,
        availableQuantity=draft.availableQuantity,
        stockQuantity=draft.stockQuantity if draft.stockQuantity is not None else draft.availableQuantity,
        images=list(draft.images),
        paddySource=paddy.id,
        paddyToRiceConversion=PaddyConversion(rate=draft.conversionRate, processingCost=processing_cost),
        farmer=paddy.farmer_id,
        organicCertified=paddy.organicCertified,
        harvestedDate=paddy.harvestedDate,
    )


class PaddyProcessingService:
    def __init__(self, products: ProductService):
        self.products = products

    def list_approved_paddy(self) -> List[Product]:
        return self.products.get_products(status=APPROVED, showAll=True, isProcessedRice=False, _t=cache_buster())

    def get_processable_paddy(self, paddy_id: str) -> Product:
        paddy = self.products.get_product_by_id(paddy_id)
        if paddy.status != APPROVED or paddy.isProcessedRice:
            raise FormValidationError(
                {"paddySource": "Only approved, unprocessed paddy can be milled into rice"},
                message="Please select an approved paddy to process",
            )
        return paddy

    def process(self, paddy: Product, draft: ProcessingDraft) -> Product:
        errors = validate_draft(draft)
        if errors:
            raise FormValidationError(errors, message=next(iter(errors.values())))

        rice = build_rice_product(draft, paddy)
        created = self.products.create_product(rice)
        logger.info(
            "Processed paddy %s into rice %s (rate=%s, qty=%s)",
            paddy.id,
            created.id,
            draft.conversionRate,
            rice.availableQuantity,
        )
        return created

# farmdesk/models/inventory_models.py

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_WAREHOUSE = "Main Warehouse"
DEFAULT_LOW_STOCK_THRESHOLD = 50
SELLING_MARKUP = 1.2

ADJUSTMENT_TYPES = ("purchase", "sale", "adjustment", "return", "loss")


class PackagingSize(BaseModel):
    weight: float = 1
    price: float = 0
    available: bool = True


class Packaging(BaseModel):
    sizes: List[PackagingSize] = Field(default_factory=lambda: [PackagingSize()])
    defaultSize: float = 1


def _number_or_none(v):
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


class PurchaseForm(BaseModel):
    """
    What the purchase form holds while the admin is typing. Anything may be
    blank or nonsense here; validate_purchase_form() decides if it can go out.
    """
    model_config = ConfigDict(extra="ignore")

    productId: str = ""
    farmerId: str = ""
    quantityPurchased: Optional[float] = None
    purchasePrice: Optional[float] = None
    sellingPrice: Optional[float] = None
    packaging: Packaging = Field(default_factory=Packaging)
    warehouseLocation: str = DEFAULT_WAREHOUSE
    lowStockThreshold: Optional[float] = DEFAULT_LOW_STOCK_THRESHOLD

    @field_validator("quantityPurchased", "purchasePrice", "sellingPrice", "lowStockThreshold", mode="before")
    @classmethod
    def _parse_number(cls, v):
        return _number_or_none(v)

    @field_validator("productId", "farmerId", mode="before")
    @classmethod
    def _strip_id(cls, v):
        return (v or "").strip()

    @property
    def total_amount(self) -> float:
        if not self.purchasePrice or not self.quantityPurchased:
            return 0
        return self.purchasePrice * self.quantityPurchased


class PurchaseRequest(BaseModel):
    """Body of POST /inventory/purchase. Only built from a form that passed validation."""

    productId: str = Field(..., min_length=1)
    farmerId: str = Field(..., min_length=1)
    quantityPurchased: float = Field(..., gt=0)
    purchasePrice: float = Field(..., gt=0)
    sellingPrice: float = Field(..., gt=0)
    packaging: Packaging = Field(default_factory=Packaging)
    warehouseLocation: str = DEFAULT_WAREHOUSE
    lowStockThreshold: float = DEFAULT_LOW_STOCK_THRESHOLD

    @classmethod
    def from_form(cls, form: PurchaseForm) -> "PurchaseRequest":
        data = form.model_dump()
        if data.get("lowStockThreshold") is None:
            data["lowStockThreshold"] = DEFAULT_LOW_STOCK_THRESHOLD
        return cls(**data)


def validate_purchase_form(form: PurchaseForm) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    if not form.productId:
        errors["productId"] = "Please select a product"
    if not form.farmerId:
        errors["farmerId"] = "Please select a farmer"
    if not form.quantityPurchased or form.quantityPurchased <= 0:
        errors["quantityPurchased"] = "Please enter a valid quantity"
    if not form.purchasePrice or form.purchasePrice <= 0:
        errors["purchasePrice"] = "Please enter a valid purchase price"
    if not form.sellingPrice or form.sellingPrice <= 0:
        errors["sellingPrice"] = "Please enter a valid selling price"

    return errors


def suggested_selling_price(base_price: Optional[float]) -> Optional[float]:
    if not base_price:
        return None
    return math.ceil(base_price * SELLING_MARKUP)


def format_rupees(amount: float) -> str:
    """₹35000 for whole amounts, ₹12.50 otherwise."""
    amount = float(amount or 0)
    if amount.is_integer():
        return f"₹{int(amount)}"
    return f"₹{amount:.2f}"


class InventoryItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    product: Any = None
    farmer: Any = None
    quantity: float = 0
    purchasePrice: Optional[float] = None
    sellingPrice: Optional[float] = None
    warehouseLocation: Optional[str] = None
    lowStockThreshold: Optional[float] = None


class StockAdjustment(BaseModel):
    """Body of POST /inventory/:id/adjust."""

    quantity: float
    reason: str = Field(..., min_length=1)
    type: Literal["purchase", "sale", "adjustment", "return", "loss"] = "adjustment"

    @field_validator("quantity")
    @classmethod
    def _non_zero(cls, v: float) -> float:
        if v == 0:
            raise ValueError("quantity must not be zero")
        return v

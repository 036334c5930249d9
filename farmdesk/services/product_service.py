# farmdesk/services/product_service.py
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from farmdesk.models.product_models import Product, ProductCreate, StatusUpdate
from farmdesk.services.api_client import ApiClient

logger = logging.getLogger(__name__)


def cache_buster() -> int:
    """Millisecond timestamp sent as `_t` so no proxy serves a stale product list."""
    return int(time.time() * 1000)


def _products(data: Dict[str, Any]) -> List[Product]:
    return [Product.model_validate(p) for p in (data.get("products") or [])]


class ProductService:
    """
    Wrapper over /products.

    Query flags go out the way the backend parses them: booleans as
    lowercase strings, None dropped.
    """

    def __init__(self, api: ApiClient):
        self.api = api

    def get_products(self, **params: Any) -> List[Product]:
        data = self.api.get("/products", params=_query(params), default_error="Failed to load products")
        return _products(data)

    def get_product_by_id(self, product_id: str) -> Product:
        data = self.api.get(f"/products/{product_id}", default_error="Failed to load product")
        return Product.model_validate(data.get("product") or data)

    def get_products_by_farmer(self, farmer_id: str) -> List[Product]:
        data = self.api.get(f"/products/farmer/{farmer_id}", default_error="Failed to load farmer products")
        return _products(data)

    def create_product(self, product: ProductCreate) -> Product:
        body = product.model_dump(exclude_none=True)
        data = self.api.post("/products", json=body, default_error="Failed to create product")
        created = Product.model_validate(data.get("product") or data)
        logger.info("Created product %s (%s)", created.id, created.name)
        return created

    def update_product(self, product_id: str, changes: Dict[str, Any]) -> Product:
        data = self.api.put(f"/products/{product_id}", json=changes, default_error="Failed to update product")
        return Product.model_validate(data.get("product") or data)

    def delete_product(self, product_id: str) -> None:
        self.api.delete(f"/products/{product_id}", default_error="Failed to delete product")
        logger.info("Deleted product %s", product_id)

    def update_product_status(self, product_id: str, status: str, reason: str = "") -> Optional[Product]:
        """PUT /products/:id/status. No transition rules are checked client-side."""
        body = StatusUpdate(status=status, reason=reason).model_dump()
        data = self.api.put(
            f"/products/{product_id}/status",
            json=body,
            default_error=f"Failed to update product status to {status}",
        )
        logger.info("Product %s status -> %s", product_id, status)
        product = data.get("product")
        return Product.model_validate(product) if product else None


def _query(params: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        out[key] = value
    return out

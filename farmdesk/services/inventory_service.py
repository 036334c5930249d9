# farmdesk/services/inventory_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from farmdesk.models.forecast_models import Forecast, ForecastView, SalesTrendPoint
from farmdesk.models.inventory_models import InventoryItem, PurchaseRequest, StockAdjustment
from farmdesk.services.api_client import ApiClient

logger = logging.getLogger(__name__)


def _items(data: Dict[str, Any]) -> List[InventoryItem]:
    return [InventoryItem.model_validate(i) for i in (data.get("data") or [])]


class InventoryService:
    """Wrapper over /inventory. Every method raises farmdesk.errors types."""

    def __init__(self, api: ApiClient):
        self.api = api

    def get_all_inventory_items(self, **params: Any) -> List[InventoryItem]:
        data = self.api.get("/inventory", params=params or None, default_error="Failed to fetch inventory items")
        return _items(data)

    def get_inventory_by_id(self, inventory_id: str) -> InventoryItem:
        data = self.api.get(f"/inventory/{inventory_id}", default_error="Failed to fetch inventory item")
        return InventoryItem.model_validate(data.get("data") or {})

    def purchase_from_farmer(self, purchase: PurchaseRequest) -> Dict[str, Any]:
        data = self.api.post(
            "/inventory/purchase",
            json=purchase.model_dump(),
            default_error="Failed to record purchase. Please try again.",
        )
        logger.info(
            "Purchased %s x %s from farmer %s",
            purchase.quantityPurchased,
            purchase.productId,
            purchase.farmerId,
        )
        return data

    def update_inventory(self, inventory_id: str, changes: Dict[str, Any]) -> InventoryItem:
        data = self.api.put(f"/inventory/{inventory_id}", json=changes, default_error="Failed to update inventory")
        return InventoryItem.model_validate(data.get("data") or {})

    def get_low_stock_items(self) -> List[InventoryItem]:
        data = self.api.get("/inventory/low-stock", default_error="Failed to fetch low stock items")
        return _items(data)

    def get_inventory_metrics(self) -> Dict[str, Any]:
        data = self.api.get("/inventory/metrics", default_error="Failed to fetch inventory metrics")
        return data.get("data") or {}

    def adjust_inventory_stock(self, inventory_id: str, adjustment: StockAdjustment) -> InventoryItem:
        data = self.api.post(
            f"/inventory/{inventory_id}/adjust",
            json=adjustment.model_dump(),
            default_error="Failed to adjust inventory",
        )
        logger.info(
            "Adjusted inventory %s by %s (%s: %s)", inventory_id, adjustment.quantity, adjustment.type, adjustment.reason
        )
        return InventoryItem.model_validate(data.get("data") or {})

    def update_quality_assessment(self, inventory_id: str, assessment: Dict[str, Any]) -> InventoryItem:
        data = self.api.post(
            f"/inventory/{inventory_id}/quality",
            json=assessment,
            default_error="Failed to update quality assessment",
        )
        return InventoryItem.model_validate(data.get("data") or {})

    def get_inventory_forecast(self, inventory_id: str) -> ForecastView:
        data = self.api.get(f"/inventory/{inventory_id}/forecast", default_error="Failed to fetch forecast data")
        body = data.get("data") or {}

        forecast: Optional[Forecast] = None
        if body.get("forecast"):
            forecast = Forecast.model_validate(body["forecast"])

        trend = [SalesTrendPoint.model_validate(p) for p in (body.get("salesTrend") or [])]
        trend.sort(key=lambda p: p.period)

        return ForecastView(
            inventoryId=inventory_id,
            forecast=forecast,
            salesTrend=trend,
            warning=data.get("warning"),
        )

    def run_bulk_forecasting(self) -> Dict[str, Any]:
        data = self.api.post("/inventory/run-forecasting", default_error="Failed to run forecasting")
        logger.info("Bulk forecasting triggered")
        return data

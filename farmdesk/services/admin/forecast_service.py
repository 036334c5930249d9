# farmdesk/services/admin/forecast_service.py
from __future__ import annotations

import logging

from farmdesk.models.forecast_models import ForecastView
from farmdesk.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)


class ForecastDisplay:
    """Read-only forecast for one inventory item. All numbers come from the server."""

    def __init__(self, inventory: InventoryService):
        self.inventory = inventory

    def load(self, inventory_id: str) -> ForecastView:
        view = self.inventory.get_inventory_forecast(inventory_id)
        if view.forecast and view.forecast.low_confidence:
            logger.info("Low confidence forecast for %s (%s%%)", inventory_id, view.forecast.confidenceLevel)
        return view

    def run_and_reload(self, inventory_id: str) -> ForecastView:
        self.inventory.run_bulk_forecasting()
        return self.load(inventory_id)

# farmdesk/models/forecast_models.py

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

LOW_CONFIDENCE_THRESHOLD = 50
MIN_TREND_POINTS = 3


class Forecast(BaseModel):
    """Computed server-side by POST /inventory/run-forecasting. Read-only here."""
    model_config = ConfigDict(extra="allow")

    predictedDemand: float = 0
    confidenceLevel: float = 0
    recommendedReorderQuantity: float = 0
    reorderPoint: float = 0

    @property
    def low_confidence(self) -> bool:
        return self.confidenceLevel < LOW_CONFIDENCE_THRESHOLD


class SalesTrendPoint(BaseModel):
    model_config = ConfigDict(extra="allow")

    period: str
    quantitySold: float = 0
    revenue: float = 0


class ForecastView(BaseModel):
    inventoryId: str
    forecast: Optional[Forecast] = None
    salesTrend: List[SalesTrendPoint] = Field(default_factory=list)
    warning: Optional[str] = None

    @property
    def has_trend(self) -> bool:
        return len(self.salesTrend) >= MIN_TREND_POINTS

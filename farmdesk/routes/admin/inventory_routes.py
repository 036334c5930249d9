# farmdesk/routes/admin/inventory_routes.py

import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from pydantic import ValidationError

from farmdesk.errors import FarmApiError, SessionExpiredError
from farmdesk.models.inventory_models import ADJUSTMENT_TYPES, StockAdjustment
from farmdesk.routes.guards import require_admin
from farmdesk.services.admin.forecast_service import ForecastDisplay
from farmdesk.services.context import inventory_service

logger = logging.getLogger(__name__)

inventory_bp = Blueprint(
    "admin_inventory_bp",
    __name__,
    url_prefix="/admin/inventory",
)


# ----------------- LIST -----------------
@inventory_bp.get("/")
def inventory_page():
    ok, resp = require_admin()
    if not ok:
        return resp

    service = inventory_service()
    items, low_stock, metrics = [], [], {}
    try:
        items = service.get_all_inventory_items(**request.args.to_dict())
        low_stock = service.get_low_stock_items()
        metrics = service.get_inventory_metrics()
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching inventory: %s", e.message)
        flash(e.message, "error")

    return render_template(
        "admin/inventory.html",
        active_page="inventory",
        active_submenu="list",
        items=items,
        low_stock=low_stock,
        metrics=metrics,
        adjustment_types=ADJUSTMENT_TYPES,
    )


# ----------------- ADJUST STOCK -----------------
@inventory_bp.post("/<inventory_id>/adjust")
def adjust_stock(inventory_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    try:
        adjustment = StockAdjustment(
            quantity=request.form.get("quantity") or 0,
            reason=(request.form.get("reason") or "").strip(),
            type=request.form.get("type") or "adjustment",
        )
    except ValidationError:
        flash("Enter a non-zero quantity and a reason", "error")
        return redirect(url_for("admin_inventory_bp.inventory_page"))

    try:
        inventory_service().adjust_inventory_stock(inventory_id, adjustment)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error adjusting inventory %s: %s", inventory_id, e.message)
        flash(e.message, "error")
    else:
        flash("Inventory adjusted successfully", "success")

    return redirect(url_for("admin_inventory_bp.inventory_page"))


# ----------------- FORECAST -----------------
@inventory_bp.get("/<inventory_id>/forecast")
def forecast_page(inventory_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    view = None
    try:
        view = ForecastDisplay(inventory_service()).load(inventory_id)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching forecast for %s: %s", inventory_id, e.message)
        flash(e.message, "error")

    return render_template(
        "admin/forecast.html",
        active_page="inventory",
        active_submenu="forecast",
        inventory_id=inventory_id,
        view=view,
    )


@inventory_bp.post("/<inventory_id>/forecast/run")
def run_forecast(inventory_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    try:
        ForecastDisplay(inventory_service()).run_and_reload(inventory_id)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error running forecast: %s", e.message)
        flash("Failed to run forecast", "error")
    else:
        flash("Forecast updated successfully", "success")

    return redirect(url_for("admin_inventory_bp.forecast_page", inventory_id=inventory_id))


# ----------------- JSON APIs -----------------
@inventory_bp.get("/api/<inventory_id>/forecast")
def forecast_api(inventory_id: str):
    ok, resp = require_admin()
    if not ok:
        return jsonify({"ok": False, "error": "unauthorized"}), 401

    try:
        view = ForecastDisplay(inventory_service()).load(inventory_id)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        return jsonify({"ok": False, "error": e.message}), e.status_code or 502

    return jsonify({
        "ok": True,
        "forecast": view.forecast.model_dump() if view.forecast else None,
        "lowConfidence": bool(view.forecast and view.forecast.low_confidence),
        "salesTrend": [p.model_dump() for p in view.salesTrend],
        "hasTrend": view.has_trend,
        "warning": view.warning,
    })

# farmdesk/routes/admin/product_routes.py

import logging

from flask import Blueprint, flash, render_template, request

from farmdesk.errors import FarmApiError, SessionExpiredError
from farmdesk.routes.guards import require_admin
from farmdesk.services.context import product_service, user_service

logger = logging.getLogger(__name__)

products_bp = Blueprint(
    "admin_products_bp",
    __name__,
    url_prefix="/admin",
)


@products_bp.get("/products")
def products_page():
    ok, resp = require_admin()
    if not ok:
        return resp

    params = {k: v for k, v in request.args.items() if k in ("status", "category", "isProcessedRice", "search")}
    products = []
    try:
        products = product_service().get_products(showAll=True, **params)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching products: %s", e.message)
        flash("Failed to load products", "error")

    return render_template(
        "admin/products.html",
        active_page="products",
        active_submenu="all",
        products=products,
    )


@products_bp.get("/farmers")
def farmers_page():
    ok, resp = require_admin()
    if not ok:
        return resp

    farmers = []
    try:
        farmers = user_service().get_farmers()
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching farmers: %s", e.message)
        flash("Failed to load farmers", "error")

    return render_template(
        "admin/farmers.html",
        active_page="farmers",
        farmers=farmers,
    )


@products_bp.get("/farmers/<farmer_id>/products")
def farmer_products_page(farmer_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    products = []
    try:
        products = product_service().get_products_by_farmer(farmer_id)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching products of farmer %s: %s", farmer_id, e.message)
        flash(e.message, "error")

    return render_template(
        "admin/products.html",
        active_page="farmers",
        products=products,
        farmer_id=farmer_id,
    )

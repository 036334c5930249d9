# farmdesk/routes/admin/pending_routes.py

import logging

from flask import Blueprint, flash, redirect, render_template, request, session, url_for

from farmdesk.errors import FarmApiError, SessionExpiredError
from farmdesk.routes.guards import require_admin
from farmdesk.services.admin.pending_products_service import PendingProductsService
from farmdesk.services.admin.product_list_state import ProductListState
from farmdesk.services.context import product_service

logger = logging.getLogger(__name__)

pending_bp = Blueprint(
    "admin_pending_bp",
    __name__,
    url_prefix="/admin/pending-products",
)


def _service() -> PendingProductsService:
    return PendingProductsService(product_service(), session)


def _render(state: ProductListState, status: int = 200):
    return render_template(
        "admin/pending_products.html",
        active_page="products",
        active_submenu="pending",
        products=state.pending(),
    ), status


# ----------------- LIST -----------------
@pending_bp.get("/")
def pending_products():
    ok, resp = require_admin()
    if not ok:
        return resp

    try:
        state = _service().load()
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching pending products: %s", e.message)
        flash("Failed to load pending products", "error")
        state = ProductListState()

    return _render(state)


# ----------------- APPROVE (hand over to purchase form) -----------------
@pending_bp.post("/<product_id>/approve")
def approve_product(product_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    query = _service().start_approval(product_id, request.form.get("farmerId"))
    return redirect(url_for("admin_purchase_bp.purchase_page", **query))


# ----------------- REJECT -----------------
@pending_bp.post("/<product_id>/reject")
def reject_product(product_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    reason = (request.form.get("reason") or "").strip()
    service = _service()
    try:
        change = service.reject(product_id, reason)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error rejecting product %s: %s", product_id, e.message)
        flash(e.message or "Failed to reject product", "error")
        return redirect(url_for("admin_pending_bp.pending_products"))

    flash("Product rejected successfully", "success")

    try:
        state = service.load(change)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching pending products: %s", e.message)
        flash("Failed to load pending products", "error")
        state = ProductListState()

    return _render(state)

# farmdesk/routes/admin/purchase_routes.py

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from farmdesk.errors import (
    DuplicateSubmissionError,
    FormValidationError,
    PurchaseSubmissionError,
    SessionExpiredError,
)
from farmdesk.models.inventory_models import PurchaseForm, format_rupees
from farmdesk.routes.guards import require_admin
from farmdesk.services.admin.pending_products_service import SOURCE_PENDING_PRODUCTS
from farmdesk.services.admin.purchase_service import PurchaseWorkflow
from farmdesk.services.context import inventory_service, product_service

logger = logging.getLogger(__name__)

purchase_bp = Blueprint(
    "admin_purchase_bp",
    __name__,
    url_prefix="/admin/inventory/purchase",
)


def _workflow() -> PurchaseWorkflow:
    return PurchaseWorkflow(inventory_service(), product_service())


def _render(form: PurchaseForm, product=None, errors=None, status: int = 200, product_name: str = ""):
    return render_template(
        "admin/purchase.html",
        active_page="inventory",
        active_submenu="purchase",
        form=form,
        product=product,
        product_name=product.name if product else product_name,
        errors=errors or {},
        total_display=format_rupees(form.total_amount),
        query=request.args.to_dict(),
    ), status


def _after_success_url(source: str) -> str:
    if source == SOURCE_PENDING_PRODUCTS:
        return url_for("admin_pending_bp.pending_products")
    return url_for("admin_products_bp.farmers_page")


# ----------------- FORM -----------------
@purchase_bp.get("/")
def purchase_page():
    ok, resp = require_admin()
    if not ok:
        return resp

    form, product = _workflow().prefill(
        request.args.get("productId", ""),
        request.args.get("farmerId", ""),
    )
    return _render(form, product)


# ----------------- SUBMIT -----------------
@purchase_bp.post("/")
def submit_purchase():
    ok, resp = require_admin()
    if not ok:
        return resp

    form = PurchaseForm.model_validate(request.form.to_dict())
    approval_product_id = request.args.get("productId") or None
    posted_name = (request.form.get("productName") or "").strip()
    product_name = posted_name or "Product"

    try:
        outcome = _workflow().submit(form, approval_product_id, product_name)
    except FormValidationError as e:
        flash(e.message, "error")
        return _render(form, errors=e.errors, status=400, product_name=posted_name)
    except DuplicateSubmissionError:
        flash("This purchase is already being submitted. Please wait.", "warning")
        return _render(form, status=409, product_name=posted_name)
    except PurchaseSubmissionError as e:
        if isinstance(e.cause, SessionExpiredError):
            raise e.cause
        logger.error("Error processing purchase: %s", e.message)
        flash(e.message, "error")
        return _render(form, status=400, product_name=posted_name)

    logger.info("Purchase recorded for %s, total %s", outcome.product_id, outcome.total_display)
    flash(outcome.message, "success")
    return redirect(_after_success_url(request.args.get("from", "")))

# farmdesk/routes/admin/processing_routes.py

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from farmdesk.errors import FarmApiError, FormValidationError, SessionExpiredError
from farmdesk.routes.guards import require_admin
from farmdesk.services.admin.processing_service import (
    PaddyProcessingService,
    ProcessingDraft,
    apply_conversion_rate,
    draft_from_paddy,
)
from farmdesk.services.context import product_service

logger = logging.getLogger(__name__)

processing_bp = Blueprint(
    "admin_processing_bp",
    __name__,
    url_prefix="/admin/process-paddy",
)


def _service() -> PaddyProcessingService:
    return PaddyProcessingService(product_service())


def _render(paddy_list, selected=None, draft=None, errors=None, status: int = 200):
    return render_template(
        "admin/process_paddy.html",
        active_page="products",
        active_submenu="processing",
        paddy_list=paddy_list,
        selected=selected,
        draft=draft,
        errors=errors or {},
    ), status


def _load_paddy_list(service: PaddyProcessingService):
    try:
        return service.list_approved_paddy()
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching approved paddy products: %s", e.message)
        flash("Failed to load approved paddy products", "error")
        return []


# ----------------- LIST / SELECT -----------------
@processing_bp.get("/")
def process_paddy_page():
    ok, resp = require_admin()
    if not ok:
        return resp

    service = _service()
    paddy_list = _load_paddy_list(service)

    paddy_id = request.args.get("paddyId")
    if not paddy_id:
        return _render(paddy_list)

    try:
        paddy = service.get_processable_paddy(paddy_id)
    except FormValidationError as e:
        flash(e.message, "error")
        return _render(paddy_list, status=400)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error loading paddy %s: %s", paddy_id, e.message)
        flash(e.message, "error")
        return _render(paddy_list)

    return _render(paddy_list, selected=paddy, draft=draft_from_paddy(paddy))


# ----------------- RECALCULATE / PROCESS -----------------
@processing_bp.post("/<paddy_id>")
def process_paddy(paddy_id: str):
    ok, resp = require_admin()
    if not ok:
        return resp

    service = _service()
    try:
        paddy = service.get_processable_paddy(paddy_id)
    except FormValidationError as e:
        flash(e.message, "error")
        return redirect(url_for("admin_processing_bp.process_paddy_page"))
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error loading paddy %s: %s", paddy_id, e.message)
        flash(e.message, "error")
        return redirect(url_for("admin_processing_bp.process_paddy_page"))

    data = request.form.to_dict()
    data["paddySource"] = paddy.id
    data["images"] = request.form.getlist("images") or list(paddy.images)
    draft = ProcessingDraft.model_validate(data)

    if request.form.get("action") == "recalculate":
        draft = apply_conversion_rate(draft, paddy, draft.conversionRate)
        return _render(_load_paddy_list(service), selected=paddy, draft=draft)

    try:
        service.process(paddy, draft)
    except FormValidationError as e:
        flash(e.message, "error")
        return _render(_load_paddy_list(service), selected=paddy, draft=draft, errors=e.errors, status=400)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error processing paddy %s: %s", paddy_id, e.message)
        flash(e.message or "Failed to process paddy into rice", "error")
        return _render(_load_paddy_list(service), selected=paddy, draft=draft, status=400)

    flash("Paddy successfully processed into rice!", "success")
    return redirect(url_for("admin_products_bp.products_page"))

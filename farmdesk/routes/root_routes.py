# farmdesk/routes/root_routes.py

from flask import Blueprint, jsonify, redirect, url_for

from farmdesk.services.context import get_api, session_manager

root_bp = Blueprint("root", __name__)


@root_bp.get("/")
def home():
    manager = session_manager()
    if not manager.is_authenticated():
        return redirect(url_for("auth.login"))
    if manager.role in ("admin", "staff"):
        return redirect(url_for("admin_pending_bp.pending_products"))
    return redirect(url_for("admin_products_bp.products_page"))


@root_bp.get("/health")
def health():
    """Console liveness plus whether the marketplace API answers its own /health."""
    backend_ok = get_api().check_server_health()
    return jsonify({"status": "ok", "backend": "up" if backend_ok else "down"}), 200

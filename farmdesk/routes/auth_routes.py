# farmdesk/routes/auth_routes.py

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for

from farmdesk.errors import FarmApiError
from farmdesk.services.context import auth_service

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _safe_next(target: str) -> str:
    # only local paths; never bounce to another host
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("root.home")


@auth_bp.get("/login")
def login():
    return render_template("login.html", next=request.args.get("next", ""))


@auth_bp.post("/login")
def login_submit():
    email = request.form.get("email", "")
    password = request.form.get("password", "")

    if not email.strip() or not password:
        flash("Email and password are required", "error")
        return render_template("login.html", next=request.form.get("next", ""), email=email), 400

    try:
        user = auth_service().login(email, password)
    except FarmApiError as e:
        logger.warning("Login failed for %s: %s", email, e.message)
        flash(e.message, "error")
        return render_template("login.html", next=request.form.get("next", ""), email=email), 401

    flash(f"Welcome back, {user.get('name') or email}!", "success")
    return redirect(_safe_next(request.form.get("next", "")))


@auth_bp.route("/logout", methods=["GET", "POST"])
def logout():
    auth_service().logout()
    flash("You have been logged out.", "info")
    return redirect(url_for("auth.login"))

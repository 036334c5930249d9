# farmdesk/routes/guards.py

from flask import flash, redirect, request, url_for

from farmdesk.services.context import session_manager

ADMIN_ROLES = ("admin", "staff")


def require_roles(*roles):
    """Returns (ok, response_or_none). Any signed-in user passes when no roles are given."""
    manager = session_manager()
    if not manager.is_authenticated():
        return False, redirect(url_for("auth.login", next=request.full_path))
    if roles and manager.role not in roles:
        flash("You are not authorized to view that page.", "error")
        return False, redirect(url_for("root.home"))
    return True, None


def require_admin():
    return require_roles(*ADMIN_ROLES)

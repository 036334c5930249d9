# farmdesk/app.py

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, session, url_for
from flask_cors import CORS

from farmdesk.app_config import load_config
from farmdesk.errors import SessionExpiredError
from farmdesk.logging_config import configure_logging
from farmdesk.register_blueprints import register_all_blueprints
from farmdesk.services.context import HTTP_EXTENSION

logger = logging.getLogger(__name__)


def create_app(overrides=None, http=None):
    """
    `http` is an optional requests.Session shared by every ApiClient the app
    builds; without one each request gets its own.
    """
    app = Flask(__name__, template_folder="templates")

    # -------------------------
    # Config & security
    # -------------------------
    load_config(app, overrides)
    configure_logging(app.config["LOG_LEVEL"])
    app.permanent_session_lifetime = timedelta(days=7)

    CORS(app, resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}})

    if http is not None:
        app.extensions[HTTP_EXTENSION] = http

    # -------------------------
    # Errors
    # -------------------------
    @app.errorhandler(SessionExpiredError)
    def _session_expired(e):
        logger.warning("Session expired: %s", e.message)
        session.clear()
        flash("Your session has expired. Please log in again.", "error")
        return redirect(url_for("auth.login"))

    # -------------------------
    # Blueprints
    # -------------------------
    register_all_blueprints(app)

    return app

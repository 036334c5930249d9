# farmdesk/services/context.py
"""
Per-request wiring: one ApiClient per Flask request, bound to the signed
session so refreshed tokens are written back to the cookie.
"""

from flask import current_app, g, session

from farmdesk.services.api_client import ApiClient
from farmdesk.services.auth_service import AuthService
from farmdesk.services.inventory_service import InventoryService
from farmdesk.services.product_service import ProductService
from farmdesk.services.review_service import ReviewService
from farmdesk.services.session_manager import SessionManager
from farmdesk.services.task_service import TaskService
from farmdesk.services.user_service import UserService

# app.extensions key for an injected requests.Session (tests mount a fake backend on it)
HTTP_EXTENSION = "farmdesk.http"


def get_api() -> ApiClient:
    if "farmdesk_api" not in g:
        cfg = current_app.config
        # worker threads cannot resolve the `session` proxy, hand them the real object
        manager = SessionManager(session._get_current_object())
        g.farmdesk_api = ApiClient(
            cfg["FARM_API_BASE_URL"],
            manager,
            http=current_app.extensions.get(HTTP_EXTENSION),
            timeout=cfg["FARM_API_TIMEOUT"],
            max_retries=cfg["FARM_API_MAX_RETRIES"],
            backoff=cfg.get("FARM_API_BACKOFF", 0.6),
            health_timeout=cfg["FARM_HEALTH_TIMEOUT"],
        )
    return g.farmdesk_api


def session_manager() -> SessionManager:
    return get_api().session_manager


def product_service() -> ProductService:
    return ProductService(get_api())


def inventory_service() -> InventoryService:
    return InventoryService(get_api())


def task_service() -> TaskService:
    return TaskService(get_api())


def review_service() -> ReviewService:
    return ReviewService(get_api())


def user_service() -> UserService:
    return UserService(get_api())


def auth_service() -> AuthService:
    return AuthService(get_api())

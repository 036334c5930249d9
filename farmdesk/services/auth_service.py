# farmdesk/services/auth_service.py
from __future__ import annotations

import logging
from typing import Any, Dict

from farmdesk.errors import FarmApiError
from farmdesk.services.api_client import ApiClient

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, api: ApiClient):
        self.api = api

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """POST /auth/login and keep token, refresh token and user in the session."""
        data = self.api.post(
            "/auth/login",
            json={"email": (email or "").strip(), "password": password or ""},
            default_error="Login failed",
        )
        token = data.get("token")
        if not token:
            raise FarmApiError("Login response did not include a token", payload=data)

        user = data.get("user") or {}
        self.api.session_manager.store_login(token, data.get("refreshToken"), user)
        logger.info("Signed in %s (%s)", user.get("email") or email, user.get("role") or "unknown role")
        return user

    def logout(self) -> None:
        self.api.session_manager.clear()

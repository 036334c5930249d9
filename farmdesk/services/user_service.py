# farmdesk/services/user_service.py
from __future__ import annotations

from typing import Any, Dict, List

from farmdesk.services.api_client import ApiClient


class UserService:
    def __init__(self, api: ApiClient):
        self.api = api

    def get_users(self, **params: Any) -> List[Dict[str, Any]]:
        data = self.api.get("/users", params=params or None, default_error="Failed to load users")
        return list(data.get("data") or [])

    def get_farmers(self) -> List[Dict[str, Any]]:
        """Users with role `farmer`, filtered client-side."""
        return [u for u in self.get_users() if (u.get("role") or "").lower() == "farmer"]

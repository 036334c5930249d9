# farmdesk/services/api_client.py
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

import requests

from farmdesk.errors import (
    ApiNetworkError,
    FarmApiError,
    error_for_status,
)
from farmdesk.services.session_manager import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = float(os.getenv("FARM_API_TIMEOUT", "15"))
HEALTH_TIMEOUT = float(os.getenv("FARM_HEALTH_TIMEOUT", "5"))
MAX_RETRIES = int(os.getenv("FARM_API_MAX_RETRIES", "2"))

# Retry these (typical transient / cold start / gateway), reads only
RETRY_STATUS = {502, 503, 504}


def _safe_json(resp: requests.Response) -> Optional[Dict[str, Any]]:
    """
    Return JSON dict if response body is JSON, else None.
    Handles HTML gateway pages safely.
    """
    if not resp.content:
        return None
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else {"data": data}


def _error_message(data: Optional[Dict[str, Any]], default: str) -> str:
    if not data:
        return default
    return data.get("message") or data.get("error") or data.get("detail") or default


class ApiClient:
    """
    Thin JSON client for the marketplace REST API.

    - attaches `Authorization: Bearer <token>` from the SessionManager
    - on 401 refreshes once through the SessionManager and replays the request
    - retries GETs on 502/503/504 and network errors; never retries writes
    - safe JSON parsing, errors mapped to farmdesk.errors types
    """

    def __init__(
        self,
        base_url: str,
        session_manager: SessionManager,
        http: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        backoff: float = 0.6,
        health_timeout: float = HEALTH_TIMEOUT,
    ):
        if not base_url:
            raise FarmApiError("FARM_API_BASE_URL is not set")

        self.base_url = base_url.rstrip("/")
        self.session_manager = session_manager
        self.http = http or requests.Session()
        self.http.headers.setdefault("Content-Type", "application/json")
        self.timeout = timeout
        self.max_retries = max(0, int(max_retries))
        self.backoff = backoff
        self.health_timeout = health_timeout

        session_manager.bind_refresher(self.refresh_tokens)

    # -------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------
    def get(self, path: str, params: Optional[Dict[str, Any]] = None, default_error: str = "Request failed") -> Dict[str, Any]:
        return self.request("GET", path, params=params, default_error=default_error)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None, default_error: str = "Request failed") -> Dict[str, Any]:
        return self.request("POST", path, json=json, default_error=default_error)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None, default_error: str = "Request failed") -> Dict[str, Any]:
        return self.request("PUT", path, json=json, default_error=default_error)

    def delete(self, path: str, default_error: str = "Request failed") -> Dict[str, Any]:
        return self.request("DELETE", path, default_error=default_error)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        default_error: str = "Request failed",
    ) -> Dict[str, Any]:
        method = method.upper()
        url = self._url(path)

        token = self.session_manager.token
        resp = self._send(method, url, token, params, json)

        if resp.status_code == 401 and token:
            # raises SessionExpiredError when the session cannot be recovered
            new_token = self.session_manager.refresh(token)
            logger.debug("Replaying %s %s after token refresh", method, path)
            resp = self._send(method, url, new_token, params, json)
            if resp.status_code == 401:
                data = _safe_json(resp)
                raise FarmApiError(_error_message(data, "Not authorized"), 401, data)

        return self._handle(resp, default_error)

    def refresh_tokens(self, refresh_token: str) -> Dict[str, Any]:
        """POST /auth/refresh-token without the auth header. Used by SessionManager."""
        url = self._url("/auth/refresh-token")
        try:
            resp = self.http.post(
                url,
                json={"refreshToken": refresh_token},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise ApiNetworkError(f"Network error on {url}: {e}") from e
        return self._handle(resp, "Failed to refresh session")

    def check_server_health(self) -> bool:
        """Ping {base without /api}/health. Never raises."""
        base = self.base_url[:-4] if self.base_url.endswith("/api") else self.base_url
        endpoint = f"{base}/health"
        try:
            resp = self.http.get(endpoint, timeout=self.health_timeout)
        except requests.RequestException as e:
            logger.warning("Health check failed at %s: %s", endpoint, e)
            return False
        return resp.status_code < 400

    # -------------------------------------------------
    # INTERNAL HELPERS
    # -------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method, url, token, params, json) -> requests.Response:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        attempts = 1 + (self.max_retries if method == "GET" else 0)
        last_err: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                resp = self.http.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=headers,
                    timeout=self.timeout,
                )
            except (requests.Timeout, requests.ConnectionError) as e:
                last_err = e
                logger.warning("Network error on %s %s (attempt %d/%d): %s", method, url, attempt, attempts, e)
                if attempt < attempts:
                    self._sleep(attempt)
                    continue
                break

            if resp.status_code in RETRY_STATUS and attempt < attempts:
                logger.warning("Upstream error %s on %s %s, retrying", resp.status_code, method, url)
                self._sleep(attempt)
                continue

            return resp

        raise ApiNetworkError(f"Network error on {method} {url}: {last_err}")

    def _sleep(self, attempt: int) -> None:
        if self.backoff > 0:
            time.sleep(self.backoff * (2 ** (attempt - 1)))

    @staticmethod
    def _handle(resp: requests.Response, default_error: str) -> Dict[str, Any]:
        data = _safe_json(resp)

        if resp.status_code >= 400:
            message = _error_message(data, default_error)
            raise error_for_status(resp.status_code, message, data)

        return data or {}

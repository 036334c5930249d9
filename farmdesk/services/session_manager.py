# farmdesk/services/session_manager.py
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, MutableMapping, Optional, Tuple

from farmdesk.errors import FarmApiError, SessionExpiredError

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"

# how long a used refresh token keeps answering with the pair it was swapped for
ROTATION_TTL = 60.0

Refresher = Callable[[str], Dict[str, Any]]


class SessionManager:
    """
    Owns the credentials of one signed-in user.

    `storage` is any mutable mapping: the Flask session inside a request,
    a plain dict in scripts and tests. The refresher is bound by ApiClient.

    Refresh is single-flight per refresh token and shared by every instance:
    each Flask request builds its own SessionManager over its own copy of the
    cookie, and the backend rotates refresh tokens on use.
    """

    # refresh token -> lock, and used refresh token -> (when, new pair)
    _locks: Dict[str, threading.Lock] = {}
    _rotations: Dict[str, Tuple[float, Dict[str, str]]] = {}
    _registry_lock = threading.Lock()

    def __init__(self, storage: MutableMapping[str, Any], refresher: Optional[Refresher] = None):
        self._storage = storage
        self._refresher = refresher

    def bind_refresher(self, refresher: Refresher) -> None:
        self._refresher = refresher

    # -------------------------------------------------
    # STORED STATE
    # -------------------------------------------------
    @property
    def token(self) -> Optional[str]:
        return self._storage.get(TOKEN_KEY)

    @property
    def refresh_token(self) -> Optional[str]:
        return self._storage.get(REFRESH_TOKEN_KEY)

    @property
    def user(self) -> Dict[str, Any]:
        return self._storage.get(USER_KEY) or {}

    @property
    def role(self) -> str:
        return (self.user.get("role") or "").lower()

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def store_login(self, token: str, refresh_token: Optional[str], user: Optional[Dict[str, Any]] = None) -> None:
        self._storage[TOKEN_KEY] = token
        if refresh_token:
            self._storage[REFRESH_TOKEN_KEY] = refresh_token
        if user is not None:
            self._storage[USER_KEY] = user

    def clear(self) -> None:
        for key in (TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            self._storage.pop(key, None)

    # -------------------------------------------------
    # REFRESH
    # -------------------------------------------------
    @classmethod
    def _lock_for(cls, refresh_token: str) -> threading.Lock:
        with cls._registry_lock:
            lock = cls._locks.get(refresh_token)
            if lock is None:
                lock = cls._locks[refresh_token] = threading.Lock()
            return lock

    @classmethod
    def _recent_rotation(cls, refresh_token: str) -> Optional[Dict[str, str]]:
        with cls._registry_lock:
            entry = cls._rotations.get(refresh_token)
        if entry is None or time.monotonic() - entry[0] > ROTATION_TTL:
            return None
        return entry[1]

    @classmethod
    def _remember_rotation(cls, refresh_token: str, pair: Dict[str, str]) -> None:
        now = time.monotonic()
        with cls._registry_lock:
            for used, (at, _) in list(cls._rotations.items()):
                if now - at > ROTATION_TTL:
                    cls._rotations.pop(used, None)
                    cls._locks.pop(used, None)
            cls._rotations[refresh_token] = (now, pair)

    def refresh(self, stale_token: Optional[str]) -> str:
        """
        Return a token newer than `stale_token`, refreshing at most once per
        refresh token across the whole process. Requests queued behind the
        refresh (from this session or another copy of it) replay with the
        pair it produced instead of spending the rotated refresh token again.
        """
        current = self.token
        if current and current != stale_token:
            return current

        refresh_token = self.refresh_token
        if not refresh_token:
            self.clear()
            raise SessionExpiredError("No refresh token available", status_code=401)

        with self._lock_for(refresh_token):
            pair = self._recent_rotation(refresh_token)
            if pair is None or pair["token"] == stale_token:
                pair = self._refresh_with(refresh_token)
                self._remember_rotation(refresh_token, pair)
            else:
                logger.debug("Reusing token pair from a concurrent refresh")

            self._storage[TOKEN_KEY] = pair["token"]
            self._storage[REFRESH_TOKEN_KEY] = pair["refreshToken"]
            return pair["token"]

    def _refresh_with(self, refresh_token: str) -> Dict[str, str]:
        if self._refresher is None:
            raise SessionExpiredError("Session cannot be refreshed", status_code=401)

        try:
            data = self._refresher(refresh_token)
        except FarmApiError as e:
            logger.warning("Token refresh failed: %s", e.message)
            self.clear()
            raise SessionExpiredError(f"Session expired: {e.message}", status_code=401) from e

        new_token = data.get("token")
        if not new_token:
            self.clear()
            raise SessionExpiredError("Refresh response did not include a token", status_code=401)

        logger.info("Access token refreshed")
        return {"token": new_token, "refreshToken": data.get("refreshToken") or refresh_token}

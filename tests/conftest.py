# tests/conftest.py
import json
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter

from farmdesk.app import create_app
from farmdesk.services.api_client import ApiClient
from farmdesk.services.session_manager import SessionManager

BASE_URL = "http://backend.test/api"

Handler = Union[Tuple[int, Any], Callable[["Call"], Tuple[int, Any]]]


class Call:
    def __init__(self, method: str, path: str, query: Dict[str, str], body: Any, headers: Dict[str, str], timeout=None):
        self.method = method
        self.path = path
        self.query = query
        self.body = body
        self.headers = headers
        self.timeout = timeout

    @property
    def token(self) -> Optional[str]:
        auth = self.headers.get("Authorization") or ""
        return auth[len("Bearer "):] if auth.startswith("Bearer ") else None

    def __repr__(self):
        return f"<Call {self.method} {self.path} {self.query}>"


class FakeBackend(BaseAdapter):
    """
    Stands in for the marketplace API behind a real requests.Session.
    Routes are keyed by (METHOD, path below /api); every call is recorded.
    """

    def __init__(self):
        super().__init__()
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[Call] = []
        self._lock = threading.Lock()

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls_to(self, method: str, path: str) -> List[Call]:
        with self._lock:
            return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        parts = urlsplit(request.url)
        path = parts.path[len("/api"):] if parts.path.startswith("/api/") else parts.path
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        body = json.loads(request.body) if request.body else None
        call = Call(request.method, path, query, body, dict(request.headers), timeout)

        with self._lock:
            self.calls.append(call)
            handler = self.routes.get((request.method, path))

        if handler is None:
            status, payload = 404, {"message": f"No route {request.method} {path}"}
        elif callable(handler):
            status, payload = handler(call)
        else:
            status, payload = handler

        return _response(request, status, payload)

    def close(self):
        pass


def _response(request, status: int, payload: Any) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.request = request
    resp.url = request.url
    resp.encoding = "utf-8"
    if isinstance(payload, str):
        resp._content = payload.encode("utf-8")
        resp.headers["Content-Type"] = "text/html"
    else:
        resp._content = json.dumps(payload).encode("utf-8") if payload is not None else b""
        resp.headers["Content-Type"] = "application/json"
    return resp


def paddy(product_id="P1", farmer_id="F1", **overrides) -> Dict[str, Any]:
    doc = {
        "_id": product_id,
        "name": "Sona Masuri Paddy",
        "description": "Freshly harvested paddy from the delta",
        "category": "paddy",
        "riceType": "sona-masuri",
        "farmerPrice": 70,
        "price": 80,
        "availableQuantity": 500,
        "stockQuantity": 500,
        "unit": "kg",
        "status": "pending",
        "isProcessedRice": False,
        "farmer": {"_id": farmer_id, "name": "Ravi"},
        "images": ["https://img.test/paddy.jpg"],
        "organicCertified": True,
        "harvestedDate": "2026-09-30",
    }
    doc.update(overrides)
    return doc


@pytest.fixture(autouse=True)
def _fresh_refresh_registry():
    SessionManager._locks.clear()
    SessionManager._rotations.clear()
    yield
    SessionManager._locks.clear()
    SessionManager._rotations.clear()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http(backend):
    s = requests.Session()
    s.mount("http://", backend)
    return s


@pytest.fixture
def storage():
    return {"token": "tok-1", "refreshToken": "ref-1", "user": {"_id": "A1", "role": "admin", "name": "Admin"}}


@pytest.fixture
def api(http, storage):
    return ApiClient(BASE_URL, SessionManager(storage), http=http, max_retries=2, backoff=0)


@pytest.fixture
def app(http):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "FARM_API_BASE_URL": BASE_URL,
            "FARM_API_BACKOFF": 0,
        },
        http=http,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    with client.session_transaction() as sess:
        sess["token"] = "tok-1"
        sess["refreshToken"] = "ref-1"
        sess["user"] = {"_id": "A1", "role": "admin", "name": "Admin"}
    return client

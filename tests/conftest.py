"""
ReportsDesk - Test Configuration and Fixtures
"""
import json
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from reportsdesk.api import ApiClient, Services, SessionEvent
from reportsdesk.config import ClientConfig
from reportsdesk.credentials import (
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    MemoryCredentialStore,
)
from reportsdesk.notifications import RecordingNotifier

BASE_URL = "http://backend.test/api"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


def envelope(data: Any = None, success: bool = True, message: str = None, **extra) -> Dict[str, Any]:
    """Standard backend response body"""
    body: Dict[str, Any] = {"success": success}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    body.update(extra)
    return body


class FakeBackend:
    """
    Scripted backend behind httpx.MockTransport.

    Routes are keyed by (METHOD, path below /api). Each route holds a queue of
    replies; the last reply repeats once the queue is drained.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Reply]] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, *replies: Reply) -> "FakeBackend":
        self.routes[(method.upper(), path)] = list(replies)
        return self

    def json(self, method: str, path: str, body: Any, status: int = 200) -> "FakeBackend":
        return self.on(method, path, httpx.Response(status, json=body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]

        replies = self.routes.get((request.method, path))
        if not replies:
            return httpx.Response(404, json={"success": False, "message": "no route"})

        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method.upper() and r.url.path == f"/api{path}"
        ]

    @staticmethod
    def body_of(request: httpx.Request) -> Any:
        return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config(tmp_path) -> ClientConfig:
    return ClientConfig(api_base_url=BASE_URL, config_dir=str(tmp_path))


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def logged_in_store() -> MemoryCredentialStore:
    return MemoryCredentialStore({
        AUTH_TOKEN_KEY: "T1",
        REFRESH_TOKEN_KEY: "R1",
        "user": json.dumps({"id": "u1", "username": "admin", "role": "admin",
                            "permissions": ["reports:write"]}),
    })


@pytest.fixture
def session_events() -> List[SessionEvent]:
    return []


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_client(config, backend, session_events, notifier):
    """Factory: ApiClient wired to the fake backend with the given store"""
    def _make(store, **kwargs) -> ApiClient:
        return ApiClient(
            config,
            store,
            on_session_expired=session_events.append,
            notifier=notifier,
            transport=backend.transport,
            **kwargs
        )
    return _make


@pytest.fixture
def client(make_client, logged_in_store) -> ApiClient:
    return make_client(logged_in_store)


@pytest.fixture
def services(client) -> Services:
    return Services.create(client)

"""Shared fixtures: mock HubSpot API and isolation of process-wide state."""
import json
from collections import defaultdict, deque
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from hubspot_api.core.config import HubspotConfig, reset_config
from hubspot_api.core.connection import Connection, EventConnection
from hubspot_api.core.telemetry import TelemetryRecorder, set_recorder


class MockApi:
    """
    httpx.MockTransport handler serving queued responses per (method, path).

    Every request is kept in ``requests``. Unmatched requests get a 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: Dict[Tuple[str, str], deque] = defaultdict(deque)

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        text: Optional[str] = None,
    ) -> None:
        self._responses[(method.upper(), path)].append((status, json, text))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._responses.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"status": "error", "message": "no stub"})
        status, body, text = queue.popleft()
        if text is not None:
            return httpx.Response(status, text=text)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def params(self, index: int = -1) -> Dict[str, str]:
        return dict(self.requests[index].url.params)


@pytest.fixture(autouse=True)
def isolate_globals():
    """Restore the default config and telemetry recorder after each test."""
    yield
    reset_config()
    set_recorder(None)


@pytest.fixture
def api():
    return MockApi()


@pytest.fixture
def config():
    return HubspotConfig(hapikey="demo", portal_id="62515")


@pytest.fixture
def connection(api, config):
    conn = Connection(config, transport=api.transport())
    yield conn
    conn.close()


@pytest.fixture
def event_connection(api, config):
    conn = EventConnection(config, transport=api.transport())
    yield conn
    conn.close()


@pytest.fixture
def recorder():
    """Install a recorder that keeps events and stats."""
    recorder = TelemetryRecorder(collect_stats=True, keep_events=True)
    set_recorder(recorder)
    return recorder

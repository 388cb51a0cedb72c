"""
Pytest configuration and fixtures for deploy client tests.
"""

import json
import os
import threading

import httpx
import pytest

from deploy_client.core.config import ClientSettings
from deploy_client.deploy.client import DeploymentClient


@pytest.fixture(autouse=True)
def clear_client_env(monkeypatch):
    """
    Remove DEPLOY_CLIENT_* variables so the host environment cannot leak
    into settings built by tests.
    """
    for key in list(os.environ):
        if key.upper().startswith("DEPLOY_CLIENT_"):
            monkeypatch.delenv(key)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self.now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds


class RecordingServer:
    """Scripted handler for ``httpx.MockTransport``.

    Each entry of ``script`` is either an ``httpx.Response`` or an exception
    instance to raise. The last entry repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.script)) - 1
        step = self.script[index]
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step.status_code, headers=step.headers, content=step.content)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def bodies(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fast_settings():
    """Settings with a short retry interval and a generous rate budget."""
    return ClientSettings(
        instance="deployer.test:8080",
        retry_interval_seconds=0.01,
        retry_max_attempts=5,
        requests_per_second=1000.0,
        burst=1000,
    )


@pytest.fixture
def make_client(fast_settings):
    """Build a DeploymentClient whose HTTP traffic goes to a RecordingServer."""
    clients = []

    def _make(server: RecordingServer, settings: ClientSettings = None, **kwargs) -> DeploymentClient:
        http = httpx.Client(transport=httpx.MockTransport(server))
        client = DeploymentClient(settings=settings or fast_settings, http_client=http, **kwargs)
        clients.append(http)
        return client

    yield _make

    for http in clients:
        http.close()


@pytest.fixture
def recording_server():
    """The RecordingServer class, for building scripted servers."""
    return RecordingServer

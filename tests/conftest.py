"""
Shared test fixtures for WB Provider tests.

The metadata server is simulated with httpx.MockTransport: no test opens a
real socket. Handlers receive the httpx.Request and return an httpx.Response.
"""
from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from wb_provider.provider.client import RemoteClient
from wb_provider.provider.service import EnrichmentService
from wb_provider.provider.types import ServerAddress
from wb_provider.utils.logger import logger


SAMPLE_PAYLOAD = {
    "title": "Foo",
    "comment1": "A summary",
    "create_time": "2020-05-01 00:00:00",
    "tag": "Action,★★★",
    "comment2": "http://img.example.com/foo.jpg",
    "artist": "Alice Bob",
    "writer": "Studio X",
    "score": 7.5,
}


def form_of(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body into a flat dict."""
    parsed = parse_qs(request.content.decode("utf-8"))
    return {k: v[0] for k, v in parsed.items()}


def make_client(handler) -> RemoteClient:
    return RemoteClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def sample_payload():
    return dict(SAMPLE_PAYLOAD)


@pytest.fixture
def client_factory():
    """Build a RemoteClient whose transport is the given handler."""
    return make_client


@pytest.fixture
def server():
    return ServerAddress(host="10.0.0.5", port=9000)


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def metadata_server(requests_seen):
    """A well-behaved server: /metadata returns SAMPLE_PAYLOAD, /search a list of it."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if request.url.path == "/metadata":
            return httpx.Response(200, json=SAMPLE_PAYLOAD)
        if request.url.path == "/search":
            return httpx.Response(200, json=[SAMPLE_PAYLOAD, {"title": "Bar", "create_time": "bad"}])
        return httpx.Response(404)

    return handler


@pytest.fixture
def service(server, metadata_server):
    return EnrichmentService(server, make_client(metadata_server))


@pytest.fixture
def restore_log_level(monkeypatch):
    """Run with no log-level env vars and put the logger's levels back afterwards."""
    monkeypatch.delenv("WB_PROVIDER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    saved = logger.level, [h.level for h in logger.handlers]
    yield logger
    logger.setLevel(saved[0])
    for handler, level in zip(logger.handlers, saved[1]):
        handler.setLevel(level)

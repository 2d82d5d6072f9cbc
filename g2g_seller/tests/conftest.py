"""Shared fixtures: fake tokens and an in-memory stand-in for the remote API."""

import json
import logging
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.client import G2GClient
from g2g_seller.services.pacing import Pacer

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def envelope(payload=None, code=2000, messages=None) -> dict:
    return {"request_id": "req-1", "code": code, "messages": messages or [], "payload": payload}


def ok_json(payload=None, code=2000, status=200) -> httpx.Response:
    return httpx.Response(status, json=envelope(payload, code=code))


def refresh_ok(token: str = "access-1") -> httpx.Response:
    return ok_json({"access_token": token})


class FakeAPI:
    """Replays queued responses per (method, path); the last reply repeats."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Reply]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *replies: Reply) -> "FakeAPI":
        self.routes.setdefault((method, path), []).extend(replies)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        queue = self.routes.get(key)
        if not queue:
            return httpx.Response(404, json={"code": 4040, "messages": [f"no route {key}"]})
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(reply):
            return reply(request)
        # fresh copy so a repeated reply is never a consumed response
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def tokens() -> AuthTokens:
    return AuthTokens(
        user_id="1234567",
        refresh_token="refresh-abc",
        long_lived_token="long-lived-xyz",
        active_device_token="device-42",
    )


@pytest.fixture
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def make_client(api):
    def _make(**kwargs) -> G2GClient:
        kwargs.setdefault("pacer", Pacer(enabled=False))
        return G2GClient(base_url="https://sls.test", http_transport=api.transport, **kwargs)

    return _make


@pytest.fixture
def isolated_logging():
    """Undo whatever setup_logging installs during a test."""
    from loguru import logger as loguru_logger

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    loguru_logger.remove()

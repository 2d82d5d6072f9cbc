import re

import httpx
import pytest

from conftest import refresh_ok
from g2g_seller.core.errors import AuthError, TransportError
from g2g_seller.services.client import G2GClient
from g2g_seller.services.pacing import Pacer
from g2g_seller.services.session import Session, TokenState
from g2g_seller.services.transport import browser_headers

REFRESH = ("POST", "/user/refresh_access")


def test_session_id_is_32_lowercase_hex():
    session = Session()
    assert re.fullmatch(r"[0-9a-f]{32}", session.session_id)
    assert session.state == TokenState.no_token


async def test_refresh_posts_credentials_unauthenticated(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"))
    client = make_client()

    token = await client.refresh(tokens)

    assert token == "access-1"
    assert client.session.token == "access-1"
    assert client.session.state == TokenState.valid
    (request,) = api.calls(*REFRESH)
    assert request.headers["Authorization"] == "null"
    assert api.body(request) == {
        "user_id": "1234567",
        "refresh_token": "refresh-abc",
        "active_device_token": "device-42",
        "long_lived_token": "long-lived-xyz",
    }


async def test_refresh_failure_is_auth_error_with_status_and_body(api, make_client, tokens):
    api.add(*REFRESH, httpx.Response(403, text="device not recognised"))
    client = make_client()

    with pytest.raises(AuthError) as info:
        await client.refresh(tokens)

    assert info.value.status == 403
    assert "device not recognised" in info.value.body
    assert client.session.token is None


async def test_refresh_without_access_token_is_auth_error(api, make_client, tokens):
    api.add(*REFRESH, httpx.Response(200, json={"code": 2000, "payload": {}}))
    client = make_client()
    with pytest.raises(AuthError):
        await client.refresh(tokens)


async def test_ensure_token_refreshes_once_then_reuses(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"))
    client = make_client()

    assert await client.ensure_token(tokens) == "access-1"
    assert await client.ensure_token(tokens) == "access-1"
    assert len(api.calls(*REFRESH)) == 1


def _status_sequence(*statuses):
    replies = iter(statuses)

    def reply(request):
        return httpx.Response(next(replies), json={"code": 2000, "payload": {}})

    return reply


async def test_single_401_refreshes_and_replays_once(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"), refresh_ok("access-2"))
    api.add("GET", "/ping", _status_sequence(401, 200))
    client = make_client()
    manager = client.tokens_manager

    async def request(token):
        return await manager.transport.send("GET", "/ping", browser_headers(manager.session.session_id, token))

    raw = await manager.call_authorized(tokens, request, operation="ping")

    assert raw.status == 200
    pings = api.calls("GET", "/ping")
    assert [p.headers["Authorization"] for p in pings] == ["access-1", "access-2"]
    assert len(api.calls(*REFRESH)) == 2


async def test_second_401_is_terminal_without_third_attempt(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"), refresh_ok("access-2"), refresh_ok("access-3"))
    api.add("GET", "/ping", httpx.Response(401, text="expired"))
    client = make_client()
    manager = client.tokens_manager

    async def request(token):
        return await manager.transport.send("GET", "/ping", browser_headers(manager.session.session_id, token))

    with pytest.raises(AuthError) as info:
        await manager.call_authorized(tokens, request, operation="ping")

    assert info.value.status == 401
    assert len(api.calls("GET", "/ping")) == 2
    assert len(api.calls(*REFRESH)) == 2
    assert manager.session.token is None


async def test_call_once_does_not_retry_401(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"))
    api.add("POST", "/ping", httpx.Response(401, text="expired"))
    client = make_client()
    manager = client.tokens_manager

    async def request(token):
        return await manager.transport.send("POST", "/ping", browser_headers(manager.session.session_id, token))

    with pytest.raises(AuthError):
        await manager.call_once(tokens, request, operation="ping")
    assert len(api.calls("POST", "/ping")) == 1
    assert len(api.calls(*REFRESH)) == 1


async def test_numeric_request_id_and_null_messages_are_accepted(api, make_client, tokens):
    api.add(
        *REFRESH,
        httpx.Response(
            200,
            json={"request_id": 12345, "code": 2000, "messages": None, "payload": {"access_token": "tok-n"}},
        ),
    )
    client = make_client()

    assert await client.refresh(tokens) == "tok-n"
    assert client.session.refresh_count == 1


async def test_broken_gzip_on_failed_refresh_still_reports_auth_error(api, make_client, tokens):
    api.add(*REFRESH, httpx.Response(403, content=b"\x1f\x8b" + b"garbage"))
    client = make_client()

    with pytest.raises(AuthError) as info:
        await client.refresh(tokens)

    assert info.value.status == 403
    assert "garbage" in info.value.body


async def test_broken_gzip_on_second_401_still_reports_auth_error(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"), refresh_ok("access-2"))
    api.add("GET", "/ping", httpx.Response(401, content=b"\x1f\x8b\x08broken"))
    client = make_client()
    manager = client.tokens_manager

    async def request(token):
        return await manager.transport.send("GET", "/ping", browser_headers(manager.session.session_id, token))

    with pytest.raises(AuthError) as info:
        await manager.call_authorized(tokens, request, operation="ping")

    assert info.value.status == 401


async def test_network_failure_during_refresh_is_auth_error(tokens):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = G2GClient(
        base_url="https://sls.test",
        http_transport=httpx.MockTransport(unreachable),
        pacer=Pacer(enabled=False),
    )

    with pytest.raises(AuthError) as info:
        await client.refresh(tokens)

    assert isinstance(info.value.__cause__, TransportError)
    assert client.session.state == TokenState.no_token

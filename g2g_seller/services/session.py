"""Bearer token lifecycle: refresh, ensure, and the retry-once-on-401 rule."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from g2g_seller.core.config import REFRESH_PATH
from g2g_seller.core.errors import AuthError, G2GError
from g2g_seller.core.logger import get_logger, mask_secret, register_secrets
from g2g_seller.models.envelopes import RefreshEnvelope
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.pacing import PRE_REFRESH, Pacer
from g2g_seller.services.transport import RawResponse, Transport, body_preview, browser_headers, parse_model

logger = get_logger(__name__)

# Sends one request with the given bearer token
AuthorizedRequest = Callable[[str], Awaitable[RawResponse]]


class TokenState(str, Enum):
    no_token = "no_token"
    refreshing = "refreshing"
    valid = "valid"


def new_session_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Session:
    session_id: str = field(default_factory=new_session_id)
    token: Optional[str] = None
    state: TokenState = TokenState.no_token
    refresh_count: int = 0

    def invalidate(self) -> None:
        self.token = None
        self.state = TokenState.no_token

    def headers(self, authenticated: bool = True) -> dict:
        return browser_headers(self.session_id, self.token if authenticated else None)


class TokenManager:
    """Owns one Session. Callers serialize access (see G2GClient)."""

    def __init__(self, transport: Transport, pacer: Pacer, session: Optional[Session] = None) -> None:
        self.transport = transport
        self.pacer = pacer
        self.session = session or Session()

    @property
    def token(self) -> Optional[str]:
        return self.session.token

    async def refresh(self, tokens: AuthTokens) -> str:
        await self.pacer.delay(PRE_REFRESH)
        self.session.state = TokenState.refreshing
        logger.info("Refreshing access token for user %s", tokens.user_id)

        try:
            raw = await self.transport.send(
                "POST",
                REFRESH_PATH,
                self.session.headers(authenticated=False),
                json_body=tokens.refresh_body(),
            )
        except G2GError as exc:
            self.session.invalidate()
            raise AuthError(f"Failed to refresh token: {exc}") from exc

        if not raw.ok:
            self.session.invalidate()
            raise AuthError("Failed to refresh token", status=raw.status, body=body_preview(raw))

        try:
            envelope = parse_model(raw, RefreshEnvelope)
        except G2GError as exc:
            self.session.invalidate()
            raise AuthError(f"Unreadable refresh response: {exc}", status=raw.status) from exc

        access_token = envelope.payload.access_token if envelope.payload else None
        if not access_token:
            self.session.invalidate()
            raise AuthError("Refresh response carried no access token", status=raw.status, body=body_preview(raw))

        register_secrets([access_token])
        self.session.token = access_token
        self.session.state = TokenState.valid
        self.session.refresh_count += 1
        logger.info(
            "Access token refreshed (%s), refresh #%d this session",
            mask_secret(access_token),
            self.session.refresh_count,
        )
        return access_token

    async def ensure_token(self, tokens: AuthTokens) -> str:
        if self.session.token:
            return self.session.token
        return await self.refresh(tokens)

    async def call_authorized(self, tokens: AuthTokens, request: AuthorizedRequest, *, operation: str) -> RawResponse:
        """Run `request` with a valid token, refreshing and replaying once on 401.

        A 401 on the replay is terminal; there is never a third attempt.
        """
        for attempt in range(2):
            token = await self.ensure_token(tokens)
            raw = await request(token)
            if raw.status != 401:
                return raw
            if attempt == 0:
                logger.warning("%s got 401; refreshing token and retrying once", operation)
                self.session.invalidate()

        self.session.invalidate()
        raise AuthError(f"{operation} still unauthorized after token refresh", status=401, body=body_preview(raw))

    async def call_once(self, tokens: AuthTokens, request: AuthorizedRequest, *, operation: str) -> RawResponse:
        """Single authenticated attempt; a 401 is fatal."""
        token = await self.ensure_token(tokens)
        raw = await request(token)
        if raw.status == 401:
            self.session.invalidate()
            raise AuthError(f"{operation} unauthorized", status=401, body=body_preview(raw))
        return raw

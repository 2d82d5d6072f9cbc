# transport.py
"""
HTTP layer for the private marketplace API.

Shapes every request like the marketplace's own web front-end would send it,
and turns raw bodies into JSON (gunzipping bodies that arrive compressed
without a Content-Encoding header). No retries happen here.
"""

from __future__ import annotations

import gzip
import json
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from g2g_seller.core.config import (
    ACCEPT,
    ACCEPT_ENCODING,
    ACCEPT_LANGUAGE,
    BASE_URL,
    NULL_AUTHORIZATION,
    PAYLOAD_PREVIEW_CHARS,
    REQUEST_TIMEOUT,
    SEC_CH_UA,
    SEC_CH_UA_MOBILE,
    SEC_CH_UA_PLATFORM,
    SITE_ORIGIN,
    USER_AGENT,
)
from g2g_seller.core.errors import DecodeError, ParseError, TransportError
from g2g_seller.core.logger import get_logger

logger = get_logger(__name__)

GZIP_MAGIC = b"\x1f\x8b"

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class RawResponse:
    status: int
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return maybe_decompress(self.content).decode("utf-8", errors="replace")


def referer_for(session_id: str) -> str:
    return f"{SITE_ORIGIN}/offers/sell?session_id={session_id}"


def browser_headers(session_id: str, token: Optional[str] = None) -> Dict[str, str]:
    """Header set of the web front-end; `token=None` sends the literal `null`."""
    return {
        "Accept": ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
        "Accept-Encoding": ACCEPT_ENCODING,
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
        "sec-ch-ua": SEC_CH_UA,
        "sec-ch-ua-mobile": SEC_CH_UA_MOBILE,
        "sec-ch-ua-platform": SEC_CH_UA_PLATFORM,
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-site",
        "Origin": SITE_ORIGIN,
        "Referer": referer_for(session_id),
        "Authorization": token if token else NULL_AUTHORIZATION,
    }


def maybe_decompress(data: bytes) -> bytes:
    if not data.startswith(GZIP_MAGIC):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecodeError(f"gzip body could not be decompressed ({len(data)} bytes): {exc}") from exc


def preview(data: bytes | str, limit: int = PAYLOAD_PREVIEW_CHARS) -> str:
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def body_preview(raw: RawResponse) -> str:
    """Preview for error reports; never fails on a broken gzip body."""
    try:
        data = maybe_decompress(raw.content)
    except DecodeError:
        data = raw.content
    return preview(data)


def parse_json(raw: RawResponse) -> Any:
    body = maybe_decompress(raw.content)
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"Invalid JSON from {raw.url or 'response'} (HTTP {raw.status}): {exc}", preview(body)) from exc


def parse_model(raw: RawResponse, model: Type[ModelT]) -> ModelT:
    """Decode the body into a response envelope."""
    data = parse_json(raw)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ParseError(
            f"Unexpected {model.__name__} shape from {raw.url or 'response'}: {exc.error_count()} errors",
            preview(json.dumps(data, ensure_ascii=False, default=str)),
        ) from exc


class Transport:
    """Thin async wrapper around one shared httpx client."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            follow_redirects=False,
        )

    async def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        *,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        content: Optional[bytes] = None,
    ) -> RawResponse:
        if json_body is not None:
            content = json.dumps(json_body, ensure_ascii=False).encode("utf-8")

        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(
                method,
                path,
                headers=dict(headers),
                params=params,
                content=content,
            )
        except httpx.TimeoutException as exc:
            raise TransportError(method, url, f"timed out: {exc!r}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(method, url, repr(exc)) from exc

        raw = RawResponse(
            status=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            url=str(response.url),
        )
        logger.debug("%s %s -> %s (%d bytes)", method, url, raw.status, len(raw.content))
        return raw

    async def aclose(self) -> None:
        await self._client.aclose()

from __future__ import annotations

from typing import Any, Optional


class G2GError(Exception):
    """Base class for every failure raised by the client.

    `record` is filled in by the listing publisher when a failure happens after
    the remote side already holds a partial offer; `stage` names the step.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.record: Optional[Any] = None
        self.stage: Optional[str] = None

    @property
    def orphaned(self) -> bool:
        return bool(self.record is not None and getattr(self.record, "offer_id", None))


class TransportError(G2GError):
    """Network failure or timeout before any response arrived."""

    def __init__(self, method: str, url: str, cause: str) -> None:
        super().__init__(f"{method} {url} failed: {cause}")
        self.method = method
        self.url = url


class DecodeError(G2GError):
    """Body carried the gzip magic prefix but could not be decompressed."""


class ParseError(G2GError):
    def __init__(self, message: str, preview: str = "") -> None:
        text = f"{message} (payload: {preview!r})" if preview else message
        super().__init__(text)
        self.preview = preview


class AuthError(G2GError):
    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        detail = message
        if status is not None:
            detail = f"{message} [HTTP {status}]"
        if body:
            detail = f"{detail}: {body}"
        super().__init__(detail)
        self.status = status
        self.body = body


class RemoteError(G2GError):
    """Well-formed response whose application code is not a success."""

    def __init__(self, operation: str, code: Any = None, status: Optional[int] = None, messages: Any = None) -> None:
        super().__init__(f"{operation} rejected: code={code!r} status={status} messages={messages!r}")
        self.operation = operation
        self.code = code
        self.status = status
        self.messages = messages


class SettingsError(G2GError):
    def __init__(self, problems: list[str]) -> None:
        super().__init__("Invalid G2G settings: " + "; ".join(problems))
        self.problems = problems

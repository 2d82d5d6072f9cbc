"""Response shapes of the private API.

Every endpoint answers with the same outer envelope; only `payload` differs.
Fields are optional because the remote side drops keys freely.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from g2g_seller.models.quotes import CatalogOffer


class Envelope(BaseModel):
    request_id: Optional[str] = None
    code: Optional[int] = None
    messages: List[Any] = Field(default_factory=list)
    payload: Optional[Dict[str, Any]] = None

    @field_validator("request_id", mode="before")
    @classmethod
    def _request_id_as_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("messages", mode="before")
    @classmethod
    def _messages_as_list(cls, value: Any) -> Any:
        # null, a single string or an object all show up here
        if value is None:
            return []
        if not isinstance(value, list):
            return [value]
        return value


class RefreshPayload(BaseModel):
    access_token: Optional[str] = None


class RefreshEnvelope(Envelope):
    payload: Optional[RefreshPayload] = None


class SearchPayload(BaseModel):
    results: List[CatalogOffer] = Field(default_factory=list)
    total_result: Optional[int] = None


class SearchEnvelope(Envelope):
    payload: Optional[SearchPayload] = None


class _IdPayload(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def _ids_as_text(cls, value: Any) -> Any:
        # ids come back as numbers on some endpoints
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class OfferCreatedPayload(_IdPayload):
    offer_id: Optional[str] = None


class OfferCreatedEnvelope(Envelope):
    payload: Optional[OfferCreatedPayload] = None


class OfferUpdatedPayload(_IdPayload):
    offer_id: Optional[str] = None
    relation_id: Optional[str] = None


class OfferUpdatedEnvelope(Envelope):
    payload: Optional[OfferUpdatedPayload] = None

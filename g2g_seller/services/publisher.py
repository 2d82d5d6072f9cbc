"""
Listing publisher.

Publishing is a three-step remote workflow with no undo:

    1. create a placeholder offer            -> offer_id
    2. fill in the details and attributes    -> relation_id
    3. upload the credentials, submit a job  -> job submitted

A failure stops the workflow where it is. The raised error keeps the partial
OfferRecord (`error.record`) so the operator can finish or delete the
orphaned offer by hand.
"""

from __future__ import annotations

from typing import Any, Optional, Type

from g2g_seller.core.config import (
    BRAND_ID,
    DELIVERY_METHOD_IDS,
    DELIVERY_SPEED,
    JOB_PATH,
    OFFER_CURRENCY,
    OFFER_PATH,
    OFFER_TYPE,
    SALES_TERRITORY,
    SCREENSHOT_IMAGE_NAME,
    SERVICE_ID,
    SOFTPIN_JOB_TYPE,
    SOFTPIN_PATH,
    SUCCESS_CODE,
)
from g2g_seller.core.errors import G2GError, RemoteError
from g2g_seller.core.logger import get_logger
from g2g_seller.models.envelopes import Envelope, OfferCreatedEnvelope, OfferUpdatedEnvelope
from g2g_seller.models.listing import ListingDraft, OfferRecord, OfferStage
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.attributes import offer_attributes
from g2g_seller.services.pacing import OFFER_STEP, UPLOAD_STEP, Pacer
from g2g_seller.services.session import TokenManager
from g2g_seller.services.transport import RawResponse, browser_headers, parse_model

logger = get_logger(__name__)


def create_offer_body(seller_id: str) -> dict:
    return {
        "seller_id": seller_id,
        "service_id": SERVICE_ID,
        "brand_id": BRAND_ID,
        "offer_type": OFFER_TYPE,
    }


def offer_details_body(draft: ListingDraft, seller_id: str, offer_id: str) -> dict:
    body = {
        "offer_id": offer_id,
        "seller_id": seller_id,
        "title": draft.title,
        "description": draft.description,
        "unit_price": float(draft.unit_price),
        "currency": OFFER_CURRENCY,
        "min_qty": 1,
        "api_qty": 1,
        "available_qty": 1,
        "low_stock_alert_qty": 0,
        "delivery_method_ids": list(DELIVERY_METHOD_IDS),
        "delivery_speed": DELIVERY_SPEED,
        "delivery_speed_details": [{"min": 1, "max": 1, "delivery_time": "0"}],
        "sales_territory_settings": {"settings_type": SALES_TERRITORY, "countries": []},
        "offer_attributes": offer_attributes(
            draft.server_code,
            draft.rank_code,
            draft.champions_count,
            draft.skins_count,
        ),
        "external_images_mapping": [],
    }
    if draft.screenshot_url:
        body["external_images_mapping"] = [
            {"image_name": SCREENSHOT_IMAGE_NAME, "image_url": draft.screenshot_url}
        ]
    return body


def softpin_body(record: OfferRecord, seller_id: str, payload: str) -> dict:
    return {
        "offer_id": record.offer_id,
        "relation_id": record.relation_id,
        "seller_id": seller_id,
        "softpins": payload,
    }


def job_body(record: OfferRecord, seller_id: str) -> dict:
    return {
        "offer_id": record.offer_id,
        "relation_id": record.relation_id,
        "seller_id": seller_id,
        "job_type": SOFTPIN_JOB_TYPE,
        "file_name": record.file_name,
    }


def _checked(raw: RawResponse, operation: str, model: Type[Envelope] = Envelope) -> Any:
    """Decode the envelope and insist on the success code."""
    envelope = parse_model(raw, model)
    if envelope.code != SUCCESS_CODE:
        raise RemoteError(operation, code=envelope.code, status=raw.status, messages=envelope.messages)
    return envelope


class ListingPublisher:
    def __init__(self, tokens_manager: TokenManager, pacer: Pacer) -> None:
        self.tokens_manager = tokens_manager
        self.pacer = pacer

    def _send(self, method: str, path: str, body: dict):
        transport = self.tokens_manager.transport
        session_id = self.tokens_manager.session.session_id

        async def request(token: str) -> RawResponse:
            return await transport.send(method, path, browser_headers(session_id, token), json_body=body)

        return request

    async def create_placeholder(self, tokens: AuthTokens, record: OfferRecord) -> str:
        # A new placeholder must be created under a freshly issued token
        await self.tokens_manager.refresh(tokens)

        request = self._send("POST", OFFER_PATH, create_offer_body(tokens.user_id))
        raw = await self.tokens_manager.call_authorized(tokens, request, operation="create offer")
        envelope = _checked(raw, "create offer", OfferCreatedEnvelope)

        offer_id = envelope.payload.offer_id if envelope.payload else None
        if not offer_id:
            raise RemoteError("create offer", code=envelope.code, status=raw.status, messages="missing offer_id")

        record.offer_id = offer_id
        record.stage = OfferStage.placeholder_created
        logger.info("Placeholder offer created: %s", offer_id)
        return offer_id

    async def populate_details(self, draft: ListingDraft, tokens: AuthTokens, record: OfferRecord) -> str:
        await self.pacer.delay(OFFER_STEP)

        body = offer_details_body(draft, tokens.user_id, record.offer_id)
        request = self._send("PUT", f"{OFFER_PATH}/{record.offer_id}", body)
        raw = await self.tokens_manager.call_authorized(tokens, request, operation="update offer")
        envelope = _checked(raw, "update offer", OfferUpdatedEnvelope)

        relation_id = envelope.payload.relation_id if envelope.payload else None
        if not relation_id:
            raise RemoteError("update offer", code=envelope.code, status=raw.status, messages="missing relation_id")

        record.relation_id = relation_id
        record.stage = OfferStage.details_populated
        logger.info("Offer %s populated (relation %s)", record.offer_id, relation_id)
        return relation_id

    async def upload_credentials(self, draft: ListingDraft, tokens: AuthTokens, record: OfferRecord) -> None:
        # No 401 replay from here on: a retry could submit the credentials twice
        await self.pacer.delay(UPLOAD_STEP)
        request = self._send("POST", SOFTPIN_PATH, softpin_body(record, tokens.user_id, draft.credential_payload))
        raw = await self.tokens_manager.call_once(tokens, request, operation="upload credentials")
        _checked(raw, "upload credentials")
        record.stage = OfferStage.credentials_uploaded
        logger.info("Credentials uploaded for offer %s", record.offer_id)

        await self.pacer.delay(UPLOAD_STEP)
        request = self._send("POST", JOB_PATH, job_body(record, tokens.user_id))
        raw = await self.tokens_manager.call_once(tokens, request, operation="create job")
        _checked(raw, "create job")
        record.stage = OfferStage.job_submitted
        logger.info("Inventory job submitted for %s", record.file_name)

    async def publish(self, draft: ListingDraft, tokens: AuthTokens, record: Optional[OfferRecord] = None) -> str:
        record = record if record is not None else OfferRecord()
        steps = (
            ("create placeholder", lambda: self.create_placeholder(tokens, record)),
            ("populate details", lambda: self.populate_details(draft, tokens, record)),
            ("upload credentials", lambda: self.upload_credentials(draft, tokens, record)),
        )

        for stage, step in steps:
            try:
                await step()
            except G2GError as exc:
                exc.record = record
                exc.stage = stage
                if record.offer_id:
                    logger.error(
                        "Publish stopped at '%s'; remote offer left orphaned (%s): %s",
                        stage,
                        record.describe(),
                        exc,
                    )
                else:
                    logger.error("Publish failed at '%s' before any offer existed: %s", stage, exc)
                raise

        logger.info("Offer %s published", record.offer_id)
        return record.offer_id

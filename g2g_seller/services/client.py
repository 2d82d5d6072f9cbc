from __future__ import annotations

import asyncio
from typing import Optional, Sequence

import httpx

from g2g_seller.core.config import BASE_URL, REQUEST_TIMEOUT
from g2g_seller.core.logger import get_logger
from g2g_seller.models.listing import ListingDraft, OfferRecord
from g2g_seller.models.quotes import BatchQuote, PriceQuote
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.pacing import Pacer
from g2g_seller.services.price_search import PriceSearch
from g2g_seller.services.publisher import ListingPublisher
from g2g_seller.services.session import Session, TokenManager
from g2g_seller.services.transport import Transport

logger = get_logger(__name__)


class G2GClient:
    """One session against the marketplace API.

    Operations on one client run one at a time: the token is shared state and
    two concurrent refreshes would overwrite each other. Use separate clients
    for parallel work.

        async with G2GClient() as client:
            quote = await client.search_price("Star Guardian Ahri", "EUW", tokens)
    """

    def __init__(
        self,
        *,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        pacer: Optional[Pacer] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        session: Optional[Session] = None,
    ) -> None:
        self.pacer = pacer or Pacer()
        self.transport = Transport(base_url=base_url, timeout=timeout, transport=http_transport)
        self.tokens_manager = TokenManager(self.transport, self.pacer, session=session)
        self.price_search = PriceSearch(self.tokens_manager, self.pacer)
        self.publisher = ListingPublisher(self.tokens_manager, self.pacer)
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session:
        return self.tokens_manager.session

    async def __aenter__(self) -> "G2GClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def refresh(self, tokens: AuthTokens) -> str:
        async with self._lock:
            return await self.tokens_manager.refresh(tokens)

    async def ensure_token(self, tokens: AuthTokens) -> str:
        async with self._lock:
            return await self.tokens_manager.ensure_token(tokens)

    async def search_price(self, term: str, server: str, tokens: AuthTokens) -> PriceQuote:
        async with self._lock:
            return await self.price_search.search(term, server, tokens)

    async def search_prices(self, terms: Sequence[str], server: str, tokens: AuthTokens) -> BatchQuote:
        async with self._lock:
            logger.info("Pricing %d terms on %s", len(terms), server)
            return await self.price_search.search_many(list(terms), server, tokens)

    async def publish(self, draft: ListingDraft, tokens: AuthTokens, record: Optional[OfferRecord] = None) -> str:
        async with self._lock:
            return await self.publisher.publish(draft, tokens, record=record)

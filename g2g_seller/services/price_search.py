from __future__ import annotations

from typing import List, Sequence

from g2g_seller.core.config import (
    SEARCH_COUNTRY,
    SEARCH_CURRENCY,
    SEARCH_PAGE_SIZE,
    SEARCH_PATH,
    SEARCH_SORT,
    SEO_TERM,
)
from g2g_seller.core.errors import G2GError, RemoteError
from g2g_seller.core.logger import get_logger
from g2g_seller.models.envelopes import SearchEnvelope
from g2g_seller.models.quotes import BatchQuote, CatalogOffer, PriceQuote
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.attributes import server_filter
from g2g_seller.services.pacing import BATCH_ITEM, PRE_SEARCH, Pacer
from g2g_seller.services.session import TokenManager
from g2g_seller.services.transport import RawResponse, browser_headers, parse_model

logger = get_logger(__name__)


def search_params(term: str, server: str) -> dict:
    return {
        "seo_term": SEO_TERM,
        "q": term,
        "sort": SEARCH_SORT,
        "filter_attr": server_filter(server),
        "page_size": SEARCH_PAGE_SIZE,
        "currency": SEARCH_CURRENCY,
        "country": SEARCH_COUNTRY,
        "include_localization": 0,
    }


def reduce_offers(term: str, offers: Sequence[CatalogOffer]) -> PriceQuote:
    """
    Best price for `term`:
    cheapest offer mentioning the term, else cheapest overall marked `~`,
    else "No offers".
    """
    if not offers:
        return PriceQuote.no_offers(term)

    matches = [offer for offer in offers if offer.mentions(term)]
    if matches:
        return PriceQuote.exact(term, min(offer.unit_price for offer in matches))

    return PriceQuote.approximate(term, min(offer.unit_price for offer in offers))


class PriceSearch:
    def __init__(self, tokens_manager: TokenManager, pacer: Pacer) -> None:
        self.tokens_manager = tokens_manager
        self.pacer = pacer

    async def fetch_offers(self, term: str, server: str, tokens: AuthTokens) -> List[CatalogOffer]:
        transport = self.tokens_manager.transport
        session_id = self.tokens_manager.session.session_id
        params = search_params(term, server)

        async def request(token: str) -> RawResponse:
            await self.pacer.delay(PRE_SEARCH)
            return await transport.send("GET", SEARCH_PATH, browser_headers(session_id, token), params=params)

        raw = await self.tokens_manager.call_authorized(tokens, request, operation=f"search '{term}'")
        if not raw.ok:
            raise RemoteError("search", status=raw.status, messages=raw.text[:200])

        envelope = parse_model(raw, SearchEnvelope)
        results = envelope.payload.results if envelope.payload else []
        logger.info("Search '%s' (%s) returned %d offers", term, server, len(results))
        return results

    async def search(self, term: str, server: str, tokens: AuthTokens) -> PriceQuote:
        offers = await self.fetch_offers(term, server, tokens)
        quote = reduce_offers(term, offers)
        logger.info("Quote for '%s': %s", term, quote.display_price)
        return quote

    async def search_many(self, terms: Sequence[str], server: str, tokens: AuthTokens) -> BatchQuote:
        quotes: List[PriceQuote] = []
        for index, term in enumerate(terms):
            try:
                quote = await self.search(term, server, tokens)
            except G2GError as exc:
                logger.error("Price lookup failed for '%s': %s", term, exc)
                quote = PriceQuote.error(term)
            quotes.append(quote)

            if index < len(terms) - 1:
                await self.pacer.delay(BATCH_ITEM)

        batch = BatchQuote.from_quotes(quotes)
        logger.info(
            "Priced %d terms: total %s, most expensive %s",
            len(quotes),
            batch.total_value,
            batch.most_expensive.term if batch.most_expensive else "-",
        )
        return batch

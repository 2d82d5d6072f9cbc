from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import List, Sequence

from loguru import logger

from g2g_seller.models.quotes import BatchQuote, PriceQuote, QuoteKind
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.account_parser import parse_account_data
from g2g_seller.services.account_store import read_account_text
from g2g_seller.services.client import G2GClient

QUOTE_ICONS = {
    QuoteKind.no_offers: "❌",
    QuoteKind.error: "❌",
    QuoteKind.approximate: "⚠️",
}


def quote_icon(quote: PriceQuote) -> str:
    if quote.kind in QUOTE_ICONS:
        return QUOTE_ICONS[quote.kind]
    if quote.amount >= 100:
        return "💎"
    if quote.amount >= 50:
        return "⭐"
    if quote.amount >= 20:
        return "✨"
    return "🔹"


def format_report(batch: BatchQuote) -> str:
    lines: List[str] = [
        "📊 Skin price report",
        "",
        f"Total value: {batch.total_value}",
        f"Skins checked: {len(batch.quotes)}",
        "",
    ]
    if batch.most_expensive:
        lines += [
            "💎 Most expensive:",
            f"   {batch.most_expensive.term}: {batch.most_expensive.display_price}",
            "",
        ]

    lines.append("📋 Details:")
    lines.append("")
    ordered = sorted(batch.quotes, key=lambda q: q.amount if q.has_amount else Decimal("-1"), reverse=True)
    for quote in ordered:
        lines.append(f"{quote_icon(quote)} {quote.term}: {quote.display_price}")
    return "\n".join(lines)


async def price_terms(terms: Sequence[str], server: str, tokens: AuthTokens) -> BatchQuote:
    async with G2GClient() as client:
        return await client.search_prices(terms, server, tokens)


async def price_account(account_path: Path | str, tokens: AuthTokens, server: str | None = None) -> BatchQuote:
    """Price every skin listed in an account folder on the account's own server."""
    data = parse_account_data(read_account_text(account_path))
    target = server or data.server
    if not data.skins:
        logger.warning(f"No skins listed in {Path(account_path).name}")
        return BatchQuote()
    logger.info(f"Pricing {len(data.skins)} skins of {Path(account_path).name} on {target}")
    return await price_terms(data.skins, target, tokens)

"""High-level orchestration: account folder -> listing draft -> live offer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional

from loguru import logger

from g2g_seller.models.account import AccountData
from g2g_seller.models.listing import ListingDraft, OfferRecord
from g2g_seller.models.tokens import AuthTokens
from g2g_seller.services.account_parser import (
    account_text_to_credential_payload,
    extract_screenshot_url,
    generate_description,
    generate_title,
    parse_account_data,
    titled_champions,
)
from g2g_seller.services.account_store import read_account_text, write_receipt
from g2g_seller.services.attributes import DEFAULT_RANK
from g2g_seller.services.champion_usage import ChampionUsageStore
from g2g_seller.services.client import G2GClient


@dataclass
class ListingContext:
    account_path: Path
    price: Decimal
    rank: str = DEFAULT_RANK
    account: Optional[AccountData] = None
    draft: Optional[ListingDraft] = None
    record: Optional[OfferRecord] = None
    receipt_path: Optional[Path] = None

    @property
    def offer_id(self) -> Optional[str]:
        return self.record.offer_id if self.record else None


class ListingStrategy:
    """Coordinates the account-to-offer steps around one G2GClient."""

    def __init__(self, client: G2GClient, usage_store: ChampionUsageStore | None = None) -> None:
        self.client = client
        self.usage_store = usage_store or ChampionUsageStore()

    def build_draft(self, ctx: ListingContext) -> ListingDraft:
        text = read_account_text(ctx.account_path)
        ctx.account = parse_account_data(text)

        champions = self.usage_store.sort_by_usage(ctx.account.champions)
        title = generate_title(ctx.account, champions=champions)

        ctx.draft = ListingDraft(
            title=title,
            description=generate_description(ctx.account),
            unit_price=ctx.price,
            server_code=ctx.account.server,
            rank_code=ctx.rank,
            champions_count=ctx.account.champions_count,
            skins_count=ctx.account.skins_count,
            credential_payload=account_text_to_credential_payload(text),
            screenshot_url=extract_screenshot_url(text),
        )
        logger.info(f"Draft ready for {ctx.account_path.name}: {len(title)} chars title, server {ctx.account.server}")
        return ctx.draft

    async def run(self, ctx: ListingContext, tokens: AuthTokens, *, dry_run: bool = False) -> ListingContext:
        draft = ctx.draft or self.build_draft(ctx)
        if dry_run:
            logger.info("Dry run: draft built, nothing published")
            return ctx

        ctx.record = OfferRecord()
        offer_id = await self.client.publish(draft, tokens, record=ctx.record)

        ctx.receipt_path = write_receipt(ctx.account_path, offer_id)
        if ctx.account:
            self.usage_store.track(titled_champions(draft.title, ctx.account.champions))
        return ctx


async def run_listing_flow(
    account_path: Path | str,
    price: Decimal,
    tokens: AuthTokens,
    *,
    rank: str = DEFAULT_RANK,
    dry_run: bool = False,
) -> ListingContext:
    ctx = ListingContext(account_path=Path(account_path), price=price, rank=rank)
    async with G2GClient() as client:
        strategy = ListingStrategy(client)
        return await strategy.run(ctx, tokens, dry_run=dry_run)

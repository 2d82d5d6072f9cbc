# cli.py

import asyncio
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List

import typer
from loguru import logger

from g2g_seller.core.config import LOG_LEVEL
from g2g_seller.core.errors import G2GError, ParseError
from g2g_seller.core.logger import setup_logging
from g2g_seller.services.account_store import account_images, list_account_folders
from g2g_seller.services.client import G2GClient
from g2g_seller.services.settings_store import SettingsStore
from g2g_seller.strategies.listing import run_listing_flow
from g2g_seller.strategies.pricing import format_report, price_account, price_terms

app = typer.Typer(help="Price and publish League of Legends accounts on G2G.")


@app.callback()
def main(log_level: str = typer.Option(LOG_LEVEL, "--log-level", help="Logging level")):
    setup_logging(log_level=log_level.upper())


def _load_tokens(settings: Path | None):
    store = SettingsStore(settings) if settings else SettingsStore()
    try:
        return store.load_tokens()
    except G2GError as exc:
        logger.error(str(exc))
        raise typer.Exit(2)


@app.command("settings-check")
def settings_check(settings: Path = typer.Option(None, "--settings", help="Settings JSON file")):
    """Validate that all four tokens are available."""
    _load_tokens(settings)
    typer.echo("Settings OK")


@app.command()
def refresh(settings: Path = typer.Option(None, "--settings", help="Settings JSON file")):
    """Perform one token refresh to check the stored credentials."""
    tokens = _load_tokens(settings)

    async def _run():
        async with G2GClient() as client:
            return await client.refresh(tokens)

    try:
        asyncio.run(_run())
    except G2GError as exc:
        logger.error(f"Refresh failed: {exc}")
        raise typer.Exit(1)
    typer.echo("Token refresh OK")


@app.command()
def price(
    terms: List[str] = typer.Argument(..., help="Search terms, e.g. skin names"),
    server: str = typer.Option("EUW", "--server", "-s", help="Server code (EUW, NA, BR1, ...)"),
    settings: Path = typer.Option(None, "--settings", help="Settings JSON file"),
):
    """Look up the lowest offer price for each term."""
    tokens = _load_tokens(settings)
    batch = asyncio.run(price_terms(terms, server, tokens))
    typer.echo(format_report(batch))


@app.command("account-prices")
def account_prices(
    account: Path = typer.Argument(..., exists=True, file_okay=False, help="Account folder"),
    server: str = typer.Option(None, "--server", "-s", help="Override the account's server"),
    settings: Path = typer.Option(None, "--settings", help="Settings JSON file"),
):
    """Price every skin listed in an account folder."""
    tokens = _load_tokens(settings)
    try:
        batch = asyncio.run(price_account(account, tokens, server=server))
    except (ParseError, ValueError) as exc:
        logger.error(f"Could not read account {account.name}: {exc}")
        raise typer.Exit(1)
    typer.echo(format_report(batch))


@app.command()
def accounts(base: Path = typer.Argument(..., exists=True, file_okay=False, help="Folder holding account folders")):
    """List account folders with their file and screenshot counts."""
    for folder in list_account_folders(base):
        images = account_images(folder.path)
        typer.echo(f"{folder.name}\t{len(folder.files())} files\t{len(images)} images")


@app.command()
def publish(
    account: Path = typer.Argument(..., exists=True, file_okay=False, help="Account folder"),
    price_usd: str = typer.Option(..., "--price", "-p", help="Unit price in USD"),
    rank: str = typer.Option("unranked", "--rank", help="Rank tier label"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build the draft only"),
    settings: Path = typer.Option(None, "--settings", help="Settings JSON file"),
):
    """
    Publish an account folder as a new offer.
    Example:
        python main.py publish ./accounts/uyep_br1 --price 14.99 --rank silver
    """
    try:
        unit_price = Decimal(price_usd)
    except InvalidOperation:
        logger.error(f"Invalid price: {price_usd}")
        raise typer.Exit(2)

    tokens = _load_tokens(settings)
    try:
        ctx = asyncio.run(run_listing_flow(account, unit_price, tokens, rank=rank, dry_run=dry_run))
    except G2GError as exc:
        logger.error(f"Publish failed at '{exc.stage or 'draft'}': {exc}")
        if exc.orphaned:
            typer.echo(
                f"Stopped at '{exc.stage}'; remote offer left incomplete, fix it by hand: {exc.record.describe()}",
                err=True,
            )
        raise typer.Exit(1)
    except ValueError as exc:
        logger.error(f"Could not build a draft from {account.name}: {exc}")
        raise typer.Exit(1)

    if dry_run:
        typer.echo("===== DRAFT TITLE =====")
        typer.echo(ctx.draft.title)
        typer.echo("===== DRAFT DESCRIPTION =====")
        typer.echo(ctx.draft.description)
        return

    typer.echo(f"Offer {ctx.offer_id} is live (receipt: {ctx.receipt_path})")

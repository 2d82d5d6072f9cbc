from decimal import Decimal

import httpx
import pytest

from conftest import ok_json, refresh_ok
from g2g_seller.core.errors import AuthError
from g2g_seller.models.quotes import CatalogOffer, PriceQuote, QuoteKind
from g2g_seller.services.attributes import server_filter
from g2g_seller.services.pacing import Pacer
from g2g_seller.services.price_search import reduce_offers

REFRESH = ("POST", "/user/refresh_access")
SEARCH = ("GET", "/offer/search")

SAMPLE = [
    {"converted_unit_price": 5, "title": "Ahri"},
    {"converted_unit_price": 3, "title": "Zed"},
    {"converted_unit_price": 9, "description": "ahri skin"},
]


def offers(rows):
    return [CatalogOffer.model_validate(row) for row in rows]


def results(rows):
    return ok_json({"results": rows})


def test_exact_minimum_over_case_insensitive_matches():
    quote = reduce_offers("ahri", offers(SAMPLE))
    assert quote.display_price == "$5.00"
    assert quote.kind == QuoteKind.exact


def test_approximate_minimum_when_nothing_matches():
    quote = reduce_offers("vayne", offers(SAMPLE))
    assert quote.display_price == "~$3.00"
    assert quote.amount == Decimal("3")


def test_no_offers_sentinel():
    assert reduce_offers("ahri", []).display_price == "No offers"


def test_fractional_prices_keep_two_decimals():
    quote = reduce_offers("lux", offers([{"converted_unit_price": 12.5, "title": "Elementalist LUX"}]))
    assert quote.display_price == "$12.50"


async def test_search_builds_catalog_query(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"))
    api.add(*SEARCH, results(SAMPLE))
    client = make_client()

    quote = await client.search_price("Star Guardian Ahri", "br1", tokens)

    assert quote.display_price == "~$3.00"
    (request,) = api.calls(*SEARCH)
    params = request.url.params
    assert params["q"] == "Star Guardian Ahri"
    assert params["seo_term"] == "league-of-legends-account"
    assert params["sort"] == "lowest_price"
    assert params["page_size"] == "48"
    assert params["currency"] == "USD"
    assert params["country"] == "RU"
    assert params["include_localization"] == "0"
    assert params["filter_attr"] == server_filter("BR")
    assert request.headers["Authorization"] == "access-1"


async def test_search_retries_once_after_401(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok("access-1"), refresh_ok("access-2"))
    api.add(*SEARCH, httpx.Response(401), results(SAMPLE))
    client = make_client()

    quote = await client.search_price("ahri", "EUW", tokens)

    assert quote.display_price == "$5.00"
    assert len(api.calls(*SEARCH)) == 2
    assert len(api.calls(*REFRESH)) == 2


async def test_search_paces_before_each_request(api, make_client, tokens):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    api.add(*REFRESH, refresh_ok())
    api.add(*SEARCH, results([]))
    client = make_client(pacer=Pacer(enabled=True, sleep=fake_sleep))

    await client.search_price("ahri", "EUW", tokens)

    # pre-refresh then pre-search
    assert len(delays) == 2
    assert 1.5 <= delays[0] <= 2.5
    assert 1.0 <= delays[1] <= 2.0


async def test_search_propagates_double_401(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok())
    api.add(*SEARCH, httpx.Response(401))
    client = make_client()
    with pytest.raises(AuthError):
        await client.search_price("ahri", "EUW", tokens)


async def test_batch_degrades_failures_and_aggregates(api, make_client, tokens):
    api.add(*REFRESH, refresh_ok())
    api.add(
        *SEARCH,
        results(SAMPLE),
        httpx.Response(500, text="upstream error"),
        results(SAMPLE),
    )
    client = make_client()

    batch = await client.search_prices(["ahri", "teemo", "vayne"], "EUW", tokens)

    assert [q.display_price for q in batch.quotes] == ["$5.00", "Error", "~$3.00"]
    assert batch.total_value == "$8.00"
    assert batch.most_expensive.term == "ahri"
    assert batch.most_expensive.display_price == "$5.00"


async def test_batch_paces_between_items_but_not_after_last(api, make_client, tokens):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    api.add(*REFRESH, refresh_ok())
    api.add(*SEARCH, results([]))
    client = make_client(pacer=Pacer(enabled=True, sleep=fake_sleep))

    await client.search_prices(["a", "b", "c"], "EUW", tokens)

    # refresh, search a, gap, search b, gap, search c
    assert len(delays) == 6
    assert 2.0 <= delays[2] <= 3.5
    assert 2.0 <= delays[4] <= 3.5
    assert 1.0 <= delays[5] <= 2.0


def test_batch_of_only_failures_has_no_most_expensive():
    from g2g_seller.models.quotes import BatchQuote

    batch = BatchQuote.from_quotes([PriceQuote.error("a"), PriceQuote.no_offers("b")])
    assert batch.total_value == "$0.00"
    assert batch.most_expensive is None

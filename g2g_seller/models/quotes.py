from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from g2g_seller.core.config import ERROR_QUOTE, NO_OFFERS


class CatalogOffer(BaseModel):
    """One entry of the catalog search result list."""
    unit_price: Decimal = Field(..., alias="converted_unit_price")
    title: Optional[str] = None
    description: Optional[str] = None

    model_config = {"populate_by_name": True}

    def mentions(self, term: str) -> bool:
        needle = term.lower()
        return any(needle in (text or "").lower() for text in (self.title, self.description))


class QuoteKind(str, Enum):
    exact = "exact"
    approximate = "approximate"
    no_offers = "no_offers"
    error = "error"


def format_price(amount: Decimal) -> str:
    return f"${amount:.2f}"


class PriceQuote(BaseModel):
    term: str
    display_price: str
    kind: QuoteKind
    amount: Optional[Decimal] = None

    @classmethod
    def exact(cls, term: str, amount: Decimal) -> "PriceQuote":
        return cls(term=term, display_price=format_price(amount), kind=QuoteKind.exact, amount=amount)

    @classmethod
    def approximate(cls, term: str, amount: Decimal) -> "PriceQuote":
        return cls(term=term, display_price="~" + format_price(amount), kind=QuoteKind.approximate, amount=amount)

    @classmethod
    def no_offers(cls, term: str) -> "PriceQuote":
        return cls(term=term, display_price=NO_OFFERS, kind=QuoteKind.no_offers)

    @classmethod
    def error(cls, term: str) -> "PriceQuote":
        return cls(term=term, display_price=ERROR_QUOTE, kind=QuoteKind.error)

    @property
    def has_amount(self) -> bool:
        return self.amount is not None


class BatchQuote(BaseModel):
    quotes: List[PriceQuote] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    most_expensive: Optional[PriceQuote] = None

    @property
    def total_value(self) -> str:
        return format_price(self.total)

    @classmethod
    def from_quotes(cls, quotes: List[PriceQuote]) -> "BatchQuote":
        total = Decimal("0")
        top: Optional[PriceQuote] = None
        for quote in quotes:
            if not quote.has_amount:
                continue
            total += quote.amount
            if top is None or quote.amount > top.amount:
                top = quote
        return cls(quotes=list(quotes), total=total, most_expensive=top)

"""Derived totals for quotes and coercion of user-entered amounts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal
from typing import Any

from orcamentor.domain.models import Catalog, Quote, QuoteItem, to_decimal
from orcamentor.domain.pricing import resolve_line_price

ZERO = Decimal("0")


def items_sum(items: Iterable[QuoteItem], catalog: Catalog) -> Decimal:
    """Sum of resolved line subtotals."""
    return sum((resolve_line_price(item, catalog).subtotal for item in items), ZERO)


def recompute_total(items: Iterable[QuoteItem], discount: Decimal, catalog: Catalog) -> Decimal:
    """Quote total: item sum minus discount, never below zero."""
    return max(ZERO, items_sum(items, catalog) - discount)


def with_recomputed_total(quote: Quote, catalog: Catalog) -> Quote:
    """Return ``quote`` with its stored total brought in line with items and discount."""
    total = recompute_total(quote.items, quote.discount, catalog)
    if total == quote.total:
        return quote
    return replace(quote, total=total)


def coerce_non_negative(raw: Any) -> Decimal:
    """User-entered amount as a non-negative Decimal; invalid input becomes 0."""
    return max(ZERO, to_decimal(raw))


def coerce_discount(raw: Any) -> Decimal:
    return coerce_non_negative(raw)


def coerce_commitment_value(raw: Any) -> Decimal:
    """A commitment's value is typed in directly, not derived from line items."""
    return coerce_non_negative(raw)

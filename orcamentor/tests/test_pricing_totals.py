"""Tests for line price resolution and derived quote totals."""

from __future__ import annotations

from decimal import Decimal

import pytest

from orcamentor.domain.models import Catalog, Product, Quote, QuoteItem, Service
from orcamentor.domain.pricing import FALLBACK_ITEM_NAME, line_names, resolve_line_price, type_tag
from orcamentor.domain.totals import coerce_discount, items_sum, recompute_total, with_recomputed_total

CATALOG = Catalog.of(
    [
        Service(id="S1", name="Pintura", price=Decimal("100"), category="Manutenção"),
        Service(id="S2", name="Reparo", price=Decimal("50"), category="Manutenção"),
    ],
    [Product(id="P1", name="Tinta", price=Decimal("89.90"), category="Material")],
)


def test_catalog_price_applies_without_override() -> None:
    price = resolve_line_price(QuoteItem(item_id="P1", type="product", quantity=3), CATALOG)

    assert price.unit_price == Decimal("89.90")
    assert price.subtotal == Decimal("269.70")
    assert price.source_found
    assert price.name == "Tinta"
    assert price.category == "Material"


def test_override_wins_over_catalog_price() -> None:
    item = QuoteItem(item_id="S1", type="service", quantity=2, price_override=Decimal("80"))

    price = resolve_line_price(item, CATALOG)

    assert price.unit_price == Decimal("80")
    assert price.subtotal == Decimal("160")


def test_zero_override_is_still_an_override() -> None:
    item = QuoteItem(item_id="S1", type="service", quantity=4, price_override=Decimal("0"))

    assert resolve_line_price(item, CATALOG).subtotal == Decimal("0")


def test_dangling_reference_prices_at_zero_with_fallbacks() -> None:
    item = QuoteItem(item_id="GONE", type="product", quantity=5)

    price = resolve_line_price(item, CATALOG)

    assert price.unit_price == Decimal("0")
    assert price.subtotal == Decimal("0")
    assert not price.source_found
    assert price.name == FALLBACK_ITEM_NAME
    assert price.category == "Geral"


def test_dangling_reference_keeps_its_override() -> None:
    item = QuoteItem(item_id="GONE", type="service", quantity=2, price_override=Decimal("12.5"))

    assert resolve_line_price(item, CATALOG).subtotal == Decimal("25.0")


def test_type_is_part_of_the_lookup() -> None:
    # A product line never resolves against a service with the same id.
    item = QuoteItem(item_id="S1", type="product", quantity=1)

    assert not resolve_line_price(item, CATALOG).source_found


def test_scenario_two_service_lines_with_discount() -> None:
    items = [
        QuoteItem(item_id="S1", type="service", quantity=1),
        QuoteItem(item_id="S2", type="service", quantity=2),
    ]

    assert items_sum(items, CATALOG) == Decimal("200")
    assert recompute_total(items, Decimal("20"), CATALOG) == Decimal("180")


def test_discount_larger_than_items_clamps_total_to_zero() -> None:
    items = [
        QuoteItem(item_id="S1", type="service", quantity=1),
        QuoteItem(item_id="S2", type="service", quantity=2),
    ]

    assert recompute_total(items, Decimal("500"), CATALOG) == Decimal("0")


def test_empty_items_total_is_zero() -> None:
    assert recompute_total([], Decimal("0"), CATALOG) == Decimal("0")


def test_recompute_is_idempotent() -> None:
    quote = Quote(
        id="Q1",
        client_id="C1",
        date="2024-05-01T09:30:00",
        valid_until="2024-05-16T09:30:00",
        items=(QuoteItem(item_id="S1", type="service", quantity=3),),
        discount=Decimal("10"),
        total=Decimal("999"),
    )

    once = with_recomputed_total(quote, CATALOG)
    twice = with_recomputed_total(once, CATALOG)

    assert once.total == Decimal("290")
    assert twice == once
    assert with_recomputed_total(once, CATALOG) is once


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("20", Decimal("20")),
        ("12,50", Decimal("12.50")),
        ("-5", Decimal("0")),
        ("abc", Decimal("0")),
        (None, Decimal("0")),
        (float("nan"), Decimal("0")),
    ],
)
def test_coerce_discount(raw: object, expected: Decimal) -> None:
    assert coerce_discount(raw) == expected


def test_line_names_and_type_tags() -> None:
    items = [
        QuoteItem(item_id="S1", type="service"),
        QuoteItem(item_id="missing", type="product"),
    ]

    assert line_names(items, CATALOG) == ["Pintura", "Item"]
    assert [type_tag(item) for item in items] == ["[SERVIÇO]", "[PRODUTO]"]

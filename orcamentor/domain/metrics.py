"""Dashboard metrics computed from the full quote and receipt history.

Nothing here is cached: metrics are rebuilt from the collections every time
they are requested.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from orcamentor.domain.models import Catalog, Product, Quote, Receipt, Service, decimal_to_json
from orcamentor.domain.pricing import resolve_line_price
from orcamentor.domain.status import QuoteStatus

ZERO = Decimal("0")
DEFAULT_TOP_CATEGORIES = 6
DEFAULT_LOW_STOCK_THRESHOLD = 2
DEFAULT_RECENT_RECEIPTS = 5


@dataclass(frozen=True)
class CategoryStat:
    name: str
    total_value: Decimal
    item_count: int


@dataclass(frozen=True)
class DashboardMetrics:
    realized_revenue: Decimal
    projected_revenue: Decimal
    low_stock_count: int
    category_breakdown: tuple[CategoryStat, ...]
    conversion_rate: Decimal
    quote_count: int
    approved_quote_count: int
    receipt_count: int
    recent_receipts: tuple[Receipt, ...]

    @property
    def max_category_value(self) -> Decimal:
        """Largest category total, at least 1, for scaling bar charts."""
        largest = max((stat.total_value for stat in self.category_breakdown), default=ZERO)
        return max(largest, Decimal("1"))

    @property
    def conversion_percent(self) -> int:
        return int((self.conversion_rate * 100).to_integral_value())

    def to_dict(self) -> dict[str, Any]:
        return {
            "realizedRevenue": decimal_to_json(self.realized_revenue),
            "projectedRevenue": decimal_to_json(self.projected_revenue),
            "lowStockCount": self.low_stock_count,
            "conversionRate": self.conversion_percent,
            "quoteCount": self.quote_count,
            "approvedQuoteCount": self.approved_quote_count,
            "receiptCount": self.receipt_count,
            "categories": [
                {"name": stat.name, "totalValue": decimal_to_json(stat.total_value), "itemCount": stat.item_count}
                for stat in self.category_breakdown
            ],
            "recentReceipts": [receipt.to_dict() for receipt in self.recent_receipts],
        }


def approved_quotes(quotes: Iterable[Quote]) -> list[Quote]:
    return [quote for quote in quotes if quote.status == QuoteStatus.APPROVED]


def category_breakdown(
    quotes: Iterable[Quote],
    catalog: Catalog,
    top_n: int = DEFAULT_TOP_CATEGORIES,
) -> tuple[CategoryStat, ...]:
    """
    Revenue per catalog category over approved quotes, largest first.

    Each line counts once toward ``item_count`` regardless of its quantity.
    Lines whose catalog entry is gone land in the default category. Ties keep
    the order in which categories were first seen.
    """
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for quote in approved_quotes(quotes):
        for item in quote.items:
            price = resolve_line_price(item, catalog)
            category = price.category
            totals[category] = totals.get(category, ZERO) + price.subtotal
            counts[category] = counts.get(category, 0) + 1

    ranked = sorted(totals, key=lambda name: totals[name], reverse=True)
    return tuple(CategoryStat(name=name, total_value=totals[name], item_count=counts[name]) for name in ranked[:top_n])


def build_dashboard_metrics(
    quotes: Sequence[Quote],
    receipts: Sequence[Receipt],
    products: Sequence[Product],
    services: Sequence[Service],
    *,
    top_n: int = DEFAULT_TOP_CATEGORIES,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    recent: int = DEFAULT_RECENT_RECEIPTS,
) -> DashboardMetrics:
    """Aggregate the dashboard figures from full collections."""
    catalog = Catalog.of(services, products)
    approved = approved_quotes(quotes)

    realized = sum((receipt.amount for receipt in receipts), ZERO)
    projected = sum((quote.total for quote in approved), ZERO)
    low_stock = sum(1 for product in products if product.stock <= low_stock_threshold)

    if quotes:
        conversion = Decimal(len(approved)) / Decimal(len(quotes))
    else:
        conversion = ZERO

    return DashboardMetrics(
        realized_revenue=realized,
        projected_revenue=projected,
        low_stock_count=low_stock,
        category_breakdown=category_breakdown(quotes, catalog, top_n=top_n),
        conversion_rate=conversion,
        quote_count=len(quotes),
        approved_quote_count=len(approved),
        receipt_count=len(receipts),
        recent_receipts=tuple(receipts[:recent]),
    )

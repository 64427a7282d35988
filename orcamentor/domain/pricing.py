"""Line item price resolution against catalog snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from orcamentor.domain.models import DEFAULT_CATEGORY, Catalog, CatalogItem, QuoteItem

FALLBACK_ITEM_NAME = "Item"


@dataclass(frozen=True)
class LinePrice:
    """Resolved price for one quote line."""

    unit_price: Decimal
    subtotal: Decimal
    source_found: bool
    source: CatalogItem | None = None

    @property
    def name(self) -> str:
        if self.source is None or not self.source.name:
            return FALLBACK_ITEM_NAME
        return self.source.name

    @property
    def category(self) -> str:
        if self.source is None or not self.source.category:
            return DEFAULT_CATEGORY
        return self.source.category


def resolve_line_price(item: QuoteItem, catalog: Catalog) -> LinePrice:
    """
    Compute the effective unit price and subtotal for a quote line.

    The override wins whenever it is set (zero included); otherwise the
    catalog price applies. A reference to a deleted catalog entry is priced at
    zero instead of raising so old quotes stay printable.
    """
    source = catalog.lookup(item.type, item.item_id)
    if item.price_override is not None:
        unit_price = item.price_override
    elif source is not None:
        unit_price = source.price
    else:
        unit_price = Decimal("0")
    return LinePrice(
        unit_price=unit_price,
        subtotal=unit_price * item.quantity,
        source_found=source is not None,
        source=source,
    )


def type_tag(item: QuoteItem) -> str:
    return "[SERVIÇO]" if item.type == "service" else "[PRODUTO]"


def line_names(items: Iterable[QuoteItem], catalog: Catalog) -> list[str]:
    """Display names of quote lines, in order."""
    return [resolve_line_price(item, catalog).name for item in items]

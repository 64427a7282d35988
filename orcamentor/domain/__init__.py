"""Core domain models and pure business rules.

This package provides:
- Records: Service, Product, Client, Quote, QuoteItem, Receipt, Commitment, CompanyProfile
- Pricing and totals: resolve_line_price(), recompute_total()
- Dashboard aggregation: build_dashboard_metrics()
- Statuses: QuoteStatus, CommitmentStatus, transition()

Usage:
    from orcamentor.domain import Catalog, Quote, recompute_total
"""

from orcamentor.domain.metrics import CategoryStat, DashboardMetrics, build_dashboard_metrics
from orcamentor.domain.models import (
    Appointment,
    Catalog,
    Client,
    Commitment,
    CompanyProfile,
    Product,
    Quote,
    QuoteItem,
    Receipt,
    Service,
)
from orcamentor.domain.pricing import LinePrice, resolve_line_price
from orcamentor.domain.status import CommitmentStatus, InvalidTransition, QuoteStatus, transition
from orcamentor.domain.totals import recompute_total
from orcamentor.domain.validation import ValidationError

__all__ = [
    "Appointment",
    "Catalog",
    "Client",
    "Commitment",
    "CompanyProfile",
    "Product",
    "Quote",
    "QuoteItem",
    "Receipt",
    "Service",
    "LinePrice",
    "resolve_line_price",
    "recompute_total",
    "CategoryStat",
    "DashboardMetrics",
    "build_dashboard_metrics",
    "CommitmentStatus",
    "QuoteStatus",
    "InvalidTransition",
    "transition",
    "ValidationError",
]

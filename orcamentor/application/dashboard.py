"""Dashboard workflow."""

from __future__ import annotations

from orcamentor.domain.metrics import DashboardMetrics
from orcamentor.runtime.store import AppStore


def run_dashboard(store: AppStore) -> DashboardMetrics:
    """Aggregate dashboard figures from the store's current collections."""
    return store.metrics()

"""
Service layer to assemble the review dashboard.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from vocab_core.analytics.metrics import compute_due_forecast, compute_level_distribution
from vocab_core.analytics.types import SRSDashboardData
from vocab_core.srs import queries
from vocab_core.srs.review_state import ensure_utc
from vocab_core.srs.scheduling import SRSService


def build_dashboard(
    service: SRSService,
    now: Optional[datetime] = None,
    days: int = 7
) -> SRSDashboardData:
    """
    Build all KPI values and series needed by the review dashboard.

    Reads the store once so every figure describes the same snapshot.
    """
    now = ensure_utc(now) if now is not None else service.now()
    states = service.store.all_states()

    return SRSDashboardData(
        statistics=queries.compute_statistics(states, now),
        due_forecast=compute_due_forecast(states, now, days),
        level_distribution=compute_level_distribution(states),
    )

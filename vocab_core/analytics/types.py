"""
Types for analytics dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from vocab_core.srs.review_state import ReviewStatistics


@dataclass(frozen=True)
class SRSDashboardData:
    """
    Precomputed metrics and series for the review dashboard.
    """
    statistics: ReviewStatistics
    due_forecast: pd.Series
    level_distribution: pd.Series

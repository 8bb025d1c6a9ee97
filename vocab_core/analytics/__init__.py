"""
Analytics package exports.
"""

from vocab_core.analytics.metrics import (
    compute_due_forecast,
    compute_level_distribution,
    load_states_df,
)
from vocab_core.analytics.service import build_dashboard
from vocab_core.analytics.types import SRSDashboardData

__all__ = [
    "build_dashboard",
    "compute_due_forecast",
    "compute_level_distribution",
    "load_states_df",
    "SRSDashboardData",
]

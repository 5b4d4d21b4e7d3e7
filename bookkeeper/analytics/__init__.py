"""Aggregation package."""

from bookkeeper.analytics.aggregation import (
    compute_totals,
    percentage,
    totals_by_account,
    totals_by_category,
)

__all__ = [
    "compute_totals",
    "percentage",
    "totals_by_account",
    "totals_by_category",
]

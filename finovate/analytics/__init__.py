"""
Aggregation package.

Pure functions over a LedgerSnapshot: item balances, portfolio figures
and the upcoming-event projection.
"""

from finovate.analytics.balances import compute_balance, displayed_amount, parse_term_months
from finovate.analytics.events import (
    next_monthly_anniversary,
    next_rental_date,
    project_event,
    upcoming_events,
)
from finovate.analytics.portfolio import (
    compute_dashboard_stats,
    compute_portfolio,
    total_savings,
)

__all__ = [
    "compute_balance",
    "compute_dashboard_stats",
    "compute_portfolio",
    "displayed_amount",
    "next_monthly_anniversary",
    "next_rental_date",
    "parse_term_months",
    "project_event",
    "total_savings",
    "upcoming_events",
]

"""
Portfolio-level figures.

DESIGN DECISION: Nothing here is cached. Every figure is a pure function
of the snapshot passed in, so the only correctness requirement is that the
same snapshot always gives the same numbers.

    total_savings     = sum of bank account balances
    total_assets      = loan principals + rental/other-income amounts + total_savings
    total_liabilities = debt principals
    net_worth         = total_assets - total_liabilities   (may be negative)
"""

from decimal import Decimal

from finovate.analytics.balances import ZERO, displayed_amount
from finovate.models.analytics import DashboardStats, PortfolioSummary
from finovate.models.ledger import (
    DebtItem,
    LedgerSnapshot,
    LoanItem,
    OtherIncomeItem,
    RentalItem,
)


def total_savings(snapshot: LedgerSnapshot) -> Decimal:
    return sum((account.balance for account in snapshot.bank_accounts), ZERO)


def compute_portfolio(snapshot: LedgerSnapshot) -> PortfolioSummary:
    savings = total_savings(snapshot)

    loans_receivable = sum(
        (item.principal for item in snapshot.items if isinstance(item, LoanItem)),
        ZERO,
    )
    other_assets = sum(
        (
            displayed_amount(item)
            for item in snapshot.items
            if isinstance(item, (RentalItem, OtherIncomeItem))
        ),
        ZERO,
    )
    liabilities = sum(
        (item.principal for item in snapshot.items if isinstance(item, DebtItem)),
        ZERO,
    )

    assets = loans_receivable + other_assets + savings
    return PortfolioSummary(
        total_savings=savings,
        total_assets=assets,
        total_liabilities=liabilities,
        net_worth=assets - liabilities,
    )


def compute_dashboard_stats(snapshot: LedgerSnapshot) -> DashboardStats:
    """Totals lent, owed and collected across the whole ledger."""
    total_lent = ZERO
    total_debt = ZERO
    total_collected = ZERO

    for item in snapshot.items:
        if isinstance(item, LoanItem):
            total_lent += item.principal
        if isinstance(item, DebtItem):
            total_debt += item.principal
        else:
            total_collected += sum((p.amount for p in item.payments), ZERO)

    return DashboardStats(
        total_savings=total_savings(snapshot),
        total_lent=total_lent,
        total_debt=total_debt,
        total_collected=total_collected,
    )

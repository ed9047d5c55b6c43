"""
Derived figures.

These are results, never stored: every one of them is recomputed from a
LedgerSnapshot whenever it is read.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finovate.models.ledger import EventKind, ItemKind


class ItemBalance(BaseModel):
    """
    Balance of one item.

    ``balance`` is None for kinds without a balance concept (rental,
    other income). It may be negative after an overpayment.
    """
    model_config = ConfigDict(frozen=True)

    item_id: str
    kind: ItemKind
    total_paid: Decimal = Decimal("0")
    capital_paid: Decimal = Decimal("0")
    interest_paid: Decimal = Decimal("0")
    balance: Optional[Decimal] = None


class PortfolioSummary(BaseModel):
    """Net worth breakdown. Negative net worth is reported as-is."""
    model_config = ConfigDict(frozen=True)

    total_savings: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


class DashboardStats(BaseModel):
    """Headline numbers shown on the dashboard cards."""
    model_config = ConfigDict(frozen=True)

    total_savings: Decimal
    total_lent: Decimal
    total_debt: Decimal
    total_collected: Decimal = Field(
        ...,
        description="Payments received on every item that is not a debt"
    )


class UpcomingEvent(BaseModel):
    """A projected collection or payment inside the look-ahead window."""
    model_config = ConfigDict(frozen=True)

    item_id: str
    person_name: str
    kind: ItemKind
    event_kind: EventKind
    due_on: date
    amount: Decimal
    days_until_due: int = Field(ge=0)
    is_urgent: bool

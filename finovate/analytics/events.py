"""
Upcoming-event projection.

For every item, find the next collection or payment date and keep it if
it falls inside the look-ahead window (today .. today + horizon days):

- Rental with a payment day: that day this month, or next month if it
  already passed. Days past the end of a short month clamp to its last day.
- Loan with a start date: the first monthly anniversary of the start date
  that is not before today.
- Debt with a due date: the due date itself. No recurrence, so an overdue
  debt never comes back.
- Other income: nothing.

"Today" has day granularity and can be injected, which keeps the
projection deterministic for a given day.
"""

from calendar import monthrange
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from finovate.analytics.balances import ZERO
from finovate.models.analytics import UpcomingEvent
from finovate.models.ledger import (
    DebtItem,
    EventKind,
    ItemBase,
    LoanItem,
    OtherIncomeItem,
    RentalItem,
)


DEFAULT_HORIZON_DAYS = 30
DEFAULT_URGENT_DAYS = 7


def _day_in_month(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, monthrange(year, month)[1]))


def next_rental_date(payment_day: int, today: date) -> date:
    candidate = _day_in_month(today.year, today.month, payment_day)
    if candidate < today:
        following = today.replace(day=1) + relativedelta(months=1)
        candidate = _day_in_month(following.year, following.month, payment_day)
    return candidate


def next_monthly_anniversary(start: date, today: date) -> date:
    """
    First ``start + n months`` (n >= 0) on or after today.

    Each candidate is computed from the start date, so a loan started on
    the 31st falls on the 31st again after a short month instead of
    drifting to the 28th.
    """
    if start >= today:
        return start
    months = max((today.year - start.year) * 12 + (today.month - start.month) - 1, 0)
    candidate = start + relativedelta(months=months)
    while candidate < today:
        months += 1
        candidate = start + relativedelta(months=months)
    return candidate


def _candidate(item: ItemBase, today: date) -> Optional[tuple[date, Decimal, EventKind]]:
    if isinstance(item, RentalItem):
        if not item.payment_day:
            return None
        return next_rental_date(item.payment_day, today), item.monthly_amount, EventKind.COLLECTION

    if isinstance(item, LoanItem):
        if item.start_date is None:
            return None
        amount = item.monthly_amount if item.monthly_amount is not None else ZERO
        return next_monthly_anniversary(item.start_date, today), amount, EventKind.COLLECTION

    if isinstance(item, DebtItem):
        if item.due_date is None:
            return None
        return item.due_date, item.principal, EventKind.PAYMENT

    if isinstance(item, OtherIncomeItem):
        return None

    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def project_event(
    item: ItemBase,
    today: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    urgent_days: int = DEFAULT_URGENT_DAYS,
) -> Optional[UpcomingEvent]:
    """The item's next event inside the window, or None."""
    candidate = _candidate(item, today)
    if candidate is None:
        return None

    due_on, amount, event_kind = candidate
    if due_on < today:
        return None

    days_until_due = (due_on - today).days
    if days_until_due > horizon_days:
        return None

    return UpcomingEvent(
        item_id=item.id,
        person_name=item.person_name,
        kind=item.kind,
        event_kind=event_kind,
        due_on=due_on,
        amount=amount,
        days_until_due=days_until_due,
        is_urgent=days_until_due <= urgent_days,
    )


def upcoming_events(
    items: Iterable[ItemBase],
    today: Optional[date] = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    urgent_days: int = DEFAULT_URGENT_DAYS,
) -> list[UpcomingEvent]:
    """
    Events due within ``horizon_days`` of today, soonest first.

    Urgency is informational; it never changes the order.
    """
    today = today or date.today()
    events = []
    for item in items:
        event = project_event(item, today, horizon_days, urgent_days)
        if event is not None:
            events.append(event)
    return sorted(events, key=lambda event: event.due_on)

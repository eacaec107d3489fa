"""
Display helpers for the UI.

Pure functions only: nothing here touches the store or Streamlit,
so the list layout can be tested without a running app.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from expense_tracker.models.expense import Expense, ExpenseCategory


def format_amount(amount: Decimal, symbol: str = "$") -> str:
    """Render an amount with two decimals, e.g. '$12.50'."""
    return f"{symbol}{amount:.2f}"


def group_by_day(expenses: Iterable[Expense]) -> dict[date, list[Expense]]:
    """
    Group expenses by calendar day, newest day first.

    Within a day the input order is kept, so a store snapshot
    stays newest-first inside each section too.
    """
    groups: dict[date, list[Expense]] = {}
    for expense in expenses:
        groups.setdefault(expense.date.date(), []).append(expense)
    return {day: groups[day] for day in sorted(groups, reverse=True)}


def category_totals(expenses: Iterable[Expense]) -> dict[ExpenseCategory, Decimal]:
    """
    Sum amounts per category, in picker order.

    Categories with no expenses or a zero sum are left out.
    """
    sums = {category: Decimal("0") for category in ExpenseCategory.ordered()}
    for expense in expenses:
        sums[expense.category] += expense.amount
    return {category: total for category, total in sums.items() if total}


def format_section_date(day: date, today: Optional[date] = None) -> str:
    """Section header for a day: 'Today', 'Yesterday' or e.g. 'Jan 5, 2024'."""
    today = today or date.today()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%b} {day.day}, {day.year}"

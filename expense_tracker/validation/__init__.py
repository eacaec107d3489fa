"""Expense form validation package."""

from expense_tracker.validation.validator import (
    ExpenseInputValidator,
    InvalidExpenseInput,
    get_user_friendly_summary,
)

__all__ = [
    "ExpenseInputValidator",
    "InvalidExpenseInput",
    "get_user_friendly_summary",
]

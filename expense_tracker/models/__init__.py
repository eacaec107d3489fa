"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
"""

from expense_tracker.models.expense import (
    CATEGORY_DISPLAY,
    CategoryDisplay,
    Expense,
    ExpenseCategory,
)
from expense_tracker.models.validation import (
    ExpenseFormInput,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CATEGORY_DISPLAY",
    "CategoryDisplay",
    "Expense",
    "ExpenseCategory",
    # Validation models
    "ExpenseFormInput",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

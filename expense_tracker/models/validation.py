"""
Validation models for expense form input.

These describe what the input boundary found wrong with a form;
the store never sees them.
"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from expense_tracker.models.expense import ExpenseCategory


DateInput = Union[datetime, date]


class ExpenseFormInput(BaseModel):
    """
    Raw values from the add/edit expense form.

    The amount is kept as the text the user typed so the validator
    can tell "not a number" apart from "not positive".
    """
    amount: str = Field(
        default="",
        description="Amount exactly as typed"
    )
    description: str = Field(
        default="",
        description="Description as typed"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.FOOD,
        description="Selected category"
    )
    date: DateInput = Field(
        default_factory=datetime.now,
        description="Selected date"
    )
    notes: str = Field(
        default="",
        description="Notes as typed (blank means none)"
    )


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating one expense form."""

    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

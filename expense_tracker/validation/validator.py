"""
Expense Form Validation

DESIGN DECISION: The store accepts whatever it is given, so every
rule about what a valid expense looks like lives here, at the input
boundary:
- The amount must parse as a number and be greater than zero
- The description must not be blank once trimmed
- The date must not be in the future (unless configured otherwise)
- Description and notes must fit the configured lengths

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show them to the user. Building an
expense trims whitespace and turns blank notes into None. A bare
picked day also gets a time of day (see _timestamp_for).
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.expense import Expense
from expense_tracker.models.validation import (
    ExpenseFormInput,
    ValidationIssue,
    ValidationResult,
)


class InvalidExpenseInput(ValueError):
    """Raised when an expense is built from a form that failed validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.issues)
        super().__init__(f"Invalid expense input: {messages}")


def _parse_amount(text: str) -> Optional[Decimal]:
    """Parse typed amount text; None when it is not a finite number."""
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def _timestamp_for(picked, existing: Optional[Expense], now: datetime) -> datetime:
    """
    Turn the picked form date into the stored timestamp.

    A full datetime is used as given. A bare day takes its time of day
    from the record being edited, or from `now` for a new record, so
    expenses entered on the same day keep their entry order.
    """
    if isinstance(picked, datetime):
        return picked
    if existing is not None:
        return datetime.combine(picked, existing.date.time())
    return datetime.combine(picked, now.time())


class ExpenseInputValidator:
    """
    Validates add/edit form input and builds Expense records from it.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        """
        Initialize validator.

        Args:
            settings: Limits to enforce. Defaults to get_settings().app.
        """
        self._settings = settings or get_settings().app

    def validate(
        self,
        form: ExpenseFormInput,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Check a form and report every issue found.

        Args:
            form: Raw form values
            today: Reference day for the future-date check.
                   Defaults to date.today().
        """
        issues = []
        today = today or date.today()

        # Amount
        if not form.amount.strip():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much you spent",
            ))
        else:
            amount = _parse_amount(form.amount)
            if amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="not_numeric",
                    message=f"Amount '{form.amount.strip()}' is not a number",
                    severity="error",
                    suggested_fix="Use digits and a decimal point, e.g. 12.50",
                ))
            elif amount <= 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="not_positive",
                    message="Amount must be greater than zero",
                    severity="error",
                ))

        # Description
        description = form.description.strip()
        if not description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
                suggested_fix="Describe what the money was spent on",
            ))
        elif len(description) > self._settings.max_description_length:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=(
                    f"Description is longer than "
                    f"{self._settings.max_description_length} characters"
                ),
                severity="error",
            ))

        # Notes
        if len(form.notes.strip()) > self._settings.max_notes_length:
            issues.append(ValidationIssue(
                field="notes",
                issue_type="too_long",
                message=f"Notes are longer than {self._settings.max_notes_length} characters",
                severity="error",
            ))

        # Date
        if not self._settings.allow_future_dates and _as_date(form.date) > today:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({_as_date(form.date)}) is in the future",
                severity="error",
                suggested_fix="Pick today or an earlier day",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return ValidationResult(is_valid=is_valid, issues=issues)

    def build_expense(
        self,
        form: ExpenseFormInput,
        existing: Optional[Expense] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Expense:
        """
        Build the Expense a valid form describes.

        Args:
            form: Raw form values
            existing: The expense being edited. Its id is kept so the
                      store replaces it rather than adding a new one.
            today: Reference day for the future-date check
            now: Clock reading whose time of day a new record takes

        Raises:
            InvalidExpenseInput: If the form does not validate
        """
        result = self.validate(form, today=today)
        if not result.is_valid:
            raise InvalidExpenseInput(result)

        notes = form.notes.strip()
        fields = {
            "amount": _parse_amount(form.amount),
            "category": form.category,
            "date": _timestamp_for(form.date, existing, now or datetime.now()),
            "description": form.description.strip(),
            "notes": notes or None,
        }

        if existing is not None:
            return Expense(id=existing.id, **fields)
        return Expense(**fields)

    @staticmethod
    def form_for(expense: Expense) -> ExpenseFormInput:
        """Pre-fill an edit form from an existing expense."""
        return ExpenseFormInput(
            amount=f"{expense.amount:.2f}",
            description=expense.description,
            category=expense.category,
            date=expense.date,
            notes=expense.notes or "",
        )


def get_user_friendly_summary(result: ValidationResult) -> str:
    """
    Generate a user-friendly summary of validation results.

    This is what the form shows next to a disabled Save button.
    """
    if result.is_valid and not result.issues:
        return "All fields look good."

    lines = []

    if result.has_errors:
        lines.append("Please fix the following:")
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     {issue.suggested_fix}")

    if result.warnings:
        if lines:
            lines.append("")
        lines.append("Please verify the following:")
        for warning in result.warnings:
            lines.append(f"   • {warning}")

    return "\n".join(lines)

"""
Core Data Models for Expense Tracker

These models define the schemas for the data the store holds and persists.
They are designed to:
1. Be immutable - an edit produces a new record with the same id
2. Serialize cleanly to JSON for the persisted blob
3. Carry no input validation (that lives in expense_tracker.validation)

DESIGN DECISION: The entity deliberately accepts any amount and any
description. Positivity and non-empty descriptions are enforced by the
form validator before a record is ever built, so the store can trust
what it is given and still load older data unchanged.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# CATEGORIES - Closed set of tags with display metadata
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: The set is closed. Adding a category is a code
    change here and in CATEGORY_DISPLAY below; there is no registration.
    Definition order is the order shown in pickers.
    """
    FOOD = "food"
    TRANSPORTATION = "transportation"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    BILLS = "bills"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    OTHER = "other"

    @classmethod
    def ordered(cls) -> list["ExpenseCategory"]:
        """All categories in their fixed display order."""
        return list(cls)

    @property
    def label(self) -> str:
        return CATEGORY_DISPLAY[self].label

    @property
    def icon(self) -> str:
        return CATEGORY_DISPLAY[self].icon


class CategoryDisplay(BaseModel):
    """Human-readable label and icon identifier for one category."""
    model_config = ConfigDict(frozen=True)

    label: str
    icon: str


CATEGORY_DISPLAY: dict[ExpenseCategory, CategoryDisplay] = {
    ExpenseCategory.FOOD: CategoryDisplay(label="Food", icon="fork.knife"),
    ExpenseCategory.TRANSPORTATION: CategoryDisplay(label="Transportation", icon="car.fill"),
    ExpenseCategory.SHOPPING: CategoryDisplay(label="Shopping", icon="cart.fill"),
    ExpenseCategory.ENTERTAINMENT: CategoryDisplay(label="Entertainment", icon="tv.fill"),
    ExpenseCategory.BILLS: CategoryDisplay(label="Bills", icon="doc.text.fill"),
    ExpenseCategory.HEALTHCARE: CategoryDisplay(label="Healthcare", icon="cross.case.fill"),
    ExpenseCategory.EDUCATION: CategoryDisplay(label="Education", icon="book.fill"),
    ExpenseCategory.OTHER: CategoryDisplay(label="Other", icon="ellipsis.circle.fill"),
}


# =============================================================================
# EXPENSE RECORD
# =============================================================================

def as_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=None)
    return value.astimezone().replace(tzinfo=None)


class Expense(BaseModel):
    """
    One spending event.

    Records are frozen: to edit one, build a replacement with
    `expense.model_copy(update={...})` and hand it to the store.
    The id survives the copy, which is what the store matches on.
    """
    model_config = ConfigDict(frozen=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID, fixed for the record's lifetime"
    )

    amount: Decimal = Field(
        ...,
        description="Amount spent, in the single implicit currency"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )
    date: datetime = Field(
        ...,
        description="When the money was spent (time of day is optional)"
    )
    description: str = Field(
        ...,
        description="Short human-readable label"
    )
    notes: Optional[str] = Field(
        default=None,
        description="Optional free-text notes"
    )

    @field_validator('date', mode='before')
    @classmethod
    def date_to_datetime(cls, v):
        """Accept a bare calendar date as midnight of that day."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        return v

    @field_validator('date')
    @classmethod
    def date_to_local_time(cls, v: datetime) -> datetime:
        """Store every timestamp as naive local time so dates always compare."""
        return as_local_naive(v)

    @property
    def formatted_amount(self) -> str:
        """Amount rendered with the default currency symbol, e.g. '$12.50'."""
        return f"${self.amount:.2f}"

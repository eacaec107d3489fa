"""Presentation helpers package."""

from expense_tracker.presentation.formatting import (
    category_totals,
    format_amount,
    format_section_date,
    group_by_day,
)

__all__ = ["category_totals", "format_amount", "format_section_date", "group_by_day"]

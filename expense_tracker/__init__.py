"""
Expense Tracker - Source Package

A small personal finance tracker for local record-keeping of expenses:
add, edit, delete, categorize and summarize spending.

DESIGN PRINCIPLES:
1. The store is the single source of truth for the collection
2. Every mutation persists the whole collection immediately
3. Persistence failures never reach the caller, but are always audited
4. Input is validated at the form boundary, never inside the store
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"

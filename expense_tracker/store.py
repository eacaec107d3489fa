"""
Expense Store

This module holds the single source of truth for the expense collection.

DESIGN DECISION: The store enforces the collection's contract:
- The collection is always sorted by date, newest first (stable for ties)
- Every mutation rewrites the whole collection to persistence
- Persistence failures are audited, never raised to the caller
- Observers hear "the collection changed", never which field did

Validation is NOT the store's job. Callers hand it well-formed
expenses (see expense_tracker.validation).
"""

import threading
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import Expense, ExpenseCategory, as_local_naive
from expense_tracker.services.storage import (
    ExpensePersistenceInterface,
    JsonFileSettingsStore,
    KeyValueExpensePersistence,
    StorageError,
)


StoreObserver = Callable[["ExpenseStore"], None]


def _sorted_by_date(expenses: Iterable[Expense]) -> list[Expense]:
    # sorted() is stable with reverse=True, so equal dates keep their order.
    # Records built with model_copy skip validation and may still carry a tzinfo.
    return sorted(expenses, key=lambda expense: as_local_naive(expense.date), reverse=True)


def _same_month(moment: date, when: date) -> bool:
    return moment.year == when.year and moment.month == when.month


class ExpenseStore:
    """
    Owns the ordered expense collection.

    The collection is loaded once at construction and lives for the
    process lifetime. Reads return immutable snapshots; only the
    methods below change it.

    Mutations and their persistence writes are serialised with a
    reentrant lock so the store can be shared by UI threads.
    """

    def __init__(
        self,
        persistence: ExpensePersistenceInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._persistence = persistence
        self._audit_logger = audit_logger or AuditLogger()  # Local-only logging
        self._expenses: list[Expense] = []
        self._observers: list[StoreObserver] = []
        self._lock = threading.RLock()
        self._load()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Snapshot of the collection, newest first."""
        with self._lock:
            return tuple(self._expenses)

    def __len__(self) -> int:
        with self._lock:
            return len(self._expenses)

    # -------------------------------------------------------------------------
    # Aggregate queries
    # -------------------------------------------------------------------------

    @property
    def total_expenses(self) -> Decimal:
        """Sum of all amounts; 0 for an empty collection."""
        with self._lock:
            return sum((expense.amount for expense in self._expenses), Decimal("0"))

    def total_for_category(self, category: ExpenseCategory) -> Decimal:
        """Sum of amounts in `category`; 0 when nothing matches."""
        with self._lock:
            return sum(
                (expense.amount for expense in self._expenses if expense.category == category),
                Decimal("0"),
            )

    def expenses_for_month(self, when: date) -> list[Expense]:
        """
        Expenses in the same calendar year and month as `when`.

        `when` may be a date or a datetime; day and time of day are
        ignored. Results keep collection order (newest first).
        """
        with self._lock:
            return [
                expense for expense in self._expenses
                if _same_month(as_local_naive(expense.date), when)
            ]

    # -------------------------------------------------------------------------
    # CRUD operations
    # -------------------------------------------------------------------------

    def add_expense(self, expense: Expense) -> None:
        """Insert `expense`, re-sort and persist."""
        with self._lock:
            self._expenses = _sorted_by_date([*self._expenses, expense])
            self._save()
            count = len(self._expenses)

        self._audit_logger.log_expense_added(
            expense_id=expense.id,
            amount=str(expense.amount),
            count=count,
        )
        self._notify()

    def update_expense(self, expense: Expense) -> None:
        """
        Replace the expense with the same id, re-sort and persist.

        An id that matches nothing leaves the collection untouched:
        nothing is saved and observers are not notified. The miss is
        recorded in the audit log as a warning.
        """
        with self._lock:
            index = next(
                (i for i, existing in enumerate(self._expenses) if existing.id == expense.id),
                None,
            )
            if index is not None:
                replaced = list(self._expenses)
                replaced[index] = expense
                self._expenses = _sorted_by_date(replaced)
                self._save()

        if index is None:
            self._audit_logger.log_expense_update_skipped(expense_id=expense.id)
            return

        self._audit_logger.log_expense_updated(
            expense_id=expense.id,
            amount=str(expense.amount),
        )
        self._notify()

    def delete_expense(self, expense: Expense) -> None:
        """Remove every expense sharing `expense.id` and persist."""
        with self._lock:
            remaining = [existing for existing in self._expenses if existing.id != expense.id]
            removed = len(self._expenses) - len(remaining)
            self._expenses = remaining
            self._save()

        self._audit_logger.log_expense_deleted(expense_id=expense.id, removed=removed)
        self._notify()

    def delete_expenses(self, positions: Iterable[int]) -> None:
        """
        Remove the expenses at `positions` of the current order and persist.

        Positions are a set: duplicates collapse. Any position outside
        the collection raises IndexError before anything is removed.
        """
        with self._lock:
            targets = set(positions)
            size = len(self._expenses)
            out_of_range = sorted(p for p in targets if not 0 <= p < size)
            if out_of_range:
                raise IndexError(
                    f"Positions {out_of_range} out of range for {size} expenses"
                )

            self._expenses = [
                expense for i, expense in enumerate(self._expenses) if i not in targets
            ]
            self._save()

        self._audit_logger.log_expenses_deleted(positions=sorted(targets))
        self._notify()

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, observer: StoreObserver) -> None:
        """Call `observer(store)` after every mutation."""
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: StoreObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _notify(self) -> None:
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                observer(self)
            except Exception as e:
                # One broken observer must not starve the rest
                self._audit_logger.log_observer_failed(
                    observer=getattr(observer, "__name__", repr(observer)),
                    error_message=str(e),
                )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _save(self) -> None:
        """Write the whole collection. Failures are audited, not raised."""
        try:
            self._persistence.save(self._expenses)
        except StorageError as e:
            self._audit_logger.log_save_failed(
                error_message=str(e),
                count=len(self._expenses),
            )

    def _load(self) -> None:
        """Load persisted expenses. Missing data is empty; bad data is dropped."""
        try:
            loaded = self._persistence.load()
        except StorageError as e:
            self._audit_logger.log_load_failed(error_message=str(e))
            self._expenses = []
            return

        self._expenses = _sorted_by_date(loaded)
        self._audit_logger.log_expenses_loaded(count=len(self._expenses))


def create_store(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> ExpenseStore:
    """
    Factory function to create the application's store.

    Args:
        settings: Settings to read storage location from.
                  Defaults to get_settings().
        audit_logger: Audit logger to inject. Defaults to local-only.

    Returns:
        An ExpenseStore loaded from the configured settings file
    """
    storage_settings = (settings or get_settings()).storage

    persistence = KeyValueExpensePersistence(
        JsonFileSettingsStore(storage_settings.settings_path),
        key=storage_settings.storage_key,
    )
    return ExpenseStore(persistence, audit_logger=audit_logger)

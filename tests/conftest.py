"""Shared fixtures: in-memory storage, audit sink and expense factories."""

from datetime import datetime
from decimal import Decimal

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.services.storage import (
    ExpensePersistenceInterface,
    InMemoryAuditSink,
    InMemorySettingsStore,
    KeyValueExpensePersistence,
    StorageError,
)
from expense_tracker.store import ExpenseStore


def make_expense(
    amount="10.00",
    category=ExpenseCategory.OTHER,
    when=datetime(2024, 1, 1),
    description="Test expense",
    notes=None,
    **kwargs,
) -> Expense:
    return Expense(
        amount=Decimal(amount),
        category=category,
        date=when,
        description=description,
        notes=notes,
        **kwargs,
    )


class RecordingPersistence(ExpensePersistenceInterface):
    """Persistence fake that counts saves and can be told to fail."""

    def __init__(self, initial=None, fail_load=None, fail_save=False):
        self.saved = list(initial or [])
        self.save_calls = 0
        self.fail_load = fail_load
        self.fail_save = fail_save

    def load(self):
        if self.fail_load:
            raise self.fail_load
        return list(self.saved)

    def save(self, expenses):
        self.save_calls += 1
        if self.fail_save:
            raise StorageError("disk full")
        self.saved = list(expenses)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sink():
    return InMemoryAuditSink()


@pytest.fixture
def audit_logger(sink):
    return AuditLogger(sink)


@pytest.fixture
def settings_store():
    return InMemorySettingsStore()


@pytest.fixture
def persistence(settings_store):
    return KeyValueExpensePersistence(settings_store)


@pytest.fixture
def store(persistence, audit_logger):
    return ExpenseStore(persistence, audit_logger=audit_logger)

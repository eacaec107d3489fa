"""Services package."""

from expense_tracker.services.storage import (
    AuditSinkInterface,
    CorruptDataError,
    ExpensePersistenceInterface,
    InMemoryAuditSink,
    InMemorySettingsStore,
    JsonFileSettingsStore,
    KeyValueExpensePersistence,
    SettingsStoreInterface,
    StorageError,
)

__all__ = [
    "AuditSinkInterface",
    "CorruptDataError",
    "ExpensePersistenceInterface",
    "InMemoryAuditSink",
    "InMemorySettingsStore",
    "JsonFileSettingsStore",
    "KeyValueExpensePersistence",
    "SettingsStoreInterface",
    "StorageError",
]

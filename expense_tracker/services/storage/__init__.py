"""
Storage Services Package

Provides abstract interfaces and concrete implementations for persistence.
The expense collection is stored as one blob in a key-value settings area;
a JSON file backs the area on disk, a dict backs it in tests.
"""

from expense_tracker.services.storage.interface import (
    AuditSinkInterface,
    CorruptDataError,
    ExpensePersistenceInterface,
    SettingsStoreInterface,
    StorageError,
)
from expense_tracker.services.storage.codec import (
    decode_expenses,
    encode_expenses,
)
from expense_tracker.services.storage.key_value import (
    DEFAULT_STORAGE_KEY,
    JsonFileSettingsStore,
    KeyValueExpensePersistence,
)
from expense_tracker.services.storage.memory import (
    InMemoryAuditSink,
    InMemorySettingsStore,
)

__all__ = [
    # Interfaces
    "AuditSinkInterface",
    "ExpensePersistenceInterface",
    "SettingsStoreInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Codec
    "decode_expenses",
    "encode_expenses",
    # Key-value implementation
    "DEFAULT_STORAGE_KEY",
    "JsonFileSettingsStore",
    "KeyValueExpensePersistence",
    # In-memory implementations
    "InMemoryAuditSink",
    "InMemorySettingsStore",
]

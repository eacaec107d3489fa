"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for storage operations.
This allows us to:
1. Swap the JSON settings file for another key-value area later
2. Use in-memory storage for testing
3. Inject failing implementations to exercise the store's error paths
4. Keep the store decoupled from where bytes actually land

Persistence is an entire-blob rewrite: the whole collection is encoded
and written under one key on every change. There is no append log and
no partial update.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import Expense


class ExpensePersistenceInterface(ABC):
    """
    Port through which the store loads and saves its collection.
    """

    @abstractmethod
    def load(self) -> list[Expense]:
        """
        Load the persisted collection.

        Returns:
            The stored expenses in stored order, or an empty list
            if nothing has been saved yet

        Raises:
            CorruptDataError: If a stored value exists but cannot be decoded
            StorageError: If the storage area cannot be read
        """
        pass

    @abstractmethod
    def save(self, expenses: Iterable[Expense]) -> None:
        """
        Replace the persisted collection with `expenses`.

        Raises:
            StorageError: If encoding or writing fails
        """
        pass


class SettingsStoreInterface(ABC):
    """
    A process-wide key-value settings area holding string values.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under `key`, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any prior value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove `key`. Removing a missing key is not an error."""
        pass


class AuditSinkInterface(ABC):
    """
    Abstract interface for audit event storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if recorded successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but could not be decoded."""
    pass

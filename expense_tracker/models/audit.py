"""
Audit Models for Expense Tracker

Every mutation of the store, and every persistence failure the store
absorbs, is recorded as an audit event. This provides:
1. Traceability of all changes to the collection
2. A testable diagnostic path for failures the caller never sees
3. A recent-activity feed for the UI

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Startup
    EXPENSES_LOADED = "expenses_loaded"
    LOAD_FAILED = "load_failed"

    # Mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_UPDATE_SKIPPED = "expense_update_skipped"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_DELETED = "expenses_deleted"

    # Persistence
    SAVE_FAILED = "save_failed"

    # Notification
    OBSERVER_FAILED = "observer_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which expense is this about?
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the expense this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, count)
        event = AuditEventBuilder.save_failed(error_message, count)
    """

    @staticmethod
    def expenses_loaded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            description=f"Loaded {count} expenses",
            details={"count": count},
        )

    @staticmethod
    def load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            description="Failed to load expenses, starting with an empty collection",
            error_message=error_message,
        )

    @staticmethod
    def expense_added(expense_id: UUID, amount: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_id=expense_id,
            description=f"Expense added: {amount}",
            details={"amount": amount, "count": count},
        )

    @staticmethod
    def expense_updated(expense_id: UUID, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_id=expense_id,
            description=f"Expense updated: {amount}",
            details={"amount": amount},
        )

    @staticmethod
    def expense_update_skipped(expense_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATE_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_id=expense_id,
            description="Update ignored: no expense with this id",
        )

    @staticmethod
    def expense_deleted(expense_id: UUID, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_id=expense_id,
            description=f"Expense deleted ({removed} removed)",
            details={"removed": removed},
        )

    @staticmethod
    def expenses_deleted(positions: list[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_DELETED,
            description=f"{len(positions)} expenses deleted by position",
            details={"positions": positions},
        )

    @staticmethod
    def save_failed(error_message: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Failed to save expenses; stored copy is stale",
            error_message=error_message,
            details={"count": count},
        )

    @staticmethod
    def observer_failed(observer: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBSERVER_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Change observer failed: {observer}",
            error_message=error_message,
            details={"observer": observer},
        )

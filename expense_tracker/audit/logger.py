"""
Audit Logger

DESIGN DECISION: Every change to the collection is logged, and so is
every persistence failure the store absorbs. The caller of a store
mutation never sees an error, so this log is the only place such
failures surface.

The audit logger:
- Is synchronous, like the store it serves
- Gracefully handles sink failures (never crashes the store)
- Keeps an injectable sink so tests can assert on recorded events
"""

from typing import Optional
from uuid import UUID

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_tracker.services.storage import AuditSinkInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit sink, when one is configured
    """

    def __init__(
        self,
        sink: Optional[AuditSinkInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Where events are recorded besides the local log.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("expense_tracker.audit")

    @property
    def sink(self) -> Optional[AuditSinkInterface]:
        return self._sink

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Records to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                return self._sink.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_expenses_loaded(self, count: int) -> None:
        """Log a successful startup load."""
        self.log(AuditEventBuilder.expenses_loaded(count=count))

    def log_load_failed(self, error_message: str) -> None:
        """Log a load failure (the store falls back to empty)."""
        self.log(AuditEventBuilder.load_failed(error_message=error_message))

    def log_expense_added(self, expense_id: UUID, amount: str, count: int) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            count=count,
        ))

    def log_expense_updated(self, expense_id: UUID, amount: str) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            amount=amount,
        ))

    def log_expense_update_skipped(self, expense_id: UUID) -> None:
        """Log an update whose id matched nothing."""
        self.log(AuditEventBuilder.expense_update_skipped(expense_id=expense_id))

    def log_expense_deleted(self, expense_id: UUID, removed: int) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            removed=removed,
        ))

    def log_expenses_deleted(self, positions: list[int]) -> None:
        self.log(AuditEventBuilder.expenses_deleted(positions=positions))

    def log_save_failed(self, error_message: str, count: int) -> None:
        """Log a persistence write failure."""
        self.log(AuditEventBuilder.save_failed(
            error_message=error_message,
            count=count,
        ))

    def log_observer_failed(self, observer: str, error_message: str) -> None:
        self.log(AuditEventBuilder.observer_failed(
            observer=observer,
            error_message=error_message,
        ))

"""
Audit Models for Balance Track

Every accepted or rejected change to a snapshot produces an audit event.
This provides:
1. Traceability of how a ledger came to look the way it does
2. Debugging information when a rule is rejected

DESIGN DECISION: Audit events are written to the structured log only.
Keeping a history of snapshots (undo) is out of scope.
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
    # Salary rules
    SALARY_SAVED = "salary_saved"
    SALARY_UPDATED = "salary_updated"
    SALARY_DELETED = "salary_deleted"

    # One-off expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Recurring rules
    RECURRING_ADDED = "recurring_added"
    RECURRING_UPDATED = "recurring_updated"
    RECURRING_DELETED = "recurring_deleted"

    # Installment plans
    INSTALLMENT_ADDED = "installment_added"
    INSTALLMENT_UPDATED = "installment_updated"
    INSTALLMENT_DELETED = "installment_deleted"

    # Settings and snapshots
    SETTINGS_UPDATED = "settings_updated"
    SNAPSHOT_LOADED = "snapshot_loaded"

    # Rejections
    INPUT_REJECTED = "input_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    # Which record this is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'salary', 'installment')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


_SAVED = {
    "salary": AuditEventType.SALARY_SAVED,
    "expense": AuditEventType.EXPENSE_ADDED,
    "recurring": AuditEventType.RECURRING_ADDED,
    "installment": AuditEventType.INSTALLMENT_ADDED,
}

_UPDATED = {
    "salary": AuditEventType.SALARY_UPDATED,
    "expense": AuditEventType.EXPENSE_UPDATED,
    "recurring": AuditEventType.RECURRING_UPDATED,
    "installment": AuditEventType.INSTALLMENT_UPDATED,
}

_DELETED = {
    "salary": AuditEventType.SALARY_DELETED,
    "expense": AuditEventType.EXPENSE_DELETED,
    "recurring": AuditEventType.RECURRING_DELETED,
    "installment": AuditEventType.INSTALLMENT_DELETED,
}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_saved("salary", rule.id, {...})
        event = AuditEventBuilder.input_rejected("installment", "months", "...")
    """

    @staticmethod
    def record_saved(
        entity_type: str,
        record_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=_SAVED[entity_type],
            entity_type=entity_type,
            entity_id=record_id,
            description=f"{entity_type.capitalize()} record saved",
            details=details or {},
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        record_id: str,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=_UPDATED[entity_type],
            entity_type=entity_type,
            entity_id=record_id,
            description=f"{entity_type.capitalize()} record updated",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def record_deleted(entity_type: str, record_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=_DELETED[entity_type],
            entity_type=entity_type,
            entity_id=record_id,
            description=f"{entity_type.capitalize()} record deleted",
        )

    @staticmethod
    def settings_updated(changes: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description="Billing settings updated",
            details={key: str(value) for key, value in changes.items()},
        )

    @staticmethod
    def snapshot_loaded(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            entity_type="snapshot",
            description="Snapshot loaded from document",
            details=counts,
        )

    @staticmethod
    def input_rejected(
        entity_type: str,
        field: Optional[str],
        error_message: str,
        record_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=record_id,
            description=f"{entity_type.capitalize()} input rejected",
            details={"field": field},
            error_message=error_message,
        )

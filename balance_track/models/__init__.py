"""
Data Models Package

This package contains all Pydantic models used by Balance Track.
Every record entering a snapshot must conform to these schemas.
"""

from balance_track.models.records import (
    DEFAULT_CATEGORY,
    DEFAULT_CURRENCY,
    CutoffMethod,
    EntrySource,
    InstallmentPlan,
    LedgerEntry,
    LedgerSettings,
    ManualExpense,
    RecurringExpenseRule,
    SalaryRule,
    new_record_id,
)
from balance_track.models.snapshot import Snapshot
from balance_track.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "DEFAULT_CATEGORY",
    "DEFAULT_CURRENCY",
    "CutoffMethod",
    "EntrySource",
    "InstallmentPlan",
    "LedgerEntry",
    "LedgerSettings",
    "ManualExpense",
    "RecurringExpenseRule",
    "SalaryRule",
    "Snapshot",
    "new_record_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

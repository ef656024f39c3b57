"""
Snapshot Model

A snapshot is the whole data document at one point in time. The engine
reads snapshots and the editor returns new ones; nothing mutates a
snapshot in place.

The persistence layer owns the JSON file. This module only converts
between that document shape and validated models.
"""

from typing import Any, Optional

from pydantic import Field

from balance_track.config import get_settings
from balance_track.models.records import (
    InstallmentPlan,
    LedgerModel,
    LedgerSettings,
    ManualExpense,
    RecurringExpenseRule,
    SalaryRule,
)

# Document key -> collection field name
COLLECTIONS = {
    "salaries": "salaries",
    "expenses": "expenses",
    "recurringExpenses": "recurring_expenses",
    "installmentPlans": "installment_plans",
}


class Snapshot(LedgerModel):
    """Immutable view of every record plus the billing settings."""

    salaries: tuple[SalaryRule, ...] = Field(default_factory=tuple)
    expenses: tuple[ManualExpense, ...] = Field(default_factory=tuple)
    recurring_expenses: tuple[RecurringExpenseRule, ...] = Field(default_factory=tuple)
    installment_plans: tuple[InstallmentPlan, ...] = Field(default_factory=tuple)
    settings: LedgerSettings = Field(default_factory=LedgerSettings)

    @classmethod
    def empty(cls, currency: Optional[str] = None) -> 'Snapshot':
        """A snapshot with no records and default settings."""
        currency = currency or get_settings().ledger.default_currency
        return cls(settings=LedgerSettings(currency=currency))

    @classmethod
    def from_document(cls, document: Any) -> 'Snapshot':
        """
        Build a snapshot from a raw JSON document.

        Shape problems are forgiven: anything that is not a dict becomes an
        empty snapshot, missing or non-list collections become empty, and
        missing settings get the default currency with no cutoff override.

        Records themselves are NOT forgiven. A malformed month key or an
        impossible rule raises pydantic's ValidationError.
        """
        if not isinstance(document, dict):
            return cls.empty()

        payload: dict[str, Any] = {}
        for doc_key in COLLECTIONS:
            value = document.get(doc_key)
            payload[doc_key] = value if isinstance(value, list) else []

        raw_settings = document.get("settings")
        settings = dict(raw_settings) if isinstance(raw_settings, dict) else {}
        if not settings.get("currency"):
            settings["currency"] = get_settings().ledger.default_currency
        payload["settings"] = settings

        return cls.model_validate(payload)

    def to_document(self) -> dict[str, Any]:
        """Render the camelCase, JSON-ready document."""
        return self.model_dump(mode="json", by_alias=True)

    def replace(self, **changes: Any) -> 'Snapshot':
        """Copy-on-write update; collections are stored as tuples."""
        update = {
            name: tuple(value) if name in COLLECTIONS.values() else value
            for name, value in changes.items()
        }
        return self.model_copy(update=update)

"""
Snapshot Editor

DESIGN DECISION: Snapshots are never patched in place. Every add, edit and
delete builds the new record, checks it, and returns a NEW snapshot with
the affected collection replaced. The host persists the returned snapshot
as a whole.

Validation happens HERE, at the point a rule is constructed or edited.
Rejected input raises InvalidRule and never reaches a snapshot, which is
what lets the projection engine skip re-checking invariants.

Installment plans get their start month from the billing-cycle translator
when they are created or edited. Changing the billing settings afterwards
does not move existing plans.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import ValidationError

from balance_track.audit.logger import AuditLogger, get_logger
from balance_track.engine.billing import effective_month
from balance_track.exceptions import InvalidRule, MalformedKey, RecordNotFound
from balance_track.models.audit import AuditEventBuilder
from balance_track.models.records import (
    EntrySource,
    InstallmentPlan,
    LedgerEntry,
    LedgerModel,
    LedgerSettings,
    ManualExpense,
    RecurringExpenseRule,
    SalaryRule,
)
from balance_track.models.snapshot import COLLECTIONS, Snapshot
from balance_track.months import parse_month_key

logger = get_logger(__name__)

# entity type -> (snapshot field, model, editable fields)
_ENTITIES: dict[str, tuple[str, type[LedgerModel], frozenset[str]]] = {
    "salary": (
        "salaries",
        SalaryRule,
        frozenset({"start_month", "amount"}),
    ),
    "expense": (
        "expenses",
        ManualExpense,
        frozenset({"date", "amount", "category", "label"}),
    ),
    "recurring": (
        "recurring_expenses",
        RecurringExpenseRule,
        frozenset({"start_month", "end_month", "amount", "category", "label"}),
    ),
    "installment": (
        "installment_plans",
        InstallmentPlan,
        frozenset({"purchase_date", "total_amount", "months", "category", "label"}),
    ),
}

_SOURCE_TO_ENTITY = {
    EntrySource.MANUAL: "expense",
    EntrySource.RECURRING: "recurring",
    EntrySource.INSTALLMENT: "installment",
}

_SETTINGS_FIELDS = frozenset({"currency", "cutoff_method", "cutoff_value", "settlement_delay"})

_AMOUNT_FIELDS = frozenset({"amount", "total_amount"})


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Finite Decimal for `value`, or None when it is not a readable number."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))

    cleaned = str(value or "").strip().replace(",", ".", 1)
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_amount(value: Any) -> Decimal:
    """
    Parse a user-entered amount.

    Accepts Decimals, numbers, and text using either "," or "." as the
    decimal separator ("12,50" == "12.50"). Thousands grouping is not
    supported: "1,234.50" is not a number. Text that is not a finite
    number yields 0, which every amount check then rejects.
    """
    number = _to_decimal(value)
    return Decimal(0) if number is None else number


def _error_field(error: ValidationError) -> Optional[str]:
    """First field named in a pydantic error, if any."""
    for detail in error.errors():
        if detail.get("loc"):
            return str(detail["loc"][0])
    return None


class SnapshotEditor:
    """
    Copy-on-write editing of snapshots.

    Every public method takes a snapshot and returns a new one. The input
    snapshot is left untouched.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit = audit_logger or AuditLogger()

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self, document: Any) -> Snapshot:
        """
        Build a snapshot from a raw document.

        Raises:
            InvalidRule: if any stored record is malformed
        """
        try:
            snapshot = Snapshot.from_document(document)
        except ValidationError as e:
            self._reject("snapshot", _error_field(e), str(e))
            raise InvalidRule(
                "Snapshot document contains invalid records",
                field=_error_field(e),
                errors=e.errors(include_url=False),
            ) from e

        self._audit.log(AuditEventBuilder.snapshot_loaded({
            doc_key: len(getattr(snapshot, field))
            for doc_key, field in COLLECTIONS.items()
        }))
        return snapshot

    # =========================================================================
    # SALARIES
    # =========================================================================

    def save_salary(self, snapshot: Snapshot, start_month: str, amount: Any) -> Snapshot:
        """
        Add a salary change point, or overwrite the amount of the rule that
        already starts in `start_month`.
        """
        amount = self._positive_salary(self._read_amount("salary", "amount", amount))
        rule = self._build("salary", start_month=start_month, amount=amount)

        existing = next(
            (r for r in snapshot.salaries if r.start_month == rule.start_month),
            None,
        )
        if existing is not None:
            updated = existing.model_copy(update={"amount": rule.amount})
            salaries = [updated if r.id == existing.id else r for r in snapshot.salaries]
            self._audit.log(AuditEventBuilder.record_updated("salary", existing.id, ["amount"]))
            return snapshot.replace(salaries=salaries)

        self._audit.log(AuditEventBuilder.record_saved("salary", rule.id, {
            "start_month": rule.start_month,
            "amount": str(rule.amount),
        }))
        return snapshot.replace(salaries=[*snapshot.salaries, rule])

    def update_salary(self, snapshot: Snapshot, rule_id: str, **changes: Any) -> Snapshot:
        """
        Edit a salary rule.

        Raises:
            InvalidRule: if the amount is not positive, or another rule
                already starts in the new start month
        """
        if "amount" in changes:
            changes["amount"] = self._positive_salary(
                self._read_amount("salary", "amount", changes["amount"], rule_id)
            )
        if "start_month" in changes:
            changes["start_month"] = self._month_key(
                "salary", "start_month", changes["start_month"], rule_id
            )
            clash = any(
                r.start_month == changes["start_month"] and r.id != rule_id
                for r in snapshot.salaries
            )
            if clash:
                message = f"Another salary rule already starts in {changes['start_month']}"
                self._reject("salary", "start_month", message, rule_id)
                raise InvalidRule(message, field="start_month")
        return self._update(snapshot, "salary", rule_id, changes)

    def delete_salary(self, snapshot: Snapshot, rule_id: str) -> Snapshot:
        return self._delete(snapshot, "salary", rule_id)

    # =========================================================================
    # ONE-OFF EXPENSES
    # =========================================================================

    def add_expense(
        self,
        snapshot: Snapshot,
        date: Any,
        amount: Any,
        category: str = "",
        label: str = "",
    ) -> Snapshot:
        expense = self._build(
            "expense",
            date=date,
            amount=self._read_amount("expense", "amount", amount),
            category=category,
            label=label,
        )
        self._audit.log(AuditEventBuilder.record_saved("expense", expense.id, {
            "date": expense.date.isoformat(),
            "amount": str(expense.amount),
            "category": expense.category,
        }))
        return snapshot.replace(expenses=[*snapshot.expenses, expense])

    def update_expense(self, snapshot: Snapshot, expense_id: str, **changes: Any) -> Snapshot:
        return self._update(snapshot, "expense", expense_id, changes)

    def delete_expense(self, snapshot: Snapshot, expense_id: str) -> Snapshot:
        return self._delete(snapshot, "expense", expense_id)

    # =========================================================================
    # RECURRING RULES
    # =========================================================================

    def add_recurring(
        self,
        snapshot: Snapshot,
        start_month: str,
        amount: Any,
        end_month: Optional[str] = None,
        category: str = "",
        label: str = "",
    ) -> Snapshot:
        """
        Add a recurring charge. end_month=None (or "") is open-ended.

        Raises:
            InvalidRule: if end_month is before start_month or the amount
                is not positive
        """
        rule = self._build(
            "recurring",
            start_month=start_month,
            end_month=end_month,
            amount=self._read_amount("recurring", "amount", amount),
            category=category,
            label=label,
        )
        self._audit.log(AuditEventBuilder.record_saved("recurring", rule.id, {
            "start_month": rule.start_month,
            "end_month": rule.end_month,
            "amount": str(rule.amount),
        }))
        return snapshot.replace(recurring_expenses=[*snapshot.recurring_expenses, rule])

    def update_recurring(self, snapshot: Snapshot, rule_id: str, **changes: Any) -> Snapshot:
        return self._update(snapshot, "recurring", rule_id, changes)

    def delete_recurring(self, snapshot: Snapshot, rule_id: str) -> Snapshot:
        return self._delete(snapshot, "recurring", rule_id)

    # =========================================================================
    # INSTALLMENT PLANS
    # =========================================================================

    def add_installment(
        self,
        snapshot: Snapshot,
        purchase_date: Any,
        total_amount: Any,
        months: Any,
        category: str = "",
        label: str = "",
    ) -> Snapshot:
        """
        Add an installment purchase.

        The plan's start month is the effective month of the purchase under
        the snapshot's current billing settings.

        Raises:
            InvalidRule: if months < 2, the total is not positive, or the
                purchase date is malformed
        """
        plan = self._build(
            "installment",
            purchase_date=purchase_date,
            start_month=self._start_month_for(purchase_date, snapshot.settings),
            total_amount=self._read_amount("installment", "total_amount", total_amount),
            months=months,
            category=category,
            label=label,
        )
        self._audit.log(AuditEventBuilder.record_saved("installment", plan.id, {
            "purchase_date": plan.purchase_date.isoformat(),
            "start_month": plan.start_month,
            "total_amount": str(plan.total_amount),
            "months": plan.months,
        }))
        return snapshot.replace(installment_plans=[*snapshot.installment_plans, plan])

    def update_installment(self, snapshot: Snapshot, plan_id: str, **changes: Any) -> Snapshot:
        """
        Edit an installment plan.

        The start month is re-derived from the (possibly new) purchase date
        using the snapshot's current billing settings.
        """
        plan = self._find(snapshot, "installment", plan_id)
        purchase_date = changes.get("purchase_date", plan.purchase_date)
        return self._update(
            snapshot,
            "installment",
            plan_id,
            changes,
            derived={"start_month": self._start_month_for(purchase_date, snapshot.settings)},
        )

    def delete_installment(self, snapshot: Snapshot, plan_id: str) -> Snapshot:
        return self._delete(snapshot, "installment", plan_id)

    # =========================================================================
    # PROJECTED ENTRIES AND SETTINGS
    # =========================================================================

    def delete_entry(self, snapshot: Snapshot, entry: LedgerEntry) -> Snapshot:
        """
        Delete the record behind a projected ledger entry.

        Deleting a recurring or installment entry removes the whole rule,
        and with it every month it projects into.
        """
        return self._delete(snapshot, _SOURCE_TO_ENTITY[entry.source], entry.id)

    def update_settings(self, snapshot: Snapshot, **changes: Any) -> Snapshot:
        """
        Change billing/display settings.

        Existing installment plans keep their stored start months.
        """
        unknown = set(changes) - _SETTINGS_FIELDS
        if unknown:
            message = f"Unsupported settings: {', '.join(sorted(unknown))}"
            self._reject("settings", sorted(unknown)[0], message)
            raise InvalidRule(message, field=sorted(unknown)[0])

        data = snapshot.settings.model_dump()
        data.update(changes)
        try:
            settings = LedgerSettings(**data)
        except ValidationError as e:
            self._reject("settings", _error_field(e), str(e))
            raise InvalidRule(
                "Invalid settings",
                field=_error_field(e),
                errors=e.errors(include_url=False),
            ) from e

        self._audit.log(AuditEventBuilder.settings_updated(changes))
        return snapshot.replace(settings=settings)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _build(self, entity_type: str, record_id: Optional[str] = None, **fields: Any):
        """Construct a record, turning validation failures into InvalidRule."""
        _, model, _ = _ENTITIES[entity_type]
        if record_id is not None:
            fields["id"] = record_id
        try:
            return model(**fields)
        except ValidationError as e:
            field = _error_field(e)
            self._reject(entity_type, field, str(e), record_id)
            raise InvalidRule(
                f"Invalid {entity_type}: {e.errors(include_url=False)[0]['msg']}",
                field=field,
                errors=e.errors(include_url=False),
            ) from e

    def _find(self, snapshot: Snapshot, entity_type: str, record_id: str):
        collection, _, _ = _ENTITIES[entity_type]
        for record in getattr(snapshot, collection):
            if record.id == record_id:
                return record
        raise RecordNotFound(collection, record_id)

    def _update(
        self,
        snapshot: Snapshot,
        entity_type: str,
        record_id: str,
        changes: dict[str, Any],
        derived: Optional[dict[str, Any]] = None,
    ) -> Snapshot:
        collection, _, editable = _ENTITIES[entity_type]
        unknown = set(changes) - editable
        if unknown:
            message = f"Unsupported {entity_type} fields: {', '.join(sorted(unknown))}"
            self._reject(entity_type, sorted(unknown)[0], message, record_id)
            raise InvalidRule(message, field=sorted(unknown)[0])

        current = self._find(snapshot, entity_type, record_id)
        data = current.model_dump()
        data.update({
            name: self._read_amount(entity_type, name, value, record_id)
            if name in _AMOUNT_FIELDS else value
            for name, value in changes.items()
        })
        data.update(derived or {})
        updated = self._build(entity_type, **data)

        records = [
            updated if record.id == record_id else record
            for record in getattr(snapshot, collection)
        ]
        self._audit.log(AuditEventBuilder.record_updated(entity_type, record_id, sorted(changes)))
        return snapshot.replace(**{collection: records})

    def _delete(self, snapshot: Snapshot, entity_type: str, record_id: str) -> Snapshot:
        collection, _, _ = _ENTITIES[entity_type]
        self._find(snapshot, entity_type, record_id)
        records = [r for r in getattr(snapshot, collection) if r.id != record_id]
        self._audit.log(AuditEventBuilder.record_deleted(entity_type, record_id))
        return snapshot.replace(**{collection: records})

    def _read_amount(
        self,
        entity_type: str,
        field: str,
        value: Any,
        record_id: Optional[str] = None,
    ) -> Decimal:
        """parse_amount, but unreadable text is reported as such instead of as zero."""
        number = _to_decimal(value)
        if number is None and isinstance(value, str) and value.strip():
            message = (
                f"Amount {value!r} is not a number: use one decimal separator "
                "and no thousands grouping"
            )
            self._reject(entity_type, field, message, record_id)
            raise InvalidRule(message, field=field)
        return parse_amount(value)

    def _month_key(
        self,
        entity_type: str,
        field: str,
        value: Any,
        record_id: Optional[str] = None,
    ) -> str:
        """Canonical month key from user input, surrounding whitespace ignored."""
        key = value.strip() if isinstance(value, str) else value
        try:
            parse_month_key(key)
        except MalformedKey as e:
            self._reject(entity_type, field, str(e), record_id)
            raise InvalidRule(str(e), field=field) from e
        return key

    def _positive_salary(self, amount: Decimal) -> Decimal:
        # The model allows zero for stored rules; new input must be positive.
        if amount <= 0:
            message = "Salary amount must be greater than zero"
            self._reject("salary", "amount", message)
            raise InvalidRule(message, field="amount")
        return amount

    def _start_month_for(self, purchase_date: Any, settings: LedgerSettings) -> str:
        try:
            return effective_month(purchase_date, settings)
        except MalformedKey as e:
            self._reject("installment", "purchase_date", str(e))
            raise InvalidRule(str(e), field="purchase_date") from e

    def _reject(
        self,
        entity_type: str,
        field: Optional[str],
        message: str,
        record_id: Optional[str] = None,
    ) -> None:
        self._audit.log(AuditEventBuilder.input_rejected(
            entity_type=entity_type,
            field=field,
            error_message=message,
            record_id=record_id,
        ))

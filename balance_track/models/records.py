"""
Core Data Models for Balance Track

These models define the strict schemas for every record in a snapshot.
They are designed to:
1. Reject malformed month keys and impossible rules at construction time
2. Be immutable, so a snapshot can be shared between readers safely
3. Round-trip the camelCase JSON document owned by the persistence layer

DESIGN DECISION: Projection never re-validates stored rules. Anything that
can break an invariant (end before start, fewer than two installments,
non-positive amounts) is rejected HERE, before it can enter a snapshot.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from balance_track.months import MonthKey, add_months, parse_month_key

DEFAULT_CATEGORY = "General"
DEFAULT_CURRENCY = "TRY"


def new_record_id() -> str:
    """Create a new record identifier."""
    return str(uuid4())


def _check_month_key(value: str) -> str:
    parse_month_key(value)
    return value


def _amount_to_number(value: Decimal) -> float:
    return float(value)


# `YYYY-MM`, validated on the way in.
MonthKeyField = Annotated[str, AfterValidator(_check_month_key)]

# Decimals internally, plain JSON numbers in the document.
Amount = Annotated[
    Decimal,
    PlainSerializer(_amount_to_number, return_type=float, when_used="json"),
]


# =============================================================================
# ENUMS
# =============================================================================

class EntrySource(str, Enum):
    """Where a projected ledger entry came from."""
    MANUAL = "manual"
    RECURRING = "recurring"
    INSTALLMENT = "installment"


class CutoffMethod(str, Enum):
    """
    How the statement cutoff day is chosen.

    ABSOLUTE: the same day every month (e.g. the 19th)
    RELATIVE: N days before the end of the month
    """
    ABSOLUTE = "absolute"
    RELATIVE = "relative"


# =============================================================================
# BASE
# =============================================================================

class LedgerModel(BaseModel):
    """Frozen base model accepting both camelCase and snake_case names."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
        loc_by_alias=False,
    )


class CategorizedRecord(LedgerModel):
    """Shared category/label fields of expenses and expense rules."""

    category: str = Field(
        default=DEFAULT_CATEGORY,
        max_length=100,
        description="Free-text category"
    )
    label: str = Field(
        default="",
        max_length=500,
        description="Free-text note"
    )

    @field_validator('category', mode='before')
    @classmethod
    def default_blank_category(cls, v):
        """Blank or missing categories fall back to the default."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY
        return v

    @field_validator('label', mode='before')
    @classmethod
    def default_missing_label(cls, v):
        return "" if v is None else v


# =============================================================================
# RULES AND EXPENSES
# =============================================================================

class SalaryRule(LedgerModel):
    """
    "From start_month onward (until superseded), salary = amount."

    Rules form a step function ordered by start_month.
    """

    id: str = Field(default_factory=new_record_id, min_length=1)
    start_month: MonthKeyField
    amount: Amount = Field(..., ge=0, description="Monthly salary")


class ManualExpense(CategorizedRecord):
    """A one-off expense on a specific day."""

    id: str = Field(default_factory=new_record_id, min_length=1)
    date: date
    amount: Amount = Field(..., gt=0)


class RecurringExpenseRule(CategorizedRecord):
    """
    A fixed charge that lands once in every month from start_month
    through end_month. end_month=None means open-ended.
    """

    id: str = Field(default_factory=new_record_id, min_length=1)
    start_month: MonthKeyField
    end_month: Optional[MonthKeyField] = None
    amount: Amount = Field(..., gt=0)

    @field_validator('end_month', mode='before')
    @classmethod
    def blank_end_month_is_open(cls, v):
        """An empty end month means the rule never ends."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode='after')
    def validate_range(self) -> 'RecurringExpenseRule':
        """Lexical comparison of month keys is chronological."""
        if self.end_month is not None and self.end_month < self.start_month:
            raise ValueError("End month cannot be before start month")
        return self


class InstallmentPlan(CategorizedRecord):
    """
    A purchase paid in `months` equal parts.

    start_month is derived from purchase_date by the billing-cycle
    translator when the plan is created or edited, then stored so the
    schedule does not move if billing settings change later.
    """

    id: str = Field(default_factory=new_record_id, min_length=1)
    purchase_date: date
    start_month: MonthKeyField
    total_amount: Amount = Field(..., gt=0)
    months: int = Field(..., ge=2, description="Number of installments")

    @property
    def end_month(self) -> MonthKey:
        """Month of the last installment."""
        return add_months(self.start_month, self.months - 1)

    @property
    def installment_amount(self) -> Decimal:
        # No remainder distribution: every installment is the plain quotient.
        return self.total_amount / self.months


# =============================================================================
# SETTINGS
# =============================================================================

class LedgerSettings(LedgerModel):
    """
    Billing and display settings stored with the snapshot.

    cutoff_value=None means "no override": the absolute method falls back
    to the configured default cutoff day, the relative method to zero days.
    """

    currency: str = Field(
        default=DEFAULT_CURRENCY,
        min_length=1,
        max_length=10,
        description="Display label only; no conversion is performed"
    )
    cutoff_method: CutoffMethod = Field(default=CutoffMethod.ABSOLUTE)
    cutoff_value: Optional[int] = Field(default=None)
    settlement_delay: int = Field(
        default=0,
        ge=0,
        description="Days added to a purchase date before the cutoff check"
    )

    @field_validator('cutoff_method', mode='before')
    @classmethod
    def default_blank_method(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return CutoffMethod.ABSOLUTE
        return v

    @field_validator('settlement_delay', mode='before')
    @classmethod
    def default_missing_delay(cls, v):
        return 0 if v is None else v


# =============================================================================
# DERIVED
# =============================================================================

class LedgerEntry(LedgerModel):
    """
    One line of a projected ledger.

    Never persisted. Recurring and installment entries carry the id of the
    rule that produced them, so the host can route edits and deletes back
    to that rule.
    """

    id: str
    date: date
    amount: Amount
    category: str
    label: str
    source: EntrySource

"""
Expense Projector

Builds the ledger entries for a month or a year from three independent
sources, always in this order:

1. Manual      - one-off expenses dated inside the period
2. Recurring   - one entry per active rule per month
3. Installment - one fractional charge per in-progress plan per month

Recurring and installment entries are never stored. They are regenerated
from their rules on every query, so editing a rule changes every past and
future month consistently, and projecting the same snapshot twice gives
equal results.
"""

from datetime import date
from typing import Optional, Union

from balance_track.config import get_settings
from balance_track.models.records import (
    EntrySource,
    InstallmentPlan,
    LedgerEntry,
    ManualExpense,
)
from balance_track.models.snapshot import Snapshot
from balance_track.months import (
    MonthKey,
    month_key_of,
    months_between,
    months_of_year,
    parse_month_key,
)


def _first_of_month(key: MonthKey) -> date:
    year, month = parse_month_key(key)
    return date(year, month, 1)


def _manual_entry(expense: ManualExpense) -> LedgerEntry:
    return LedgerEntry(
        id=expense.id,
        date=expense.date,
        amount=expense.amount,
        category=expense.category,
        label=expense.label,
        source=EntrySource.MANUAL,
    )


def installment_label(
    plan: InstallmentPlan,
    index: int,
    template: Optional[str] = None,
) -> str:
    """Annotate a plan's label with its installment position, e.g. "(3/6)"."""
    if template is None:
        template = get_settings().ledger.installment_label_template
    return template.format(label=plan.label, index=index, months=plan.months).strip()


def manual_expenses_for_month(snapshot: Snapshot, key: MonthKey) -> list[LedgerEntry]:
    """Manual expenses dated inside month `key`."""
    parse_month_key(key)
    return [
        _manual_entry(expense)
        for expense in snapshot.expenses
        if month_key_of(expense.date) == key
    ]


def recurring_expenses_for_month(snapshot: Snapshot, key: MonthKey) -> list[LedgerEntry]:
    """
    One entry per recurring rule active in `key`.

    Active means start_month <= key and (no end_month or end_month >= key).
    """
    entry_date = _first_of_month(key)
    return [
        LedgerEntry(
            id=rule.id,
            date=entry_date,
            amount=rule.amount,
            category=rule.category,
            label=rule.label,
            source=EntrySource.RECURRING,
        )
        for rule in snapshot.recurring_expenses
        if rule.start_month <= key
        and (rule.end_month is None or rule.end_month >= key)
    ]


def installment_expenses_for_month(snapshot: Snapshot, key: MonthKey) -> list[LedgerEntry]:
    """
    One fractional charge per plan whose schedule covers `key`.

    The amount is total_amount / months; the label gets the installment
    index (months since start_month, plus one).
    """
    entry_date = _first_of_month(key)
    template = get_settings().ledger.installment_label_template
    entries = []
    for plan in snapshot.installment_plans:
        if not plan.start_month <= key <= plan.end_month:
            continue
        index = months_between(plan.start_month, key) + 1
        entries.append(LedgerEntry(
            id=plan.id,
            date=entry_date,
            amount=plan.installment_amount,
            category=plan.category,
            label=installment_label(plan, index, template),
            source=EntrySource.INSTALLMENT,
        ))
    return entries


def expenses_for_month(snapshot: Snapshot, key: MonthKey) -> list[LedgerEntry]:
    """All ledger entries for month `key`: manual, recurring, installment."""
    return [
        *manual_expenses_for_month(snapshot, key),
        *recurring_expenses_for_month(snapshot, key),
        *installment_expenses_for_month(snapshot, key),
    ]


def expenses_for_year(snapshot: Snapshot, year: int) -> list[LedgerEntry]:
    """
    All ledger entries for a year.

    Manual expenses dated in the year come first, followed by the
    recurring and installment entries generated month by month.
    """
    entries = [
        _manual_entry(expense)
        for expense in snapshot.expenses
        if expense.date.year == year
    ]
    for key in months_of_year(year):
        entries.extend(recurring_expenses_for_month(snapshot, key))
        entries.extend(installment_expenses_for_month(snapshot, key))
    return entries


def project(snapshot: Snapshot, period: Union[MonthKey, int]) -> list[LedgerEntry]:
    """
    Project a snapshot onto a month (`YYYY-MM` string) or a year (int).

    Raises:
        MalformedKey: if period is a string that is not a month key
        TypeError: for any other period type
    """
    if isinstance(period, bool):
        raise TypeError("period must be a month key or a year")
    if isinstance(period, int):
        return expenses_for_year(snapshot, period)
    if isinstance(period, str):
        return expenses_for_month(snapshot, period)
    raise TypeError(f"period must be a month key or a year, not {type(period).__name__}")

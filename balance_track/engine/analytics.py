"""
Ledger Aggregator / Analytics

Totals and summaries computed from projected ledger entries and the
salary step function. Everything here is derived; nothing is cached.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from balance_track.audit.logger import get_logger
from balance_track.engine.projector import expenses_for_month, expenses_for_year
from balance_track.engine.salary import salary_for_month
from balance_track.models.records import DEFAULT_CATEGORY, LedgerEntry
from balance_track.models.snapshot import Snapshot
from balance_track.months import MonthKey, month_key_of, months_of_year

logger = get_logger(__name__)

MONTHS_PER_YEAR = 12


class MonthlyBalance(BaseModel):
    """Income, spend and what is left for one month."""

    month: MonthKey
    salary: Decimal
    expense: Decimal
    remaining: Decimal


class AnalyticsSummary(BaseModel):
    """
    Summary of one year plus the real current month.

    average_monthly_spend always divides by 12, even for partial years.
    top_category is None when the year has no entries.
    """

    year: int
    total_expense: Decimal
    total_income: Decimal
    remaining: Decimal
    average_monthly_spend: Decimal
    category_totals: dict[str, Decimal] = Field(default_factory=dict)
    top_category: Optional[str] = None
    top_category_amount: Decimal = Decimal(0)
    current_month: MonthlyBalance


def _sum_amounts(entries: Iterable[LedgerEntry]) -> Decimal:
    return sum((entry.amount for entry in entries), Decimal(0))


def total_expenses_for_month(snapshot: Snapshot, key: MonthKey) -> Decimal:
    return _sum_amounts(expenses_for_month(snapshot, key))


def total_income_for_year(snapshot: Snapshot, year: int) -> Decimal:
    """Sum of the resolved salary over the year's twelve months."""
    return sum(
        (salary_for_month(snapshot.salaries, key) for key in months_of_year(year)),
        Decimal(0),
    )


def month_balance(snapshot: Snapshot, key: MonthKey) -> MonthlyBalance:
    salary = salary_for_month(snapshot.salaries, key)
    expense = total_expenses_for_month(snapshot, key)
    return MonthlyBalance(
        month=key,
        salary=salary,
        expense=expense,
        remaining=salary - expense,
    )


def monthly_breakdown(snapshot: Snapshot, year: int) -> list[MonthlyBalance]:
    """One row per month of `year`, January first."""
    return [month_balance(snapshot, key) for key in months_of_year(year)]


def category_totals(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    """
    Total amount per category.

    Keys keep first-encountered order; blank categories count as the
    default category.
    """
    totals: dict[str, Decimal] = {}
    for entry in entries:
        key = entry.category or DEFAULT_CATEGORY
        totals[key] = totals.get(key, Decimal(0)) + entry.amount
    return totals


def top_category(totals: dict[str, Decimal]) -> Optional[tuple[str, Decimal]]:
    """
    Category with the largest total.

    Ties go to the category encountered first: max() keeps the first
    maximal item and dict order is insertion order.
    """
    if not totals:
        return None
    return max(totals.items(), key=lambda item: item[1])


def summarize(
    snapshot: Snapshot,
    year: int,
    today: Optional[date] = None,
) -> AnalyticsSummary:
    """
    Build the analytics summary for `year`.

    The current-month figures use the real calendar month (or `today`
    when given), independent of the year being summarized.
    """
    today = today or date.today()

    entries = expenses_for_year(snapshot, year)
    total_expense = _sum_amounts(entries)
    total_income = total_income_for_year(snapshot, year)
    totals = category_totals(entries)
    top = top_category(totals)

    summary = AnalyticsSummary(
        year=year,
        total_expense=total_expense,
        total_income=total_income,
        remaining=total_income - total_expense,
        average_monthly_spend=total_expense / MONTHS_PER_YEAR,
        category_totals=totals,
        top_category=top[0] if top else None,
        top_category_amount=top[1] if top else Decimal(0),
        current_month=month_balance(snapshot, month_key_of(today)),
    )

    logger.debug(
        "year_summarized",
        year=year,
        entry_count=len(entries),
        total_expense=str(total_expense),
        total_income=str(total_income),
    )
    return summary

"""
Temporal Projection Engine

Public entry points over an immutable snapshot:

    project(snapshot, "2024-03")  -> ledger entries for a month
    project(snapshot, 2024)       -> ledger entries for a year
    salary_for(snapshot, "2024-03")
    effective_month("2024-01-25", snapshot.settings)
    summarize(snapshot, 2024)
    years_with_data(snapshot, current_year, selected_year)

Every function is synchronous and deterministic, and none of them mutate
their input.
"""

from decimal import Decimal

from balance_track.engine.analytics import (
    AnalyticsSummary,
    MonthlyBalance,
    category_totals,
    monthly_breakdown,
    summarize,
    top_category,
    total_expenses_for_month,
    total_income_for_year,
)
from balance_track.engine.billing import cutoff_day_for, effective_month
from balance_track.engine.formatting import format_currency
from balance_track.engine.projector import (
    expenses_for_month,
    expenses_for_year,
    installment_expenses_for_month,
    manual_expenses_for_month,
    project,
    recurring_expenses_for_month,
)
from balance_track.engine.salary import salary_for_month
from balance_track.engine.years import latest_year_with_data, years_with_data
from balance_track.models.snapshot import Snapshot
from balance_track.months import MonthKey


def salary_for(snapshot: Snapshot, key: MonthKey) -> Decimal:
    """Salary that applies in month `key`."""
    return salary_for_month(snapshot.salaries, key)


__all__ = [
    # Facade
    "effective_month",
    "project",
    "salary_for",
    "summarize",
    "years_with_data",
    # Projection
    "expenses_for_month",
    "expenses_for_year",
    "installment_expenses_for_month",
    "manual_expenses_for_month",
    "recurring_expenses_for_month",
    # Analytics
    "AnalyticsSummary",
    "MonthlyBalance",
    "category_totals",
    "monthly_breakdown",
    "top_category",
    "total_expenses_for_month",
    "total_income_for_year",
    # Helpers
    "cutoff_day_for",
    "format_currency",
    "latest_year_with_data",
    "salary_for_month",
]

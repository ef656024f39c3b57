"""
Year-Range Discovery

Collects every year that has data, for populating a year picker.
"""

from typing import Optional

from balance_track.models.snapshot import Snapshot
from balance_track.months import year_of


def _data_years(snapshot: Snapshot) -> set[int]:
    years: set[int] = set()
    for salary in snapshot.salaries:
        years.add(year_of(salary.start_month))
    for expense in snapshot.expenses:
        years.add(expense.date.year)
    for rule in snapshot.recurring_expenses:
        years.add(year_of(rule.start_month))
        if rule.end_month is not None:
            years.add(year_of(rule.end_month))
    for plan in snapshot.installment_plans:
        years.add(year_of(plan.start_month))
        years.add(year_of(plan.end_month))
    return years


def years_with_data(
    snapshot: Snapshot,
    current_year: int,
    selected_year: int,
) -> list[int]:
    """
    Sorted, deduplicated years referenced by any record.

    The current and selected years are always included, even with no data.
    Only rule boundaries count: a recurring rule spanning 2022-2025 adds
    2022 and 2025, not the years in between.
    """
    years = _data_years(snapshot)
    years.add(current_year)
    years.add(selected_year)
    return sorted(years)


def latest_year_with_data(snapshot: Snapshot, current_year: int) -> Optional[int]:
    """
    Most recent data year other than the current one, or None.

    Used after importing a backup to jump to the imported data.
    """
    years = _data_years(snapshot) - {current_year}
    return max(years) if years else None

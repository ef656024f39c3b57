"""Tests for the expense projector."""

import pytest
from datetime import date
from decimal import Decimal

from balance_track.config import get_settings
from balance_track.engine import (
    expenses_for_month,
    expenses_for_year,
    installment_expenses_for_month,
    manual_expenses_for_month,
    project,
    recurring_expenses_for_month,
)
from balance_track.engine.projector import installment_label
from balance_track.exceptions import MalformedKey
from balance_track.models import (
    EntrySource,
    InstallmentPlan,
    ManualExpense,
    RecurringExpenseRule,
    Snapshot,
)
from balance_track.months import add_months, months_of_year


def _expense(expense_id, day, amount, category="Food", label=""):
    return ManualExpense(
        id=expense_id,
        date=day,
        amount=Decimal(amount),
        category=category,
        label=label,
    )


def _recurring(rule_id, start, end, amount, category="Rent", label="Flat"):
    return RecurringExpenseRule(
        id=rule_id,
        start_month=start,
        end_month=end,
        amount=Decimal(amount),
        category=category,
        label=label,
    )


def _plan(plan_id, start, months, total, label="Laptop", category="Tech"):
    return InstallmentPlan(
        id=plan_id,
        purchase_date=date(2024, 1, 1),
        start_month=start,
        total_amount=Decimal(total),
        months=months,
        category=category,
        label=label,
    )


def _sort_key(entry):
    return (entry.date, entry.source.value, entry.id, entry.label)


@pytest.fixture
def snapshot():
    return Snapshot(
        expenses=[
            _expense("e1", "2024-03-14", "42.50", label="Groceries"),
            _expense("e2", "2024-04-02", "10"),
            _expense("e3", "2023-03-20", "99"),
        ],
        recurring_expenses=[
            _recurring("r1", "2024-03", "2024-05", "800"),
            _recurring("r2", "2023-06", None, "15", category="Streaming", label="Music"),
        ],
        installment_plans=[
            _plan("p1", "2024-11", 3, "300"),
        ],
    )


class TestManualProjection:
    """One-off expenses."""

    def test_only_expenses_in_month(self, snapshot):
        entries = manual_expenses_for_month(snapshot, "2024-03")
        assert [e.id for e in entries] == ["e1"]

    def test_entry_copies_expense(self, snapshot):
        entry = manual_expenses_for_month(snapshot, "2024-03")[0]
        assert entry.date == date(2024, 3, 14)
        assert entry.amount == Decimal("42.50")
        assert entry.category == "Food"
        assert entry.label == "Groceries"
        assert entry.source == EntrySource.MANUAL

    def test_same_month_other_year_excluded(self, snapshot):
        assert [e.id for e in manual_expenses_for_month(snapshot, "2023-03")] == ["e3"]


class TestRecurringProjection:
    """Recurring rules materialize once per active month."""

    def test_inclusive_boundaries(self, snapshot):
        for key in ("2024-03", "2024-04", "2024-05"):
            ids = [e.id for e in recurring_expenses_for_month(snapshot, key)]
            assert "r1" in ids
        for key in ("2024-02", "2024-06"):
            ids = [e.id for e in recurring_expenses_for_month(snapshot, key)]
            assert "r1" not in ids

    def test_entry_is_dated_first_of_month(self, snapshot):
        entry = next(e for e in recurring_expenses_for_month(snapshot, "2024-04") if e.id == "r1")
        assert entry.date == date(2024, 4, 1)
        assert entry.amount == Decimal("800")
        assert entry.category == "Rent"
        assert entry.label == "Flat"
        assert entry.source == EntrySource.RECURRING

    def test_open_ended_rule_never_stops(self, snapshot):
        ids = [e.id for e in recurring_expenses_for_month(snapshot, "2040-01")]
        assert ids == ["r2"]

    def test_one_entry_per_month(self, snapshot):
        for key in months_of_year(2024):
            ids = [e.id for e in recurring_expenses_for_month(snapshot, key)]
            assert ids.count("r2") == 1


class TestInstallmentProjection:
    """Installment plans amortize over consecutive months."""

    def test_covers_exactly_months_count(self, snapshot):
        covered = [
            key
            for offset in range(-3, 8)
            for key in [add_months("2024-11", offset)]
            if installment_expenses_for_month(snapshot, key)
        ]
        assert covered == ["2024-11", "2024-12", "2025-01"]

    def test_amount_and_index_label(self, snapshot):
        entries = [installment_expenses_for_month(snapshot, k)[0] for k in ("2024-11", "2024-12", "2025-01")]
        assert [e.amount for e in entries] == [Decimal(100)] * 3
        assert [e.label for e in entries] == [
            "Laptop (Installment 1/3)",
            "Laptop (Installment 2/3)",
            "Laptop (Installment 3/3)",
        ]
        assert all(e.source == EntrySource.INSTALLMENT for e in entries)
        assert entries[1].date == date(2024, 12, 1)

    @pytest.mark.parametrize("total,months", [("100", 3), ("1000", 7), ("0.01", 2), ("12345.67", 11)])
    def test_amortization_sum(self, total, months):
        snapshot = Snapshot(installment_plans=[_plan("p", "2024-05", months, total)])
        entries = []
        for offset in range(months):
            entries.extend(installment_expenses_for_month(snapshot, add_months("2024-05", offset)))
        assert len(entries) == months
        assert abs(sum(e.amount for e in entries) - Decimal(total)) < Decimal("1e-9")

    def test_empty_label_annotation(self):
        plan = _plan("p", "2024-05", 2, "50", label="")
        assert installment_label(plan, 1) == "(Installment 1/2)"

    def test_custom_label_template(self):
        plan = _plan("p", "2024-05", 4, "50", label="Phone")
        assert installment_label(plan, 2, "{label} [{index} of {months}]") == "Phone [2 of 4]"


class TestMonthAndYearProjection:
    """Combined projections."""

    def test_month_order_is_manual_recurring_installment(self):
        snapshot = Snapshot(
            expenses=[_expense("e", "2024-11-05", "5")],
            recurring_expenses=[_recurring("r", "2024-01", None, "20")],
            installment_plans=[_plan("p", "2024-11", 2, "60")],
        )
        sources = [e.source for e in expenses_for_month(snapshot, "2024-11")]
        assert sources == [EntrySource.MANUAL, EntrySource.RECURRING, EntrySource.INSTALLMENT]

    def test_project_dispatches_on_period(self, snapshot):
        assert project(snapshot, "2024-03") == expenses_for_month(snapshot, "2024-03")
        assert project(snapshot, 2024) == expenses_for_year(snapshot, 2024)

    def test_projection_is_idempotent(self, snapshot):
        assert project(snapshot, "2024-04") == project(snapshot, "2024-04")
        assert project(snapshot, 2024) == project(snapshot, 2024)

    def test_projection_does_not_mutate_snapshot(self, snapshot):
        before = snapshot.model_dump()
        project(snapshot, 2024)
        assert snapshot.model_dump() == before

    def test_year_starts_with_manual_expenses_of_that_year(self, snapshot):
        entries = expenses_for_year(snapshot, 2024)
        assert [e.id for e in entries[:2]] == ["e1", "e2"]
        assert all(e.source != EntrySource.MANUAL for e in entries[2:])

    def test_year_equals_union_of_months(self, snapshot):
        by_month = [e for key in months_of_year(2024) for e in expenses_for_month(snapshot, key)]
        by_year = expenses_for_year(snapshot, 2024)
        assert sorted(by_year, key=_sort_key) == sorted(by_month, key=_sort_key)

    def test_year_counts(self, snapshot):
        entries = expenses_for_year(snapshot, 2024)
        assert sum(1 for e in entries if e.id == "r1") == 3
        assert sum(1 for e in entries if e.id == "r2") == 12
        assert sum(1 for e in entries if e.id == "p1") == 2

    @pytest.mark.parametrize("period", ["2024-3", "2024-03\n", "\uff12\uff10\uff12\uff14-03"])
    def test_malformed_month(self, snapshot, period):
        with pytest.raises(MalformedKey):
            project(snapshot, period)

    @pytest.mark.parametrize("period", [2024.0, None, True])
    def test_unsupported_period_type(self, snapshot, period):
        with pytest.raises(TypeError):
            project(snapshot, period)


class TestConfiguredDefaults:
    """Configured defaults are read once per settings object."""

    @pytest.fixture
    def workdir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("BALANCE_TRACK_INSTALLMENT_LABEL_TEMPLATE", raising=False)
        get_settings.cache_clear()
        yield tmp_path
        get_settings.cache_clear()

    def test_env_file_change_needs_cache_clear(self, workdir):
        snapshot = Snapshot(installment_plans=[_plan("p", "2024-05", 2, "100", label="TV")])
        first = project(snapshot, "2024-05")
        assert first[0].label == "TV (Installment 1/2)"

        (workdir / ".env").write_text(
            'BALANCE_TRACK_INSTALLMENT_LABEL_TEMPLATE="{label}"\n', encoding="utf-8"
        )
        assert project(snapshot, "2024-05") == first

        get_settings.cache_clear()
        assert project(snapshot, "2024-05")[0].label == "TV"

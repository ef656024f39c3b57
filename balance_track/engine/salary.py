"""
Salary Resolver

Salary rules form a step function over months. The rule with the latest
start month that is still <= the query month wins; before the first rule
the salary is zero.
"""

from decimal import Decimal
from typing import Iterable

from balance_track.models.records import SalaryRule
from balance_track.months import MonthKey, parse_month_key


def salary_for_month(rules: Iterable[SalaryRule], key: MonthKey) -> Decimal:
    """
    Resolve the salary that applies in `key`.

    Fold over the rules in ascending start_month order, keeping the amount
    of the last rule that has started. The sort is stable, so if two rules
    ever share a start month the later one in the input wins. The editor
    never lets that happen.
    """
    parse_month_key(key)
    amount = Decimal(0)
    for rule in sorted(rules, key=lambda r: r.start_month):
        if rule.start_month <= key:
            amount = rule.amount
    return amount

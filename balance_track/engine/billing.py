"""
Billing-Cycle Translator

Maps an installment purchase date to the month its first installment is
billed, like a credit card statement cycle:

1. Add the settlement delay (processing lag) to the purchase date.
2. Find that month's cutoff day.
3. Anything after the cutoff rolls onto next month's statement.

This is a simplified heuristic, not any card network's actual rules.
"""

from datetime import timedelta
from typing import Optional

from balance_track.audit.logger import get_logger
from balance_track.config import get_settings
from balance_track.models.records import CutoffMethod, LedgerSettings
from balance_track.months import (
    MonthKey,
    add_months,
    last_day_of_month,
    month_key_of,
    parse_day,
)

logger = get_logger(__name__)


def cutoff_day_for(
    year: int,
    month: int,
    settings: LedgerSettings,
    default_cutoff_day: Optional[int] = None,
) -> int:
    """
    Cutoff day for a given month, clamped to [1, last day of month].

    ABSOLUTE: settings.cutoff_value, or the configured default day when the
        value is unset (None or 0).
    RELATIVE: last day of month minus settings.cutoff_value (unset = 0).
    """
    last_day = last_day_of_month(year, month)

    if settings.cutoff_method == CutoffMethod.RELATIVE:
        cutoff = last_day - (settings.cutoff_value or 0)
    else:
        if default_cutoff_day is None:
            default_cutoff_day = get_settings().ledger.default_cutoff_day
        cutoff = settings.cutoff_value or default_cutoff_day

    return max(1, min(cutoff, last_day))


def effective_month(purchase_date, settings: LedgerSettings) -> MonthKey:
    """
    Month in which an installment purchase is first billed.

    Args:
        purchase_date: `date` or `YYYY-MM-DD` string
        settings: the snapshot's billing settings

    Raises:
        MalformedKey: if purchase_date is not a valid calendar day
    """
    purchased = parse_day(purchase_date)
    effective = purchased + timedelta(days=settings.settlement_delay)
    cutoff = cutoff_day_for(effective.year, effective.month, settings)

    result = month_key_of(effective)
    if effective.day > cutoff:
        result = add_months(result, 1)

    logger.debug(
        "effective_month_resolved",
        purchase_date=purchased.isoformat(),
        effective_date=effective.isoformat(),
        cutoff_day=cutoff,
        cutoff_method=settings.cutoff_method.value,
        effective_month=result,
    )
    return result

"""Currency display formatting. The currency is a label; nothing is converted."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENTS = Decimal("0.01")


def format_currency(amount: Union[Decimal, int, float], currency: str) -> str:
    """
    Format an amount for display.

    Example:
        >>> format_currency(Decimal("1234.5"), "TRY")
        '1,234.50 TRY'
        >>> format_currency(-12, "EUR")
        '-12.00 EUR'
    """
    value = Decimal(str(amount)) if not isinstance(amount, Decimal) else amount
    value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"{value:,.2f} {currency}"

"""Number formatting for label text and printer payloads.

Printer bridges and label stations compare these strings verbatim, so the
output follows ECMAScript ``toFixed``/``toPrecision``/``String(number)``.
"""

import math
from decimal import ROUND_HALF_UP, Decimal


def format_fixed(value: float, decimals: int = 3) -> str:
    """Format with a fixed number of decimal places (``12.500``)."""
    return f"{value:.{decimals}f}"


def format_significant(value: float, digits: int = 3) -> str:
    """Format to a number of significant figures (``0.417``, ``1.23e+3``).

    Args:
        value: Number to format.
        digits: Significant figures.

    Returns:
        str: Formatted number.
    """
    if not math.isfinite(value):
        return format_number(value)
    if value == 0:
        return "0" if digits == 1 else "0." + "0" * (digits - 1)

    exact = Decimal(value)
    quantum = Decimal(1).scaleb(1 - digits)
    exponent = exact.adjusted()
    mantissa = exact.scaleb(-exponent).quantize(quantum, rounding=ROUND_HALF_UP)
    # 9.995 rounds up to 10.0
    if mantissa.adjusted() > 0:
        exponent += 1
        mantissa = exact.scaleb(-exponent).quantize(quantum, rounding=ROUND_HALF_UP)

    if exponent < -6 or exponent >= digits:
        sign = "+" if exponent >= 0 else "-"
        return f"{mantissa:f}e{sign}{abs(exponent)}"
    return f"{mantissa.scaleb(exponent):f}"


def format_number(value: float) -> str:
    """Shortest text for a number, integral values without a fraction (``12``, ``12.5``)."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))

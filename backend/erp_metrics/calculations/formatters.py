"""Display formatters for KPI values.

Each formatter is a pure ``(float) -> str`` callable. They mirror the
``en-US`` presentation used by the dashboard so that the same KPI renders
identically whether it was computed server side or in the browser.
"""

from __future__ import annotations

import math
from decimal import Decimal
from types import MappingProxyType
from typing import Callable, Mapping

from .numeric import round_half_up

Formatter = Callable[[float], str]

_COMPACT_UNITS = ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"))
# JavaScript switches to exponent notation from here on
_JS_EXPONENT_LIMIT = 10**21


def format_number(value: float) -> str:
    """Render a number the way JavaScript's ``Number.prototype.toString`` does.

    ``repr`` already yields the shortest round-tripping digits; only the
    placement of the decimal point and the exponent notation differ
    (``1e-7`` rather than ``1e-07``, plain digits up to ``1e21``).
    """

    if isinstance(value, int) and not isinstance(value, bool) and abs(value) < _JS_EXPONENT_LIMIT:
        return str(value)
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "0"

    sign = "-" if number < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(number))).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    # value == 0.<digits> * 10**point
    point = exponent + len(digits)
    count = len(digits)

    if count <= point <= 21:
        text = digits + "0" * (point - count)
    elif 0 < point <= 21:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        power = point - 1
        mantissa = digits if count == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"
    return sign + text


def format_currency(value: float, currency_symbol: str = "$") -> str:
    number = float(value)
    if not math.isfinite(number):
        return format_number(number)
    sign = "-" if number < 0 else ""
    return f"{sign}{currency_symbol}{abs(number):,.2f}"


def format_percent(value: float, decimals: int = 1) -> str:
    number = float(value)
    if not math.isfinite(number):
        return f"{format_number(number)}%"
    return f"{number:.{decimals}f}%"


def _strip_zero(text: str) -> str:
    return text[:-2] if text.endswith(".0") else text


def format_compact(value: float) -> str:
    """Format as a short string: ``1234 -> 1.2K``, ``3400000 -> 3.4M``."""

    number = float(value)
    if not math.isfinite(number):
        return format_number(number)
    sign = "-" if number < 0 else ""
    magnitude = abs(number)
    for index, (threshold, suffix) in enumerate(_COMPACT_UNITS):
        if magnitude >= threshold:
            scaled = round_half_up(magnitude / threshold, 1)
            # 999_950 rounds to 1000.0K; promote to the next unit
            if scaled >= 1000 and index > 0:
                upper_threshold, upper_suffix = _COMPACT_UNITS[index - 1]
                scaled = round_half_up(magnitude / upper_threshold, 1)
                suffix = upper_suffix
            return f"{sign}{_strip_zero(f'{scaled:.1f}')}{suffix}"
    rounded = round_half_up(magnitude, 1)
    if rounded >= 1000:
        return f"{sign}1K"
    return f"{sign}{_strip_zero(f'{rounded:.1f}')}"


# ``compact`` resolves to currency here; this lookup feeds the industry
# dashboards, where every compact-tagged KPI is a monetary amount.
FORMATTERS: Mapping[str, Formatter] = MappingProxyType(
    {
        "currency": format_currency,
        "percent": format_percent,
        "number": format_number,
        "compact": format_currency,
    }
)

FALLBACK_FORMATTER = "number"


def resolve_formatter(tag: str, formatters: Mapping[str, Formatter] = FORMATTERS) -> Formatter:
    """Return the formatter registered for ``tag`` or the plain-number one."""

    formatter = formatters.get(tag)
    if formatter is None:
        return formatters.get(FALLBACK_FORMATTER, format_number)
    return formatter


__all__ = [
    "FALLBACK_FORMATTER",
    "FORMATTERS",
    "Formatter",
    "format_compact",
    "format_currency",
    "format_number",
    "format_percent",
    "resolve_formatter",
]

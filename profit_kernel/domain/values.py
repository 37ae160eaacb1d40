"""
Values -- exact-decimal helpers shared by every layer.

Responsibility:
    Coerces boundary values into ``Decimal``, provides the calculation
    context, the percentage helper, and the presentation helpers
    (rounding and currency/percent formatting).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by ledger/bucket value objects, engines, config and services.

Invariants enforced:
    - No float ever becomes a Decimal: ``to_decimal`` rejects floats
      outright instead of routing them through ``str()``.
    - Non-finite values (NaN, Infinity) are rejected at construction.
    - Calculations never round; ``round_money`` is presentation-only.

Failure modes:
    - InvalidAmountError on float, bool, None, non-finite or unparseable input.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from profit_kernel.exceptions import InvalidAmountError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Wide enough that products of realistic ledger values are never rounded.
CALCULATION_PRECISION = 50


def calculation_context():
    """Decimal context used by every engine calculation."""
    return localcontext(prec=CALCULATION_PRECISION)


def to_decimal(value: Any, field_name: str) -> Decimal:
    """
    Coerce a boundary value into an exact Decimal.

    Preconditions:
        value is a Decimal, int or decimal string.

    Postconditions:
        Returns a finite Decimal equal to the input.

    Raises:
        InvalidAmountError: for float, bool, None, non-finite or
            unparseable values.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(field_name, value)
    if isinstance(value, float):
        raise InvalidAmountError(
            field_name, value, "binary floats are not accepted"
        )
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise InvalidAmountError(field_name, value) from e
    else:
        raise InvalidAmountError(field_name, value)

    if not result.is_finite():
        raise InvalidAmountError(field_name, value, "value must be finite")
    return result


def to_optional_decimal(value: Any, field_name: str) -> Decimal | None:
    """Like ``to_decimal`` but lets ``None`` through (absent override/fee)."""
    if value is None:
        return None
    return to_decimal(value, field_name)


def percent_of(base: Decimal, percent: Decimal) -> Decimal:
    """``base * percent / 100`` -- percentages are parts per hundred."""
    return base * percent / HUNDRED


def round_money(
    value: Decimal,
    decimal_places: int = 2,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Round a monetary value for presentation.

    Calculation code never calls this; results carry full precision and
    only rendering rounds.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def format_currency(amount: Decimal) -> str:
    """US dollar rendering: ``$1,234.56``, ``-$12.50``."""
    rounded = round_money(amount)
    sign = "-" if rounded < ZERO else ""
    return f"{sign}${abs(rounded):,.2f}"


def format_percent(amount: Decimal) -> str:
    """Two-decimal percentage: ``15.00%``."""
    return f"{round_money(amount)}%"

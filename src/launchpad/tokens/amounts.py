"""
Conversion between human-entered token quantities and base units.

Amounts go through Decimal, never through float multiplication: floats are
first converted via their shortest repr, so 2.5 or 0.1 are taken at face
value. Fractions finer than one base unit are rounded half-up
(0.5 base unit and above goes away from zero).
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from launchpad.core.errors import InvalidAmount, InvalidDecimals
from launchpad.core.pubkeys import MAX_BASE_UNITS, MAX_DECIMALS

Number = int | float | str | Decimal

MAX_BASE_UNITS_DIGITS = len(str(MAX_BASE_UNITS))


def validate_decimals(decimals: int) -> int:
    """Check that a decimals value is an integer in [0, 9]."""
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidDecimals(f"Decimals must be an integer, got {decimals!r}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidDecimals(f"Decimals must be between 0 and {MAX_DECIMALS}, got {decimals}")
    return decimals


def _to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidAmount(f"Amount must be a number, got {amount!r}")
    if isinstance(amount, float):
        if not math.isfinite(amount):
            raise InvalidAmount(f"Amount must be finite, got {amount!r}")
        return Decimal(repr(amount))
    if isinstance(amount, (int, Decimal)):
        value = Decimal(amount)
    elif isinstance(amount, str):
        try:
            value = Decimal(amount.strip())
        except InvalidOperation:
            raise InvalidAmount(f"Amount is not a number: {amount!r}") from None
    else:
        raise InvalidAmount(f"Unsupported amount type: {type(amount).__name__}")

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {amount!r}")
    return value


def validate_amount(amount_whole: Number) -> Decimal:
    """Check an amount without knowing the token's decimals.

    Raises:
        InvalidAmount: Not a number, non-finite or negative
    """
    value = _to_decimal(amount_whole)
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative, got {amount_whole!r}")
    return value


def to_base_units(amount_whole: Number, decimals: int) -> int:
    """Convert a whole-token amount into integer base units.

    Args:
        amount_whole: Amount in whole tokens (e.g. 2.5)
        decimals: Token decimal precision, 0..9

    Returns:
        round_half_up(amount_whole * 10**decimals)

    Raises:
        InvalidAmount: Negative, non-finite or beyond the u64 range
        InvalidDecimals: Decimals outside [0, 9]
    """
    validate_decimals(decimals)
    value = validate_amount(amount_whole)
    if not value:
        return 0

    # 1e999999 and the like would overflow the decimal context when scaled
    if value.adjusted() + decimals >= MAX_BASE_UNITS_DIGITS:
        raise InvalidAmount(
            f"Amount {amount_whole} with {decimals} decimals exceeds the maximum of "
            f"{MAX_BASE_UNITS} base units"
        )

    with localcontext() as ctx:
        ctx.prec = 80
        base_units = int(value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    if base_units > MAX_BASE_UNITS:
        raise InvalidAmount(
            f"Amount {amount_whole} with {decimals} decimals exceeds the maximum of "
            f"{MAX_BASE_UNITS} base units"
        )
    return base_units


def from_base_units(amount_base_units: int, decimals: int) -> Decimal:
    """Convert base units back to whole tokens, for display only."""
    validate_decimals(decimals)
    return Decimal(int(amount_base_units)).scaleb(-decimals)

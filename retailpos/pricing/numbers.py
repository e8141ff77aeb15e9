"""
retailpos/pricing/numbers.py
----------------------------
Normalisation of free-text numeric inputs (tax rate, discount, manual price).

Two flavours:
  to_number()    lenient — anything unusable becomes the default (zero).
                 Used by the totals reduction so it always gets a number.
  parse_amount() strict  — raises InvalidNumber. Used when the user types a
                 value into the cart, so a bad value never reaches state.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from retailpos.pricing.errors import InvalidNumber


Q = Decimal('0.01')


def _to_decimal(raw):
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, bool):
        return None
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    if not value.is_finite():
        return None
    return value


def to_number(raw, default: Decimal = Decimal('0')) -> Decimal:
    """Parse with default-zero; NaN, infinities and garbage map to default."""
    value = _to_decimal(raw)
    return default if value is None else value


def parse_amount(raw, field: str = 'amount', allow_blank: bool = True) -> Decimal:
    """
    Strictly parse a non-negative amount.

    A blank input means zero when ``allow_blank`` is set (an emptied field).
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if allow_blank:
            return Decimal('0')
        raise InvalidNumber(field, raw if raw is not None else '')
    value = _to_decimal(raw)
    if value is None or value < 0:
        raise InvalidNumber(field, raw)
    return value


def parse_rate(raw) -> Decimal:
    """Any finite number is accepted; out-of-range rates are neutralised later."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return Decimal('0')
    value = _to_decimal(raw)
    if value is None:
        raise InvalidNumber('tax rate', raw)
    return value


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(value, high))


def quantize(value: Decimal, quantum: Decimal = Q, rounding: str = ROUND_HALF_UP) -> Decimal:
    return value.quantize(quantum, rounding=rounding)

"""
retailpos/pricing/validators.py
-------------------------------
Validation of a manually entered unit price for one cart line.
"""
from decimal import Decimal

from retailpos.pricing.errors import AboveListPrice, BelowMinimumMargin
from retailpos.pricing.models import PriceEntry
from retailpos.pricing.numbers import Q, parse_amount, quantize


def validate_custom_price(entry: PriceEntry, proposed, quantum: Decimal = Q) -> Decimal:
    """
    Check ``proposed`` against the margin envelope of ``entry``.

    Checks run in order: usable number, not below the minimum-margin price,
    not above the list price. The price is rounded to ``quantum`` before the
    bounds are checked. Returns the accepted price as Decimal.
    """
    price = quantize(parse_amount(proposed, field='price', allow_blank=False), quantum)

    if price < entry.min_price:
        raise BelowMinimumMargin(entry.min_price)
    if price > entry.list_price:
        raise AboveListPrice(entry.list_price)
    return price


def is_within_bounds(entry: PriceEntry, price: Decimal) -> bool:
    return entry.min_price <= price <= entry.list_price

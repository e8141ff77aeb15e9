"""
retailpos/pricing/allocator.py
------------------------------
The margin budget shared by custom prices and the global discount.

Each line can give away at most ``(max_margin - min_margin) × qty``. Custom
prices spend part of that budget implicitly; the global discount may only
use what is left:

    implicit  = Σ (list_price - custom_price) × qty      (overridden lines)
    budget    = Σ (max_margin - min_margin) × qty
    remaining = max(0, budget - implicit)

Per-line floors are enforced by validate_custom_price; this module only deals
with the aggregate ceiling.
"""
from decimal import Decimal
from typing import Iterable, Tuple

from retailpos.pricing.models import CartLine, PriceEntry, ZERO
from retailpos.pricing.numbers import clamp


def implicit_discount(priced_lines: Iterable[Tuple[CartLine, PriceEntry, Decimal]],
                      custom_prices: dict) -> Decimal:
    """Profit already given away through custom prices."""
    total = ZERO
    for line, entry, effective in priced_lines:
        if line.product.id in custom_prices:
            total += (entry.list_price - effective) * line.quantity
    return total


def available_margin(priced_lines: Iterable[Tuple[CartLine, PriceEntry, Decimal]]) -> Decimal:
    total = ZERO
    for line, entry, _ in priced_lines:
        total += entry.available_margin * line.quantity
    return total


def remaining_budget(margin: Decimal, implicit: Decimal) -> Decimal:
    return max(ZERO, margin - implicit)


def allocate_global_discount(requested: Decimal, budget: Decimal) -> Decimal:
    """Clamp a requested global discount into ``[0, budget]``."""
    return clamp(requested, ZERO, budget)

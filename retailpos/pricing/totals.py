"""
retailpos/pricing/totals.py
---------------------------
Pure reduction of a cart into its monetary totals.

Recomputed on every change to the cart, tax rate, discount input or active
price list; never stored while the cart is open.

Tax is grossed up: the subtotal is treated as the tax-exclusive amount and
the tax is chosen so that it equals ``t`` percent of the tax-inclusive total.

    tax = subtotal / (1 - t/100) - subtotal        for 0 < t < 100
    tax = 0                                        otherwise
"""
from decimal import Decimal, ROUND_DOWN
from typing import List, Tuple

from retailpos.pricing.allocator import (
    allocate_global_discount, available_margin,
    implicit_discount, remaining_budget,
)
from retailpos.pricing.errors import CartInvariantError
from retailpos.pricing.models import (
    Cart, CartLine, CommitLine, PriceEntry, Totals, ZERO,
)
from retailpos.pricing.numbers import Q, quantize, to_number
from retailpos.pricing.resolver import resolve_price
from retailpos.pricing.validators import is_within_bounds


HUNDRED = Decimal('100')


def effective_price(cart: Cart, line: CartLine, entry: PriceEntry) -> Decimal:
    custom = cart.custom_prices.get(line.product.id)
    return entry.list_price if custom is None else custom


def price_lines(cart: Cart, price_lists) -> List[Tuple[CartLine, PriceEntry, Decimal]]:
    """Pair every line with its resolved entry and effective unit price."""
    priced = []
    for line in cart.lines:
        entry = resolve_price(line.product, cart.price_list_id, price_lists)
        priced.append((line, entry, effective_price(cart, line, entry)))
    return priced


def tax_for(subtotal: Decimal, rate: Decimal) -> Decimal:
    # A rate of 100 or more would give infinite or negative tax
    if rate <= 0 or rate >= HUNDRED:
        return ZERO
    return subtotal / (1 - rate / HUNDRED) - subtotal


def compute_totals(cart: Cart, price_lists, quantum: Decimal = Q) -> Totals:
    """
    Reduce ``cart`` into its totals.

    Returns a Totals record with every amount quantized to ``quantum``.
    Subtotal, tax and the requested discount are rounded first and the final
    total is built from the rounded parts, so
    ``subtotal + tax_amount - global_discount == final_total`` holds to the
    cent. The budget is rounded down so the discount never exceeds the real
    margin.
    """
    priced = price_lines(cart, price_lists)

    subtotal = ZERO
    for line, _, price in priced:
        subtotal += price * line.quantity

    subtotal = quantize(subtotal, quantum)
    tax_amount = quantize(tax_for(subtotal, to_number(cart.tax_rate)), quantum)

    implicit = implicit_discount(priced, cart.custom_prices)
    max_discount = quantize(remaining_budget(available_margin(priced), implicit), quantum, ROUND_DOWN)
    requested = quantize(to_number(cart.discount_input), quantum)
    discount = quantize(allocate_global_discount(requested, max_discount), quantum)

    return Totals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        global_discount=discount,
        max_global_discount=max_discount,
        final_total=quantize(max(ZERO, subtotal + tax_amount - discount), quantum),
    )


def commit_lines(cart: Cart, price_lists) -> List[CommitLine]:
    """Finalized lines for the commit operation, with unit price and cost."""
    return [
        CommitLine(
            product_id=line.product.id,
            quantity=line.quantity,
            unit_price=price,
            unit_cost=max(ZERO, entry.cost),
        )
        for line, entry, price in price_lines(cart, price_lists)
    ]


def check_invariants(cart: Cart, price_lists, totals: Totals) -> None:
    """
    Refuse to hand an inconsistent cart to a commit operation.

    Raises CartInvariantError naming the first violation found.
    """
    line_ids = set()
    for line, entry, _ in price_lines(cart, price_lists):
        line_ids.add(line.product.id)
        if line.quantity < 1:
            raise CartInvariantError(f'"{line.product.name}" has quantity {line.quantity}.')
        if entry.is_unpriced:
            raise CartInvariantError(f'"{line.product.name}" has no price assigned.')
        custom = cart.custom_prices.get(line.product.id)
        if custom is not None and not is_within_bounds(entry, custom):
            raise CartInvariantError(
                f'Custom price {custom} for "{line.product.name}" is outside '
                f'{entry.min_price}–{entry.list_price}.'
            )

    orphans = set(cart.custom_prices) - line_ids
    if orphans:
        raise CartInvariantError(f'Custom prices without a cart line: {sorted(orphans)}.')
    if not ZERO <= totals.global_discount <= totals.max_global_discount:
        raise CartInvariantError('Global discount exceeds the remaining margin.')
    if totals.final_total < 0:
        raise CartInvariantError('Final total is negative.')

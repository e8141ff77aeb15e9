"""
retailpos/quotes/services.py
----------------------------
Commit of a priced cart as a Quotation, and the reverse: loading a stored
quotation back into a cart so the terminal can sell it.
"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from retailpos import db
from retailpos.pricing.ledger import CartLedger
from retailpos.pricing.models import Cart, Totals
from retailpos.pricing.numbers import quantize
from retailpos.pricing.totals import check_invariants, commit_lines
from retailpos.quotes.models import Quotation, QuotationItem
from retailpos.sales.models import QUOTATION_KIND
from retailpos.sales.numbering import next_document_number
from retailpos.sales.services import CommitError


def default_due_date(validity_days: int, today: Optional[date] = None) -> date:
    return (today or date.today()) + timedelta(days=validity_days)


def commit_quotation(cart: Cart, price_lists, totals: Totals,
                     due_date: Optional[date], notes: Optional[str]) -> Quotation:
    """Persist ``cart`` as a Quotation inside the current transaction."""
    if cart.is_empty:
        raise CommitError('Cart is empty. Add products before generating a quotation.', 'empty_cart')
    if cart.client_id is None:
        raise CommitError('Please select a client for the quotation.', 'client_required')
    check_invariants(cart, price_lists, totals)

    quotation = Quotation(
        number=next_document_number(db.session, QUOTATION_KIND),
        client_id=cart.client_id,
        due_date=due_date,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        discount=totals.global_discount,
        total=totals.final_total,
        notes=notes,
    )
    for line in commit_lines(cart, price_lists):
        quotation.items.append(QuotationItem(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=quantize(line.unit_price),
            unit_cost=quantize(line.unit_cost),
        ))

    db.session.add(quotation)
    db.session.flush()
    return quotation


def derive_tax_rate(subtotal: Decimal, tax_amount: Decimal) -> str:
    """
    Tax rate that reproduces ``tax_amount`` on ``subtotal`` under gross-up.

    tax = s / (1 - t) - s   ⇔   t = tax / (s + tax)
    Returned as typed input text with two decimals, '' when there is no tax.
    """
    gross = subtotal + tax_amount
    if tax_amount <= 0 or gross <= 0:
        return ''
    rate = (tax_amount / gross * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return str(rate)


def load_quotation_into(ledger: CartLedger, quotation: Quotation, products_by_id: dict) -> None:
    """
    Replace the ledger's cart with the content of ``quotation``.

    The default price list is selected, quoted unit prices become custom
    prices where they still fit, and the quoted discount and tax are
    restored as typed inputs.
    """
    ledger.clear()
    ledger.use_default_price_list()
    ledger.set_client(quotation.client_id)
    ledger.load_lines(
        ((item.product_id, item.quantity, Decimal(str(item.unit_price))) for item in quotation.items),
        products_by_id,
    )
    discount = Decimal(str(quotation.discount or 0))
    ledger.set_discount(str(discount) if discount > 0 else '')
    ledger.set_tax_rate(derive_tax_rate(Decimal(str(quotation.subtotal)),
                                        Decimal(str(quotation.tax_amount or 0))))

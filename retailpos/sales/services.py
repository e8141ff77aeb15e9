"""
retailpos/sales/services.py
---------------------------
Commit of a priced cart as a Sale.

The engine hands over its Totals and commit lines; this module persists
them in one transaction:
  1. Lock each product row with SELECT … FOR UPDATE (ascending id)
  2. Verify stock for every line (all-or-nothing)
  3. Deduct stock and record a StockMovement per line
  4. Reserve the sale number
  5. Persist Sale + SaleItems
The caller commits or rolls back.
"""
from typing import Optional

from retailpos import db
from retailpos.catalog.models import Product, StockMovement
from retailpos.pricing.models import Cart, Totals
from retailpos.pricing.numbers import quantize
from retailpos.pricing.totals import check_invariants, commit_lines
from retailpos.sales.checkout import Checkout
from retailpos.sales.models import SALE_KIND, Sale, SaleItem
from retailpos.sales.numbering import next_document_number


class CommitError(ValueError):
    """A domain reason the commit cannot go ahead; nothing is persisted."""

    def __init__(self, message: str, code: str = 'commit_error'):
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {'error': str(self), 'code': self.code}


def lock_products(product_ids) -> dict:
    """
    Lock product rows in a deterministic order.

    Sorting by id prevents deadlocks when two transactions lock the same
    rows.
    """
    locked = {}
    for pid in sorted(product_ids):
        product = (
            db.session.query(Product)
            .filter(Product.id == pid)
            .with_for_update()
            .first()
        )
        if product is None:
            raise CommitError(f'Product ID {pid} no longer exists.', 'missing_product')
        locked[pid] = product
    return locked


def commit_sale(cart: Cart, price_lists, totals: Totals, checkout: Checkout,
                quotation_id: Optional[int] = None) -> Sale:
    """Persist ``cart`` as a Sale inside the current transaction."""
    if cart.is_empty:
        raise CommitError('Cart is empty. Add products before completing a sale.', 'empty_cart')
    check_invariants(cart, price_lists, totals)

    lines = commit_lines(cart, price_lists)
    locked = lock_products(line.product_id for line in lines)

    for line in lines:
        product = locked[line.product_id]
        if product.stock < line.quantity:
            raise CommitError(
                f'Insufficient stock for "{product.name}". '
                f'Available: {product.stock}, requested: {line.quantity}.',
                'insufficient_stock',
            )

    number = next_document_number(db.session, SALE_KIND)
    sale = Sale(
        number=number,
        client_id=cart.client_id,
        quotation_id=quotation_id,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        discount=totals.global_discount,
        total=totals.final_total,
        payment_method=checkout.payment_method,
        sale_type=checkout.sale_type,
        amount_received=quantize(checkout.amount_received),
        change_given=quantize(checkout.change),
        due_date=checkout.due_date,
    )

    for line in lines:
        product = locked[line.product_id]
        old_stock = product.stock
        product.stock -= line.quantity
        product.units_sold_90d = (product.units_sold_90d or 0) + line.quantity
        db.session.add(StockMovement(
            product_id=product.id,
            old_stock=old_stock,
            new_stock=product.stock,
            reason=f"Sale {number}",
        ))
        sale.items.append(SaleItem(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=quantize(line.unit_price),
            unit_cost=quantize(line.unit_cost),
            subtotal=quantize(line.line_total),
        ))

    db.session.add(sale)
    db.session.flush()
    return sale

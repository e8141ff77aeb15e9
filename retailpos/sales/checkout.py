"""
retailpos/sales/checkout.py
---------------------------
Payment rules applied when the terminal completes a sale.

  * a sale with a zero total cannot be checked out
  * credit sales need a client and get a due date CREDIT_TERM_DAYS ahead
  * card / QR payments are taken as exact
  * cash paid in cash needs amount_received >= total; change is returned
"""
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from retailpos.pricing.errors import InvalidNumber
from retailpos.pricing.numbers import parse_amount


PAYMENT_METHODS = ('cash', 'card', 'qr')
SALE_TYPES      = ('cash', 'credit')


class CheckoutError(ValueError):
    code = 'invalid_payment'


@dataclass
class Checkout:
    total: Decimal
    payment_method: str = 'cash'
    sale_type: str = 'cash'
    amount_received: Decimal = Decimal('0')
    change: Decimal = Decimal('0')
    due_date: Optional[date] = None


def validate_checkout(total: Decimal, payment_method: str, sale_type: str,
                      amount_received, client_id=None,
                      credit_term_days: int = 30, today: Optional[date] = None) -> Checkout:
    """Validate the payment for ``total`` and return the settled Checkout."""
    payment_method = (payment_method or 'cash').lower()
    sale_type = (sale_type or 'cash').lower()

    if payment_method not in PAYMENT_METHODS:
        raise CheckoutError(f'Unknown payment method "{payment_method}".')
    if sale_type not in SALE_TYPES:
        raise CheckoutError(f'Unknown sale type "{sale_type}".')
    if total <= 0:
        raise CheckoutError('Nothing to charge: the total is zero.')

    try:
        received = parse_amount(amount_received, field='amount received')
    except InvalidNumber as exc:
        raise CheckoutError(str(exc))

    if sale_type == 'credit':
        if client_id is None:
            raise CheckoutError('A credit sale needs a client.')
        today = today or date.today()
        return Checkout(
            total=total, payment_method=payment_method, sale_type=sale_type,
            amount_received=min(received, total),
            due_date=today + timedelta(days=credit_term_days),
        )

    if payment_method != 'cash':
        return Checkout(total=total, payment_method=payment_method,
                        sale_type=sale_type, amount_received=total)

    if received < total:
        raise CheckoutError(f'Amount received {received} is less than the total {total}.')
    return Checkout(
        total=total, payment_method=payment_method, sale_type=sale_type,
        amount_received=received, change=received - total,
    )

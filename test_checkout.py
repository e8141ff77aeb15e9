"""
test_checkout.py — Payment rules applied when a sale is completed.
Run: pytest test_checkout.py -v
"""
from datetime import date
from decimal import Decimal

import pytest

from retailpos.sales.checkout import CheckoutError, validate_checkout


D = Decimal


def test_cash_payment_returns_change():
    checkout = validate_checkout(D('187.50'), 'cash', 'cash', '200')
    assert checkout.amount_received == D('200')
    assert checkout.change == D('12.50')
    assert checkout.due_date is None


def test_cash_payment_short_is_rejected():
    with pytest.raises(CheckoutError):
        validate_checkout(D('50'), 'cash', 'cash', '49.99')


@pytest.mark.parametrize('method', ['card', 'qr', 'QR'])
def test_electronic_payments_are_exact(method):
    checkout = validate_checkout(D('50'), method, 'cash', '')
    assert checkout.amount_received == D('50')
    assert checkout.change == 0


def test_credit_sale_requires_client():
    with pytest.raises(CheckoutError):
        validate_checkout(D('50'), 'cash', 'credit', '0')


def test_credit_sale_gets_a_due_date_and_partial_payment():
    checkout = validate_checkout(D('50'), 'cash', 'credit', '20', client_id=4,
                                 credit_term_days=30, today=date(2026, 1, 10))
    assert checkout.amount_received == D('20')
    assert checkout.due_date == date(2026, 2, 9)


def test_credit_down_payment_is_capped_at_total():
    checkout = validate_checkout(D('50'), 'cash', 'credit', '80', client_id=4)
    assert checkout.amount_received == D('50')


@pytest.mark.parametrize('kwargs', [
    {'payment_method': 'cheque'},
    {'sale_type': 'layaway'},
    {'amount_received': 'lots'},
])
def test_unknown_inputs_are_rejected(kwargs):
    args = {'payment_method': 'cash', 'sale_type': 'cash', 'amount_received': '100'}
    args.update(kwargs)
    with pytest.raises(CheckoutError):
        validate_checkout(D('50'), **args)


def test_zero_total_cannot_be_checked_out():
    with pytest.raises(CheckoutError):
        validate_checkout(D('0'), 'cash', 'cash', '0')

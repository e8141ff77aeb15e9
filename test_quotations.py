"""
test_quotations.py — Quotation builder: no stock limit by default, client
required, numbering and due dates, and loading a quotation back into the
sales terminal.
Run: pytest test_quotations.py -v
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from retailpos import create_app, db
from retailpos.catalog.models import PriceList, Product, ProductPrice
from retailpos.quotes.models import Quotation
from retailpos.quotes.services import default_due_date, derive_tax_rate
from retailpos.sales.models import Sale


D = Decimal
YEAR = date.today().year


@pytest.fixture(scope='function')
def client():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app.test_client()
        db.session.remove()
        db.drop_all()


def make_catalog():
    general = PriceList(name='General', is_default=True)
    offers = PriceList(name='Web Offers')
    rice = Product(name='Rice 1kg', sku='RICE-1', stock=5)
    rice.prices.append(ProductPrice(price_list=general, price=D('100'), max_margin=D('30'), min_margin=D('10')))
    rice.prices.append(ProductPrice(price_list=offers, price=D('90'), max_margin=D('15'), min_margin=D('10')))
    sugar = Product(name='Sugar 1kg', sku='SUG-1', stock=0)
    sugar.prices.append(ProductPrice(price_list=general, price=D('40'), max_margin=D('8'), min_margin=D('2')))
    db.session.add_all([general, offers, rice, sugar])
    db.session.commit()
    return {'general': general, 'offers': offers, 'rice': rice, 'sugar': sugar}


def add(client, product, times=1):
    res = None
    for _ in range(times):
        res = client.post('/quotes/cart/add', json={'product_id': product.id})
    return res


def build_quote(client, cat):
    """Rice ×2 at 90 with 20% tax and a 5.00 discount for client 7."""
    add(client, cat['rice'], times=2)
    client.post('/quotes/cart/price', json={'product_id': cat['rice'].id, 'price': '90'})
    return client.post('/quotes/cart/settings', json={'tax_rate': '20', 'discount': '5', 'client_id': 7})


# ── 1. Builder ────────────────────────────────────────────────────

def test_quote_cart_is_not_limited_by_stock(client):
    cat = make_catalog()
    res = add(client, cat['sugar'], times=4)
    assert res.status_code == 200
    assert res.get_json()['lines'][0]['quantity'] == 4


def test_stock_limit_can_be_enforced_for_quotes(client):
    client.application.config['QUOTE_ENFORCE_STOCK'] = True
    cat = make_catalog()
    res = add(client, cat['sugar'])
    assert res.status_code == 400
    assert res.get_json()['code'] == 'stock_exceeded'


def test_quote_and_sale_carts_are_separate(client):
    cat = make_catalog()
    add(client, cat['rice'])
    assert client.get('/sales/cart').get_json()['lines'] == []
    assert len(client.get('/quotes/cart').get_json()['lines']) == 1


def test_quote_totals(client):
    cat = make_catalog()
    totals = {k: D(v) for k, v in build_quote(client, cat).get_json()['totals'].items()}
    assert totals['subtotal'] == D('180')
    assert totals['tax_amount'] == D('45')
    assert totals['max_global_discount'] == D('20')
    assert totals['global_discount'] == D('5')
    assert totals['final_total'] == D('220')


# ── 2. Finalize ───────────────────────────────────────────────────

def test_finalize_requires_client(client):
    cat = make_catalog()
    add(client, cat['rice'])
    res = client.post('/quotes/finalize', json={})
    assert res.status_code == 400
    assert res.get_json()['code'] == 'client_required'


def test_finalize_empty_cart(client):
    make_catalog()
    res = client.post('/quotes/finalize', json={})
    assert res.status_code == 400
    assert res.get_json()['code'] == 'empty_cart'


def test_finalize_with_defaults(client):
    cat = make_catalog()
    build_quote(client, cat)
    res = client.post('/quotes/finalize', json={})
    assert res.status_code == 201
    data = res.get_json()
    assert data['number'] == f'P-{YEAR}-0001'
    assert data['client_id'] == 7
    assert data['due_date'] == (date.today() + timedelta(days=7)).isoformat()
    assert data['notes'] == 'Prices and stock are subject to change.'
    assert D(data['total']) == D('220')
    assert D(data['items'][0]['unit_price']) == D('90')

    # quotations never touch stock, and the builder is cleared
    assert db.session.get(Product, cat['rice'].id).stock == 5
    assert client.get('/quotes/cart').get_json()['lines'] == []


def test_finalize_with_explicit_due_date_and_notes(client):
    cat = make_catalog()
    build_quote(client, cat)
    res = client.post('/quotes/finalize', json={'due_date': '2026-12-31', 'notes': 'Valid for stock on hand.'})
    data = res.get_json()
    assert data['due_date'] == '2026-12-31'
    assert data['notes'] == 'Valid for stock on hand.'


def test_finalize_with_bad_due_date(client):
    cat = make_catalog()
    build_quote(client, cat)
    res = client.post('/quotes/finalize', json={'due_date': '31/12/2026'})
    assert res.status_code == 400
    assert res.get_json()['code'] == 'invalid_date'
    assert Quotation.query.count() == 0


def test_quotation_detail(client):
    cat = make_catalog()
    build_quote(client, cat)
    quote_id = client.post('/quotes/finalize', json={}).get_json()['id']
    assert client.get(f'/quotes/{quote_id}').get_json()['number'] == f'P-{YEAR}-0001'
    assert client.get('/quotes/9999').status_code == 404


# ── 3. Load into the sales terminal ───────────────────────────────

def test_load_quotation_into_terminal(client):
    cat = make_catalog()
    build_quote(client, cat)
    quote_id = client.post('/quotes/finalize', json={}).get_json()['id']

    res = client.post(f'/sales/from-quote/{quote_id}')
    assert res.status_code == 200
    data = res.get_json()
    assert data['quotation_id'] == quote_id
    assert data['client_id'] == 7
    assert data['price_list_id'] == cat['general'].id
    assert data['tax_rate'] == '20.00'
    assert D(data['discount']) == D('5')
    assert data['lines'][0]['quantity'] == 2
    assert data['lines'][0]['has_custom_price'] is True
    assert D(data['totals']['final_total']) == D('220')

    res = client.post('/sales/complete', json={'payment_method': 'card', 'quotation_id': quote_id})
    assert res.status_code == 201
    sale = db.session.get(Sale, res.get_json()['id'])
    assert sale.quotation_id == quote_id
    assert sale.quotation.number == f'P-{YEAR}-0001'


def test_loading_clamps_to_current_stock(client):
    cat = make_catalog()
    add(client, cat['rice'], times=4)
    add(client, cat['sugar'], times=3)
    client.post('/quotes/cart/settings', json={'client_id': 3})
    quote_id = client.post('/quotes/finalize', json={}).get_json()['id']

    rice = db.session.get(Product, cat['rice'].id)
    rice.stock = 2
    db.session.commit()

    data = client.post(f'/sales/from-quote/{quote_id}').get_json()
    # sugar is out of stock and dropped, rice clamped to what is left
    assert [(l['sku'], l['quantity']) for l in data['lines']] == [('RICE-1', 2)]


def test_loading_missing_quotation(client):
    make_catalog()
    assert client.post('/sales/from-quote/42').status_code == 404


# ── 4. Helpers ────────────────────────────────────────────────────

def test_derive_tax_rate_inverts_gross_up():
    assert derive_tax_rate(D('180'), D('45')) == '20.00'
    assert derive_tax_rate(D('180'), D('0')) == ''


def test_default_due_date():
    assert default_due_date(7, today=date(2026, 3, 28)) == date(2026, 4, 4)

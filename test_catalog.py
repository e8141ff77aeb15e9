"""
test_catalog.py — Catalog browsing: search, status filters, quick access,
and the read-only catalog endpoints.
Run: pytest test_catalog.py -v
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from retailpos import create_app, db
from retailpos.catalog.loader import Catalog
from retailpos.catalog.models import PriceList, Product, ProductPrice
from retailpos.catalog.search import filter_products, quick_access
from retailpos.pricing.models import (
    PriceEntry, PriceList as PriceListSnapshot, Product as ProductSnapshot,
)


D = Decimal
NOW = datetime(2026, 6, 1, 12, 0)
LISTS = [PriceListSnapshot(1, 'General', True), PriceListSnapshot(2, 'Web Offers')]


def snapshot(pid, name, sku='', brand='', stock=0, sold=0, age_days=365, offer=False, category=None):
    prices = {1: PriceEntry(D('10'), D('3'), D('1'))}
    if offer:
        prices[2] = PriceEntry(D('9'), D('2'), D('1'))
    return ProductSnapshot(
        id=pid, name=name, sku=sku, brand=brand, category_id=category,
        stock_on_hand=stock, units_sold_90d=sold, prices=prices,
        created_at=NOW - timedelta(days=age_days),
    )


@pytest.fixture
def products():
    return [
        snapshot(1, 'Wireless Mouse', sku='MOU-1', brand='Acme', stock=4, sold=12, category=1),
        snapshot(2, 'Keyboard', sku='KEY-1', brand='Globex', stock=0, sold=40, offer=True, category=1),
        snapshot(3, 'Desk Lamp', sku='LMP-1', stock=9, sold=3, age_days=5, category=2),
    ]


# ── 1. Filters ────────────────────────────────────────────────────

def test_search_matches_name_sku_and_model(products):
    assert [p.id for p in filter_products(products, LISTS, search='mouse', now=NOW)] == [1]
    assert [p.id for p in filter_products(products, LISTS, search='key-1', now=NOW)] == [2]


@pytest.mark.parametrize('status, expected', [
    ('all', [1, 2, 3]),
    ('in_stock', [1, 3]),
    ('on_sale', [2]),
    ('new_arrival', [3]),
    ('most_sold', [2, 1, 3]),
])
def test_status_filters(products, status, expected):
    assert [p.id for p in filter_products(products, LISTS, status=status, now=NOW)] == expected


def test_unknown_status_is_rejected(products):
    with pytest.raises(ValueError):
        filter_products(products, LISTS, status='bestsellers')


def test_products_without_brand_match_no_brand(products):
    found = filter_products(products, LISTS, brands=['No Brand', 'Acme'], now=NOW)
    assert [p.id for p in found] == [1, 3]


def test_category_filter(products):
    assert [p.id for p in filter_products(products, LISTS, category_ids=[2], now=NOW)] == [3]


def test_quick_access_is_best_sellers_first(products):
    assert [p.id for p in quick_access(products, size=2)] == [2, 1]


def test_sku_lookup_is_exact(products):
    cat = Catalog(products=products, price_lists=LISTS)
    assert cat.find_by_sku(' LMP-1 ').id == 3
    assert cat.find_by_sku('LMP') is None
    assert cat.find_by_sku('') is None


# ── 2. Endpoints ──────────────────────────────────────────────────

@pytest.fixture(scope='function')
def client():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        general = PriceList(name='General', is_default=True)
        offers = PriceList(name='Web Offers')
        mouse = Product(name='Wireless Mouse', sku='MOU-1', brand='Acme', stock=4, units_sold_90d=12)
        mouse.prices.append(ProductPrice(price_list=general, price=D('25'), max_margin=D('10'), min_margin=D('2')))
        mouse.prices.append(ProductPrice(price_list=offers, price=D('22'), max_margin=D('7'), min_margin=D('2')))
        lamp = Product(name='Desk Lamp', sku='LMP-1', stock=0, units_sold_90d=30)
        lamp.prices.append(ProductPrice(price_list=general, price=D('40'), max_margin=D('12'), min_margin=D('4')))
        retired = Product(name='Old Lamp', sku='LMP-0', stock=3, is_active=False)
        db.session.add_all([general, offers, mouse, lamp, retired])
        db.session.commit()
        yield app.test_client()
        db.session.remove()
        db.drop_all()


def test_product_listing_uses_requested_price_list(client):
    offers = PriceList.query.filter_by(name='Web Offers').first()
    res = client.get(f'/catalog/products?search=mouse&price_list_id={offers.id}')
    assert res.status_code == 200
    data = res.get_json()
    assert len(data) == 1
    assert data[0]['price'] == '22.00'
    assert data[0]['default_price'] == '25.00'


def test_inactive_products_are_hidden(client):
    skus = {p['sku'] for p in client.get('/catalog/products').get_json()}
    assert skus == {'MOU-1', 'LMP-1'}


def test_in_stock_filter_endpoint(client):
    data = client.get('/catalog/products?status=in_stock').get_json()
    assert [p['sku'] for p in data] == ['MOU-1']


def test_unknown_status_endpoint_is_bad_request(client):
    res = client.get('/catalog/products?status=bogus')
    assert res.status_code == 400
    assert res.get_json()['code'] == 'bad_request'


def test_quick_access_endpoint(client):
    data = client.get('/catalog/quick').get_json()
    assert [p['sku'] for p in data] == ['LMP-1', 'MOU-1']


def test_price_lists_default_first(client):
    data = client.get('/catalog/price-lists').get_json()
    assert data[0]['name'] == 'General'
    assert data[0]['is_default'] is True


def test_health_check(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'

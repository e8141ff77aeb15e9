"""
retailpos/catalog/routes.py
---------------------------
Read-only catalog endpoints used to pick products for a cart.
"""
from flask import request, jsonify

from retailpos.catalog import catalog
from retailpos.catalog.loader import load_catalog
from retailpos.catalog.search import filter_products, quick_access
from retailpos.pricing.resolver import default_entry, resolve_price


def product_to_dict(product, price_lists, price_list_id=None) -> dict:
    entry = resolve_price(product, price_list_id, price_lists)
    return {
        'id':             product.id,
        'name':           product.name,
        'sku':            product.sku,
        'brand':          product.brand,
        'model':          product.model,
        'stock':          product.stock_on_hand,
        'price':          str(entry.list_price),
        'default_price':  str(default_entry(product, price_lists).list_price),
        'has_price':      not entry.is_unpriced,
        'units_sold_90d': product.units_sold_90d,
    }


@catalog.route('/products')
def products():
    cat = load_catalog()
    price_list_id = request.args.get('price_list_id', type=int)
    try:
        found = filter_products(
            cat.products, cat.price_lists,
            search=request.args.get('search', ''),
            status=request.args.get('status', 'all'),
            category_ids=request.args.getlist('category_id', type=int),
            brands=request.args.getlist('brand'),
        )
    except ValueError as exc:
        return jsonify({'error': str(exc), 'code': 'bad_request'}), 400

    return jsonify([product_to_dict(p, cat.price_lists, price_list_id) for p in found])


@catalog.route('/quick')
def quick():
    cat = load_catalog()
    price_list_id = request.args.get('price_list_id', type=int)
    return jsonify([
        product_to_dict(p, cat.price_lists, price_list_id)
        for p in quick_access(cat.products)
    ])


@catalog.route('/price-lists')
def price_lists():
    cat = load_catalog()
    return jsonify([
        {'id': pl.id, 'name': pl.name, 'is_default': pl.is_default}
        for pl in cat.price_lists
    ])

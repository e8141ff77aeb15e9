"""
retailpos/cart/views.py
-----------------------
Cart endpoints shared by the sales terminal and the quotation builder.

Both blueprints call ``register_cart_routes`` with their own session key and
stock policy, so the two carts behave identically except for stock limits.
Every endpoint answers with the full cart view (lines + totals); errors add
``error`` and ``code`` and leave the stored cart untouched.
"""
from functools import wraps

from flask import current_app, jsonify, request

from retailpos.cart.store import CartSession
from retailpos.pricing.errors import InvalidNumber, PricingError, StockExceeded


class ProductNotFound(PricingError):
    code = 'not_found'

    def __init__(self, ref):
        super().__init__(f'No product found for "{ref}".')


def payload() -> dict:
    """Form fields or a JSON body, whichever the client sent."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def parse_int(data: dict, name: str, required: bool = True):
    raw = data.get(name)
    if raw is None or raw == '':
        if required:
            raise InvalidNumber(name.replace('_', ' '), '')
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidNumber(name.replace('_', ' '), raw)


def cart_response(cs: CartSession, status: int = 200, error: PricingError = None, notice: str = None):
    body = cs.to_dict()
    if error is not None:
        body.update(error.to_dict())
    if notice:
        body['notice'] = notice
    return jsonify(body), status


def register_cart_routes(bp, cart_key: str, stock_policy):
    """
    Attach the cart endpoints to ``bp``.

    ``stock_policy`` is called per request and returns the stock-limit
    function for the ledger, or None for no limit.
    """

    def open_cart() -> CartSession:
        return CartSession(cart_key, stock_limit=stock_policy())

    def cart_action(f):
        """Run ``f(cs, data)``; save on success, keep the old cart on PricingError."""
        @wraps(f)
        def decorated():
            cs = open_cart()
            try:
                notice = f(cs, payload())
            except PricingError as exc:
                current_app.logger.info(f"Cart {cart_key} rejected: {exc.code} ({exc})")
                return cart_response(open_cart(), 400, error=exc)
            cs.save()
            return cart_response(cs, notice=notice)
        return decorated

    # ── View ──────────────────────────────────────────────────────

    def view_cart():
        return cart_response(open_cart())

    # ── Mutations ─────────────────────────────────────────────────

    @cart_action
    def add_item(cs, data):
        product_id = parse_int(data, 'product_id', required=False)
        if product_id is not None:
            product = cs.catalog.get(product_id)
        else:
            product = cs.catalog.find_by_sku(data.get('sku', ''))
        if product is None:
            ref = product_id if product_id is not None else data.get('sku', '')
            raise ProductNotFound(ref)
        cs.ledger.add(product)
        return None

    @cart_action
    def update_quantity(cs, data):
        product_id = parse_int(data, 'product_id')
        requested = parse_int(data, 'quantity')
        line = cs.cart.find_line(product_id)
        applied = cs.ledger.set_quantity(product_id, requested)
        if line is not None and applied < requested:
            # Clamped to stock: kept, but the user is told why
            return str(StockExceeded(line.product.name, applied))
        return None

    @cart_action
    def remove_item(cs, data):
        cs.ledger.remove(parse_int(data, 'product_id'))
        return None

    @cart_action
    def set_price(cs, data):
        cs.ledger.set_custom_price(parse_int(data, 'product_id'), data.get('price'))
        return None

    @cart_action
    def update_settings(cs, data):
        if 'price_list_id' in data:
            cs.ledger.set_price_list(parse_int(data, 'price_list_id', required=False))
        if 'tax_rate' in data:
            cs.ledger.set_tax_rate(data.get('tax_rate'))
        if 'discount' in data:
            cs.ledger.set_discount(data.get('discount'))
        if 'client_id' in data:
            cs.ledger.set_client(parse_int(data, 'client_id', required=False))
        return None

    @cart_action
    def clear(cs, data):
        cs.ledger.clear()
        return None

    bp.add_url_rule('/cart', 'cart', view_cart, methods=['GET'])
    bp.add_url_rule('/cart/add', 'add_item', add_item, methods=['POST'])
    bp.add_url_rule('/cart/quantity', 'update_quantity', update_quantity, methods=['POST'])
    bp.add_url_rule('/cart/remove', 'remove_item', remove_item, methods=['POST'])
    bp.add_url_rule('/cart/price', 'set_price', set_price, methods=['POST'])
    bp.add_url_rule('/cart/settings', 'update_settings', update_settings, methods=['POST'])
    bp.add_url_rule('/cart/clear', 'clear_cart', clear, methods=['POST'])

    return open_cart

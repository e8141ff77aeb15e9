"""
retailpos/cart/store.py
-----------------------
Session persistence for carts.

Each cart lives in the Flask session under its own key ('sale_cart',
'quote_cart'):
{
    "lines":         [{"product_id": int, "quantity": int}, ...],
    "custom_prices": {"<product_id>": "80.00", ...},   ← strings, JSON-safe
    "price_list_id": int | null,
    "tax_rate":      str,
    "discount":      str,
    "client_id":     int | null
}

Only identities and typed inputs are stored. Products and prices are
re-read from the catalog on every request, so a cart never carries stale
prices; lines whose product disappeared are dropped on load.
"""
from decimal import Decimal
from typing import Optional

from flask import current_app, session

from retailpos.catalog.loader import Catalog, load_catalog
from retailpos.pricing.ledger import CartLedger, StockLimit
from retailpos.pricing.models import Cart, CartLine
from retailpos.pricing.resolver import default_price_list
from retailpos.pricing.totals import compute_totals, price_lines


SALE_CART_KEY  = 'sale_cart'
QUOTE_CART_KEY = 'quote_cart'


# ── Read ──────────────────────────────────────────────────────────

def load_cart(key: str, catalog: Catalog) -> Cart:
    """Rebuild the Cart stored under ``key`` against the current catalog."""
    data = session.get(key) or {}
    products = catalog.by_id

    cart = Cart(
        tax_rate=data.get('tax_rate', ''),
        discount_input=data.get('discount', ''),
        client_id=data.get('client_id'),
    )

    list_ids = {pl.id for pl in catalog.price_lists}
    price_list_id = data.get('price_list_id')
    if price_list_id not in list_ids:
        default = default_price_list(catalog.price_lists)
        price_list_id = default.id if default else None
    cart.price_list_id = price_list_id

    for raw in data.get('lines', []):
        product = products.get(raw.get('product_id'))
        quantity = int(raw.get('quantity', 0))
        if product is None or quantity < 1:
            continue
        cart.lines.append(CartLine(product=product, quantity=quantity))

    line_ids = {line.product.id for line in cart.lines}
    for pid, price in (data.get('custom_prices') or {}).items():
        if int(pid) in line_ids:
            cart.custom_prices[int(pid)] = Decimal(price)

    return cart


# ── Write ─────────────────────────────────────────────────────────

def save_cart(key: str, cart: Cart) -> None:
    session[key] = {
        'lines':         [{'product_id': l.product.id, 'quantity': l.quantity} for l in cart.lines],
        'custom_prices': {str(pid): str(price) for pid, price in cart.custom_prices.items()},
        'price_list_id': cart.price_list_id,
        'tax_rate':      cart.tax_rate,
        'discount':      cart.discount_input,
        'client_id':     cart.client_id,
    }
    session.modified = True


def clear_cart(key: str) -> None:
    """Forget the cart entirely (after a committed sale or quotation)."""
    session.pop(key, None)
    session.modified = True


# ── Request-scoped cart ───────────────────────────────────────────

class CartSession:
    """
    One request's view of a session cart: catalog snapshot, cart, ledger.

    Mutations go through ``ledger``; nothing reaches the session until
    ``save()`` is called, so a failed operation leaves the stored cart as it
    was. Overrides that no longer fit the current catalog are dropped on
    load.
    """

    def __init__(self, key: str, stock_limit: Optional[StockLimit] = None,
                 catalog: Optional[Catalog] = None):
        self.key = key
        self.catalog = catalog or load_catalog()
        self.cart = load_cart(key, self.catalog)
        self.ledger = CartLedger(self.cart, self.catalog.price_lists, stock_limit)
        # Prices may have been edited since the cart was saved
        self.ledger.prune_overrides()

    @property
    def price_lists(self):
        return self.catalog.price_lists

    def totals(self):
        quantum = Decimal(current_app.config.get('MONEY_QUANTUM', '0.01'))
        return compute_totals(self.cart, self.price_lists, quantum)

    def save(self) -> None:
        save_cart(self.key, self.cart)

    def clear(self) -> None:
        clear_cart(self.key)

    def to_dict(self) -> dict:
        lines = []
        for line, entry, price in price_lines(self.cart, self.price_lists):
            lines.append({
                'product_id':       line.product.id,
                'name':             line.product.name,
                'sku':              line.product.sku,
                'quantity':         line.quantity,
                'unit_price':       str(price),
                'original_price':   str(entry.list_price),
                'min_price':        str(entry.min_price),
                'has_custom_price': line.product.id in self.cart.custom_prices,
                'line_total':       str(price * line.quantity),
                'stock':            line.product.stock_on_hand,
            })
        return {
            'lines':         lines,
            'item_count':    self.cart.item_count,
            'price_list_id': self.cart.price_list_id,
            'tax_rate':      self.cart.tax_rate,
            'discount':      self.cart.discount_input,
            'client_id':     self.cart.client_id,
            'totals':        self.totals().to_dict(),
        }

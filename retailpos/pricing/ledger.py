"""
retailpos/pricing/ledger.py
---------------------------
CartLedger — the only way a Cart is mutated.

Every operation either completes or raises before touching state, so the
cart invariants hold between any two calls:

  * every line has quantity >= 1
  * every custom price belongs to a line in the cart
  * every custom price lies within [min_price, list_price] of its line

Stock limits are a policy passed in by the caller. The sales terminal limits
quantities to stock on hand; the quotation builder does not (unless
configured to).
"""
import logging
from decimal import Decimal
from typing import Callable, Iterable, Optional

from retailpos.pricing.errors import PricingError, StockExceeded, Unpriced
from retailpos.pricing.models import Cart, CartLine, PriceEntry, Product
from retailpos.pricing.numbers import parse_amount, parse_rate
from retailpos.pricing.resolver import default_price_list, resolve_price
from retailpos.pricing.validators import is_within_bounds, validate_custom_price


logger = logging.getLogger(__name__)

StockLimit = Callable[[Product], Optional[int]]


def stock_on_hand(product: Product) -> Optional[int]:
    """Stock-limit policy of the sales terminal."""
    return product.stock_on_hand


class CartLedger:

    def __init__(self, cart: Cart, price_lists, stock_limit: Optional[StockLimit] = None):
        self.cart = cart
        self.price_lists = list(price_lists)
        self.stock_limit = stock_limit

    # ── Helpers ───────────────────────────────────────────────────

    def resolve(self, product: Product) -> PriceEntry:
        return resolve_price(product, self.cart.price_list_id, self.price_lists)

    def _limit_for(self, product: Product) -> Optional[int]:
        if self.stock_limit is None:
            return None
        return self.stock_limit(product)

    def _drop_override(self, product_id) -> None:
        self.cart.custom_prices.pop(product_id, None)

    # ── Lines ─────────────────────────────────────────────────────

    def add(self, product: Product) -> CartLine:
        """
        Add one unit of ``product``.

        Raises Unpriced for products without a price and StockExceeded when
        the stock limit would be passed; the cart is left untouched.
        """
        if self.resolve(product).is_unpriced:
            raise Unpriced(product.name)

        line = self.cart.find_line(product.id)
        wanted = (line.quantity if line else 0) + 1

        limit = self._limit_for(product)
        if limit is not None and wanted > limit:
            raise StockExceeded(product.name, limit)

        if line is None:
            line = CartLine(product=product, quantity=1)
            self.cart.lines.append(line)
        else:
            line.quantity = wanted
        return line

    def set_quantity(self, product_id, quantity: int) -> int:
        """
        Set the quantity of a line; ``quantity <= 0`` removes it.

        Returns the quantity actually applied, which is lower than requested
        when the stock limit clamps it. Raises PricingError when the product
        has no line.
        """
        if quantity <= 0:
            self.remove(product_id)
            return 0

        line = self.cart.find_line(product_id)
        if line is None:
            raise PricingError('That product is not in the cart.')

        limit = self._limit_for(line.product)
        if limit is not None and quantity > limit:
            logger.warning(
                "Quantity for product %s clamped from %s to %s (stock)",
                product_id, quantity, limit,
            )
            quantity = limit
            if quantity <= 0:
                self.remove(product_id)
                return 0

        line.quantity = quantity
        return quantity

    def remove(self, product_id) -> None:
        """Remove a line and its custom price. Removing twice is a no-op."""
        self.cart.lines = [l for l in self.cart.lines if l.product.id != product_id]
        self._drop_override(product_id)

    def clear(self) -> None:
        """Back to an empty cart; the selected price list is kept."""
        self.cart.lines = []
        self.cart.custom_prices = {}
        self.cart.tax_rate = ''
        self.cart.discount_input = ''
        self.cart.client_id = None

    # ── Custom prices ─────────────────────────────────────────────

    def set_custom_price(self, product_id, proposed) -> Optional[Decimal]:
        """
        Validate and store a manual unit price for one line.

        A price equal to the list price removes the override instead of
        storing it. Returns the stored price, or None when no override
        remains. On a validation error nothing changes.
        """
        line = self.cart.find_line(product_id)
        if line is None:
            raise PricingError('That product is not in the cart.')

        entry = self.resolve(line.product)
        price = validate_custom_price(entry, proposed)

        if price == entry.list_price:
            self._drop_override(product_id)
            return None
        self.cart.custom_prices[product_id] = price
        return price

    def prune_overrides(self) -> None:
        """
        Drop custom prices that no longer fit the resolved entries.

        Needed whenever the entries may have moved under the cart: a price
        list switch, or a catalog edit between two requests.
        """
        for line in self.cart.lines:
            custom = self.cart.custom_prices.get(line.product.id)
            if custom is None:
                continue
            entry = self.resolve(line.product)
            if custom == entry.list_price or not is_within_bounds(entry, custom):
                logger.info(
                    "Dropping custom price %s for product %s: no longer within %s-%s",
                    custom, line.product.id, entry.min_price, entry.list_price,
                )
                self._drop_override(line.product.id)

    # ── Cart settings ─────────────────────────────────────────────

    def set_price_list(self, price_list_id) -> None:
        if price_list_id is not None and not any(pl.id == price_list_id for pl in self.price_lists):
            raise PricingError(f'Unknown price list {price_list_id}.')
        self.cart.price_list_id = price_list_id
        self.prune_overrides()

    def use_default_price_list(self) -> None:
        default = default_price_list(self.price_lists)
        self.set_price_list(default.id if default else None)

    def set_tax_rate(self, raw) -> None:
        parse_rate(raw)
        self.cart.tax_rate = '' if raw is None else str(raw).strip()

    def set_discount(self, raw) -> None:
        parse_amount(raw, field='discount')
        self.cart.discount_input = '' if raw is None else str(raw).strip()

    def set_client(self, client_id) -> None:
        self.cart.client_id = client_id

    # ── Bulk load ─────────────────────────────────────────────────

    def load_lines(self, items: Iterable, products_by_id: dict) -> None:
        """
        Replace the cart lines with ``items`` of (product_id, quantity, unit_price).

        Products no longer in the catalog are skipped. Quantities go through
        the stock limit; unit prices go through the custom-price validator and
        fall back to the list price when they no longer fit.
        """
        self.cart.lines = []
        self.cart.custom_prices = {}

        for product_id, quantity, unit_price in items:
            product = products_by_id.get(product_id)
            if product is None:
                logger.info("Skipping product %s: no longer in the catalog", product_id)
                continue
            if quantity <= 0 or self.resolve(product).is_unpriced:
                continue
            self.cart.lines.append(CartLine(product=product, quantity=1))
            if self.set_quantity(product_id, quantity) == 0:
                continue
            if unit_price is None:
                continue
            try:
                self.set_custom_price(product_id, unit_price)
            except PricingError as exc:
                logger.warning(
                    "Custom price %s for product %s no longer valid (%s); using list price",
                    unit_price, product_id, exc.code,
                )

"""
retailpos/pricing/errors.py
---------------------------
Errors raised by the pricing engine.

Every error is a ValueError so callers that already guard user input with
``except ValueError`` keep working. ``code`` is stable and safe to send to
clients; ``str(exc)`` is the user-facing message.
"""
from decimal import Decimal


class PricingError(ValueError):
    code = 'pricing_error'

    def to_dict(self) -> dict:
        return {'error': str(self), 'code': self.code}


class InvalidNumber(PricingError):
    """A manual price, tax rate or discount is not a usable number."""
    code = 'invalid_number'

    def __init__(self, field: str, raw):
        self.field = field
        self.raw = raw
        super().__init__(f'"{raw}" is not a valid {field}.')


class BelowMinimumMargin(PricingError):
    code = 'below_minimum_margin'

    def __init__(self, min_price: Decimal):
        self.min_price = min_price
        super().__init__(f'Price cannot be lower than {min_price}.')


class AboveListPrice(PricingError):
    code = 'above_list_price'

    def __init__(self, original_price: Decimal):
        self.original_price = original_price
        super().__init__(f'Price cannot be higher than the list price of {original_price}.')


class StockExceeded(PricingError):
    code = 'stock_exceeded'

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        if available <= 0:
            msg = f'"{product_name}" is out of stock.'
        else:
            msg = f'Only {available} unit(s) of "{product_name}" available.'
        super().__init__(msg)


class Unpriced(PricingError):
    """The product resolves to an all-zero price entry and cannot be sold."""
    code = 'unpriced'

    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f'"{product_name}" has no price assigned.')


class CartInvariantError(PricingError):
    """Raised before commit when a cart snapshot is not consistent."""
    code = 'cart_invariant'

"""
retailpos.pricing
-----------------
Cart pricing and discount-allocation engine shared by the sales terminal
and the quotation builder. Pure Python, no Flask and no database access.
"""
from retailpos.pricing.errors import (  # noqa: F401
    PricingError, InvalidNumber, BelowMinimumMargin, AboveListPrice,
    StockExceeded, Unpriced, CartInvariantError,
)
from retailpos.pricing.models import (  # noqa: F401
    PriceEntry, PriceList, Product, CartLine, Cart, Totals, CommitLine, ZERO_ENTRY,
)
from retailpos.pricing.resolver import resolve_price, default_price_list  # noqa: F401
from retailpos.pricing.validators import validate_custom_price  # noqa: F401
from retailpos.pricing.ledger import CartLedger, stock_on_hand  # noqa: F401
from retailpos.pricing.totals import (  # noqa: F401
    compute_totals, commit_lines, check_invariants, price_lines,
)

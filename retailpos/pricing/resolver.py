"""
retailpos/pricing/resolver.py
-----------------------------
Price-list resolution: active list → default list → zero entry.

Lists other than the default are optional overlays. A list without an active
rule for a product is not an error, it inherits from the default list.
"""
from typing import Iterable, Optional

from retailpos.pricing.models import PriceEntry, PriceList, Product, ZERO_ENTRY


def default_price_list(price_lists: Iterable[PriceList]) -> Optional[PriceList]:
    for price_list in price_lists:
        if price_list.is_default:
            return price_list
    return None


def default_entry(product: Product, price_lists: Iterable[PriceList]) -> PriceEntry:
    default = default_price_list(price_lists)
    if default is None:
        return ZERO_ENTRY
    return product.prices.get(default.id) or ZERO_ENTRY


def resolve_price(product: Product, active_list_id, price_lists) -> PriceEntry:
    """
    Return the price entry that applies to ``product`` on ``active_list_id``.

    Never fails: an all-zero entry means the product is unpriced.
    """
    entry = product.prices.get(active_list_id) if active_list_id is not None else None
    if entry is not None and entry.is_active:
        return entry
    return default_entry(product, price_lists)


def is_on_sale(product: Product, price_lists) -> bool:
    """True when a non-default list carries a positive price for the product."""
    default = default_price_list(price_lists)
    default_id = default.id if default else None
    return any(
        list_id != default_id and entry.list_price > 0
        for list_id, entry in product.prices.items()
    )

"""
retailpos/catalog/search.py
---------------------------
Product browsing for the terminal and the quotation builder: free-text
search, status filters and the quick-access strip.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from retailpos.pricing.models import Product
from retailpos.pricing.resolver import is_on_sale


STATUSES = ('all', 'in_stock', 'most_sold', 'on_sale', 'new_arrival')
NEW_ARRIVAL_DAYS = 30
QUICK_ACCESS_SIZE = 8


def _matches_search(product: Product, term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    return any(term in (value or '').lower() for value in (product.name, product.sku, product.model))


def _matches_status(product: Product, status: str, price_lists, now: datetime) -> bool:
    if status == 'in_stock':
        return (product.stock_on_hand or 0) > 0
    if status == 'on_sale':
        return is_on_sale(product, price_lists)
    if status == 'new_arrival':
        return product.created_at is not None and \
            product.created_at > now - timedelta(days=NEW_ARRIVAL_DAYS)
    return True


def filter_products(products: Iterable[Product], price_lists,
                    search: str = '', status: str = 'all',
                    category_ids: Optional[list] = None,
                    brands: Optional[list] = None,
                    now: Optional[datetime] = None) -> List[Product]:
    """
    Filter catalog products.

    ``most_sold`` keeps every product but orders by units sold in the last
    90 days. Products without a brand match the brand name "No Brand".
    """
    if status not in STATUSES:
        raise ValueError(f'Unknown status "{status}".')
    now = now or datetime.utcnow()
    category_ids = category_ids or []
    brands = brands or []

    result = [
        p for p in products
        if _matches_status(p, status, price_lists, now)
        and (not category_ids or p.category_id in category_ids)
        and (not brands or (p.brand or 'No Brand') in brands)
        and _matches_search(p, search.strip())
    ]
    if status == 'most_sold':
        result.sort(key=lambda p: p.units_sold_90d, reverse=True)
    return result


def quick_access(products: Iterable[Product], size: int = QUICK_ACCESS_SIZE) -> List[Product]:
    """Best sellers of the last 90 days."""
    return sorted(products, key=lambda p: p.units_sold_90d, reverse=True)[:size]

"""
retailpos/catalog/loader.py
---------------------------
Loads the active catalog into engine snapshots, once per request.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import selectinload

from retailpos.catalog.models import PriceList, Product
from retailpos.pricing.models import PriceList as PriceListSnapshot, Product as ProductSnapshot


@dataclass
class Catalog:
    products: List[ProductSnapshot] = field(default_factory=list)
    price_lists: List[PriceListSnapshot] = field(default_factory=list)

    @property
    def by_id(self) -> Dict[int, ProductSnapshot]:
        return {p.id: p for p in self.products}

    def get(self, product_id) -> Optional[ProductSnapshot]:
        return self.by_id.get(product_id)

    def find_by_sku(self, sku: str) -> Optional[ProductSnapshot]:
        term = (sku or '').strip()
        if not term:
            return None
        for product in self.products:
            if product.sku == term:
                return product
        return None


def load_catalog() -> Catalog:
    products = (
        Product.query
        .options(selectinload(Product.prices))
        .filter_by(is_active=True)
        .order_by(Product.name)
        .all()
    )
    price_lists = PriceList.query.order_by(PriceList.is_default.desc(), PriceList.name).all()
    return Catalog(
        products=[p.to_snapshot() for p in products],
        price_lists=[pl.to_snapshot() for pl in price_lists],
    )

"""
retailpos/catalog/seed.py
-------------------------
Demo catalog used by ``flask seed-demo``.
"""
import random
from decimal import Decimal

from retailpos import db
from retailpos.catalog.models import PriceList, Product, ProductPrice


NAMES = ['Wireless Mouse', 'Keyboard', 'Monitor 24"', 'USB Cable', 'Laptop Stand',
         'Notebook', 'Pen Set', 'Desk Lamp', 'Headphones', 'Speaker']
BRANDS = ['Acme', 'Globex', 'Initech', None]


def seed_demo_catalog(count: int = 25) -> int:
    """Create the default and web-offer lists and ``count`` priced products."""
    default = PriceList.query.filter_by(is_default=True).first()
    if default is None:
        default = PriceList(name='General', is_default=True)
        db.session.add(default)
    offers = PriceList.query.filter_by(name='Web Offers').first()
    if offers is None:
        offers = PriceList(name='Web Offers', is_default=False)
        db.session.add(offers)
    db.session.flush()

    if Product.query.count() >= 5:
        db.session.commit()
        return 0

    for i in range(1, count + 1):
        cost = Decimal(random.randint(20, 2000))
        margin = (cost * Decimal('0.40')).quantize(Decimal('1'))
        product = Product(
            name=f"{random.choice(NAMES)} {i}",
            sku=f"DEMO{i:03d}",
            brand=random.choice(BRANDS),
            stock=random.randint(0, 100),
            units_sold_90d=random.randint(0, 300),
        )
        product.prices.append(ProductPrice(
            price_list=default, price=cost + margin,
            max_margin=margin, min_margin=(margin / 4).quantize(Decimal('1')),
        ))
        if i % 4 == 0:
            offer_margin = (margin * Decimal('0.75')).quantize(Decimal('1'))
            product.prices.append(ProductPrice(
                price_list=offers, price=cost + offer_margin,
                max_margin=offer_margin, min_margin=(margin / 4).quantize(Decimal('1')),
            ))
        db.session.add(product)

    db.session.commit()
    return count

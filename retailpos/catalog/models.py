from datetime import datetime
from decimal import Decimal
from retailpos import db
from retailpos.pricing.models import PriceEntry, PriceList as PriceListSnapshot, Product as ProductSnapshot


def _money(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal('0')


class PriceList(db.Model):
    """A named set of per-product prices. Exactly one is the default."""
    __tablename__ = 'price_lists'

    id         = db.Column(db.Integer, primary_key=True)
    name       = db.Column(db.String(100), nullable=False, unique=True)
    is_default = db.Column(db.Boolean, nullable=False, default=False)

    def to_snapshot(self) -> PriceListSnapshot:
        return PriceListSnapshot(id=self.id, name=self.name, is_default=self.is_default)

    def __repr__(self):
        return f"<PriceList {self.name!r}{' default' if self.is_default else ''}>"


class Product(db.Model):
    """A sellable catalog product."""
    __tablename__ = 'products'

    id             = db.Column(db.Integer, primary_key=True)
    name           = db.Column(db.String(200), nullable=False, index=True)
    sku            = db.Column(db.String(100), unique=True, nullable=False, index=True)
    brand          = db.Column(db.String(100), nullable=True)
    model          = db.Column(db.String(100), nullable=True)
    category_id    = db.Column(db.Integer, nullable=True, index=True)
    stock          = db.Column(db.Integer, nullable=False, default=0)
    units_sold_90d = db.Column(db.Integer, nullable=False, default=0)
    is_active      = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at     = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    prices = db.relationship('ProductPrice', backref='product', lazy='select',
                             cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('stock >= 0', name='check_stock_non_negative'),
    )

    def to_snapshot(self) -> ProductSnapshot:
        """Read-only engine record; prices keyed by price list id."""
        return ProductSnapshot(
            id=self.id,
            name=self.name,
            sku=self.sku,
            brand=self.brand or '',
            model=self.model or '',
            category_id=self.category_id,
            stock_on_hand=self.stock,
            units_sold_90d=self.units_sold_90d or 0,
            created_at=self.created_at,
            prices={p.price_list_id: p.to_entry() for p in self.prices},
        )

    def __repr__(self):
        return f"<Product {self.sku!r} {self.name!r}>"


class ProductPrice(db.Model):
    """
    Price of one product on one list.

    ``max_margin`` is the profit built into ``price``; zero means the list
    has no active rule for this product. ``min_margin`` is the floor a
    discounted price must keep.
    """
    __tablename__ = 'product_prices'

    product_id    = db.Column(db.Integer, db.ForeignKey('products.id'), primary_key=True)
    price_list_id = db.Column(db.Integer, db.ForeignKey('price_lists.id'), primary_key=True)
    price         = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    max_margin    = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    min_margin    = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    price_list = db.relationship('PriceList', lazy='select')

    __table_args__ = (
        db.CheckConstraint('price >= 0', name='check_list_price_non_negative'),
        db.CheckConstraint('max_margin >= 0 AND min_margin >= 0', name='check_margins_non_negative'),
    )

    def to_entry(self) -> PriceEntry:
        return PriceEntry(
            list_price=_money(self.price),
            max_margin=_money(self.max_margin),
            min_margin=_money(self.min_margin),
        )


class StockMovement(db.Model):
    """
    Audit trail for stock changes made by committed sales.
    """
    __tablename__ = 'stock_movements'

    id         = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    old_stock  = db.Column(db.Integer, nullable=False)
    new_stock  = db.Column(db.Integer, nullable=False)
    reason     = db.Column(db.String(255), nullable=False)
    timestamp  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    product = db.relationship('Product', backref=db.backref('movements', lazy='select'))

    def __repr__(self):
        return f"<StockMovement product={self.product_id} {self.old_stock}->{self.new_stock}>"

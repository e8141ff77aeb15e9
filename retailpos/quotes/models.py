from datetime import datetime
from retailpos import db


class Quotation(db.Model):
    """
    A priced offer to a client. Quotations never touch stock; they may be
    loaded into the sales terminal later.
    """
    __tablename__ = 'quotations'

    id         = db.Column(db.Integer, primary_key=True)
    number     = db.Column(db.String(20), unique=True, nullable=False, index=True)
    client_id  = db.Column(db.Integer, nullable=False, index=True)
    issued_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    due_date   = db.Column(db.Date, nullable=True)
    subtotal   = db.Column(db.Numeric(12, 2), nullable=False)
    tax_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount   = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total      = db.Column(db.Numeric(12, 2), nullable=False)
    notes      = db.Column(db.Text, nullable=True)

    items = db.relationship('QuotationItem', backref='quotation', lazy='select',
                            cascade='all, delete-orphan')
    sales = db.relationship('Sale', backref='quotation', lazy='select')

    def to_dict(self) -> dict:
        return {
            'id':         self.id,
            'number':     self.number,
            'client_id':  self.client_id,
            'issued_at':  self.issued_at.isoformat(),
            'due_date':   self.due_date.isoformat() if self.due_date else None,
            'subtotal':   str(self.subtotal),
            'tax_amount': str(self.tax_amount),
            'discount':   str(self.discount),
            'total':      str(self.total),
            'notes':      self.notes,
            'items':      [item.to_dict() for item in self.items],
        }

    def __repr__(self):
        return f"<Quotation {self.number!r} {self.total}>"


class QuotationItem(db.Model):
    __tablename__ = 'quotation_items'

    id          = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey('quotations.id'), nullable=False)
    product_id  = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity    = db.Column(db.Integer, nullable=False)
    unit_price  = db.Column(db.Numeric(12, 2), nullable=False)
    unit_cost   = db.Column(db.Numeric(12, 2), nullable=False)

    product = db.relationship('Product', lazy='select')

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'quantity':   self.quantity,
            'unit_price': str(self.unit_price),
            'unit_cost':  str(self.unit_cost),
        }

    def __repr__(self):
        return f"<QuotationItem quotation={self.quotation_id} product={self.product_id} qty={self.quantity}>"

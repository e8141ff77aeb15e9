from datetime import datetime
from decimal import Decimal
from retailpos import db


SALE_KIND      = 'sale'
QUOTATION_KIND = 'quotation'
DOCUMENT_KINDS = (SALE_KIND, QUOTATION_KIND)

DOCUMENT_PREFIXES = {
    SALE_KIND:      'V',
    QUOTATION_KIND: 'P',
}


def format_document_number(kind: str, year: int, seq: int) -> str:
    """e.g. V-2026-0042 for a sale, P-2026-0007 for a quotation."""
    return f"{DOCUMENT_PREFIXES[kind]}-{year}-{seq:04d}"


class DocumentSequence(db.Model):
    """
    One row per (document kind, calendar year) holding the last number used.

    A counter row locked with SELECT … FOR UPDATE serialises concurrent
    commits; COUNT(*) inside a transaction would hand the same number to two
    cashiers.
    """
    __tablename__ = 'document_sequences'

    kind     = db.Column(db.String(20), primary_key=True)
    year     = db.Column(db.Integer, primary_key=True)
    last_seq = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<DocumentSequence {self.kind} year={self.year} last_seq={self.last_seq}>"


class Sale(db.Model):
    """
    One committed sale. Totals are the engine's Totals at commit time.
    """
    __tablename__ = 'sales'

    id              = db.Column(db.Integer, primary_key=True)
    number          = db.Column(db.String(20), unique=True, nullable=False, index=True)
    client_id       = db.Column(db.Integer, nullable=True, index=True)
    quotation_id    = db.Column(db.Integer, db.ForeignKey('quotations.id'), nullable=True)
    subtotal        = db.Column(db.Numeric(12, 2), nullable=False)
    tax_amount      = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount        = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total           = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method  = db.Column(db.String(20), nullable=False, default='cash')
    sale_type       = db.Column(db.String(20), nullable=False, default='cash')
    amount_received = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    change_given    = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    due_date        = db.Column(db.Date, nullable=True)
    created_at      = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    items = db.relationship('SaleItem', backref='sale', lazy='select',
                            cascade='all, delete-orphan')

    @property
    def balance_due(self) -> Decimal:
        """Outstanding amount of a credit sale."""
        if self.sale_type != 'credit':
            return Decimal('0')
        paid = Decimal(str(self.amount_received or 0))
        return max(Decimal('0'), Decimal(str(self.total)) - paid)

    @property
    def margin(self) -> Decimal:
        """Gross profit after the global discount, at the costs recorded on the items."""
        cost = sum((Decimal(str(i.unit_cost)) * i.quantity for i in self.items), Decimal('0'))
        return Decimal(str(self.subtotal)) - Decimal(str(self.discount)) - cost

    def to_dict(self) -> dict:
        return {
            'id':              self.id,
            'number':          self.number,
            'client_id':       self.client_id,
            'subtotal':        str(self.subtotal),
            'tax_amount':      str(self.tax_amount),
            'discount':        str(self.discount),
            'total':           str(self.total),
            'payment_method':  self.payment_method,
            'sale_type':       self.sale_type,
            'amount_received': str(self.amount_received),
            'change':          str(self.change_given),
            'due_date':        self.due_date.isoformat() if self.due_date else None,
            'margin':          str(self.margin),
            'balance_due':     str(self.balance_due),
            'items':           [item.to_dict() for item in self.items],
        }

    def __repr__(self):
        return f"<Sale {self.number!r} {self.total}>"


class SaleItem(db.Model):
    """
    One line of a sale, with the unit price actually charged and the unit
    cost implied by the price list, so later price edits don't alter history.
    """
    __tablename__ = 'sale_items'

    id         = db.Column(db.Integer, primary_key=True)
    sale_id    = db.Column(db.Integer, db.ForeignKey('sales.id'), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity   = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    unit_cost  = db.Column(db.Numeric(12, 2), nullable=False)
    subtotal   = db.Column(db.Numeric(12, 2), nullable=False)

    product = db.relationship('Product', lazy='select')

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'quantity':   self.quantity,
            'unit_price': str(self.unit_price),
            'unit_cost':  str(self.unit_cost),
            'subtotal':   str(self.subtotal),
        }

    def __repr__(self):
        return f"<SaleItem sale={self.sale_id} product={self.product_id} qty={self.quantity}>"

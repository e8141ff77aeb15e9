"""
retailpos/pricing/models.py
---------------------------
In-memory records the pricing engine works on.

The catalog hands the engine ``Product`` and ``PriceList`` snapshots; the
engine never touches the database. ``Cart`` is the only mutable record and is
changed exclusively through ``CartLedger``.

All money is Decimal, never float.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


ZERO = Decimal('0')


@dataclass(frozen=True)
class PriceEntry:
    """Price of one product on one price list, with its margin envelope."""
    list_price: Decimal = ZERO
    max_margin: Decimal = ZERO
    min_margin: Decimal = ZERO

    @property
    def is_active(self) -> bool:
        """A list with no configured margin inherits from the default list."""
        return self.max_margin > 0

    @property
    def is_unpriced(self) -> bool:
        return self.list_price <= 0

    @property
    def cost(self) -> Decimal:
        # Cost is never stored, always derived
        return self.list_price - self.max_margin

    @property
    def min_price(self) -> Decimal:
        return self.cost + self.min_margin

    @property
    def available_margin(self) -> Decimal:
        return self.max_margin - self.min_margin


ZERO_ENTRY = PriceEntry()


@dataclass(frozen=True)
class PriceList:
    id: int
    name: str
    is_default: bool = False


@dataclass
class Product:
    id: int
    name: str
    prices: Dict[int, PriceEntry] = field(default_factory=dict)
    sku: str = ''
    brand: str = ''
    model: str = ''
    category_id: Optional[int] = None
    # None means "stock is not tracked for this snapshot"
    stock_on_hand: Optional[int] = None
    units_sold_90d: int = 0
    created_at: Optional[datetime] = None


@dataclass
class CartLine:
    product: Product
    quantity: int = 1


@dataclass
class Cart:
    """
    Transient cart state for one terminal or quotation builder.

    ``custom_prices`` maps product id → overridden unit price. ``tax_rate``
    and ``discount_input`` are kept exactly as typed; they are normalised
    only when totals are computed.
    """
    lines: List[CartLine] = field(default_factory=list)
    custom_prices: Dict[int, Decimal] = field(default_factory=dict)
    price_list_id: Optional[int] = None
    tax_rate: str = ''
    discount_input: str = ''
    client_id: Optional[int] = None

    def find_line(self, product_id) -> Optional[CartLine]:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass
class Totals:
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    global_discount: Decimal = ZERO
    max_global_discount: Decimal = ZERO
    final_total: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            'subtotal':            str(self.subtotal),
            'tax_amount':          str(self.tax_amount),
            'global_discount':     str(self.global_discount),
            'max_global_discount': str(self.max_global_discount),
            'final_total':         str(self.final_total),
        }


@dataclass(frozen=True)
class CommitLine:
    """One finalized line handed to the commit sale / quotation operation."""
    product_id: int
    quantity: int
    unit_price: Decimal
    unit_cost: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, List, Optional, Union

Money = Union[int, Decimal]


@dataclass(slots=True)
class Product:
    id: str
    name: str
    val: Money
    original_val: Money
    q: int
    on_sale: bool = False
    suggest_sale: bool = False


@dataclass(slots=True)
class CartLine:
    """
    Строка корзины. `product`: ссылка на товар из каталога (не копия),
    поэтому цена и остаток всегда актуальны на момент чтения.
    """

    product: Optional[Product]
    quantity: int


@dataclass(slots=True)
class ItemDiscount:
    product: Product
    quantity: int
    item_total: Decimal
    discount_rate: Decimal

    def __iter__(self) -> Iterator:
        yield self.item_total
        yield self.discount_rate


@dataclass(slots=True)
class ItemDiscountNotice:
    name: str
    discount_percent: int


@dataclass(slots=True)
class LoyaltyBreakdown:
    base_points: int = 0
    tuesday_points: int = 0
    set_bonus: int = 0
    quantity_bonus: int = 0
    details: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.tuesday_points + self.set_bonus + self.quantity_bonus


@dataclass(slots=True)
class CartTotals:
    cart_total: int = 0
    loyalty_points: int = 0
    discount_label: str = ""

    subtotal: Decimal = Decimal("0")
    final_total: Decimal = Decimal("0")
    total_quantity: int = 0
    bulk_applied: bool = False
    tuesday_applied: bool = False
    item_discounts: List[ItemDiscountNotice] = field(default_factory=list)
    loyalty: LoyaltyBreakdown = field(default_factory=LoyaltyBreakdown)

    def __iter__(self) -> Iterator:
        # (cart_total, loyalty_points, discount_label)
        yield self.cart_total
        yield self.loyalty_points
        yield self.discount_label

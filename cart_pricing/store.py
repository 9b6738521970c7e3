from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from cart_pricing import rules
from cart_pricing.models import CartLine, Money, Product

logger = logging.getLogger(__name__)


class Store:
    """
    Единственный владелец состояния: каталог (со складом и ценами) и корзина.

    Менять состояние можно только через сервисы, которые работают со Store.
    Корзина хранит только количества по id товара; сам товар подставляется
    из каталога при чтении (`cart_lines`).

    Храним:
    - каталог в порядке добавления
    - корзину (id -> количество) в порядке добавления
    - последний выбранный товар (нужен рекомендательной распродаже)
    - список логов (для демонстрации и тестов)
    """

    def __init__(self) -> None:
        self.products: Dict[str, Product] = {}
        self.cart: Dict[str, int] = {}
        self.last_selected: Optional[str] = None

        self.logs: List[str] = []

    def log(self, message: str) -> None:
        self.logs.append(message)
        logger.info(message)

    def get_product(self, product_id: str) -> Optional[Product]:
        product = self.products.get(product_id)
        if product is None:
            product = self.products.get(rules.canonical_product_id(product_id))
        return product

    def cart_lines(self) -> List[CartLine]:
        lines: List[CartLine] = []
        for product_id, quantity in self.cart.items():
            product = self.products.get(product_id)
            if product is None or quantity <= 0:
                continue
            lines.append(CartLine(product=product, quantity=quantity))
        return lines

    def item_count(self) -> int:
        return sum(self.cart.values())

    def total_stock(self) -> int:
        return sum(p.q for p in self.products.values())

    def stock_warning(self) -> bool:
        return self.total_stock() < rules.STOCK_WARNING_TOTAL

    # Seed helpers (удобно для тестов/демо)
    def add_product(self, product_id: str, name: str, val: Money, q: int, original_val: Optional[Money] = None) -> Product:
        product = Product(
            id=product_id,
            name=name,
            val=val,
            original_val=val if original_val is None else original_val,
            q=q,
        )
        self.products[product_id] = product
        return product

    def load_catalog(self, rows: Iterable[dict] = rules.DEFAULT_CATALOG) -> None:
        for row in rows:
            self.add_product(row["id"], row["name"], row["val"], row["q"], row.get("original_val"))

"""
Симулятор распродаж: «молниеносная» и «рекомендованная».

Это внешний по отношению к расчёту корзины участник: он только меняет
`val` / `on_sale` / `suggest_sale` в каталоге через InventoryService.
Случайность и часы внедряются снаружи, поэтому тесты детерминированы.
"""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from cart_pricing import rules
from cart_pricing.models import Product
from cart_pricing.pricing import round_half_up, to_decimal
from cart_pricing.services import InventoryService
from cart_pricing.store import Store


@dataclass(slots=True)
class FiredSale:
    kind: str
    product_id: str
    at: float


class SaleEvent(ABC):
    def __init__(self, store: Store, rng: random.Random):
        self.store = store
        self.rng = rng
        self.inventory = InventoryService(store)

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def pick(self) -> Optional[Product]: ...

    @abstractmethod
    def apply(self, product: Product) -> Product: ...

    def run(self) -> Optional[Product]:
        product = self.pick()
        if product is None:
            self.store.log(f"[sale] {self.name()} skipped: no candidate")
            return None
        self.store.log(f"[sale] {self.name()} START {product.id}")
        updated = self.apply(product)
        self.store.log(f"[sale] {self.name()} OK {product.id} val={updated.val}")
        return updated


class LightningSale(SaleEvent):
    def name(self) -> str:
        return "LightningSale"

    def pick(self) -> Optional[Product]:
        products = list(self.store.products.values())
        if not products:
            return None
        lucky = products[self.rng.randrange(len(products))]
        if lucky.q > 0 and not lucky.on_sale:
            return lucky
        return None

    def apply(self, product: Product) -> Product:
        val = round_half_up(to_decimal(product.original_val) * rules.LIGHTNING_PRICE_MULTIPLIER)
        return self.inventory.update_sale_status(product.id, val=val, on_sale=True)


class SuggestionSale(SaleEvent):
    def name(self) -> str:
        return "SuggestionSale"

    def pick(self) -> Optional[Product]:
        for product in self.store.products.values():
            if product.id != self.store.last_selected and product.q > 0 and not product.suggest_sale:
                return product
        return None

    def apply(self, product: Product) -> Product:
        # Скидка считается от текущей цены: с молниеносной перемножается.
        val = round_half_up(to_decimal(product.val) * rules.SUGGESTION_PRICE_MULTIPLIER)
        return self.inventory.update_sale_status(product.id, val=val, suggest_sale=True)


class SaleSimulator:
    """
    Планировщик распродаж поверх внедряемых часов.

    Таймеров нет: вызывающий код дергает `tick()`, и все события, срок
    которых наступил, выполняются по порядку времени.
    """

    def __init__(
        self,
        store: Store,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock or time.monotonic
        self.inventory = InventoryService(store)

        self.running = False
        self.next_lightning_at: Optional[float] = None
        self.next_suggestion_at: Optional[float] = None
        self.lightning_ends: Dict[str, float] = {}

    def start(self) -> None:
        now = self.clock()
        self.next_lightning_at = now + self.rng.random() * rules.LIGHTNING_DELAY_MAX
        self.next_suggestion_at = now + rules.SUGGESTION_DELAY
        self.running = True
        self.store.log(
            f"[sale] simulator started: lightning at +{self.next_lightning_at - now:.1f}s, "
            f"suggestion at +{rules.SUGGESTION_DELAY:.0f}s"
        )

    def stop(self) -> None:
        self.running = False
        self.next_lightning_at = None
        self.next_suggestion_at = None
        self.lightning_ends.clear()
        self.store.log("[sale] simulator stopped")

    def trigger_lightning_sale(self, at: Optional[float] = None) -> Optional[Product]:
        product = LightningSale(self.store, self.rng).run()
        if product is not None:
            started = self.clock() if at is None else at
            self.lightning_ends[product.id] = started + rules.LIGHTNING_DURATION
        return product

    def trigger_suggestion_sale(self) -> Optional[Product]:
        return SuggestionSale(self.store, self.rng).run()

    def end_lightning_sale(self, product_id: str) -> Optional[Product]:
        self.lightning_ends.pop(product_id, None)
        product = self.store.get_product(product_id)
        if product is None or not product.on_sale:
            return None
        if product.suggest_sale:
            val = round_half_up(to_decimal(product.original_val) * rules.SUGGESTION_PRICE_MULTIPLIER)
        else:
            val = product.original_val
        self.store.log(f"[sale] LightningSale END {product.id}")
        return self.inventory.update_sale_status(product.id, val=val, on_sale=False)

    def _next_due(self, now: float) -> Optional[tuple[float, int, str, str]]:
        # При равном времени сначала завершаем старые распродажи.
        candidates = []
        for product_id, ends_at in self.lightning_ends.items():
            candidates.append((ends_at, 0, "lightning_end", product_id))
        if self.next_lightning_at is not None:
            candidates.append((self.next_lightning_at, 1, "lightning", ""))
        if self.next_suggestion_at is not None:
            candidates.append((self.next_suggestion_at, 2, "suggestion", ""))
        due = [c for c in candidates if c[0] <= now]
        return min(due) if due else None

    def tick(self) -> List[FiredSale]:
        if not self.running:
            return []
        now = self.clock()
        fired: List[FiredSale] = []
        while True:
            due = self._next_due(now)
            if due is None:
                break
            at, _, kind, product_id = due
            if kind == "lightning_end":
                product = self.end_lightning_sale(product_id)
            elif kind == "lightning":
                self.next_lightning_at = at + rules.LIGHTNING_INTERVAL
                product = self.trigger_lightning_sale(at=at)
            else:
                self.next_suggestion_at = at + rules.SUGGESTION_INTERVAL
                product = self.trigger_suggestion_sale()
            if product is not None:
                fired.append(FiredSale(kind=kind, product_id=product.id, at=at))
        return fired

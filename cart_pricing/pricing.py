"""
Чистый расчёт корзины: скидки на товар, оптовая скидка, скидка вторника
и баллы лояльности.

Ничего не меняет: ни каталог, ни корзину. Вызывающий код передаёт
снимок строк корзины и дату, получает `CartTotals`.

Порядок шагов фиксирован:
1. индивидуальные скидки (от 10 шт. одного товара);
2. оптовая скидка (от 30 шт. всего): заменяет индивидуальные, не суммируется;
3. скидка вторника: всегда поверх результата шагов 1/2;
4. округление вниз только для итоговой суммы.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Union

from cart_pricing import rules
from cart_pricing.models import (
    CartLine,
    CartTotals,
    ItemDiscount,
    ItemDiscountNotice,
    LoyaltyBreakdown,
    Money,
    Product,
)

logger = logging.getLogger(__name__)

Today = Union[date, int, None]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value: Money | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(ONE, rounding=ROUND_HALF_UP))


def is_tuesday(today: Today = None) -> bool:
    """
    `today`: date/datetime (weekday() == 1) или индекс дня в стиле JS
    (0 = воскресенье, 2 = вторник). None означает системную дату.
    """
    if today is None:
        today = date.today()
    if isinstance(today, int):
        return today == rules.TUESDAY_DAY_INDEX
    return today.weekday() == rules.TUESDAY_WEEKDAY


def individual_discount_rate(product_id: str) -> Decimal:
    return rules.INDIVIDUAL_DISCOUNT_RATES.get(rules.canonical_product_id(product_id), ZERO)


def compute_item_discount(product: Product, quantity: int) -> ItemDiscount:
    item_total = to_decimal(product.val) * quantity
    rate = ZERO
    if quantity >= rules.INDIVIDUAL_DISCOUNT_MIN_QTY:
        rate = individual_discount_rate(product.id)
    return ItemDiscount(product=product, quantity=quantity, item_total=item_total, discount_rate=rate)


def _active_lines(lines: Iterable[CartLine]) -> List[CartLine]:
    # Висячие ссылки и нулевые строки просто не участвуют в расчёте.
    return [line for line in lines if line.product is not None and line.quantity > 0]


def individual_discounts(lines: Iterable[CartLine]) -> List[ItemDiscountNotice]:
    notices: List[ItemDiscountNotice] = []
    for line in _active_lines(lines):
        item = compute_item_discount(line.product, line.quantity)
        if item.discount_rate > 0:
            notices.append(
                ItemDiscountNotice(
                    name=line.product.name,
                    discount_percent=round_half_up(item.discount_rate * HUNDRED),
                )
            )
    return notices


def discount_label(subtotal: Decimal, final_total: Decimal) -> str:
    if subtotal == 0:
        return ""
    effective_rate = (subtotal - final_total) / subtotal
    if effective_rate <= 0:
        return ""
    percent = (effective_rate * HUNDRED).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent}%"


def _quantity_bonus(total_quantity: int) -> tuple[int, int]:
    for threshold, points in rules.LOYALTY_QUANTITY_BONUSES:
        if total_quantity >= threshold:
            return threshold, points
    return 0, 0


def _loyalty_breakdown(lines: List[CartLine], final_total: Decimal, tuesday: bool) -> LoyaltyBreakdown:
    result = LoyaltyBreakdown()

    base = max(0, math.floor(to_decimal(final_total) / rules.LOYALTY_BASE_RATE))
    result.base_points = base
    result.tuesday_points = base
    if base > 0:
        result.details.append(f"base: {base}p")

    # Удвоение заменяет базовые баллы, бонусы ниже не удваиваются.
    if tuesday and base > 0:
        result.tuesday_points = base * rules.LOYALTY_TUESDAY_MULTIPLIER
        result.details.append(f"tuesday x{rules.LOYALTY_TUESDAY_MULTIPLIER}")

    ids = {rules.canonical_product_id(line.product.id) for line in lines}
    if rules.KEYBOARD in ids and rules.MOUSE in ids:
        result.set_bonus += rules.LOYALTY_KEYBOARD_MOUSE_BONUS
        result.details.append(f"keyboard+mouse set +{rules.LOYALTY_KEYBOARD_MOUSE_BONUS}p")
        if rules.MONITOR_ARM in ids:
            result.set_bonus += rules.LOYALTY_FULL_SET_BONUS
            result.details.append(f"full set +{rules.LOYALTY_FULL_SET_BONUS}p")

    total_quantity = sum(line.quantity for line in lines)
    threshold, bonus = _quantity_bonus(total_quantity)
    if bonus:
        result.quantity_bonus = bonus
        result.details.append(f"bulk purchase ({threshold}+) +{bonus}p")

    return result


def loyalty_breakdown(lines: Iterable[CartLine], final_total: Money, today: Today = None) -> LoyaltyBreakdown:
    active = _active_lines(lines)
    if not active:
        return LoyaltyBreakdown()
    return _loyalty_breakdown(active, to_decimal(final_total), is_tuesday(today))


def compute_loyalty_points(lines: Iterable[CartLine], final_total: Money, today: Today = None) -> int:
    return loyalty_breakdown(lines, final_total, today).total


def compute_cart_totals(lines: Iterable[CartLine], today: Today = None) -> CartTotals:
    active = _active_lines(lines)
    if not active:
        return CartTotals()

    tuesday = is_tuesday(today)
    items = [compute_item_discount(line.product, line.quantity) for line in active]

    subtotal = sum((item.item_total for item in items), ZERO)
    total_quantity = sum(item.quantity for item in items)
    after_individual = sum((item.item_total * (ONE - item.discount_rate) for item in items), ZERO)

    bulk = total_quantity >= rules.BULK_DISCOUNT_MIN_QTY
    if bulk:
        running_total = subtotal * (ONE - rules.BULK_DISCOUNT_RATE)
    else:
        running_total = after_individual

    if tuesday:
        running_total = running_total * (ONE - rules.TUESDAY_DISCOUNT_RATE)

    loyalty = _loyalty_breakdown(active, running_total, tuesday)
    totals = CartTotals(
        cart_total=math.floor(running_total),
        loyalty_points=loyalty.total,
        discount_label=discount_label(subtotal, running_total),
        subtotal=subtotal,
        final_total=running_total,
        total_quantity=total_quantity,
        bulk_applied=bulk,
        tuesday_applied=tuesday,
        item_discounts=[] if bulk else individual_discounts(active),
        loyalty=loyalty,
    )
    logger.debug(
        "cart totals: subtotal=%s qty=%s bulk=%s tuesday=%s total=%s points=%s",
        subtotal,
        total_quantity,
        bulk,
        tuesday,
        totals.cart_total,
        totals.loyalty_points,
    )
    return totals

"""Business constants: discount tables, loyalty rates, stock thresholds, sale timings."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

KEYBOARD = "keyboard"
MOUSE = "mouse"
MONITOR_ARM = "monitor-arm"
LAPTOP_POUCH = "laptop-pouch"
SPEAKER = "speaker"

# Старые идентификаторы каталога (p1..p5) -> канонические.
LEGACY_PRODUCT_IDS: Dict[str, str] = {
    "p1": KEYBOARD,
    "p2": MOUSE,
    "p3": MONITOR_ARM,
    "p4": LAPTOP_POUCH,
    "p5": SPEAKER,
}

# Скидки
INDIVIDUAL_DISCOUNT_MIN_QTY = 10
INDIVIDUAL_DISCOUNT_RATES: Dict[str, Decimal] = {
    KEYBOARD: Decimal("0.10"),
    MOUSE: Decimal("0.15"),
    MONITOR_ARM: Decimal("0.20"),
    LAPTOP_POUCH: Decimal("0.05"),
    SPEAKER: Decimal("0.25"),
}

BULK_DISCOUNT_MIN_QTY = 30
BULK_DISCOUNT_RATE = Decimal("0.25")

TUESDAY_DISCOUNT_RATE = Decimal("0.10")
TUESDAY_DAY_INDEX = 2  # 0 = воскресенье
TUESDAY_WEEKDAY = 1  # datetime.date.weekday(): 0 = понедельник

# Баллы лояльности
LOYALTY_BASE_RATE = 1000
LOYALTY_TUESDAY_MULTIPLIER = 2
LOYALTY_KEYBOARD_MOUSE_BONUS = 50
LOYALTY_FULL_SET_BONUS = 100
# (порог, баллы): от старшего к младшему, срабатывает первый подходящий
LOYALTY_QUANTITY_BONUSES = (
    (30, 100),
    (20, 50),
    (10, 20),
)

# Склад
OUT_OF_STOCK = 0
LOW_STOCK = 5
STOCK_WARNING_TOTAL = 50

# Распродажи (секунды)
LIGHTNING_PRICE_MULTIPLIER = Decimal("0.8")
LIGHTNING_DURATION = 30.0
LIGHTNING_DELAY_MAX = 10.0
LIGHTNING_INTERVAL = 30.0

SUGGESTION_PRICE_MULTIPLIER = Decimal("0.95")
SUGGESTION_DELAY = 60.0
SUGGESTION_INTERVAL = 60.0


DEFAULT_CATALOG: List[dict] = [
    {"id": KEYBOARD, "name": "Bug-Squashing Keyboard", "val": 10000, "q": 50},
    {"id": MOUSE, "name": "Productivity Mouse", "val": 20000, "q": 30},
    {"id": MONITOR_ARM, "name": "Posture-Saving Monitor Arm", "val": 30000, "q": 20},
    {"id": LAPTOP_POUCH, "name": "Error-Proof Laptop Pouch", "val": 15000, "q": 0},
    {"id": SPEAKER, "name": "Lo-Fi Coding Speaker", "val": 25000, "q": 10},
]


def canonical_product_id(product_id: Optional[str]) -> Optional[str]:
    if product_id is None:
        return None
    return LEGACY_PRODUCT_IDS.get(product_id, product_id)

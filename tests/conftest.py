"""Pytest fixtures for the cart pricing demo."""

from datetime import date

import pytest

from cart_pricing.services import CartService, InventoryService
from cart_pricing.store import Store

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)


@pytest.fixture
def store() -> Store:
    store = Store()

    store.add_product("keyboard", "Keyboard", val=10000, q=50)
    store.add_product("mouse", "Mouse", val=20000, q=30)
    store.add_product("monitor-arm", "Monitor Arm", val=30000, q=20)
    store.add_product("laptop-pouch", "Laptop Pouch", val=15000, q=0)  # Out of stock
    store.add_product("speaker", "Speaker", val=25000, q=10)

    return store


@pytest.fixture
def cart(store) -> CartService:
    return CartService(store, clock=lambda: MONDAY)


@pytest.fixture
def inventory(store) -> InventoryService:
    return InventoryService(store)


@pytest.fixture
def monday() -> date:
    return MONDAY


@pytest.fixture
def tuesday() -> date:
    return TUESDAY

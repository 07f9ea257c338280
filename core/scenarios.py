"""
Эталонные сценарии: четыре корзины на исходных правилах и три корзины
после изменений владельца магазина.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple
from .cart import ShoppingCart
from .store import CatalogStore


@dataclass(frozen=True)
class Scenario:
    number: int
    items: Tuple[str, ...]
    promo_code: Optional[str] = None


@dataclass(frozen=True)
class ScenarioResult:
    scenario: Scenario
    items: Tuple[str, ...]
    total: str
    final_cart: Tuple[str, ...]


BASE_SCENARIOS = (
    Scenario(1, ("ult_small", "ult_small", "ult_small", "ult_large")),
    Scenario(2, ("ult_small", "ult_small", "ult_large", "ult_large", "ult_large", "ult_large")),
    Scenario(3, ("ult_small", "ult_medium", "ult_medium")),
    Scenario(4, ("ult_small", "1gb"), "I<3AMAYSIM"),
)

MODIFIED_SCENARIOS = (
    Scenario(
        5,
        ("ult_small",) * 4 + ("ult_medium",) * 4,
    ),
    Scenario(6, ("ult_large",) * 5 + ("ult_small", "ult_medium")),
    Scenario(7, ("ult_small", "ult_medium", "1gb"), "SAMPLE_DISCOUNT20"),
)


def apply_owner_changes(store: CatalogStore) -> None:
    """Buy 2 get 1, bulk from 5 at 40.90, SMALL costs 25"""
    store.update_pricing_rule(0, {"x": 2, "y": 1})
    store.update_pricing_rule(1, {"bulk_quantity": 5, "bulk_price": "40.90"})
    store.update_product_price("SMALL", 25)
    store.update_pricing_rule(0, {"applicable_to": ["ult_small", "ult_medium"]})


def run_scenario(store: CatalogStore, scenario: Scenario) -> ScenarioResult:
    cart = ShoppingCart(store)
    for code in scenario.items:
        cart.add(code, scenario.promo_code)

    # порядок вызовов как у кассы: список, итог, итоговая корзина
    items = tuple(cart.items())
    total = cart.total()
    final_cart = tuple(cart.generate_final_cart())
    return ScenarioResult(scenario, items, total, final_cart)


def run_all(store_factory: Callable[[], CatalogStore]) -> Tuple[ScenarioResult, ...]:
    """
    Базовые сценарии считаются на свежем каталоге, изменённые — на одном
    общем каталоге, в который внесены изменения владельца.
    """
    base = store_factory()
    modified = store_factory()
    apply_owner_changes(modified)
    return tuple(run_scenario(base, s) for s in BASE_SCENARIOS) + tuple(
        run_scenario(modified, s) for s in MODIFIED_SCENARIOS
    )

import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import logging
import pytest
from decimal import Decimal
from core.domain import Product, PricingRule
from core.errors import ProductNotFound, IndexOutOfRange, InvalidRule, InvalidPrice
from core.store import CatalogStore


@pytest.fixture
def store():
    return CatalogStore(
        products=(
            Product("ult_small", "Unlimited 1GB", Decimal("24.90")),
            Product("ult_large", "Unlimited 5GB", Decimal("44.90")),
            Product("1gb", "1GB Data-pack", Decimal("9.90")),
        ),
        rules=(
            PricingRule(type="buyXGetFreeY", applicable_to=frozenset({"ult_small"}), x=3),
            PricingRule(
                type="bulkDiscount",
                applicable_to=frozenset({"ult_large"}),
                bulk_quantity=3,
                bulk_price=Decimal("39.90"),
            ),
        ),
        promo_codes={"I<3AMAYSIM": 10},
        slots={"SMALL": "ult_small", "LARGE": "ult_large"},
    )


def test_find_product(store):
    assert store.find_product("ult_small").get_or_else(None).name == "Unlimited 1GB"
    assert store.find_product("SMALL").is_none()  # поиск только по code


def test_product_name_and_price_for_missing_code(store):
    assert store.product_name("gone") == "gone"
    assert store.unit_price("gone") == Decimal("0")


def test_update_price_by_slot(store):
    result = store.update_product_price("SMALL", 25)
    assert result.is_right
    assert store.unit_price("ult_small") == Decimal("25")


def test_update_price_by_code(store):
    store.update_product_price("1gb", "10.50")
    assert store.unit_price("1gb") == Decimal("10.50")


def test_update_price_unknown_key_is_not_fatal(store, caplog):
    before = store.products
    with caplog.at_level(logging.WARNING):
        result = store.update_product_price("HUGE", 1)

    assert result.is_left
    assert isinstance(result.error, ProductNotFound)
    assert store.products == before
    assert "HUGE" in caplog.text


def test_update_price_rejects_negative(store):
    result = store.update_product_price("SMALL", -1)
    assert isinstance(result.error, InvalidPrice)
    assert store.unit_price("ult_small") == Decimal("24.90")


def test_update_pricing_rule_merges_fields(store):
    result = store.update_pricing_rule(0, {"x": 2, "y": 1})
    rule = store.rules[0]

    assert result.is_right
    assert rule.x == 2
    assert rule.applicable_to == frozenset({"ult_small"})  # сохранено


@pytest.mark.parametrize("index", [-1, 2, 100])
def test_update_pricing_rule_out_of_range(store, index, caplog):
    before = store.rules
    with caplog.at_level(logging.WARNING):
        result = store.update_pricing_rule(index, {"x": 2})

    assert isinstance(result.error, IndexOutOfRange)
    assert store.rules == before
    assert "Invalid pricing rule index" in caplog.text


def test_update_pricing_rule_changes_type(store):
    result = store.update_pricing_rule(
        0, {"type": "bulkDiscount", "bulk_quantity": 2, "bulk_price": 20}
    )
    rule = store.rules[0]

    assert result.is_right
    assert rule.type == "bulkDiscount"
    assert rule.bulk_price == Decimal("20")
    assert rule.x == 3  # поверхностное слияние: старое поле осталось


def test_update_pricing_rule_invalid_result_keeps_rule(store):
    before = store.rules
    result = store.update_pricing_rule(0, {"type": "freeItem"})

    assert isinstance(result.error, InvalidRule)
    assert store.rules == before


def test_rules_snapshot_is_read_only(store):
    snapshot = store.rules
    store.update_pricing_rule(1, {"bulk_quantity": 5})
    assert snapshot[1].bulk_quantity == 3
    assert store.rules[1].bulk_quantity == 5


def test_add_pricing_rule_appends_in_store_order(store):
    store.add_pricing_rule({"type": "freeItem", "applicable_to": ["ult_large"], "free_item": "1gb"})
    assert [r.type for r in store.rules_for("ult_large")] == ["bulkDiscount", "freeItem"]


def test_remove_product_drops_slot(store):
    assert store.remove_product("ult_small").is_right
    assert store.find_product("ult_small").is_none()
    assert "SMALL" not in store.slots
    assert store.remove_product("ult_small").is_left


def test_promo_percentage(store):
    assert store.promo_percentage("I<3AMAYSIM").get_or_else(None) == Decimal("10")
    assert store.promo_percentage("UNKNOWN").is_none()
    assert store.promo_percentage(None).is_none()


@pytest.mark.parametrize("bulk_price", ["abc", "", "NaN", float("inf")])
def test_update_pricing_rule_bad_bulk_price_is_not_fatal(store, bulk_price):
    before = store.rules
    result = store.update_pricing_rule(1, {"bulk_price": bulk_price})

    assert result.is_left
    assert isinstance(result.error, InvalidRule)
    assert store.rules == before


@pytest.mark.parametrize("price", ["abc", float("nan"), "Infinity", None])
def test_update_price_malformed_value_is_not_fatal(store, price, caplog):
    with caplog.at_level(logging.WARNING):
        result = store.update_product_price("SMALL", price)

    assert isinstance(result.error, InvalidPrice)
    assert store.unit_price("ult_small") == Decimal("24.90")
    assert "non-negative amount" in caplog.text


def test_add_pricing_rule_bad_bulk_price(store):
    result = store.add_pricing_rule(
        {"type": "bulkDiscount", "applicable_to": ["1gb"], "bulk_quantity": 2, "bulk_price": "x"}
    )
    assert result.is_left
    assert len(store.rules) == 2


def test_add_product_registers_slot(store):
    store.add_product(Product("ult_xl", "Unlimited 10GB", Decimal("59.90")), slot="XL")

    assert store.resolve_key("XL").get_or_else(None) == "ult_xl"
    assert store.product_name("ult_xl") == "Unlimited 10GB"


def test_slot_pointing_to_missing_product(store):
    broken = CatalogStore(slots={"GHOST": "nothing"})
    result = broken.update_product_price("GHOST", 1)
    assert isinstance(result.error, ProductNotFound)

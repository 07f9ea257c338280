import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from decimal import Decimal
from core.domain import PricingRule
from core.errors import InvalidRule
from core.rules import (
    buy_x_get_free_y,
    bulk_discount,
    free_item,
    validate_rule,
    coerce_rule_fields,
    rule_from_fields,
)

SMALL = Decimal("24.90")


def test_buy_x_get_free_y_one_free_per_full_group():
    rule = PricingRule(type="buyXGetFreeY", applicable_to=frozenset({"s"}), x=3)
    total3, injected = buy_x_get_free_y(rule, SMALL, 3, SMALL * 3)
    total4, _ = buy_x_get_free_y(rule, SMALL, 4, SMALL * 4)

    assert total3 == Decimal("49.80")
    assert total4 == Decimal("74.70")  # floor(4/3) = 1
    assert injected == ()


def test_buy_x_get_free_y_below_threshold():
    rule = PricingRule(type="buyXGetFreeY", x=3)
    total, _ = buy_x_get_free_y(rule, SMALL, 2, SMALL * 2)
    assert total == SMALL * 2


def test_bulk_discount_reprices_all_units():
    rule = PricingRule(type="bulkDiscount", bulk_quantity=3, bulk_price=Decimal("39.90"))
    price = Decimal("44.90")

    hit, _ = bulk_discount(rule, price, 3, Decimal("1.00"))
    miss, _ = bulk_discount(rule, price, 2, price * 2)

    # перезаписывает итог строки, а не уменьшает его
    assert hit == Decimal("119.70")
    assert miss == Decimal("89.80")


def test_free_item_injects_one_per_unit():
    rule = PricingRule(type="freeItem", free_item="1gb")
    total, injected = free_item(rule, Decimal("29.90"), 2, Decimal("59.80"))

    assert total == Decimal("59.80")
    assert injected == ("1gb", "1gb")


def test_validate_rule_rejects_bad_parameters():
    bad = (
        PricingRule(type="halfPrice"),
        PricingRule(type="buyXGetFreeY", x=0),
        PricingRule(type="buyXGetFreeY"),
        PricingRule(type="bulkDiscount", bulk_quantity=3),
        PricingRule(type="bulkDiscount", bulk_quantity=0, bulk_price=Decimal("1")),
        PricingRule(type="freeItem"),
    )
    for rule in bad:
        result = validate_rule(rule)
        assert result.is_left, rule
        assert isinstance(result.error, InvalidRule)


def test_validate_rule_accepts_complete_rules():
    good = PricingRule(type="bulkDiscount", bulk_quantity=3, bulk_price=Decimal("39.90"))
    assert validate_rule(good).get_or_else(None) == good


def test_coerce_rule_fields_aliases_and_types():
    result = coerce_rule_fields(
        {"applicableTo": "ult_large", "bulkQuantity": 5, "bulkPrice": 40.9}
    )
    fields = result.get_or_else({})

    assert fields["applicable_to"] == frozenset({"ult_large"})
    assert fields["bulk_quantity"] == 5
    assert fields["bulk_price"] == Decimal("40.9")


def test_coerce_rule_fields_unknown_field():
    result = coerce_rule_fields({"discount": 5})
    assert result.is_left
    assert "discount" in str(result.error)


def test_rule_from_fields_requires_type():
    assert rule_from_fields({"x": 3}).is_left
    rule = rule_from_fields({"type": "freeItem", "applicable_to": ["m"], "free_item": "1gb"})
    assert rule.is_right
    assert rule.value.applies_to("m")

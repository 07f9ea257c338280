import logging
from decimal import Decimal
from typing import Callable, Dict, Tuple
from .domain import PricingRule, BUY_X_GET_FREE_Y, BULK_DISCOUNT, FREE_ITEM, parse_money
from .errors import InvalidRule
from .ftypes import Either

logger = logging.getLogger(__name__)

# (rule, unit_price, quantity, line_total) -> (new_line_total, injected_codes)
RuleHandler = Callable[
    [PricingRule, Decimal, int, Decimal], Tuple[Decimal, Tuple[str, ...]]
]


def buy_x_get_free_y(
    rule: PricingRule, unit_price: Decimal, quantity: int, line_total: Decimal
) -> Tuple[Decimal, Tuple[str, ...]]:
    """Одна бесплатная единица на каждые полные x штук (от исходного количества)"""
    free_units = quantity // rule.x
    return line_total - unit_price * free_units, ()


def bulk_discount(
    rule: PricingRule, unit_price: Decimal, quantity: int, line_total: Decimal
) -> Tuple[Decimal, Tuple[str, ...]]:
    """
    При quantity >= bulk_quantity ВСЕ единицы переоцениваются по bulk_price.
    Итог строки перезаписывается, а не уменьшается.
    """
    if quantity >= rule.bulk_quantity:
        return rule.bulk_price * quantity, ()
    return line_total, ()


def free_item(
    rule: PricingRule, unit_price: Decimal, quantity: int, line_total: Decimal
) -> Tuple[Decimal, Tuple[str, ...]]:
    """На каждую купленную единицу — одна единица free_item бесплатно"""
    return line_total, (rule.free_item,) * quantity


HANDLERS: Dict[str, RuleHandler] = {
    BUY_X_GET_FREE_Y: buy_x_get_free_y,
    BULK_DISCOUNT: bulk_discount,
    FREE_ITEM: free_item,
}


def apply_rule(
    rule: PricingRule, unit_price: Decimal, quantity: int, line_total: Decimal
) -> Tuple[Decimal, Tuple[str, ...]]:
    new_total, injected = HANDLERS[rule.type](rule, unit_price, quantity, line_total)
    logger.debug(
        "rule %s on qty=%d: %s -> %s, injected=%d",
        rule.type,
        quantity,
        line_total,
        new_total,
        len(injected),
    )
    return new_total, injected


def _positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def validate_rule(rule: PricingRule) -> Either[InvalidRule, PricingRule]:
    """
    Проверяет, что у правила есть параметры, нужные его типу.
    Left(InvalidRule) — правило нельзя вычислить.
    """
    if rule.type not in HANDLERS:
        return Either.left(InvalidRule(f"unknown rule type '{rule.type}'"))

    if rule.type == BUY_X_GET_FREE_Y and not _positive_int(rule.x):
        return Either.left(InvalidRule(f"x must be an integer >= 1, got {rule.x!r}"))

    if rule.type == BULK_DISCOUNT:
        if not _positive_int(rule.bulk_quantity):
            return Either.left(
                InvalidRule(
                    f"bulk_quantity must be an integer >= 1, got {rule.bulk_quantity!r}"
                )
            )
        if not isinstance(rule.bulk_price, Decimal) or rule.bulk_price < 0:
            return Either.left(
                InvalidRule(f"bulk_price must be a non-negative decimal, got {rule.bulk_price!r}")
            )

    if rule.type == FREE_ITEM and not rule.free_item:
        return Either.left(InvalidRule("free_item must name a product code"))

    return Either.right(rule)


RULE_FIELDS = ("type", "applicable_to", "x", "y", "bulk_quantity", "bulk_price", "free_item")

# camelCase names as they appear in exported rule tables
FIELD_ALIASES = {
    "applicableTo": "applicable_to",
    "bulkQuantity": "bulk_quantity",
    "bulkPrice": "bulk_price",
    "freeItem": "free_item",
}


def coerce_rule_fields(fields: dict) -> Either[InvalidRule, dict]:
    """
    Приводит сырые поля (JSON, UI) к типам PricingRule:
    applicable_to -> frozenset, bulk_price -> Decimal.
    Неизвестные поля -> Left(InvalidRule).
    """
    renamed = {FIELD_ALIASES.get(k, k): v for k, v in fields.items()}
    unknown = sorted(set(renamed) - set(RULE_FIELDS))
    if unknown:
        return Either.left(InvalidRule(f"unknown fields {unknown}", fields))

    coerced = dict(renamed)
    if "applicable_to" in coerced:
        codes = coerced["applicable_to"]
        coerced["applicable_to"] = frozenset([codes] if isinstance(codes, str) else codes)
    if coerced.get("bulk_price") is not None:
        price = parse_money(coerced["bulk_price"])
        if price is None:
            return Either.left(
                InvalidRule(f"bulk_price must be a decimal, got {coerced['bulk_price']!r}", fields)
            )
        coerced["bulk_price"] = price
    return Either.right(coerced)


def rule_from_fields(fields: dict) -> Either[InvalidRule, PricingRule]:
    """Сырые поля -> проверенное PricingRule (или Left с причиной)"""

    def build(coerced: dict) -> Either[InvalidRule, PricingRule]:
        if "type" not in coerced:
            return Either.left(InvalidRule("rule type is required", fields))
        return Either.right(PricingRule(**coerced))

    return coerce_rule_fields(fields).bind(build).bind(validate_rule)

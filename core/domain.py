from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple, FrozenSet

BUY_X_GET_FREE_Y = "buyXGetFreeY"
BULK_DISCOUNT = "bulkDiscount"
FREE_ITEM = "freeItem"

RULE_TYPES = (BUY_X_GET_FREE_Y, BULK_DISCOUNT, FREE_ITEM)


@dataclass(frozen=True)
class Product:
    code: str
    name: str
    price: Decimal


@dataclass(frozen=True)
class PricingRule:
    """
    Правило скидки. Поля, не относящиеся к типу правила, остаются None.
    y хранится только для совместимости с исходными данными (всегда 1 бесплатная единица).
    """

    type: str
    applicable_to: FrozenSet[str] = frozenset()
    x: Optional[int] = None
    y: Optional[int] = None
    bulk_quantity: Optional[int] = None
    bulk_price: Optional[Decimal] = None
    free_item: Optional[str] = None

    def applies_to(self, code: str) -> bool:
        return code in self.applicable_to


@dataclass(frozen=True)
class PricedLine:
    code: str
    name: str
    quantity: int
    unit_price: Decimal
    base_total: Decimal
    line_total: Decimal
    applied: Tuple[str, ...] = ()

    @property
    def savings(self) -> Decimal:
        return self.base_total - self.line_total


@dataclass(frozen=True)
class Evaluation:
    """Результат одного прохода ценообразования по корзине"""

    lines: Tuple[PricedLine, ...]
    grand_total: Decimal
    promo_code: Optional[str]
    promo_percentage: Decimal
    final_total: Decimal
    bonus_items: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def promo_discount(self) -> Decimal:
        return self.grand_total - self.final_total


def to_money(value) -> Decimal:
    """float/int/str -> Decimal без артефактов двоичной арифметики"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_money(value) -> Optional[Decimal]:
    """Как to_money, но None для нечисловых и бесконечных значений ('abc', NaN, inf)"""
    try:
        amount = to_money(value)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None

"""
Расчёт цены корзины в два этапа:

1. Купленные коды группируются в мультимножество, каждая строка проходит
   через все применимые правила в порядке хранения. Бесплатные товары
   (freeItem) собираются в отдельный список и не оцениваются.
2. Собранные бесплатные товары добавляются после купленных.

Промокод применяется один раз, к общей сумме всех строк.
"""

import logging
from decimal import Decimal
from functools import reduce
from typing import Dict, Iterable, Optional, Tuple
from .config import MONEY_QUANTUM, MONEY_ROUNDING
from .domain import Evaluation, PricedLine
from .rules import apply_rule
from .store import CatalogStore

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def group_counts(codes: Iterable[str]) -> Dict[str, int]:
    """Код -> количество; порядок ключей — порядок первого появления"""
    return reduce(lambda acc, code: {**acc, code: acc.get(code, 0) + 1}, codes, {})


def price_line(
    store: CatalogStore, code: str, quantity: int
) -> Tuple[PricedLine, Tuple[str, ...]]:
    """
    Итог одной строки и бесплатные товары, порождённые её правилами.
    Все правила получают исходное quantity; bulkDiscount перезаписывает итог.
    """
    unit_price = store.unit_price(code)
    base_total = unit_price * quantity

    def step(acc, rule):
        line_total, injected, applied = acc
        new_total, extra = apply_rule(rule, unit_price, quantity, line_total)
        fired = new_total != line_total or bool(extra)
        return (
            new_total,
            injected + extra,
            applied + ((rule.type,) if fired else ()),
        )

    line_total, injected, applied = reduce(
        step, store.rules_for(code), (base_total, (), ())
    )

    line = PricedLine(
        code=code,
        name=store.product_name(code),
        quantity=quantity,
        unit_price=unit_price,
        base_total=base_total,
        line_total=line_total,
        applied=applied,
    )
    return line, injected


def price_lines(
    store: CatalogStore, codes: Iterable[str]
) -> Tuple[Tuple[PricedLine, ...], Tuple[str, ...]]:
    """Этап 1: все строки корзины и отложенный список бесплатных товаров"""
    priced = tuple(
        price_line(store, code, qty) for code, qty in group_counts(codes).items()
    )
    lines = tuple(line for line, _ in priced)
    pending = tuple(code for _, injected in priced for code in injected)
    return lines, pending


def apply_promo(grand_total: Decimal, percentage: Decimal) -> Decimal:
    return grand_total * (1 - percentage / HUNDRED)


def round_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=MONEY_ROUNDING)


def format_money(value: Decimal) -> str:
    """Decimal -> строка ровно с двумя знаками: 74.7 -> '74.70'"""
    return str(round_money(value))


def evaluate(
    store: CatalogStore, codes: Iterable[str], promo_code: Optional[str] = None
) -> Evaluation:
    """Полный расчёт по текущему состоянию каталога и правил"""
    codes = tuple(codes)
    lines, bonus_items = price_lines(store, codes)
    grand_total = reduce(lambda acc, line: acc + line.line_total, lines, Decimal("0"))

    percentage = store.promo_percentage(promo_code).get_or_else(Decimal("0"))
    final_total = round_money(apply_promo(grand_total, percentage))

    logger.debug(
        "evaluated %d items in %d lines: grand=%s promo=%s%% final=%s bonus=%d",
        len(codes),
        len(lines),
        grand_total,
        percentage,
        final_total,
        len(bonus_items),
    )

    return Evaluation(
        lines=lines,
        grand_total=grand_total,
        promo_code=promo_code,
        promo_percentage=percentage,
        final_total=final_total,
        bonus_items=bonus_items,
    )

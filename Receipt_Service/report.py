from decimal import Decimal
from functools import reduce
from typing import List
from core.cart import ShoppingCart
from core.domain import Evaluation
from core.pricing import format_money, group_counts, round_money


# ============ Разбор по строкам ============


def line_breakdown(evaluation: Evaluation) -> List[dict]:
    """
    Строки корзины после правил: сколько стоило бы без скидок,
    сколько стоит и какие правила сработали
    """
    return [
        {
            "code": line.code,
            "name": line.name,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "base_total": line.base_total,
            "line_total": line.line_total,
            "savings": line.savings,
            "rules": line.applied,
        }
        for line in evaluation.lines
    ]


def bonus_summary(evaluation: Evaluation) -> dict:
    """Бесплатные товары: код -> количество"""
    return group_counts(evaluation.bonus_items)


# ============ Сводка экономии ============


def savings_summary(evaluation: Evaluation) -> dict:
    """
    Все суммы в центах: subtotal - rule_savings - promo_discount == total
    """
    subtotal = round_money(
        reduce(lambda acc, l: acc + l.base_total, evaluation.lines, Decimal("0"))
    )
    grand_total = round_money(evaluation.grand_total)
    return {
        "subtotal": subtotal,
        "rule_savings": subtotal - grand_total,
        "grand_total": grand_total,
        "promo_code": evaluation.promo_code,
        "promo_percentage": evaluation.promo_percentage,
        "promo_discount": grand_total - evaluation.final_total,
        "total": evaluation.final_total,
    }


# ============ Текстовый чек ============


def format_receipt(cart: ShoppingCart, width: int = 40) -> str:
    evaluation = cart.evaluate()
    summary = savings_summary(evaluation)

    def row(left: str, right: str) -> str:
        return f"{left:<{width - len(right) - 1}} {right}"

    lines = [
        row(f"{l['quantity']} x {l['name']}", format_money(l["line_total"]))
        for l in line_breakdown(evaluation)
    ]
    lines += [
        row(f"{qty} x {cart.store.product_name(code)} (free)", format_money(Decimal("0")))
        for code, qty in bonus_summary(evaluation).items()
    ]
    lines.append("-" * width)
    lines.append(row("Subtotal", format_money(summary["subtotal"])))
    if summary["rule_savings"]:
        lines.append(row("Offers", format_money(-summary["rule_savings"])))
    if summary["promo_percentage"]:
        label = f"Promo {summary['promo_code']} ({summary['promo_percentage']}%)"
        lines.append(row(label, format_money(-summary["promo_discount"])))
    lines.append(row("Total", format_money(summary["total"])))
    return "\n".join(lines)

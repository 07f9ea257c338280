import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Union
from .config import SEED_PATH
from .domain import Product, PricingRule, to_money
from .errors import InvalidRule
from .rules import rule_from_fields
from .store import CatalogStore

logger = logging.getLogger(__name__)


def product_from_dict(data: dict) -> Product:
    return Product(
        code=str(data["code"]),
        name=str(data.get("name", data["code"])),
        price=to_money(data.get("price", 0)),
    )


def rule_from_dict(data: dict) -> PricingRule:
    """Правило из JSON; некорректное правило в seed — ошибка загрузки"""
    result = rule_from_fields(data)
    if result.is_left:
        raise result.error
    return result.value


def store_from_dict(data: dict) -> CatalogStore:
    products = tuple(map(product_from_dict, data.get("products", [])))
    slots = {
        str(p["slot"]): str(p["code"]) for p in data.get("products", []) if p.get("slot")
    }
    rules = tuple(map(rule_from_dict, data.get("pricing_rules", [])))
    promo_codes = {str(k): to_money(v) for k, v in data.get("promo_codes", {}).items()}
    return CatalogStore(products, rules, promo_codes, slots)


def load_seed(path: Union[str, Path] = SEED_PATH) -> CatalogStore:
    """
    Загружает seed.json и возвращает новый CatalogStore.
    Числа с плавающей точкой читаются сразу как Decimal.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f, parse_float=Decimal)

    try:
        store = store_from_dict(data)
    except (KeyError, TypeError) as exc:
        raise InvalidRule(f"malformed seed entry in {path}: {exc}") from exc

    logger.info(
        "seed loaded from %s: %d products, %d rules, %d promo codes",
        path,
        len(store.products),
        len(store.rules),
        len(store.promo_codes),
    )
    return store

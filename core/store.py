import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from .domain import Product, PricingRule, to_money, parse_money
from .errors import CartError, ProductNotFound, IndexOutOfRange, InvalidPrice
from .ftypes import Maybe, Either
from .rules import coerce_rule_fields, rule_from_fields, validate_rule

logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Каталог товаров, упорядоченный список правил скидок и таблица промокодов.

    Один экземпляр разделяется всеми корзинами: любое изменение цены или правила
    видно каждой корзине при следующем расчёте, в том числе для уже добавленных товаров.

    Товары хранятся по code. Дополнительно поддерживаются «слоты» каталога
    (например, SMALL -> ult_small), по которым владелец магазина меняет цены.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        rules: Iterable[PricingRule] = (),
        promo_codes: Optional[Dict[str, Decimal]] = None,
        slots: Optional[Dict[str, str]] = None,
    ):
        self._products: Dict[str, Product] = {p.code: p for p in products}
        self._rules: List[PricingRule] = list(rules)
        self._promo_codes: Dict[str, Decimal] = {
            code: to_money(pct) for code, pct in (promo_codes or {}).items()
        }
        self._slots: Dict[str, str] = dict(slots or {})

    # ============ Чтение ============

    @property
    def products(self) -> Tuple[Product, ...]:
        return tuple(self._products.values())

    @property
    def rules(self) -> Tuple[PricingRule, ...]:
        return tuple(self._rules)

    @property
    def promo_codes(self) -> Dict[str, Decimal]:
        return dict(self._promo_codes)

    @property
    def slots(self) -> Dict[str, str]:
        return dict(self._slots)

    def find_product(self, code: str) -> Maybe[Product]:
        return Maybe.of(self._products.get(code))

    def product_name(self, code: str) -> str:
        """Название товара или сам code, если товар удалён из каталога"""
        return self.find_product(code).map(lambda p: p.name).get_or_else(code)

    def unit_price(self, code: str) -> Decimal:
        return self.find_product(code).map(lambda p: p.price).get_or_else(Decimal("0"))

    def rules_for(self, code: str) -> Tuple[PricingRule, ...]:
        """Правила, применимые к товару, в порядке хранения"""
        return tuple(filter(lambda r: r.applies_to(code), self._rules))

    def promo_percentage(self, code: Optional[str]) -> Maybe[Decimal]:
        if not code:
            return Maybe.nothing()
        return Maybe.of(self._promo_codes.get(code))

    def resolve_key(self, key: str) -> Maybe[str]:
        """Слот каталога -> code; если слота нет, ключ трактуется как code"""
        code = self._slots.get(key, key)
        return Maybe.some(code) if code in self._products else Maybe.nothing()

    # ============ Изменения ============

    def add_product(self, product: Product, slot: Optional[str] = None) -> None:
        self._products[product.code] = product
        if slot:
            self._slots[slot] = product.code
        logger.info("product %s added (%s)", product.code, product.price)

    def remove_product(self, code: str) -> Either[CartError, Product]:
        removed = self._products.pop(code, None)
        if removed is None:
            return self._reject(ProductNotFound(code))
        self._slots = {s: c for s, c in self._slots.items() if c != code}
        logger.info("product %s removed from catalog", code)
        return Either.right(removed)

    def update_product_price(self, key: str, new_price) -> Either[CartError, Product]:
        """
        Меняет цену товара по ключу каталога.
        Ошибки не фатальны: Left(ProductNotFound | InvalidPrice), каталог не меняется.
        """
        code = self.resolve_key(key).to_either(ProductNotFound(key))
        if code.is_left:
            return self._reject(code.error)
        code = code.value

        price = parse_money(new_price)
        if price is None or price < 0:
            return self._reject(InvalidPrice(new_price))

        updated = replace(self._products[code], price=price)
        self._products[code] = updated
        logger.info("price of %s set to %s", code, price)
        return Either.right(updated)

    def update_pricing_rule(self, index: int, fields: dict) -> Either[CartError, PricingRule]:
        """
        Поверхностное слияние fields с правилом по индексу.
        Незаданные поля сохраняются; новый type меняет природу правила.
        Ошибки не фатальны: Left(IndexOutOfRange | InvalidRule), правила не меняются.
        """
        if not 0 <= index < len(self._rules):
            return self._reject(IndexOutOfRange(index, len(self._rules)))

        merged = (
            coerce_rule_fields(fields)
            .map(lambda coerced: replace(self._rules[index], **coerced))
            .bind(validate_rule)
        )
        if merged.is_left:
            return self._reject(merged.error)

        self._rules[index] = merged.value
        logger.info("pricing rule %d updated: %s", index, merged.value)
        return merged

    def add_pricing_rule(self, fields: dict) -> Either[CartError, PricingRule]:
        """Добавляет правило в конец списка (последним в порядке применения)"""
        rule = rule_from_fields(fields)
        if rule.is_left:
            return self._reject(rule.error)
        self._rules.append(rule.value)
        logger.info("pricing rule %d added: %s", len(self._rules) - 1, rule.value)
        return rule

    @staticmethod
    def _reject(error: CartError) -> Either[CartError, None]:
        logger.warning("%s", error)
        return Either.left(error)

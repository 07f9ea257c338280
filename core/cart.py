import logging
from typing import List, Optional, Tuple
from .domain import Evaluation
from .errors import ProductNotFound
from .pricing import evaluate, format_money, group_counts
from .store import CatalogStore

logger = logging.getLogger(__name__)


class ShoppingCart:
    """
    Корзина поверх общего CatalogStore.

    Хранит только купленные коды (в порядке покупки) и один слот промокода.
    Итоги не кэшируются: total() и generate_final_cart() каждый раз
    пересчитывают всё по текущему состоянию каталога и правил.
    """

    def __init__(self, store: CatalogStore):
        self.store = store
        self._items: List[str] = []
        self._promo_code: Optional[str] = None
        # бесплатные товары последнего расчёта; заменяются, а не накапливаются
        self._bonus_items: Tuple[str, ...] = ()

    @property
    def promo_code(self) -> Optional[str]:
        return self._promo_code

    @property
    def purchased(self) -> Tuple[str, ...]:
        return tuple(self._items)

    def add(self, item_code: str, promo_code: Optional[str] = None) -> None:
        """
        Добавляет товар. Неизвестный код -> ProductNotFound, корзина не меняется.
        Непустой promo_code перезаписывает текущий промокод.
        """
        if self.store.find_product(item_code).is_none():
            raise ProductNotFound(item_code)

        self._items.append(item_code)
        if promo_code:
            self._promo_code = promo_code
        logger.debug("added %s (promo=%s)", item_code, self._promo_code)

    def evaluate(self) -> Evaluation:
        evaluation = evaluate(self.store, self._items, self._promo_code)
        self._bonus_items = evaluation.bonus_items
        return evaluation

    def total(self) -> str:
        """Итоговая цена строкой с двумя знаками, например '74.70'"""
        return format_money(self.evaluate().final_total)

    def items(self) -> List[str]:
        """
        Названия товаров в порядке покупки (код, если товар удалён из каталога).
        Бесплатные товары видны только после total() или generate_final_cart().
        """
        return [self.store.product_name(code) for code in self._items + list(self._bonus_items)]

    def generate_final_cart(self) -> List[str]:
        """Итоговая корзина с бесплатными товарами: ['3 x Unlimited 1GB', ...]"""
        bonus = self.evaluate().bonus_items
        names = [self.store.product_name(code) for code in self._items + list(bonus)]
        return [f"{qty} x {name}" for name, qty in group_counts(names).items()]

class CartError(Exception):
    """Базовая ошибка корзины и каталога"""


class ProductNotFound(CartError):
    def __init__(self, key: str):
        super().__init__(f'Product with code "{key}" does not exist.')
        self.key = key


class IndexOutOfRange(CartError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Invalid pricing rule index {index} (rules: {size}).")
        self.index = index
        self.size = size


class InvalidRule(CartError):
    def __init__(self, reason: str, fields: dict = None):
        super().__init__(f"Invalid pricing rule: {reason}")
        self.reason = reason
        self.fields = dict(fields or {})


class InvalidPrice(CartError):
    def __init__(self, price):
        super().__init__(f"Price must be a non-negative amount, got {price!r}.")
        self.price = price

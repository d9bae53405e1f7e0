"""
Errors — типизированные ошибки движка

Каждая публичная операция возвращает значение либо поднимает одно из
исключений ниже. Всё остальное (например, некорректные метаданные пула)
является ошибкой программирования и падает сразу через ValidationError.

Политика:
- Внутри движка нет retry: вычисления детерминированы, повтор с теми же
  входами даст тот же результат.
- CorrelationDataMissing восстанавливаемая: штатный lookup подставляет
  корреляцию по умолчанию и помечает пару как estimated.
"""


class QuantEngineError(Exception):
    """Базовый класс всех ошибок движка."""


class PoolNotFound(QuantEngineError):
    """Пул не найден в реестре (по id или адресу)."""

    def __init__(self, pool_ref: str):
        self.pool_ref = pool_ref
        super().__init__(f"Pool not found: {pool_ref!r}")


class TokenNotInPool(QuantEngineError):
    """Токен (или индекс токена) отсутствует в пуле."""

    def __init__(self, pool_id: str, token: str | int):
        self.pool_id = pool_id
        self.token = token
        super().__init__(f"Token {token!r} is not in pool {pool_id!r}")


class InvalidAmount(QuantEngineError, ValueError):
    """Сумма <= 0, NaN/Inf, либо доля вне допустимого диапазона."""


class NoRouteFound(QuantEngineError):
    """Нет ни прямого пула, ни 2-hop маршрута через промежуточный токен."""

    def __init__(self, token_in: str, token_out: str, reason: str = ""):
        self.token_in = token_in
        self.token_out = token_out
        message = f"No route found {token_in} -> {token_out}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InsufficientLiquidity(QuantEngineError):
    """Запрошенный LP превышает supply, либо не выполнены min-гарантии."""


class CorrelationDataMissing(QuantEngineError):
    """Нет измеренной корреляции для пары активов."""

    def __init__(self, symbol_a: str, symbol_b: str):
        self.symbol_a = symbol_a
        self.symbol_b = symbol_b
        super().__init__(f"Correlation data missing for pair ({symbol_a}, {symbol_b})")


class PriceDataMissing(QuantEngineError):
    """Нет цены для актива при построении портфеля из балансов."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"No price available for {symbol!r}")

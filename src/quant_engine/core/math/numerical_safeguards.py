"""
Numerical Safeguards — Safe Math Primitives

Модуль обеспечивает численную устойчивость всех вычислений движка:
- Конверсия входов в Decimal без float-дрейфа (денежные суммы, количества токенов)
- Валидация сумм и долей (InvalidAmount вместо молчаливой деградации)
- Квантование к точности токена (decimals) с округлением вниз
- Безопасное деление и epsilon-сравнения float (статистические метрики риска)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Денежные суммы и количества токенов — только Decimal
2. NaN/Inf никогда не попадают в вычисления (InvalidAmount)
3. Float сравнения всегда учитывают машинную точность
4. Все операции детерминированы и воспроизводимы
"""

import math
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Final

from quant_engine.core.errors import InvalidAmount

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Epsilon для общих вычислений (float)
EPS_CALC: Final[float] = 1e-12

# Epsilon для сравнения float (относительная толерантность)
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9

# Epsilon для сравнения float (абсолютная толерантность)
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12

# Точность Decimal-контекста для квантования больших сумм с 18 decimals
DECIMAL_QUANTIZE_PRECISION: Final[int] = 60

# Верхняя граница decimals токена (ERC-20 / SPL на практике <= 18)
MAX_TOKEN_DECIMALS: Final[int] = 30


# =============================================================================
# DECIMAL КОНВЕРСИЯ И ВАЛИДАЦИЯ
# =============================================================================


def to_decimal(value: Decimal | int | float | str, name: str = "value") -> Decimal:
    """
    Конверсия входа в конечный Decimal.

    float конвертируется через str(), чтобы 0.1 стало Decimal("0.1"),
    а не двоичным разложением 0.1000000000000000055...

    Args:
        value: Исходное значение
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        Конечный Decimal

    Raises:
        InvalidAmount: Если значение не число, bool, NaN или Inf

    Examples:
        >>> to_decimal(0.1)
        Decimal('0.1')
        >>> to_decimal("1000000")
        Decimal('1000000')
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"{name} must be a number, got bool {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmount(f"{name} must be finite, got {value}")
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmount(f"{name} is not a decimal number: {value!r}") from None
    else:
        raise InvalidAmount(f"{name} must be a number, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmount(f"{name} must be finite, got {value}")

    return result


def validate_amount(value: Decimal | int | float | str, name: str = "amount") -> Decimal:
    """
    Валидация положительной суммы.

    Args:
        value: Сумма (USD или количество токена)
        name: Имя параметра

    Returns:
        Сумма как Decimal (> 0)

    Raises:
        InvalidAmount: Если сумма <= 0 или не конечна
    """
    amount = to_decimal(value, name)
    if amount <= 0:
        raise InvalidAmount(f"{name} must be positive, got {amount}")
    return amount


def validate_fraction(
    value: Decimal | int | float | str,
    name: str = "fraction",
) -> Decimal:
    """
    Валидация доли в полуинтервале [0, 1).

    Args:
        value: Доля (например, slippage tolerance 0.005 = 0.5%)
        name: Имя параметра

    Returns:
        Доля как Decimal

    Raises:
        InvalidAmount: Если доля вне [0, 1) или не конечна
    """
    fraction = to_decimal(value, name)
    if fraction < 0 or fraction >= 1:
        raise InvalidAmount(f"{name} must be in [0, 1), got {fraction}")
    return fraction


def quantize_down(value: Decimal, decimals: int) -> Decimal:
    """
    Квантование суммы к точности токена с округлением вниз.

    Округление вниз гарантирует, что котировка никогда не обещает больше,
    чем пул реально выдаст в минимальных единицах токена.

    Args:
        value: Сумма
        decimals: Число знаков после запятой токена (0..MAX_TOKEN_DECIMALS)

    Returns:
        Квантованная сумма

    Examples:
        >>> quantize_down(Decimal("1.23456789"), 6)
        Decimal('1.234567')
    """
    if decimals < 0 or decimals > MAX_TOKEN_DECIMALS:
        raise ValueError(f"decimals must be in [0, {MAX_TOKEN_DECIMALS}], got {decimals}")

    with localcontext() as ctx:
        ctx.prec = DECIMAL_QUANTIZE_PRECISION
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)


# =============================================================================
# FLOAT: БЕЗОПАСНОЕ ДЕЛЕНИЕ И СРАВНЕНИЯ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """True если значение конечно (не NaN, не Inf)."""
    return math.isfinite(value)


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """
    Безопасное деление float.

    Args:
        numerator: Числитель
        denominator: Знаменатель
        fallback: Значение при abs(denominator) <= EPS_CALC или невалидном результате

    Returns:
        numerator / denominator либо fallback

    Examples:
        >>> safe_divide(10.0, 2.0)
        5.0
        >>> safe_divide(10.0, 0.0)
        0.0
    """
    if not (is_valid_float(numerator) and is_valid_float(denominator)):
        return fallback

    if abs(denominator) <= EPS_CALC:
        return fallback

    result = numerator / denominator
    return result if is_valid_float(result) else fallback


def is_close(
    a: float,
    b: float,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение float с учётом машинной точности.

    Алгоритм:
        abs(a - b) <= max(rel_tol * max(abs(a), abs(b)), abs_tol)
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def is_zero(value: float, tol: float = EPS_FLOAT_COMPARE_ABS) -> bool:
    """True если abs(value) <= tol."""
    return abs(value) <= tol


def clamp(
    value: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    """
    Ограничение значения в заданном диапазоне.

    Examples:
        >>> clamp(5.0, 0.0, 10.0)
        5.0
        >>> clamp(-1.0, 0.0, 10.0)
        0.0
        >>> clamp(15.0, 0.0, 10.0)
        10.0
    """
    result = value

    if min_value is not None:
        result = max(result, min_value)

    if max_value is not None:
        result = min(result, max_value)

    return result

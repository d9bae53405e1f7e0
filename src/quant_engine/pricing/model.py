"""
Pricing Model — оценка одного hop свопа против одного пула

PricingModel — абстрактная возможность "оценить своп". Вызывающий код
(RouteFinder, QuantEngine) зависит только от неё, поэтому линейную
аппроксимацию можно заменить точной bonding-curve моделью без изменений
в вызывающих.

LinearImpactModel — упрощённая модель (НЕ StableSwap/Curve инвариант):
    impact_factor   = amount_in / (tvl * reference_fraction)
    price_impact    = min(impact_factor * impact_slope, impact_cap)
    fee             = amount_in * swap_fee
    expected_output = amount_in * (1 - price_impact - swap_fee)

Гарантии:
- price_impact монотонно не убывает по amount_in при фиксированном пуле
- expected_output <= amount_in
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from quant_engine.core.domain.pool import Pool
from quant_engine.core.domain.quote import PriceImpactResult
from quant_engine.core.errors import InvalidAmount, TokenNotInPool
from quant_engine.core.math.numerical_safeguards import validate_amount


# =============================================================================
# CONSTANTS
# =============================================================================

# Референсная глубина: 1% TVL
DEFAULT_REFERENCE_FRACTION: Final[Decimal] = Decimal("0.01")

# Наклон impact относительно impact_factor
DEFAULT_IMPACT_SLOPE: Final[Decimal] = Decimal("0.5")

# Cap price impact одного hop
DEFAULT_IMPACT_CAP: Final[Decimal] = Decimal("0.05")


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class PricingConfig:
    """Конфигурация линейной модели price impact."""

    reference_fraction: Decimal = DEFAULT_REFERENCE_FRACTION
    impact_slope: Decimal = DEFAULT_IMPACT_SLOPE
    impact_cap: Decimal = DEFAULT_IMPACT_CAP

    def __post_init__(self) -> None:
        if self.reference_fraction <= 0:
            raise ValueError(f"reference_fraction must be positive, got {self.reference_fraction}")
        if self.impact_slope < 0:
            raise ValueError(f"impact_slope must be non-negative, got {self.impact_slope}")
        if not Decimal(0) <= self.impact_cap < Decimal(1):
            raise ValueError(f"impact_cap must be in [0, 1), got {self.impact_cap}")


# =============================================================================
# PRICING MODEL
# =============================================================================


class PricingModel(ABC):
    """Возможность оценить своп по одному пулу."""

    def price_impact(
        self,
        pool: Pool,
        token_in_index: int,
        token_out_index: int,
        amount_in: Decimal | int | float | str,
    ) -> PriceImpactResult:
        """
        Оценка свопа token_in -> token_out в пуле.

        Args:
            pool: Пул
            token_in_index: Индекс входного токена в pool.tokens
            token_out_index: Индекс выходного токена в pool.tokens
            amount_in: Сумма входа (> 0)

        Returns:
            PriceImpactResult

        Raises:
            InvalidAmount: amount_in <= 0 или не конечна
            TokenNotInPool: Индекс вне пула или in == out
        """
        amount = validate_amount(amount_in, "amount_in")
        self._validate_indices(pool, token_in_index, token_out_index)
        return self._estimate(pool, token_in_index, token_out_index, amount)

    @property
    @abstractmethod
    def impact_cap(self) -> Decimal:
        """Верхняя граница price impact одного hop."""

    @abstractmethod
    def _estimate(
        self,
        pool: Pool,
        token_in_index: int,
        token_out_index: int,
        amount_in: Decimal,
    ) -> PriceImpactResult:
        """Оценка по уже провалидированным входам."""

    @staticmethod
    def _validate_indices(pool: Pool, token_in_index: int, token_out_index: int) -> None:
        for index in (token_in_index, token_out_index):
            if isinstance(index, bool) or not isinstance(index, int):
                raise TokenNotInPool(pool.pool_id, index)
            if not 0 <= index < pool.n_tokens:
                raise TokenNotInPool(pool.pool_id, index)

        if token_in_index == token_out_index:
            raise TokenNotInPool(
                pool.pool_id, f"{pool.tokens[token_in_index]} (same token on both sides)"
            )


class LinearImpactModel(PricingModel):
    """
    Линейная аппроксимация price impact.

    Упрощение: impact растёт линейно с размером сделки относительно
    reference_fraction * TVL и ограничен impact_cap.
    """

    def __init__(self, config: PricingConfig | None = None):
        """
        Args:
            config: Параметры модели (default: PricingConfig())
        """
        self.config = config or PricingConfig()

    @property
    def impact_cap(self) -> Decimal:
        return self.config.impact_cap

    def _estimate(
        self,
        pool: Pool,
        token_in_index: int,
        token_out_index: int,
        amount_in: Decimal,
    ) -> PriceImpactResult:
        reference_depth = pool.tvl_usd * self.config.reference_fraction
        impact_factor = amount_in / reference_depth
        price_impact = min(impact_factor * self.config.impact_slope, self.config.impact_cap)

        fee = amount_in * pool.swap_fee
        expected_output = amount_in * (Decimal(1) - price_impact - pool.swap_fee)

        if expected_output <= 0:
            # impact_cap + swap_fee >= 1: пул не может вернуть положительный выход
            raise InvalidAmount(
                f"Pool {pool.pool_id} yields non-positive output for {amount_in}: "
                f"impact={price_impact}, swap_fee={pool.swap_fee}"
            )

        return PriceImpactResult(
            price_impact=price_impact,
            fee=fee,
            expected_output=expected_output,
        )

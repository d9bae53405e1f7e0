"""
Slippage Estimator — рекомендуемый slippage tolerance для сделки

Формулы:
    avg_volatility = (σ_in + σ_out) / 2             (σ по умолчанию 5% для активов вне модели)
    amount_factor  = sqrt(amount / reference_amount)
    slippage       = clamp(avg_volatility * volatility_factor * amount_factor,
                           min_slippage, max_slippage)
    tolerance      = slippage * buffer_multiplier

При amount == reference_amount и avg_volatility == 5% slippage = 0.5%.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from quant_engine.core.domain.risk import RiskModel
from quant_engine.core.math.numerical_safeguards import clamp, validate_amount


# =============================================================================
# CONSTANTS
# =============================================================================

# USD-эквивалент, при котором amount_factor == 1
DEFAULT_REFERENCE_AMOUNT: Final[float] = 10_000.0

DEFAULT_VOLATILITY_FACTOR: Final[float] = 0.1

MIN_SLIPPAGE: Final[float] = 0.001  # 0.1%
MAX_SLIPPAGE: Final[float] = 0.05  # 5%

DEFAULT_BUFFER_MULTIPLIER: Final[float] = 1.5


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class SlippageConfig:
    """Конфигурация SlippageEstimator."""

    reference_amount: float = DEFAULT_REFERENCE_AMOUNT
    volatility_factor: float = DEFAULT_VOLATILITY_FACTOR
    min_slippage: float = MIN_SLIPPAGE
    max_slippage: float = MAX_SLIPPAGE
    buffer_multiplier: float = DEFAULT_BUFFER_MULTIPLIER

    def __post_init__(self) -> None:
        if self.reference_amount <= 0:
            raise ValueError(f"reference_amount must be positive, got {self.reference_amount}")
        if not 0 <= self.min_slippage <= self.max_slippage < 1:
            raise ValueError(
                f"Require 0 <= min_slippage <= max_slippage < 1, "
                f"got [{self.min_slippage}, {self.max_slippage}]"
            )
        if self.buffer_multiplier < 1:
            raise ValueError(f"buffer_multiplier must be >= 1, got {self.buffer_multiplier}")


# =============================================================================
# SLIPPAGE ESTIMATOR
# =============================================================================


class SlippageEstimator:
    """Оценка slippage по волатильностям активов и размеру сделки."""

    def __init__(self, config: SlippageConfig | None = None):
        self.config = config or SlippageConfig()

    def estimate_slippage(
        self,
        token_in: str,
        token_out: str,
        amount: Decimal | int | float | str,
        risk_model: RiskModel,
    ) -> float:
        """
        Оценка slippage (доля).

        Args:
            token_in: Входной актив
            token_out: Выходной актив
            amount: Размер сделки в USD-эквиваленте (> 0)
            risk_model: Модель риска (источник σ)

        Returns:
            Slippage ∈ [min_slippage, max_slippage]

        Raises:
            InvalidAmount: amount <= 0 или не конечен
        """
        # Decimal → float: размер сделки дальше участвует только в статистике
        size = float(validate_amount(amount, "amount"))

        avg_volatility = (risk_model.volatility(token_in) + risk_model.volatility(token_out)) / 2
        amount_factor = math.sqrt(size / self.config.reference_amount)
        raw = avg_volatility * self.config.volatility_factor * amount_factor

        return clamp(raw, self.config.min_slippage, self.config.max_slippage)

    def recommend_tolerance(
        self,
        token_in: str,
        token_out: str,
        amount: Decimal | int | float | str,
        risk_model: RiskModel,
    ) -> float:
        """Рекомендуемый tolerance = slippage * buffer_multiplier."""
        slippage = self.estimate_slippage(token_in, token_out, amount, risk_model)
        return slippage * self.config.buffer_multiplier

"""
Risk Analyzer — портфельные метрики риска по ковариационной модели

Формулы:
    w_i          = value_i / total_value
    variance     = Σ_i w_i² σ_i² + 2 Σ_{i<j} w_i w_j σ_i σ_j ρ_ij
    volatility   = sqrt(variance)
    E[r]         = Σ_i w_i * expected_return_i
    sharpe       = (E[r] - risk_free_rate) / volatility      (None при volatility == 0)
    VaR_95_1d    = z95 * volatility * sqrt(horizon_days / trading_days) * total_value
    max_drawdown = volatility * drawdown_multiplier           (proxy, НЕ историческая симуляция)

Risk contribution (Euler decomposition дисперсии):
    c_i = w_i² σ_i² + Σ_{j≠i} w_i w_j ρ_ij σ_i σ_j
    contribution_pct_i = c_i / variance * 100                 (Σ = 100)

Вырожденный портфель (total_value == 0) → нулевые метрики без расчёта дисперсии.
"""

import math
from dataclasses import dataclass
from typing import Final

from loguru import logger

from quant_engine.core.domain.risk import (
    PortfolioSnapshot,
    RiskContribution,
    RiskMetrics,
    RiskModel,
)
from quant_engine.core.math.numerical_safeguards import is_zero, safe_divide


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_RISK_FREE_RATE: Final[float] = 0.02

# z-score 95% (односторонний)
Z_SCORE_95: Final[float] = 1.645

TRADING_DAYS_PER_YEAR: Final[int] = 252

DEFAULT_VAR_HORIZON_DAYS: Final[int] = 1

# Proxy max drawdown = volatility * multiplier
DEFAULT_DRAWDOWN_MULTIPLIER: Final[float] = 2.5


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class RiskConfig:
    """Конфигурация RiskAnalyzer."""

    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    var_z_score: float = Z_SCORE_95
    trading_days_per_year: int = TRADING_DAYS_PER_YEAR
    var_horizon_days: int = DEFAULT_VAR_HORIZON_DAYS
    drawdown_multiplier: float = DEFAULT_DRAWDOWN_MULTIPLIER

    def __post_init__(self) -> None:
        if self.trading_days_per_year <= 0:
            raise ValueError(f"trading_days_per_year must be positive, got {self.trading_days_per_year}")
        if self.var_horizon_days <= 0:
            raise ValueError(f"var_horizon_days must be positive, got {self.var_horizon_days}")
        if self.var_z_score <= 0:
            raise ValueError(f"var_z_score must be positive, got {self.var_z_score}")
        if self.drawdown_multiplier < 0:
            raise ValueError(f"drawdown_multiplier must be non-negative, got {self.drawdown_multiplier}")


# =============================================================================
# RISK ANALYZER
# =============================================================================


class RiskAnalyzer:
    """Расчёт RiskMetrics для снапшота портфеля."""

    def __init__(self, config: RiskConfig | None = None):
        """
        Args:
            config: Конфигурация (default: RiskConfig())
        """
        self.config = config or RiskConfig()

    def compute_risk_metrics(self, portfolio: PortfolioSnapshot, risk_model: RiskModel) -> RiskMetrics:
        """
        Расчёт метрик риска.

        Args:
            portfolio: Снапшот портфеля
            risk_model: Модель риска (профили + корреляции)

        Returns:
            RiskMetrics
        """
        total_value = portfolio.total_value
        if total_value == 0:
            return self._degenerate_metrics()

        weights = portfolio.weights()
        symbols = list(weights)

        defaulted = tuple(s for s in symbols if not risk_model.has_profile(s))
        if defaulted:
            logger.warning("No risk profile for {}, using model defaults", list(defaulted))

        sigmas = [risk_model.volatility(s) for s in symbols]
        w = [weights[s] for s in symbols]

        # Корреляции по парам i<j (одна оценка на пару)
        n = len(symbols)
        rho = [[1.0] * n for _ in range(n)]
        estimated: list[tuple[str, str]] = []
        for i in range(n):
            for j in range(i + 1, n):
                lookup = risk_model.correlation(symbols[i], symbols[j])
                rho[i][j] = rho[j][i] = lookup.value
                if lookup.estimated:
                    estimated.append((symbols[i], symbols[j]))

        variance = self._portfolio_variance(w, sigmas, rho)
        volatility = math.sqrt(variance)

        expected_return = sum(
            weights[s] * risk_model.profile(s).expected_return for s in symbols
        )

        zero_risk = is_zero(volatility)
        if zero_risk:
            sharpe_ratio = None
        else:
            sharpe_ratio = safe_divide(expected_return - self.config.risk_free_rate, volatility)

        horizon = math.sqrt(self.config.var_horizon_days / self.config.trading_days_per_year)
        value_at_risk = self.config.var_z_score * volatility * horizon * float(total_value)

        contributions = self._risk_contributions(symbols, w, sigmas, rho, variance, zero_risk)

        return RiskMetrics(
            total_value=total_value,
            volatility=volatility,
            expected_return=expected_return,
            sharpe_ratio=sharpe_ratio,
            value_at_risk=value_at_risk,
            max_drawdown=volatility * self.config.drawdown_multiplier,
            risk_contributions=contributions,
            estimated_correlations=tuple(estimated),
            defaulted_profiles=defaulted,
            is_degenerate=False,
        )

    @staticmethod
    def _portfolio_variance(w: list[float], sigmas: list[float], rho: list[list[float]]) -> float:
        n = len(w)
        variance = 0.0
        for i in range(n):
            variance += w[i] * w[i] * sigmas[i] * sigmas[i]
            for j in range(i + 1, n):
                variance += 2 * w[i] * w[j] * sigmas[i] * sigmas[j] * rho[i][j]

        # Отрицательные корреляции могут дать -1e-18 из-за округления
        return max(variance, 0.0)

    @staticmethod
    def _risk_contributions(
        symbols: list[str],
        w: list[float],
        sigmas: list[float],
        rho: list[list[float]],
        variance: float,
        zero_risk: bool,
    ) -> tuple[RiskContribution, ...]:
        n = len(symbols)
        result = []
        for i in range(n):
            # Тот же критерий, что и для sharpe_ratio = None
            if zero_risk:
                pct = 0.0
            else:
                c_i = sum(w[i] * w[j] * rho[i][j] * sigmas[i] * sigmas[j] for j in range(n))
                pct = c_i / variance * 100.0
            result.append(
                RiskContribution(
                    symbol=symbols[i],
                    weight=w[i],
                    volatility=sigmas[i],
                    contribution_pct=pct,
                )
            )
        return tuple(result)

    @staticmethod
    def _degenerate_metrics() -> RiskMetrics:
        return RiskMetrics(
            total_value=0,
            volatility=0.0,
            expected_return=0.0,
            sharpe_ratio=0.0,
            value_at_risk=0.0,
            max_drawdown=0.0,
            is_degenerate=True,
        )

"""Risk — портфельные метрики риска и оценка slippage."""

from .analyzer import (
    DEFAULT_DRAWDOWN_MULTIPLIER,
    DEFAULT_RISK_FREE_RATE,
    TRADING_DAYS_PER_YEAR,
    Z_SCORE_95,
    RiskAnalyzer,
    RiskConfig,
)
from .slippage import (
    DEFAULT_BUFFER_MULTIPLIER,
    DEFAULT_REFERENCE_AMOUNT,
    MAX_SLIPPAGE,
    MIN_SLIPPAGE,
    SlippageConfig,
    SlippageEstimator,
)

__all__ = [
    "DEFAULT_DRAWDOWN_MULTIPLIER",
    "DEFAULT_RISK_FREE_RATE",
    "TRADING_DAYS_PER_YEAR",
    "Z_SCORE_95",
    "RiskAnalyzer",
    "RiskConfig",
    "DEFAULT_BUFFER_MULTIPLIER",
    "DEFAULT_REFERENCE_AMOUNT",
    "MAX_SLIPPAGE",
    "MIN_SLIPPAGE",
    "SlippageConfig",
    "SlippageEstimator",
]

"""
Domain models and value objects.

Contains fundamental domain entities like Pool, Quote, LiquidityOperation,
RiskModel, PortfolioSnapshot, RiskMetrics.
"""

from quant_engine.core.domain.liquidity import LiquidityOperation, LiquidityOperationKind
from quant_engine.core.domain.pool import Pool, PoolRegistry
from quant_engine.core.domain.quote import HopQuote, PriceImpactResult, Quote
from quant_engine.core.domain.risk import (
    DEFAULT_CORRELATION,
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_VOLATILITY,
    AssetRiskProfile,
    CorrelationLookup,
    CorrelationMatrix,
    PortfolioPosition,
    PortfolioSnapshot,
    RiskContribution,
    RiskMetrics,
    RiskModel,
)

__all__ = [
    # Pool model
    "Pool",
    "PoolRegistry",
    # Quote model
    "PriceImpactResult",
    "HopQuote",
    "Quote",
    # Liquidity model
    "LiquidityOperation",
    "LiquidityOperationKind",
    # Risk model
    "DEFAULT_CORRELATION",
    "DEFAULT_EXPECTED_RETURN",
    "DEFAULT_VOLATILITY",
    "AssetRiskProfile",
    "CorrelationLookup",
    "CorrelationMatrix",
    "RiskModel",
    "PortfolioPosition",
    "PortfolioSnapshot",
    "RiskContribution",
    "RiskMetrics",
]

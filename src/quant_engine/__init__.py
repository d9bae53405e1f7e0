"""
Quant Engine — AMM swap pricing, routing, liquidity and portfolio risk.

Детерминированное ядро без I/O: котировки и маршруты через пулы,
LP mint/burn, метрики риска портфеля и рекомендуемый slippage tolerance.
"""

from quant_engine.core.errors import (
    CorrelationDataMissing,
    InsufficientLiquidity,
    InvalidAmount,
    NoRouteFound,
    PoolNotFound,
    PriceDataMissing,
    QuantEngineError,
    TokenNotInPool,
)
from quant_engine.engine import EngineConfig, QuantEngine
from quant_engine.log import configure_logging
from quant_engine.snapshot import MarketSnapshot, SnapshotStore

__all__ = [
    # Facade
    "QuantEngine",
    "EngineConfig",
    "MarketSnapshot",
    "SnapshotStore",
    "configure_logging",
    # Errors
    "QuantEngineError",
    "PoolNotFound",
    "TokenNotInPool",
    "InvalidAmount",
    "NoRouteFound",
    "InsufficientLiquidity",
    "CorrelationDataMissing",
    "PriceDataMissing",
]

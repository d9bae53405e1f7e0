"""Liquidity — расчёт LP mint/burn для add/remove liquidity."""

from .engine import (
    DEFAULT_DEPOSIT_SLIPPAGE,
    DEFAULT_GROWTH_FACTOR,
    DEFAULT_MINT_DISCOUNT,
    LiquidityConfig,
    LiquidityEngine,
)

__all__ = [
    "DEFAULT_DEPOSIT_SLIPPAGE",
    "DEFAULT_GROWTH_FACTOR",
    "DEFAULT_MINT_DISCOUNT",
    "LiquidityConfig",
    "LiquidityEngine",
]

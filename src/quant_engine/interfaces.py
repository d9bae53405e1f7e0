"""
Interfaces — внешние коллабораторы движка (только контракты)

Реализации (оракул цен, кошелёк, фиды пулов) живут вне движка. Весь I/O
происходит на их стороне до вызова движка; тайм-ауты и retry тоже их.
"""

from decimal import Decimal
from typing import Any, Dict, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class PriceTick(BaseModel):
    """Цена пары от оракула."""

    value: Decimal = Field(..., gt=0, allow_inf_nan=False)
    change_24h: float = Field(0.0, allow_inf_nan=False, description="Изменение за 24ч (доля)")

    model_config = {"frozen": True}


class TokenBalance(BaseModel):
    """Баланс токена в кошельке."""

    symbol: str = Field(..., min_length=1)
    balance: Decimal = Field(..., ge=0, allow_inf_nan=False)

    model_config = {"frozen": True}


@runtime_checkable
class PriceOracle(Protocol):
    """Оракул цен. Используется вызывающим кодом для аннотации котировок."""

    def get_price(self, pair_id: str) -> PriceTick: ...


@runtime_checkable
class BalanceProvider(Protocol):
    """Источник балансов кошелька (вход для PortfolioSnapshot)."""

    def list_tokens(self, wallet_address: str) -> list[TokenBalance]: ...


@runtime_checkable
class PoolDataSource(Protocol):
    """Фид состояния пулов: список payload по контракту schema/pool.json."""

    def fetch_pools(self) -> list[Dict[str, Any]]: ...


@runtime_checkable
class RiskDataSource(Protocol):
    """Фид модели риска: payload по контракту schema/risk_model.json."""

    def fetch_risk_model(self) -> Dict[str, Any]: ...

"""
Parsers — payload фидов -> domain модели

Сначала JSON Schema контракт, затем pydantic модель. Числа из фидов
конвертируются в Decimal через str(), чтобы не тащить float-дрейф.
"""

from decimal import Decimal
from typing import Any, Dict

from quant_engine.core.contracts.validators import validate_pool, validate_risk_model
from quant_engine.core.domain.pool import Pool
from quant_engine.core.domain.risk import (
    DEFAULT_CORRELATION,
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_VOLATILITY,
    AssetRiskProfile,
    CorrelationMatrix,
    RiskModel,
)


def _dec(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def parse_pool(data: Dict[str, Any]) -> Pool:
    """
    Построение Pool из payload PoolDataSource.

    Raises:
        jsonschema.ValidationError: Payload не соответствует контракту
        pydantic.ValidationError: Нарушены инварианты Pool
    """
    validate_pool(data)

    reserves = data.get("reserves")
    return Pool(
        pool_id=data["pool_id"],
        name=data["name"],
        address=data.get("address"),
        tokens=tuple(data["tokens"]),
        decimals=tuple(data["decimals"]),
        swap_fee=_dec(data["swap_fee"]),
        admin_fee=_dec(data.get("admin_fee", 0)),
        tvl_usd=_dec(data["tvl_usd"]),
        reserves=tuple(_dec(r) for r in reserves) if reserves is not None else None,
    )


def parse_risk_model(data: Dict[str, Any]) -> RiskModel:
    """
    Построение RiskModel из payload RiskDataSource.

    Raises:
        jsonschema.ValidationError: Payload не соответствует контракту
        ValueError: Нарушены инварианты корреляций / профилей
    """
    validate_risk_model(data)

    profiles = [AssetRiskProfile(**asset) for asset in data["assets"]]
    correlations = CorrelationMatrix.from_nested(
        data.get("correlations", {}),
        default=data.get("default_correlation", DEFAULT_CORRELATION),
    )
    return RiskModel(
        profiles,
        correlations,
        default_volatility=data.get("default_volatility", DEFAULT_VOLATILITY),
        default_expected_return=data.get("default_expected_return", DEFAULT_EXPECTED_RETURN),
    )

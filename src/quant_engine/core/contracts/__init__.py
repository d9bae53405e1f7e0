"""
Contract Validation Module

Валидация payload внешних фидов (пулы, модель риска) по JSON Schema
и построение domain моделей.
"""

from .parsers import parse_pool, parse_risk_model
from .validators import (
    ContractValidator,
    FeedContract,
    PoolValidator,
    RiskModelValidator,
    SchemaLoader,
    validate_pool,
    validate_risk_model,
)

__all__ = [
    # Classes
    "FeedContract",
    "SchemaLoader",
    "ContractValidator",
    "PoolValidator",
    "RiskModelValidator",
    # Functions
    "validate_pool",
    "validate_risk_model",
    "parse_pool",
    "parse_risk_model",
]

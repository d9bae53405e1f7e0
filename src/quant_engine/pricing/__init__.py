"""Pricing — оценка свопа по пулу и поиск маршрута."""

from .model import (
    DEFAULT_IMPACT_CAP,
    DEFAULT_IMPACT_SLOPE,
    DEFAULT_REFERENCE_FRACTION,
    LinearImpactModel,
    PricingConfig,
    PricingModel,
)
from .router import (
    DEFAULT_INTERMEDIARY_TOKEN,
    DEFAULT_SLIPPAGE_TOLERANCE,
    RouteFinder,
    RouterConfig,
)

__all__ = [
    "DEFAULT_IMPACT_CAP",
    "DEFAULT_IMPACT_SLOPE",
    "DEFAULT_REFERENCE_FRACTION",
    "LinearImpactModel",
    "PricingConfig",
    "PricingModel",
    "DEFAULT_INTERMEDIARY_TOKEN",
    "DEFAULT_SLIPPAGE_TOLERANCE",
    "RouteFinder",
    "RouterConfig",
]

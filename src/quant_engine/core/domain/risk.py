"""
Risk — статические данные модели риска и снапшот портфеля

Содержит:
- AssetRiskProfile: годовая волатильность и ожидаемая доходность актива
- CorrelationMatrix: симметричная матрица корреляций с явным флагом estimated
- RiskModel: профили + корреляции + дефолты для неизвестных активов
- PortfolioSnapshot: упорядоченные позиции (symbol, USD value)
- RiskMetrics: результат RiskAnalyzer

Missing пары корреляций никогда не подставляются молча: lookup возвращает
CorrelationLookup(estimated=True), а RiskAnalyzer выносит такие пары в
RiskMetrics.estimated_correlations.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType
from typing import Final, NamedTuple

from loguru import logger
from pydantic import BaseModel, Field, model_validator

from quant_engine.core.errors import CorrelationDataMissing
from quant_engine.core.math.numerical_safeguards import is_close, is_valid_float


# =============================================================================
# CONSTANTS
# =============================================================================

# Корреляция по умолчанию для пар без измеренных данных
DEFAULT_CORRELATION: Final[float] = 0.5

# Волатильность по умолчанию для активов вне модели (годовая, доля)
DEFAULT_VOLATILITY: Final[float] = 0.05

# Ожидаемая годовая доходность по умолчанию для активов вне модели
DEFAULT_EXPECTED_RETURN: Final[float] = 0.03


# =============================================================================
# ASSET PROFILE
# =============================================================================


class AssetRiskProfile(BaseModel):
    """Профиль риска актива (annualized)."""

    symbol: str = Field(..., min_length=1)
    volatility: float = Field(..., ge=0, allow_inf_nan=False, description="σ, годовая (доля)")
    expected_return: float = Field(
        ..., allow_inf_nan=False, description="Ожидаемая годовая доходность (доля)"
    )

    model_config = {"frozen": True}


# =============================================================================
# CORRELATION MATRIX
# =============================================================================


class CorrelationLookup(NamedTuple):
    """Результат lookup корреляции."""

    value: float
    estimated: bool  # True = подставлен DEFAULT, не измерено


def _pair_key(symbol_a: str, symbol_b: str) -> tuple[str, str]:
    return (symbol_a, symbol_b) if symbol_a <= symbol_b else (symbol_b, symbol_a)


class CorrelationMatrix:
    """
    Симметричная матрица корреляций.

    Хранит только внедиагональные пары в каноническом порядке ключа,
    поэтому ρ(a, b) == ρ(b, a) по построению. Диагональ всегда 1.
    """

    __slots__ = ("_pairs", "_default")

    def __init__(
        self,
        pairs: Mapping[tuple[str, str], float] | None = None,
        default: float = DEFAULT_CORRELATION,
    ):
        """
        Args:
            pairs: {(a, b): ρ}. Обе ориентации пары допустимы, если совпадают
            default: Корреляция для отсутствующих пар

        Raises:
            ValueError: ρ вне [-1, 1], диагональ != 1, противоречивые дубликаты
        """
        if not -1.0 <= default <= 1.0:
            raise ValueError(f"default correlation must be in [-1, 1], got {default}")

        normalized: dict[tuple[str, str], float] = {}
        for (a, b), rho in (pairs or {}).items():
            rho = float(rho)
            if not is_valid_float(rho) or not -1.0 <= rho <= 1.0:
                raise ValueError(f"Correlation ({a}, {b}) must be in [-1, 1], got {rho}")

            if a == b:
                if not is_close(rho, 1.0):
                    raise ValueError(f"Diagonal correlation ({a}, {a}) must be 1, got {rho}")
                continue

            key = _pair_key(a, b)
            if key in normalized and not is_close(normalized[key], rho):
                raise ValueError(
                    f"Asymmetric correlation for {key}: {normalized[key]} vs {rho}"
                )
            normalized[key] = rho

        self._pairs: Mapping[tuple[str, str], float] = MappingProxyType(normalized)
        self._default = default

    @classmethod
    def from_nested(
        cls,
        nested: Mapping[str, Mapping[str, float]],
        default: float = DEFAULT_CORRELATION,
    ) -> "CorrelationMatrix":
        """Построение из вложенного dict {a: {b: ρ}}."""
        pairs = {(a, b): rho for a, row in nested.items() for b, rho in row.items()}
        return cls(pairs, default=default)

    @property
    def default(self) -> float:
        return self._default

    @property
    def pairs(self) -> Mapping[tuple[str, str], float]:
        return self._pairs

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"CorrelationMatrix({len(self._pairs)} pairs, default={self._default})"

    def require(self, symbol_a: str, symbol_b: str) -> float:
        """
        Строгий lookup: только измеренные данные.

        Raises:
            CorrelationDataMissing: Если пары нет в матрице
        """
        if symbol_a == symbol_b:
            return 1.0
        try:
            return self._pairs[_pair_key(symbol_a, symbol_b)]
        except KeyError:
            raise CorrelationDataMissing(symbol_a, symbol_b) from None

    def lookup(self, symbol_a: str, symbol_b: str) -> CorrelationLookup:
        """
        Lookup с fallback на default.

        Отсутствующая пара логируется и возвращается с estimated=True.
        """
        try:
            return CorrelationLookup(self.require(symbol_a, symbol_b), False)
        except CorrelationDataMissing as exc:
            logger.warning(
                "{}, using default correlation {}", exc, self._default
            )
            return CorrelationLookup(self._default, True)


# =============================================================================
# RISK MODEL
# =============================================================================


class RiskModel:
    """
    Статическая модель риска: профили активов + корреляции.

    Неизменяема после создания; обновление — новый экземпляр в SnapshotStore.
    """

    __slots__ = ("_profiles", "_correlations", "_default_volatility", "_default_expected_return")

    def __init__(
        self,
        profiles: Iterable[AssetRiskProfile] = (),
        correlations: CorrelationMatrix | None = None,
        default_volatility: float = DEFAULT_VOLATILITY,
        default_expected_return: float = DEFAULT_EXPECTED_RETURN,
    ):
        if not is_valid_float(default_volatility) or default_volatility < 0:
            raise ValueError(f"default_volatility must be >= 0, got {default_volatility}")

        by_symbol: dict[str, AssetRiskProfile] = {}
        for profile in profiles:
            if profile.symbol in by_symbol:
                raise ValueError(f"Duplicate risk profile: {profile.symbol}")
            by_symbol[profile.symbol] = profile

        self._profiles: Mapping[str, AssetRiskProfile] = MappingProxyType(by_symbol)
        self._correlations = correlations or CorrelationMatrix()
        self._default_volatility = default_volatility
        self._default_expected_return = default_expected_return

    @property
    def profiles(self) -> Mapping[str, AssetRiskProfile]:
        return self._profiles

    @property
    def correlations(self) -> CorrelationMatrix:
        return self._correlations

    @property
    def default_volatility(self) -> float:
        return self._default_volatility

    @property
    def default_expected_return(self) -> float:
        return self._default_expected_return

    def has_profile(self, symbol: str) -> bool:
        return symbol in self._profiles

    def profile(self, symbol: str) -> AssetRiskProfile:
        """Профиль актива; для неизвестного актива — профиль из дефолтов."""
        profile = self._profiles.get(symbol)
        if profile is not None:
            return profile
        return AssetRiskProfile(
            symbol=symbol,
            volatility=self._default_volatility,
            expected_return=self._default_expected_return,
        )

    def volatility(self, symbol: str) -> float:
        return self.profile(symbol).volatility

    def correlation(self, symbol_a: str, symbol_b: str) -> CorrelationLookup:
        return self._correlations.lookup(symbol_a, symbol_b)


# =============================================================================
# PORTFOLIO SNAPSHOT
# =============================================================================


class PortfolioPosition(BaseModel):
    """Позиция портфеля: актив и его стоимость в USD."""

    symbol: str = Field(..., min_length=1)
    usd_value: Decimal = Field(..., ge=0, allow_inf_nan=False)

    model_config = {"frozen": True}


class PortfolioSnapshot(BaseModel):
    """
    Снапшот портфеля: упорядоченный набор (symbol, USD value).

    weights = value / Σvalues; при Σvalues == 0 портфель вырожден.
    """

    positions: tuple[PortfolioPosition, ...] = Field(default=())

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_unique_symbols(self) -> "PortfolioSnapshot":
        symbols = [p.symbol for p in self.positions]
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"Duplicate symbols in portfolio: {symbols}")
        return self

    @classmethod
    def from_values(cls, values: Mapping[str, Decimal | int | float | str]) -> "PortfolioSnapshot":
        """Построение из {symbol: usd_value} с сохранением порядка."""
        return cls(
            positions=tuple(
                PortfolioPosition(symbol=symbol, usd_value=Decimal(str(value)))
                for symbol, value in values.items()
            )
        )

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(p.symbol for p in self.positions)

    @property
    def total_value(self) -> Decimal:
        return sum((p.usd_value for p in self.positions), Decimal(0))

    @property
    def is_degenerate(self) -> bool:
        return self.total_value == 0

    def weights(self) -> dict[str, float]:
        """
        Веса позиций.

        Raises:
            ValueError: Для вырожденного портфеля (total == 0)
        """
        total = self.total_value
        if total == 0:
            raise ValueError("Weights are undefined for a zero-value portfolio")
        return {p.symbol: float(p.usd_value / total) for p in self.positions}


# =============================================================================
# RISK METRICS
# =============================================================================


class RiskContribution(BaseModel):
    """Вклад актива в риск портфеля."""

    symbol: str
    weight: float = Field(..., ge=0, le=1)
    volatility: float = Field(..., ge=0)
    contribution_pct: float = Field(..., description="Доля в дисперсии портфеля (%)")

    model_config = {"frozen": True}


class RiskMetrics(BaseModel):
    """
    Метрики риска портфеля.

    - value_at_risk: параметрический VaR (95%, 1 день) в USD
    - max_drawdown: упрощённый proxy σ * 2.5, НЕ историческая симуляция
    - sharpe_ratio: None при нулевой волатильности
    - estimated_correlations: пары, для которых подставлен DEFAULT_CORRELATION
    - defaulted_profiles: активы, для которых σ / доходность взяты из дефолтов
    """

    total_value: Decimal = Field(..., ge=0)
    volatility: float = Field(..., ge=0)
    expected_return: float
    sharpe_ratio: float | None
    value_at_risk: float = Field(..., ge=0)
    max_drawdown: float = Field(..., ge=0)
    max_drawdown_is_estimate: bool = True

    risk_contributions: tuple[RiskContribution, ...] = Field(default=())
    estimated_correlations: tuple[tuple[str, str], ...] = Field(default=())
    defaulted_profiles: tuple[str, ...] = Field(default=())

    is_degenerate: bool = False

    model_config = {"frozen": True}

    @property
    def contributions_by_symbol(self) -> dict[str, float]:
        return {c.symbol: c.contribution_pct for c in self.risk_contributions}

    @property
    def uses_estimated_data(self) -> bool:
        return bool(self.estimated_correlations or self.defaulted_profiles)

"""
QuantEngine — фасад движка ценообразования и риска

Публичные операции для торгового и портфельного слоёв:
- get_quote / get_pool_info
- add_liquidity / remove_liquidity / lp_share_price
- compute_risk_metrics / portfolio_from_balances
- estimate_slippage / recommend_slippage_tolerance

Каждый вызов берёт текущий MarketSnapshot один раз и считает по нему,
поэтому конкурентный refresh не влияет на уже начатый расчёт.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger

from quant_engine.core.domain.liquidity import LiquidityOperation
from quant_engine.core.domain.pool import Pool
from quant_engine.core.domain.quote import Quote
from quant_engine.core.domain.risk import PortfolioPosition, PortfolioSnapshot, RiskMetrics
from quant_engine.core.errors import PriceDataMissing
from quant_engine.core.math.numerical_safeguards import validate_amount
from quant_engine.defaults import default_pools, default_risk_model
from quant_engine.interfaces import PoolDataSource, PriceTick, RiskDataSource, TokenBalance
from quant_engine.liquidity.engine import LiquidityConfig, LiquidityEngine
from quant_engine.pricing.model import LinearImpactModel, PricingConfig, PricingModel
from quant_engine.pricing.router import RouteFinder, RouterConfig
from quant_engine.risk.analyzer import RiskAnalyzer, RiskConfig
from quant_engine.risk.slippage import SlippageConfig, SlippageEstimator
from quant_engine.snapshot import MarketSnapshot, SnapshotStore


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация всех компонентов движка."""

    pricing: PricingConfig = field(default_factory=PricingConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    liquidity: LiquidityConfig = field(default_factory=LiquidityConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    slippage: SlippageConfig = field(default_factory=SlippageConfig)


# =============================================================================
# ENGINE
# =============================================================================


class QuantEngine:
    """Фасад: котировки, ликвидность, риск, slippage."""

    def __init__(
        self,
        store: SnapshotStore,
        config: EngineConfig | None = None,
        pricing_model: PricingModel | None = None,
    ):
        """
        Args:
            store: Хранилище рыночного снапшота
            config: Конфигурация (default: EngineConfig())
            pricing_model: Модель оценки hop (default: LinearImpactModel(config.pricing))
        """
        self.store = store
        self.config = config or EngineConfig()
        self.pricing_model = pricing_model or LinearImpactModel(self.config.pricing)
        self.liquidity_engine = LiquidityEngine(self.config.liquidity)
        self.risk_analyzer = RiskAnalyzer(self.config.risk)
        self.slippage_estimator = SlippageEstimator(self.config.slippage)

    @classmethod
    def with_defaults(
        cls,
        config: EngineConfig | None = None,
        pool_source: PoolDataSource | None = None,
        risk_source: RiskDataSource | None = None,
    ) -> "QuantEngine":
        """Движок с начальным снапшотом из quant_engine.defaults."""
        initial = MarketSnapshot(registry=default_pools(), risk_model=default_risk_model())
        return cls(SnapshotStore(initial, pool_source, risk_source), config)

    @property
    def snapshot(self) -> MarketSnapshot:
        return self.store.current()

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def get_quote(
        self,
        token_in: str,
        token_out: str,
        amount: Decimal | int | float | str,
        slippage_tolerance: Decimal | float | str | None = None,
    ) -> Quote:
        """
        Котировка свопа с поиском маршрута.

        Raises:
            InvalidAmount, NoRouteFound
        """
        logger.debug("Getting quote {} {} -> {}", amount, token_in, token_out)
        snapshot = self.store.current()
        finder = RouteFinder(snapshot.registry, self.pricing_model, self.config.router)
        quote = finder.find_route(token_in, token_out, amount, slippage_tolerance)
        logger.debug(
            "Quote via {}: expected={} impact={}", quote.pools, quote.expected_output, quote.price_impact
        )
        return quote

    def get_pool_info(self, pool_ref: str) -> Pool:
        """
        Пул по id или адресу.

        Raises:
            PoolNotFound
        """
        return self.store.current().registry.get(pool_ref)

    # -------------------------------------------------------------------------
    # Liquidity
    # -------------------------------------------------------------------------

    def add_liquidity(
        self,
        pool_ref: str,
        max_amounts_in: Sequence[Decimal | int | float | str],
        min_lp_mint: Decimal | int | float | str | None = None,
    ) -> LiquidityOperation:
        """
        Raises:
            PoolNotFound, InvalidAmount, InsufficientLiquidity
        """
        logger.debug("Adding liquidity to {}: {}", pool_ref, list(max_amounts_in))
        pool = self.get_pool_info(pool_ref)
        return self.liquidity_engine.add_liquidity(pool, max_amounts_in, min_lp_mint)

    def remove_liquidity(
        self,
        pool_ref: str,
        lp_amount: Decimal | int | float | str,
        lp_total_supply: Decimal | int | float | str,
        min_amounts_out: Sequence[Decimal | int | float | str] | None = None,
    ) -> LiquidityOperation:
        """
        Raises:
            PoolNotFound, InvalidAmount, InsufficientLiquidity
        """
        logger.debug("Removing liquidity from {}: lp={} supply={}", pool_ref, lp_amount, lp_total_supply)
        pool = self.get_pool_info(pool_ref)
        operation = self.liquidity_engine.remove_liquidity(
            pool, lp_amount, lp_total_supply, min_amounts_out
        )
        if not operation.reserves_tracked:
            logger.debug("Pool {} has no tracked reserves, even-split approximation used", pool.pool_id)
        return operation

    def lp_share_price(
        self,
        pool_ref: str,
        max_amounts_in: Sequence[Decimal | int | float | str],
    ) -> Decimal:
        """Цена LP токена по симулированному депозиту."""
        pool = self.get_pool_info(pool_ref)
        return self.liquidity_engine.lp_share_price(pool, max_amounts_in)

    # -------------------------------------------------------------------------
    # Risk
    # -------------------------------------------------------------------------

    def compute_risk_metrics(self, portfolio: PortfolioSnapshot) -> RiskMetrics:
        logger.debug("Calculating risk metrics for {} positions", len(portfolio.positions))
        return self.risk_analyzer.compute_risk_metrics(portfolio, self.store.current().risk_model)

    def portfolio_from_balances(
        self,
        balances: Iterable[TokenBalance],
        prices: Mapping[str, Decimal | int | float | str | PriceTick],
    ) -> PortfolioSnapshot:
        """
        Построение PortfolioSnapshot: balance * price по каждому токену.

        Нулевые балансы пропускаются и цены не требуют.

        Raises:
            PriceDataMissing: Нет цены для токена с ненулевым балансом
            InvalidAmount: Цена не положительна или не число
        """
        positions = []
        for item in balances:
            if item.balance == 0:
                continue
            if item.symbol not in prices:
                raise PriceDataMissing(item.symbol)

            price = prices[item.symbol]
            if isinstance(price, PriceTick):
                unit_price = price.value
            else:
                unit_price = validate_amount(price, f"{item.symbol} price")
            positions.append(PortfolioPosition(symbol=item.symbol, usd_value=item.balance * unit_price))

        return PortfolioSnapshot(positions=tuple(positions))

    # -------------------------------------------------------------------------
    # Slippage
    # -------------------------------------------------------------------------

    def estimate_slippage(self, token_in: str, token_out: str, amount: Decimal | int | float | str) -> float:
        """
        Raises:
            InvalidAmount
        """
        logger.debug("Calculating slippage {} {} -> {}", amount, token_in, token_out)
        return self.slippage_estimator.estimate_slippage(
            token_in, token_out, amount, self.store.current().risk_model
        )

    def recommend_slippage_tolerance(self, token_in: str, token_out: str, amount: Decimal | int | float | str) -> float:
        """
        Raises:
            InvalidAmount
        """
        logger.debug("Calculating slippage tolerance {} {} -> {}", amount, token_in, token_out)
        return self.slippage_estimator.recommend_tolerance(
            token_in, token_out, amount, self.store.current().risk_model
        )

"""
Тесты фасада QuantEngine

Проверяет:
- Операции фасада поверх текущего снапшота
- Lookup пула по id и адресу
- portfolio_from_balances (балансы * цены)
- Подмену модели ценообразования
- Видимость publish для последующих вызовов
- configure_logging (loguru sinks)
"""

import json
import sys
from decimal import Decimal

import pytest
from loguru import logger

from quant_engine import (
    EngineConfig,
    InsufficientLiquidity,
    InvalidAmount,
    NoRouteFound,
    PoolNotFound,
    PriceDataMissing,
    QuantEngine,
    QuantEngineError,
    configure_logging,
)
from quant_engine.core.domain.pool import PoolRegistry
from quant_engine.core.domain.quote import PriceImpactResult
from quant_engine.core.domain.risk import PortfolioSnapshot
from quant_engine.interfaces import PriceTick, TokenBalance
from quant_engine.pricing.model import PricingModel
from quant_engine.pricing.router import RouterConfig
from quant_engine.risk.slippage import SlippageConfig


@pytest.fixture
def engine() -> QuantEngine:
    return QuantEngine.with_defaults()


# =============================================================================
# SWAPS / POOLS
# =============================================================================


class TestQuotes:
    """Тесты get_quote / get_pool_info"""

    def test_direct_quote(self, engine) -> None:
        quote = engine.get_quote("USDC", "USDT", "1000")
        assert quote.pools == ("susd",)
        assert quote.expected_output == Decimal("999.1")

    def test_two_hop_quote(self, engine) -> None:
        quote = engine.get_quote("DAI", "USD*", 10000)
        assert quote.route == ("DAI", "USDC", "USD*")
        assert quote.pools == ("tripool", "usds")

    def test_no_route(self, engine) -> None:
        with pytest.raises(NoRouteFound):
            engine.get_quote("xGOLD", "USDC", 100)

    def test_errors_share_base_class(self, engine) -> None:
        with pytest.raises(QuantEngineError):
            engine.get_quote("USDC", "USDT", -1)

    def test_pool_info_by_id_and_address(self, engine) -> None:
        assert engine.get_pool_info("tripool").name == "Tri-Pool"
        assert engine.get_pool_info("tripoolAddress123456789").pool_id == "tripool"

    def test_pool_not_found(self, engine) -> None:
        with pytest.raises(PoolNotFound):
            engine.get_pool_info("missing")

    def test_router_config_applied(self) -> None:
        engine = QuantEngine.with_defaults(
            EngineConfig(router=RouterConfig(default_slippage_tolerance=Decimal("0.01")))
        )
        quote = engine.get_quote("USDC", "USDT", 1000)
        assert quote.slippage_tolerance == Decimal("0.01")

    def test_publish_visible_to_next_call(self, engine) -> None:
        engine.store.publish(registry=PoolRegistry())

        with pytest.raises(NoRouteFound):
            engine.get_quote("USDC", "USDT", 1000)
        assert engine.snapshot.version == 1


class HalfOutputModel(PricingModel):
    """Тестовая модель: всегда отдаёт половину"""

    @property
    def impact_cap(self) -> Decimal:
        return Decimal("0.5")

    def _estimate(self, pool, token_in_index, token_out_index, amount_in) -> PriceImpactResult:
        return PriceImpactResult(
            price_impact=Decimal("0.5"),
            fee=Decimal(0),
            expected_output=amount_in / 2,
        )


class TestPluggablePricing:
    """Тесты подмены модели ценообразования"""

    def test_custom_model_used_by_router(self, engine) -> None:
        custom = QuantEngine(engine.store, pricing_model=HalfOutputModel())
        quote = custom.get_quote("USDC", "USDT", 1000)

        assert quote.expected_output == Decimal("500")
        assert quote.price_impact == Decimal("0.5")


# =============================================================================
# LIQUIDITY
# =============================================================================


class TestLiquidity:
    """Тесты операций ликвидности через фасад"""

    def test_add_by_address(self, engine) -> None:
        op = engine.add_liquidity("susdPoolAddress123456789", [100, 100, 100])
        assert op.pool_id == "susd"
        assert op.lp_amount == Decimal("282.15")

    def test_add_unknown_pool(self, engine) -> None:
        with pytest.raises(PoolNotFound):
            engine.add_liquidity("missing", [1, 1])

    def test_remove(self, engine) -> None:
        op = engine.remove_liquidity("tripool", 10, 1000)
        assert op.reserves_tracked is False
        assert len(op.amounts_out) == 3

    def test_remove_exceeding_supply(self, engine) -> None:
        with pytest.raises(InsufficientLiquidity):
            engine.remove_liquidity("tripool", 2000, 1000)

    def test_lp_share_price(self, engine) -> None:
        price = engine.lp_share_price("usds", [10, 20, 30])
        assert abs(price - Decimal(1) / Decimal("0.95")) < Decimal("1e-20")


# =============================================================================
# RISK / SLIPPAGE
# =============================================================================


class TestRiskFacade:
    """Тесты метрик риска и slippage через фасад"""

    def test_compute_risk_metrics(self, engine) -> None:
        portfolio = PortfolioSnapshot.from_values({"USDC": 5000, "xGOLD": 5000})
        metrics = engine.compute_risk_metrics(portfolio)

        # default model: σ 0.01 / 0.15, ρ 0.1
        assert metrics.volatility == pytest.approx(0.0757, abs=1e-4)
        assert not metrics.uses_estimated_data

    def test_portfolio_from_balances(self, engine) -> None:
        balances = [
            TokenBalance(symbol="USDC", balance=Decimal("1500")),
            TokenBalance(symbol="xGOLD", balance=Decimal("2")),
            TokenBalance(symbol="xKES", balance=Decimal("0")),
        ]
        prices = {"USDC": 1, "xGOLD": PriceTick(value=Decimal("2400.5"), change_24h=0.01)}

        portfolio = engine.portfolio_from_balances(balances, prices)

        assert portfolio.symbols == ("USDC", "xGOLD")
        assert portfolio.total_value == Decimal("6301.0")

    def test_portfolio_missing_price(self, engine) -> None:
        balances = [TokenBalance(symbol="xEUR", balance=Decimal("10"))]

        with pytest.raises(PriceDataMissing) as exc_info:
            engine.portfolio_from_balances(balances, {})
        assert exc_info.value.symbol == "xEUR"

    def test_portfolio_invalid_price(self, engine) -> None:
        balances = [TokenBalance(symbol="xEUR", balance=Decimal("10"))]

        with pytest.raises(InvalidAmount):
            engine.portfolio_from_balances(balances, {"xEUR": "n/a"})

    @pytest.mark.parametrize("price", [-2, 0, Decimal("-1.5"), float("nan")])
    def test_portfolio_non_positive_price(self, engine, price) -> None:
        """Сырая цена проверяется так же, как PriceTick.value (> 0)"""
        balances = [TokenBalance(symbol="xEUR", balance=Decimal("10"))]

        with pytest.raises(InvalidAmount, match="xEUR price"):
            engine.portfolio_from_balances(balances, {"xEUR": price})

    def test_slippage(self, engine) -> None:
        assert engine.estimate_slippage("FOO", "BAR", 10_000) == pytest.approx(0.005)
        assert engine.recommend_slippage_tolerance("FOO", "BAR", 10_000) == pytest.approx(0.0075)

    def test_slippage_amount_types(self, engine) -> None:
        for amount in ("10000", Decimal("10000"), 10_000.0):
            assert engine.estimate_slippage("FOO", "BAR", amount) == pytest.approx(0.005)

        with pytest.raises(InvalidAmount):
            engine.estimate_slippage("FOO", "BAR", "ten thousand")

    def test_slippage_config_applied(self) -> None:
        engine = QuantEngine.with_defaults(EngineConfig(slippage=SlippageConfig(buffer_multiplier=2.0)))
        assert engine.recommend_slippage_tolerance("FOO", "BAR", 10_000) == pytest.approx(0.01)


# =============================================================================
# LOGGING
# =============================================================================


class TestConfigureLogging:
    """Тесты configure_logging"""

    def test_json_sink(self, tmp_path) -> None:
        log_path = tmp_path / "logs" / "engine.jsonl"
        try:
            configure_logging(level="DEBUG", json_log_path=log_path)
            logger.info("Engine started")
        finally:
            logger.remove()
            logger.add(sys.stderr)

        record = json.loads(log_path.read_text(encoding="utf-8").splitlines()[0])
        assert record["record"]["message"] == "Engine started"
        assert record["record"]["level"]["name"] == "INFO"

    def test_level_applies_to_stderr_and_file(self, tmp_path, capsys) -> None:
        log_path = tmp_path / "engine.jsonl"
        try:
            configure_logging(level="WARNING", json_log_path=log_path)
            logger.info("Quote cache warmed")
            logger.warning("Pool feed stale")
        finally:
            logger.remove()
            logger.add(sys.stderr)

        err = capsys.readouterr().err
        assert "Pool feed stale" in err
        assert "Quote cache warmed" not in err

        records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
        assert [r["record"]["message"] for r in records] == ["Pool feed stale"]

    def test_replaces_existing_sinks(self) -> None:
        """Повторная настройка не дублирует вывод в старые sink'и"""
        messages: list[str] = []
        logger.add(messages.append)
        try:
            configure_logging(level="DEBUG")
            logger.info("After reconfigure")
        finally:
            logger.remove()
            logger.add(sys.stderr)

        assert messages == []

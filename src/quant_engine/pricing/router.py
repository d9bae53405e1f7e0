"""
Route Finder — поиск маршрута token_in -> token_out по реестру пулов

Порядок поиска:
1. Direct: все пулы, содержащие оба токена; побеждает минимальный
   price impact, при равенстве — первый в порядке реестра
2. 2-hop через промежуточный токен (USDC): лучший пул token_in+USDC и
   лучший пул USDC+token_out (каждый по минимальному impact своего hop).
   Hop выбираются последовательно и независимо: пара пулов с максимальным
   итоговым выходом не ищется, дорогой по fee, но глубокий пул на первом
   hop побеждает более мелкий дешёвый
3. Иначе NoRouteFound

Агрегация multi-hop:
- expected_output hop_k становится amount_in hop_{k+1}
- price_impact = 1 - Π(1 - impact_i)
- fee каждого hop в деноминации его token_in, по токенам не суммируется
- minimum_output = expected_output * (1 - slippage_tolerance)
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from quant_engine.core.domain.pool import Pool, PoolRegistry
from quant_engine.core.domain.quote import HopQuote, Quote
from quant_engine.core.errors import InvalidAmount, NoRouteFound
from quant_engine.core.math.numerical_safeguards import (
    quantize_down,
    validate_amount,
    validate_fraction,
)
from quant_engine.pricing.model import LinearImpactModel, PricingModel


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_INTERMEDIARY_TOKEN: Final[str] = "USDC"

# 0.5%
DEFAULT_SLIPPAGE_TOLERANCE: Final[Decimal] = Decimal("0.005")


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class RouterConfig:
    """Конфигурация RouteFinder."""

    intermediary_token: str = DEFAULT_INTERMEDIARY_TOKEN
    default_slippage_tolerance: Decimal = DEFAULT_SLIPPAGE_TOLERANCE

    # Квантовать выход к decimals выходного токена (округление вниз)
    quantize_to_token_decimals: bool = True

    def __post_init__(self) -> None:
        if not self.intermediary_token:
            raise ValueError("intermediary_token must be non-empty")
        validate_fraction(self.default_slippage_tolerance, "default_slippage_tolerance")


# =============================================================================
# ROUTE FINDER
# =============================================================================


class RouteFinder:
    """
    Поиск маршрута и агрегированная котировка.

    Чистая функция от (registry, входы): реестр не мутируется.
    """

    def __init__(
        self,
        registry: PoolRegistry,
        pricing_model: PricingModel | None = None,
        config: RouterConfig | None = None,
    ):
        """
        Args:
            registry: Снапшот реестра пулов
            pricing_model: Модель оценки hop (default: LinearImpactModel())
            config: Конфигурация (default: RouterConfig())
        """
        self.registry = registry
        self.pricing_model = pricing_model or LinearImpactModel()
        self.config = config or RouterConfig()

    def find_route(
        self,
        token_in: str,
        token_out: str,
        amount_in: Decimal | int | float | str,
        slippage_tolerance: Decimal | float | str | None = None,
    ) -> Quote:
        """
        Поиск маршрута и расчёт котировки.

        Args:
            token_in: Символ входного токена
            token_out: Символ выходного токена
            amount_in: Сумма входа (> 0)
            slippage_tolerance: Допуск [0, 1) (default: config.default_slippage_tolerance)

        Returns:
            Quote

        Raises:
            InvalidAmount: amount_in <= 0 или tolerance вне [0, 1)
            NoRouteFound: Нет direct и 2-hop маршрута
        """
        amount = validate_amount(amount_in, "amount_in")
        if slippage_tolerance is None:
            tolerance = self.config.default_slippage_tolerance
        else:
            tolerance = validate_fraction(slippage_tolerance, "slippage_tolerance")

        if token_in == token_out:
            raise NoRouteFound(token_in, token_out, "token_in and token_out are the same")

        direct = self._best_hop(token_in, token_out, amount)
        if direct is not None:
            return self._build_quote(token_in, token_out, amount, tolerance, [direct])

        hops = self._two_hop(token_in, token_out, amount)
        return self._build_quote(token_in, token_out, amount, tolerance, hops)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def _best_hop(
        self, token_in: str, token_out: str, amount_in: Decimal
    ) -> tuple[Pool, HopQuote] | None:
        """Лучший пул для одного hop (минимальный impact, tie-break — порядок реестра)."""
        best: tuple[Pool, HopQuote] | None = None

        for pool in self.registry.pools_containing(token_in, token_out):
            hop = self._price_hop(pool, token_in, token_out, amount_in)
            # strict <: при равенстве остаётся более ранний пул
            if best is None or hop.price_impact < best[1].price_impact:
                best = (pool, hop)

        return best

    def _two_hop(
        self, token_in: str, token_out: str, amount_in: Decimal
    ) -> list[tuple[Pool, HopQuote]]:
        intermediary = self.config.intermediary_token
        if intermediary in (token_in, token_out):
            raise NoRouteFound(token_in, token_out, "no direct pool")

        first = self._best_hop(token_in, intermediary, amount_in)
        if first is None:
            raise NoRouteFound(token_in, token_out, f"no pool for {token_in}/{intermediary}")

        second = self._best_hop(intermediary, token_out, first[1].expected_output)
        if second is None:
            raise NoRouteFound(token_in, token_out, f"no pool for {intermediary}/{token_out}")

        return [first, second]

    def _price_hop(self, pool: Pool, token_in: str, token_out: str, amount_in: Decimal) -> HopQuote:
        result = self.pricing_model.price_impact(
            pool,
            pool.token_index(token_in),
            pool.token_index(token_out),
            amount_in,
        )
        expected_output = result.expected_output
        if self.config.quantize_to_token_decimals:
            expected_output = quantize_down(expected_output, pool.token_decimals(token_out))
            if expected_output <= 0:
                raise InvalidAmount(
                    f"amount_in {amount_in} {token_in} is below the smallest unit of {token_out}"
                )

        return HopQuote(
            pool_id=pool.pool_id,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            price_impact=result.price_impact,
            fee=result.fee,
            expected_output=expected_output,
        )

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def _build_quote(
        self,
        token_in: str,
        token_out: str,
        amount_in: Decimal,
        tolerance: Decimal,
        legs: list[tuple[Pool, HopQuote]],
    ) -> Quote:
        hops = tuple(hop for _, hop in legs)

        retained = Decimal(1)
        fees: dict[str, Decimal] = {}
        for hop in hops:
            retained *= Decimal(1) - hop.price_impact
            fees[hop.token_in] = fees.get(hop.token_in, Decimal(0)) + hop.fee

        expected_output = hops[-1].expected_output
        minimum_output = expected_output * (Decimal(1) - tolerance)
        if self.config.quantize_to_token_decimals:
            last_pool = legs[-1][0]
            minimum_output = quantize_down(minimum_output, last_pool.token_decimals(token_out))

        return Quote(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            expected_output=expected_output,
            minimum_output=minimum_output,
            slippage_tolerance=tolerance,
            price_impact=Decimal(1) - retained,
            fees=fees,
            route=(token_in, *(hop.token_out for hop in hops)),
            pools=tuple(hop.pool_id for hop in hops),
            hops=hops,
        )

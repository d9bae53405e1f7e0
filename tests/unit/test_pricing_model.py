"""
Тесты LinearImpactModel и абстракции PricingModel

Проверяет:
- Формулу impact / fee / expected_output (включая cap)
- Монотонность price impact по amount_in
- expected_output <= amount_in
- Валидацию входов (InvalidAmount, TokenNotInPool)
- Подмену модели через PricingModel
"""

from decimal import Decimal

import pytest

from quant_engine.core.domain.pool import Pool
from quant_engine.core.domain.quote import PriceImpactResult
from quant_engine.core.errors import InvalidAmount, TokenNotInPool
from quant_engine.pricing.model import LinearImpactModel, PricingConfig, PricingModel


@pytest.fixture
def pool() -> Pool:
    return Pool(
        pool_id="deep",
        name="Deep Pool",
        tokens=("USDC", "USDT"),
        decimals=(6, 6),
        swap_fee=Decimal("0.0004"),
        tvl_usd=Decimal("100000000"),
    )


@pytest.fixture
def model() -> LinearImpactModel:
    return LinearImpactModel()


# =============================================================================
# FORMULA
# =============================================================================


class TestLinearImpactModel:
    """Тесты формулы линейного impact"""

    def test_capped_impact_large_trade(self, model, pool) -> None:
        """1M против TVL 100M: impact_factor = 1.0, impact = min(0.5, 0.05)"""
        result = model.price_impact(pool, 0, 1, Decimal("1000000"))

        assert result.price_impact == Decimal("0.05")
        assert result.fee == Decimal("400")
        assert result.expected_output == Decimal("949600")

    def test_small_trade_uncapped(self, model, pool) -> None:
        result = model.price_impact(pool, 0, 1, 1000)

        assert result.price_impact == Decimal("0.0005")
        assert result.fee == Decimal("0.4")
        assert result.expected_output == Decimal("999.1")

    def test_float_amount_has_no_binary_drift(self, model, pool) -> None:
        result = model.price_impact(pool, 0, 1, 0.1)
        assert result.fee == Decimal("0.00004")

    def test_impact_monotonic_in_amount(self, model, pool) -> None:
        amounts = [Decimal(a) for a in ("1", "10", "1000", "100000", "999999", "1000000", "5000000")]
        impacts = [model.price_impact(pool, 0, 1, a).price_impact for a in amounts]
        assert impacts == sorted(impacts)

    @pytest.mark.parametrize("amount", ["0.000001", "1", "12345.678", "1000000", "100000000"])
    def test_output_never_exceeds_input(self, model, pool, amount) -> None:
        result = model.price_impact(pool, 1, 0, amount)
        assert result.expected_output <= Decimal(amount)
        assert Decimal(0) <= result.price_impact <= model.impact_cap

    def test_custom_config(self, pool) -> None:
        model = LinearImpactModel(
            PricingConfig(
                reference_fraction=Decimal("0.1"),
                impact_slope=Decimal("1"),
                impact_cap=Decimal("0.2"),
            )
        )
        # depth = 10M, factor = 0.1, impact = 0.1
        result = model.price_impact(pool, 0, 1, Decimal("1000000"))
        assert result.price_impact == Decimal("0.1")
        assert model.impact_cap == Decimal("0.2")


# =============================================================================
# VALIDATION
# =============================================================================


class TestPricingValidation:
    """Тесты валидации входов"""

    @pytest.mark.parametrize("amount", [0, -1, "-0.5", float("nan"), float("inf")])
    def test_invalid_amount(self, model, pool, amount) -> None:
        with pytest.raises(InvalidAmount):
            model.price_impact(pool, 0, 1, amount)

    def test_same_index_rejected(self, model, pool) -> None:
        with pytest.raises(TokenNotInPool):
            model.price_impact(pool, 0, 0, 100)

    @pytest.mark.parametrize("indices", [(0, 2), (-1, 0), (5, 1)])
    def test_index_out_of_range(self, model, pool, indices) -> None:
        with pytest.raises(TokenNotInPool):
            model.price_impact(pool, *indices, 100)

    def test_non_int_index_rejected(self, model, pool) -> None:
        with pytest.raises(TokenNotInPool):
            model.price_impact(pool, True, 1, 100)  # type: ignore[arg-type]

    def test_non_positive_output_rejected(self, pool) -> None:
        """impact_cap + swap_fee >= 1 даёт неположительный выход"""
        model = LinearImpactModel(PricingConfig(impact_cap=Decimal("0.9999")))
        with pytest.raises(InvalidAmount, match="non-positive output"):
            model.price_impact(pool, 0, 1, Decimal("1000000000"))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"reference_fraction": Decimal("0")},
            {"impact_slope": Decimal("-0.1")},
            {"impact_cap": Decimal("1")},
            {"impact_cap": Decimal("-0.01")},
        ],
    )
    def test_invalid_config(self, kwargs) -> None:
        with pytest.raises(ValueError):
            PricingConfig(**kwargs)


# =============================================================================
# PLUGGABLE MODEL
# =============================================================================


class FlatImpactModel(PricingModel):
    """Тестовая модель: фиксированный impact, без fee"""

    def __init__(self, impact: Decimal):
        self.impact = impact

    @property
    def impact_cap(self) -> Decimal:
        return self.impact

    def _estimate(self, pool, token_in_index, token_out_index, amount_in) -> PriceImpactResult:
        return PriceImpactResult(
            price_impact=self.impact,
            fee=Decimal(0),
            expected_output=amount_in * (Decimal(1) - self.impact),
        )


class TestPricingModelAbstraction:
    """Тесты абстракции PricingModel"""

    def test_abstract_cannot_instantiate(self) -> None:
        with pytest.raises(TypeError):
            PricingModel()  # type: ignore[abstract]

    def test_subclass_gets_validation(self, pool) -> None:
        model = FlatImpactModel(Decimal("0.01"))

        with pytest.raises(InvalidAmount):
            model.price_impact(pool, 0, 1, 0)

        result = model.price_impact(pool, 0, 1, 200)
        assert result.expected_output == Decimal("198")

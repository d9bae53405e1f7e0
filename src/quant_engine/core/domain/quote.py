"""
Quote — результат оценки свопа

PriceImpactResult — оценка одного hop против одного пула.
HopQuote / Quote — агрегированная котировка маршрута (direct или 2-hop).

Все суммы — Decimal. Fee каждого hop выражена в токене входа этого hop,
поэтому fees хранятся по деноминациям и не суммируются между токенами.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator


class PriceImpactResult(BaseModel):
    """Оценка одного hop: price impact, fee и ожидаемый выход."""

    price_impact: Decimal = Field(..., ge=0, lt=1, description="Price impact (доля)")
    fee: Decimal = Field(..., ge=0, description="Fee в токене входа")
    expected_output: Decimal = Field(..., description="Ожидаемый выход")

    model_config = {"frozen": True}


class HopQuote(BaseModel):
    """Котировка одного hop маршрута."""

    pool_id: str = Field(..., min_length=1)
    token_in: str = Field(..., min_length=1)
    token_out: str = Field(..., min_length=1)
    amount_in: Decimal = Field(..., gt=0)
    price_impact: Decimal = Field(..., ge=0, lt=1)
    fee: Decimal = Field(..., ge=0, description="Fee в token_in")
    expected_output: Decimal = Field(...)

    model_config = {"frozen": True}


class Quote(BaseModel):
    """
    Котировка свопа token_in -> token_out.

    Инварианты:
    - minimum_output <= expected_output
    - price_impact ∈ [0, 1): агрегат 1 - Π(1 - impact_i)
    - route = [token_in, ..., token_out], len(pools) == len(route) - 1
    """

    token_in: str = Field(..., min_length=1)
    token_out: str = Field(..., min_length=1)
    amount_in: Decimal = Field(..., gt=0)

    expected_output: Decimal = Field(..., description="Ожидаемый выход в token_out")
    minimum_output: Decimal = Field(..., description="Минимальный выход после slippage tolerance")
    slippage_tolerance: Decimal = Field(..., ge=0, lt=1)

    price_impact: Decimal = Field(..., ge=0, lt=1, description="Агрегированный price impact")
    fees: dict[str, Decimal] = Field(
        default_factory=dict, description="Fee по деноминациям: token -> сумма"
    )

    route: tuple[str, ...] = Field(..., min_length=2)
    pools: tuple[str, ...] = Field(..., min_length=1)
    hops: tuple[HopQuote, ...] = Field(..., min_length=1)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_route(self) -> "Quote":
        if self.minimum_output > self.expected_output:
            raise ValueError(
                f"minimum_output {self.minimum_output} > expected_output {self.expected_output}"
            )
        if self.route[0] != self.token_in or self.route[-1] != self.token_out:
            raise ValueError(f"route {self.route} does not connect {self.token_in} -> {self.token_out}")
        if len(self.pools) != len(self.route) - 1 or len(self.hops) != len(self.pools):
            raise ValueError(
                f"route/pools/hops mismatch: {len(self.route)} tokens, "
                f"{len(self.pools)} pools, {len(self.hops)} hops"
            )
        return self

    @property
    def is_multi_hop(self) -> bool:
        return len(self.hops) > 1

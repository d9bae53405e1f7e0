"""
LiquidityOperation — результат add/remove liquidity

Immutable модель. lp_amount — LP токены, выпущенные (ADD) или сожжённые (REMOVE).
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class LiquidityOperationKind(str, Enum):
    """Тип операции с ликвидностью."""

    ADD = "add"
    REMOVE = "remove"


class LiquidityOperation(BaseModel):
    """
    Операция с ликвидностью пула.

    Инварианты:
    - ADD: amounts_in по одному на токен пула, lp_amount <= Σ amounts_in
    - REMOVE: amounts_out по одному на токен пула
    - reserves_tracked=False означает, что выход рассчитан аппроксимацией
      (равное распределение TVL по токенам), а не по реальным резервам
    """

    kind: LiquidityOperationKind
    pool_id: str = Field(..., min_length=1)
    tokens: tuple[str, ...] = Field(..., min_length=2)

    amounts_in: tuple[Decimal, ...] = Field(default=())
    amounts_out: tuple[Decimal, ...] = Field(default=())
    lp_amount: Decimal = Field(..., ge=0, description="LP minted (ADD) или burned (REMOVE)")

    reserves_tracked: bool = Field(True, description="False = even-split аппроксимация")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_amounts(self) -> "LiquidityOperation":
        n = len(self.tokens)
        if self.kind is LiquidityOperationKind.ADD:
            if len(self.amounts_in) != n:
                raise ValueError(f"ADD requires {n} amounts_in, got {len(self.amounts_in)}")
            if self.lp_amount > sum(self.amounts_in, Decimal(0)):
                raise ValueError(
                    f"lp_amount {self.lp_amount} exceeds deposited value {sum(self.amounts_in)}"
                )
        else:
            if len(self.amounts_out) != n:
                raise ValueError(f"REMOVE requires {n} amounts_out, got {len(self.amounts_out)}")
        return self

    @property
    def total_in(self) -> Decimal:
        return sum(self.amounts_in, Decimal(0))

    @property
    def total_out(self) -> Decimal:
        return sum(self.amounts_out, Decimal(0))

"""
Liquidity Engine — LP mint/burn для add/remove liquidity

Модель (упрощение, НЕ инвариант StableSwap):

ADD:
    amounts_in[i] = max_amounts_in[i] * (1 - deposit_slippage)
    lp_minted     = Σ amounts_in * (1 - mint_discount)

REMOVE:
    share          = lp_amount / lp_total_supply
    amounts_out[i] = share * reserves[i] * (1 + growth_factor)        (резервы отслеживаются)
    amounts_out[i] = share * tvl / n_tokens * (1 + growth_factor)     (аппроксимация)

Аппроксимация распределяет TVL поровну между токенами: для стабильных
пулов с паритетом ~1:1 ошибка ограничена дисбалансом резервов пула.
Результат такой операции помечается reserves_tracked=False.

Суммы по токенам складываются как USD-эквивалент: модель рассчитана на
стабильные пулы, где 1 единица токена ≈ 1 USD.

Гарантия сохранения: add и немедленный remove всего выпущенного LP (при
tvl == lp_total_supply == lp_minted) возвращает не более
Σ max_amounts_in * (1 + growth_factor).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from quant_engine.core.domain.liquidity import LiquidityOperation, LiquidityOperationKind
from quant_engine.core.domain.pool import Pool
from quant_engine.core.errors import InsufficientLiquidity, InvalidAmount
from quant_engine.core.math.numerical_safeguards import (
    to_decimal,
    validate_amount,
    validate_fraction,
)


# =============================================================================
# CONSTANTS
# =============================================================================

# Доля max_amounts_in, не использованная при депозите (1%)
DEFAULT_DEPOSIT_SLIPPAGE: Final[Decimal] = Decimal("0.01")

# Дисконт выпуска LP: fee capture пула (5%)
DEFAULT_MINT_DISCOUNT: Final[Decimal] = Decimal("0.05")

# Рост стоимости LP с момента депозита (2%)
DEFAULT_GROWTH_FACTOR: Final[Decimal] = Decimal("0.02")


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class LiquidityConfig:
    """Конфигурация LiquidityEngine."""

    deposit_slippage: Decimal = DEFAULT_DEPOSIT_SLIPPAGE
    mint_discount: Decimal = DEFAULT_MINT_DISCOUNT
    growth_factor: Decimal = DEFAULT_GROWTH_FACTOR

    def __post_init__(self) -> None:
        validate_fraction(self.deposit_slippage, "deposit_slippage")
        validate_fraction(self.mint_discount, "mint_discount")
        validate_fraction(self.growth_factor, "growth_factor")


# =============================================================================
# LIQUIDITY ENGINE
# =============================================================================


class LiquidityEngine:
    """
    Расчёт LP mint/burn.

    Баланс LP вызывающего хранит внешний ledger/wallet; движок проверяет
    только lp_amount <= lp_total_supply.
    """

    def __init__(self, config: LiquidityConfig | None = None):
        """
        Args:
            config: Конфигурация (default: LiquidityConfig())
        """
        self.config = config or LiquidityConfig()

    def add_liquidity(
        self,
        pool: Pool,
        max_amounts_in: Sequence[Decimal | int | float | str],
        min_lp_mint: Decimal | int | float | str | None = None,
    ) -> LiquidityOperation:
        """
        Расчёт депозита в пул.

        Args:
            pool: Пул
            max_amounts_in: Максимальные суммы по каждому токену пула (> 0)
            min_lp_mint: Минимально допустимый выпуск LP (optional)

        Returns:
            LiquidityOperation(kind=ADD)

        Raises:
            InvalidAmount: Неверное число сумм, сумма <= 0 или не конечна
            InsufficientLiquidity: lp_minted < min_lp_mint
        """
        if len(max_amounts_in) != pool.n_tokens:
            raise InvalidAmount(
                f"Pool {pool.pool_id} expects {pool.n_tokens} amounts, got {len(max_amounts_in)}"
            )

        max_amounts = [
            validate_amount(a, f"max_amounts_in[{i}]") for i, a in enumerate(max_amounts_in)
        ]

        used = Decimal(1) - self.config.deposit_slippage
        amounts_in = tuple(a * used for a in max_amounts)
        lp_minted = sum(amounts_in, Decimal(0)) * (Decimal(1) - self.config.mint_discount)

        if min_lp_mint is not None:
            min_lp = to_decimal(min_lp_mint, "min_lp_mint")
            if lp_minted < min_lp:
                raise InsufficientLiquidity(
                    f"LP minted {lp_minted} below minimum {min_lp} for pool {pool.pool_id}"
                )

        return LiquidityOperation(
            kind=LiquidityOperationKind.ADD,
            pool_id=pool.pool_id,
            tokens=pool.tokens,
            amounts_in=amounts_in,
            lp_amount=lp_minted,
            reserves_tracked=pool.tracks_reserves,
        )

    def remove_liquidity(
        self,
        pool: Pool,
        lp_amount: Decimal | int | float | str,
        lp_total_supply: Decimal | int | float | str,
        min_amounts_out: Sequence[Decimal | int | float | str] | None = None,
    ) -> LiquidityOperation:
        """
        Расчёт вывода ликвидности.

        Args:
            pool: Пул
            lp_amount: LP к сжиганию (> 0)
            lp_total_supply: Общий supply LP пула (> 0)
            min_amounts_out: Минимальные суммы по токенам (optional)

        Returns:
            LiquidityOperation(kind=REMOVE)

        Raises:
            InvalidAmount: lp_amount / lp_total_supply <= 0 или не конечны
            InsufficientLiquidity: lp_amount > lp_total_supply или выход < min_amounts_out
        """
        lp = validate_amount(lp_amount, "lp_amount")
        supply = validate_amount(lp_total_supply, "lp_total_supply")

        if lp > supply:
            raise InsufficientLiquidity(
                f"LP redeem amount {lp} exceeds total supply {supply} for pool {pool.pool_id}"
            )

        share = lp / supply
        growth = Decimal(1) + self.config.growth_factor

        if pool.reserves is not None:
            amounts_out = tuple(share * reserve * growth for reserve in pool.reserves)
        else:
            per_token = pool.tvl_usd / pool.n_tokens
            amounts_out = tuple(share * per_token * growth for _ in pool.tokens)

        if min_amounts_out is not None:
            self._check_min_amounts_out(pool, amounts_out, min_amounts_out)

        return LiquidityOperation(
            kind=LiquidityOperationKind.REMOVE,
            pool_id=pool.pool_id,
            tokens=pool.tokens,
            amounts_out=amounts_out,
            lp_amount=lp,
            reserves_tracked=pool.tracks_reserves,
        )

    def lp_share_price(
        self,
        pool: Pool,
        max_amounts_in: Sequence[Decimal | int | float | str],
    ) -> Decimal:
        """
        Цена LP токена: Σ deposited / lp_minted симулированного депозита.

        Raises:
            InvalidAmount: Как add_liquidity
        """
        operation = self.add_liquidity(pool, max_amounts_in)
        return operation.total_in / operation.lp_amount

    @staticmethod
    def _check_min_amounts_out(
        pool: Pool,
        amounts_out: Sequence[Decimal],
        min_amounts_out: Sequence[Decimal | int | float | str],
    ) -> None:
        if len(min_amounts_out) != pool.n_tokens:
            raise InvalidAmount(
                f"Pool {pool.pool_id} expects {pool.n_tokens} min amounts, got {len(min_amounts_out)}"
            )

        for token, out, minimum in zip(pool.tokens, amounts_out, min_amounts_out):
            min_out = to_decimal(minimum, f"min_amounts_out[{token}]")
            if out < min_out:
                raise InsufficientLiquidity(
                    f"{token} amount out {out} below minimum {min_out} for pool {pool.pool_id}"
                )

"""
Pool — метаданные пула ликвидности и реестр пулов

Immutable Pydantic модель пула (tokens, decimals, fees, TVL) и
неизменяемый реестр пулов. Реестр обновляется только целиком через
SnapshotStore (copy-on-write), запрос котировки его никогда не мутирует.
"""

from collections.abc import Iterable, Iterator
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from quant_engine.core.errors import PoolNotFound, TokenNotInPool
from quant_engine.core.math.numerical_safeguards import MAX_TOKEN_DECIMALS


# =============================================================================
# POOL MODEL
# =============================================================================


class Pool(BaseModel):
    """
    Модель пула ликвидности.

    Инварианты:
    - len(tokens) == len(decimals) >= 2
    - swap_fee, admin_fee ∈ [0, 1)
    - токены в пуле уникальны
    - reserves (если заданы) по одному на токен, все >= 0
    """

    pool_id: str = Field(..., min_length=1, description="Идентификатор пула (например, 'susd')")
    name: str = Field(..., min_length=1, description="Отображаемое имя пула")
    address: str | None = Field(None, description="On-chain адрес пула")

    tokens: tuple[str, ...] = Field(..., min_length=2, description="Символы токенов (порядок = индексы)")
    decimals: tuple[int, ...] = Field(..., min_length=2, description="Точность каждого токена")

    swap_fee: Decimal = Field(..., ge=0, lt=1, description="Swap fee (доля, 0.0004 = 0.04%)")
    admin_fee: Decimal = Field(Decimal("0"), ge=0, lt=1, description="Admin fee (доля)")

    tvl_usd: Decimal = Field(..., gt=0, description="Total value locked (USD)")

    # Per-token резервы. None = резервы не отслеживаются (см. LiquidityEngine)
    reserves: tuple[Decimal, ...] | None = Field(
        None, description="Резервы по токенам (в единицах токена), nullable"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_token_layout(self) -> "Pool":
        """Проверка согласованности tokens / decimals / reserves."""
        if len(self.tokens) != len(self.decimals):
            raise ValueError(
                f"tokens and decimals length mismatch: {len(self.tokens)} != {len(self.decimals)}"
            )

        if len(set(self.tokens)) != len(self.tokens):
            raise ValueError(f"Duplicate tokens in pool {self.pool_id}: {self.tokens}")

        for d in self.decimals:
            if d < 0 or d > MAX_TOKEN_DECIMALS:
                raise ValueError(f"Token decimals must be in [0, {MAX_TOKEN_DECIMALS}], got {d}")

        if self.reserves is not None:
            if len(self.reserves) != len(self.tokens):
                raise ValueError(
                    f"reserves length {len(self.reserves)} != tokens length {len(self.tokens)}"
                )
            if any(r < 0 for r in self.reserves):
                raise ValueError(f"Pool reserves must be non-negative: {self.reserves}")

        return self

    @property
    def n_tokens(self) -> int:
        return len(self.tokens)

    @property
    def tracks_reserves(self) -> bool:
        return self.reserves is not None

    def contains(self, *tokens: str) -> bool:
        """True если пул содержит все переданные токены."""
        return all(t in self.tokens for t in tokens)

    def token_index(self, token: str) -> int:
        """
        Индекс токена в пуле.

        Raises:
            TokenNotInPool: Если токена нет в пуле
        """
        try:
            return self.tokens.index(token)
        except ValueError:
            raise TokenNotInPool(self.pool_id, token) from None

    def token_decimals(self, token: str) -> int:
        return self.decimals[self.token_index(token)]

    def matches(self, pool_ref: str) -> bool:
        """Совпадение по pool_id или по адресу."""
        return pool_ref == self.pool_id or (self.address is not None and pool_ref == self.address)


# =============================================================================
# POOL REGISTRY
# =============================================================================


class PoolRegistry:
    """
    Неизменяемый реестр пулов.

    Порядок итерации = порядок регистрации (используется как tie-break
    при выборе маршрута).
    """

    __slots__ = ("_pools",)

    def __init__(self, pools: Iterable[Pool] = ()):
        pools = tuple(pools)
        seen: set[str] = set()
        for pool in pools:
            if pool.pool_id in seen:
                raise ValueError(f"Duplicate pool_id in registry: {pool.pool_id}")
            seen.add(pool.pool_id)
        self._pools: tuple[Pool, ...] = pools

    def __iter__(self) -> Iterator[Pool]:
        return iter(self._pools)

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, pool_ref: object) -> bool:
        return isinstance(pool_ref, str) and any(p.matches(pool_ref) for p in self._pools)

    def __repr__(self) -> str:
        return f"PoolRegistry({[p.pool_id for p in self._pools]})"

    @property
    def pools(self) -> tuple[Pool, ...]:
        return self._pools

    def get(self, pool_ref: str) -> Pool:
        """
        Поиск пула по pool_id или адресу.

        Raises:
            PoolNotFound: Если пул не зарегистрирован
        """
        for pool in self._pools:
            if pool.matches(pool_ref):
                return pool
        raise PoolNotFound(pool_ref)

    def pools_containing(self, *tokens: str) -> list[Pool]:
        """Пулы, содержащие все переданные токены (в порядке реестра)."""
        return [p for p in self._pools if p.contains(*tokens)]

    def with_pool(self, pool: Pool) -> "PoolRegistry":
        """
        Новый реестр с добавленным или заменённым пулом.

        Исходный реестр не меняется.
        """
        replaced = False
        pools: list[Pool] = []
        for existing in self._pools:
            if existing.pool_id == pool.pool_id:
                pools.append(pool)
                replaced = True
            else:
                pools.append(existing)
        if not replaced:
            pools.append(pool)
        return PoolRegistry(pools)

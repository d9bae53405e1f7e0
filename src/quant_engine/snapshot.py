"""
Snapshot — неизменяемый снапшот рыночных данных и его атомарная замена

MarketSnapshot объединяет реестр пулов и модель риска. SnapshotStore держит
ссылку на текущий снапшот; refresh/publish строят новый снапшот целиком и
подменяют ссылку (copy-on-write).

Инварианты:
- Читатели (current()) не берут lock и никогда не видят частично обновлённый снапшот
- Писатели сериализуются lock'ом; version монотонно растёт
- Ошибка фида при refresh оставляет текущий снапшот без изменений
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from quant_engine.core.contracts.parsers import parse_pool, parse_risk_model
from quant_engine.core.domain.pool import PoolRegistry
from quant_engine.core.domain.risk import RiskModel
from quant_engine.interfaces import PoolDataSource, RiskDataSource


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class MarketSnapshot:
    """Неизменяемый снапшот: пулы + модель риска."""

    registry: PoolRegistry
    risk_model: RiskModel
    version: int = 0
    refreshed_at_ms: int = 0


class SnapshotStore:
    """
    Хранилище текущего MarketSnapshot с атомарной заменой.

    Источники данных опциональны: без них снапшот обновляется только
    через publish().
    """

    def __init__(
        self,
        initial: MarketSnapshot,
        pool_source: PoolDataSource | None = None,
        risk_source: RiskDataSource | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        Args:
            initial: Начальный снапшот
            pool_source: Фид пулов (optional)
            risk_source: Фид модели риска (optional)
            clock: Источник времени в мс (default: time.time)
        """
        self._snapshot = initial
        self._pool_source = pool_source
        self._risk_source = risk_source
        self._clock = clock or _now_ms
        self._write_lock = threading.Lock()

    def current(self) -> MarketSnapshot:
        """Текущий снапшот (без блокировки)."""
        return self._snapshot

    def publish(
        self,
        registry: PoolRegistry | None = None,
        risk_model: RiskModel | None = None,
    ) -> MarketSnapshot:
        """
        Публикация нового снапшота; не переданные части берутся из текущего.

        Returns:
            Новый снапшот
        """
        with self._write_lock:
            previous = self._snapshot
            snapshot = MarketSnapshot(
                registry=registry if registry is not None else previous.registry,
                risk_model=risk_model if risk_model is not None else previous.risk_model,
                version=previous.version + 1,
                refreshed_at_ms=self._clock(),
            )
            self._snapshot = snapshot

        logger.info(
            "Market snapshot v{} published ({} pools)", snapshot.version, len(snapshot.registry)
        )
        return snapshot

    def refresh(self) -> MarketSnapshot:
        """
        Обновление из фидов.

        Весь I/O и парсинг выполняются до замены ссылки: при ошибке
        исключение пробрасывается, текущий снапшот не меняется.

        Raises:
            jsonschema.ValidationError / pydantic.ValidationError: Невалидный payload
        """
        registry = None
        if self._pool_source is not None:
            registry = PoolRegistry(parse_pool(p) for p in self._pool_source.fetch_pools())

        risk_model = None
        if self._risk_source is not None:
            risk_model = parse_risk_model(self._risk_source.fetch_risk_model())

        if registry is None and risk_model is None:
            logger.debug("Snapshot refresh skipped: no data sources configured")
            return self._snapshot

        return self.publish(registry=registry, risk_model=risk_model)

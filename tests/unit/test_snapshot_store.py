"""
Тесты SnapshotStore

Проверяет:
- publish: атомарная замена, монотонная version, частичное обновление
- refresh из фидов (PoolDataSource / RiskDataSource)
- Ошибка фида оставляет текущий снапшот без изменений
- Конкурентные читатели во время publish
"""

import threading

import pytest
from jsonschema import ValidationError

from quant_engine.core.domain.pool import PoolRegistry
from quant_engine.defaults import default_pools, default_risk_model
from quant_engine.interfaces import PoolDataSource, RiskDataSource
from quant_engine.snapshot import MarketSnapshot, SnapshotStore


# =============================================================================
# FAKE SOURCES
# =============================================================================


class FakePoolSource:
    def __init__(self, payloads):
        self.payloads = payloads
        self.calls = 0

    def fetch_pools(self):
        self.calls += 1
        return self.payloads


class FakeRiskSource:
    def __init__(self, payload):
        self.payload = payload

    def fetch_risk_model(self):
        return self.payload


class FailingPoolSource:
    def fetch_pools(self):
        raise ConnectionError("feed unavailable")


POOL_PAYLOAD = {
    "pool_id": "fresh",
    "name": "Fresh Pool",
    "tokens": ["USDC", "EURC"],
    "decimals": [6, 6],
    "swap_fee": "0.0005",
    "tvl_usd": "2000000",
}

RISK_PAYLOAD = {
    "assets": [{"symbol": "EURC", "volatility": 0.06, "expected_return": 0.02}],
    "correlations": {"USDC": {"EURC": 0.3}},
}


@pytest.fixture
def initial() -> MarketSnapshot:
    return MarketSnapshot(registry=default_pools(), risk_model=default_risk_model())


# =============================================================================
# PUBLISH
# =============================================================================


class TestPublish:
    """Тесты publish"""

    def test_publish_increments_version(self, initial) -> None:
        store = SnapshotStore(initial, clock=lambda: 1234)

        first = store.publish(registry=PoolRegistry())
        second = store.publish(registry=default_pools())

        assert first.version == 1
        assert second.version == 2
        assert second.refreshed_at_ms == 1234
        assert store.current() is second

    def test_partial_publish_keeps_other_part(self, initial) -> None:
        store = SnapshotStore(initial)
        snapshot = store.publish(registry=PoolRegistry())

        assert len(snapshot.registry) == 0
        assert snapshot.risk_model is initial.risk_model

    def test_previous_snapshot_unchanged(self, initial) -> None:
        store = SnapshotStore(initial)
        before = store.current()
        store.publish(registry=PoolRegistry())

        assert len(before.registry) == 3
        assert before.version == 0

    def test_concurrent_publishers_and_readers(self, initial) -> None:
        store = SnapshotStore(initial)
        seen_versions: list[int] = []
        errors: list[Exception] = []

        def writer() -> None:
            for _ in range(50):
                store.publish(registry=default_pools())

        def reader() -> None:
            try:
                for _ in range(200):
                    snapshot = store.current()
                    assert len(snapshot.registry) == 3
                    seen_versions.append(snapshot.version)
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=writer) for _ in range(4)]
        threads += [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.current().version == 200
        assert max(seen_versions) <= 200


# =============================================================================
# REFRESH
# =============================================================================


class TestRefresh:
    """Тесты refresh из фидов"""

    def test_fake_sources_satisfy_protocols(self) -> None:
        assert isinstance(FakePoolSource([]), PoolDataSource)
        assert isinstance(FakeRiskSource({}), RiskDataSource)

    def test_refresh_from_sources(self, initial) -> None:
        store = SnapshotStore(initial, FakePoolSource([POOL_PAYLOAD]), FakeRiskSource(RISK_PAYLOAD))
        snapshot = store.refresh()

        assert snapshot.version == 1
        assert [p.pool_id for p in snapshot.registry] == ["fresh"]
        assert snapshot.risk_model.volatility("EURC") == 0.06
        assert snapshot.risk_model.correlations.require("EURC", "USDC") == 0.3

    def test_refresh_pools_only(self, initial) -> None:
        store = SnapshotStore(initial, pool_source=FakePoolSource([POOL_PAYLOAD]))
        snapshot = store.refresh()

        assert "fresh" in snapshot.registry
        assert snapshot.risk_model is initial.risk_model

    def test_refresh_without_sources_is_noop(self, initial) -> None:
        store = SnapshotStore(initial)
        assert store.refresh() is initial

    def test_invalid_payload_keeps_snapshot(self, initial) -> None:
        bad = dict(POOL_PAYLOAD, tvl_usd=0)
        store = SnapshotStore(initial, pool_source=FakePoolSource([POOL_PAYLOAD, bad]))

        with pytest.raises(ValidationError):
            store.refresh()

        assert store.current() is initial

    def test_feed_error_propagates(self, initial) -> None:
        store = SnapshotStore(initial, pool_source=FailingPoolSource())

        with pytest.raises(ConnectionError):
            store.refresh()

        assert store.current() is initial

    def test_duplicate_pools_in_feed_rejected(self, initial) -> None:
        store = SnapshotStore(initial, pool_source=FakePoolSource([POOL_PAYLOAD, POOL_PAYLOAD]))

        with pytest.raises(ValueError, match="Duplicate pool_id"):
            store.refresh()

        assert store.current().version == 0

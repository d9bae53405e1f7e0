"""
Defaults — стартовая конфигурация пулов и модели риска

Фабрики возвращают новые неизменяемые структуры при каждом вызове:
модуль не хранит глобальных изменяемых таблиц. Используются как
начальный снапшот до первого refresh из фидов и как fixture в тестах.
"""

from decimal import Decimal

from quant_engine.core.domain.pool import Pool, PoolRegistry
from quant_engine.core.domain.risk import AssetRiskProfile, CorrelationMatrix, RiskModel


def default_pools() -> PoolRegistry:
    """Production пулы: susd, tripool, usds."""
    return PoolRegistry(
        [
            Pool(
                pool_id="susd",
                name="Stable USD Pool",
                address="susdPoolAddress123456789",
                tokens=("USDC", "USDT", "PYUSD"),
                decimals=(6, 6, 6),
                swap_fee=Decimal("0.0004"),
                admin_fee=Decimal("0.0001"),
                tvl_usd=Decimal("100000000"),
            ),
            Pool(
                pool_id="tripool",
                name="Tri-Pool",
                address="tripoolAddress123456789",
                tokens=("USDC", "USDT", "DAI"),
                decimals=(6, 6, 18),
                swap_fee=Decimal("0.0004"),
                admin_fee=Decimal("0.0001"),
                tvl_usd=Decimal("50000000"),
            ),
            Pool(
                pool_id="usds",
                name="USD* Pool",
                address="usdsPoolAddress123456789",
                tokens=("USDC", "USDT", "USD*"),
                decimals=(6, 6, 6),
                swap_fee=Decimal("0.0003"),
                admin_fee=Decimal("0.0001"),
                tvl_usd=Decimal("75000000"),
            ),
        ]
    )


def default_risk_model() -> RiskModel:
    """Волатильности, доходности и корреляции стейблкоинов и синтетиков."""
    profiles = [
        AssetRiskProfile(symbol="USDC", volatility=0.01, expected_return=0.01),
        AssetRiskProfile(symbol="USDT", volatility=0.01, expected_return=0.01),
        AssetRiskProfile(symbol="yUSDC", volatility=0.01, expected_return=0.045),
        AssetRiskProfile(symbol="xGOLD", volatility=0.15, expected_return=0.07),
        AssetRiskProfile(symbol="xKES", volatility=0.08, expected_return=0.06),
        AssetRiskProfile(symbol="xEUR", volatility=0.06, expected_return=0.03),
    ]

    correlations = CorrelationMatrix(
        {
            ("USDC", "USDT"): 0.95,
            ("USDC", "yUSDC"): 0.99,
            ("USDC", "xGOLD"): 0.1,
            ("USDC", "xKES"): 0.2,
            ("USDC", "xEUR"): 0.3,
            ("USDT", "yUSDC"): 0.95,
            ("USDT", "xGOLD"): 0.1,
            ("USDT", "xKES"): 0.2,
            ("USDT", "xEUR"): 0.3,
            ("yUSDC", "xGOLD"): 0.1,
            ("yUSDC", "xKES"): 0.2,
            ("yUSDC", "xEUR"): 0.3,
            ("xGOLD", "xKES"): 0.4,
            ("xGOLD", "xEUR"): 0.5,
            ("xKES", "xEUR"): 0.6,
        }
    )

    return RiskModel(profiles, correlations)

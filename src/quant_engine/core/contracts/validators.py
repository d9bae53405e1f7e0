"""
Feed Contract Validators

Payload внешних фидов (PoolDataSource, RiskDataSource) проверяется по
JSON Schema (Draft 2020-12) до построения domain моделей. Отклонённый
payload логируется со всеми нарушениями, наружу уходит наиболее
релевантная ошибка (jsonschema best_match).

Схемы поставляются внутри пакета:
- schema/pool.json
- schema/risk_model.json
"""

import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List

from jsonschema import Draft202012Validator, SchemaError, ValidationError
from jsonschema.exceptions import best_match
from loguru import logger


class FeedContract(str, Enum):
    """Контракты фидов (имя = имя файла схемы)."""

    POOL = "pool"
    RISK_MODEL = "risk_model"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """Чтение и meta-validation схем из каталога (по умолчанию schema/ пакета)."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = Path(schema_dir) if schema_dir is not None else Path(__file__).parent / "schema"
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._cache: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def available(self) -> List[str]:
        """Имена схем в каталоге."""
        return sorted(p.stem for p in self._schema_dir.glob("*.json"))

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Схема по имени (без .json), с кэшированием.

        Raises:
            FileNotFoundError: Файла схемы нет
            ValueError: Схема не проходит meta-validation
        """
        cached = self._cache.get(schema_name)
        if cached is not None:
            return cached

        path = self._schema_dir / f"{schema_name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"Schema not found: {path}")

        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e

        self._cache[schema_name] = schema
        return schema


# =============================================================================
# CONTRACT VALIDATOR
# =============================================================================


def _error_path(error: ValidationError) -> str:
    return "/".join(str(part) for part in error.absolute_path) or "<root>"


class ContractValidator:
    """Проверка payload одного контракта."""

    def __init__(self, contract: FeedContract | str, loader: SchemaLoader | None = None):
        self.contract = FeedContract(contract)
        self.schema = (loader or SchemaLoader()).load_schema(self.contract.value)
        self._validator = Draft202012Validator(self.schema)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        """Все нарушения контракта, в порядке пути в payload."""
        errors = self._validator.iter_errors(data)
        return iter(sorted(errors, key=lambda e: [str(p) for p in e.absolute_path]))

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self._validator.is_valid(data)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Наиболее релевантное нарушение
        """
        errors = list(self.iter_errors(data))
        if not errors:
            return

        logger.warning(
            "{} payload rejected: {}",
            self.contract.value,
            "; ".join(f"{_error_path(e)}: {e.message}" for e in errors),
        )
        raise best_match(errors)


class PoolValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__(FeedContract.POOL, loader)


class RiskModelValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__(FeedContract.RISK_MODEL, loader)


@lru_cache(maxsize=None)
def _validator_for(contract: FeedContract) -> ContractValidator:
    return ContractValidator(contract)


def validate_pool(data: Dict[str, Any]) -> None:
    """Проверка payload пула по schema/pool.json."""
    _validator_for(FeedContract.POOL).validate(data)


def validate_risk_model(data: Dict[str, Any]) -> None:
    """Проверка payload модели риска по schema/risk_model.json."""
    _validator_for(FeedContract.RISK_MODEL).validate(data)

"""
Logging — настройка loguru sink'ов для процесса-хоста

Библиотека только пишет в loguru.logger и не добавляет sink'и при импорте.
Хост (API сервис, бот, скрипт) вызывает configure_logging один раз.
"""

import sys
from pathlib import Path

from loguru import logger


def configure_logging(level: str = "INFO", json_log_path: str | Path | None = None) -> None:
    """
    Настройка sink'ов.

    Args:
        level: Минимальный уровень для stderr
        json_log_path: Путь JSONL лога (optional, с ротацией 100 MB)
    """
    logger.remove()
    logger.add(sys.stderr, level=level)

    if json_log_path is not None:
        path = Path(json_log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, level=level, rotation="100 MB", serialize=True)

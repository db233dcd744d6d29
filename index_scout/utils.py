# File: index_scout/utils.py
"""index_scout.utils: Утилиты для чтения списков URL и работы с ними."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Collection, List, Sequence, Union

from index_scout.errors import ConfigError
from index_scout.logger import logger

__all__: Sequence[str] = (
    "is_csv_path",
    "read_csv_urls",
    "remove_duplicates",
)


def is_csv_path(value: str) -> bool:
    return value.lower().endswith(".csv")


def read_csv_urls(path: Union[str, Path]) -> List[str]:
    """Читает CSV и возвращает первое поле каждой непустой строки, без повторов."""
    p = Path(path).expanduser()
    if not p.is_file():
        logger.error("CSV file not found: %s", p)
        raise ConfigError(f"CSV file not found: {p}")
    with p.open(newline="", encoding="utf-8-sig") as f:
        urls = [row[0].strip() for row in csv.reader(f) if row and row[0].strip()]
    logger.debug("Loaded %d URLs from %s", len(urls), p)
    return remove_duplicates(urls)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique

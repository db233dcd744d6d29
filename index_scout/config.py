# === FILE: index_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации IndexScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from index_scout.cache import cache_path_for_site
from index_scout.gsc.status import convert_to_site_url
from index_scout.reconciler import INDEXABLE_STATUSES
from index_scout.utils import is_csv_path


class IndexerConfig(BaseModel):
    """Конфигурация одного запуска сверки и отправки на индексацию."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    target: str = Field(..., min_length=1, description="Домен, URL сайта или путь к CSV.")
    credentials: Path = Field(Path("service_account.json"), description="JSON-ключ сервисного аккаунта.")
    cache_dir: Path = Field(Path(".cache"), description="Каталог кэша статусов.")
    cache_ttl_days: float = Field(14.0, gt=0, description="Срок доверия к кэшированному статусу (дней).")
    batch_size: int = Field(50, ge=1, description="Число одновременных запросов статуса.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx и сетевых ошибках.")
    indexable_statuses: Tuple[str, ...] = Field(
        INDEXABLE_STATUSES, description="Статусы, для которых запрашивается индексация."
    )

    @field_validator("target", mode="before")
    def _strip_target(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def is_csv(self) -> bool:
        return is_csv_path(self.target)

    @property
    def site_url(self) -> str:
        return convert_to_site_url(self.target)

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(days=self.cache_ttl_days)

    @property
    def cache_path(self) -> Path:
        return cache_path_for_site(self.cache_dir, self.site_url)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> IndexerConfig:
    """
    Читает YAML или JSON (если указан) и накладывает поверх значения из CLI.
    Значения ``None`` в overrides игнорируются.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

        suffix = path_obj.suffix.lower()
        if suffix in (".yaml", ".yml"):
            data = _read_yaml(path_obj)
        elif suffix == ".json":
            data = _read_json(path_obj)
        else:
            raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return IndexerConfig(**data)

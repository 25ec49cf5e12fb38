# === FILE: site_indexer/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteIndexer.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from site_indexer.utils import normalize_url

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


def _redis_url_from_env() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


class IndexerConfig(BaseModel):
    """Конфигурация обхода сайта и построения индекса."""
    model_config = ConfigDict(extra="forbid")

    base_url: HttpUrl = Field(..., description="Стартовый URL (seed) сайта.")
    batch_size: int = Field(20, ge=1, description="Макс. число URL за один запуск обхода.")
    revisit_hours: float = Field(6.0, gt=0, description="Окно повторного посещения (часов).")

    use_browser: bool = Field(True, description="Загружать страницы через headless Chromium.")
    browser_executable: str | None = Field(None, description="Путь к бинарнику Chromium.")
    navigation_timeout: float = Field(120.0, gt=0, description="Таймаут загрузки страницы браузером (секунд).")
    http_timeout: float = Field(30.0, gt=0, description="Таймаут запасного HTTP-запроса (секунд).")
    retry_times: int = Field(2, ge=0, description="Число повторов основной стратегии.")
    retry_delay: float = Field(1.0, ge=0, description="Пауза между повторами (секунд).")

    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    accept_language: str = Field("en-US,en;q=0.9", description="Заголовок Accept-Language.")

    max_content_length: int = Field(100_000, ge=1, description="Макс. длина текста документа.")
    redis_url: str = Field(default_factory=_redis_url_from_env, description="URL хранилища Redis.")
    snapshot_path: Path = Field(Path("data/search-index.json"), description="Файл снимка индекса.")

    @property
    def seed_url(self) -> str:
        """Seed in the same canonical form as discovered links."""
        return normalize_url(str(self.base_url))

    @property
    def revisit_window_ms(self) -> int:
        return int(self.revisit_hours * 60 * 60 * 1000)

    def headers(self) -> Dict[str, str]:
        """Header profile shared by the browser and plain HTTP strategies."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.accept_language,
            "Accept-Encoding": "gzip, deflate",
        }


_DEFAULT_CFG = Path("configs/default.yaml")


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


def load_config(path: Union[str, Path, None]) -> IndexerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект IndexerConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
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

    return IndexerConfig(**data)


__all__ = ["IndexerConfig", "load_config", "DEFAULT_USER_AGENT"]

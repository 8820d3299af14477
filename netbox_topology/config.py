"""
Загрузчик конфигурации.

Порядок слоёв (следующий перекрывает предыдущий):
    1. Значения по умолчанию (AppConfig)
    2. config.yaml
    3. Переменные окружения NETBOX_URL, NETBOX_TOKEN

Доступ к настройкам через точку:
    config.netbox.url
    config.fetch.max_workers
    config.resolution.parallel
"""

import logging
import os
from typing import Any, Optional

import yaml

from .core.config_schema import AppConfig, validate_config
from .core.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")

SEARCH_PATHS = [
    "config.yaml",
    "config.yml",
    ".netbox_topology.yaml",
    CONFIG_FILE,
]


class ConfigSection:
    """Секция конфигурации с доступом через точку."""

    def __init__(self, data: dict = None):
        self._data = data or {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def to_dict(self) -> dict:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"ConfigSection({self._data})"


class Config:
    """
    Конфигурация приложения.

    Пример:
        config = load_config("config.yaml")
        config.netbox.url           # "https://netbox.local/"
        config.fetch.max_workers    # 4
    """

    def __init__(self, config_file: Optional[str] = None):
        self.config_file: Optional[str] = None
        self.reload(config_file)

    def reload(self, config_file: Optional[str] = None) -> None:
        """
        Перечитывает все слои и валидирует результат.

        Raises:
            ConfigError: Файл указан явно, но не найден; YAML не разбирается;
                значения не проходят валидацию
        """
        self._data = AppConfig().model_dump()
        self._load_yaml(config_file)
        self._load_env()
        self.validated = validate_config(self._data, self.config_file or "defaults")
        self._data = self.validated.model_dump()

    def _find_config_file(self) -> Optional[str]:
        for path in SEARCH_PATHS:
            if os.path.exists(path):
                return path
        return None

    def _load_yaml(self, config_file: Optional[str] = None) -> None:
        """Накладывает настройки из YAML файла."""
        if config_file and not os.path.exists(config_file):
            raise ConfigError("Файл конфигурации не найден", config_file=config_file)

        config_file = config_file or self._find_config_file()
        if not config_file:
            logger.debug("config.yaml не найден, используются значения по умолчанию")
            return

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Ошибка чтения конфигурации: {e}", config_file=config_file) from e

        if not isinstance(yaml_data, dict):
            raise ConfigError("Конфигурация должна быть словарём", config_file=config_file)

        self._merge_dict(self._data, yaml_data)
        self.config_file = config_file
        logger.debug(f"Конфигурация загружена из {config_file}")

    def _load_env(self) -> None:
        """Переменные окружения перекрывают файл."""
        if os.getenv("NETBOX_URL"):
            self._data["netbox"]["url"] = os.getenv("NETBOX_URL")
        if os.getenv("NETBOX_TOKEN"):
            self._data["netbox"]["token"] = os.getenv("NETBOX_TOKEN")

    def _merge_dict(self, base: dict, override: dict) -> None:
        """Рекурсивно мержит словари."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_dict(base[key], value)
            else:
                base[key] = value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def to_dict(self) -> dict:
        return dict(self._data)


def load_config(config_file: Optional[str] = None) -> Config:
    """
    Загружает конфигурацию.

    Args:
        config_file: Путь к YAML файлу (опционально, иначе поиск по SEARCH_PATHS)

    Returns:
        Config: Объект конфигурации
    """
    return Config(config_file)

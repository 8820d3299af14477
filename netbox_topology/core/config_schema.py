"""
Pydantic схемы для валидации config.yaml.

Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from netbox_topology.core.config_schema import validate_config

    validated = validate_config(yaml.safe_load(open("config.yaml")))
    print(validated.fetch.max_workers)
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .constants import RecordType
from .exceptions import ConfigError


class NetBoxConfig(BaseModel):
    """Подключение к NetBox."""
    url: str = "http://localhost:8000/"
    token: str = ""
    verify_ssl: bool = True
    timeout: int = Field(default=30, ge=1, le=600)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """URL должен быть http(s), приводится к виду с завершающим /."""
        if v and not v.startswith(("http://", "https://")):
            raise PydanticCustomError(
                "invalid_url",
                "NetBox URL должен начинаться с http:// или https://",
            )
        return v.rstrip("/") + "/"


class FetchConfig(BaseModel):
    """Выгрузка снапшота."""
    max_workers: int = Field(default=4, ge=1, le=32)
    retries: int = Field(default=1, ge=0, le=5)
    record_types: List[str] = Field(default_factory=lambda: [rt.value for rt in RecordType])

    @field_validator("record_types")
    @classmethod
    def validate_record_types(cls, v: List[str]) -> List[str]:
        known = {rt.value for rt in RecordType}
        unknown = [name for name in v if name not in known]
        if unknown:
            raise PydanticCustomError(
                "unknown_record_type",
                "Неизвестные типы записей: {names}",
                {"names": ", ".join(unknown)},
            )
        return v


class ResolutionConfig(BaseModel):
    """Разрешение топологии."""
    parallel: bool = True
    default_tenant: Optional[int] = Field(default=None, ge=1)


class OutputConfig(BaseModel):
    """Вывод результатов."""
    output_folder: str = "reports"
    default_format: str = Field(default="json", pattern="^(json|csv)$")
    csv_delimiter: str = ","
    csv_encoding: str = "utf-8"


class LoggingConfig(BaseModel):
    """Логирование."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time|none)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"
    interval: int = Field(default=1, ge=1)


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    netbox: NetBoxConfig = Field(default_factory=NetBoxConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = False


def validate_config(config_dict: dict, config_file: str = "config.yaml") -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML
        config_file: Имя файла для сообщения об ошибке

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except ValidationError as e:
        errors = e.errors()
        key = None
        error_msg = str(e)
        if errors:
            first_error = errors[0]
            key = ".".join(str(x) for x in first_error.get("loc", []))
            error_msg = f"{key}: {first_error.get('msg', 'Unknown error')}"
        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file=config_file,
            key=key,
        ) from e

"""
Типизированные исключения для NetBox Topology.

Иерархия:
    TopologyError (базовый)
    ├── NetBoxError (NetBox API)
    │   ├── NetBoxConnectionError (подключение к API)
    │   ├── NetBoxAPIError (ошибка API)
    │   └── SnapshotError (снапшот не собран целиком — запуск прерывается)
    ├── NormalizationError (запись не прошла нормализацию)
    ├── ResolutionError (ошибка разрешения топологии)
    └── ConfigError (конфигурация)

Ошибки нормализации и неразрешённые кабели локальны: движок превращает их
в Diagnostic / UnresolvedLink и продолжает работу. Фатальна только
SnapshotError — без полного снапшота разрешение не запускается.

Пример использования:
    from netbox_topology.core.exceptions import SnapshotError

    try:
        snapshot = fetcher.fetch()
    except SnapshotError as e:
        logger.error(f"Снапшот не получен: {e.record_type} - {e.message}")
"""

from typing import Optional, Any


class TopologyError(Exception):
    """
    Базовое исключение для всех ошибок NetBox Topology.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# === NetBox Errors ===

class NetBoxError(TopologyError):
    """
    Базовая ошибка NetBox API.

    Attributes:
        url: URL NetBox
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.url = url
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)


class NetBoxConnectionError(NetBoxError):
    """
    Ошибка подключения к NetBox API.

    Пример:
        raise NetBoxConnectionError("Connection refused", url="https://netbox.local")
    """
    pass


class NetBoxAPIError(NetBoxError):
    """
    Ошибка при вызове NetBox API.

    Attributes:
        status_code: HTTP код ответа
        endpoint: API endpoint

    Пример:
        raise NetBoxAPIError("Not found", status_code=404, endpoint="dcim.cables")
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.endpoint = endpoint
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, url, details)


class SnapshotError(NetBoxError):
    """
    Снапшот не удалось собрать целиком.

    Запуск прерывается до начала разрешения: на неполных данных
    движок не работает.

    Attributes:
        record_type: Тип записей, на котором сломалась выгрузка
    """

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        url: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.record_type = record_type
        details = details or {}
        if record_type:
            details["record_type"] = record_type
        super().__init__(message, url, details)


# === Resolution Errors ===

class NormalizationError(TopologyError):
    """
    Запись не прошла нормализацию.

    Бросается внутри разбора одной записи и превращается нормализатором
    в Diagnostic. Наружу из запуска не выходит.

    Attributes:
        record_type: Тип записи (devices, cables, ...)
        record_id: ID записи (если удалось прочитать)
        field: Поле с ошибкой

    Пример:
        raise NormalizationError("bridge ссылается сам на себя",
                                 record_type="interfaces", record_id=12, field="bridge")
    """

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[Any] = None,
        field: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.record_type = record_type
        self.record_id = record_id
        self.field = field
        details = details or {}
        if record_type:
            details["record_type"] = record_type
        if record_id is not None:
            details["record_id"] = record_id
        if field:
            details["field"] = field
        super().__init__(message, details)


class ResolutionError(TopologyError):
    """Ошибка разрешения топологии (некорректный вызов компонентов движка)."""
    pass


# === Config Errors ===

class ConfigError(TopologyError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой

    Пример:
        raise ConfigError("Missing required field", config_file="config.yaml", key="netbox.url")
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


# === Utility Functions ===

def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, TopologyError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"


def is_retryable(error: Exception) -> bool:
    """
    Проверяет, можно ли повторить операцию после ошибки.

    Args:
        error: Исключение

    Returns:
        bool: True если можно retry
    """
    if isinstance(error, SnapshotError):
        return isinstance(error.__cause__, (NetBoxConnectionError, ConnectionError, TimeoutError))
    return isinstance(error, (NetBoxConnectionError, ConnectionError, TimeoutError))

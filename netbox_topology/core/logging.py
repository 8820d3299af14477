"""
Structured Logging для NetBox Topology.

Два формата вывода:
- human: для консоли (по умолчанию)
- json: для файлов и сборщиков логов (ELK, Loki)

Пример использования:
    from netbox_topology.core.logging import get_logger, setup_logging

    setup_logging(json_format=False)

    logger = get_logger(__name__)
    logger.info("Снапшот загружен", record_type="cables", count=120)

Формат вывода (JSON):
    {"timestamp": "2026-03-14T10:30:15.123456", "level": "INFO",
     "message": "Снапшот загружен", "logger": "netbox_topology.netbox",
     "record_type": "cables", "count": 120, "run_id": "2026-03-14T10-30-00"}
"""

import json
import logging
import logging.handlers
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .context import RunContextFilter, get_current_context


class LogLevel(str, Enum):
    """Уровни логирования."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RotationType(str, Enum):
    """Тип ротации файла логов."""
    SIZE = "size"
    TIME = "time"
    NONE = "none"


@dataclass
class LogConfig:
    """
    Конфигурация логирования.

    Attributes:
        level: Уровень логирования
        json_format: JSON в файле (True) или human-readable (False)
        console: Выводить в stderr
        file_path: Путь к файлу логов (None = без файла)
        rotation: Тип ротации файла
        max_bytes: Размер файла для size-ротации
        backup_count: Сколько старых файлов хранить
        when: Интервал time-ротации (S, M, H, D, midnight)
        interval: Частота time-ротации
    """
    level: int = logging.INFO
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: RotationType = RotationType.SIZE
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    when: str = "midnight"
    interval: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Создаёт конфигурацию из секции logging конфига."""
        rotation = data.get("rotation", "size")
        if isinstance(rotation, str):
            rotation = RotationType(rotation)

        level = data.get("level", "INFO")
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)

        return cls(
            level=level,
            json_format=data.get("json_format", False),
            console=data.get("console", True),
            file_path=data.get("file_path"),
            rotation=rotation,
            max_bytes=data.get("max_bytes", 10 * 1024 * 1024),
            backup_count=data.get("backup_count", 5),
            when=data.get("when", "midnight"),
            interval=data.get("interval", 1),
        )


class JSONFormatter(logging.Formatter):
    """
    Форматтер записи лога в одну JSON строку.

    Все extra-поля записи (run_id, record_type, cable_id, ...) попадают
    в JSON как есть.
    """

    # Поля logging.LogRecord, которые не выводятся
    RESERVED_ATTRS = {
        "args", "asctime", "created", "exc_info", "exc_text",
        "filename", "funcName", "levelname", "levelno", "lineno",
        "module", "msecs", "msg", "name", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "thread",
        "threadName", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in self.RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Человекочитаемый форматтер.

    Формат: TIMESTAMP - LEVEL - [run_id] MESSAGE (operation=X, record_type=Y)
    """

    EXTRA_FIELDS = ("operation", "record_type", "tenant", "snapshot")

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        run_id = getattr(record, "run_id", None)
        prefix = f"[{run_id}] " if run_id and run_id != "-" else ""

        extras = []
        for attr in self.EXTRA_FIELDS:
            value = getattr(record, attr, None)
            if value:
                extras.append(f"{attr}={value}")
        extra_str = f" ({', '.join(extras)})" if extras else ""

        result = f"{timestamp} - {level} - {prefix}{message}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


class StructuredLogger:
    """
    Обёртка над logging.Logger с именованными полями.

        logger.info("Кабель не разрешён", cable_id=12, reason="cycle")

    run_id текущего запуска добавляется автоматически.
    """

    def __init__(self, name: str, default_extra: Optional[Dict[str, Any]] = None):
        self._logger = logging.getLogger(name)
        self._default_extra = default_extra or {}

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = {**self._default_extra, **kwargs}

        if "run_id" not in extra:
            ctx = get_current_context()
            if ctx:
                extra["run_id"] = ctx.run_id

        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """ERROR с traceback."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """
        Новый логгер с дополнительными полями по умолчанию.

        Example:
            fetch_logger = logger.bind(operation="fetch")
            fetch_logger.info("Начало выгрузки")
        """
        return StructuredLogger(self._logger.name, default_extra={**self._default_extra, **kwargs})

    def setLevel(self, level: int) -> None:
        self._logger.setLevel(level)

    @property
    def level(self) -> int:
        return self._logger.level


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """
    Получает или создаёт StructuredLogger.

    Args:
        name: Имя логгера (обычно __name__)
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def _reset_root_handlers() -> logging.Logger:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    return root_logger


def setup_logging(json_format: bool = False, level: int = logging.INFO, stream: Any = None) -> None:
    """
    Логирование в консоль.

    Args:
        json_format: True для JSON, False для human-readable
        level: Уровень логирования
        stream: Поток вывода (по умолчанию sys.stderr)
    """
    root_logger = _reset_root_handlers()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    handler.addFilter(RunContextFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def _create_file_handler(config: LogConfig) -> logging.Handler:
    """File handler с ротацией из LogConfig."""
    log_path = Path(config.file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    if config.rotation == RotationType.SIZE:
        return logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    elif config.rotation == RotationType.TIME:
        return logging.handlers.TimedRotatingFileHandler(
            filename=str(log_path),
            when=config.when,
            interval=config.interval,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(str(log_path), encoding="utf-8")


def setup_logging_from_config(config: LogConfig) -> None:
    """
    Настраивает логирование из конфигурации.

    Консоль всегда human-readable, формат файла задаёт json_format.
    """
    root_logger = _reset_root_handlers()
    handlers: List[logging.Handler] = []

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(HumanFormatter())
        handlers.append(console_handler)

    if config.file_path:
        file_handler = _create_file_handler(config)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(JSONFormatter() if config.json_format else HumanFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(RunContextFilter())
        root_logger.addHandler(handler)
    root_logger.setLevel(config.level)


class LogContext:
    """
    Context manager: временно добавляет поля ко всем записям лога.

    Example:
        with LogContext(snapshot="snapshot.json"):
            engine.run(snapshot)
    """

    def __init__(self, **kwargs: Any):
        self._fields = kwargs
        self._old_factory = None

    def __enter__(self) -> "LogContext":
        self._old_factory = logging.getLogRecordFactory()
        old_factory, fields = self._old_factory, self._fields

        def record_factory(*args, **kwargs):
            record = old_factory(*args, **kwargs)
            for key, value in fields.items():
                if not hasattr(record, key):
                    setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._old_factory:
            logging.setLogRecordFactory(self._old_factory)
        return False


@dataclass
class OperationLog:
    """
    Лог операции с длительностью и результатом.

    Использование:
        op = OperationLog(operation="resolve").start()
        try:
            result = engine.run(snapshot)
            op.success(edges=len(result.graph.edges()))
        except SnapshotError as e:
            op.failure(str(e))
        op.log()
    """
    operation: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: str = "pending"
    result: Dict[str, Any] = field(default_factory=dict)
    error: str = ""

    def start(self) -> "OperationLog":
        self.started_at = datetime.now()
        self.status = "running"
        return self

    def success(self, **result: Any) -> "OperationLog":
        self.completed_at = datetime.now()
        self.status = "success"
        self.result = result
        return self

    def failure(self, error: str) -> "OperationLog":
        self.completed_at = datetime.now()
        self.status = "failure"
        self.error = error
        return self

    @property
    def duration_ms(self) -> Optional[float]:
        """Длительность в миллисекундах."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds() * 1000
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = {"operation": self.operation, "status": self.status}
        if self.started_at:
            data["started_at"] = self.started_at.isoformat()
        if self.completed_at:
            data["completed_at"] = self.completed_at.isoformat()
        if self.duration_ms is not None:
            data["duration_ms"] = round(self.duration_ms, 2)
        if self.result:
            data["result"] = self.result
        if self.error:
            data["error"] = self.error
        return data

    def log(self, logger: Optional[StructuredLogger] = None) -> None:
        """Пишет итог операции (INFO при успехе, ERROR при ошибке)."""
        if logger is None:
            logger = get_logger("netbox_topology")

        extra = {"operation": self.operation, "status": self.status}
        if self.duration_ms is not None:
            extra["duration_ms"] = round(self.duration_ms, 2)
        if self.result:
            extra.update(self.result)

        if self.status == "success":
            logger.info(f"Операция {self.operation}: {self.status}", **extra)
        else:
            logger.error(f"Операция {self.operation}: {self.status} — {self.error}", **extra)

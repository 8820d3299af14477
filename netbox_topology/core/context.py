"""
Контекст выполнения запуска.

RunContext создаётся CLI один раз и прокидывается дальше:
- CLI → SnapshotFetcher
- CLI → TopologyEngine → Exporters

Предоставляет:
- run_id: идентификатор запуска (timestamp или короткий UUID)
- started_at: время начала
- command: команда CLI
- output_dir: папка для отчётов запуска

Пример использования:
    ctx = RunContext.create(command="resolve")
    set_current_context(ctx)
    # Отчёты сохраняются в reports/run_2026-03-14T12-30-22/
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

logger = logging.getLogger(__name__)

TriggerSource = Literal["cli", "cron", "test"]


@dataclass
class RunContext:
    """
    Контекст одного запуска.

    Attributes:
        run_id: Идентификатор запуска
        started_at: Время начала
        triggered_by: Источник запуска (cli/cron/test)
        command: Команда CLI
        output_dir: Папка для отчётов запуска
        extra: Дополнительные данные
    """

    run_id: str
    started_at: datetime
    triggered_by: TriggerSource = "cli"
    command: str = ""
    output_dir: Optional[Path] = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        triggered_by: TriggerSource = "cli",
        command: str = "",
        base_output_dir: Optional[Path] = None,
        use_timestamp_id: bool = True,
    ) -> "RunContext":
        """
        Создаёт новый контекст.

        Args:
            triggered_by: Источник запуска
            command: Команда CLI
            base_output_dir: Базовая папка отчётов (default: reports/)
            use_timestamp_id: Timestamp вместо UUID
        """
        started_at = datetime.now()
        if use_timestamp_id:
            run_id = started_at.strftime("%Y-%m-%dT%H-%M-%S")
        else:
            run_id = str(uuid.uuid4())[:8]

        base_output_dir = Path(base_output_dir) if base_output_dir else Path("reports")
        ctx = cls(
            run_id=run_id,
            started_at=started_at,
            triggered_by=triggered_by,
            command=command,
            output_dir=base_output_dir / f"run_{run_id}",
        )
        logger.debug(f"Создан RunContext: {ctx.run_id} ({command or '-'})")
        return ctx

    def get_output_path(self, filename: str) -> Path:
        """
        Путь к файлу отчёта внутри папки запуска (папка создаётся).

        Args:
            filename: Имя файла (например, "topology.json")
        """
        if not self.output_dir:
            raise ValueError("output_dir не задан")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / filename

    @property
    def elapsed_seconds(self) -> float:
        return (datetime.now() - self.started_at).total_seconds()

    @property
    def elapsed_human(self) -> str:
        """Время выполнения: 4.2s, 3m 12s, 1h 5m."""
        elapsed = self.elapsed_seconds
        if elapsed < 60:
            return f"{elapsed:.1f}s"
        elif elapsed < 3600:
            return f"{int(elapsed // 60)}m {int(elapsed % 60)}s"
        return f"{int(elapsed // 3600)}h {int((elapsed % 3600) // 60)}m"

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "triggered_by": self.triggered_by,
            "command": self.command,
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "elapsed_seconds": self.elapsed_seconds,
            "extra": self.extra,
        }

    def __str__(self) -> str:
        return f"RunContext({self.run_id})"


# Глобальный контекст для случаев, когда его не прокидывают явно
_current_context: Optional[RunContext] = None


def get_current_context() -> Optional[RunContext]:
    """Текущий глобальный контекст."""
    return _current_context


def set_current_context(ctx: Optional[RunContext]) -> None:
    """Устанавливает текущий глобальный контекст."""
    global _current_context
    _current_context = ctx


class RunContextFilter(logging.Filter):
    """
    Logging filter: добавляет run_id текущего запуска в каждую запись.

    Использование:
        handler.addFilter(RunContextFilter())
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            ctx = get_current_context()
            record.run_id = ctx.run_id if ctx else "-"
        return True

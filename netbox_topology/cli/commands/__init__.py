"""
Обработчики команд CLI.

- fetch.py: выгрузка снапшота из NetBox в файл
- resolve.py: разрешение топологии и экспорт
- report.py: сводка аномалий и неразрешённых связей
"""

from .fetch import cmd_fetch
from .resolve import cmd_resolve, run_engine
from .report import cmd_report

__all__ = ["cmd_fetch", "cmd_resolve", "cmd_report", "run_engine"]

"""
Команда report.

Сводка аномалий данных и неразрешённых кабелей.
"""

import logging
import sys

from ...core.constants import Severity
from .resolve import run_engine

logger = logging.getLogger(__name__)


def cmd_report(args, ctx, config) -> None:
    """
    Печатает сводку по аномалиям и неразрешённым связям.

    С --strict завершается с кодом 1, если есть неразрешённые связи
    или отброшенные записи.
    """
    result = run_engine(args, config)
    summary = result.summary()

    print("Неразрешённые связи:")
    if not result.unresolved:
        print("  нет")
    for reason, count in sorted(summary["unresolved"].items()):
        print(f"  {reason}: {count}")
    if args.details:
        for link in result.unresolved:
            cables = ", ".join(str(c) for c in link.cable_ids)
            side = f" [{link.side}]" if link.side else ""
            print(f"    кабели {cables}{side}: {link.reason.value} — {link.detail}")

    print("Аномалии данных:")
    if not result.diagnostics:
        print("  нет")
    for severity, count in sorted(summary["diagnostics"].items()):
        print(f"  {severity}: {count}")
    if args.details:
        for diag in result.diagnostics:
            field = f".{diag.field}" if diag.field else ""
            print(f"    {diag.severity.value} {diag.record_type}:{diag.record_id}{field} — {diag.message}")

    errors = [d for d in result.diagnostics if d.severity == Severity.ERROR]
    if args.strict and (result.unresolved or errors):
        sys.exit(1)

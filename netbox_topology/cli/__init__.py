"""
CLI модуль netbox_topology.

Структура:
- utils.py: источник снапшота, клиент NetBox, фильтры
- commands/: обработчики команд
  - fetch.py: fetch
  - resolve.py: resolve
  - report.py: report

Примеры использования:
    python -m netbox_topology fetch --file snapshot.json
    python -m netbox_topology resolve --snapshot snapshot.json --tenant 5 --format csv
    python -m netbox_topology report --details
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from ..core.constants import EdgeKind
from ..core.exceptions import TopologyError, format_error_for_log
from .commands import cmd_fetch, cmd_resolve, cmd_report

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """
    Создаёт парсер аргументов командной строки.

    Returns:
        ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog="netbox_topology",
        description="Разрешение топологии NetBox: кабели, патч-панели, VLAN, L2VPN, WLAN",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  %(prog)s fetch --file snapshot.json
  %(prog)s resolve --snapshot snapshot.json --format csv --kind physical
  %(prog)s resolve --tenant 5
  %(prog)s report --details --strict
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Подробный вывод (DEBUG)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Папка для отчётов (default: output.output_folder из конфигурации)",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Путь к файлу конфигурации YAML (default: config.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Команды")

    # === FETCH ===
    fetch_parser = subparsers.add_parser("fetch", help="Выгрузить снапшот из NetBox в файл")
    fetch_parser.add_argument(
        "--file",
        default=None,
        help="Файл снапшота (.json/.yaml, default: <output>/run_<id>/snapshot.json)",
    )

    # === RESOLVE ===
    resolve_parser = subparsers.add_parser("resolve", help="Разрешить топологию и экспортировать")
    _add_source_arguments(resolve_parser)
    resolve_parser.add_argument(
        "--format",
        "-f",
        choices=["json", "csv"],
        default=None,
        help="Формат вывода (default: output.default_format)",
    )
    resolve_parser.add_argument(
        "--tenant",
        type=int,
        default=None,
        help="Только узлы и рёбра тенанта (ID)",
    )
    resolve_parser.add_argument(
        "--kind",
        choices=[kind.value for kind in EdgeKind],
        default=None,
        help="Только рёбра этого вида",
    )
    resolve_parser.add_argument(
        "--delimiter",
        default=None,
        help="Разделитель для CSV",
    )
    resolve_parser.add_argument(
        "--filename",
        default=None,
        help="Имя файла результата (default: topology)",
    )

    # === REPORT ===
    report_parser = subparsers.add_parser("report", help="Сводка аномалий и неразрешённых связей")
    _add_source_arguments(report_parser)
    report_parser.add_argument(
        "--details",
        action="store_true",
        help="Показать каждую запись",
    )
    report_parser.add_argument(
        "--strict",
        action="store_true",
        help="Код выхода 1 при неразрешённых связях или отброшенных записях",
    )

    return parser


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--snapshot",
        default=None,
        help="Файл снапшота вместо выгрузки из NetBox",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    from ..config import load_config
    from ..core.context import RunContext, set_current_context
    from ..core.logging import LogConfig, setup_logging_from_config

    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config)
    except TopologyError as e:
        print(f"Ошибка конфигурации: {format_error_for_log(e)}")
        return 2

    ctx = RunContext.create(
        triggered_by="cli",
        command=args.command,
        base_output_dir=Path(args.output or config.output.output_folder),
    )
    set_current_context(ctx)

    # Приоритет: -v > config.yaml
    log_config = LogConfig.from_dict(config.logging.to_dict())
    if args.verbose or config.debug:
        log_config.level = logging.DEBUG
    setup_logging_from_config(log_config)

    logger.info(f"Запуск {args.command} ({ctx.run_id})")

    commands = {
        "fetch": cmd_fetch,
        "resolve": cmd_resolve,
        "report": cmd_report,
    }
    try:
        commands[args.command](args, ctx, config)
    except TopologyError as e:
        logger.error(f"Ошибка: {format_error_for_log(e)}")
        return 1
    finally:
        set_current_context(None)

    logger.info(f"Запуск завершён: {ctx.run_id} (elapsed={ctx.elapsed_human})")
    return 0


__all__ = [
    "cmd_fetch",
    "cmd_resolve",
    "cmd_report",
    "setup_parser",
    "main",
]

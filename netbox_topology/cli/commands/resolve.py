"""
Команда resolve.

Разрешает топологию (из NetBox или --snapshot) и экспортирует
граф в JSON или CSV с фильтрами по тенанту и виду ребра.
"""

import logging

from ...core.engine import TopologyEngine
from ...core.logging import LogContext
from ...exporters import get_exporter
from ..utils import load_snapshot, parse_kind

logger = logging.getLogger(__name__)


def run_engine(args, config):
    """Снапшот → ResolutionResult с настройками из конфигурации."""
    snapshot = load_snapshot(args, config)
    engine = TopologyEngine(
        parallel=config.resolution.parallel,
        default_tenant=config.resolution.default_tenant,
    )
    with LogContext(snapshot=snapshot.source or "-"):
        return engine.run(snapshot)


def cmd_resolve(args, ctx, config) -> None:
    """Разрешение топологии и экспорт."""
    result = run_engine(args, config)

    fmt = args.format or config.output.default_format
    options = {"output_folder": str(ctx.output_dir)}
    if fmt == "csv":
        options["delimiter"] = args.delimiter or config.output.csv_delimiter
        options["encoding"] = config.output.csv_encoding
    exporter = get_exporter(fmt, **options)

    kind = parse_kind(args.kind)
    path = exporter.export(result, args.filename or "topology", kind=kind, tenant=args.tenant)

    summary = result.summary()
    print(f"Узлов: {sum(summary['nodes'].values())}, рёбер: {sum(summary['edges'].values())}")
    print(f"Неразрешённых связей: {len(result.unresolved)}, замечаний: {len(result.diagnostics)}")
    if path:
        print(f"Результат: {path}")

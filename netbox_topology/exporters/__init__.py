"""
Экспортеры результатов разрешения топологии.

- JSONExporter: граф, аномалии, неразрешённые связи
- CSVExporter: таблица рёбер

Использование:
    from netbox_topology.exporters import get_exporter

    exporter = get_exporter("csv", output_folder="reports")
    exporter.export(result, "links")
"""

from .base import BaseExporter
from .json_exporter import JSONExporter
from .csv_exporter import CSVExporter

EXPORTERS = {
    "json": JSONExporter,
    "csv": CSVExporter,
}


def get_exporter(fmt: str, **kwargs) -> BaseExporter:
    """
    Экспортер по имени формата.

    Raises:
        ValueError: Неизвестный формат
    """
    try:
        exporter_cls = EXPORTERS[fmt]
    except KeyError:
        raise ValueError(f"Неизвестный формат экспорта: {fmt}") from None
    return exporter_cls(**kwargs)


__all__ = ["BaseExporter", "JSONExporter", "CSVExporter", "EXPORTERS", "get_exporter"]

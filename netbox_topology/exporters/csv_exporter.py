"""
CSV экспортер рёбер топологии.

Одна строка — одно ребро: вид, концы, происхождение, тенанты.

Пример использования:
    exporter = CSVExporter(delimiter=";", encoding="utf-8-sig")
    exporter.export(result, "links.csv", kind=EdgeKind.PHYSICAL)
"""

import csv
import logging
from pathlib import Path
from typing import Optional

from ..core.constants import EdgeKind
from .base import BaseExporter

logger = logging.getLogger(__name__)

COLUMNS = ["id", "kind", "a", "a_label", "b", "b_label", "sources", "tenants"]


class CSVExporter(BaseExporter):
    """
    Экспортер рёбер в CSV.

    Attributes:
        delimiter: Разделитель полей
        quotechar: Символ кавычек
    """

    file_extension = ".csv"

    DELIMITERS = {
        "comma": ",",
        "semicolon": ";",
        "tab": "\t",
        "pipe": "|",
    }

    def __init__(
        self,
        output_folder: str = "reports",
        encoding: str = "utf-8",
        delimiter: str = ",",
        quotechar: str = '"',
    ):
        super().__init__(output_folder, encoding)
        self.delimiter = self.DELIMITERS.get(delimiter, delimiter)
        self.quotechar = quotechar

    def _write(self, result, file_path: Path, kind: Optional[EdgeKind] = None, tenant: Optional[int] = None) -> None:
        rows = self._edge_rows(result.graph, kind=kind, tenant=tenant)
        with open(file_path, "w", newline="", encoding=self.encoding) as f:
            writer = csv.DictWriter(
                f,
                fieldnames=COLUMNS,
                delimiter=self.delimiter,
                quotechar=self.quotechar,
                quoting=csv.QUOTE_MINIMAL,
            )
            writer.writeheader()
            writer.writerows(rows)
        logger.debug(f"CSV записан: {len(rows)} рёбер")

"""
JSON экспортер.

Сохраняет граф, аномалии и неразрешённые связи одним документом.

Пример использования:
    exporter = JSONExporter(indent=2)
    exporter.export(result, "topology.json", tenant=5)
"""

import json
import logging
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from ..core.constants import EdgeKind
from .base import BaseExporter

logger = logging.getLogger(__name__)


class JSONExporter(BaseExporter):
    """
    Экспортер результата в JSON.

    Attributes:
        indent: Отступ (None = компактный)
        ensure_ascii: Экранировать не-ASCII символы
        include_metadata: Добавить метаданные (дата, фильтры, статистика)
    """

    file_extension = ".json"

    def __init__(
        self,
        output_folder: str = "reports",
        encoding: str = "utf-8",
        indent: Optional[int] = 2,
        ensure_ascii: bool = False,
        include_metadata: bool = True,
    ):
        super().__init__(output_folder, encoding)
        self.indent = indent
        self.ensure_ascii = ensure_ascii
        self.include_metadata = include_metadata

    def _write(self, result, file_path: Path, kind: Optional[EdgeKind] = None, tenant: Optional[int] = None) -> None:
        graph = result.graph
        edges = graph.edges(kind=kind, tenant=tenant)
        if tenant is None:
            nodes = graph.nodes()
        else:
            # Узлы тенанта плюс концы его рёбер (чужие панели на пути кабеля)
            node_ids = {n.id for n in graph.nodes(tenant=tenant)}
            node_ids.update(nid for edge in edges for nid in edge.endpoints)
            nodes = [n for n in graph.nodes() if n.id in node_ids]

        output = {
            "nodes": [n.to_dict() for n in nodes],
            "edges": [e.to_dict() for e in edges],
            "anomalies": [d.to_dict() for d in result.diagnostics],
            "unresolved": [link.to_dict() for link in result.unresolved],
        }
        if self.include_metadata:
            output = {
                "metadata": {
                    "generated_at": datetime.now().isoformat(),
                    "filters": {"kind": kind, "tenant": tenant},
                    "summary": result.summary(),
                },
                **output,
            }

        with open(file_path, "w", encoding=self.encoding) as f:
            json.dump(
                output,
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
                default=self._json_serializer,
            )
        logger.debug(f"JSON записан: узлов={len(nodes)}, рёбер={len(edges)}")

    @staticmethod
    def _json_serializer(obj: Any) -> Any:
        """datetime, Enum, set и кортежи для json.dump."""
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

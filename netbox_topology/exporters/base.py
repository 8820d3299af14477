"""
Базовый класс экспортера результатов разрешения.

Экспортер получает ResolutionResult и необязательные фильтры
(вид ребра, тенант) и пишет файл в output_folder.

Пример создания своего экспортера:
    class GraphMLExporter(BaseExporter):
        file_extension = ".graphml"

        def _write(self, result, file_path, kind=None, tenant=None):
            ...
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.constants import EdgeKind
from ..core.graph import TopologyGraph

logger = logging.getLogger(__name__)


class BaseExporter(ABC):
    """
    Абстрактный базовый класс для экспортеров.

    Attributes:
        output_folder: Папка для сохранения файлов
        encoding: Кодировка файлов
    """

    file_extension: str = ".txt"

    def __init__(self, output_folder: str = "reports", encoding: str = "utf-8"):
        self.output_folder = Path(output_folder)
        self.encoding = encoding

    def export(
        self,
        result,
        filename: Optional[str] = None,
        kind: Optional[EdgeKind] = None,
        tenant: Optional[int] = None,
    ) -> Optional[Path]:
        """
        Экспортирует результат в файл.

        Args:
            result: ResolutionResult
            filename: Имя файла (без пути); None — генерируется
            kind: Только рёбра этого вида
            tenant: Только узлы и рёбра этого тенанта

        Returns:
            Path: Путь к файлу или None при ошибке записи
        """
        self._ensure_output_folder()

        if not filename:
            filename = self._generate_filename()
        if not filename.endswith(self.file_extension):
            filename += self.file_extension
        file_path = self.output_folder / filename

        try:
            self._write(result, file_path, kind=kind, tenant=tenant)
        except OSError as e:
            logger.error(f"Ошибка экспорта в {file_path}: {e}")
            return None

        logger.info(f"Топология экспортирована: {file_path}")
        return file_path

    @abstractmethod
    def _write(self, result, file_path: Path, kind: Optional[EdgeKind] = None, tenant: Optional[int] = None) -> None:
        """Записывает результат в файл."""

    def _ensure_output_folder(self) -> None:
        if not self.output_folder.exists():
            self.output_folder.mkdir(parents=True, exist_ok=True)
            logger.info(f"Создана папка: {self.output_folder}")

    def _generate_filename(self) -> str:
        """Имя файла с текущей датой."""
        return f"topology_{datetime.now().strftime('%Y-%m-%d_%H%M%S')}"

    @staticmethod
    def _edge_rows(
        graph: TopologyGraph,
        kind: Optional[EdgeKind] = None,
        tenant: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Плоские строки рёбер для табличных форматов.

        Колонки: id, kind, a, a_label, b, b_label, sources, tenants.
        """
        rows = []
        for edge in graph.edges(kind=kind, tenant=tenant):
            a, b = (graph.get_node(nid) for nid in edge.endpoints)
            rows.append({
                "id": edge.id,
                "kind": edge.kind.value,
                "a": edge.endpoints[0],
                "a_label": _node_label(graph, a),
                "b": edge.endpoints[1],
                "b_label": _node_label(graph, b),
                "sources": " ".join(edge.sources),
                "tenants": " ".join(str(t) for t in edge.tenants),
            })
        return rows


def _node_label(graph: TopologyGraph, node) -> str:
    """"sw1:eth0" для интерфейсов и портов, label для остальных."""
    if node is None:
        return ""
    device_id = node.attributes.get("device")
    device = graph.get_node(device_id) if device_id else None
    if device is not None:
        return f"{device.label}:{node.label}"
    return node.label

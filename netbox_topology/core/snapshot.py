"""
Снапшот записей NetBox — входная граница движка.

Снапшот — полностью материализованные пакеты записей по типам
(devices, interfaces, cables, ...). Как он был получен (pynetbox,
файл, тест) движку не важно.

Пример использования:
    snapshot = Snapshot.from_file("snapshot.json")
    print(snapshot.counts())

    snapshot = Snapshot({"devices": [{"id": 1, "name": "sw1"}]})
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import yaml

from .constants import RecordType
from .exceptions import SnapshotError

logger = logging.getLogger(__name__)

RecordBatches = Mapping[Union[RecordType, str], Iterable[Dict[str, Any]]]


class Snapshot:
    """
    Неизменяемый набор пакетов записей для одного запуска.

    Неизвестные типы пакетов отбрасываются с предупреждением.
    Пакеты, которых нет, считаются пустыми.
    """

    def __init__(self, batches: Optional[RecordBatches] = None, source: str = ""):
        """
        Args:
            batches: Пакеты записей по типам
            source: Откуда получен снапшот (URL NetBox, путь к файлу)
        """
        self.source = source
        self._batches: Dict[RecordType, tuple] = {}
        for key, records in (batches or {}).items():
            try:
                record_type = RecordType(key)
            except ValueError:
                logger.warning(f"Неизвестный тип записей в снапшоте: {key}")
                continue
            self._batches[record_type] = tuple(dict(r) for r in records or ())

    def get(self, record_type: Union[RecordType, str]) -> tuple:
        """Записи одного типа (пустой кортеж если пакета нет)."""
        return self._batches.get(RecordType(record_type), ())

    def __contains__(self, record_type: object) -> bool:
        try:
            return RecordType(record_type) in self._batches
        except ValueError:
            return False

    def counts(self) -> Dict[str, int]:
        """Количество записей по типам."""
        return {rt.value: len(self.get(rt)) for rt in RecordType}

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Пакеты как обычные списки словарей."""
        return {rt.value: [dict(r) for r in records] for rt, records in self._batches.items()}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Snapshot":
        """
        Загружает снапшот из JSON или YAML файла.

        Args:
            path: Путь к файлу (.json, .yaml, .yml)

        Returns:
            Snapshot

        Raises:
            SnapshotError: Файл не найден или не разбирается
        """
        path = Path(path)
        if not path.exists():
            raise SnapshotError(f"Файл снапшота не найден: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise SnapshotError(f"Не удалось прочитать снапшот {path}: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotError(f"Снапшот {path} должен быть словарём пакетов")

        logger.debug(f"Снапшот загружен из {path}")
        return cls(data, source=str(path))

    def to_file(self, path: Union[str, Path]) -> Path:
        """
        Сохраняет снапшот в JSON или YAML файл.

        Args:
            path: Путь к файлу

        Returns:
            Path: Путь к записанному файлу
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, allow_unicode=True, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False, default=str)
        logger.info(f"Снапшот сохранён: {path}")
        return path

    def __repr__(self) -> str:
        total = sum(len(r) for r in self._batches.values())
        return f"Snapshot(records={total}, source={self.source!r})"

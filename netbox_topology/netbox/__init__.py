"""
Модуль интеграции с NetBox.

Использует pynetbox для выгрузки записей; движок получает
их уже собранными в Snapshot.

Пример использования:
    from netbox_topology.netbox import NetBoxClient, SnapshotFetcher

    client = NetBoxClient(url="https://netbox.example.com", token="xxx")
    snapshot = SnapshotFetcher(client).fetch()
"""

from .client import NetBoxClient
from .snapshot import SnapshotFetcher, FETCH_METHODS

__all__ = ["NetBoxClient", "SnapshotFetcher", "FETCH_METHODS"]

"""
Выгрузка снапшота из NetBox.

Независимые типы записей выгружаются параллельно (ThreadPoolExecutor
с ограниченным числом потоков). Снапшот отдаётся только целиком:
ошибка любого типа прерывает выгрузку с SnapshotError.

Пример использования:
    client = NetBoxClient(url=config.netbox.url, token=config.netbox.token)
    fetcher = SnapshotFetcher(client, max_workers=4)
    snapshot = fetcher.fetch()
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional

from ..core.constants import RecordType
from ..core.exceptions import NetBoxError, SnapshotError
from ..core.logging import OperationLog, get_logger
from ..core.snapshot import Snapshot

logger = get_logger(__name__)

# Тип записей → метод NetBoxClient
FETCH_METHODS: Dict[RecordType, str] = {
    RecordType.DEVICES: "get_devices",
    RecordType.INTERFACES: "get_interfaces",
    RecordType.FRONT_PORTS: "get_front_ports",
    RecordType.REAR_PORTS: "get_rear_ports",
    RecordType.CABLES: "get_cables",
    RecordType.LOCATIONS: "get_locations",
    RecordType.SITES: "get_sites",
    RecordType.VLANS: "get_vlans",
    RecordType.VLAN_GROUPS: "get_vlan_groups",
    RecordType.L2VPNS: "get_l2vpns",
    RecordType.L2VPN_TERMINATIONS: "get_l2vpn_terminations",
    RecordType.WIRELESS_LANS: "get_wireless_lans",
    RecordType.WIRELESS_LAN_GROUPS: "get_wireless_lan_groups",
    RecordType.TENANTS: "get_tenants",
    RecordType.IP_ADDRESSES: "get_ip_addresses",
    RecordType.PREFIXES: "get_prefixes",
    RecordType.IP_RANGES: "get_ip_ranges",
}


class SnapshotFetcher:
    """
    Собирает Snapshot из NetBox.

    Attributes:
        client: NetBoxClient (или любой объект с методами get_*)
        max_workers: Максимум параллельных выгрузок
    """

    def __init__(self, client: Any, max_workers: int = 4):
        self.client = client
        self.max_workers = max(1, max_workers)

    def fetch(self, record_types: Optional[Iterable[str]] = None) -> Snapshot:
        """
        Выгружает записи всех (или указанных) типов.

        Args:
            record_types: Типы записей (по умолчанию все)

        Returns:
            Snapshot

        Raises:
            SnapshotError: Хотя бы один тип не выгрузился
        """
        types = [RecordType(rt) for rt in record_types] if record_types else list(RecordType)
        url = getattr(self.client, "url", "") or ""

        op = OperationLog(operation="fetch").start()
        fetch_logger = logger.bind(operation="fetch")
        fetch_logger.info(f"Выгрузка снапшота: {url or '-'}, типов={len(types)}")
        batches: Dict[RecordType, List[Dict[str, Any]]] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._fetch_one, record_type): record_type
                for record_type in types
            }
            for future in as_completed(futures):
                record_type = futures[future]
                try:
                    batches[record_type] = future.result()
                except (NetBoxError, ValueError, AttributeError) as e:
                    for pending in futures:
                        pending.cancel()
                    op.failure(f"{record_type.value}: {e}")
                    op.log(fetch_logger)
                    raise SnapshotError(
                        f"Не удалось выгрузить {record_type.value}: {e}",
                        record_type=record_type.value,
                        url=url or None,
                    ) from e

        op.success(**{rt.value: len(batches[rt]) for rt in types})
        op.log(fetch_logger)
        return Snapshot({rt: batches[rt] for rt in types}, source=url)

    def _fetch_one(self, record_type: RecordType) -> List[Dict[str, Any]]:
        method = getattr(self.client, FETCH_METHODS[record_type])
        records = method()
        logger.debug(f"Выгружено {record_type.value}: {len(records)}", record_type=record_type.value)
        return [dict(r) for r in records]

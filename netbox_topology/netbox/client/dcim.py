"""
Mixin для выгрузки DCIM объектов NetBox.

Устройства, интерфейсы, порты патч-панелей, кабели, локации, сайты.
"""

from typing import Any, Dict, List


class DCIMMixin:
    """Методы выгрузки DCIM объектов."""

    def get_devices(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("dcim", "devices", **filters)

    def get_interfaces(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("dcim", "interfaces", **filters)

    def get_front_ports(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("dcim", "front_ports", **filters)

    def get_rear_ports(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("dcim", "rear_ports", **filters)

    def get_cables(self, **filters: Any) -> List[Dict[str, Any]]:
        """
        Кабели с терминациями.

        a_terminations / b_terminations приходят списками
        {"object_type": "dcim.interface", "object_id": 5, "object": {...}}.
        """
        return self._list("dcim", "cables", **filters)

    def get_locations(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("dcim", "locations", **filters)

    def get_sites(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("dcim", "sites", **filters)

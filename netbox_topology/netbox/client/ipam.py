"""
Mixin для выгрузки IPAM объектов NetBox.

VLAN, группы VLAN, IP-адреса, префиксы, диапазоны.
"""

from typing import Any, Dict, List


class IPAMMixin:
    """Методы выгрузки IPAM объектов."""

    def get_vlans(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("ipam", "vlans", **filters)

    def get_vlan_groups(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("ipam", "vlan_groups", **filters)

    def get_ip_addresses(self, **filters: Any) -> List[Dict[str, Any]]:
        """IP-адреса; назначение — assigned_object_type / assigned_object_id."""
        return self._list("ipam", "ip_addresses", **filters)

    def get_prefixes(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("ipam", "prefixes", **filters)

    def get_ip_ranges(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("ipam", "ip_ranges", **filters)

"""
Mixin для выгрузки L2VPN (приложение vpn, NetBox 3.7+).
"""

from typing import Any, Dict, List


class VPNMixin:
    """Методы выгрузки L2VPN и их терминаций."""

    def get_l2vpns(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("vpn", "l2vpns", **filters)

    def get_l2vpn_terminations(self, **filters: Any) -> List[Dict[str, Any]]:
        """Терминации: {"l2vpn": {...}, "assigned_object_type": "dcim.interface", ...}."""
        return self._list("vpn", "l2vpn_terminations", **filters)

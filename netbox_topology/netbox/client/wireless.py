"""
Mixin для выгрузки беспроводных сетей NetBox.
"""

from typing import Any, Dict, List


class WirelessMixin:
    """Методы выгрузки WLAN и групп WLAN."""

    def get_wireless_lans(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("wireless", "wireless_lans", **filters)

    def get_wireless_lan_groups(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("wireless", "wireless_lan_groups", **filters)

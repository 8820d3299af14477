"""
Mixin для выгрузки тенантов NetBox.
"""

from typing import Any, Dict, List


class TenancyMixin:
    """Методы выгрузки тенантов."""

    def get_tenants(self, **filters: Any) -> List[Dict[str, Any]]:
        return self._list("tenancy", "tenants", **filters)

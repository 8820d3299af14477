"""
Domain logic для определения эффективного тенанта устройства.

Приоритет (первое заданное значение выигрывает):
    1. Собственный тенант устройства
    2. Тенант локации устройства
    3. Тенант сайта устройства
    4. Нет тенанта

Только аннотация — ничего не фильтрует.
"""

import logging
from typing import Dict, Optional

from ..models import Device, Ref
from .normalizer import NormalizedEntities

logger = logging.getLogger(__name__)


class TenantResolver:
    """
    Вычисляет эффективный тенант устройств.

    Example:
        resolver = TenantResolver(entities)
        tenant_id = resolver.resolve(device)
        by_device = resolver.resolve_all()
    """

    def __init__(self, entities: NormalizedEntities):
        self.entities = entities

    def resolve(self, device: Device) -> Optional[int]:
        """
        Эффективный тенант устройства.

        Неразрешённая ссылка на тенант тоже считается заданной:
        ID тенанта известен, даже если самой записи нет в снапшоте.

        Returns:
            ID тенанта или None
        """
        if device.tenant is not None:
            return device.tenant.id

        for container in (self._lookup(device.location, "locations"), self._lookup(device.site, "sites")):
            if container is not None and container.tenant is not None:
                return container.tenant.id
        return None

    def resolve_all(self, default: Optional[int] = None) -> Dict[int, Optional[int]]:
        """
        Эффективные тенанты всех устройств.

        Args:
            default: Тенант для устройств без тенанта (по умолчанию None)

        Returns:
            Dict: ID устройства → ID тенанта
        """
        result = {}
        for device_id in sorted(self.entities.devices):
            tenant_id = self.resolve(self.entities.devices[device_id])
            result[device_id] = default if tenant_id is None else tenant_id

        without = sum(1 for t in result.values() if t is None)
        logger.debug(f"Тенанты определены: устройств={len(result)}, без тенанта={without}")
        return result

    def _lookup(self, ref: Optional[Ref], attr: str):
        if ref is None or not ref.resolved:
            return None
        return getattr(self.entities, attr).get(ref.id)

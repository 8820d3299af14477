"""
Domain Layer для NetBox Topology.

Разрешение топологии отделено от получения данных (netbox).
Fetcher только выгружает сырые записи, Domain их обрабатывает.

Компоненты:
- EntityNormalizer: сырые записи → типизированные сущности
- TenantResolver: эффективный тенант устройства
- PassThroughResolver: проход кабеля через патч-панели
- PhysicalLinkBuilder: физические рёбра интерфейс ↔ интерфейс
- LogicalOverlayBuilder: VLAN / bridge / L2VPN / wireless рёбра

Использование:
    from netbox_topology.core.domain import EntityNormalizer, PhysicalLinkBuilder

    entities = EntityNormalizer().normalize(snapshot)
    links = PhysicalLinkBuilder(entities).build()
"""

from .normalizer import EntityNormalizer, NormalizedEntities
from .tenant import TenantResolver
from .passthrough import PassThroughResolver, ChainResolution
from .physical import PhysicalLinkBuilder, PhysicalLinks, PhysicalEdge, UnresolvedLink
from .overlay import LogicalOverlayBuilder, LogicalEdge

__all__ = [
    "EntityNormalizer",
    "NormalizedEntities",
    "TenantResolver",
    "PassThroughResolver",
    "ChainResolution",
    "PhysicalLinkBuilder",
    "PhysicalLinks",
    "PhysicalEdge",
    "UnresolvedLink",
    "LogicalOverlayBuilder",
    "LogicalEdge",
]

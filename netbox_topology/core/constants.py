"""
Константы и маппинги NetBox Topology.

Дискриминаторы полиморфных полей NetBox, виды узлов и рёбер графа,
причины неразрешённых кабелей.
"""

from enum import Enum
from typing import Dict, Optional


class RecordType(str, Enum):
    """Типы пакетов записей в снапшоте."""
    DEVICES = "devices"
    INTERFACES = "interfaces"
    FRONT_PORTS = "front_ports"
    REAR_PORTS = "rear_ports"
    CABLES = "cables"
    LOCATIONS = "locations"
    SITES = "sites"
    VLANS = "vlans"
    VLAN_GROUPS = "vlan_groups"
    L2VPNS = "l2vpns"
    L2VPN_TERMINATIONS = "l2vpn_terminations"
    WIRELESS_LANS = "wireless_lans"
    WIRELESS_LAN_GROUPS = "wireless_lan_groups"
    TENANTS = "tenants"
    IP_ADDRESSES = "ip_addresses"
    PREFIXES = "prefixes"
    IP_RANGES = "ip_ranges"


class EntityKind(str, Enum):
    """Вид сущности, на которую указывает ссылка."""
    DEVICE = "device"
    INTERFACE = "interface"
    FRONT_PORT = "front-port"
    REAR_PORT = "rear-port"
    CABLE = "cable"
    LOCATION = "location"
    SITE = "site"
    VLAN = "vlan"
    VLAN_GROUP = "vlan-group"
    L2VPN = "l2vpn"
    WIRELESS_LAN = "wireless-lan"
    WIRELESS_LAN_GROUP = "wireless-lan-group"
    TENANT = "tenant"
    IP_ADDRESS = "ip-address"


class NodeKind(str, Enum):
    """Виды узлов графа топологии."""
    DEVICE = "device"
    INTERFACE = "interface"
    FRONT_PORT = "front-port"
    REAR_PORT = "rear-port"
    VLAN = "vlan"
    L2VPN = "l2vpn"
    WIRELESS_LAN = "wireless-lan"


class EdgeKind(str, Enum):
    """Виды рёбер графа (физический слой и логические оверлеи)."""
    PHYSICAL = "physical"
    TAGGED_VLAN = "tagged-vlan"
    UNTAGGED_VLAN = "untagged-vlan"
    BRIDGE = "bridge"
    L2VPN = "l2vpn"
    WIRELESS = "wireless"

    @property
    def is_logical(self) -> bool:
        return self is not EdgeKind.PHYSICAL


class UnresolvedReason(str, Enum):
    """Причина, по которой кабель/цепочка не дала ребра."""
    CYCLE = "cycle"
    DANGLING = "dangling"
    AMBIGUOUS = "ambiguous"
    SELF_LOOP = "self-loop"
    MISSING = "missing"


class Severity(str, Enum):
    """Уровень диагностики нормализатора."""
    ERROR = "error"      # запись отброшена
    WARNING = "warning"  # запись сохранена, но данные неполные


# Дискриминаторы терминаций: REST (object_type) и GraphQL (__typename)
TERMINATION_TYPE_MAP: Dict[str, EntityKind] = {
    "dcim.interface": EntityKind.INTERFACE,
    "dcim.frontport": EntityKind.FRONT_PORT,
    "dcim.rearport": EntityKind.REAR_PORT,
    "ipam.vlan": EntityKind.VLAN,
    "InterfaceType": EntityKind.INTERFACE,
    "FrontPortType": EntityKind.FRONT_PORT,
    "RearPortType": EntityKind.REAR_PORT,
    "VLANType": EntityKind.VLAN,
}

# Допустимые варианты по контексту
CABLE_TERMINATION_KINDS = frozenset({
    EntityKind.INTERFACE,
    EntityKind.FRONT_PORT,
    EntityKind.REAR_PORT,
})
L2VPN_TERMINATION_KINDS = frozenset({
    EntityKind.INTERFACE,
    EntityKind.VLAN,
})

# Пакеты, в которых лежат сущности каждого вида
RECORD_TYPE_BY_KIND: Dict[EntityKind, RecordType] = {
    EntityKind.DEVICE: RecordType.DEVICES,
    EntityKind.INTERFACE: RecordType.INTERFACES,
    EntityKind.FRONT_PORT: RecordType.FRONT_PORTS,
    EntityKind.REAR_PORT: RecordType.REAR_PORTS,
    EntityKind.CABLE: RecordType.CABLES,
    EntityKind.LOCATION: RecordType.LOCATIONS,
    EntityKind.SITE: RecordType.SITES,
    EntityKind.VLAN: RecordType.VLANS,
    EntityKind.VLAN_GROUP: RecordType.VLAN_GROUPS,
    EntityKind.L2VPN: RecordType.L2VPNS,
    EntityKind.WIRELESS_LAN: RecordType.WIRELESS_LANS,
    EntityKind.WIRELESS_LAN_GROUP: RecordType.WIRELESS_LAN_GROUPS,
    EntityKind.TENANT: RecordType.TENANTS,
    EntityKind.IP_ADDRESS: RecordType.IP_ADDRESSES,
}

# Типы аутентификации WLAN (NetBox wireless auth_type)
WLAN_AUTH_WPA_PERSONAL = "wpa-personal"
WLAN_AUTH_OPEN = "open"

# Имя и тип loopback-интерфейса
LOOPBACK_INTERFACE_NAME = "lo"
LOOPBACK_INTERFACE_TYPE = "virtual"


def resolve_termination_type(type_tag: Optional[str]) -> Optional[EntityKind]:
    """
    Определяет вид сущности по дискриминатору NetBox.

    Args:
        type_tag: "dcim.interface", "FrontPortType" и т.д.

    Returns:
        EntityKind или None если тип не поддерживается
    """
    if not type_tag:
        return None
    return TERMINATION_TYPE_MAP.get(str(type_tag).strip())

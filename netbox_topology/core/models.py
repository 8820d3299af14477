"""
Data Models для NetBox Topology.

Типизированные неизменяемые dataclasses вместо Dict[str, Any].
Создаются нормализатором один раз за запуск и дальше только читаются.

Полиморфные поля NetBox (терминации кабелей, назначения L2VPN) —
замкнутый набор вариантов:
    CableTermination = InterfaceTermination | FrontPortTermination | RearPortTermination
    L2VPNTermination = InterfaceTermination | VlanTermination

Использование:
    from netbox_topology.core.models import Ref, Interface

    ref = Ref(EntityKind.INTERFACE, 12)
    intf = entities.interfaces[ref.id]
    print(intf.name, intf.untagged_vlan)
"""

import ipaddress
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Dict, Any, Union, FrozenSet, ClassVar

from .constants import (
    EntityKind,
    Severity,
    WLAN_AUTH_OPEN,
    WLAN_AUTH_WPA_PERSONAL,
)


@dataclass(frozen=True)
class Ref:
    """
    Ссылка на сущность.

    resolved=False — маркер неразрешённой ссылки: id есть в записи,
    но самой сущности нет в снапшоте. Отличается от None ("ссылки нет").

    Attributes:
        kind: Вид сущности
        id: ID сущности
        resolved: Найдена ли сущность в снапшоте
    """
    kind: EntityKind
    id: int
    resolved: bool = True

    @property
    def key(self) -> Tuple[str, int]:
        """Ключ без учёта resolved (для индексов и visited-множеств)."""
        return (self.kind.value, self.id)

    def __str__(self) -> str:
        suffix = "" if self.resolved else "?"
        return f"{self.kind.value}:{self.id}{suffix}"


# ==================== ТЕРМИНАЦИИ ====================

@dataclass(frozen=True)
class InterfaceTermination:
    """Терминация на интерфейсе."""
    kind: ClassVar[EntityKind] = EntityKind.INTERFACE
    ref: Ref


@dataclass(frozen=True)
class FrontPortTermination:
    """Терминация на front port патч-панели."""
    kind: ClassVar[EntityKind] = EntityKind.FRONT_PORT
    ref: Ref


@dataclass(frozen=True)
class RearPortTermination:
    """Терминация на rear port патч-панели."""
    kind: ClassVar[EntityKind] = EntityKind.REAR_PORT
    ref: Ref


@dataclass(frozen=True)
class VlanTermination:
    """Терминация L2VPN на VLAN (для кабелей не используется)."""
    kind: ClassVar[EntityKind] = EntityKind.VLAN
    ref: Ref


CableTermination = Union[InterfaceTermination, FrontPortTermination, RearPortTermination]
L2VPNTermination = Union[InterfaceTermination, VlanTermination]

TERMINATION_CLASSES = {
    EntityKind.INTERFACE: InterfaceTermination,
    EntityKind.FRONT_PORT: FrontPortTermination,
    EntityKind.REAR_PORT: RearPortTermination,
    EntityKind.VLAN: VlanTermination,
}


# ==================== DCIM ====================

@dataclass(frozen=True)
class Tenant:
    """Тенант."""
    id: int
    name: str = ""
    custom_fields: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)


@dataclass(frozen=True)
class Location:
    """Локация (помещение, этаж) с собственным тенантом."""
    id: int
    name: str = ""
    tenant: Optional[Ref] = None


@dataclass(frozen=True)
class Site:
    """Сайт с собственным тенантом."""
    id: int
    name: str = ""
    tenant: Optional[Ref] = None


@dataclass(frozen=True)
class Device:
    """
    Устройство.

    Эффективный тенант не хранится — его вычисляет TenantResolver.

    Attributes:
        id: ID устройства
        name: Имя устройства
        role: Роль (slug или имя)
        platform: Платформа
        serial: Серийный номер
        status: Статус (active, planned, ...)
        primary_ip4: Ссылка на primary IPv4
        primary_ip6: Ссылка на primary IPv6
        primary_ip4_address: Адрес primary IPv4 (CIDR)
        primary_ip6_address: Адрес primary IPv6 (CIDR)
        tenant: Собственный тенант
        location: Локация
        site: Сайт
        wlan_group: Группа WLAN, в которой устройство — точка доступа
        custom_fields: Custom fields NetBox
    """
    id: int
    name: str = ""
    role: str = ""
    platform: str = ""
    serial: str = ""
    status: str = ""
    primary_ip4: Optional[Ref] = None
    primary_ip6: Optional[Ref] = None
    primary_ip4_address: str = ""
    primary_ip6_address: str = ""
    tenant: Optional[Ref] = None
    location: Optional[Ref] = None
    site: Optional[Ref] = None
    wlan_group: Optional[Ref] = None
    custom_fields: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def primary_ip(self) -> Optional[str]:
        """Primary IP без маски: IPv6 приоритетнее IPv4."""
        for address in (self.primary_ip6_address, self.primary_ip4_address):
            host = _host_address(address)
            if host:
                return host
        return None

    @property
    def primary_ip_v4(self) -> Optional[str]:
        """Primary IPv4 без маски."""
        host = _host_address(self.primary_ip4_address)
        if host and ipaddress.ip_address(host).version == 4:
            return host
        return None


@dataclass(frozen=True)
class Interface:
    """
    Интерфейс устройства.

    Attributes:
        id: ID интерфейса
        name: Имя интерфейса
        device: Ссылка на устройство
        label: Метка
        enabled: Включён ли интерфейс
        type: Тип (1000base-t, virtual, bridge, ...)
        mgmt_only: Management-only интерфейс
        bridge: Ссылка на bridge-интерфейс
        tags: Метки (slug)
        untagged_vlan: Untagged VLAN
        tagged_vlans: Tagged VLAN
        ip_addresses: IP-адреса интерфейса
        wireless_lans: WLAN, которые обслуживает интерфейс (радио)
    """
    id: int
    name: str
    device: Ref
    label: str = ""
    enabled: bool = True
    type: str = ""
    mgmt_only: bool = False
    bridge: Optional[Ref] = None
    tags: FrozenSet[str] = frozenset()
    untagged_vlan: Optional[Ref] = None
    tagged_vlans: Tuple[Ref, ...] = ()
    ip_addresses: Tuple[Ref, ...] = ()
    wireless_lans: Tuple[Ref, ...] = ()


@dataclass(frozen=True)
class FrontPort:
    """
    Front port патч-панели.

    Ссылается максимум на один rear port; rear_port_position — позиция
    на rear port (для разветвления 1:N).
    """
    id: int
    name: str
    device: Ref
    rear_port: Optional[Ref] = None
    rear_port_position: int = 1


@dataclass(frozen=True)
class RearPort:
    """Rear port патч-панели (может обслуживать несколько front ports)."""
    id: int
    name: str
    device: Ref
    positions: int = 1


@dataclass(frozen=True)
class Cable:
    """Кабель: ровно две терминации, A и B."""
    id: int
    a_termination: CableTermination
    b_termination: CableTermination
    label: str = ""
    status: str = ""

    def termination(self, side: str) -> CableTermination:
        """Терминация стороны "A" или "B"."""
        if side == "A":
            return self.a_termination
        if side == "B":
            return self.b_termination
        raise ValueError(f"Неизвестная сторона кабеля: {side!r}")

    def far_side(self, port: Ref) -> Optional[CableTermination]:
        """Терминация на противоположной стороне от port."""
        if self.a_termination.ref.key == port.key:
            return self.b_termination
        if self.b_termination.ref.key == port.key:
            return self.a_termination
        return None


# ==================== IPAM ====================

@dataclass(frozen=True)
class VlanGroup:
    """Группа VLAN (пространство имён VID)."""
    id: int
    name: str = ""
    slug: str = ""


@dataclass(frozen=True)
class Vlan:
    """VLAN."""
    id: int
    vid: int
    name: str = ""
    group: Optional[Ref] = None
    tenant: Optional[Ref] = None


@dataclass(frozen=True)
class IPAddress:
    """IP-адрес (address в формате CIDR)."""
    id: int
    address: str
    role: str = ""
    assigned_interface: Optional[Ref] = None
    tenant: Optional[Ref] = None

    @property
    def host(self) -> Optional[str]:
        return _host_address(self.address)

    @property
    def is_host_prefix(self) -> bool:
        """Маска /32 или /128."""
        try:
            iface = ipaddress.ip_interface(self.address)
        except ValueError:
            return False
        return iface.network.prefixlen == iface.max_prefixlen


@dataclass(frozen=True)
class Prefix:
    """Префикс."""
    id: int
    prefix: str
    role: str = ""
    vlan: Optional[Ref] = None
    tenant: Optional[Ref] = None


@dataclass(frozen=True)
class IPRange:
    """Диапазон IP-адресов."""
    id: int
    start_address: str
    end_address: str
    role: str = ""
    tenant: Optional[Ref] = None


# ==================== VPN / WIRELESS ====================

@dataclass(frozen=True)
class L2VPN:
    """
    L2VPN (VXLAN, EVPN, VPLS, ...).

    Attributes:
        id: ID
        name: Имя
        type: Тип (vxlan, vpls, ...)
        identifier: Числовой идентификатор (VNI для VXLAN)
        tenant: Тенант
        terminations: Интерфейсы и VLAN-участники
    """
    id: int
    name: str = ""
    type: str = ""
    identifier: Optional[int] = None
    tenant: Optional[Ref] = None
    terminations: Tuple[L2VPNTermination, ...] = ()


@dataclass(frozen=True)
class WlanAuth:
    """Настройки аутентификации WLAN."""
    mode: str
    key: str = ""
    use_owe: bool = False


@dataclass(frozen=True)
class WirelessLANGroup:
    """
    Группа WLAN.

    Состав группы задаётся custom fields: у группы "controller" (устройство)
    и "mgmt_vlan" (VLAN управления), у точек доступа "wlan_group".

    Attributes:
        id: ID группы
        name: Имя
        slug: Slug
        controller: Контроллер группы
        mgmt_vlan: VLAN управления точками доступа
        aps: Точки доступа (устройства с wlan_group = эта группа)
        custom_fields: Custom fields NetBox
    """
    id: int
    name: str = ""
    slug: str = ""
    controller: Optional[Ref] = None
    mgmt_vlan: Optional[Ref] = None
    aps: Tuple[Ref, ...] = ()
    custom_fields: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)


@dataclass(frozen=True)
class WirelessLAN:
    """Беспроводная сеть (SSID)."""
    id: int
    ssid: str
    auth_type: str = ""
    auth_psk: str = ""
    vlan: Optional[Ref] = None
    group: Optional[Ref] = None
    tenant: Optional[Ref] = None

    @property
    def auth(self) -> Optional[WlanAuth]:
        """wpa-personal → WPA с ключом, open → открытая сеть с OWE."""
        if self.auth_type == WLAN_AUTH_WPA_PERSONAL:
            return WlanAuth(mode="wpa", key=self.auth_psk)
        if self.auth_type == WLAN_AUTH_OPEN:
            return WlanAuth(mode="open", use_owe=True)
        return None


# ==================== ДИАГНОСТИКА ====================

@dataclass(frozen=True)
class Diagnostic:
    """
    Замечание нормализатора по одной записи.

    Attributes:
        severity: error (запись отброшена) или warning (сохранена)
        record_type: Тип записи (devices, cables, ...)
        record_id: ID записи (None если ID не прочитан)
        message: Описание
        field: Поле, вызвавшее замечание
        code: Код замечания (missing-id, dangling-reference, ...)
    """
    severity: Severity
    record_type: str
    record_id: Optional[int]
    message: str
    field: str = ""
    code: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Конвертирует в словарь."""
        data = asdict(self)
        data["severity"] = self.severity.value
        return {k: v for k, v in data.items() if v is not None and v != ""}


def _host_address(address: str) -> Optional[str]:
    """Адрес без маски или None если строка не IP."""
    if not address:
        return None
    try:
        return str(ipaddress.ip_interface(address).ip)
    except ValueError:
        return None

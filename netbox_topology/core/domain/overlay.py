"""
Domain logic логических оверлеев.

Рёбра строятся из назначений, а не из кабелей:
- untagged-vlan: интерфейс ↔ его untagged VLAN
- tagged-vlan:   интерфейс ↔ каждый tagged VLAN
- bridge:        интерфейс ↔ его bridge-интерфейс (звезда вокруг bridge)
- l2vpn:         все терминации L2VPN попарно
- wireless:      WLAN ↔ его VLAN, WLAN ↔ интерфейсы, которые его обслуживают,
                 WLAN ↔ контроллер и точки доступа его группы,
                 контроллер и точки доступа ↔ VLAN управления группы

VTEP L2VPN — primary IPv4 устройств с интерфейсами-терминациями, а для
VLAN-терминаций ещё и точек доступа и контроллеров групп WLAN этого VLAN.

Ссылки на отсутствующие сущности пропускаются: нормализатор уже
записал для них диагностику.
"""

import ipaddress
import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, List, Optional, Set, Tuple

from ..constants import EdgeKind, EntityKind
from ..models import Ref
from .normalizer import NormalizedEntities

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogicalEdge:
    """
    Логическая связь двух сущностей.

    Attributes:
        kind: Вид ребра
        a: Первая сторона
        b: Вторая сторона
        origin: Сущность, породившая ребро (VLAN, bridge, L2VPN, WLAN)
    """
    kind: EdgeKind
    a: Ref
    b: Ref
    origin: Ref


class LogicalOverlayBuilder:
    """
    Строит логические рёбра.

    Example:
        edges = LogicalOverlayBuilder(entities).build()
        vlan_edges = [e for e in edges if e.kind == EdgeKind.TAGGED_VLAN]
    """

    def __init__(self, entities: NormalizedEntities):
        self.entities = entities

    def build(self) -> List[LogicalEdge]:
        """Все логические рёбра в детерминированном порядке."""
        edges: List[LogicalEdge] = []
        edges.extend(self._vlan_edges())
        edges.extend(self._bridge_edges())
        edges.extend(self._l2vpn_edges())
        edges.extend(self._wireless_edges())
        edges.extend(self._wlan_group_edges())

        counts = {}
        for edge in edges:
            counts[edge.kind.value] = counts.get(edge.kind.value, 0) + 1
        logger.info(f"Логические рёбра: {counts}")
        return edges

    def _present(self, ref: Optional[Ref]) -> bool:
        return self.entities.get(ref) is not None

    def _vlan_edges(self) -> List[LogicalEdge]:
        edges = []
        for intf_id in sorted(self.entities.interfaces):
            intf = self.entities.interfaces[intf_id]
            own = Ref(EntityKind.INTERFACE, intf_id)
            if self._present(intf.untagged_vlan):
                edges.append(LogicalEdge(EdgeKind.UNTAGGED_VLAN, own, intf.untagged_vlan, intf.untagged_vlan))
            for vlan in intf.tagged_vlans:
                if self._present(vlan):
                    edges.append(LogicalEdge(EdgeKind.TAGGED_VLAN, own, vlan, vlan))
        return edges

    def _bridge_edges(self) -> List[LogicalEdge]:
        edges = []
        for intf_id in sorted(self.entities.interfaces):
            bridge = self.entities.interfaces[intf_id].bridge
            if self._present(bridge):
                edges.append(LogicalEdge(EdgeKind.BRIDGE, Ref(EntityKind.INTERFACE, intf_id), bridge, bridge))
        return edges

    def _l2vpn_edges(self) -> List[LogicalEdge]:
        edges = []
        for l2vpn_id in sorted(self.entities.l2vpns):
            l2vpn = self.entities.l2vpns[l2vpn_id]
            origin = Ref(EntityKind.L2VPN, l2vpn_id)
            members = [t.ref for t in l2vpn.terminations if self._present(t.ref)]
            for a, b in combinations(members, 2):
                edges.append(LogicalEdge(EdgeKind.L2VPN, a, b, origin))
        return edges

    def _wireless_edges(self) -> List[LogicalEdge]:
        edges = []
        for wlan_id in sorted(self.entities.wireless_lans):
            wlan = self.entities.wireless_lans[wlan_id]
            own = Ref(EntityKind.WIRELESS_LAN, wlan_id)
            if self._present(wlan.vlan):
                edges.append(LogicalEdge(EdgeKind.WIRELESS, own, wlan.vlan, own))

        for intf_id in sorted(self.entities.interfaces):
            for wlan in self.entities.interfaces[intf_id].wireless_lans:
                if self._present(wlan):
                    edges.append(LogicalEdge(EdgeKind.WIRELESS, wlan, Ref(EntityKind.INTERFACE, intf_id), wlan))
        return edges

    def _wlan_group_edges(self) -> List[LogicalEdge]:
        edges = []
        for group_id in sorted(self.entities.wireless_lan_groups):
            group = self.entities.wireless_lan_groups[group_id]
            origin = Ref(EntityKind.WIRELESS_LAN_GROUP, group_id)
            members = [ref for ref in _group_members(group) if self._present(ref)]

            for wlan_id in sorted(self.entities.wireless_lans):
                if self.entities.wireless_lans[wlan_id].group != origin:
                    continue
                wlan = Ref(EntityKind.WIRELESS_LAN, wlan_id)
                for device in members:
                    edges.append(LogicalEdge(EdgeKind.WIRELESS, wlan, device, origin))

            if self._present(group.mgmt_vlan):
                for device in members:
                    edges.append(LogicalEdge(EdgeKind.WIRELESS, device, group.mgmt_vlan, origin))
        return edges

    def vteps(self) -> Dict[int, Tuple[str, ...]]:
        """
        VTEP каждого L2VPN.

        Returns:
            ID L2VPN → primary IPv4 участников, отсортированные по адресу
        """
        groups_by_vlan: Dict[int, Set[int]] = {}
        for wlan in self.entities.wireless_lans.values():
            if self._present(wlan.vlan) and self._present(wlan.group):
                groups_by_vlan.setdefault(wlan.vlan.id, set()).add(wlan.group.id)

        result = {}
        for l2vpn_id in sorted(self.entities.l2vpns):
            devices: Set[int] = set()
            for termination in self.entities.l2vpns[l2vpn_id].terminations:
                if termination.ref.kind == EntityKind.INTERFACE:
                    intf = self.entities.get(termination.ref)
                    if intf is not None and intf.device.resolved:
                        devices.add(intf.device.id)
                    continue
                for group_id in groups_by_vlan.get(termination.ref.id, ()):
                    group = self.entities.wireless_lan_groups[group_id]
                    devices.update(ref.id for ref in _group_members(group) if ref.resolved)

            addresses = {
                self.entities.devices[dev_id].primary_ip_v4
                for dev_id in devices if dev_id in self.entities.devices
            }
            addresses.discard(None)
            result[l2vpn_id] = tuple(sorted(addresses, key=ipaddress.ip_address))
        return result


def _group_members(group) -> Tuple[Ref, ...]:
    """Контроллер и точки доступа группы WLAN."""
    controller = (group.controller,) if group.controller is not None else ()
    return controller + tuple(ref for ref in group.aps if ref != group.controller)

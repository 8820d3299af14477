"""
Граф топологии.

Узлы — устройства, интерфейсы, порты патч-панелей, VLAN, L2VPN и WLAN.
Рёбра — физические связи (из кабелей) и логические оверлеи.
Каждый узел и ребро аннотированы тенантами для фильтрации.

ID узла: "<kind>:<id>" (например "interface:12").

Пример использования:
    graph = TopologyGraph.build(entities, device_tenants, links.edges, overlay)

    for edge in graph.edges(kind=EdgeKind.PHYSICAL, tenant=5):
        print(edge.endpoints, edge.sources)

    graph.neighbors("interface:12")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .constants import (
    LOOPBACK_INTERFACE_NAME,
    LOOPBACK_INTERFACE_TYPE,
    EdgeKind,
    EntityKind,
    NodeKind,
)
from .models import Device, Ref

logger = logging.getLogger(__name__)


def node_id(kind, entity_id: int) -> str:
    """ID узла вида "interface:12"."""
    value = kind.value if hasattr(kind, "value") else str(kind)
    return f"{value}:{entity_id}"


@dataclass(frozen=True)
class GraphNode:
    """
    Узел графа.

    Attributes:
        id: "<kind>:<id>"
        kind: Вид узла
        entity_id: ID сущности NetBox
        label: Отображаемое имя
        tenant: ID тенанта (None если не определён)
        attributes: Дополнительные свойства
    """
    id: str
    kind: NodeKind
    entity_id: int
    label: str = ""
    tenant: Optional[int] = None
    attributes: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "tenant": self.tenant,
            "label": self.label,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class GraphEdge:
    """
    Неориентированное ребро графа.

    Attributes:
        id: Уникальный ID ребра
        kind: Вид ребра
        endpoints: ID узлов (отсортированы)
        sources: Происхождение ("cable:3", "vlan:10", "l2vpn:7", ...)
        tenants: Тенанты концов ребра
    """
    id: str
    kind: EdgeKind
    endpoints: Tuple[str, str]
    sources: Tuple[str, ...] = ()
    tenants: Tuple[int, ...] = ()

    def other(self, node: str) -> str:
        """Противоположный конец ребра."""
        return self.endpoints[1] if self.endpoints[0] == node else self.endpoints[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "endpoints": list(self.endpoints),
            "sources": list(self.sources),
            "tenants": list(self.tenants),
        }


class TopologyGraph:
    """
    Граф топологии (только чтение после build).

    Example:
        graph.nodes(kind=NodeKind.DEVICE)
        graph.edges(tenant=5)
        graph.get_node("device:1")
        graph.neighbors("interface:12", kind=EdgeKind.PHYSICAL)
    """

    def __init__(self):
        self._nodes: Dict[str, GraphNode] = {}
        self._edges: Dict[str, GraphEdge] = {}
        self._adjacency: Dict[str, List[str]] = {}

    # ==================== ПОСТРОЕНИЕ ====================

    @classmethod
    def build(
        cls,
        entities,
        device_tenants: Dict[int, Optional[int]],
        physical_edges: Iterable = (),
        logical_edges: Iterable = (),
        l2vpn_vteps: Optional[Dict[int, Tuple[str, ...]]] = None,
    ) -> "TopologyGraph":
        """
        Собирает граф из результатов разрешения.

        Args:
            entities: NormalizedEntities
            device_tenants: ID устройства → эффективный тенант
            physical_edges: PhysicalEdge из PhysicalLinkBuilder
            logical_edges: LogicalEdge из LogicalOverlayBuilder
            l2vpn_vteps: ID L2VPN → адреса VTEP (LogicalOverlayBuilder.vteps)
        """
        graph = cls()
        graph._add_nodes(entities, device_tenants, l2vpn_vteps or {})

        for edge in physical_edges:
            graph._add_edge(
                EdgeKind.PHYSICAL,
                node_id(NodeKind.INTERFACE, edge.a),
                node_id(NodeKind.INTERFACE, edge.b),
                tuple(node_id(EntityKind.CABLE, cid) for cid in edge.cable_ids),
            )
        for edge in logical_edges:
            graph._add_edge(
                edge.kind,
                node_id(edge.a.kind, edge.a.id),
                node_id(edge.b.kind, edge.b.id),
                (str(edge.origin),),
            )

        logger.info(f"Граф построен: узлов={len(graph._nodes)}, рёбер={len(graph._edges)}")
        return graph

    def _add_nodes(
        self,
        entities,
        device_tenants: Dict[int, Optional[int]],
        l2vpn_vteps: Dict[int, Tuple[str, ...]],
    ) -> None:
        loopbacks = self._loopback_addresses(entities)

        for dev_id in sorted(entities.devices):
            device = entities.devices[dev_id]
            self._add_node(
                NodeKind.DEVICE, dev_id, device.name, device_tenants.get(dev_id),
                self._device_attributes(device, loopbacks.get(dev_id)),
            )

        def device_tenant(ref: Ref) -> Optional[int]:
            return device_tenants.get(ref.id) if ref.resolved else None

        for intf_id in sorted(entities.interfaces):
            intf = entities.interfaces[intf_id]
            self._add_node(NodeKind.INTERFACE, intf_id, intf.name, device_tenant(intf.device), {
                "device": node_id(NodeKind.DEVICE, intf.device.id),
                "type": intf.type,
                "enabled": intf.enabled,
                "mgmt_only": intf.mgmt_only,
                "label": intf.label,
                "tags": sorted(intf.tags),
                "ip_addresses": [
                    entities.ip_addresses[ref.id].address
                    for ref in intf.ip_addresses if ref.id in entities.ip_addresses
                ],
            })

        for port_id in sorted(entities.front_ports):
            port = entities.front_ports[port_id]
            self._add_node(NodeKind.FRONT_PORT, port_id, port.name, device_tenant(port.device), {
                "device": node_id(NodeKind.DEVICE, port.device.id),
                "rear_port": str(port.rear_port) if port.rear_port else None,
                "rear_port_position": port.rear_port_position,
            })

        for port_id in sorted(entities.rear_ports):
            port = entities.rear_ports[port_id]
            self._add_node(NodeKind.REAR_PORT, port_id, port.name, device_tenant(port.device), {
                "device": node_id(NodeKind.DEVICE, port.device.id),
                "positions": port.positions,
            })

        for vlan_id in sorted(entities.vlans):
            vlan = entities.vlans[vlan_id]
            group = entities.get(vlan.group)
            self._add_node(NodeKind.VLAN, vlan_id, vlan.name or str(vlan.vid), _ref_id(vlan.tenant), {
                "vid": vlan.vid,
                "group": group.slug or group.name if group else None,
            })

        for l2vpn_id in sorted(entities.l2vpns):
            l2vpn = entities.l2vpns[l2vpn_id]
            self._add_node(NodeKind.L2VPN, l2vpn_id, l2vpn.name, _ref_id(l2vpn.tenant), {
                "type": l2vpn.type,
                "identifier": l2vpn.identifier,
                "vteps": list(l2vpn_vteps.get(l2vpn_id, ())),
            })

        for wlan_id in sorted(entities.wireless_lans):
            wlan = entities.wireless_lans[wlan_id]
            group = entities.get(wlan.group)
            auth = wlan.auth
            mgmt_vlan = entities.get(group.mgmt_vlan) if group else None
            self._add_node(NodeKind.WIRELESS_LAN, wlan_id, wlan.ssid, _ref_id(wlan.tenant), {
                "ssid": wlan.ssid,
                "auth": auth.mode if auth else wlan.auth_type or None,
                "use_owe": auth.use_owe if auth else False,
                "group": group.slug or group.name if group else None,
                "controller": _device_node(entities, group.controller) if group else None,
                "aps": [
                    node_id(NodeKind.DEVICE, ref.id) for ref in group.aps if ref.id in entities.devices
                ] if group else [],
                "mgmt_vlan": mgmt_vlan.vid if mgmt_vlan else None,
            })

    @staticmethod
    def _loopback_addresses(entities) -> Dict[int, str]:
        """Устройство → адрес хоста на виртуальном интерфейсе lo."""
        result = {}
        for ip_id in sorted(entities.ip_addresses):
            ip = entities.ip_addresses[ip_id]
            intf = entities.get(ip.assigned_interface)
            if intf is None or not ip.is_host_prefix:
                continue
            if intf.name == LOOPBACK_INTERFACE_NAME and intf.type == LOOPBACK_INTERFACE_TYPE:
                result.setdefault(intf.device.id, ip.host)
        return result

    @staticmethod
    def _device_attributes(device: Device, loopback: Optional[str]) -> Dict[str, Any]:
        return {
            "name": device.name,
            "role": device.role,
            "platform": device.platform,
            "serial": device.serial,
            "status": device.status,
            "primary_ip": device.primary_ip,
            "loopback_ip": loopback,
        }

    def _add_node(self, kind: NodeKind, entity_id: int, label: str, tenant: Optional[int], attributes: dict) -> None:
        nid = node_id(kind, entity_id)
        self._nodes[nid] = GraphNode(
            id=nid, kind=kind, entity_id=entity_id, label=label, tenant=tenant, attributes=attributes,
        )
        self._adjacency.setdefault(nid, [])

    def _add_edge(self, kind: EdgeKind, a: str, b: str, sources: Tuple[str, ...]) -> None:
        if a not in self._nodes or b not in self._nodes:
            logger.debug(f"Ребро {kind.value} {a} — {b} пропущено: узла нет в графе")
            return

        endpoints = tuple(sorted((a, b)))
        base_id = f"{kind.value}:{endpoints[0]}~{endpoints[1]}:{'+'.join(sources)}"
        edge_id, n = base_id, 1
        while edge_id in self._edges:
            n += 1
            edge_id = f"{base_id}#{n}"

        tenants = {self._nodes[nid].tenant for nid in endpoints} - {None}
        self._edges[edge_id] = GraphEdge(
            id=edge_id, kind=kind, endpoints=endpoints, sources=sources, tenants=tuple(sorted(tenants)),
        )
        self._adjacency[a].append(edge_id)
        if b != a:
            self._adjacency[b].append(edge_id)

    # ==================== ЧТЕНИЕ ====================

    def nodes(self, kind: Optional[NodeKind] = None, tenant: Optional[int] = None) -> List[GraphNode]:
        """Узлы (по ID), с фильтром по виду и тенанту."""
        kind = NodeKind(kind) if kind is not None else None
        return [
            node for nid, node in sorted(self._nodes.items())
            if (kind is None or node.kind == kind) and (tenant is None or node.tenant == tenant)
        ]

    def edges(self, kind: Optional[EdgeKind] = None, tenant: Optional[int] = None) -> List[GraphEdge]:
        """Рёбра (по ID); tenant — ребро касается тенанта хотя бы одним концом."""
        kind = EdgeKind(kind) if kind is not None else None
        return [
            edge for eid, edge in sorted(self._edges.items())
            if (kind is None or edge.kind == kind) and (tenant is None or tenant in edge.tenants)
        ]

    def get_node(self, nid: str) -> Optional[GraphNode]:
        return self._nodes.get(nid)

    def get_edge(self, eid: str) -> Optional[GraphEdge]:
        return self._edges.get(eid)

    def edges_of(self, nid: str) -> List[GraphEdge]:
        """Рёбра, инцидентные узлу."""
        return [self._edges[eid] for eid in sorted(self._adjacency.get(nid, ()))]

    def neighbors(self, nid: str, kind: Optional[EdgeKind] = None) -> List[str]:
        """Соседние узлы (по рёбрам вида kind, если задан)."""
        kind = EdgeKind(kind) if kind is not None else None
        result = {
            edge.other(nid) for edge in self.edges_of(nid)
            if kind is None or edge.kind == kind
        }
        return sorted(result)

    def tenants(self) -> List[int]:
        """Все тенанты, встречающиеся на узлах."""
        return sorted({node.tenant for node in self._nodes.values() if node.tenant is not None})

    def stats(self) -> Dict[str, Dict[str, int]]:
        """Количество узлов и рёбер по видам."""
        nodes: Dict[str, int] = {}
        edges: Dict[str, int] = {}
        for node in self._nodes.values():
            nodes[node.kind.value] = nodes.get(node.kind.value, 0) + 1
        for edge in self._edges.values():
            edges[edge.kind.value] = edges.get(edge.kind.value, 0) + 1
        return {"nodes": nodes, "edges": edges}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes()],
            "edges": [edge.to_dict() for edge in self.edges()],
        }

    def __len__(self) -> int:
        return len(self._nodes)


def _ref_id(ref: Optional[Ref]) -> Optional[int]:
    return ref.id if ref is not None else None


def _device_node(entities, ref: Optional[Ref]) -> Optional[str]:
    return node_id(NodeKind.DEVICE, ref.id) if entities.get(ref) is not None else None

"""
Tests for LogicalOverlayBuilder.

Проверяет рёбра VLAN, bridge, L2VPN и wireless.
"""

import pytest

from netbox_topology.core.constants import EdgeKind, EntityKind
from netbox_topology.core.domain.normalizer import EntityNormalizer
from netbox_topology.core.domain.overlay import LogicalEdge, LogicalOverlayBuilder
from netbox_topology.core.models import Ref

IF = "dcim.interface"
VLAN = "ipam.vlan"


def build_edges(snapshot, kind=None):
    edges = LogicalOverlayBuilder(EntityNormalizer().normalize(snapshot)).build()
    return [e for e in edges if kind is None or e.kind == kind]


def intf(id):
    return Ref(EntityKind.INTERFACE, id)


def vlan(id):
    return Ref(EntityKind.VLAN, id)


@pytest.mark.unit
class TestVlanEdges:
    """Тесты рёбер VLAN."""

    def test_untagged_and_tagged(self, builder):
        """untagged V10 и tagged V20, V30 — три ребра."""
        builder.device(1)
        builder.vlan(100, 10)
        builder.vlan(200, 20)
        builder.vlan(300, 30)
        builder.interface(
            10, device=1,
            untagged_vlan={"id": 100},
            tagged_vlans=[{"id": 300}, {"id": 200}],
        )
        edges = build_edges(builder.build())

        assert edges == [
            LogicalEdge(EdgeKind.UNTAGGED_VLAN, intf(10), vlan(100), vlan(100)),
            LogicalEdge(EdgeKind.TAGGED_VLAN, intf(10), vlan(200), vlan(200)),
            LogicalEdge(EdgeKind.TAGGED_VLAN, intf(10), vlan(300), vlan(300)),
        ]

    def test_dangling_vlan_skipped(self, builder):
        """VLAN нет в снапшоте — ребра нет."""
        builder.device(1)
        builder.interface(10, device=1, tagged_vlans=[{"id": 404}])

        assert build_edges(builder.build()) == []


@pytest.mark.unit
class TestBridgeEdges:
    """Тесты bridge."""

    def test_bridge_star(self, builder):
        """Члены bridge соединены с bridge-интерфейсом, а не между собой."""
        builder.device(1)
        builder.interface(5, device=1, name="br0", type="bridge")
        builder.interface(10, device=1, bridge={"id": 5})
        builder.interface(11, device=1, bridge={"id": 5})
        edges = build_edges(builder.build(), EdgeKind.BRIDGE)

        assert edges == [
            LogicalEdge(EdgeKind.BRIDGE, intf(10), intf(5), intf(5)),
            LogicalEdge(EdgeKind.BRIDGE, intf(11), intf(5), intf(5)),
        ]


@pytest.mark.unit
class TestL2VPNEdges:
    """Тесты L2VPN."""

    def test_pairwise_terminations(self, builder):
        """Три терминации — три ребра, origin = L2VPN."""
        builder.device(1)
        builder.interface(10, device=1)
        builder.interface(11, device=1)
        builder.vlan(100, 10)
        builder.l2vpn(7, terminations=[(IF, 10), (IF, 11), (VLAN, 100)])
        edges = build_edges(builder.build(), EdgeKind.L2VPN)

        origin = Ref(EntityKind.L2VPN, 7)
        assert edges == [
            LogicalEdge(EdgeKind.L2VPN, intf(10), intf(11), origin),
            LogicalEdge(EdgeKind.L2VPN, intf(10), vlan(100), origin),
            LogicalEdge(EdgeKind.L2VPN, intf(11), vlan(100), origin),
        ]

    def test_single_termination_no_edges(self, builder):
        builder.device(1)
        builder.interface(10, device=1)
        builder.l2vpn(7, terminations=[(IF, 10)])

        assert build_edges(builder.build(), EdgeKind.L2VPN) == []


@pytest.mark.unit
class TestWirelessEdges:
    """Тесты WLAN."""

    def test_wlan_vlan_and_radio(self, builder):
        """WLAN ↔ VLAN и WLAN ↔ радиоинтерфейс."""
        builder.device(1)
        builder.vlan(100, 10)
        builder.wlan(3, "corp", vlan=100)
        builder.interface(10, device=1, type="ieee802.11ax", wireless_lans=[{"id": 3}])
        edges = build_edges(builder.build(), EdgeKind.WIRELESS)

        wlan = Ref(EntityKind.WIRELESS_LAN, 3)
        assert edges == [
            LogicalEdge(EdgeKind.WIRELESS, wlan, vlan(100), wlan),
            LogicalEdge(EdgeKind.WIRELESS, wlan, intf(10), wlan),
        ]


@pytest.fixture
def wlan_group_snapshot(builder):
    """
    Группа WLAN 4: контроллер dev1, точки доступа dev2 и dev5, VLAN управления 200.

    WLAN 3 (VLAN 100) в группе 4. L2VPN 7: eth30 на dev3 и VLAN 100.
    Primary IPv4 есть у dev1, dev2, dev3; у dev5 нет.
    """
    builder.ip(501, "10.0.0.1/24")
    builder.ip(502, "10.0.0.2/24")
    builder.ip(503, "10.0.0.3/24")
    builder.device(1, "ctrl", primary_ip4={"id": 501})
    builder.device(2, "ap1", primary_ip4={"id": 502}, custom_fields={"wlan_group": 4})
    builder.device(3, "leaf", primary_ip4={"id": 503})
    builder.device(5, "ap2", custom_fields={"wlan_group": {"id": 4}})
    builder.interface(30, device=3)
    builder.vlan(100, 10)
    builder.vlan(200, 99)
    builder.add("wireless_lan_groups", {
        "id": 4,
        "name": "office",
        "slug": "office",
        "custom_fields": {"controller": 1, "mgmt_vlan": 200},
    })
    builder.wlan(3, "corp", vlan=100, group={"id": 4})
    builder.l2vpn(7, terminations=[(IF, 30), (VLAN, 100)])
    return builder.build()


def device(id):
    return Ref(EntityKind.DEVICE, id)


@pytest.mark.unit
class TestWlanGroups:
    """Тесты групп WLAN: контроллер, точки доступа, VLAN управления, VTEP."""

    def test_group_member_edges(self, wlan_group_snapshot):
        """WLAN ↔ контроллер и точки доступа; участники ↔ VLAN управления."""
        edges = build_edges(wlan_group_snapshot, EdgeKind.WIRELESS)

        wlan = Ref(EntityKind.WIRELESS_LAN, 3)
        group = Ref(EntityKind.WIRELESS_LAN_GROUP, 4)
        assert edges == [
            LogicalEdge(EdgeKind.WIRELESS, wlan, vlan(100), wlan),
            LogicalEdge(EdgeKind.WIRELESS, wlan, device(1), group),
            LogicalEdge(EdgeKind.WIRELESS, wlan, device(2), group),
            LogicalEdge(EdgeKind.WIRELESS, wlan, device(5), group),
            LogicalEdge(EdgeKind.WIRELESS, device(1), vlan(200), group),
            LogicalEdge(EdgeKind.WIRELESS, device(2), vlan(200), group),
            LogicalEdge(EdgeKind.WIRELESS, device(5), vlan(200), group),
        ]

    def test_vteps(self, wlan_group_snapshot):
        """VTEP: устройство терминации и участники группы WLAN через VLAN 100."""
        overlay = LogicalOverlayBuilder(EntityNormalizer().normalize(wlan_group_snapshot))

        assert overlay.vteps() == {7: ("10.0.0.1", "10.0.0.2", "10.0.0.3")}

    def test_vteps_without_wlan(self, builder):
        """VLAN-терминация без WLAN не добавляет VTEP; IPv6 не учитывается."""
        builder.ip(501, "2001:db8::1/64")
        builder.device(1, primary_ip4={"id": 501})
        builder.interface(10, device=1)
        builder.vlan(100, 10)
        builder.l2vpn(7, terminations=[(IF, 10), (VLAN, 100)])
        overlay = LogicalOverlayBuilder(EntityNormalizer().normalize(builder.build()))

        assert overlay.vteps() == {7: ()}

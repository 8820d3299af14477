"""
Pytest configuration и общие fixtures для тестов.

Предоставляет:
- builder: SnapshotBuilder для сборки снапшотов в REST-формате NetBox
- passthrough_snapshot: сценарий A.eth0 — кабель — панель — кабель — C.eth1
- trunk_snapshot: две цепочки через общий мультиплексированный trunk
- fan_out_snapshot: интерфейс на rear port с двумя подключёнными front ports
- mock_netbox_client: Mock NetBox клиента для SnapshotFetcher
"""

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from netbox_topology.core.snapshot import Snapshot

IF = "dcim.interface"
FP = "dcim.frontport"
RP = "dcim.rearport"


def _nested(value: Optional[int]) -> Optional[Dict[str, Any]]:
    return {"id": value} if value is not None else None


class SnapshotBuilder:
    """
    Сборка сырых записей NetBox для тестов.

    Пример:
        b = SnapshotBuilder()
        b.device(1, "sw1")
        b.interface(10, device=1, name="eth0")
        snapshot = b.build()
    """

    def __init__(self):
        self.batches: Dict[str, List[Dict[str, Any]]] = {}

    def add(self, record_type: str, record: Dict[str, Any]) -> Dict[str, Any]:
        self.batches.setdefault(record_type, []).append(record)
        return record

    def tenant(self, id: int, name: str = "", **extra) -> Dict[str, Any]:
        return self.add("tenants", {"id": id, "name": name or f"tenant-{id}", **extra})

    def site(self, id: int, tenant: Optional[int] = None) -> Dict[str, Any]:
        return self.add("sites", {"id": id, "name": f"site-{id}", "tenant": _nested(tenant)})

    def location(self, id: int, tenant: Optional[int] = None) -> Dict[str, Any]:
        return self.add("locations", {"id": id, "name": f"loc-{id}", "tenant": _nested(tenant)})

    def device(
        self,
        id: int,
        name: str = "",
        tenant: Optional[int] = None,
        location: Optional[int] = None,
        site: Optional[int] = None,
        **extra,
    ) -> Dict[str, Any]:
        return self.add("devices", {
            "id": id,
            "name": name or f"dev-{id}",
            "tenant": _nested(tenant),
            "location": _nested(location),
            "site": _nested(site),
            **extra,
        })

    def interface(self, id: int, device: int, name: str = "", **extra) -> Dict[str, Any]:
        return self.add("interfaces", {
            "id": id,
            "name": name or f"eth{id}",
            "device": {"id": device},
            **extra,
        })

    def front_port(self, id: int, device: int, rear_port: Optional[int], position: int = 1) -> Dict[str, Any]:
        return self.add("front_ports", {
            "id": id,
            "name": f"fp{id}",
            "device": {"id": device},
            "rear_port": _nested(rear_port),
            "rear_port_position": position,
        })

    def rear_port(self, id: int, device: int, positions: int = 1) -> Dict[str, Any]:
        return self.add("rear_ports", {
            "id": id,
            "name": f"rp{id}",
            "device": {"id": device},
            "positions": positions,
        })

    def cable(self, id: int, a: Tuple[str, int], b: Tuple[str, int]) -> Dict[str, Any]:
        return self.add("cables", {
            "id": id,
            "a_terminations": [{"object_type": a[0], "object_id": a[1]}],
            "b_terminations": [{"object_type": b[0], "object_id": b[1]}],
        })

    def vlan(self, id: int, vid: int, tenant: Optional[int] = None) -> Dict[str, Any]:
        return self.add("vlans", {"id": id, "vid": vid, "name": f"VLAN{vid}", "tenant": _nested(tenant)})

    def l2vpn(self, id: int, terminations: List[Tuple[str, int]] = (), **extra) -> Dict[str, Any]:
        return self.add("l2vpns", {
            "id": id,
            "name": f"l2vpn-{id}",
            "type": "vxlan",
            "terminations": [
                {"assigned_object_type": t, "assigned_object_id": i} for t, i in terminations
            ],
            **extra,
        })

    def wlan(self, id: int, ssid: str, vlan: Optional[int] = None, **extra) -> Dict[str, Any]:
        return self.add("wireless_lans", {"id": id, "ssid": ssid, "vlan": _nested(vlan), **extra})

    def ip(self, id: int, address: str, interface: Optional[int] = None) -> Dict[str, Any]:
        record = {"id": id, "address": address}
        if interface is not None:
            record.update({"assigned_object_type": IF, "assigned_object_id": interface})
        return self.add("ip_addresses", record)

    def build(self) -> Snapshot:
        return Snapshot(self.batches, source="test")


@pytest.fixture
def builder() -> SnapshotBuilder:
    """Пустой SnapshotBuilder."""
    return SnapshotBuilder()


@pytest.fixture
def passthrough_snapshot() -> Snapshot:
    """
    A.eth0 — Cable1 — P1 (front); P1 → R1; Cable2 R1 — C.eth1.

    Устройства: A(1), панель(2), C(3).
    Интерфейсы: A.eth0 = 10, C.eth1 = 30. Front port 20, rear port 21.
    """
    b = SnapshotBuilder()
    b.device(1, "A")
    b.device(2, "panel")
    b.device(3, "C")
    b.interface(10, device=1, name="eth0")
    b.interface(30, device=3, name="eth1")
    b.rear_port(21, device=2)
    b.front_port(20, device=2, rear_port=21)
    b.cable(1, (IF, 10), (FP, 20))
    b.cable(2, (RP, 21), (IF, 30))
    return b.build()


@pytest.fixture
def trunk_snapshot() -> Snapshot:
    """
    Мультиплексированный trunk R21 — C3 — R31 (по две позиции).

    a1(10) — C1 — F20 (поз. 1) ┐                ┌ F32 (поз. 1) — C4 — b1(40)
                               R21 — C3 — R31 ┤
    a2(11) — C2 — F22 (поз. 2) ┘                └ F33 (поз. 2) — C5 — b2(41)
    """
    b = SnapshotBuilder()
    b.device(1)
    b.device(2)
    b.device(3)
    b.interface(10, device=1)
    b.interface(11, device=1)
    b.interface(40, device=3)
    b.interface(41, device=3)
    b.rear_port(21, device=2, positions=2)
    b.front_port(20, device=2, rear_port=21, position=1)
    b.front_port(22, device=2, rear_port=21, position=2)
    b.rear_port(31, device=2, positions=2)
    b.front_port(32, device=2, rear_port=31, position=1)
    b.front_port(33, device=2, rear_port=31, position=2)
    b.cable(1, (IF, 10), (FP, 20))
    b.cable(2, (IF, 11), (FP, 22))
    b.cable(3, (RP, 21), (RP, 31))
    b.cable(4, (FP, 32), (IF, 40))
    b.cable(5, (FP, 33), (IF, 41))
    return b.build()


@pytest.fixture
def fan_out_snapshot() -> Snapshot:
    """
    eth0(10) — C1 — R21, а R21 разветвляется на F22 и F23 (по позиции).

    F22 — C2 — eth32, F23 — C3 — eth33. Интерфейс на rear port не
    выбирает позицию, поэтому все три кабеля неоднозначны.
    """
    b = SnapshotBuilder()
    b.device(1, "A")
    b.device(2, "panel")
    b.interface(10, device=1, name="eth0")
    b.interface(32, device=1)
    b.interface(33, device=1)
    b.rear_port(21, device=2, positions=2)
    b.front_port(22, device=2, rear_port=21, position=1)
    b.front_port(23, device=2, rear_port=21, position=2)
    b.cable(1, (IF, 10), (RP, 21))
    b.cable(2, (FP, 22), (IF, 32))
    b.cable(3, (FP, 23), (IF, 33))
    return b.build()


@pytest.fixture
def mock_netbox_client():
    """
    Mock NetBoxClient: все get_* возвращают пустые списки.

    Returns:
        MagicMock: Клиент с url и методами выгрузки
    """
    from netbox_topology.netbox import FETCH_METHODS

    client = MagicMock()
    client.url = "https://netbox.test/"
    for method in FETCH_METHODS.values():
        getattr(client, method).return_value = []
    return client

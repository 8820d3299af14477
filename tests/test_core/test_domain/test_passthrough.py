"""
Tests for PassThroughResolver.

Проверяет:
- Кабель интерфейс—интерфейс (без панелей)
- Одну и несколько патч-панелей подряд
- Причины неудачи: cycle, dangling, ambiguous, missing
- Выбор front port по позиции и по наличию кабеля
"""

import pytest

from netbox_topology.core.constants import EntityKind, UnresolvedReason
from netbox_topology.core.domain.normalizer import EntityNormalizer
from netbox_topology.core.domain.passthrough import PassThroughResolver
from netbox_topology.core.exceptions import ResolutionError

IF = "dcim.interface"
FP = "dcim.frontport"
RP = "dcim.rearport"


def resolver_for(snapshot):
    return PassThroughResolver(EntityNormalizer().normalize(snapshot))


@pytest.fixture
def panel(builder):
    """Устройство A(1) с eth0 = 10 и панель(2)."""
    builder.device(1, "A")
    builder.device(2, "panel")
    builder.interface(10, device=1, name="eth0")
    return builder


@pytest.mark.unit
class TestResolvedChains:
    """Тесты разрешённых цепочек."""

    def test_direct_cable(self, panel):
        """Кабель интерфейс—интерфейс: конец достигнут одним cable hop."""
        panel.interface(11, device=2)
        panel.cable(1, (IF, 10), (IF, 11))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.resolved
        assert chain.endpoint == 11
        assert chain.cable_ids == (1,)

    def test_single_panel(self, passthrough_snapshot):
        """A.eth0 — P1 — C.eth1 в обе стороны."""
        resolver = resolver_for(passthrough_snapshot)

        forward = resolver.resolve(1, "B")
        assert forward.endpoint == 30
        assert forward.cable_ids == (1, 2)
        assert [ref.kind for ref in forward.hops] == [
            EntityKind.FRONT_PORT, EntityKind.REAR_PORT, EntityKind.INTERFACE,
        ]

        backward = resolver.resolve(2, "A")
        assert backward.endpoint == 10
        assert backward.cable_ids == (2, 1)

    def test_three_panels(self, panel):
        """
        eth0 — C1 — F20→R21 — C2 — R31→F30 — C3 — F40→R41 — C4 — eth50.
        """
        panel.interface(50, device=1, name="eth1")
        panel.rear_port(21, device=2)
        panel.front_port(20, device=2, rear_port=21)
        panel.rear_port(31, device=2)
        panel.front_port(30, device=2, rear_port=31)
        panel.rear_port(41, device=2)
        panel.front_port(40, device=2, rear_port=41)
        panel.cable(1, (IF, 10), (FP, 20))
        panel.cable(2, (RP, 21), (RP, 31))
        panel.cable(3, (FP, 30), (FP, 40))
        panel.cable(4, (RP, 41), (IF, 50))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.endpoint == 50
        assert chain.cable_ids == (1, 2, 3, 4)

    def test_live_front_selected(self, panel):
        """Rear port без позиции: из двух front ports выбирается подключённый."""
        panel.interface(32, device=1)
        panel.rear_port(21, device=2, positions=2)
        panel.front_port(22, device=2, rear_port=21, position=1)
        panel.front_port(23, device=2, rear_port=21, position=2)
        panel.cable(1, (IF, 10), (RP, 21))
        panel.cable(2, (FP, 23), (IF, 32))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.endpoint == 32
        assert chain.cable_ids == (1, 2)


@pytest.mark.unit
class TestUnresolvedChains:
    """Тесты причин неудачи."""

    def test_cycle(self, panel):
        """
        eth0 — C1 — F20 (поз. 1) → R21; R21 — C2 — F22 (поз. 2) → R21.

        Повторный заход в R21 — cycle.
        """
        panel.rear_port(21, device=2, positions=2)
        panel.front_port(20, device=2, rear_port=21, position=1)
        panel.front_port(22, device=2, rear_port=21, position=2)
        panel.cable(1, (IF, 10), (FP, 20))
        panel.cable(2, (RP, 21), (FP, 22))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert not chain.resolved
        assert chain.reason == UnresolvedReason.CYCLE
        assert chain.cable_ids == (1, 2)

    def test_dangling_rear_port(self, panel):
        """Rear port без кабеля после pairing hop."""
        panel.rear_port(21, device=2)
        panel.front_port(20, device=2, rear_port=21)
        panel.cable(1, (IF, 10), (FP, 20))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.reason == UnresolvedReason.DANGLING
        assert chain.cable_ids == (1,)

    def test_dangling_front_without_rear(self, panel):
        """Front port без rear port."""
        panel.front_port(20, device=2, rear_port=None)
        panel.cable(1, (IF, 10), (FP, 20))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.reason == UnresolvedReason.DANGLING

    def test_ambiguous_fan_out(self, panel):
        """Rear port без позиции и два подключённых front ports."""
        panel.interface(32, device=1)
        panel.interface(33, device=1)
        panel.rear_port(21, device=2, positions=2)
        panel.front_port(22, device=2, rear_port=21, position=1)
        panel.front_port(23, device=2, rear_port=21, position=2)
        panel.cable(1, (IF, 10), (RP, 21))
        panel.cable(2, (FP, 22), (IF, 32))
        panel.cable(3, (FP, 23), (IF, 33))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.reason == UnresolvedReason.AMBIGUOUS
        assert "front-port:22" in chain.detail
        assert "front-port:23" in chain.detail

    def test_ambiguous_from_front_side(self, fan_out_snapshot):
        """
        С front port позиция известна, но интерфейс на rear port её не выбирает.

        Проход F22 → R21 → eth0 неоднозначен так же, как eth0 → R21.
        """
        chain = resolver_for(fan_out_snapshot).resolve(2, "A")

        assert chain.reason == UnresolvedReason.AMBIGUOUS
        assert chain.cable_ids == (2, 1)
        assert "interface:10" in chain.detail

    def test_missing_endpoint(self, panel):
        """Терминация на интерфейс, которого нет в снапшоте."""
        panel.cable(1, (IF, 10), (IF, 99))
        chain = resolver_for(panel.build()).resolve(1, "B")

        assert chain.reason == UnresolvedReason.MISSING
        assert chain.endpoint is None


@pytest.mark.unit
class TestResolverErrors:
    """Тесты ошибок вызова."""

    def test_unknown_cable(self, passthrough_snapshot):
        with pytest.raises(ResolutionError):
            resolver_for(passthrough_snapshot).resolve(404, "A")

    def test_unknown_side(self, passthrough_snapshot):
        with pytest.raises(ResolutionError) as exc_info:
            resolver_for(passthrough_snapshot).resolve(1, "C")
        assert exc_info.value.details["side"] == "C"

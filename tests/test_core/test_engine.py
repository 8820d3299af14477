"""
Tests for TopologyEngine.

Проверяет:
- Полный запуск на сценарии с панелью
- Детерминизм: одинаковый результат при повторе и при перестановке записей,
  в том числе для trunk и разветвления rear port
- Совпадение параллельного и последовательного режимов
- Тенант по умолчанию
- Аномалии и неразрешённые кабели в результате
"""

import json
import random

import pytest

from netbox_topology.core.engine import TopologyEngine
from netbox_topology.core.snapshot import Snapshot

IF = "dcim.interface"


def as_json(result):
    return json.dumps(result.to_dict(), sort_keys=True, default=str)


@pytest.mark.unit
class TestTopologyEngine:
    """Тесты оркестратора."""

    def test_run(self, passthrough_snapshot):
        result = TopologyEngine().run(passthrough_snapshot)

        assert result.graph.stats()["edges"] == {"physical": 1}
        assert result.unresolved == []
        assert result.diagnostics == []
        assert result.operation.status == "success"

    def test_deterministic(self, passthrough_snapshot):
        engine = TopologyEngine()
        assert as_json(engine.run(passthrough_snapshot)) == as_json(engine.run(passthrough_snapshot))

    def test_record_order_does_not_matter(self, passthrough_snapshot):
        reversed_snapshot = Snapshot({
            key: list(reversed(records))
            for key, records in passthrough_snapshot.to_dict().items()
        })
        engine = TopologyEngine()
        assert as_json(engine.run(reversed_snapshot)) == as_json(engine.run(passthrough_snapshot))

    def test_parallel_matches_sequential(self, passthrough_snapshot):
        parallel = TopologyEngine(parallel=True).run(passthrough_snapshot)
        sequential = TopologyEngine(parallel=False).run(passthrough_snapshot)
        assert as_json(parallel) == as_json(sequential)

    def test_default_tenant(self, passthrough_snapshot):
        result = TopologyEngine(default_tenant=9).run(passthrough_snapshot)

        assert result.device_tenants == {1: 9, 2: 9, 3: 9}
        assert result.graph.get_node("interface:10").tenant == 9

    def test_anomalies_reported(self, builder):
        """Битые записи и кабели не прерывают запуск."""
        builder.device(1)
        builder.interface(10, device=1)
        builder.add("devices", {"name": "no-id"})
        builder.cable(1, (IF, 10), (IF, 99))
        result = TopologyEngine().run(builder.build())

        summary = result.summary()
        assert summary["unresolved"] == {"missing": 1}
        assert summary["diagnostics"] == {"error": 1, "warning": 1}
        assert result.to_dict()["unresolved"][0]["cable_ids"] == [1]

    def test_empty_snapshot(self):
        result = TopologyEngine().run(Snapshot())

        assert len(result.graph) == 0
        assert result.summary()["tenants"] == 0


def permuted(snapshot, seed):
    """Снапшот с перемешанными записями и пакетами."""
    rng = random.Random(seed)
    batches = []
    for key, records in snapshot.to_dict().items():
        records = list(records)
        rng.shuffle(records)
        batches.append((key, records))
    rng.shuffle(batches)
    return Snapshot(dict(batches))


@pytest.mark.unit
@pytest.mark.parametrize("fixture", ["trunk_snapshot", "fan_out_snapshot"])
class TestDeterminismOnSharedPorts:
    """Порядок записей не влияет на trunk, покрытие кабелей и выбор front port."""

    def test_repeat_run(self, request, fixture):
        snapshot = request.getfixturevalue(fixture)
        engine = TopologyEngine()
        assert as_json(engine.run(snapshot)) == as_json(engine.run(snapshot))

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_record_order(self, request, fixture, seed):
        snapshot = request.getfixturevalue(fixture)
        engine = TopologyEngine(parallel=False)
        assert as_json(engine.run(permuted(snapshot, seed))) == as_json(engine.run(snapshot))

    def test_expected_outcome(self, request, fixture):
        result = TopologyEngine().run(request.getfixturevalue(fixture))

        if fixture == "trunk_snapshot":
            assert result.graph.stats()["edges"] == {"physical": 2}
            assert result.unresolved == []
        else:
            assert result.graph.stats()["edges"] == {}
            assert result.summary()["unresolved"] == {"ambiguous": 3}

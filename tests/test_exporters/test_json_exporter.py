"""
Tests for JSONExporter.

Проверяет структуру документа, метаданные и фильтры по виду и тенанту.
"""

import json

import pytest

from netbox_topology.core.constants import EdgeKind
from netbox_topology.core.engine import TopologyEngine
from netbox_topology.exporters import JSONExporter, get_exporter

IF = "dcim.interface"
FP = "dcim.frontport"
RP = "dcim.rearport"


@pytest.fixture
def result(builder):
    """A(tenant 1).eth0 — панель — C(tenant 2).eth1, плюс VLAN тенанта 1 и висящий кабель."""
    builder.tenant(1)
    builder.tenant(2)
    builder.device(1, "A", tenant=1)
    builder.device(2, "panel")
    builder.device(3, "C", tenant=2)
    builder.vlan(100, 100, tenant=1)
    builder.interface(10, device=1, name="eth0", tagged_vlans=[{"id": 100}])
    builder.interface(11, device=1, name="eth9")
    builder.interface(30, device=3, name="eth1")
    builder.rear_port(21, device=2)
    builder.front_port(20, device=2, rear_port=21)
    builder.cable(1, (IF, 10), (FP, 20))
    builder.cable(2, (RP, 21), (IF, 30))
    builder.cable(3, (IF, 11), (IF, 99))
    return TopologyEngine().run(builder.build())


def load(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


@pytest.mark.unit
class TestJSONExporter:
    """Тесты JSON экспорта."""

    def test_export_document(self, tmp_path, result):
        path = JSONExporter(output_folder=str(tmp_path)).export(result, "topology")

        assert path == tmp_path / "topology.json"
        data = load(path)
        assert set(data) == {"metadata", "nodes", "edges", "anomalies", "unresolved"}
        assert data["metadata"]["summary"]["edges"] == {"physical": 1, "tagged-vlan": 1}
        assert data["unresolved"][0]["reason"] == "missing"
        assert data["anomalies"][0]["code"] == "dangling-reference"

    def test_without_metadata(self, tmp_path, result):
        exporter = JSONExporter(output_folder=str(tmp_path), include_metadata=False)
        data = load(exporter.export(result, "plain.json"))

        assert "metadata" not in data
        assert len(data["nodes"]) == len(result.graph)

    def test_filter_by_kind(self, tmp_path, result):
        exporter = JSONExporter(output_folder=str(tmp_path))
        data = load(exporter.export(result, "vlan", kind=EdgeKind.TAGGED_VLAN))

        assert [e["kind"] for e in data["edges"]] == ["tagged-vlan"]
        assert data["metadata"]["filters"] == {"kind": "tagged-vlan", "tenant": None}

    def test_filter_by_tenant_keeps_foreign_endpoints(self, tmp_path, result):
        """Рёбра тенанта 2 и их концы, даже если конец принадлежит тенанту 1."""
        exporter = JSONExporter(output_folder=str(tmp_path))
        data = load(exporter.export(result, "tenant2", tenant=2))

        node_ids = {n["id"] for n in data["nodes"]}
        assert node_ids == {"device:3", "interface:30", "interface:10"}
        assert [e["kind"] for e in data["edges"]] == ["physical"]

    def test_generated_filename(self, tmp_path, result):
        path = JSONExporter(output_folder=str(tmp_path / "new")).export(result)

        assert path.parent == tmp_path / "new"
        assert path.name.startswith("topology_")
        assert path.suffix == ".json"

    def test_write_error_returns_none(self, tmp_path, result, monkeypatch):
        exporter = JSONExporter(output_folder=str(tmp_path))

        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("netbox_topology.exporters.json_exporter.open", fail, raising=False)
        assert exporter.export(result, "topology") is None


@pytest.mark.unit
class TestGetExporter:
    """Тесты фабрики экспортеров."""

    def test_known_formats(self, tmp_path):
        assert isinstance(get_exporter("json", output_folder=str(tmp_path)), JSONExporter)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="xlsx"):
            get_exporter("xlsx")

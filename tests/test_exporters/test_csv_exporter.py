"""
Tests for CSVExporter.

Проверяет колонки, подписи концов и разделители.
"""

import csv

import pytest

from netbox_topology.core.engine import TopologyEngine
from netbox_topology.exporters import CSVExporter
from netbox_topology.exporters.csv_exporter import COLUMNS


@pytest.fixture
def result(passthrough_snapshot):
    return TopologyEngine().run(passthrough_snapshot)


def read_rows(path, delimiter=","):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f, delimiter=delimiter))


@pytest.mark.unit
class TestCSVExporter:
    """Тесты CSV экспорта."""

    def test_export_edges(self, tmp_path, result):
        path = CSVExporter(output_folder=str(tmp_path)).export(result, "links")

        assert path.suffix == ".csv"
        rows = read_rows(path)
        assert len(rows) == 1
        row = rows[0]
        assert list(row) == COLUMNS
        assert row["kind"] == "physical"
        assert row["a"] == "interface:10"
        assert row["a_label"] == "A:eth0"
        assert row["b_label"] == "C:eth1"
        assert row["sources"] == "cable:1 cable:2"
        assert row["tenants"] == ""

    @pytest.mark.parametrize("name, char", [("semicolon", ";"), ("tab", "\t"), ("|", "|")])
    def test_delimiter(self, tmp_path, result, name, char):
        exporter = CSVExporter(output_folder=str(tmp_path), delimiter=name)
        path = exporter.export(result, "links")

        assert exporter.delimiter == char
        assert read_rows(path, delimiter=char)[0]["kind"] == "physical"

    def test_empty_filter(self, tmp_path, result):
        path = CSVExporter(output_folder=str(tmp_path)).export(result, "none", tenant=42)

        assert read_rows(path) == []

"""
Tests for CLI.

Проверяет:
- Парсер аргументов (команды, фильтры, значения по умолчанию)
- resolve из файла снапшота в JSON/CSV
- report и код выхода в --strict
- Ошибки конфигурации и источника снапшота
"""

import logging

import pytest

from netbox_topology.cli import main, setup_parser, utils
from netbox_topology.cli.utils import create_client, parse_kind
from netbox_topology.config import load_config
from netbox_topology.core.constants import EdgeKind
from netbox_topology.core.exceptions import ConfigError, NetBoxConnectionError, SnapshotError
from netbox_topology.core.snapshot import Snapshot

IF = "dcim.interface"


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """cwd во временной папке, без config.yaml и переменных NetBox; handlers root восстанавливаются."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NETBOX_URL", raising=False)
    monkeypatch.delenv("NETBOX_TOKEN", raising=False)
    monkeypatch.setattr("netbox_topology.config.SEARCH_PATHS", ["config.yaml"])

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


@pytest.fixture
def snapshot_file(tmp_path, passthrough_snapshot):
    return str(passthrough_snapshot.to_file(tmp_path / "snapshot.json"))


@pytest.fixture
def broken_snapshot_file(tmp_path, builder):
    """Снапшот с висящим кабелем."""
    builder.device(1)
    builder.interface(10, device=1)
    builder.cable(1, (IF, 10), (IF, 99))
    return str(builder.build().to_file(tmp_path / "broken.json"))


@pytest.mark.unit
class TestParser:
    """Тесты парсера."""

    def test_resolve_arguments(self):
        args = setup_parser().parse_args([
            "-o", "out", "resolve", "--snapshot", "s.json",
            "-f", "csv", "--tenant", "5", "--kind", "physical",
        ])

        assert args.command == "resolve"
        assert args.output == "out"
        assert args.format == "csv"
        assert args.tenant == 5
        assert args.kind == "physical"

    def test_defaults(self):
        args = setup_parser().parse_args(["report"])

        assert args.snapshot is None
        assert args.details is False
        assert args.strict is False

    def test_unknown_kind_rejected(self):
        with pytest.raises(SystemExit):
            setup_parser().parse_args(["resolve", "--kind", "wormhole"])

    def test_parse_kind(self):
        assert parse_kind("tagged-vlan") == EdgeKind.TAGGED_VLAN
        assert parse_kind(None) is None


@pytest.mark.unit
class TestResolveCommand:
    """Тесты команды resolve."""

    def test_resolve_json(self, tmp_path, snapshot_file, capsys):
        code = main(["-o", str(tmp_path / "out"), "resolve", "--snapshot", snapshot_file])

        assert code == 0
        files = list((tmp_path / "out").glob("run_*/topology.json"))
        assert len(files) == 1
        assert "рёбер: 1" in capsys.readouterr().out

    def test_resolve_csv_with_filters(self, tmp_path, snapshot_file):
        code = main([
            "-o", str(tmp_path / "out"), "resolve", "--snapshot", snapshot_file,
            "--format", "csv", "--kind", "physical", "--filename", "links",
        ])

        assert code == 0
        files = list((tmp_path / "out").glob("run_*/links.csv"))
        assert len(files) == 1
        assert "cable:1 cable:2" in files[0].read_text(encoding="utf-8")

    def test_missing_snapshot_file(self, tmp_path):
        code = main(["-o", str(tmp_path), "resolve", "--snapshot", str(tmp_path / "absent.json")])
        assert code == 1

    def test_netbox_not_configured(self, tmp_path):
        """Без --snapshot и без токена — ошибка конфигурации NetBox."""
        code = main(["-o", str(tmp_path), "resolve"])
        assert code == 1


@pytest.mark.unit
class TestReportCommand:
    """Тесты команды report."""

    def test_report_clean(self, tmp_path, snapshot_file, capsys):
        code = main(["-o", str(tmp_path), "report", "--snapshot", snapshot_file, "--strict"])

        assert code == 0
        assert "нет" in capsys.readouterr().out

    def test_report_details(self, tmp_path, broken_snapshot_file, capsys):
        code = main(["-o", str(tmp_path), "report", "--snapshot", broken_snapshot_file, "--details"])

        out = capsys.readouterr().out
        assert code == 0
        assert "missing: 1" in out
        assert "кабели 1 [B]" in out

    def test_report_strict_exit_code(self, tmp_path, broken_snapshot_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["-o", str(tmp_path), "report", "--snapshot", broken_snapshot_file, "--strict"])
        assert exc_info.value.code == 1


@pytest.mark.unit
class TestMain:
    """Тесты точки входа."""

    def test_no_command(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("fetch:\n  max_workers: 0\n", encoding="utf-8")

        assert main(["-c", str(path), "report"]) == 2

    def test_create_client_without_token(self):
        config = load_config()

        with pytest.raises(ConfigError):
            create_client(config)


@pytest.mark.unit
class TestFetchSnapshot:
    """Тесты выгрузки с повтором."""

    @pytest.fixture
    def config(self, monkeypatch):
        monkeypatch.setenv("NETBOX_TOKEN", "token")
        return load_config()

    def test_retry_on_connection_error(self, config, monkeypatch):
        calls = []

        def fetch(self, record_types=None):
            calls.append(1)
            if len(calls) == 1:
                try:
                    raise NetBoxConnectionError("refused")
                except NetBoxConnectionError as e:
                    raise SnapshotError("fetch failed", record_type="devices") from e
            return Snapshot(source="retry")

        monkeypatch.setattr(utils.SnapshotFetcher, "fetch", fetch)
        monkeypatch.setattr(utils, "NetBoxClient", lambda **kwargs: object())

        assert utils.fetch_snapshot(config).source == "retry"
        assert len(calls) == 2

    def test_api_error_not_retried(self, config, monkeypatch):
        calls = []

        def fetch(self, record_types=None):
            calls.append(1)
            raise SnapshotError("forbidden", record_type="devices")

        monkeypatch.setattr(utils.SnapshotFetcher, "fetch", fetch)
        monkeypatch.setattr(utils, "NetBoxClient", lambda **kwargs: object())

        with pytest.raises(SnapshotError):
            utils.fetch_snapshot(config)
        assert len(calls) == 1

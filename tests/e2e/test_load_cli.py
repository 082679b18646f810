"""
End-to-end tests for the influx-loader command line

Drives main() with real files and configuration; the store is swapped for
the in-memory FakeStore through the create_store seam.
"""

import pytest

from influx_loader.cli import load_cli


@pytest.fixture
def cli_store(monkeypatch, fake_store):
    """Route every CLI run to the shared fake store"""
    created_with = []

    def _create_store(config):
        created_with.append(config)
        return fake_store

    monkeypatch.setattr(load_cli, "create_store", _create_store)
    fake_store.created_with = created_with
    return fake_store


@pytest.mark.e2e
class TestLoadCli:
    """End-to-end tests for main()"""

    def test_loads_fixture(self, cli_store, test_data_dir):
        exit_code = load_cli.main([
            str(test_data_dir / "cpu.csv"),
            "--tag-columns", "host",
            "--batch-size", "2",
        ])

        assert exit_code == load_cli.EXIT_OK
        assert len(cli_store.points) == 4
        assert [len(b) for b in cli_store.batches] == [2, 2]
        assert all(p.measurement == "data" for p in cli_store.points)
        assert cli_store.closed

    def test_creates_missing_database(self, cli_store, test_data_dir):
        exit_code = load_cli.main([str(test_data_dir / "cpu.csv"), "--database", "fresh", "--tag-columns", "host"])

        assert exit_code == load_cli.EXIT_OK
        assert cli_store.created == ["fresh"]

    def test_disable_auto_create_fails_on_missing_database(self, cli_store, test_data_dir):
        exit_code = load_cli.main([
            str(test_data_dir / "cpu.csv"),
            "--database-name", "fresh",
            "--tag-columns", "host",
            "--disable-auto-create-database",
        ])

        assert exit_code == load_cli.EXIT_FAILURE
        assert cli_store.created == []
        assert cli_store.write_attempts == []
        assert cli_store.closed

    def test_yaml_config_with_cli_override(self, cli_store, test_data_dir):
        exit_code = load_cli.main([
            str(test_data_dir / "cpu.csv"),
            "--config", str(test_data_dir / "loader.yaml"),
            "--measurement", "cpu_override",
        ])

        assert exit_code == load_cli.EXIT_OK
        config = cli_store.created_with[0]
        assert config.database_name == "metrics"
        assert config.batch_size == 2
        assert config.max_write_attempts == 3
        assert config.measurement_name == "cpu_override"
        assert cli_store.created == ["metrics"]
        assert {p.measurement for p in cli_store.points} == {"cpu_override"}

    def test_environment_connection_settings(self, cli_store, test_data_dir, monkeypatch):
        monkeypatch.setenv("INFLUX_DATABASE", "envdb")
        monkeypatch.setenv("INFLUX_TOKEN", "t0k3n")

        exit_code = load_cli.main([str(test_data_dir / "cpu.csv"), "--tag-columns", "host"])

        assert exit_code == load_cli.EXIT_OK
        config = cli_store.created_with[0]
        assert config.database_name == "envdb"
        assert config.auth_token == "t0k3n"

    def test_missing_csv_file(self, cli_store, tmp_path):
        exit_code = load_cli.main([str(tmp_path / "missing.csv")])

        assert exit_code == load_cli.EXIT_FAILURE
        assert cli_store.write_attempts == []

    def test_bad_header(self, cli_store, write_csv):
        path = write_csv("time,host,cpu\n2024-01-01 00:00:00,a,1\n")

        exit_code = load_cli.main([str(path), "--tag-columns", "host"])

        assert exit_code == load_cli.EXIT_FAILURE
        assert cli_store.write_attempts == []

    def test_unmatched_tag_column(self, cli_store, test_data_dir):
        exit_code = load_cli.main([str(test_data_dir / "cpu.csv"), "--tag-columns", "host,region"])
        assert exit_code == load_cli.EXIT_FAILURE

    def test_invalid_option_value(self, cli_store, test_data_dir):
        exit_code = load_cli.main([str(test_data_dir / "cpu.csv"), "--batch-size", "0"])

        assert exit_code == load_cli.EXIT_FAILURE
        assert cli_store.created_with == []

    def test_write_failure_exits_non_zero(self, monkeypatch, store_factory, test_data_dir):
        store = store_factory(fail_writes=-1)
        monkeypatch.setattr(load_cli, "create_store", lambda config: store)

        exit_code = load_cli.main([
            str(test_data_dir / "cpu.csv"),
            "--tag-columns", "host",
            "--max-write-attempts", "1",
        ])

        assert exit_code == load_cli.EXIT_FAILURE
        assert len(store.write_attempts) == 1
        assert store.closed

    def test_unix_timestamps(self, cli_store, write_csv):
        path = write_csv("ts,host,value\n1704067200000000000,a,1\n1704067201000000000,a,2\n")

        exit_code = load_cli.main([
            str(path), "-ts", "ts", "-tf", "unix", "--tag-columns", "host", "--force-float",
        ])

        assert exit_code == load_cli.EXIT_OK
        assert [p.fields["value"].value for p in cli_store.points] == [1.0, 2.0]
        assert all(isinstance(p.fields["value"].value, float) for p in cli_store.points)

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            load_cli.main(["--version"])
        assert exc_info.value.code == 0
        assert "influx-loader" in capsys.readouterr().out

import pytest
from click.testing import CliRunner

import lxcmigrate.cli as cli_module


@pytest.fixture
def captured(monkeypatch):
    captured = {}

    class FakeRunner:
        exit_code = 0

        def __init__(self, **kwargs):
            captured.update(kwargs)

        def run(self):
            captured["ran"] = True
            return FakeRunner.exit_code

    captured["runner_class"] = FakeRunner
    monkeypatch.setattr(cli_module, "MigrationRunner", FakeRunner)
    return captured


@pytest.fixture
def container_list(tmp_path):
    list_file = tmp_path / "containers.txt"
    list_file.write_text("web1\n\nweb2\n", encoding="utf-8")
    return list_file


def test_cli_builds_request_from_files(tmp_path, captured, container_list):
    exclude_file = tmp_path / "excludes.txt"
    exclude_file.write_text("var/log/*\n\ntmp/*\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli_module.main,
        ["backup01", str(container_list), "-f", "--exclude", str(exclude_file)],
    )

    assert result.exit_code == 0, result.output
    request = captured["request"]
    assert request.destination_host == "backup01"
    assert request.container_names == ("web1", "", "web2")
    assert request.force_continue is True
    assert request.exclude_patterns == ("var/log/*", "tmp/*")
    assert request.lxc_root == "/var/lib/lxc"
    assert captured["retry_policy"].max_attempts is None
    assert captured["strict"] is False


def test_cli_help_exits_zero_without_migrating(captured):
    result = CliRunner().invoke(cli_module.main, ["-h"])

    assert result.exit_code == 0
    assert "DESTINATION_HOST" in result.output
    assert "ran" not in captured


def test_cli_requires_positional_arguments(captured):
    result = CliRunner().invoke(cli_module.main, ["backup01"])

    assert result.exit_code != 0
    assert "ran" not in captured


def test_cli_rejects_missing_container_list(tmp_path, captured):
    result = CliRunner().invoke(cli_module.main, ["backup01", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1
    assert "Container list file not found" in result.output
    assert "ran" not in captured


def test_cli_rejects_missing_exclude_file(tmp_path, captured, container_list):
    result = CliRunner().invoke(
        cli_module.main,
        ["backup01", str(container_list), "--exclude", str(tmp_path / "missing.txt")],
    )

    assert result.exit_code == 1
    assert "Exclude file not found" in result.output


def test_cli_uses_config_and_allows_cli_override(tmp_path, captured, container_list):
    config_file = tmp_path / "lxcmigrate.yml"
    config_file.write_text(
        "ssh_user: root\n" "max_attempts: 5\n" "retry_backoff_seconds: 3\n" "strict: true\n",
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        cli_module.main,
        ["backup01", str(container_list), "--config", str(config_file), "--max-attempts", "2"],
    )

    assert result.exit_code == 0, result.output
    assert captured["retry_policy"].max_attempts == 2
    assert captured["retry_policy"].backoff_seconds == 3.0
    assert captured["strict"] is True
    assert captured["capabilities"].remote.target == "root@backup01"


def test_cli_uses_default_config_file_when_present(tmp_path, monkeypatch, captured, container_list):
    (tmp_path / ".lxcmigrate.yml").write_text("lxc_root: /srv/lxc\ndry_run: true\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, ["backup01", str(container_list)])

    assert result.exit_code == 0, result.output
    assert captured["request"].lxc_root == "/srv/lxc"
    assert captured["dry_run"] is True


def test_cli_propagates_runner_exit_code(captured, container_list):
    captured["runner_class"].exit_code = 1

    result = CliRunner().invoke(cli_module.main, ["backup01", str(container_list), "--strict"])

    assert result.exit_code == 1
    assert captured["ran"] is True


def test_cli_reports_bad_config_values_without_traceback(tmp_path, captured, container_list):
    config_file = tmp_path / "lxcmigrate.yml"
    config_file.write_text("ssh_port: abc\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli_module.main,
        ["backup01", str(container_list), "--config", str(config_file)],
    )

    assert result.exit_code == 1
    assert "'ssh_port' must be an integer" in result.output
    assert "ran" not in captured

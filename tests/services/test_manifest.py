import json

from lxcmigrate.models import ContainerJobResult, JobOutcome
from lxcmigrate.services.manifest import ManifestService


class DummyLogger:
    def warning(self, *_args, **_kwargs):
        return None


def test_manifest_service_writes_container_results(tmp_path):
    manifest_file = tmp_path / "lxcmigrate-manifest.json"
    service = ManifestService(str(manifest_file), logger=DummyLogger())

    service.start_run("run-123", {"destination_host": "backup01"})
    service.container_started("web1")
    service.container_finished(ContainerJobResult("web1", JobOutcome.SUCCESS, retries=2))
    service.container_started("db1")
    service.container_finished(
        ContainerJobResult("db1", JobOutcome.PROVISION_FAILED, error="mkdir failed")
    )
    service.finalize("partial", summary={"total": 2, "succeeded": 1, "failed": 1, "retried": 1})

    data = json.loads(manifest_file.read_text(encoding="utf-8"))

    assert data["run_id"] == "run-123"
    assert data["status"] == "partial"
    assert data["metadata"]["destination_host"] == "backup01"
    assert [entry["name"] for entry in data["containers"]] == ["web1", "db1"]
    assert data["containers"][0]["status"] == "success"
    assert data["containers"][0]["retries"] == 2
    assert data["containers"][1]["outcome"] == "provision_failed"
    assert data["containers"][1]["error"] == "mkdir failed"
    assert data["summary"]["failed"] == 1


def test_manifest_service_without_file_writes_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    service = ManifestService(None, logger=DummyLogger())

    service.start_run("run-123", {})
    service.finalize("success")

    assert list(tmp_path.iterdir()) == []

import subprocess

import pytest

from lxcmigrate.errors import ContainerStopError, MigratorError
from lxcmigrate.services.container import ContainerController


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


class FakeCommandRunner:
    def __init__(self, returncode=0, stderr="", error=None):
        self.returncode = returncode
        self.stderr = stderr
        self.error = error
        self.commands = []

    def run(self, cmd, check=True, capture_output=True):
        self.commands.append(cmd)
        if self.error:
            raise self.error
        return subprocess.CompletedProcess(cmd, self.returncode, stdout="", stderr=self.stderr)


def test_stop_runs_lxc_stop():
    runner = FakeCommandRunner()
    controller = ContainerController(runner, DummyLogger(), lxc_root="/var/lib/lxc")

    controller.stop("web1")

    assert runner.commands == [["lxc-stop", "-n", "web1", "-P", "/var/lib/lxc"]]


def test_stop_reports_already_stopped():
    runner = FakeCommandRunner(returncode=2, stderr="web1 is not running\n")
    controller = ContainerController(runner, DummyLogger())

    with pytest.raises(ContainerStopError) as excinfo:
        controller.stop("web1")

    assert excinfo.value.already_stopped is True


def test_stop_reports_other_failures():
    runner = FakeCommandRunner(returncode=1, stderr="Permission denied")
    controller = ContainerController(runner, DummyLogger())

    with pytest.raises(ContainerStopError, match="Permission denied") as excinfo:
        controller.stop("web1")

    assert excinfo.value.already_stopped is False


def test_stop_wraps_missing_tooling():
    runner = FakeCommandRunner(error=MigratorError("Required command not found: lxc-stop."))
    controller = ContainerController(runner, DummyLogger())

    with pytest.raises(ContainerStopError, match="lxc-stop"):
        controller.stop("web1")

"""Local LXC container lifecycle helpers."""

from lxcmigrate.errors import ContainerStopError, MigratorError


class ContainerController:
    """Stops containers on the source host with ``lxc-stop``."""

    NOT_RUNNING_MARKERS = ("not running", "is not running", "already stopped")

    def __init__(self, command_runner, logger, lxc_root=None):
        self.command_runner = command_runner
        self.logger = logger
        self.lxc_root = lxc_root

    def stop_command(self, name: str):
        cmd = ["lxc-stop", "-n", name]
        if self.lxc_root:
            cmd += ["-P", self.lxc_root]
        return cmd

    def stop(self, name: str):
        try:
            result = self.command_runner.run(self.stop_command(name), check=False, capture_output=True)
        except MigratorError as exc:
            raise ContainerStopError(f"Could not stop {name}: {exc}") from exc

        if result.returncode == 0:
            self.logger.debug("Container %s stopped.", name)
            return

        stderr = (result.stderr or "").strip()
        already_stopped = any(marker in stderr.lower() for marker in self.NOT_RUNNING_MARKERS)
        if already_stopped:
            raise ContainerStopError(f"Container {name} is not running.", already_stopped=True)
        raise ContainerStopError(f"lxc-stop failed for {name} ({result.returncode}): {stderr}")

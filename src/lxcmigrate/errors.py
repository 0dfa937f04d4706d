"""Domain errors for lxcmigrate."""


class MigratorError(RuntimeError):
    """Raised when a migration step cannot continue safely."""


class CommandError(MigratorError):
    """Raised when a local command exits with a failure status."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class RemoteCommandError(MigratorError):
    """Raised when a command on the destination host fails."""


class TransferError(MigratorError):
    """Raised when copying or syncing data to the destination fails."""


class SizeProbeError(MigratorError):
    """Raised when a directory size cannot be measured."""


class ContainerStopError(MigratorError):
    """Raised when a container could not be stopped.

    ``already_stopped`` is set when the runtime reported the container was not
    running, which callers may treat as a soft failure.
    """

    def __init__(self, message: str, already_stopped: bool = False):
        super().__init__(message)
        self.already_stopped = already_stopped

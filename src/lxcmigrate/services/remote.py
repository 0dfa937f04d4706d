"""Remote command execution on the destination host over SSH."""

import shlex
from typing import List, Optional

from lxcmigrate.constants import DEFAULT_SSH_PORT
from lxcmigrate.errors import CommandError, RemoteCommandError


class RemoteExecutor:
    """Runs argv-style commands on one destination host through ``ssh``.

    Every argument is quoted with :func:`shlex.quote` before it reaches the
    remote shell, so container names never get interpreted as shell syntax.
    """

    def __init__(
        self,
        host: str,
        command_runner,
        logger,
        user: Optional[str] = None,
        port: int = DEFAULT_SSH_PORT,
    ):
        self.host = host
        self.command_runner = command_runner
        self.logger = logger
        self.user = user
        self.port = port

    @property
    def target(self) -> str:
        return f"{self.user}@{self.host}" if self.user else self.host

    def ssh_command(self) -> List[str]:
        cmd = ["ssh", "-o", "BatchMode=yes"]
        if self.port != DEFAULT_SSH_PORT:
            cmd += ["-p", str(self.port)]
        return cmd + [self.target]

    def build_command(self, args: List[str]) -> List[str]:
        return self.ssh_command() + [" ".join(shlex.quote(arg) for arg in args)]

    def run(self, args: List[str]) -> str:
        self.logger.debug("Remote on %s: %s", self.target, " ".join(args))
        try:
            result = self.command_runner.run(self.build_command(args), check=True, capture_output=True)
        except CommandError as exc:
            raise RemoteCommandError(f"Remote command failed on {self.target}: {exc}") from exc
        return result.stdout or ""

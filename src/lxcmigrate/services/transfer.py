"""rsync based file and tree transfer to the destination host."""

from typing import Iterable, List, Optional

from lxcmigrate.constants import DEFAULT_SSH_PORT, RSYNC_BASE_ARGS
from lxcmigrate.errors import CommandError, TransferError


class TransferAgent:
    """Copies single files and synchronizes directory trees with ``rsync``."""

    def __init__(
        self,
        command_runner,
        logger,
        user: Optional[str] = None,
        port: int = DEFAULT_SSH_PORT,
    ):
        self.command_runner = command_runner
        self.logger = logger
        self.user = user
        self.port = port

    def _destination(self, remote_host: str, remote_path: str) -> str:
        host = f"{self.user}@{remote_host}" if self.user else remote_host
        return f"{host}:{remote_path}"

    def _ssh_args(self) -> List[str]:
        ssh = "ssh -o BatchMode=yes"
        if self.port != DEFAULT_SSH_PORT:
            ssh = f"{ssh} -p {self.port}"
        return ["-e", ssh]

    def build_copy_command(self, local_path: str, remote_host: str, remote_path: str) -> List[str]:
        return ["rsync", "-a", *self._ssh_args(), local_path, self._destination(remote_host, remote_path)]

    def build_sync_command(
        self,
        local_path: str,
        remote_host: str,
        remote_path: str,
        exclude_patterns: Iterable[str] = (),
    ) -> List[str]:
        cmd = ["rsync", *RSYNC_BASE_ARGS, *self._ssh_args()]
        for pattern in exclude_patterns:
            cmd.append(f"--exclude={pattern}")
        cmd += [local_path, self._destination(remote_host, remote_path)]
        return cmd

    def copy_file(self, local_path: str, remote_host: str, remote_path: str):
        self.logger.debug("Copying %s to %s:%s", local_path, remote_host, remote_path)
        self._run(self.build_copy_command(local_path, remote_host, remote_path))

    def sync_tree(
        self,
        local_path: str,
        remote_host: str,
        remote_path: str,
        exclude_patterns: Iterable[str] = (),
    ):
        self.logger.debug("Syncing %s to %s:%s", local_path, remote_host, remote_path)
        self._run(self.build_sync_command(local_path, remote_host, remote_path, exclude_patterns))

    def _run(self, cmd: List[str]):
        try:
            self.command_runner.run(cmd, check=True, capture_output=True)
        except CommandError as exc:
            raise TransferError(str(exc)) from exc

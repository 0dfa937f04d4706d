"""Directory size measurement on both ends of a migration."""

from typing import Iterable, List

from lxcmigrate.errors import MigratorError, SizeProbeError


class SizeProbe:
    """Measures the total byte size of a tree with ``du -sb``.

    The comparison is coarse on purpose: equal totals mean the sync is done,
    not that the content is bit-identical. Exclude patterns are handed to
    ``du --exclude`` so paths skipped by the sync are skipped by the count.
    ``du`` matches them as shell globs against names and paths, so rsync-only
    syntax (leading ``/`` anchors, ``**``, trailing ``/``) may count differently.
    """

    def __init__(self, command_runner, remote_executor, logger):
        self.command_runner = command_runner
        self.remote_executor = remote_executor
        self.logger = logger

    @staticmethod
    def du_command(path: str, exclude_patterns: Iterable[str] = ()) -> List[str]:
        cmd = ["du", "-sb"]
        for pattern in exclude_patterns:
            cmd.append(f"--exclude={pattern}")
        return cmd + [path]

    @staticmethod
    def parse_du_output(output: str, path: str) -> int:
        fields = (output or "").split()
        if not fields:
            raise SizeProbeError(f"No size reported for {path}.")
        try:
            return int(fields[0])
        except ValueError as exc:
            raise SizeProbeError(f"Unexpected du output for {path}: {output.strip()}") from exc

    def local_size(self, path: str, exclude_patterns: Iterable[str] = ()) -> int:
        try:
            result = self.command_runner.run(
                self.du_command(path, exclude_patterns), check=True, capture_output=True
            )
        except MigratorError as exc:
            raise SizeProbeError(f"Could not measure local size of {path}: {exc}") from exc
        size = self.parse_du_output(result.stdout, path)
        self.logger.debug("Local size of %s: %s bytes", path, size)
        return size

    def remote_size(self, path: str, exclude_patterns: Iterable[str] = ()) -> int:
        try:
            output = self.remote_executor.run(self.du_command(path, exclude_patterns))
        except MigratorError as exc:
            raise SizeProbeError(f"Could not measure remote size of {path}: {exc}") from exc
        size = self.parse_du_output(output, path)
        self.logger.debug("Remote size of %s: %s bytes", path, size)
        return size

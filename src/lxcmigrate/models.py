"""Shared domain models for lxcmigrate."""

import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from lxcmigrate.constants import CONFIG_FILE_NAME, DEFAULT_LXC_ROOT, ROOTFS_DIR_NAME


@dataclass(frozen=True)
class MigrationRequest:
    """Everything a run needs, built once by the CLI layer."""

    destination_host: str
    container_names: Tuple[str, ...]
    force_continue: bool = False
    exclude_patterns: Tuple[str, ...] = ()
    lxc_root: str = DEFAULT_LXC_ROOT

    def container_dir(self, name: str) -> str:
        return posixpath.join(self.lxc_root, name)

    def config_path(self, name: str) -> str:
        return posixpath.join(self.lxc_root, name, CONFIG_FILE_NAME)

    def rootfs_path(self, name: str) -> str:
        return posixpath.join(self.lxc_root, name, ROOTFS_DIR_NAME)


class JobOutcome(str, Enum):
    SUCCESS = "success"
    STOP_FAILED = "stop_failed"
    PROVISION_FAILED = "provision_failed"
    CONFIG_TRANSFER_FAILED = "config_transfer_failed"
    VERIFICATION_EXHAUSTED = "verification_exhausted"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class ContainerJobResult:
    """Final outcome of one container's migration."""

    name: str
    outcome: JobOutcome
    retries: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is JobOutcome.SUCCESS

    @property
    def aborted(self) -> bool:
        return not self.succeeded

    @property
    def verified_after_retries(self) -> bool:
        return self.succeeded and self.retries > 0

    def to_dict(self):
        return {
            "name": self.name,
            "outcome": self.outcome.value,
            "retries": self.retries,
            "error": self.error,
        }


@dataclass(frozen=True)
class TransferAttempt:
    """One rootfs sync-and-verify cycle. Sizes are None when the sync failed."""

    attempt: int
    source_size: Optional[int] = None
    dest_size: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.source_size is not None and self.source_size == self.dest_size

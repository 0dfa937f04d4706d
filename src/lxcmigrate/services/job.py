"""Per-container migration sequence for lxcmigrate."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from rich.markup import escape

from lxcmigrate.errors import ContainerStopError, MigratorError
from lxcmigrate.errors_catalog import actionable_error
from lxcmigrate.models import ContainerJobResult, JobOutcome, MigrationRequest, TransferAttempt
from lxcmigrate.services.retry import RetryPolicy


@dataclass(frozen=True)
class Capabilities:
    """The external tools a job drives."""

    controller: object
    remote: object
    transfer: object
    size_probe: object


class JobStep(str, Enum):
    STOPPING = "stopping"
    PROVISIONING = "provisioning"
    TRANSFERRING_CONFIG = "transferring_config"
    TRANSFERRING_ROOTFS = "transferring_rootfs"
    DONE = "done"


STEP_FAILURE_OUTCOMES = {
    JobStep.STOPPING: JobOutcome.STOP_FAILED,
    JobStep.PROVISIONING: JobOutcome.PROVISION_FAILED,
    JobStep.TRANSFERRING_CONFIG: JobOutcome.CONFIG_TRANSFER_FAILED,
}


class _JobAborted(Exception):
    def __init__(self, outcome: JobOutcome, message: str):
        super().__init__(message)
        self.outcome = outcome


class MigrationJob:
    """Migrates a single container: stop, provision, copy config, sync rootfs.

    ``run`` always returns one :class:`ContainerJobResult`. Job-aborting
    errors become a result, never an exception. Nothing created on the
    destination is rolled back when a step fails.
    """

    def __init__(
        self,
        name: str,
        request: MigrationRequest,
        capabilities: Capabilities,
        logger,
        console,
        retry_policy: Optional[RetryPolicy] = None,
        sleep=time.sleep,
    ):
        self.name = name
        self.request = request
        self.capabilities = capabilities
        self.logger = logger
        self.console = console
        self.retry_policy = retry_policy or RetryPolicy.unbounded()
        self.sleep = sleep
        self.step: Optional[JobStep] = None
        self.sync_attempts = 0
        self.retries = 0

    @property
    def host(self) -> str:
        return self.request.destination_host

    def run(self) -> ContainerJobResult:
        try:
            self.stop_container()
            self.provision()
            self.transfer_config()
            retries = self.transfer_rootfs()
        except _JobAborted as exc:
            self.console.print(f"[bold red]{self.name}:[/bold red] {escape(str(exc))}")
            self.logger.error("[%s] %s failed: %s", self.name, self.step.value, exc)
            return ContainerJobResult(self.name, exc.outcome, retries=self.retries, error=str(exc))

        self.step = JobStep.DONE
        if retries:
            self.console.print(f"[green]{self.name}: migrated and verified after {retries} retries.[/green]")
        else:
            self.console.print(f"[green]{self.name}: migrated and verified.[/green]")
        self.logger.info("[%s] Migration finished (retries=%s).", self.name, retries)
        return ContainerJobResult(self.name, JobOutcome.SUCCESS, retries=retries)

    def _enter(self, step: JobStep, message: str):
        self.step = step
        self.console.print(f"[blue]{self.name}: {message}[/blue]")
        self.logger.info("[%s] %s", self.name, message)

    def stop_container(self):
        self._enter(JobStep.STOPPING, "Stopping container...")
        try:
            self.capabilities.controller.stop(self.name)
        except ContainerStopError as exc:
            if not self.request.force_continue:
                raise _JobAborted(
                    JobOutcome.STOP_FAILED,
                    f"{exc} {actionable_error('stop_failed', name=self.name)}",
                ) from exc
            self.console.print(f"[yellow]{self.name}: {escape(str(exc))} Continuing because of -f.[/yellow]")
            self.logger.warning("[%s] %s Continuing because force is set.", self.name, exc)

    def provision(self):
        container_dir = self.request.container_dir(self.name)
        rootfs = self.request.rootfs_path(self.name)
        self._enter(JobStep.PROVISIONING, f"Provisioning {container_dir} on {self.host}...")
        try:
            self.capabilities.remote.run(["mkdir", "-p", container_dir])
            self.capabilities.remote.run(["btrfs", "subvolume", "create", rootfs])
        except MigratorError as exc:
            raise _JobAborted(
                JobOutcome.PROVISION_FAILED,
                f"{exc} {actionable_error('provision_failed', path=container_dir, host=self.host)}",
            ) from exc

    def transfer_config(self):
        config_path = self.request.config_path(self.name)
        self._enter(JobStep.TRANSFERRING_CONFIG, "Copying configuration...")
        try:
            self.capabilities.transfer.copy_file(config_path, self.host, config_path)
        except MigratorError as exc:
            raise _JobAborted(
                JobOutcome.CONFIG_TRANSFER_FAILED,
                f"{exc} "
                + actionable_error(
                    "config_transfer_failed",
                    name=self.name,
                    host=self.host,
                    path=self.request.container_dir(self.name),
                ),
            ) from exc

    def transfer_rootfs(self) -> int:
        """Syncs and verifies the rootfs until sizes match; returns the retry count."""
        rootfs = self.request.rootfs_path(self.name) + "/"
        self._enter(JobStep.TRANSFERRING_ROOTFS, "Syncing rootfs...")

        while True:
            attempt = self._sync_and_measure(rootfs)
            if attempt.matched:
                self.logger.info(
                    "[%s] Rootfs verified: %s bytes on both ends.", self.name, attempt.source_size
                )
                return self.retries

            self.retries += 1
            if not self.retry_policy.should_retry(self.retries):
                raise _JobAborted(
                    JobOutcome.VERIFICATION_EXHAUSTED,
                    actionable_error(
                        "verification_exhausted", name=self.name, attempts=str(self.sync_attempts)
                    ),
                )

            delay = self.retry_policy.wait(self.retries, sleep=self.sleep)
            if delay:
                self.logger.info("[%s] Retrying rootfs sync in %.1fs.", self.name, delay)
            self.console.print(f"[yellow]{self.name}: retrying rootfs sync ({self.retries})...[/yellow]")

    def _sync_and_measure(self, rootfs: str) -> TransferAttempt:
        self.sync_attempts += 1
        try:
            self.capabilities.transfer.sync_tree(
                rootfs, self.host, rootfs, list(self.request.exclude_patterns)
            )
        except MigratorError as exc:
            self.logger.warning("[%s] Rootfs sync failed: %s", self.name, exc)
            return TransferAttempt(attempt=self.sync_attempts)

        excludes = list(self.request.exclude_patterns)
        try:
            source_size = self.capabilities.size_probe.local_size(rootfs, excludes)
            dest_size = self.capabilities.size_probe.remote_size(rootfs, excludes)
        except MigratorError as exc:
            self.logger.warning("[%s] Could not verify rootfs size: %s", self.name, exc)
            return TransferAttempt(attempt=self.sync_attempts)

        attempt = TransferAttempt(
            attempt=self.sync_attempts, source_size=source_size, dest_size=dest_size
        )
        if not attempt.matched:
            self.console.print(
                f"[yellow]{self.name}: size mismatch (source {source_size}, destination {dest_size}).[/yellow]"
            )
            self.logger.warning(
                "[%s] Size mismatch: source %s bytes, destination %s bytes.",
                self.name,
                source_size,
                dest_size,
            )
        return attempt

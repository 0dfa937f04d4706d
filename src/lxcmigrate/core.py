import logging
import uuid
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import DEFAULT_SSH_PORT
from .errors import MigratorError
from .models import ContainerJobResult, JobOutcome, MigrationRequest
from .services.command_runner import CommandRunner
from .services.container import ContainerController
from .services.job import STEP_FAILURE_OUTCOMES, Capabilities, JobStep, MigrationJob
from .services.manifest import ManifestService
from .services.remote import RemoteExecutor
from .services.retry import RetryPolicy
from .services.size_probe import SizeProbe
from .services.transfer import TransferAgent

console = Console()
logger = logging.getLogger("lxcmigrate")


def build_capabilities(
    request: MigrationRequest,
    ssh_user: Optional[str] = None,
    ssh_port: int = DEFAULT_SSH_PORT,
    command_timeout: Optional[float] = None,
) -> Capabilities:
    command_runner = CommandRunner(logger=logger, default_timeout=command_timeout)
    remote = RemoteExecutor(
        host=request.destination_host,
        command_runner=command_runner,
        logger=logger,
        user=ssh_user,
        port=ssh_port,
    )
    return Capabilities(
        controller=ContainerController(command_runner, logger, lxc_root=request.lxc_root),
        remote=remote,
        transfer=TransferAgent(command_runner, logger, user=ssh_user, port=ssh_port),
        size_probe=SizeProbe(command_runner, remote, logger),
    )


class MigrationRunner:
    """Migrates every container of a request, one after another."""

    def __init__(
        self,
        request: MigrationRequest,
        capabilities: Capabilities,
        retry_policy: Optional[RetryPolicy] = None,
        manifest_file: Optional[str] = None,
        dry_run: bool = False,
        strict: bool = False,
        job_factory=MigrationJob,
        console_obj: Optional[Console] = None,
        logger_obj=None,
    ):
        self.request = request
        self.capabilities = capabilities
        self.retry_policy = retry_policy or RetryPolicy.unbounded()
        self.dry_run = dry_run
        self.strict = strict
        self.job_factory = job_factory
        self.console = console_obj or console
        self.logger = logger_obj or logger
        self.run_id = uuid.uuid4().hex[:10]
        self.manifest_service = ManifestService(manifest_file=manifest_file, logger=self.logger)
        self.results: List[ContainerJobResult] = []

    def _build_metadata(self) -> Dict[str, Any]:
        return {
            "destination_host": self.request.destination_host,
            "containers": [name for name in self.request.container_names if name.strip()],
            "force_continue": self.request.force_continue,
            "exclude_patterns": list(self.request.exclude_patterns),
            "lxc_root": self.request.lxc_root,
            "max_attempts": self.retry_policy.max_attempts,
            "dry_run": self.dry_run,
        }

    def migrate_container(self, name: str) -> ContainerJobResult:
        job = self.job_factory(
            name=name,
            request=self.request,
            capabilities=self.capabilities,
            logger=self.logger,
            console=self.console,
            retry_policy=self.retry_policy,
        )
        try:
            return job.run()
        except MigratorError as exc:
            step = job.step or JobStep.STOPPING
            self.logger.error("[%s] %s failed: %s", name, step.value, exc)
            return ContainerJobResult(
                name,
                STEP_FAILURE_OUTCOMES.get(step, JobOutcome.UNEXPECTED_ERROR),
                error=str(exc),
            )
        except Exception as exc:
            step = job.step or JobStep.STOPPING
            self.console.print(f"[bold red]{name}: unexpected error:[/bold red] {escape(str(exc))}")
            self.logger.exception("[%s] Unexpected error during %s", name, step.value)
            return ContainerJobResult(
                name,
                STEP_FAILURE_OUTCOMES.get(step, JobOutcome.UNEXPECTED_ERROR),
                error=f"Unexpected error: {exc}",
            )

    def run_jobs(self) -> List[ContainerJobResult]:
        for name in self.request.container_names:
            name = name.strip()
            if not name:
                continue

            self.console.rule(f"[bold]{name}[/bold]")
            self.manifest_service.container_started(name)
            result = self.migrate_container(name)
            self.results.append(result)
            self.manifest_service.container_finished(result)

        return self.results

    def summary_counts(self) -> Dict[str, int]:
        counts = {"total": len(self.results), "succeeded": 0, "failed": 0, "retried": 0}
        for result in self.results:
            if result.succeeded:
                counts["succeeded"] += 1
            else:
                counts["failed"] += 1
            if result.verified_after_retries:
                counts["retried"] += 1
        return counts

    def print_summary(self):
        table = Table(title="Migration summary")
        table.add_column("Container")
        table.add_column("Outcome")
        table.add_column("Retries", justify="right")

        for result in self.results:
            style = "green" if result.succeeded else "red"
            table.add_row(result.name, f"[{style}]{result.outcome.value}[/{style}]", str(result.retries))

        self.console.print(table)
        counts = self.summary_counts()
        line = f"{counts['succeeded']}/{counts['total']} containers migrated, {counts['failed']} failed."
        self.console.print(f"[bold]{line}[/bold]")
        self.logger.info(line)

    def print_plan(self):
        self.console.print(f"[bold blue]Dry run: migration plan to {self.request.destination_host}[/bold blue]")
        for name in self.request.container_names:
            name = name.strip()
            if not name:
                continue
            self.console.print(f"[bold]{name}[/bold]")
            self.console.print(f"  stop container{' (continue on failure)' if self.request.force_continue else ''}")
            self.console.print(f"  mkdir -p {self.request.container_dir(name)}")
            self.console.print(f"  btrfs subvolume create {self.request.rootfs_path(name)}")
            self.console.print(f"  copy {self.request.config_path(name)}")
            excludes = escape(", ".join(self.request.exclude_patterns)) or "none"
            self.console.print(f"  sync {self.request.rootfs_path(name)}/ (excludes: {excludes}) and verify size")

    def run(self) -> int:
        manifest_status = "failed"
        manifest_error: Optional[str] = None
        exit_code = 1

        try:
            self.logger.info("Starting lxcmigrate run %s...", self.run_id)
            if self.dry_run:
                self.print_plan()
                exit_code = 0
                return exit_code

            self.manifest_service.start_run(run_id=self.run_id, metadata=self._build_metadata())
            self.run_jobs()
            self.print_summary()

            if any(result.aborted for result in self.results):
                manifest_status = "partial"
                exit_code = 1 if self.strict else 0
            else:
                manifest_status = "success"
                exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            self.console.print("[bold red]Operation cancelled by user.[/bold red]")
            self.logger.info("Operation cancelled by user")
            manifest_status = "aborted"
            manifest_error = "Operation cancelled by user."
            exit_code = 1
            return exit_code
        finally:
            if not self.dry_run:
                self.manifest_service.finalize(
                    manifest_status,
                    summary=self.summary_counts(),
                    error=manifest_error,
                )

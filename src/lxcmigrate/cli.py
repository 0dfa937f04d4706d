import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, DEFAULT_LXC_ROOT, DEFAULT_MANIFEST_FILE, DEFAULT_SSH_PORT
from .core import MigrationRunner, build_capabilities
from .errors import MigratorError
from .models import MigrationRequest
from .services.config_loader import ConfigLoader
from .services.inputs import InputLoader
from .services.retry import RetryPolicy


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("destination_host")
@click.argument("container_list_file", type=click.Path())
@click.option(
    "-f",
    "--force",
    is_flag=True,
    default=None,
    help="Continue with a container even when it could not be stopped.",
)
@click.option(
    "--exclude",
    "exclude_file",
    required=False,
    type=click.Path(),
    help="File with one rsync exclude pattern per line, applied to the rootfs sync.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--lxc-root",
    required=False,
    help=f"LXC container directory on both hosts (default: {DEFAULT_LXC_ROOT}).",
)
@click.option("--ssh-user", required=False, help="User for SSH and rsync connections.")
@click.option("--ssh-port", required=False, type=int, default=None, help="SSH port of the destination.")
@click.option(
    "--max-attempts",
    required=False,
    type=int,
    default=None,
    help="Give up on a rootfs after this many failed sync/verify attempts (default: 0, never).",
)
@click.option(
    "--retry-backoff-seconds",
    required=False,
    type=float,
    default=None,
    help="Initial delay between rootfs attempts, doubled on each retry (default: 0).",
)
@click.option(
    "--command-timeout",
    required=False,
    type=float,
    default=None,
    help="Timeout in seconds for every external command (default: none).",
)
@click.option(
    "--manifest-file",
    required=False,
    type=click.Path(),
    help=f"Path for the JSON run manifest (default: {DEFAULT_MANIFEST_FILE}).",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Print the migration plan without stopping or copying anything.",
)
@click.option(
    "--strict",
    is_flag=True,
    default=None,
    help="Exit with status 1 when any container failed to migrate.",
)
def main(
    destination_host,
    container_list_file,
    force,
    exclude_file,
    config,
    lxc_root,
    ssh_user,
    ssh_port,
    max_attempts,
    retry_backoff_seconds,
    command_timeout,
    manifest_file,
    verbose,
    log_file,
    dry_run,
    strict,
):
    """Migrate the LXC containers listed in CONTAINER_LIST_FILE to DESTINATION_HOST."""
    logger = logging.getLogger("lxcmigrate")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except MigratorError as exc:
        raise click.ClickException(str(exc)) from exc

    force = bool(_resolve_option(force, config_values, "force", default=False))
    exclude_file = _resolve_option(exclude_file, config_values, "exclude")
    lxc_root = str(_resolve_option(lxc_root, config_values, "lxc_root", default=DEFAULT_LXC_ROOT))
    ssh_user = _resolve_option(ssh_user, config_values, "ssh_user")
    ssh_port = int(_resolve_option(ssh_port, config_values, "ssh_port", default=DEFAULT_SSH_PORT))
    max_attempts = int(_resolve_option(max_attempts, config_values, "max_attempts", default=0))
    retry_backoff_seconds = float(
        _resolve_option(retry_backoff_seconds, config_values, "retry_backoff_seconds", default=0.0)
    )
    command_timeout = _resolve_option(command_timeout, config_values, "command_timeout")
    manifest_file = _resolve_option(
        manifest_file, config_values, "manifest_file", default=DEFAULT_MANIFEST_FILE
    )
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))
    strict = bool(_resolve_option(strict, config_values, "strict", default=False))

    if max_attempts < 0:
        raise click.BadParameter("must be 0 (unbounded) or positive.", param_hint="'--max-attempts'")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    input_loader = InputLoader()
    try:
        container_names = input_loader.read_container_names(container_list_file)
        exclude_patterns = input_loader.read_exclude_patterns(exclude_file) if exclude_file else []
    except MigratorError as exc:
        raise click.ClickException(str(exc)) from exc

    request = MigrationRequest(
        destination_host=destination_host,
        container_names=tuple(container_names),
        force_continue=force,
        exclude_patterns=tuple(exclude_patterns),
        lxc_root=lxc_root,
    )
    retry_policy = RetryPolicy(
        max_attempts=max_attempts or None,
        backoff_seconds=retry_backoff_seconds,
    )

    runner = MigrationRunner(
        request=request,
        capabilities=build_capabilities(
            request,
            ssh_user=ssh_user,
            ssh_port=ssh_port,
            command_timeout=float(command_timeout) if command_timeout is not None else None,
        ),
        retry_policy=retry_policy,
        manifest_file=manifest_file,
        dry_run=dry_run,
        strict=strict,
    )

    raise SystemExit(runner.run())


if __name__ == "__main__":
    main()

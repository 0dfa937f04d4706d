"""Configuration loader for lxcmigrate."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from lxcmigrate.errors import MigratorError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "exclude",
        "force",
        "lxc_root",
        "ssh_user",
        "ssh_port",
        "max_attempts",
        "retry_backoff_seconds",
        "command_timeout",
        "manifest_file",
        "verbose",
        "log_file",
        "dry_run",
        "strict",
    }
    INT_KEYS = {"ssh_port", "max_attempts"}
    FLOAT_KEYS = {"retry_backoff_seconds", "command_timeout"}
    BOOL_KEYS = {"force", "verbose", "dry_run", "strict"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise MigratorError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise MigratorError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise MigratorError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise MigratorError(f"Unknown configuration keys: {unknown_list}")

        self._validate_types(parsed)
        return parsed

    def _validate_types(self, parsed: Dict[str, Any]):
        for key, value in parsed.items():
            if key == "command_timeout" and value is None:
                continue
            if key in self.BOOL_KEYS and not isinstance(value, bool):
                raise MigratorError(f"Config key '{key}' must be true or false, got {value!r}.")
            if key in self.INT_KEYS and (isinstance(value, bool) or not isinstance(value, int)):
                raise MigratorError(f"Config key '{key}' must be an integer, got {value!r}.")
            if key in self.FLOAT_KEYS and (
                isinstance(value, bool) or not isinstance(value, (int, float))
            ):
                raise MigratorError(f"Config key '{key}' must be a number, got {value!r}.")

"""Readers for the container list and exclude pattern files."""

from pathlib import Path
from typing import List

from lxcmigrate.errors import MigratorError
from lxcmigrate.errors_catalog import actionable_error


class InputLoader:
    """Turns the plain-text input files into the lists a request needs."""

    def _read_lines(self, path: str, missing_code: str) -> List[str]:
        file_path = Path(path)
        if not file_path.is_file():
            raise MigratorError(actionable_error(missing_code, path=path))
        try:
            return file_path.read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            raise MigratorError(f"Could not read '{path}': {exc}") from exc

    def read_container_names(self, path: str) -> List[str]:
        # Blank lines are kept; the runner skips them.
        return [line.strip() for line in self._read_lines(path, "container_list_not_found")]

    def read_exclude_patterns(self, path: str) -> List[str]:
        return [line for line in self._read_lines(path, "exclude_file_not_found") if line.strip()]

"""Actionable error catalog for lxcmigrate."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "container_list_not_found": {
        "what": "Container list file not found: {path}",
        "next": "Provide a file with one container name per line.",
    },
    "exclude_file_not_found": {
        "what": "Exclude file not found: {path}",
        "next": "Provide a file with one rsync exclude pattern per line, or drop `--exclude`.",
    },
    "stop_failed": {
        "what": "Could not stop container {name}.",
        "next": "Stop it manually with `lxc-stop -n {name}` or rerun with `-f` to migrate anyway.",
    },
    "provision_failed": {
        "what": "Could not provision {path} on {host}.",
        "next": "Check SSH access and that {path} does not already exist, then rerun.",
    },
    "config_transfer_failed": {
        "what": "Could not copy the configuration of {name} to {host}.",
        "next": "Remove {path} on {host} before retrying; partial state is not cleaned up.",
    },
    "verification_exhausted": {
        "what": "Rootfs of {name} did not verify after {attempts} attempt(s).",
        "next": "Inspect the rsync output and rerun, or raise `--max-attempts`.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"

"""
lxcmigrate - Move LXC containers between hosts with verified rootfs syncs
"""

__version__ = "0.3.0"

from .core import MigrationRunner, build_capabilities
from .errors import MigratorError
from .models import ContainerJobResult, JobOutcome, MigrationRequest

__all__ = [
    "ContainerJobResult",
    "JobOutcome",
    "MigrationRequest",
    "MigrationRunner",
    "MigratorError",
    "build_capabilities",
]

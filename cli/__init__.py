"""
CLI command wrappers with error parsing and structured results
"""

from .base import CommandResult, ErrorType, CommandWrapper
from .pct import PCT
from .pveam import Pveam, Pvesm
from .vzdump import Vzdump
from .apt import Apt
from .systemctl import SystemCtl
from .docker import Docker
from .files import FileOps
from .sed import Sed
from .mysql import MySQL

__all__ = [
    "CommandResult",
    "ErrorType",
    "CommandWrapper",
    "PCT",
    "Pveam",
    "Pvesm",
    "Vzdump",
    "Apt",
    "SystemCtl",
    "Docker",
    "FileOps",
    "Sed",
    "MySQL",
]

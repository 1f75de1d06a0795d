"""
Host-side services built on the command wrappers
"""
from .lxc import LXCService
from .pct import PCTService
from .template import TemplateService
from .backup import BackupService

__all__ = ["LXCService", "PCTService", "TemplateService", "BackupService"]

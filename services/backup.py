"""
Backup Service - snapshots containers with vzdump
"""
import logging

from cli.vzdump import Vzdump
from .lxc import LXCService

logger = logging.getLogger(__name__)


class BackupService:
    """Runs vzdump snapshots on the Proxmox host"""

    def __init__(self, lxc_service: LXCService):
        self.lxc = lxc_service

    def snapshot(self, container_id: int, storage: str = "local") -> str:
        return self.lxc.run(
            Vzdump.backup_cmd(container_id, storage),
            f"Backup container {container_id}",
            timeout=None,
        )

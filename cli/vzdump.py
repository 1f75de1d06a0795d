"""
Vzdump command wrapper for container backups
"""

import logging
from .base import CommandWrapper

logger = logging.getLogger(__name__)


class Vzdump(CommandWrapper):
    """Wrapper for vzdump commands - generates command strings"""

    @staticmethod
    def backup_cmd(
        container_id: int, storage: str, compress: str = "zstd", mode: str = "snapshot"
    ) -> str:
        """Generate command to back up a container to a storage"""
        return (
            f"vzdump {container_id} --compress {compress} "
            f"--mode {mode} --storage {storage} 2>&1"
        )

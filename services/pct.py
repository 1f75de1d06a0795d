"""
PCT Service - uses LXC service to execute PCT CLI commands
"""
import logging
import re
from typing import List, Optional, Tuple

from cli.pct import PCT
from .lxc import LXCService

logger = logging.getLogger(__name__)

APPARMOR_UNCONFINED = "lxc.apparmor.profile: unconfined"
DEFAULT_EXEC_TIMEOUT = 1800


class PCTService:
    """Service for executing PCT commands using LXC service"""

    def __init__(self, lxc_service: LXCService, shell: str = "bash"):
        """
        Initialize PCT service
        Args:
            lxc_service: LXC service for the Proxmox host
            shell: Shell used inside containers
        """
        self.lxc = lxc_service
        self.shell = shell

    def exists(self, container_id: int) -> bool:
        """True when the id is taken ('pct status' succeeds for any known container)."""
        _, exit_code = self.lxc.execute(PCT.status_cmd(container_id), timeout=30)
        return exit_code == 0

    def status(self, container_id: int) -> str:
        """Container state ('running', 'stopped', ...)."""
        output, _ = self.lxc.execute(PCT.status_cmd(container_id), timeout=30)
        return PCT.parse_status(output)

    def list(self) -> List[Tuple[int, str, str]]:
        """All containers on the host as (vmid, status, name)."""
        output = self.lxc.run(PCT.list_cmd(), "List containers", timeout=60)
        return PCT.parse_list(output)

    def next_free_id(self, start: int = 100) -> int:
        """Lowest unused container id at or above ``start``."""
        next_id = start
        while self.exists(next_id):
            next_id += 1
        return next_id

    def create(  # pylint: disable=too-many-arguments
        self,
        container_id: int,
        template: str,
        hostname: str,
        cores: int,
        memory: int,
        swap: int,
        net0: str,
        storage: str,
        rootfs_size: int,
        nameserver: Optional[str] = None,
        nesting: bool = False,
    ) -> str:
        """
        Create a stopped container using pct create
        Args:
            container_id: Container ID
            template: Template volume id (storage:vztmpl/name)
            hostname: Container hostname
            cores: Number of CPU cores
            memory: Memory in MB
            swap: Swap in MB
            net0: Network definition
            storage: Storage for the root filesystem
            rootfs_size: Root filesystem size in GB
            nameserver: DNS server for the container
            nesting: Enable nesting and unconfined AppArmor (needed for Docker)
        Returns:
            Command output
        """
        logger.info("Creating LXC container %s (%s)...", container_id, hostname)
        cmd = PCT.create_cmd(
            container_id=container_id,
            template=template,
            hostname=hostname,
            cores=cores,
            memory=memory,
            swap=swap,
            net0=net0,
            storage=storage,
            rootfs_size=rootfs_size,
            nameserver=nameserver,
            nesting=nesting,
        )
        output = self.lxc.run(cmd, f"Create container {container_id}", timeout=600)
        if nesting:
            self.lxc.run(
                PCT.append_config_cmd(container_id, APPARMOR_UNCONFINED),
                f"Set AppArmor profile for container {container_id}",
                timeout=30,
            )
        logger.info("Container %s created", container_id)
        return output

    def start(self, container_id: int) -> str:
        return self.lxc.run(PCT.start_cmd(container_id), f"Start container {container_id}", timeout=120)

    def stop(self, container_id: int) -> str:
        return self.lxc.run(PCT.stop_cmd(container_id), f"Stop container {container_id}", timeout=300)

    def execute(self, container_id: int, command: str, timeout: Optional[int] = None) -> tuple[Optional[str], Optional[int]]:
        """
        Execute command in container using pct exec
        Returns:
            Tuple of (output, exit_code)
        """
        logger.debug("Running in container %s: %s", container_id, command)
        return self.lxc.execute(PCT.exec_cmd(container_id, command, self.shell), timeout=timeout)

    def run(self, container_id: int, command: str, description: str, timeout: Optional[int] = DEFAULT_EXEC_TIMEOUT) -> str:
        """Execute command in container, raising CommandFailed unless it exits 0."""
        logger.debug("Running in container %s: %s", container_id, command)
        return self.lxc.run(
            PCT.exec_cmd(container_id, command, self.shell),
            f"{description} (CT {container_id})",
            timeout=timeout,
        )

    def ip_address(self, container_id: int) -> Optional[str]:
        """First address reported by 'hostname -I' inside the container."""
        output, exit_code = self.execute(container_id, "hostname -I", timeout=30)
        if exit_code != 0 or not output:
            return None
        match = re.search(r"\d+\.\d+\.\d+\.\d+", output)
        return match.group(0) if match else None

    def enter(self, container_id: int) -> int:
        """Attach the current terminal to the container console."""
        return self.lxc.interactive(PCT.enter_cmd(container_id))

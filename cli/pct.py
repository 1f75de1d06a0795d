"""
PCT (Proxmox Container Toolkit) command wrapper
"""

import base64
import logging
import shlex
from typing import List, Optional, Tuple
from .base import CommandWrapper

logger = logging.getLogger(__name__)

LXC_CONFIG_DIR = "/etc/pve/lxc"


class PCT(CommandWrapper):
    """Wrapper for PCT commands - generates command strings"""

    @staticmethod
    def net0(bridge: str, address: str, gateway: Optional[str] = None) -> str:
        """Build the --net0 value; gateway is ignored for DHCP."""
        parts = ["name=eth0", f"bridge={bridge}", f"ip={address}"]
        if gateway and address != "dhcp":
            parts.append(f"gw={gateway}")
        return ",".join(parts)

    @staticmethod
    def create_cmd(  # pylint: disable=too-many-arguments
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
        unprivileged: bool = True,
        onboot: bool = True,
    ) -> str:
        """Generate command to create a (stopped) container"""
        parts = [
            "pct",
            "create",
            str(container_id),
            template,
            f"--hostname {shlex.quote(hostname)}",
            f"--cores {cores}",
            f"--memory {memory}",
            f"--swap {swap}",
            f"--net0 {net0}",
            f"--storage {storage}",
            f"--rootfs {storage}:{rootfs_size}",
            f"--unprivileged {'1' if unprivileged else '0'}",
        ]
        if nesting:
            parts.append("--features nesting=1")
        if nameserver:
            parts.append(f"--nameserver {nameserver}")
        parts.extend([f"--onboot {'1' if onboot else '0'}", "--start 0", "2>&1"])
        return " ".join(parts)

    @staticmethod
    def start_cmd(container_id: int) -> str:
        """Generate command to start a container"""
        return f"pct start {container_id} 2>&1"

    @staticmethod
    def stop_cmd(container_id: int) -> str:
        """Generate command to stop a container"""
        return f"pct stop {container_id} 2>&1"

    @staticmethod
    def status_cmd(container_id: int) -> str:
        """Generate command to get container status"""
        return f"pct status {container_id} 2>&1"

    @staticmethod
    def list_cmd() -> str:
        """Generate command to list containers"""
        return "pct list 2>&1"

    @staticmethod
    def enter_cmd(container_id: int) -> str:
        """Generate command to attach a console to a container"""
        return f"pct enter {container_id}"

    @staticmethod
    def exec_cmd(container_id: int, command: str, shell: str = "bash") -> str:
        """
        Generate command to run ``command`` inside a container

        The command travels base64 encoded so quoting survives both the local
        shell and an SSH hop.
        """
        encoded = base64.b64encode(command.encode("utf-8")).decode("ascii")
        return f'pct exec {container_id} -- {shell} -c "echo {encoded} | base64 -d | {shell}"'

    @staticmethod
    def append_config_cmd(container_id: int, line: str) -> str:
        """Generate command to append a raw line to the container's config"""
        return f"echo {shlex.quote(line)} >> {LXC_CONFIG_DIR}/{container_id}.conf"

    @staticmethod
    def parse_status(output: Optional[str]) -> str:
        """Extract the state from 'status: running' output."""
        if not output:
            return "unknown"
        for line in output.splitlines():
            if line.strip().startswith("status:"):
                return line.split(":", 1)[1].strip()
        return "unknown"

    @staticmethod
    def parse_list(output: Optional[str]) -> List[Tuple[int, str, str]]:
        """
        Parse 'pct list' output

        Returns:
            List of (vmid, status, name) tuples
        """
        rows = []
        if not output:
            return rows
        for line in output.strip().splitlines():
            parts = line.split()
            if not parts or not parts[0].isdigit():
                continue
            status = parts[1] if len(parts) > 1 else "unknown"
            # Lock column is empty for most containers, name is always last
            name = parts[-1] if len(parts) > 2 else ""
            rows.append((int(parts[0]), status, name))
        return rows

"""
LXC Service - runs host commands on the Proxmox node, locally or over SSH
"""
import logging
import os
import socket
import subprocess
from typing import Optional

import paramiko

from cli import CommandWrapper
from libs.config import SSHConfig
from libs.errors import CommandFailed

logger = logging.getLogger(__name__)

LOCAL_HOSTS = ("", "localhost", "127.0.0.1", "::1")


class LXCService:
    """Executes commands on the Proxmox host (subprocess locally, paramiko remotely)"""

    def __init__(self, host: Optional[str] = None, ssh_config: Optional[SSHConfig] = None):
        """
        Initialize LXC service
        Args:
            host: Proxmox host ([user@]hostname); None runs commands locally
            ssh_config: SSH settings used for remote hosts
        """
        self.ssh_config = ssh_config or SSHConfig()
        self.username = self.ssh_config.username
        self.host = host or ""
        if "@" in self.host:
            self.username, self.host = self.host.split("@", 1)
        self._client: Optional[paramiko.SSHClient] = None

    @property
    def is_local(self) -> bool:
        return self.host in LOCAL_HOSTS

    @property
    def target(self) -> str:
        return "localhost" if self.is_local else f"{self.username}@{self.host}"

    def connect(self) -> bool:
        """Open the SSH connection (no-op for local execution)."""
        if self.is_local or self._client is not None:
            return True
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                hostname=self.host,
                port=self.ssh_config.port,
                username=self.username,
                timeout=self.ssh_config.connect_timeout,
                look_for_keys=self.ssh_config.look_for_keys,
                allow_agent=self.ssh_config.allow_agent,
            )
        except (paramiko.SSHException, OSError) as err:
            logger.error("Failed to connect to Proxmox host %s: %s", self.target, err)
            client.close()
            return False
        self._client = client
        logger.debug("Connected to %s", self.target)
        return True

    def disconnect(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def execute(self, command: str, timeout: Optional[int] = None) -> tuple[Optional[str], Optional[int]]:
        """
        Execute a shell command on the host
        Args:
            command: Shell command line
            timeout: Seconds before giving up (None waits forever)
        Returns:
            Tuple of (output, exit_code); both None on timeout
        """
        logger.debug("Running on %s: %s", self.target, command)
        if self.is_local:
            output, exit_code = self._execute_local(command, timeout)
        else:
            output, exit_code = self._execute_remote(command, timeout)
        if output:
            logger.debug("Output (exit %s): %s", exit_code, output[-500:])
        return output, exit_code

    def _execute_local(self, command: str, timeout: Optional[int]) -> tuple[Optional[str], Optional[int]]:
        try:
            result = subprocess.run(
                command,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.error("Command timed out after %ss: %s", timeout, command)
            return None, None
        return result.stdout.strip(), result.returncode

    def _execute_remote(self, command: str, timeout: Optional[int]) -> tuple[Optional[str], Optional[int]]:
        if not self.connect():
            raise CommandFailed(f"SSH connection to {self.target}", None)
        try:
            _, stdout, stderr = self._client.exec_command(command, timeout=timeout)
            # one stream, so a full stderr window cannot stall the stdout read
            stdout.channel.set_combine_stderr(True)
            output = stdout.read().decode("utf-8", errors="replace")
            # only what arrived before the streams were combined
            error_output = stderr.read().decode("utf-8", errors="replace")
            exit_code = stdout.channel.recv_exit_status()
        except socket.timeout:
            logger.error("SSH command timed out after %ss: %s", timeout, command)
            return None, None
        except paramiko.SSHException as err:
            logger.error("SSH error on %s: %s", self.target, err)
            self.disconnect()
            return None, None
        return (output + error_output).strip(), exit_code

    def run(self, command: str, description: str, timeout: Optional[int] = None) -> str:
        """Execute a command and raise CommandFailed unless it exits 0."""
        output, exit_code = self.execute(command, timeout=timeout)
        result = CommandWrapper.parse_result(output, exit_code)
        if result.failed:
            logger.error("%s failed: %s - %s", description, result.error_type.value, result.error_message)
            raise CommandFailed(description, exit_code, output, result.error_message)
        return output or ""

    def interactive(self, command: str) -> int:
        """Run a command attached to the current terminal; returns its exit code."""
        if self.is_local:
            return subprocess.call(command, shell=True)
        ssh_cmd = [
            "ssh", "-tt",
            "-p", str(self.ssh_config.port),
            "-o", f"ConnectTimeout={self.ssh_config.connect_timeout}",
            self.target, command,
        ]
        return subprocess.call(ssh_cmd)

    def effective_uid(self) -> Optional[int]:
        """Effective uid of the account that will run pct on the host."""
        if self.is_local:
            return os.geteuid()
        output, exit_code = self.execute("id -u", timeout=self.ssh_config.connect_timeout)
        if exit_code != 0 or not output or not output.strip().isdigit():
            return None
        return int(output.strip())

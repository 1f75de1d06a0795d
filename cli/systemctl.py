"""
Systemctl command wrapper
"""

import logging
from .base import CommandWrapper

logger = logging.getLogger(__name__)


class SystemCtl(CommandWrapper):
    """Wrapper for systemctl commands - generates command strings"""

    @staticmethod
    def daemon_reload_cmd() -> str:
        """Generate command to reload systemd daemon"""
        return "systemctl daemon-reload 2>&1"

    @staticmethod
    def enable_now_cmd(service: str) -> str:
        """Generate command to enable and start a service"""
        return f"systemctl enable --now {service} 2>&1"

    @staticmethod
    def start_cmd(service: str) -> str:
        """Generate command to start a service"""
        return f"systemctl start {service} 2>&1"

    @staticmethod
    def restart_cmd(service: str) -> str:
        """Generate command to restart a service"""
        return f"systemctl restart {service} 2>&1"

"""
Pi-hole - DNS filtering installed with the upstream unattended installer
"""
import logging
import re
from typing import Optional

from cli import CommandWrapper, FileOps
from libs.catalog import ServiceKind
from .base import InstallOutcome, Installer

logger = logging.getLogger(__name__)

SETUP_VARS = "/etc/pihole/setupVars.conf"
PASSWORD_RE = re.compile(
    r"(?:web interface password:|admin webpage login password is|new password:)[ \t]*(\S+)",
    re.IGNORECASE,
)


def extract_password(output: Optional[str]) -> Optional[str]:
    """Pull the generated admin password out of installer output."""
    if not output:
        return None
    match = PASSWORD_RE.search(CommandWrapper._strip_ansi(output))
    return match.group(1) if match else None


class PiholeInstaller(Installer):
    """Install Pi-hole"""
    kind = ServiceKind.PIHOLE
    description = "Pi-hole installation"

    def setup_vars(self) -> str:
        dns = self.params.get("upstream_dns") or []
        lines = ["PIHOLE_INTERFACE=eth0"]
        if not self.spec.uses_dhcp:
            lines.append(f"IPV4_ADDRESS={self.spec.address}")
        for index, server in enumerate(dns, 1):
            lines.append(f"PIHOLE_DNS_{index}={server}")
        lines.extend([
            "QUERY_LOGGING=true",
            "INSTALL_WEB_SERVER=true",
            "INSTALL_WEB_INTERFACE=true",
            "LIGHTTPD_ENABLED=true",
            "BLOCKING_ENABLED=true",
        ])
        return "\n".join(lines) + "\n"

    def install(self) -> InstallOutcome:
        logger.info("Installing Pi-hole...")
        self.apt_upgrade()
        self.apt_install(self.definition.packages)
        self.run(FileOps.mkdir_cmd("/etc/pihole"), "Create /etc/pihole")
        self.run(FileOps.write_cmd(SETUP_VARS, self.setup_vars()), "Write Pi-hole setupVars.conf")
        output = self.run(
            f"curl -sSL {self.params['installer_url']} | bash /dev/stdin --unattended",
            "Pi-hole installer",
        )
        outcome = InstallOutcome()
        password = extract_password(output)
        if password:
            outcome.credentials["Pi-hole admin password"] = password
        else:
            outcome.notes.append(f"Password: run 'pct exec {self.ctid} -- pihole -a -p' to set the admin password")
        return outcome

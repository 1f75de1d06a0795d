"""
Base class for per-service installers
"""
import base64
import logging
import secrets
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cli import Apt, Docker
from libs.catalog import Catalog, ServiceDefinition, ServiceKind
from libs.config import HostConfig, ServiceSpec
from services.pct import PCTService

logger = logging.getLogger(__name__)

APT_TIMEOUT = 1800


def generate_password(nbytes: int = 12) -> str:
    """Random password in the same shape as 'openssl rand -base64 12'."""
    return base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii")


@dataclass
class InstallOutcome:
    """What an installer reports back for the summary"""
    credentials: Dict[str, str] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)


class Installer:
    """
    Installs one service inside a freshly started container

    Subclasses implement install() as a fixed sequence of run() calls; any
    failing step raises CommandFailed and ends the installation.
    """
    kind: ServiceKind = None
    description = "installation"

    def __init__(self, spec: ServiceSpec, catalog: Catalog, host: HostConfig, pct_service: PCTService):
        self.spec = spec
        self.catalog = catalog
        self.host = host
        self.pct = pct_service

    @property
    def definition(self) -> ServiceDefinition:
        return self.catalog[self.spec.kind]

    @property
    def params(self) -> dict:
        return self.definition.params

    @property
    def ctid(self) -> int:
        return self.spec.ctid

    def container_ip(self) -> Optional[str]:
        """Configured address, or the DHCP lease read back from the container."""
        if not self.spec.uses_dhcp:
            return self.spec.ip
        return self.pct.ip_address(self.ctid)

    def run(self, command: str, description: str, timeout: Optional[int] = APT_TIMEOUT) -> str:
        return self.pct.run(self.ctid, command, description, timeout=timeout)

    def apt_upgrade(self):
        self.run(Apt.upgrade_cmd(), "apt-get update && upgrade")

    def apt_update(self):
        self.run(Apt.update_cmd(), "apt-get update")

    def apt_install(self, packages: List[str]):
        if packages:
            self.run(Apt.install_cmd(packages), f"Install {' '.join(packages[:3])}{'...' if len(packages) > 3 else ''}")

    def install(self) -> InstallOutcome:
        raise NotImplementedError


class DockerInstaller(Installer):
    """Installer for services that run inside Docker in the container"""

    def install_docker(self):
        """Install Docker engine and the compose plugin from download.docker.com."""
        logger.info("Installing Docker...")
        source = self.catalog.docker
        self.apt_upgrade()
        self.apt_install(self.catalog.base_packages)
        self.run(Docker.fetch_key_cmd(source.gpg_url), "Fetch Docker signing key")
        self.run(Docker.add_repository_cmd(source.repository), "Add Docker repository")
        self.apt_update()
        self.apt_install(source.packages)
        logger.info("Docker installed")

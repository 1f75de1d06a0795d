"""
UniFi Controller - Ubiquiti network controller from the vendor apt repository
"""
import logging

from cli import Apt
from libs.catalog import ServiceKind
from .base import InstallOutcome, Installer

logger = logging.getLogger(__name__)

MONGODB_KEYRING = "/etc/apt/keyrings/mongodb-server-4.4.gpg"
UNIFI_KEYRING = "/etc/apt/keyrings/unifi-repo.gpg"


class UnifiInstaller(Installer):
    """Install UniFi Controller"""
    kind = ServiceKind.UNIFI
    description = "UniFi installation"

    def install(self) -> InstallOutcome:
        logger.info("Installing UniFi Controller...")
        self.apt_upgrade()
        self.apt_install(self.params.get("prerequisites", []))

        self.run(Apt.add_key_cmd(self.params["mongodb_key_url"], MONGODB_KEYRING), "Add MongoDB signing key")
        self.run(Apt.add_source_cmd(self.params["mongodb_repo"], "mongodb-org-4.4"), "Add MongoDB repository")
        self.run(Apt.add_key_cmd(self.params["unifi_key_url"], UNIFI_KEYRING), "Add UniFi signing key")
        self.run(Apt.add_source_cmd(self.params["unifi_repo"], "100-ubnt-unifi"), "Add UniFi repository")

        self.apt_update()
        self.apt_install(self.definition.packages)
        return InstallOutcome(notes=["Initial setup required through web interface"])

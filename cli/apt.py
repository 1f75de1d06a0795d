"""
APT-GET command wrapper
"""
import logging
import shlex
from typing import List
from .base import CommandWrapper

logger = logging.getLogger(__name__)

NONINTERACTIVE = "DEBIAN_FRONTEND=noninteractive"


class Apt(CommandWrapper):
    """Wrapper for apt-get commands - generates command strings"""

    @staticmethod
    def update_cmd() -> str:
        """Generate command to update package lists"""
        return f"{NONINTERACTIVE} apt-get update 2>&1"

    @staticmethod
    def upgrade_cmd() -> str:
        """Generate command to refresh lists and upgrade installed packages"""
        return f"{NONINTERACTIVE} apt-get update 2>&1 && {NONINTERACTIVE} apt-get upgrade -y 2>&1"

    @staticmethod
    def install_cmd(packages: List[str]) -> str:
        """Generate command to install packages"""
        packages_str = " ".join(shlex.quote(package) for package in packages)
        return f"{NONINTERACTIVE} apt-get install -y {packages_str} 2>&1"

    @staticmethod
    def add_key_cmd(url: str, keyring: str) -> str:
        """Generate command to fetch a signing key into /etc/apt/keyrings"""
        return (
            "install -m 0755 -d /etc/apt/keyrings && "
            f"wget -qO - {shlex.quote(url)} | gpg --dearmor --yes -o {shlex.quote(keyring)} 2>&1"
        )

    @staticmethod
    def add_source_cmd(line: str, list_name: str) -> str:
        """Generate command to write an apt source list"""
        path = f"/etc/apt/sources.list.d/{list_name}.list"
        return f"echo {shlex.quote(line)} > {shlex.quote(path)}"

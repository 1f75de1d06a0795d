"""
Docker command wrapper
"""
import logging
import shlex
from .base import CommandWrapper

logger = logging.getLogger(__name__)

KEYRING = "/etc/apt/keyrings/docker.asc"


class Docker(CommandWrapper):
    """Wrapper for Docker commands - generates command strings"""

    @staticmethod
    def fetch_key_cmd(gpg_url: str) -> str:
        """Generate command to install the Docker apt signing key"""
        return (
            "install -m 0755 -d /etc/apt/keyrings && "
            f"curl -fsSL {shlex.quote(gpg_url)} -o {KEYRING} && "
            f"chmod a+r {KEYRING}"
        )

    @staticmethod
    def add_repository_cmd(repository: str) -> str:
        """Generate command to register the Docker apt repository for this release"""
        return (
            f'echo "deb [arch=$(dpkg --print-architecture) signed-by={KEYRING}] {repository} '
            '$(. /etc/os-release && echo "$VERSION_CODENAME") stable" '
            "> /etc/apt/sources.list.d/docker.list"
        )

    @staticmethod
    def compose_up_cmd(project_dir: str) -> str:
        """Generate command to start a compose project"""
        return f"cd {shlex.quote(project_dir)} && docker compose up -d 2>&1"

"""
Docker services host - one container running a whole docker-compose stack
"""
import logging
import secrets

from cli import Docker, FileOps
from libs.catalog import ServiceKind
from .base import DockerInstaller, InstallOutcome, generate_password

logger = logging.getLogger(__name__)


class ComposeInstaller(DockerInstaller):
    """Install Docker and bring up the compose stack"""
    kind = ServiceKind.COMPOSE
    description = "docker services deployment"

    def env_file(self, host_ip: str, secrets_map: dict) -> str:
        lines = [f"{key}={value}" for key, value in secrets_map.items()]
        lines.extend([
            f"HOST_IP={host_ip}",
            f"HOSTNAME={self.spec.hostname}",
            f"TZ={self.host.timezone}",
            "TWINGATE_ACCESS_TOKEN=",
            "TWINGATE_REFRESH_TOKEN=",
        ])
        return "\n".join(lines) + "\n"

    def install(self) -> InstallOutcome:
        base_dir = self.params["base_dir"]
        compose_url = self.host.compose_url or self.params["compose_url"]
        self.install_docker()

        logger.info("Setting up docker-compose...")
        self.run(FileOps.mkdirs_under_cmd(base_dir, self.params.get("data_dirs", [])), "Create service directories")
        logger.info("Downloading docker-compose.yml...")
        self.run(FileOps.download_cmd(compose_url, f"{base_dir}/docker-compose.yml"), "Download docker-compose.yml")

        generated = {
            "HOMARR_ENCRYPTION_KEY": secrets.token_hex(32),
            "PIHOLE_PASSWORD": generate_password(),
            "UNIFI_DB_PASSWORD": generate_password(),
        }
        logger.info("Creating environment file...")
        env = self.env_file(self.container_ip() or "", generated)
        self.run(FileOps.write_cmd(f"{base_dir}/.env", env, mode="600"), "Write .env")

        logger.info("Starting Docker services...")
        self.run(Docker.compose_up_cmd(base_dir), "Start Docker services")
        compose_file = f"{base_dir}/docker-compose.yml"
        return InstallOutcome(
            credentials={
                "Pi-hole Password": generated["PIHOLE_PASSWORD"],
                "UniFi DB Password": generated["UNIFI_DB_PASSWORD"],
            },
            notes=[
                f"Enter container:   pct enter {self.ctid}",
                f"View logs:         pct exec {self.ctid} -- docker compose -f {compose_file} logs -f",
                f"Update services:   hlab update",
                f"Enable Twingate:   add tokens to {base_dir}/.env and uncomment the twingate service",
            ],
        )

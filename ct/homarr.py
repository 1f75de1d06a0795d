"""
Homarr - dashboard run with docker compose
"""
import logging

import yaml

from cli import Docker, FileOps
from libs.catalog import ServiceKind
from .base import DockerInstaller, InstallOutcome

logger = logging.getLogger(__name__)


class HomarrInstaller(DockerInstaller):
    """Install Docker and Homarr"""
    kind = ServiceKind.HOMARR
    description = "Homarr installation"

    def compose_file(self) -> str:
        data_dir = self.params["data_dir"]
        port = self.definition.port
        compose = {
            "services": {
                "homarr": {
                    "image": self.definition.image,
                    "container_name": "homarr",
                    "restart": "unless-stopped",
                    "ports": [f"{port}:{port}"],
                    "volumes": [
                        f"{data_dir}/configs:/app/data/configs",
                        f"{data_dir}/icons:/app/public/icons",
                        f"{data_dir}/data:/data",
                    ],
                    "environment": [f"TZ={self.host.timezone}"],
                },
            },
        }
        return yaml.safe_dump(compose, sort_keys=False)

    def install(self) -> InstallOutcome:
        data_dir = self.params["data_dir"]
        compose_dir = self.params["compose_dir"]
        self.install_docker()
        logger.info("Deploying Homarr...")
        self.run(
            FileOps.mkdirs_under_cmd(data_dir, ["configs", "icons", "data"]) + " && " + FileOps.mkdir_cmd(compose_dir),
            "Create Homarr directories",
        )
        self.run(FileOps.write_cmd(f"{compose_dir}/docker-compose.yml", self.compose_file()), "Write docker-compose.yml")
        self.run(Docker.compose_up_cmd(compose_dir), "Start Homarr")
        return InstallOutcome()

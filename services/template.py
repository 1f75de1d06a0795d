"""
Template Service - makes sure the OS template is in the local cache
"""
import logging

from cli.pveam import Pveam, Pvesm
from libs.errors import TemplateNotFound
from .lxc import LXCService

logger = logging.getLogger(__name__)


class TemplateService:
    """Resolves and downloads container templates with pveam"""

    def __init__(self, lxc_service: LXCService):
        self.lxc = lxc_service

    def ensure_template(self, pattern: str, storage: str = "local") -> str:
        """
        Find the newest template matching ``pattern`` and download it if needed
        Args:
            pattern: Substring of the template name (e.g. debian-12-standard)
            storage: Storage holding templates
        Returns:
            Template volume id usable with pct create (storage:vztmpl/name)
        """
        logger.info("Checking for %s template...", pattern)
        self.lxc.run(Pveam.update_cmd(), "Update template catalog", timeout=300)
        output = self.lxc.run(Pveam.available_cmd(), "List available templates", timeout=120)
        template = Pveam.select_latest(Pveam.parse_available(output), pattern)
        if not template:
            raise TemplateNotFound(f"No {pattern} template found in repository")
        cached, _ = self.lxc.execute(Pveam.cached_check_cmd(template), timeout=30)
        if Pveam.parse_exists(cached):
            logger.info("Template already exists: %s", template)
        else:
            logger.info("Downloading template: %s", template)
            self.lxc.run(Pveam.download_cmd(storage, template), f"Download template {template}", timeout=1800)
            logger.info("Template downloaded: %s", template)
        return f"{storage}:vztmpl/{template}"

    def storages(self):
        """Storage names known to the host."""
        output, _ = self.lxc.execute(Pvesm.status_cmd(), timeout=60)
        return Pvesm.parse_storages(output)

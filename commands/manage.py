"""Container management: list, urls, resources, update, backup, start, stop, enter."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, TYPE_CHECKING
from cli import Apt
from libs.catalog import ServiceDefinition
from libs.command import Command
from libs.errors import InvalidInput
from libs.logger import get_logger
if TYPE_CHECKING:
    from services.backup import BackupService
logger = get_logger(__name__)

DEFAULT_BACKUP_STORAGE = "local"
ROW_FORMAT = "%-6s %-15s %-8s %-8s %-8s %-8s"
CPU_CMD = "top -bn1 | grep 'Cpu(s)' | awk '{print $2}' | cut -d'%' -f1"
MEM_CMD = "free -h | awk 'NR==2{print $3}'"
DISK_CMD = "df -h / | awk 'NR==2{print $3}'"

MENU = (
    "List containers",
    "Show service URLs",
    "Show resource usage",
    "Update all containers",
    "Backup all containers",
    "Start all containers",
    "Stop all containers",
    "Enter container console",
    "Exit",
)


@dataclass
class Manage(Command):
    """Day-two operations over the service containers on the host."""
    backup_service: Optional["BackupService"] = field(default=None)

    def definition_for(self, name: str) -> Optional[ServiceDefinition]:
        """Match a container name to a service by hostname or service key."""
        lowered = name.lower()
        for definition in self.catalog:
            if lowered == definition.hostname.lower() or definition.kind.value.lower() in lowered:
                return definition
        return None

    def service_containers(self) -> List[Tuple[int, str, str, ServiceDefinition]]:
        """(ctid, status, name, definition) for every container running a known service."""
        rows = []
        for ctid, status, name in self.pct_service.list():
            definition = self.definition_for(name)
            if definition is not None:
                rows.append((ctid, status, name, definition))
        return rows

    def list_containers(self) -> int:
        logger.info("=" * 38)
        logger.info("  Active LXC Containers")
        logger.info("=" * 38)
        containers = self.service_containers()
        if not containers:
            logger.warning("No service containers found")
            return 0
        for ctid, status, name, definition in containers:
            logger.info("%-6s %-8s %-20s %s", ctid, status, name, definition.display_name)
        return 0

    def show_urls(self) -> int:
        logger.info("Service Access URLs:")
        logger.info("=" * 38)
        for ctid, _, _, definition in self.service_containers():
            ip = self.pct_service.ip_address(ctid)
            if not ip:
                logger.warning("%s (CT %s): no IP address (not running?)", definition.display_name, ctid)
                continue
            logger.info("%s (CT %s): %s", definition.display_name, ctid, definition.access_url(ip))
            for label, url in definition.extra_links(ip).items():
                logger.info("    %s: %s", label, url)
        logger.info("=" * 38)
        return 0

    def _probe(self, ctid: int, command: str) -> str:
        output, exit_code = self.pct_service.execute(ctid, command, timeout=30)
        if exit_code != 0 or not output:
            return "N/A"
        return output.strip().splitlines()[-1]

    def show_resources(self) -> int:
        logger.info("=" * 38)
        logger.info("  Container Resource Usage")
        logger.info("=" * 38)
        logger.info(ROW_FORMAT, "CTID", "Name", "Status", "CPU%", "MEM", "DISK")
        logger.info("-" * 38)
        for ctid, _, name, _ in self.service_containers():
            status = self.pct_service.status(ctid)
            if status == "running":
                row = (self._probe(ctid, CPU_CMD), self._probe(ctid, MEM_CMD), self._probe(ctid, DISK_CMD))
            else:
                row = ("N/A", "N/A", "N/A")
            logger.info(ROW_FORMAT, ctid, name, status, *row)
        logger.info("=" * 38)
        return 0

    def update_all(self) -> int:
        logger.info("Updating all service containers...")
        for ctid, _, name, definition in self.service_containers():
            logger.info("Updating %s (CT %s)...", name, ctid)
            self.pct_service.run(ctid, Apt.upgrade_cmd(), "apt-get upgrade")
            for command in definition.update:
                self.pct_service.run(ctid, command, f"{definition.display_name} update")
            logger.info("%s updated", name)
        return 0

    def backup_all(self, storage: Optional[str] = None) -> int:
        storage = storage or DEFAULT_BACKUP_STORAGE
        logger.info("Backing up service containers to %s...", storage)
        for ctid, _, name, _ in self.service_containers():
            logger.info("Backing up %s (CT %s)...", name, ctid)
            self.backup_service.snapshot(ctid, storage)
            logger.info("%s backup complete", name)
        return 0

    def start_all(self) -> int:
        logger.info("Starting all service containers...")
        for ctid, status, _, _ in self.service_containers():
            if status == "running":
                continue
            self.pct_service.start(ctid)
        logger.info("All containers started")
        return 0

    def stop_all(self) -> int:
        logger.info("Stopping all service containers...")
        for ctid, status, _, _ in self.service_containers():
            if status == "stopped":
                continue
            self.pct_service.stop(ctid)
        logger.info("All containers stopped")
        return 0

    def enter(self, ctid: Optional[str] = None) -> int:
        if not ctid:
            self.list_containers()
            ctid = self.prompt("Enter Container ID: ")
        if not str(ctid).isdigit():
            raise InvalidInput(f"Invalid Container ID '{ctid}'. Must be a number.")
        return self.pct_service.enter(int(ctid))

    def menu(self) -> int:
        """Numbered interactive menu shown when no command is given."""
        logger.info("=" * 38)
        logger.info("  LXC Container Management")
        logger.info("=" * 38)
        for number, label in enumerate(MENU, 1):
            logger.info("%d) %s", number, label)
        logger.info("=" * 38)
        choice = self.prompt(f"Select an option [1-{len(MENU)}]: ")
        if choice == "5":
            return self.backup_all(self.prompt(f"Enter storage location (default: {DEFAULT_BACKUP_STORAGE}): "))
        actions = {
            "1": self.list_containers,
            "2": self.show_urls,
            "3": self.show_resources,
            "4": self.update_all,
            "6": self.start_all,
            "7": self.stop_all,
            "8": self.enter,
            "9": lambda: 0,
        }
        if choice not in actions:
            raise InvalidInput("Invalid option")
        return actions[choice]()

    def run(self, args) -> int:
        action = getattr(args, "command", None)
        if action == "list":
            return self.list_containers()
        if action == "urls":
            return self.show_urls()
        if action == "resources":
            return self.show_resources()
        if action == "update":
            return self.update_all()
        if action == "backup":
            return self.backup_all(getattr(args, "storage", None))
        if action == "start":
            return self.start_all()
        if action == "stop":
            return self.stop_all()
        if action == "enter":
            return self.enter(getattr(args, "ctid", None))
        return self.menu()

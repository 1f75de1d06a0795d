"""Interactive installer: prompt for network settings and deploy chosen services."""
from __future__ import annotations
import ipaddress
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from libs.catalog import ServiceKind
from libs.command import Command
from libs.config import DHCP, MIN_CTID, HostConfig, ServiceSpec, validate_address, validate_hostname
from libs.errors import ConfigError, InvalidInput
from libs.logger import get_logger
from .deploy import Provisioner, ProvisionResult, log_summary
logger = get_logger(__name__)

DEFAULT_STORAGE = "local-lvm"
DEFAULT_BRIDGE = "vmbr0"
MENU_KINDS = (
    ServiceKind.PIHOLE,
    ServiceKind.TRILIUM,
    ServiceKind.HOMARR,
    ServiceKind.OBSERVIUM,
    ServiceKind.UNIFI,
)


@dataclass
class Install(Command):
    """Prompt-driven deployment of one or all application services."""
    template_service: Optional[object] = field(default=None)
    provisioner_factory: Optional[Callable[..., Provisioner]] = field(default=None)

    def ask(self, message: str, default: str = "") -> str:
        return self.prompt(message) or default

    def select_storage(self) -> str:
        logger.info("Available storage:")
        for name in self.template_service.storages():
            logger.info("  %s", name)
        return self.ask(f"Enter storage name (default: {DEFAULT_STORAGE}): ", DEFAULT_STORAGE)

    def network_settings(self) -> HostConfig:
        storage = self.select_storage()
        bridge = self.ask(f"Enter bridge (default: {DEFAULT_BRIDGE}): ", DEFAULT_BRIDGE)
        use_dhcp = self.ask("Use DHCP for all containers? (y/n, default: y): ", "y")
        gateway = None
        if use_dhcp.lower().startswith("n"):
            raw = self.prompt("Enter gateway (e.g., 10.1.10.254): ")
            try:
                gateway = str(ipaddress.ip_address(raw))
            except ValueError:
                raise InvalidInput(f"Invalid gateway '{raw}'") from None
        return HostConfig(storage=storage, bridge=bridge, gateway=gateway)

    def choose_services(self) -> List[ServiceKind]:
        logger.info("=" * 38)
        logger.info("  Proxmox LXC Deployment")
        logger.info("=" * 38)
        for number, kind in enumerate(MENU_KINDS, 1):
            logger.info("%d) Deploy %s", number, self.catalog[kind].display_name)
        all_choice = len(MENU_KINDS) + 1
        logger.info("%d) Deploy All", all_choice)
        logger.info("%d) Exit", all_choice + 1)
        logger.info("=" * 38)
        choice = self.prompt(f"Select an option [1-{all_choice + 1}]: ")
        if not choice.isdigit() or not 1 <= int(choice) <= all_choice + 1:
            raise InvalidInput("Invalid option")
        number = int(choice)
        if number == all_choice + 1:
            return []
        if number == all_choice:
            return list(MENU_KINDS)
        return [MENU_KINDS[number - 1]]

    def ask_ctid(self, display_name: str) -> int:
        suggested = self.pct_service.next_free_id(MIN_CTID)
        logger.info("Next available Container ID: %s", suggested)
        raw = self.prompt(f"Enter Container ID for {display_name} (press Enter for {suggested}): ")
        if not raw:
            return suggested
        if not raw.isdigit():
            raise InvalidInput("Invalid Container ID. Must be a number.")
        ctid = int(raw)
        if ctid < MIN_CTID:
            raise InvalidInput(f"Container ID must be {MIN_CTID} or higher.")
        if self.pct_service.exists(ctid):
            raise InvalidInput(f"Container ID {ctid} already exists!")
        return ctid

    def ask_hostname(self, display_name: str, default: str) -> str:
        hostname = self.ask(f"Enter hostname for {display_name} (press Enter for '{default}'): ", default)
        try:
            return validate_hostname(hostname)
        except ConfigError as err:
            raise InvalidInput(str(err)) from None

    def ask_address(self, hostname: str, host: HostConfig, example: str) -> str:
        if not host.gateway:
            return DHCP
        address = self.prompt(f"Enter IP address for {hostname} (e.g., {example}): ")
        try:
            return validate_address(address)
        except ConfigError as err:
            raise InvalidInput(str(err)) from None

    def build_spec(self, kind: ServiceKind, host: HostConfig) -> ServiceSpec:
        definition = self.catalog[kind]
        ctid = self.ask_ctid(definition.display_name)
        hostname = self.ask_hostname(definition.display_name, definition.hostname)
        address = self.ask_address(hostname, host, definition.address)
        return ServiceSpec(
            name=definition.display_name,
            kind=kind,
            enabled=True,
            ctid=ctid,
            hostname=hostname,
            address=address,
            gateway=host.gateway,
            cores=definition.cores,
            memory=definition.memory,
            disk=definition.disk,
        )

    def run(self, args) -> int:
        selected = getattr(args, "service", None)
        kinds = [ServiceKind.parse(selected)] if selected else None

        template = self.template_service.ensure_template(HostConfig.template, HostConfig.template_storage)
        host = self.network_settings()
        provisioner = self.provisioner_factory(host=host, template=template)

        if kinds is None:
            kinds = self.choose_services()
            if not kinds:
                return 0
        results: List[ProvisionResult] = []
        for kind in kinds:
            results.append(provisioner.provision(self.build_spec(kind, host)))
        log_summary(results)
        logger.info("Deployment complete!")
        return 0

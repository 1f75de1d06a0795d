"""Docker services host: one container running the whole compose stack."""
from __future__ import annotations
import ipaddress
from dataclasses import dataclass, field
from typing import Callable, Optional
from libs.catalog import ServiceKind
from libs.command import Command
from libs.config import HostConfig, ServiceSpec, validate_spec
from libs.errors import ConfigError, InvalidInput
from libs.logger import get_logger
from .deploy import Provisioner, ProvisionStatus
logger = get_logger(__name__)

DEFAULT_GATEWAY = "10.1.10.254"
DEFAULT_STORAGE = "VM_Data"
DEFAULT_BRIDGE = "vmbr0"


@dataclass
class ComposeDeploy(Command):
    """Prompt for a single docker-compose host, confirm, and provision it."""
    provisioner_factory: Optional[Callable[..., Provisioner]] = field(default=None)

    def ask(self, message: str, default: str = "") -> str:
        return self.prompt(message) or default

    def ask_required(self, message: str) -> str:
        value = self.prompt(message)
        while not value:
            logger.error("IP address is required!")
            value = self.prompt(message)
        return value

    def gather(self) -> tuple[ServiceSpec, HostConfig]:
        definition = self.catalog[ServiceKind.COMPOSE]
        ctid = self.ask(f"Enter Container ID (default: {definition.ctid}): ", str(definition.ctid))
        hostname = self.ask(f"Enter Hostname (default: {definition.hostname}): ", definition.hostname)
        address = self.ask_required(f"Enter IP address with CIDR (e.g., {definition.address}): ")
        gateway = self.ask(f"Enter Gateway (default: {DEFAULT_GATEWAY}): ", DEFAULT_GATEWAY)
        dns = self.ask(f"Enter DNS server (default: {DEFAULT_GATEWAY}): ", DEFAULT_GATEWAY)
        storage = self.ask(f"Enter Storage (default: {DEFAULT_STORAGE}): ", DEFAULT_STORAGE)
        bridge = self.ask(f"Enter Bridge (default: {DEFAULT_BRIDGE}): ", DEFAULT_BRIDGE)
        if not ctid.isdigit():
            raise InvalidInput(f"Invalid Container ID '{ctid}'. Must be a number.")
        for label, value in (("gateway", gateway), ("DNS server", dns)):
            try:
                ipaddress.ip_address(value)
            except ValueError:
                raise InvalidInput(f"Invalid {label} '{value}'") from None
        host = HostConfig(storage=storage, bridge=bridge, gateway=gateway, nameserver=dns)
        try:
            spec = validate_spec(ServiceSpec(
                name=definition.display_name,
                kind=ServiceKind.COMPOSE,
                enabled=True,
                ctid=int(ctid),
                hostname=hostname,
                address=address,
                gateway=gateway,
                cores=definition.cores,
                memory=definition.memory,
                disk=definition.disk,
            ))
        except ConfigError as err:
            raise InvalidInput(str(err)) from None
        return spec, host

    def run(self, args) -> int:
        logger.info("=" * 38)
        logger.info("  Docker Services Auto-Deployment")
        logger.info("=" * 38)
        spec, host = self.gather()

        logger.info("")
        logger.info("Configuration Summary:")
        logger.info("  Container ID: %s", spec.ctid)
        logger.info("  Hostname: %s", spec.hostname)
        logger.info("  IP: %s", spec.address)
        logger.info("  Gateway: %s", host.gateway)
        logger.info("  DNS: %s", host.nameserver)
        logger.info("  Storage: %s", host.storage)
        logger.info("  Bridge: %s", host.bridge)
        logger.info("")
        if not self.prompt("Continue? (y/n): ").lower().startswith("y"):
            logger.info("Aborted by user")
            return 0

        result = self.provisioner_factory(host=host).provision(spec)
        if result.status == ProvisionStatus.SKIPPED_EXISTS:
            logger.error("Container %s already exists", spec.ctid)
            return 1

        logger.info("=" * 38)
        logger.info("  Deployment Complete!")
        logger.info("=" * 38)
        logger.info("Access your services:")
        logger.info("  %-18s %s", "Homarr Dashboard:", result.access_url)
        for label, url in result.links.items():
            logger.info("  %-18s %s", f"{label}:", url)
        if result.credentials:
            logger.warning("IMPORTANT - Save these credentials:")
            for label, secret in result.credentials.items():
                logger.info("  %s: %s", label, secret)
        logger.info("Useful commands:")
        for note in result.notes:
            logger.info("  %s", note)
        return 0

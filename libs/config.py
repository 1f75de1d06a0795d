"""
Configuration data model - class-based representation of the deployment config

The deployment config is a shell-style key=value file:

    STORAGE="VM_Data"
    TRILIUM_ENABLED=true
    TRILIUM_CTID=101
    TRILIUM_IP="10.1.10.11/24"
"""
import ipaddress
import logging
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .catalog import Catalog, ServiceKind
from .errors import ConfigError, ConfigMissing

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("/root/deployment-config.conf")
DHCP = "dhcp"
MIN_CTID = 100
HOSTNAME_RE = re.compile(r"^[a-zA-Z0-9-]+$")
KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TRUE_VALUES = ("true", "yes", "on", "1")
FALSE_VALUES = ("false", "no", "off", "0", "")
FAILURE_POLICIES = ("abort", "continue")


@dataclass
class SSHConfig:
    """SSH settings for a remote Proxmox host"""
    connect_timeout: int = 10
    username: str = "root"
    port: int = 22
    look_for_keys: bool = True
    allow_agent: bool = True


@dataclass
class HostConfig:  # pylint: disable=too-many-instance-attributes
    """Proxmox host settings shared by every container"""
    storage: str = "local-lvm"
    bridge: str = "vmbr0"
    gateway: Optional[str] = None
    nameserver: Optional[str] = None
    template_storage: str = "local"
    template: str = "debian-12-standard"
    swap: int = 512
    boot_delay: int = 5
    on_failure: str = "abort"
    timezone: str = "Europe/London"
    compose_url: Optional[str] = None

    @property
    def dns(self) -> Optional[str]:
        """Nameserver handed to containers (falls back to the gateway)."""
        return self.nameserver or self.gateway


@dataclass(frozen=True)
class ServiceSpec:  # pylint: disable=too-many-instance-attributes
    """One service container to provision"""
    name: str
    kind: ServiceKind
    enabled: bool
    ctid: int
    hostname: str
    address: str
    gateway: Optional[str]
    cores: int
    memory: int
    disk: int

    @property
    def uses_dhcp(self) -> bool:
        return self.address == DHCP

    @property
    def ip(self) -> Optional[str]:
        """Address without prefix length (None for DHCP)."""
        if self.uses_dhcp:
            return None
        return str(ipaddress.ip_interface(self.address).ip)


@dataclass
class DeployConfig:
    """Complete deployment configuration: host settings and service list"""
    host: HostConfig
    services: List[ServiceSpec] = field(default_factory=list)
    source: Optional[Path] = None

    @property
    def enabled_services(self) -> List[ServiceSpec]:
        return [spec for spec in self.services if spec.enabled]

    @classmethod
    def from_dict(cls, data: Dict[str, str], catalog: Catalog, source: Optional[Path] = None) -> "DeployConfig":
        """Create DeployConfig from parsed key=value pairs"""
        host = HostConfig(
            storage=data.get("STORAGE", HostConfig.storage),
            bridge=data.get("BRIDGE", HostConfig.bridge),
            gateway=_parse_gateway(data.get("GATEWAY")),
            nameserver=data.get("NAMESERVER") or None,
            template_storage=data.get("TEMPLATE_STORAGE", HostConfig.template_storage),
            template=data.get("TEMPLATE", HostConfig.template),
            swap=_parse_int(data, "SWAP", HostConfig.swap),
            boot_delay=_parse_int(data, "BOOT_DELAY", HostConfig.boot_delay),
            on_failure=_parse_policy(data.get("ON_FAILURE", HostConfig.on_failure)),
            timezone=data.get("TIMEZONE", HostConfig.timezone),
            compose_url=data.get("COMPOSE_URL") or None,
        )
        services = []
        for definition in catalog:
            prefix = definition.kind.value
            enabled = parse_bool(data.get(f"{prefix}_ENABLED", "false"), f"{prefix}_ENABLED")
            spec = ServiceSpec(
                name=definition.display_name,
                kind=definition.kind,
                enabled=enabled,
                ctid=_parse_int(data, f"{prefix}_CTID", definition.ctid),
                hostname=data.get(f"{prefix}_HOSTNAME", definition.hostname),
                address=data.get(f"{prefix}_IP", definition.address),
                gateway=host.gateway,
                cores=_parse_int(data, f"{prefix}_CORES", definition.cores),
                memory=_parse_int(data, f"{prefix}_MEMORY", definition.memory),
                disk=_parse_int(data, f"{prefix}_DISK", definition.disk),
            )
            if enabled:
                validate_spec(spec)
            services.append(spec)
        config = cls(host=host, services=services, source=source)
        _check_unique_ctids(config.enabled_services)
        return config


def parse_bool(value: str, key: str = "value") -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be true or false, got '{value}'")


def _parse_int(data: Dict[str, str], key: str, default: int) -> int:
    raw = data.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got '{raw}'") from None


def _parse_policy(value: str) -> str:
    policy = value.strip().lower()
    if policy not in FAILURE_POLICIES:
        raise ConfigError(f"ON_FAILURE must be one of {', '.join(FAILURE_POLICIES)}, got '{value}'")
    return policy


def _parse_gateway(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        raise ConfigError(f"GATEWAY is not a valid address: '{value}'") from None


def validate_ctid(ctid: int) -> int:
    if ctid < MIN_CTID:
        raise ConfigError(f"Container ID {ctid} is below the minimum of {MIN_CTID}")
    return ctid


def validate_hostname(hostname: str) -> str:
    if not HOSTNAME_RE.match(hostname):
        raise ConfigError(f"Invalid hostname '{hostname}': use only letters, numbers, and hyphens")
    return hostname


def validate_address(address: str) -> str:
    """Accept CIDR notation (10.1.10.11/24) or the literal 'dhcp'."""
    if address == DHCP:
        return address
    if "/" not in address:
        raise ConfigError(f"Address '{address}' must include a prefix length (e.g. 10.1.10.11/24)")
    try:
        ipaddress.ip_interface(address)
    except ValueError:
        raise ConfigError(f"Address '{address}' is not valid CIDR notation") from None
    return address


def validate_spec(spec: ServiceSpec) -> ServiceSpec:
    """Validate a service entry, raising ConfigError naming the service."""
    try:
        validate_ctid(spec.ctid)
        validate_hostname(spec.hostname)
        validate_address(spec.address)
    except ConfigError as err:
        raise ConfigError(f"{spec.kind.value}: {err}") from err
    for attr in ("cores", "memory", "disk"):
        if getattr(spec, attr) <= 0:
            raise ConfigError(f"{spec.kind.value}: {attr} must be positive")
    return spec


def _check_unique_ctids(specs: List[ServiceSpec]):
    seen: Dict[int, str] = {}
    for spec in specs:
        if spec.ctid in seen:
            raise ConfigError(f"Container ID {spec.ctid} is used by both {seen[spec.ctid]} and {spec.kind.value}")
        seen[spec.ctid] = spec.kind.value


def parse_env(text: str) -> Dict[str, str]:
    """Parse shell-style KEY=value lines (quotes, comments and 'export' allowed)."""
    values: Dict[str, str] = {}
    for lineno, raw_line in enumerate(text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as err:
            raise ConfigError(f"line {lineno}: {err}") from err
        if tokens and tokens[0] == "export":
            tokens = tokens[1:]
        if len(tokens) != 1 or "=" not in tokens[0]:
            raise ConfigError(f"line {lineno}: expected KEY=value, got '{line}'")
        key, value = tokens[0].split("=", 1)
        if not KEY_RE.match(key):
            raise ConfigError(f"line {lineno}: invalid key '{key}'")
        values[key] = value
    return values


def load_config(path, catalog: Catalog) -> DeployConfig:
    """Load the deployment config, writing an example and raising ConfigMissing if absent."""
    config_path = Path(path)
    if not config_path.exists():
        write_example_config(config_path, catalog)
        raise ConfigMissing(config_path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigError(f"Error reading configuration {config_path}: {err}") from err
    try:
        data = parse_env(text)
    except ConfigError as err:
        raise ConfigError(f"{config_path}: {err}") from err
    return DeployConfig.from_dict(data, catalog, source=config_path)


def example_config(catalog: Catalog) -> str:
    """Render an example deployment config from the catalog defaults."""
    lines = [
        "# Proxmox LXC Deployment Configuration",
        "# Edit this file with your settings, then run: hlab deploy",
        "",
        "# Global Settings",
        'STORAGE="VM_Data"',
        'BRIDGE="vmbr0"',
        'GATEWAY="10.1.10.254"',
        "",
        "# What to do when a service fails to install: abort | continue",
        "ON_FAILURE=abort",
        "",
        "# Service Deployments (set ENABLED=true to deploy)",
        "# Format: SERVICE_ENABLED, SERVICE_CTID, SERVICE_HOSTNAME, SERVICE_IP",
        "# Optional: SERVICE_CORES, SERVICE_MEMORY (MB), SERVICE_DISK (GB)",
    ]
    enabled_by_default = (ServiceKind.TRILIUM, ServiceKind.HOMARR)
    for definition in catalog:
        prefix = definition.kind.value
        enabled = "true" if definition.kind in enabled_by_default else "false"
        lines.extend([
            "",
            f"# {definition.display_name}",
            f"{prefix}_ENABLED={enabled}",
            f"{prefix}_CTID={definition.ctid}",
            f'{prefix}_HOSTNAME="{definition.hostname}"',
            f'{prefix}_IP="{definition.address}"',
        ])
    return "\n".join(lines) + "\n"


def write_example_config(path: Path, catalog: Catalog) -> Path:
    logger.error("Config file not found: %s", path)
    logger.info("Creating example config file...")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(example_config(catalog), encoding="utf-8")
    except OSError as err:
        raise ConfigError(f"Cannot write example config {path}: {err}") from err
    return path

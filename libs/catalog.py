"""
Service catalog - per-service defaults and install data loaded from catalog.yaml
"""
import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

CATALOG_FILE = Path(__file__).parent / "catalog.yaml"


class ServiceKind(Enum):
    """Service kinds; the value doubles as the configuration key prefix"""
    PIHOLE = "PIHOLE"
    TRILIUM = "TRILIUM"
    HOMARR = "HOMARR"
    OBSERVIUM = "OBSERVIUM"
    UNIFI = "UNIFI"
    COMPOSE = "COMPOSE"

    @classmethod
    def parse(cls, value: str) -> "ServiceKind":
        """Resolve a kind from a user supplied name (case-insensitive)."""
        key = value.strip().upper().replace("-", "")
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(kind.value.lower() for kind in cls)
            raise ConfigError(f"Unknown service '{value}' (expected one of: {valid})") from None


def host_ip(address: str) -> str:
    """Strip the prefix length from a CIDR address."""
    return str(ipaddress.ip_interface(address).ip)


@dataclass(frozen=True)
class DockerSource:
    """Docker engine apt repository"""
    gpg_url: str
    repository: str
    packages: List[str]


@dataclass(frozen=True)
class ServiceDefinition:  # pylint: disable=too-many-instance-attributes
    """Catalog entry for one service kind"""
    kind: ServiceKind
    display_name: str
    ctid: int
    hostname: str
    address: str
    cores: int
    memory: int
    disk: int
    scheme: str = "http"
    port: Optional[int] = None
    path: str = ""
    docker: bool = False
    image: Optional[str] = None
    packages: List[str] = field(default_factory=list)
    update: List[str] = field(default_factory=list)
    links: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)

    def access_url(self, ip: str) -> str:
        """Access URL for a container reachable at ``ip`` (bare or CIDR)."""
        if "/" in ip:
            ip = host_ip(ip)
        default_port = {"http": 80, "https": 443}.get(self.scheme)
        port = f":{self.port}" if self.port and self.port != default_port else ""
        return f"{self.scheme}://{ip}{port}{self.path}"

    def extra_links(self, ip: str) -> Dict[str, str]:
        """Additional URLs for hosts that run several applications."""
        if "/" in ip:
            ip = host_ip(ip)
        return {label: url.format(ip=ip) for label, url in self.links.items()}


@dataclass
class Catalog:
    """All service definitions plus shared install data"""
    services: Dict[ServiceKind, ServiceDefinition]
    docker: DockerSource
    base_packages: List[str] = field(default_factory=list)

    def __getitem__(self, kind: ServiceKind) -> ServiceDefinition:
        return self.services[kind]

    def __iter__(self):
        return iter(self.services.values())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        """Create Catalog from dictionary (loaded from YAML)"""
        services = {}
        for key, entry in (data.get("services") or {}).items():
            kind = ServiceKind.parse(key)
            try:
                services[kind] = ServiceDefinition(
                    kind=kind,
                    display_name=entry["display_name"],
                    ctid=int(entry["ctid"]),
                    hostname=entry["hostname"],
                    address=entry["address"],
                    cores=int(entry["cores"]),
                    memory=int(entry["memory"]),
                    disk=int(entry["disk"]),
                    scheme=entry.get("scheme", "http"),
                    port=entry.get("port"),
                    path=entry.get("path", ""),
                    docker=bool(entry.get("docker", False)),
                    image=entry.get("image"),
                    packages=list(entry.get("packages", [])),
                    update=list(entry.get("update", [])),
                    links=dict(entry.get("links", {})),
                    params=dict(entry.get("params", {})),
                )
            except (KeyError, TypeError, ValueError) as err:
                raise ConfigError(f"Invalid catalog entry for {key}: {err}") from err
        missing = [kind.value for kind in ServiceKind if kind not in services]
        if missing:
            raise ConfigError(f"Catalog has no entry for: {', '.join(missing)}")
        docker_data = data.get("docker") or {}
        try:
            docker = DockerSource(
                gpg_url=docker_data["gpg_url"],
                repository=docker_data["repository"],
                packages=list(docker_data["packages"]),
            )
        except KeyError as err:
            raise ConfigError(f"Catalog docker section is missing {err}") from err
        # keep ServiceKind declaration order regardless of YAML order
        ordered = {kind: services[kind] for kind in ServiceKind}
        return cls(services=ordered, docker=docker, base_packages=list(data.get("base_packages", [])))


def load_catalog(path=None) -> Catalog:
    """Load the service catalog (packaged catalog.yaml unless ``path`` is given)."""
    catalog_path = Path(path) if path else CATALOG_FILE
    try:
        with open(catalog_path, "r", encoding="utf-8") as catalog_file:
            data = yaml.safe_load(catalog_file)
    except (OSError, yaml.YAMLError) as err:
        raise ConfigError(f"Error loading service catalog {catalog_path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigError(f"Service catalog {catalog_path} is not a mapping")
    return Catalog.from_dict(data)

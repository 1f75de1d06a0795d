"""Deploy command orchestration."""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, TYPE_CHECKING
from cli import PCT
from ct import get_installer
from libs.catalog import Catalog
from libs.command import Command
from libs.config import DEFAULT_CONFIG_FILE, HostConfig, ServiceSpec, load_config
from libs.errors import CommandFailed, HlabError
from libs.logger import get_logger
if TYPE_CHECKING:
    from services.pct import PCTService
    from services.template import TemplateService
logger = get_logger(__name__)


class ProvisionStatus(Enum):
    """Outcome of provisioning one service entry"""
    CREATED = "Created"
    SKIPPED_EXISTS = "SkippedExists"
    DISABLED = "Disabled"
    FAILED = "Failed"


@dataclass
class ProvisionResult:
    """Per-entry result consumed by the summary report."""
    spec: ServiceSpec
    status: ProvisionStatus
    access_url: Optional[str] = None
    links: Dict[str, str] = field(default_factory=dict)
    credentials: Dict[str, str] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)
    error: Optional[str] = None
    exit_code: int = 0


class ProvisionAborted(HlabError):
    """Raised when a failed entry stops the batch (ON_FAILURE=abort)."""

    def __init__(self, cause: CommandFailed, results: List[ProvisionResult]):
        super().__init__(str(cause))
        self.cause = cause
        self.exit_code = cause.exit_code
        self.results = results


class Provisioner:
    """Creates, starts and installs one container per enabled service entry."""

    def __init__(
        self,
        catalog: Catalog,
        host: HostConfig,
        pct_service: "PCTService",
        template_service: "TemplateService",
        sleep: Callable[[float], None] = time.sleep,
        template: Optional[str] = None,
    ):
        self.catalog = catalog
        self.host = host
        self.pct = pct_service
        self.templates = template_service
        self.sleep = sleep
        self._template = template

    def ensure_template(self) -> str:
        """Resolve (and download) the OS template once per run."""
        if self._template is None:
            self._template = self.templates.ensure_template(self.host.template, self.host.template_storage)
        return self._template

    def provision(self, spec: ServiceSpec) -> ProvisionResult:
        """
        Provision a single service entry
        Returns:
            ProvisionResult with status Created, SkippedExists or Disabled
        Raises:
            CommandFailed: when any host or container command fails
        """
        if not spec.enabled:
            logger.debug("%s is disabled, skipping", spec.name)
            return ProvisionResult(spec=spec, status=ProvisionStatus.DISABLED)
        if self.pct.exists(spec.ctid):
            logger.warning("Container %s already exists, skipping %s", spec.ctid, spec.name)
            return ProvisionResult(spec=spec, status=ProvisionStatus.SKIPPED_EXISTS)

        definition = self.catalog[spec.kind]
        logger.info("=== Deploying %s ===", spec.name)
        template = self.ensure_template()
        self.pct.create(
            container_id=spec.ctid,
            template=template,
            hostname=spec.hostname,
            cores=spec.cores,
            memory=spec.memory,
            swap=self.host.swap,
            net0=PCT.net0(self.host.bridge, spec.address, spec.gateway),
            storage=self.host.storage,
            rootfs_size=spec.disk,
            nameserver=self.host.dns,
            nesting=definition.docker,
        )
        logger.info("Starting container %s...", spec.ctid)
        self.pct.start(spec.ctid)
        self.sleep(self.host.boot_delay)

        installer = get_installer(spec.kind)(spec, self.catalog, self.host, self.pct)
        logger.info("Running %s in CT %s...", installer.description, spec.ctid)
        outcome = installer.install()

        ip = spec.ip or self.pct.ip_address(spec.ctid)
        result = ProvisionResult(
            spec=spec,
            status=ProvisionStatus.CREATED,
            access_url=definition.access_url(ip) if ip else None,
            links=definition.extra_links(ip) if ip else {},
            credentials=outcome.credentials,
            notes=outcome.notes,
        )
        logger.info("%s deployed on CT %s", spec.name, spec.ctid)
        if result.access_url:
            logger.info("Access %s at: %s", spec.name, result.access_url)
        return result

    def run(self, specs: List[ServiceSpec]) -> List[ProvisionResult]:
        """Provision entries in order, applying the configured failure policy."""
        results: List[ProvisionResult] = []
        for spec in specs:
            try:
                results.append(self.provision(spec))
            except CommandFailed as err:
                logger.error("%s: %s", spec.name, err)
                if err.output_tail:
                    logger.error("Last output:\n%s", err.output_tail)
                results.append(
                    ProvisionResult(
                        spec=spec,
                        status=ProvisionStatus.FAILED,
                        error=str(err),
                        exit_code=err.exit_code,
                    )
                )
                if self.host.on_failure != "continue":
                    raise ProvisionAborted(err, results) from err
        return results


def _log_deploy_plan(specs: List[ServiceSpec]):
    """Log every service entry, marking which will run."""
    logger.info("")
    logger.info("Deploy plan (%d services):", len(specs))
    for spec in specs:
        marker = "RUN" if spec.enabled else "skip"
        logger.info("  [%s] %-4s %s -> %s (%s)", spec.ctid, marker, spec.name, spec.hostname, spec.address)


def log_summary(results: List[ProvisionResult]):
    """Log the end-of-run report: status, URL and credentials per entry."""
    failed = [r for r in results if r.status == ProvisionStatus.FAILED]
    logger.info("\n%s", "=" * 50)
    if failed:
        logger.info("Deploy Complete (with failures)")
    else:
        logger.info("Deploy Complete!")
    logger.info("%s", "=" * 50)
    for result in results:
        spec = result.spec
        logger.info("  - %-16s CT %-5s %s", spec.name, spec.ctid, result.status.value)
        if result.access_url:
            logger.info("      URL: %s", result.access_url)
        for label, url in result.links.items():
            logger.info("      %s: %s", label, url)
        for label, secret in result.credentials.items():
            logger.info("      %s: %s", label, secret)
        for note in result.notes:
            logger.info("      %s", note)
        if result.error:
            logger.info("      Error: %s", result.error)
    if any(r.credentials for r in results):
        logger.warning("SAVE THESE CREDENTIALS! They are not stored anywhere else.")
    logger.info("=" * 50)


@dataclass
class Deploy(Command):
    """Deploy every enabled service from the configuration file."""
    provisioner_factory: Optional[Callable[..., Provisioner]] = field(default=None)

    def run(self, args) -> int:
        config_path = getattr(args, "config", None) or DEFAULT_CONFIG_FILE
        logger.info("=" * 50)
        logger.info("Proxmox LXC Auto-Deployment")
        logger.info("=" * 50)
        logger.info("Loading configuration from %s", config_path)
        cfg = load_config(config_path, self.catalog)
        _log_deploy_plan(cfg.services)

        provisioner = self.provisioner_factory(host=cfg.host)
        try:
            results = provisioner.run(cfg.services)
        except ProvisionAborted as err:
            log_summary(err.results)
            raise
        log_summary(results)
        failed = [r for r in results if r.status == ProvisionStatus.FAILED]
        return failed[0].exit_code if failed else 0

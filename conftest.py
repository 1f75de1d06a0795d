"""
Shared fixtures: an in-memory Proxmox host that records every command
"""
import base64
import re

import pytest

from commands.deploy import Provisioner
from libs.catalog import load_catalog
from libs.config import HostConfig
from services.backup import BackupService
from services.lxc import LXCService
from services.pct import PCTService
from services.template import TemplateService

EXEC_RE = re.compile(r'^pct exec (\d+) -- \S+ -c "echo (\S+) \| base64 -d')
HOSTNAME_RE = re.compile(r"--hostname (\S+)")

PVEAM_AVAILABLE = """system          debian-11-standard_11.7-1_amd64.tar.zst
system          debian-12-standard_12.2-1_amd64.tar.zst
system          debian-12-standard_12.7-1_amd64.tar.zst
system          ubuntu-24.04-standard_24.04-2_amd64.tar.zst"""

PVESM_STATUS = """Name             Type     Status           Total            Used       Available        %
local             dir     active        98497780        12345678        81088644   12.53%
local-lvm     lvmthin     active       832888832        45678901       787209931    5.48%
VM_Data       lvmthin     active      1887436800       123456789      1763980011    6.54%"""

MUTATING_PREFIXES = ("pct create", "pct start", "pct stop", "pct exec", "pveam download", "vzdump", "echo ")


class FakeHost(LXCService):
    """LXCService whose host is a dict of containers instead of a real node."""

    def __init__(self, containers=None, cached=True, ips=None):
        super().__init__(host=None)
        # ctid -> [status, name]
        self.containers = {ctid: list(entry) for ctid, entry in (containers or {}).items()}
        self.cached = cached
        self.ips = dict(ips or {})
        self.commands = []
        self.exec_log = []
        self.failures = []
        self.exec_responses = []
        self.interactive_calls = []

    def fail(self, needle, output="E: Unable to locate package foo", exit_code=100):
        """Make any command containing ``needle`` fail."""
        self.failures.append((needle, output, exit_code))

    def respond(self, needle, output, exit_code=0):
        """Answer container commands containing ``needle`` with ``output``."""
        self.exec_responses.append((needle, output, exit_code))

    @property
    def mutating(self):
        return [cmd for cmd in self.commands if cmd.startswith(MUTATING_PREFIXES)]

    @property
    def created(self):
        return [int(cmd.split()[2]) for cmd in self.commands if cmd.startswith("pct create")]

    def exec_commands(self, ctid):
        return [inner for exec_ctid, inner in self.exec_log if exec_ctid == ctid]

    def execute(self, command, timeout=None):
        self.commands.append(command)
        match = EXEC_RE.match(command)
        if match:
            inner = base64.b64decode(match.group(2)).decode("utf-8")
            self.exec_log.append((int(match.group(1)), inner))
            return self._exec(int(match.group(1)), inner)
        for needle, output, exit_code in self.failures:
            if needle in command:
                return output, exit_code
        parts = command.split()
        if command.startswith("pct status "):
            ctid = int(parts[2])
            if ctid in self.containers:
                return f"status: {self.containers[ctid][0]}", 0
            return f"Configuration file 'nodes/pve/lxc/{ctid}.conf' does not exist", 2
        if command.startswith("pct create "):
            ctid = int(parts[2])
            if ctid in self.containers:
                return f"unable to create CT {ctid} - CT {ctid} already exists on node 'pve'", 255
            self.containers[ctid] = ["stopped", HOSTNAME_RE.search(command).group(1)]
            return "", 0
        if command.startswith("pct start "):
            self.containers[int(parts[2])][0] = "running"
            return "", 0
        if command.startswith("pct stop "):
            self.containers[int(parts[2])][0] = "stopped"
            return "", 0
        if command.startswith("pct list"):
            rows = ["VMID       Status     Lock         Name"]
            for ctid, (status, name) in sorted(self.containers.items()):
                rows.append(f"{ctid:<10} {status:<10} {'':<12} {name}")
            return "\n".join(rows), 0
        if command.startswith("pveam available"):
            return PVEAM_AVAILABLE, 0
        if command.startswith("test -f /var/lib/vz/template/cache"):
            return ("exists" if self.cached else "missing"), 0
        if command.startswith("pvesm status"):
            return PVESM_STATUS, 0
        return "", 0

    def _exec(self, ctid, inner):
        for needle, output, exit_code in self.failures:
            if needle in inner:
                return output, exit_code
        if ctid not in self.containers:
            return f"Configuration file 'nodes/pve/lxc/{ctid}.conf' does not exist", 255
        for needle, output, exit_code in self.exec_responses:
            if needle in inner:
                return output, exit_code
        if inner == "hostname -I":
            return self.ips.get(ctid, ""), 0
        return "", 0

    def interactive(self, command):
        self.interactive_calls.append(command)
        return 0

    def effective_uid(self):
        return 0


class Prompts:
    """Scripted answers for input() style prompts."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def __call__(self, message):
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def pct_service(fake_host):
    return PCTService(fake_host)


@pytest.fixture
def template_service(fake_host):
    return TemplateService(fake_host)


@pytest.fixture
def backup_service(fake_host):
    return BackupService(fake_host)


@pytest.fixture
def host_config():
    return HostConfig(storage="VM_Data", bridge="vmbr0", gateway="10.1.10.254")


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def provisioner_factory(catalog, pct_service, template_service, sleeps):
    def factory(host, template=None):
        return Provisioner(
            catalog=catalog,
            host=host,
            pct_service=pct_service,
            template_service=template_service,
            sleep=sleeps.append,
            template=template,
        )
    return factory

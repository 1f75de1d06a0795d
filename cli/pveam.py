"""
PVEAM (Proxmox VE Appliance Manager) and PVESM command wrappers
"""

import logging
import re
from typing import List, Optional
from .base import CommandWrapper

logger = logging.getLogger(__name__)

TEMPLATE_CACHE_DIR = "/var/lib/vz/template/cache"


def _version_key(name: str):
    """Natural sort key so 12.10 sorts after 12.2 (like sort -V)."""
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", name)]


class Pveam(CommandWrapper):
    """Wrapper for pveam commands - generates command strings"""

    @staticmethod
    def update_cmd() -> str:
        """Generate command to refresh the appliance catalog"""
        return "pveam update 2>&1"

    @staticmethod
    def available_cmd(section: Optional[str] = "system") -> str:
        """Generate command to list downloadable templates"""
        section_flag = f" --section {section}" if section else ""
        return f"pveam available{section_flag} 2>&1"

    @staticmethod
    def download_cmd(storage: str, template: str) -> str:
        """Generate command to download a template into storage"""
        return f"pveam download {storage} {template} 2>&1"

    @staticmethod
    def cached_check_cmd(template: str, cache_dir: str = TEMPLATE_CACHE_DIR) -> str:
        """Generate command to check whether a template is already downloaded"""
        return f"test -f {cache_dir}/{template} && echo exists || echo missing"

    @staticmethod
    def parse_available(output: Optional[str]) -> List[str]:
        """Parse 'pveam available' output into template names"""
        names = []
        if not output:
            return names
        for line in output.splitlines():
            parts = line.split()
            if len(parts) >= 2:
                names.append(parts[1])
        return names

    @staticmethod
    def select_latest(names: List[str], pattern: str) -> Optional[str]:
        """Pick the highest version among names containing ``pattern``."""
        matches = [name for name in names if pattern.lower() in name.lower()]
        if not matches:
            return None
        return sorted(matches, key=_version_key)[-1]

    @staticmethod
    def parse_exists(output: Optional[str]) -> bool:
        return bool(output) and output.strip().endswith("exists")


class Pvesm(CommandWrapper):
    """Wrapper for pvesm commands"""

    @staticmethod
    def status_cmd() -> str:
        """Generate command to list storages"""
        return "pvesm status 2>&1"

    @staticmethod
    def parse_storages(output: Optional[str]) -> List[str]:
        """Storage names from 'pvesm status' (first column, header skipped)."""
        if not output:
            return []
        lines = output.strip().splitlines()
        return [line.split()[0] for line in lines[1:] if line.split()]

"""
Service installers - one installer class per service kind
"""
from typing import Dict, Type

from libs.catalog import ServiceKind
from .base import Installer, InstallOutcome, generate_password
from .compose import ComposeInstaller
from .homarr import HomarrInstaller
from .observium import ObserviumInstaller
from .pihole import PiholeInstaller
from .trilium import TriliumInstaller
from .unifi import UnifiInstaller

INSTALLERS: Dict[ServiceKind, Type[Installer]] = {
    installer.kind: installer
    for installer in (
        PiholeInstaller,
        TriliumInstaller,
        HomarrInstaller,
        ObserviumInstaller,
        UnifiInstaller,
        ComposeInstaller,
    )
}

_missing = [kind.value for kind in ServiceKind if kind not in INSTALLERS]
if _missing:
    raise ImportError(f"No installer registered for: {', '.join(_missing)}")


def get_installer(kind: ServiceKind) -> Type[Installer]:
    """Return the installer class for a service kind"""
    return INSTALLERS[kind]


__all__ = ["INSTALLERS", "Installer", "InstallOutcome", "generate_password", "get_installer"]

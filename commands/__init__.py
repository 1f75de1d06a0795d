"""High-level CLI command implementations."""
from .compose import ComposeDeploy  # noqa: F401
from .deploy import Deploy, ProvisionAborted, ProvisionResult, ProvisionStatus, Provisioner  # noqa: F401
from .interactive import Install  # noqa: F401
from .manage import Manage  # noqa: F401
__all__ = [
    "ComposeDeploy",
    "Deploy",
    "Install",
    "Manage",
    "ProvisionAborted",
    "ProvisionResult",
    "ProvisionStatus",
    "Provisioner",
]

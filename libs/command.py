"""Base class for CLI commands resolved from the DI container."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Optional, TYPE_CHECKING
from libs.errors import InvalidInput
if TYPE_CHECKING:
    from libs.catalog import Catalog
    from services.pct import PCTService


def _default_prompt(message: str) -> str:
    try:
        return input(message).strip()
    except EOFError:
        # stdin closed or redirected (cron, </dev/null)
        raise InvalidInput("No input available") from None


@dataclass
class Command:
    """Shared dependencies of every command."""
    catalog: Optional["Catalog"] = field(default=None)
    pct_service: Optional["PCTService"] = field(default=None)
    prompt: Callable[[str], str] = field(default=_default_prompt)

    def run(self, args) -> int:
        raise NotImplementedError

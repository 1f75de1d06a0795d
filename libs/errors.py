"""
Exception hierarchy shared by the provisioning commands
"""
from typing import Optional


class HlabError(RuntimeError):
    """Base class for errors that end a run with a specific exit code."""
    exit_code = 1


class PrivilegeError(HlabError):
    """Raised when the tool is not running as root on the Proxmox host."""


class ConfigError(HlabError):
    """Raised when the deployment configuration is malformed."""


class ConfigMissing(HlabError):
    """Raised after an example configuration has been written."""
    exit_code = 0

    def __init__(self, path):
        super().__init__(f"Config file not found: {path}")
        self.path = path


class InvalidInput(HlabError):
    """Raised when interactive input fails validation."""


class TemplateNotFound(HlabError):
    """Raised when no OS template matches the configured pattern."""


class CommandFailed(HlabError):
    """Raised when an external command exits non-zero."""

    def __init__(self, description: str, exit_code: Optional[int], output: Optional[str] = None, error_message: Optional[str] = None):
        detail = error_message or f"exit code {exit_code}"
        super().__init__(f"{description} failed: {detail}")
        self.description = description
        # timeouts have no exit status
        self.exit_code = exit_code if exit_code else 1
        self.output = output

    @property
    def output_tail(self) -> str:
        if not self.output:
            return ""
        return "\n".join(self.output.splitlines()[-10:])

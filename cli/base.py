"""
Base command wrapper with error parsing
"""
import re
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Error types that can be detected in command output"""
    NONE = "none"
    TIMEOUT = "timeout"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    PACKAGE_ERROR = "package_error"
    NETWORK_ERROR = "network_error"
    SERVICE_ERROR = "service_error"
    COMMAND_FAILED = "command_failed"


@dataclass
class CommandResult:
    """Structured result from command execution"""
    success: bool
    output: Optional[str]
    error_type: ErrorType
    error_message: Optional[str]
    exit_code: Optional[int]

    def __bool__(self):
        return self.success

    @property
    def failed(self) -> bool:
        return not self.success


class CommandWrapper:
    """Base wrapper for CLI commands - generates command strings and parses results"""

    # (pattern, error_type, description); first match wins
    ERROR_PATTERNS = [
        (r'timed out|timeout', ErrorType.TIMEOUT, 'Command timed out'),
        (r'permission denied|operation not permitted|must be root',
         ErrorType.PERMISSION_DENIED, 'Permission denied'),
        (r'already exists|already in use',
         ErrorType.ALREADY_EXISTS, 'Resource already exists'),
        (r'no space left|out of memory|not enough space',
         ErrorType.RESOURCE_EXHAUSTED, 'Resource exhausted'),
        (r'unable to locate package|has no installation candidate|e:\s*package|dpkg was interrupted',
         ErrorType.PACKAGE_ERROR, 'Package error'),
        (r'could not resolve|temporary failure resolving|network is unreachable|no route to host|failed to fetch|connection refused',
         ErrorType.NETWORK_ERROR, 'Network error'),
        (r'job for .* failed|failed to start|unit .* not found',
         ErrorType.SERVICE_ERROR, 'Service error'),
        (r'no such file|not found|does not exist',
         ErrorType.NOT_FOUND, 'Resource not found'),
    ]

    @staticmethod
    def parse_result(output: Optional[str], exit_code: Optional[int] = None) -> CommandResult:
        """
        Parse command output and return structured result

        Args:
            output: Command output (stdout/stderr combined)
            exit_code: Exit code, None when the command timed out

        Returns:
            CommandResult object
        """
        error_type, error_msg = CommandWrapper._parse_error(output, exit_code)
        return CommandResult(
            success=error_type == ErrorType.NONE,
            output=output,
            error_type=error_type,
            error_message=error_msg,
            exit_code=exit_code,
        )

    @staticmethod
    def _parse_error(output: Optional[str], exit_code: Optional[int]) -> tuple[ErrorType, Optional[str]]:
        if exit_code is None:
            return ErrorType.TIMEOUT, "Command produced no exit status (timeout)"
        if exit_code == 0:
            return ErrorType.NONE, None
        if not output:
            return ErrorType.COMMAND_FAILED, f"Command failed with exit code {exit_code}"
        analysis_output = CommandWrapper._strip_ansi(output)
        for pattern, error_type, description in CommandWrapper.ERROR_PATTERNS:
            if re.search(pattern, analysis_output, re.IGNORECASE):
                error_msg = CommandWrapper._extract_error_message(analysis_output, pattern)
                return error_type, error_msg or description
        return ErrorType.COMMAND_FAILED, f"Command failed with exit code {exit_code}"

    @staticmethod
    def _strip_ansi(output: str) -> str:
        return re.sub(r'\x1B[@-_][0-?]*[ -/]*[@-~]', '', output)

    @staticmethod
    def _extract_error_message(output: str, pattern: str) -> Optional[str]:
        """Return the first output line matching ``pattern``, truncated."""
        for line in output.splitlines():
            if re.search(pattern, line, re.IGNORECASE):
                msg = line.strip()
                if len(msg) > 200:
                    msg = msg[:197] + "..."
                return msg
        return None

"""
Sed command wrappers
"""

import shlex

from .base import CommandWrapper


def _escape_pattern(value: str, delimiter: str) -> str:
    for char in ("\\", ".", "[", "]", "*", "^", "$", delimiter):
        value = value.replace(char, f"\\{char}")
    return value


def _escape_replacement(value: str, delimiter: str) -> str:
    for char in ("\\", "&", delimiter):
        value = value.replace(char, f"\\{char}")
    return value


class Sed(CommandWrapper):
    """Wrapper for sed commands."""

    @staticmethod
    def replace_cmd(path: str, search: str, replacement: str, *, delimiter: str = "|") -> str:
        """Generate sed command replacing a literal string in a file."""
        expression = (
            f"s{delimiter}{_escape_pattern(search, delimiter)}"
            f"{delimiter}{_escape_replacement(replacement, delimiter)}{delimiter}g"
        )
        return f"sed -i {shlex.quote(expression)} {shlex.quote(path)} 2>&1"

"""
File and filesystem command wrappers
"""

import base64
import shlex
from typing import Iterable, Optional

from .base import CommandWrapper


class FileOps(CommandWrapper):
    """Wrapper for common file operations."""

    @staticmethod
    def write_cmd(path: str, content: str, mode: Optional[str] = None) -> str:
        """Generate command that writes literal content to a file via base64."""
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        cmd = f"echo {encoded} | base64 -d > {shlex.quote(path)}"
        if mode:
            cmd += f" && chmod {mode} {shlex.quote(path)}"
        return cmd

    @staticmethod
    def mkdir_cmd(*paths: str) -> str:
        """Generate command to create directories (with parents)."""
        return "mkdir -p " + " ".join(shlex.quote(path) for path in paths) + " 2>&1"

    @staticmethod
    def mkdirs_under_cmd(base: str, relative: Iterable[str]) -> str:
        """Generate command to create several directories below ``base``."""
        paths = [f"{base.rstrip('/')}/{rel}" for rel in relative]
        return FileOps.mkdir_cmd(base, *paths)

    @staticmethod
    def chown_cmd(path: str, owner: str, recursive: bool = False) -> str:
        """Generate command to change ownership."""
        flag = "-R " if recursive else ""
        return f"chown {flag}{owner} {shlex.quote(path)} 2>&1"

    @staticmethod
    def download_cmd(url: str, path: str) -> str:
        """Generate command to download a URL to path."""
        return f"wget -q {shlex.quote(url)} -O {shlex.quote(path)} 2>&1"

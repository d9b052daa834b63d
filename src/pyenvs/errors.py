"""Exception types raised by pyenvs."""

from __future__ import annotations

from typing import List, Optional


class PyenvsError(Exception):
    """Base class for all pyenvs errors."""


class ParseError(PyenvsError, ValueError):
    """Raised when text contains no recognizable Python version."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid version: {text!r}")


class ProcessError(PyenvsError):
    """Raised when an external command is missing, fails or times out."""

    def __init__(
        self,
        command: str,
        args: List[str],
        reason: str,
        returncode: Optional[int] = None,
    ):
        self.command = command
        self.args_list = args
        self.reason = reason
        self.returncode = returncode
        cmdline = " ".join([command, *args])
        message = f"`{cmdline}` failed: {reason}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        super().__init__(message)


class RegistryReadError(PyenvsError):
    """Raised when a registry key exists but cannot be read."""

    def __init__(self, hive: str, arch: str, key: str, cause: Optional[BaseException] = None):
        self.hive = hive
        self.arch = arch
        self.key = key
        self.cause = cause
        message = f"Failed to access registry: {arch}\\{hive}{key}"
        if cause is not None:
            message += f" ({cause})"
        super().__init__(message)

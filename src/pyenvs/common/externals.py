"""External services consumed by recognizers and the resolver.

Everything that touches the machine (files, processes, workspace folders)
goes through these classes so that tests can substitute their own.
"""

from __future__ import annotations

import asyncio
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ..errors import ProcessError
from ..info.types import FileInfo


class OSType(str, Enum):
    WINDOWS = "windows"
    OSX = "osx"
    LINUX = "linux"


def get_os_type(platform: str = sys.platform) -> OSType:
    """Map ``sys.platform`` onto an OSType."""
    if platform.startswith("win"):
        return OSType.WINDOWS
    if platform == "darwin":
        return OSType.OSX
    return OSType.LINUX


class FileSystem:
    """Thin wrapper over the local filesystem."""

    def path_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def list_dir(self, path: str) -> List[str]:
        """List entry names in a directory, empty if it cannot be read."""
        try:
            return sorted(os.listdir(path))
        except OSError:
            return []

    def read_text(self, path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def stat_file(self, path: str) -> FileInfo:
        """Get creation and modification time of a file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        st = os.stat(path)
        return FileInfo(ctime=st.st_ctime, mtime=st.st_mtime)

    def get_file_info(self, path: str) -> Optional[FileInfo]:
        """Like stat_file, but returns None instead of raising."""
        try:
            return self.stat_file(path)
        except OSError:
            return None


@dataclass
class WorkspaceFolders:
    """Workspace folders open in the calling tool. An empty list is valid."""

    folders: List[str] = field(default_factory=list)

    def list_workspace_folders(self) -> List[str]:
        return list(self.folders)


@dataclass(frozen=True)
class ProcessResult:
    stdout: str
    stderr: str = ""


class ProcessRunner:
    """Runs external commands with a timeout."""

    def __init__(self, timeout: float = 15.0):
        """Initialize runner.

        Args:
            timeout: Seconds to wait for a command before killing it
        """
        self.timeout = timeout

    async def run(self, command: str, args: Sequence[str]) -> ProcessResult:
        """Run ``command`` with ``args`` and capture its output.

        Raises:
            ProcessError: If the command is missing, times out or exits non-zero
        """
        args = list(args)
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessError(command, args, f"{command} is missing or is not executable: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ProcessError(command, args, f"timed out after {self.timeout}s") from e

        if process.returncode != 0:
            raise ProcessError(
                command,
                args,
                stderr.decode("utf-8", errors="replace").strip() or "non-zero exit",
                returncode=process.returncode,
            )

        return ProcessResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

"""Python installed from the Microsoft Store."""

from __future__ import annotations

import os

from ..context import ResolverContext
from ..errors import ParseError
from ..info.types import Architecture, PythonEnvInfo, PythonEnvKind, PythonEnvSource, build_env_info
from ..info.version import UNKNOWN_PYTHON_VERSION, parse_version_from_executable
from ..utils.path import path_contains
from .base import Recognizer


def get_windows_store_apps_root(context: ResolverContext) -> str:
    """``%LOCALAPPDATA%\\Microsoft\\WindowsApps``, where store app aliases live."""
    local_app_data = context.getenv("LOCALAPPDATA") or ""
    return os.path.join(local_app_data, "Microsoft", "WindowsApps")


def is_forbidden_store_path(context: ResolverContext, executable: str) -> bool:
    """Check for ``%ProgramFiles%\\WindowsApps``.

    Only admins and the system can read this directory; interpreters there
    should never be executed directly.
    """
    program_files = context.getenv("ProgramFiles") or "Program Files"
    return path_contains(executable, os.path.join(program_files, "WindowsApps"))


class WindowsStoreRecognizer(Recognizer):
    kind = PythonEnvKind.WINDOWS_STORE

    async def identify(self, executable: str) -> bool:
        if path_contains(executable, get_windows_store_apps_root(self.context)):
            return True
        if is_forbidden_store_path(self.context, executable):
            self.log.warning("Windows store recognizer called with Program Files store path: %s", executable)
            return True
        return False

    async def resolve(self, executable: str) -> PythonEnvInfo:
        try:
            version = parse_version_from_executable(executable)
        except ParseError:
            version = UNKNOWN_PYTHON_VERSION

        return build_env_info(
            kind=PythonEnvKind.WINDOWS_STORE,
            executable=executable,
            version=version,
            org="Microsoft",
            arch=Architecture.X64,
            file_info=self.context.fs.get_file_info(executable),
            source=[PythonEnvSource.PATH_ENV_VAR],
        )

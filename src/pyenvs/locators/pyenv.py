"""pyenv (and pyenv-win) managed interpreters."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

from ..common.env_utils import get_python_version_from_path
from ..common.externals import OSType
from ..context import ResolverContext
from ..info.types import PythonEnvInfo, PythonEnvKind, PythonEnvSource, build_env_info
from ..utils.path import basename, get_environment_dir_from_path, is_parent_path
from .base import Recognizer

_PYTHON_ONLY_RE = re.compile(r"^\d+(?:\.\d+){0,2}(?:[a-z]+\d*|-dev)?$", re.IGNORECASE)
_DISTRO_RE = re.compile(r"^(?P<distro>[a-z][a-z_]*?)(?P<py>\d+(?:\.\d+)*)?-(?P<distro_ver>.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class PyenvVersionStrings:
    """Parts of a pyenv version directory name.

    ``3.9.0`` has only ``python_ver``; ``miniconda3-4.7.12`` has
    ``python_ver="3"``, ``distro="miniconda3"``, ``distro_ver="4.7.12"``.
    """

    python_ver: Optional[str] = None
    distro: Optional[str] = None
    distro_ver: Optional[str] = None


def parse_pyenv_version(name: str) -> Optional[PyenvVersionStrings]:
    """Split a pyenv version directory name. Returns None for custom names."""
    if _PYTHON_ONLY_RE.match(name):
        return PyenvVersionStrings(python_ver=name)

    match = _DISTRO_RE.match(name)
    if match:
        py = match.group("py")
        return PyenvVersionStrings(
            python_ver=py,
            distro=f"{match.group('distro')}{py or ''}",
            distro_ver=match.group("distro_ver"),
        )
    return None


def get_pyenv_dir(context: ResolverContext) -> str:
    """Root of the pyenv installation: $PYENV_ROOT or the platform default."""
    root = context.getenv("PYENV_ROOT")
    if root:
        return root
    if context.os_type == OSType.WINDOWS:
        return os.path.join(context.home, ".pyenv", "pyenv-win")
    return os.path.join(context.home, ".pyenv")


def get_pyenv_versions_dir(context: ResolverContext) -> str:
    return os.path.join(get_pyenv_dir(context), "versions")


class PyenvRecognizer(Recognizer):
    """Interpreters under ``<pyenv root>/versions``."""

    kind = PythonEnvKind.PYENV

    async def identify(self, executable: str) -> bool:
        return is_parent_path(
            executable,
            get_pyenv_versions_dir(self.context),
            case_insensitive=self.context.os_type == OSType.WINDOWS,
        )

    async def resolve(self, executable: str) -> PythonEnvInfo:
        location = get_environment_dir_from_path(executable)
        name = basename(location)
        version_strings = parse_pyenv_version(name)
        hint = version_strings.python_ver if version_strings else None

        return build_env_info(
            kind=PythonEnvKind.PYENV,
            executable=executable,
            version=get_python_version_from_path(self.context.fs, executable, hint, log=self.log),
            org=version_strings.distro if version_strings else None,
            display_name=f"{name}:pyenv",
            name=name,
            location=location,
            file_info=self.context.fs.get_file_info(executable),
            source=[PythonEnvSource.PYENV],
        )

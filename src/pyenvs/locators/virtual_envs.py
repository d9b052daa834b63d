"""Virtual environments: pipenv, venv, virtualenvwrapper and virtualenv.

All of them resolve as simple environments; they differ only in how they
are recognized.
"""

from __future__ import annotations

import os

from ..common.env_utils import candidate_env_dirs
from ..common.externals import OSType
from ..context import ResolverContext
from ..info.types import PythonEnvKind
from ..utils.path import basename, dirname, get_environment_dir_from_path, is_parent_path
from .base import Recognizer


def has_pyvenv_cfg(context: ResolverContext, executable: str) -> bool:
    return any(
        context.fs.is_file(os.path.join(env_dir, "pyvenv.cfg"))
        for env_dir in candidate_env_dirs(executable)
    )


def has_activate_script(context: ResolverContext, executable: str) -> bool:
    """Check for ``activate``, ``activate.bat``, ``activate.ps1``... beside the interpreter."""
    return any(
        name.lower().startswith("activate")
        for name in context.fs.list_dir(dirname(executable))
    )


def get_pipfile_name(context: ResolverContext) -> str:
    pipfile = context.getenv("PIPENV_PIPFILE")
    return basename(pipfile) if pipfile else "Pipfile"


def get_workon_home(context: ResolverContext) -> str:
    workon_home = context.getenv("WORKON_HOME")
    if workon_home:
        return workon_home
    if context.os_type == OSType.WINDOWS:
        return os.path.join(context.home, "Envs")
    return os.path.join(context.home, ".virtualenvs")


class PipenvRecognizer(Recognizer):
    """Pipenv environments.

    Either a global env whose ``.project`` file names a project directory
    containing a Pipfile, or a local ``.venv`` next to a Pipfile.
    """

    kind = PythonEnvKind.PIPENV

    async def identify(self, executable: str) -> bool:
        fs = self.context.fs
        env_dir = get_environment_dir_from_path(executable)
        pipfile = get_pipfile_name(self.context)

        project_file = os.path.join(env_dir, ".project")
        if fs.is_file(project_file):
            project_dir = fs.read_text(project_file).strip()
            if project_dir and fs.is_file(os.path.join(project_dir, pipfile)):
                return True

        if basename(env_dir) == ".venv":
            return fs.is_file(os.path.join(dirname(env_dir), pipfile))
        return False


class VenvRecognizer(Recognizer):
    """Environments created by ``python -m venv`` (have ``pyvenv.cfg``)."""

    kind = PythonEnvKind.VENV

    async def identify(self, executable: str) -> bool:
        return has_pyvenv_cfg(self.context, executable)


class VirtualEnvWrapperRecognizer(Recognizer):
    """virtualenv environments under ``WORKON_HOME``."""

    kind = PythonEnvKind.VIRTUALENVWRAPPER

    async def identify(self, executable: str) -> bool:
        in_workon_home = is_parent_path(
            executable,
            get_workon_home(self.context),
            case_insensitive=self.context.os_type == OSType.WINDOWS,
        )
        return in_workon_home and has_activate_script(self.context, executable)


class VirtualEnvRecognizer(Recognizer):
    kind = PythonEnvKind.VIRTUALENV

    async def identify(self, executable: str) -> bool:
        return has_activate_script(self.context, executable)

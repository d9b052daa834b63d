"""Conda environments."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

from ..common.env_utils import candidate_env_dirs, get_interpreter_path_from_dir, get_python_version_from_path
from ..common.externals import OSType
from ..context import ResolverContext
from ..errors import ProcessError
from ..info.types import PythonEnvInfo, PythonEnvKind, PythonEnvSource, build_env_info
from ..utils.path import are_paths_same, basename, dirname
from .base import Recognizer, resolve_simple_env

ANACONDA_COMPANY_NAME = "Anaconda, Inc."


def _as_str(value: object) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _str_list(value: object) -> List[str]:
    """Keep the non-empty strings of a JSON list; anything else is empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


@dataclass(frozen=True)
class CondaEnvInfo:
    prefix: str
    name: str = ""


@dataclass
class CondaInfo:
    """Subset of ``conda info --json`` output."""

    root_prefix: Optional[str] = None
    envs: List[str] = field(default_factory=list)
    envs_dirs: List[str] = field(default_factory=list)
    conda_version: Optional[str] = None

    @classmethod
    def from_json(cls, text: str) -> "CondaInfo":
        """Parse ``conda info --json`` output.

        Raises:
            ValueError: If the output is not a JSON object
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("conda info output is not a JSON object")
        return cls(
            root_prefix=_as_str(data.get("root_prefix")),
            envs=_str_list(data.get("envs")),
            envs_dirs=_str_list(data.get("envs_dirs")),
            conda_version=_as_str(data.get("conda_version")),
        )

    def get_env_list(self, case_insensitive: bool) -> List[CondaEnvInfo]:
        """List environments with their names.

        The root prefix is ``base``; envs directly under an ``envs_dirs``
        entry are named after their directory; others are unnamed.
        """
        result = []
        for prefix in self.envs:
            name = ""
            if self.root_prefix and are_paths_same(prefix, self.root_prefix, case_insensitive):
                name = "base"
            elif any(are_paths_same(dirname(prefix), d, case_insensitive) for d in self.envs_dirs):
                name = basename(prefix)
            result.append(CondaEnvInfo(prefix=prefix, name=name))
        return result


def is_conda_environment(context: ResolverContext, executable: str) -> bool:
    """Check for a ``conda-meta`` directory beside the interpreter or one level up."""
    return any(
        context.fs.is_dir(os.path.join(env_dir, "conda-meta"))
        for env_dir in candidate_env_dirs(executable)
    )


def get_conda_command(context: ResolverContext) -> str:
    return context.conda_path or context.getenv("CONDA_EXE") or "conda"


async def get_conda_info(context: ResolverContext) -> CondaInfo:
    """Run ``conda info --json``.

    Raises:
        ProcessError: If conda is missing or fails
        ValueError: If the output cannot be parsed
    """
    result = await context.runner.run(get_conda_command(context), ["info", "--json"])
    return CondaInfo.from_json(result.stdout)


class CondaRecognizer(Recognizer):
    """Environments containing a ``conda-meta`` directory."""

    kind = PythonEnvKind.CONDA

    async def identify(self, executable: str) -> bool:
        return is_conda_environment(self.context, executable)

    async def resolve(self, executable: str) -> PythonEnvInfo:
        case_insensitive = self.context.os_type == OSType.WINDOWS
        try:
            info = await get_conda_info(self.context)
        except (ProcessError, ValueError) as e:
            self.log.debug("%s identified as Conda environment but conda is unavailable: %s", executable, e)
            info = CondaInfo()

        for env in info.get_env_list(case_insensitive):
            env_executable = get_interpreter_path_from_dir(self.context.fs, env.prefix, self.context.os_type)
            if env_executable and are_paths_same(env_executable, executable, case_insensitive):
                return build_env_info(
                    kind=PythonEnvKind.CONDA,
                    executable=executable,
                    version=get_python_version_from_path(self.context.fs, executable, log=self.log),
                    org=ANACONDA_COMPANY_NAME,
                    name=env.name,
                    location=env.prefix,
                    file_info=self.context.fs.get_file_info(executable),
                    source=[PythonEnvSource.CONDA],
                )

        if info.envs:
            self.log.warning(
                "%s identified as a Conda environment but is not returned via '%s info' command",
                executable,
                get_conda_command(self.context),
            )
        # Environment could still be valid, resolve as a simple env.
        return resolve_simple_env(self.context, executable, PythonEnvKind.CONDA)

"""Recognizer base class and the shared "simple environment" resolver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..common.env_utils import get_python_version_from_path
from ..context import ResolverContext
from ..errors import ProcessError
from ..info.types import PythonEnvInfo, PythonEnvKind, build_env_info
from ..utils.path import basename, get_environment_dir_from_path

# Recognizer failures treated as a decline.
DECLINE_ERRORS = (OSError, ProcessError, ValueError)


class Recognizer(ABC):
    """Check for one discovery channel.

    Subclasses implement ``identify`` (does this path belong to me?) and
    ``resolve`` (describe it). ``try_resolve`` combines the two and turns
    any lookup failure into a decline.
    """

    kind: PythonEnvKind

    def __init__(self, context: ResolverContext):
        self.context = context
        self.log = context.logger

    @abstractmethod
    async def identify(self, executable: str) -> bool:
        ...

    async def resolve(self, executable: str) -> PythonEnvInfo:
        return resolve_simple_env(self.context, executable, self.kind)

    async def try_resolve(self, executable: str) -> Optional[PythonEnvInfo]:
        """Describe ``executable`` if it belongs to this channel.

        Returns:
            PythonEnvInfo, or None if the channel declines
        """
        try:
            if not await self.identify(executable):
                return None
            return await self.resolve(executable)
        except DECLINE_ERRORS as e:
            self.log.debug("%s recognizer declined %s: %s", self.kind.value, executable, e)
            return None

    async def try_identify(self, executable: str) -> bool:
        """Like identify, but a failure while checking counts as "no"."""
        try:
            return await self.identify(executable)
        except DECLINE_ERRORS as e:
            self.log.debug("%s recognizer declined %s: %s", self.kind.value, executable, e)
            return False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind.value}>"


def resolve_simple_env(
    context: ResolverContext, executable: str, kind: PythonEnvKind
) -> PythonEnvInfo:
    """Describe an environment using only its directory layout.

    Layout::

        <name>             <--- location
        |__ bin or Scripts
            |__ python     <--- executable
    """
    location = get_environment_dir_from_path(executable)
    return build_env_info(
        kind=kind,
        executable=executable,
        version=get_python_version_from_path(context.fs, executable, log=context.logger),
        name=basename(location),
        location=location,
        file_info=context.fs.get_file_info(executable),
    )

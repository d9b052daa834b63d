"""Resolve an interpreter path into a single reconciled PythonEnvInfo."""

from __future__ import annotations

from dataclasses import replace
from typing import AsyncIterator, Iterable, List, Optional, Tuple

from .common.externals import OSType
from .common.windows_utils import (
    RegistryInterpreterData,
    find_registry_interpreter,
    get_registry_interpreters,
)
from .context import ResolverContext
from .info.types import (
    GENERIC_ENV_KINDS,
    Architecture,
    PythonEnvInfo,
    PythonEnvKind,
    PythonEnvSource,
    merge_sources,
)
from .info.version import compare_version_specificity
from .locators import RECOGNIZER_ORDER, Recognizer, resolve_simple_env
from .locators.registry import get_architecture, get_registry_version
from .utils.path import dirname, is_parent_path


def merge_registry_data(
    env: PythonEnvInfo, data: RegistryInterpreterData, context: ResolverContext
) -> PythonEnvInfo:
    """Merge a registry record into an environment without losing information.

    - kind: Unknown becomes OtherGlobal, anything else is kept
    - version: registry version only if strictly more specific
    - arch: registry value unless it is unknown
    - org, display_name: registry value only where env has none
    - source: WindowsRegistry appended

    Layout-derived fields (location, name, search_location, file_info) are
    never touched. Merging the same record twice gives the same result.
    """
    kind = PythonEnvKind.OTHER_GLOBAL if env.kind in GENERIC_ENV_KINDS else env.kind

    registry_version = get_registry_version(data, context.logger)
    version = registry_version if compare_version_specificity(registry_version, env.version) > 0 else env.version

    arch = get_architecture(data)
    if arch == Architecture.UNKNOWN:
        arch = env.arch

    return replace(
        env,
        kind=kind,
        version=version,
        arch=arch,
        org=env.org or data.distro_org_name or None,
        display_name=env.display_name or data.company_display_name,
        source=merge_sources(env.source, [PythonEnvSource.WINDOWS_REGISTRY]),
    )


class EnvironmentResolver:
    """Resolver for interpreter paths.

    Tries recognizers in RECOGNIZER_ORDER, then reconciles the result with
    the registry when the context has one.
    """

    def __init__(self, context: Optional[ResolverContext] = None):
        """Initialize resolver.

        Args:
            context: Services to use; defaults to the local machine
        """
        self.context = context or ResolverContext()
        self.log = self.context.logger
        self.recognizers: Tuple[Recognizer, ...] = tuple(cls(self.context) for cls in RECOGNIZER_ORDER)

    async def identify_environment(self, executable: str) -> PythonEnvKind:
        """Kind of the first recognizer that accepts the path, else Unknown."""
        for recognizer in self.recognizers:
            if await recognizer.try_identify(executable):
                return recognizer.kind
        return PythonEnvKind.UNKNOWN

    async def _resolve_from_channels(self, executable: str) -> PythonEnvInfo:
        for recognizer in self.recognizers:
            env = await recognizer.try_resolve(executable)
            if env is not None:
                self.log.debug("%s resolved by %r", executable, recognizer)
                return env
        return resolve_simple_env(self.context, executable, PythonEnvKind.UNKNOWN)

    def _is_in_workspace(self, executable: str) -> bool:
        case_insensitive = self.context.os_type == OSType.WINDOWS
        return any(
            is_parent_path(executable, folder, case_insensitive)
            for folder in self.context.workspace.list_workspace_folders()
        )

    async def _find_registry_data(self, executable: str) -> Optional[RegistryInterpreterData]:
        if self.context.registry is None:
            return None
        try:
            interpreters = await get_registry_interpreters(
                self.context.registry,
                include_all_architectures=self.context.include_all_architectures,
                log=self.log,
            )
        except Exception:
            self.log.exception("Failed to read interpreters from the registry")
            return None
        return find_registry_interpreter(interpreters, executable)

    async def resolve_env(self, executable: str) -> PythonEnvInfo:
        """Resolve an interpreter path.

        Args:
            executable: Path to a Python executable

        Returns:
            PythonEnvInfo; at worst an Unknown-kind env carrying only the path

        Raises:
            ValueError: If ``executable`` is empty
        """
        if not executable or not executable.strip():
            raise ValueError("Interpreter path must not be empty")

        env = await self._resolve_from_channels(executable)

        if self._is_in_workspace(executable):
            # For envs inside a workspace the search location is the folder
            # the env directory was found in:
            #
            # search_location
            # |__ env
            #    |__ bin or Scripts
            #        |__ python
            env.search_location = dirname(env.location) if env.location else None

        data = await self._find_registry_data(executable)
        if data is None:
            return env
        return merge_registry_data(env, data, self.context)

    async def resolve_envs(self, executables: Iterable[str]) -> AsyncIterator[PythonEnvInfo]:
        """Resolve several paths in order, skipping any that fail."""
        for executable in executables:
            try:
                env = await self.resolve_env(executable)
            except Exception:
                self.log.exception("Failed to resolve environment: %s", executable)
                continue
            yield env


async def resolve_env(executable: str, context: Optional[ResolverContext] = None) -> PythonEnvInfo:
    """Resolve one interpreter path. See EnvironmentResolver.resolve_env."""
    return await EnvironmentResolver(context).resolve_env(executable)


async def identify_environment(executable: str, context: Optional[ResolverContext] = None) -> PythonEnvKind:
    return await EnvironmentResolver(context).identify_environment(executable)


async def resolve_all(executables: Iterable[str], context: Optional[ResolverContext] = None) -> List[PythonEnvInfo]:
    """Resolve several paths and collect the results."""
    return [env async for env in EnvironmentResolver(context).resolve_envs(executables)]

"""Interpreters published in the Windows registry (PEP 514)."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from ..common.windows_utils import RegistryInterpreterData, get_registry_interpreters
from ..context import ResolverContext
from ..errors import ParseError
from ..info.types import Architecture, PythonEnvInfo, PythonEnvKind, PythonEnvSource, build_env_info
from ..info.version import UNKNOWN_PYTHON_VERSION, PythonVersion, parse_version, parse_version_from_executable


def get_architecture(data: RegistryInterpreterData) -> Architecture:
    """``32bit`` is x86, any other value x64, absent unknown."""
    if not data.bitness_str:
        return Architecture.UNKNOWN
    return Architecture.X86 if data.bitness_str == "32bit" else Architecture.X64


def get_registry_version(data: RegistryInterpreterData, log: logging.Logger) -> PythonVersion:
    """Parse ``Version``, else ``SysVersion``, else the interpreter file name."""
    version_str = data.version_str or data.sys_version_str
    try:
        if version_str is None:
            return parse_version_from_executable(data.interpreter_path)
        return parse_version(version_str)
    except ParseError as e:
        log.debug("Failed to parse version: %s (%s)", version_str or data.interpreter_path, e)
        return UNKNOWN_PYTHON_VERSION


def build_registry_env_info(context: ResolverContext, data: RegistryInterpreterData) -> PythonEnvInfo:
    return build_env_info(
        kind=PythonEnvKind.OTHER_GLOBAL,
        executable=data.interpreter_path,
        version=get_registry_version(data, context.logger).with_sys_version(data.sys_version_str),
        arch=get_architecture(data),
        org=data.distro_org_name,
        display_name=data.company_display_name,
        file_info=context.fs.get_file_info(data.interpreter_path),
        source=[PythonEnvSource.WINDOWS_REGISTRY],
    )


class WindowsRegistryLocator:
    """Discovery sweep over every interpreter in the registry."""

    def __init__(self, context: ResolverContext):
        self.context = context
        self.log = context.logger

    async def iter_envs(self) -> AsyncIterator[PythonEnvInfo]:
        """Yield one environment per registry record.

        The registry is re-read on every call. A record that fails to build
        is logged and skipped.
        """
        if self.context.registry is None:
            return

        interpreters = await get_registry_interpreters(
            self.context.registry,
            include_all_architectures=self.context.include_all_architectures,
            log=self.log,
        )
        for data in interpreters:
            try:
                env = build_registry_env_info(self.context, data)
            except Exception:
                self.log.exception("Failed to process environment: %s", data.interpreter_path)
                continue
            yield env

"""Services shared by recognizers and the resolver."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .common.externals import FileSystem, OSType, ProcessRunner, WorkspaceFolders, get_os_type
from .common.registry import EmptyRegistry, RegistryService, WinregRegistry
from .config import ResolverConfig, load_environment


@dataclass
class ResolverContext:
    """Everything a resolution call may touch outside of its arguments.

    Attributes:
        fs: Filesystem access
        workspace: Open workspace folders
        runner: External process runner
        registry: Registry reader, None on platforms without a registry
        env: Environment variables snapshot
        os_type: Platform the paths belong to
        include_all_architectures: Read every registry view
        conda_path: Explicit conda executable, overrides CONDA_EXE
        logger: Destination for diagnostics
    """

    fs: FileSystem = field(default_factory=FileSystem)
    workspace: WorkspaceFolders = field(default_factory=WorkspaceFolders)
    runner: ProcessRunner = field(default_factory=ProcessRunner)
    registry: Optional[RegistryService] = None
    env: Mapping[str, str] = field(default_factory=dict)
    os_type: OSType = field(default_factory=get_os_type)
    include_all_architectures: bool = True
    conda_path: Optional[str] = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("pyenvs"))

    def getenv(self, name: str) -> Optional[str]:
        value = self.env.get(name)
        return value or None

    @property
    def home(self) -> str:
        return self.getenv("HOME") or self.getenv("USERPROFILE") or os.path.expanduser("~")


def default_registry(os_type: OSType) -> RegistryService:
    if os_type == OSType.WINDOWS:
        return WinregRegistry()
    return EmptyRegistry()


def build_context(config: ResolverConfig, logger: Optional[logging.Logger] = None) -> ResolverContext:
    """Create a context for the local machine from configuration.

    Environment variables are loaded (including a ``.env`` file in the
    project root) and pyenv/workon overrides from the config are applied on
    top of them.
    """
    env = dict(load_environment(config.project_root))
    if config.paths.pyenv_root:
        env["PYENV_ROOT"] = config.resolve_path(config.paths.pyenv_root)
    if config.paths.workon_home:
        env["WORKON_HOME"] = config.resolve_path(config.paths.workon_home)

    os_type = get_os_type()
    registry = default_registry(os_type) if config.registry.enabled else None

    return ResolverContext(
        workspace=WorkspaceFolders([config.resolve_path(f) for f in config.workspace.folders]),
        runner=ProcessRunner(timeout=config.process.timeout_s),
        registry=registry,
        env=env,
        os_type=os_type,
        include_all_architectures=config.registry.include_all_architectures,
        conda_path=config.resolve_path(config.paths.conda_path) if config.paths.conda_path else None,
        logger=logger or logging.getLogger("pyenvs"),
    )

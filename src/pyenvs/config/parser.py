"""Configuration file parser for pyenvs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python 3.10

from dotenv import load_dotenv

CONFIG_FILE_NAME = ".pyenvs.toml"


@dataclass
class PathsConfig:
    """Overrides for well-known tool locations."""

    pyenv_root: Optional[str] = None
    workon_home: Optional[str] = None
    conda_path: Optional[str] = None


@dataclass
class ProcessConfig:
    """External process settings."""

    timeout_s: float = 15.0


@dataclass
class RegistryConfig:
    """Windows registry settings."""

    enabled: bool = True
    include_all_architectures: bool = True


@dataclass
class WorkspaceConfig:
    """Workspace folders used to compute search locations."""

    folders: List[str] = field(default_factory=list)


@dataclass
class ResolverConfig:
    """Complete pyenvs configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    log_level: str = "WARNING"

    # Project root for resolving paths
    project_root: Path = field(default_factory=Path.cwd)

    def resolve_path(self, path_template: str) -> str:
        """Resolve template variables in paths.

        Supports:
            ${PROJECT_ROOT} - absolute path to project root
            ${HOME} - the user's home directory
            ~ - the user's home directory, at the start of the path
        """
        result = path_template.replace("${PROJECT_ROOT}", str(self.project_root))
        result = result.replace("${HOME}", str(Path.home()))
        return os.path.expanduser(result)


def find_config_file(project_path: Path) -> Optional[Path]:
    """Find .pyenvs.toml in project root.

    Args:
        project_path: Root path of the project

    Returns:
        Path to .pyenvs.toml if found, None otherwise
    """
    config_file = project_path / CONFIG_FILE_NAME
    if config_file.exists():
        return config_file
    return None


def load_config(project_path: Path) -> ResolverConfig:
    """Load configuration from .pyenvs.toml or use defaults.

    Args:
        project_path: Root path of the project

    Returns:
        ResolverConfig with loaded or default configuration
    """
    config = ResolverConfig(project_root=project_path)

    config_file = find_config_file(project_path)
    if not config_file:
        return config

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        # If TOML parsing fails, return defaults
        return config

    config.log_level = str(data.get("log_level", config.log_level)).upper()

    if "paths" in data:
        paths_data = data["paths"]
        config.paths.pyenv_root = paths_data.get("pyenv_root")
        config.paths.workon_home = paths_data.get("workon_home")
        config.paths.conda_path = paths_data.get("conda_path")

    if "process" in data:
        process_data = data["process"]
        config.process.timeout_s = float(process_data.get("timeout_s", 15.0))

    if "registry" in data:
        registry_data = data["registry"]
        config.registry.enabled = registry_data.get("enabled", True)
        config.registry.include_all_architectures = registry_data.get(
            "include_all_architectures", True
        )

    if "workspace" in data:
        folders = data["workspace"].get("folders", [])
        if isinstance(folders, str):
            folders = [folders]
        config.workspace.folders = list(folders)

    return config


def load_environment(project_path: Optional[Path] = None) -> Dict[str, str]:
    """Snapshot environment variables, after loading a project ``.env`` file.

    Variables already set in the process environment are not overridden.
    """
    if project_path is not None:
        env_file = Path(project_path) / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)
    return dict(os.environ)

"""Environment info types and version handling."""

from .types import (
    GENERIC_ENV_KINDS,
    Architecture,
    FileInfo,
    PythonEnvInfo,
    PythonEnvKind,
    PythonEnvSource,
    build_env_info,
    merge_sources,
)
from .version import (
    UNKNOWN_PYTHON_VERSION,
    PythonRelease,
    PythonReleaseLevel,
    PythonVersion,
    compare_version_specificity,
    compare_versions,
    get_version_specificity,
    parse_version,
    parse_version_from_executable,
)

__all__ = [
    "GENERIC_ENV_KINDS",
    "Architecture",
    "FileInfo",
    "PythonEnvInfo",
    "PythonEnvKind",
    "PythonEnvSource",
    "build_env_info",
    "merge_sources",
    "UNKNOWN_PYTHON_VERSION",
    "PythonRelease",
    "PythonReleaseLevel",
    "PythonVersion",
    "compare_version_specificity",
    "compare_versions",
    "get_version_specificity",
    "parse_version",
    "parse_version_from_executable",
]

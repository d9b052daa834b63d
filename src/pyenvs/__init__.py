"""Identify Python interpreters and reconcile what every discovery channel knows about them."""

from .context import ResolverContext, build_context
from .info import (
    UNKNOWN_PYTHON_VERSION,
    Architecture,
    PythonEnvInfo,
    PythonEnvKind,
    PythonEnvSource,
    PythonVersion,
    parse_version,
)
from .resolver import EnvironmentResolver, identify_environment, resolve_all, resolve_env

__version__ = "0.1.0"

__all__ = [
    "ResolverContext",
    "build_context",
    "UNKNOWN_PYTHON_VERSION",
    "Architecture",
    "PythonEnvInfo",
    "PythonEnvKind",
    "PythonEnvSource",
    "PythonVersion",
    "parse_version",
    "EnvironmentResolver",
    "identify_environment",
    "resolve_all",
    "resolve_env",
]

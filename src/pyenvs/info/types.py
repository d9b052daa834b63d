"""Data types describing a resolved Python environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .version import UNKNOWN_PYTHON_VERSION, PythonVersion


class PythonEnvKind(str, Enum):
    """How an environment was installed or created."""

    UNKNOWN = "unknown"
    OTHER_GLOBAL = "global-other"
    PYENV = "global-pyenv"
    CONDA = "conda"
    WINDOWS_STORE = "global-windows-store"
    PIPENV = "virt-pipenv"
    VENV = "virt-venv"
    VIRTUALENVWRAPPER = "virt-virtualenvwrapper"
    VIRTUALENV = "virt-virtualenv"


# Kinds that say nothing about how the environment was created.
GENERIC_ENV_KINDS = frozenset({PythonEnvKind.UNKNOWN})


class PythonEnvSource(str, Enum):
    """Where information about an environment came from."""

    WINDOWS_REGISTRY = "windows-registry"
    PYENV = "pyenv"
    CONDA = "conda"
    PATH_ENV_VAR = "path-env-var"
    OTHER = "other"


class Architecture(str, Enum):
    UNKNOWN = "unknown"
    X86 = "x86"
    X64 = "x64"


@dataclass(frozen=True)
class FileInfo:
    """Identity of an executable file, independent of its size."""

    ctime: float
    mtime: float


@dataclass
class PythonEnvInfo:
    """Canonical description of a Python environment.

    Attributes:
        kind: How the environment was installed or created
        executable: Path to the interpreter executable
        file_info: Creation/modification times, None if stat failed
        version: Interpreter version, UNKNOWN_PYTHON_VERSION if unknown
        arch: Interpreter bitness
        org: Distributor name (e.g. "PythonCore", "Anaconda, Inc.")
        display_name: Human readable label
        name: Short identifier, usually the environment directory name
        location: Environment directory ("" if unknown)
        search_location: Directory the env was found in, for envs inside a workspace folder
        source: Provenance tags, in the order they were added
    """

    kind: PythonEnvKind
    executable: str
    file_info: Optional[FileInfo] = None
    version: PythonVersion = UNKNOWN_PYTHON_VERSION
    arch: Architecture = Architecture.UNKNOWN
    org: Optional[str] = None
    display_name: Optional[str] = None
    name: str = ""
    location: str = ""
    search_location: Optional[str] = None
    source: List[PythonEnvSource] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "kind": self.kind.value,
            "executable": self.executable,
            "file_info": (
                {"ctime": self.file_info.ctime, "mtime": self.file_info.mtime}
                if self.file_info
                else None
            ),
            "version": None if self.version.is_unknown else str(self.version),
            "sys_version": self.version.sys_version,
            "arch": self.arch.value,
            "org": self.org,
            "display_name": self.display_name,
            "name": self.name,
            "location": self.location,
            "search_location": self.search_location,
            "source": [s.value for s in self.source],
        }

    def __repr__(self) -> str:
        name = f" {self.name}" if self.name else ""
        return f"<PythonEnvInfo {self.kind.value}{name} v{self.version} @ {self.executable}>"


def merge_sources(
    existing: Iterable[PythonEnvSource], added: Iterable[PythonEnvSource]
) -> List[PythonEnvSource]:
    """Ordered union of two source lists."""
    merged: List[PythonEnvSource] = []
    for source in [*existing, *added]:
        if source not in merged:
            merged.append(source)
    return merged


def build_env_info(
    kind: PythonEnvKind,
    executable: str,
    version: PythonVersion = UNKNOWN_PYTHON_VERSION,
    arch: Architecture = Architecture.UNKNOWN,
    org: Optional[str] = None,
    display_name: Optional[str] = None,
    name: str = "",
    location: str = "",
    file_info: Optional[FileInfo] = None,
    source: Optional[Iterable[PythonEnvSource]] = None,
) -> PythonEnvInfo:
    """Create a PythonEnvInfo with de-duplicated sources."""
    return PythonEnvInfo(
        kind=kind,
        executable=executable,
        file_info=file_info,
        version=version,
        arch=arch,
        org=org,
        display_name=display_name,
        name=name,
        location=location,
        source=merge_sources([], source or []),
    )

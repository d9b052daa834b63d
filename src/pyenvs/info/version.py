"""Python version parsing and comparison.

Versions come from many loosely formatted places: executable names
(``python3.8.exe``), registry values (``3.9.0rc2``, ``py38_4.8.3``), pyenv
directory names (``miniconda3-4.7.12``) and ``pyvenv.cfg`` files. Parsing is
tolerant and keeps track of how much of the version was actually known so
that two partial observations can be compared by specificity.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import PureWindowsPath
from typing import Optional, Tuple

import semver

from ..errors import ParseError


class PythonReleaseLevel(str, Enum):
    """Release level, matching ``sys.version_info.releaselevel``."""

    ALPHA = "alpha"
    BETA = "beta"
    CANDIDATE = "candidate"
    FINAL = "final"


@dataclass(frozen=True)
class PythonRelease:
    """Release qualifier trailing a version, e.g. ``rc2``."""

    level: PythonReleaseLevel
    serial: int = 0

    def __str__(self) -> str:
        if self.level == PythonReleaseLevel.FINAL:
            return ""
        prefix = {
            PythonReleaseLevel.ALPHA: "a",
            PythonReleaseLevel.BETA: "b",
            PythonReleaseLevel.CANDIDATE: "rc",
        }[self.level]
        return f"{prefix}{self.serial}"


@dataclass(frozen=True)
class PythonVersion:
    """A possibly partial Python version.

    Missing components are ``-1``. ``UNKNOWN_PYTHON_VERSION`` has every
    component missing and is used instead of ``None``. A qualifier that is
    not a known release level (``3.8.5+``) is kept verbatim in ``tag``.
    """

    major: int = -1
    minor: int = -1
    micro: int = -1
    release: Optional[PythonRelease] = None
    tag: Optional[str] = None
    sys_version: Optional[str] = None

    @property
    def is_unknown(self) -> bool:
        return self.major < 0

    def with_sys_version(self, sys_version: Optional[str]) -> "PythonVersion":
        return replace(self, sys_version=sys_version)

    def to_semver(self) -> semver.Version:
        """Convert to a ``semver.Version``, treating missing parts as zero."""
        prerelease = None
        if self.release is not None and self.release.level != PythonReleaseLevel.FINAL:
            prerelease = str(self.release)
        return semver.Version(
            max(self.major, 0),
            max(self.minor, 0),
            max(self.micro, 0),
            prerelease=prerelease,
        )

    def __str__(self) -> str:
        if self.is_unknown:
            return "unknown"
        parts = [str(p) for p in (self.major, self.minor, self.micro) if p >= 0]
        text = ".".join(parts)
        if self.release is not None:
            text += str(self.release)
        elif self.tag:
            text += self.tag
        return text


UNKNOWN_PYTHON_VERSION = PythonVersion()

# First dotted token wins; a bare integer is only used when there is none.
_DOTTED_RE = re.compile(r"(?<!\d)(\d+)\.(\d+)(?:\.(\d+))?")
_BARE_RE = re.compile(r"(?<!\d)(\d+)")
_TAG_RE = re.compile(r"[^\s()\[\],;]+")
_RELEASE_RE = re.compile(
    r"^(?:(?P<short>a|b|c|rc)(?P<serial>\d+)"
    r"|\.(?P<long>alpha|beta|candidate|final)\.(?P<long_serial>\d+)"
    r"|(?P<dev>-dev))"
)

_SHORT_LEVELS = {
    "a": PythonReleaseLevel.ALPHA,
    "b": PythonReleaseLevel.BETA,
    "c": PythonReleaseLevel.CANDIDATE,
    "rc": PythonReleaseLevel.CANDIDATE,
}


def _parse_release(after: str) -> Optional[PythonRelease]:
    match = _RELEASE_RE.match(after)
    if not match:
        return None
    if match.group("short"):
        return PythonRelease(_SHORT_LEVELS[match.group("short")], int(match.group("serial")))
    if match.group("long"):
        return PythonRelease(
            PythonReleaseLevel(match.group("long")), int(match.group("long_serial"))
        )
    return PythonRelease(PythonReleaseLevel.ALPHA, 0)


def parse_basic_version(text: str) -> Tuple[PythonVersion, str]:
    """Parse the numeric part of a version.

    Returns:
        Tuple of (version, text following the numeric part)

    Raises:
        ParseError: If there is no number in ``text``
    """
    normalized = text.strip().lower()
    match = _DOTTED_RE.search(normalized)
    if match:
        major, minor, micro = match.groups()
        version = PythonVersion(
            major=int(major),
            minor=int(minor),
            micro=int(micro) if micro is not None else -1,
        )
        return version, normalized[match.end():]

    match = _BARE_RE.search(normalized)
    if match:
        return PythonVersion(major=int(match.group(1))), normalized[match.end():]

    raise ParseError(text)


def parse_version(text: str) -> PythonVersion:
    """Parse free-form text into a PythonVersion.

    Examples:
        >>> str(parse_version("3.9.0rc2"))
        '3.9.0rc2'
        >>> str(parse_version("3.8.5+"))
        '3.8.5+'

    Raises:
        ParseError: If ``text`` contains no recognizable version
    """
    version, after = parse_basic_version(text)
    release = _parse_release(after)
    if release is not None:
        return replace(version, release=release)
    tag = _TAG_RE.match(after)
    return replace(version, tag=tag.group(0) if tag else None)


def parse_version_from_executable(executable: str) -> PythonVersion:
    """Parse the version encoded in an executable's file name.

    Raises:
        ParseError: If the file name carries no version (``python.exe``)
    """
    name = PureWindowsPath(executable).name
    if name.lower().endswith(".exe"):
        name = name[: -len(".exe")]
    return parse_version(name)


def get_version_specificity(version: PythonVersion) -> int:
    """How much of the version is known: 0 unknown, 1 major, 2 minor, 3 micro."""
    if version.major < 0:
        return 0
    if version.minor < 0:
        return 1
    if version.micro < 0:
        return 2
    return 3


def compare_version_specificity(a: PythonVersion, b: PythonVersion) -> int:
    """Return 1 if ``a`` is more specific than ``b``, -1 if less, 0 if equal."""
    diff = get_version_specificity(a) - get_version_specificity(b)
    return (diff > 0) - (diff < 0)


def most_specific_version(*versions: PythonVersion) -> PythonVersion:
    """Pick the most specific version; earlier arguments win ties."""
    best = UNKNOWN_PYTHON_VERSION
    for version in versions:
        if compare_version_specificity(version, best) > 0:
            best = version
    return best


def compare_versions(a: PythonVersion, b: PythonVersion) -> int:
    """Order two versions. Unknown versions sort before known ones."""
    if a.is_unknown or b.is_unknown:
        return int(b.is_unknown) - int(a.is_unknown)
    return a.to_semver().compare(b.to_semver())

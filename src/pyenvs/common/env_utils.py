"""Helpers for reading version evidence out of environment directories."""

from __future__ import annotations

import logging
import os
import re
from typing import List, Optional

from ..errors import ParseError
from ..info.version import (
    UNKNOWN_PYTHON_VERSION,
    PythonVersion,
    most_specific_version,
    parse_version,
    parse_version_from_executable,
)
from ..utils.path import dirname
from .externals import FileSystem, OSType

logger = logging.getLogger(__name__)

_CONDA_META_PYTHON_RE = re.compile(r"^python-(\d+\.\d+\.\d+)-.*\.json$")
_PYVENV_VERSION_RE = re.compile(r"^\s*version(?:_info)?\s*=\s*(.+?)\s*$", re.MULTILINE)


def candidate_env_dirs(interpreter_path: str) -> List[str]:
    """Directories that may hold environment markers for an interpreter.

    The interpreter's own directory (Windows layout) and its parent
    (``bin/python`` layout).
    """
    first = dirname(interpreter_path)
    return [first, dirname(first)]


def get_python_version_from_conda_meta(fs: FileSystem, interpreter_path: str) -> PythonVersion:
    """Read the python package version recorded in ``conda-meta``.

    Raises:
        ParseError: If no python package record is found
    """
    for env_dir in candidate_env_dirs(interpreter_path):
        conda_meta = os.path.join(env_dir, "conda-meta")
        for entry in fs.list_dir(conda_meta):
            match = _CONDA_META_PYTHON_RE.match(entry)
            if match:
                return parse_version(match.group(1))
    raise ParseError(interpreter_path)


def get_python_version_from_pyvenv_cfg(fs: FileSystem, interpreter_path: str) -> PythonVersion:
    """Read ``version`` / ``version_info`` from ``pyvenv.cfg``.

    Raises:
        ParseError: If there is no pyvenv.cfg or it has no version entry
    """
    for env_dir in candidate_env_dirs(interpreter_path):
        cfg = os.path.join(env_dir, "pyvenv.cfg")
        if not fs.is_file(cfg):
            continue
        try:
            content = fs.read_text(cfg)
        except OSError:
            continue
        match = _PYVENV_VERSION_RE.search(content)
        if match:
            return parse_version(match.group(1))
    raise ParseError(interpreter_path)


def get_python_version_from_path(
    fs: FileSystem,
    interpreter_path: str,
    hint: Optional[str] = None,
    log: logging.Logger = logger,
) -> PythonVersion:
    """Combine all cheap version evidence for an interpreter.

    Looks at the executable name, the optional ``hint``, conda-meta and
    pyvenv.cfg, and returns the most specific result.
    """
    candidates = []

    def attempt(label: str, fn) -> None:
        try:
            candidates.append(fn())
        except ParseError as e:
            log.debug("No version from %s: %s", label, e)

    attempt("executable name", lambda: parse_version_from_executable(interpreter_path))
    if hint:
        attempt("hint", lambda: parse_version(hint))
    attempt("conda-meta", lambda: get_python_version_from_conda_meta(fs, interpreter_path))
    attempt("pyvenv.cfg", lambda: get_python_version_from_pyvenv_cfg(fs, interpreter_path))

    if not candidates:
        return UNKNOWN_PYTHON_VERSION
    return most_specific_version(*candidates)


def get_interpreter_path_from_dir(fs: FileSystem, env_dir: str, os_type: OSType) -> Optional[str]:
    """Find the interpreter inside an environment directory."""
    if os_type == OSType.WINDOWS:
        candidates = [
            os.path.join(env_dir, "python.exe"),
            os.path.join(env_dir, "Scripts", "python.exe"),
        ]
    else:
        candidates = [
            os.path.join(env_dir, "bin", "python"),
            os.path.join(env_dir, "bin", "python3"),
        ]
    for candidate in candidates:
        if fs.is_file(candidate):
            return candidate
    return None

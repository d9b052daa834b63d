"""Path helpers for comparing interpreter and environment paths."""

from __future__ import annotations

import os
import posixpath
import sys
from pathlib import PureWindowsPath
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


def normalize_path(path: PathLike) -> str:
    """Normalize a path so that separators and ``..`` segments compare equal.

    Backslashes are treated as separators on every platform since registry
    paths are always Windows paths.

    Examples:
        >>> normalize_path("C:\\\\Python39\\\\..\\\\Python39\\\\python.exe")
        'C:/Python39/python.exe'
    """
    text = os.fspath(path).replace("\\", "/")
    if not text:
        return text
    return posixpath.normpath(text)


def norm_case_path(path: PathLike, case_insensitive: bool = sys.platform == "win32") -> str:
    """Normalize a path, lowercasing it on case-insensitive platforms."""
    normalized = normalize_path(path)
    return normalized.lower() if case_insensitive else normalized


def are_paths_same(a: PathLike, b: PathLike, case_insensitive: bool = sys.platform == "win32") -> bool:
    """Check whether two paths point to the same location (lexically)."""
    return norm_case_path(a, case_insensitive) == norm_case_path(b, case_insensitive)


def is_parent_path(
    path: PathLike, parent: PathLike, case_insensitive: bool = sys.platform == "win32"
) -> bool:
    """Check whether ``path`` is ``parent`` or lies somewhere below it.

    Examples:
        >>> is_parent_path("/home/u/.pyenv/versions/3.9.0/bin/python", "/home/u/.pyenv/versions")
        True
        >>> is_parent_path("/home/u/.pyenv/versions2/python", "/home/u/.pyenv/versions")
        False
    """
    child = norm_case_path(path, case_insensitive)
    root = norm_case_path(parent, case_insensitive).rstrip("/")
    if not root:
        return False
    return child == root or child.startswith(root + "/")


def path_contains(path: PathLike, fragment: PathLike) -> bool:
    """Case- and separator-insensitive substring check on two paths."""
    needle = normalize_path(fragment).upper()
    return bool(needle) and needle in normalize_path(path).upper()


def basename(path: PathLike) -> str:
    """File name of a path written with either separator style."""
    return PureWindowsPath(os.fspath(path)).name


def dirname(path: PathLike) -> str:
    """Parent directory of a path, keeping the original separator style."""
    text = os.fspath(path)
    if "\\" in text and "/" not in text:
        return str(PureWindowsPath(text).parent)
    return os.path.dirname(text)


def get_environment_dir_from_path(interpreter_path: PathLike) -> str:
    """Guess the environment directory for an interpreter.

    Layouts::

        env            <--- returned when the interpreter is directly inside
        |__ python

        env            <--- returned when the interpreter is in bin/Scripts
        |__ bin or Scripts
            |__ python
    """
    parent = dirname(interpreter_path)
    if basename(parent).lower() in ("bin", "scripts"):
        return dirname(parent)
    return parent

"""Utility modules (path)."""

from .path import (
    are_paths_same,
    basename,
    dirname,
    get_environment_dir_from_path,
    is_parent_path,
    norm_case_path,
    normalize_path,
    path_contains,
)

__all__ = [
    "are_paths_same",
    "basename",
    "dirname",
    "get_environment_dir_from_path",
    "is_parent_path",
    "norm_case_path",
    "normalize_path",
    "path_contains",
]

"""Access to the machine: filesystem, processes, workspace and registry."""

from .externals import FileSystem, OSType, ProcessResult, ProcessRunner, WorkspaceFolders, get_os_type
from .registry import HKCU, HKLM, EmptyRegistry, RegistryKey, RegistryService, RegistryValue, WinregRegistry
from .windows_utils import RegistryInterpreterData, get_registry_interpreters

__all__ = [
    "FileSystem",
    "OSType",
    "ProcessResult",
    "ProcessRunner",
    "WorkspaceFolders",
    "get_os_type",
    "HKCU",
    "HKLM",
    "EmptyRegistry",
    "RegistryKey",
    "RegistryService",
    "RegistryValue",
    "WinregRegistry",
    "RegistryInterpreterData",
    "get_registry_interpreters",
]

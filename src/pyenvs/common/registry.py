"""Read-only access to the Windows registry.

Keys are addressed as ``(hive, arch, key)`` where ``key`` is a full path
starting with a backslash, e.g. ``\\SOFTWARE\\Python\\PythonCore``.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List

from ..errors import RegistryReadError

HKLM = "HKLM"
HKCU = "HKCU"

REG_SZ = 1
REG_EXPAND_SZ = 2


@dataclass(frozen=True)
class RegistryKey:
    hive: str
    arch: str
    key: str


@dataclass(frozen=True)
class RegistryValue:
    hive: str
    arch: str
    key: str
    name: str
    value: Any
    type: int = REG_SZ


class RegistryService(ABC):
    """Abstract registry reader for dependency injection.

    Both methods return an empty list for a key that does not exist.
    """

    @abstractmethod
    async def list_subkeys(self, hive: str, arch: str, key: str) -> List[RegistryKey]:
        ...

    @abstractmethod
    async def list_values(self, hive: str, arch: str, key: str) -> List[RegistryValue]:
        ...


class EmptyRegistry(RegistryService):
    """Registry with no keys, used on platforms without one."""

    async def list_subkeys(self, hive: str, arch: str, key: str) -> List[RegistryKey]:
        return []

    async def list_values(self, hive: str, arch: str, key: str) -> List[RegistryValue]:
        return []


class WinregRegistry(RegistryService):
    """Registry backed by the ``winreg`` module. Windows only."""

    def __init__(self) -> None:
        import winreg

        self._winreg = winreg
        self._hives = {
            HKLM: winreg.HKEY_LOCAL_MACHINE,
            HKCU: winreg.HKEY_CURRENT_USER,
        }

    def _open(self, hive: str, arch: str, key: str):
        winreg = self._winreg
        view = winreg.KEY_WOW64_32KEY if arch == "x86" else winreg.KEY_WOW64_64KEY
        return winreg.OpenKey(self._hives[hive], key.lstrip("\\"), 0, winreg.KEY_READ | view)

    def _read_subkeys(self, hive: str, arch: str, key: str) -> List[RegistryKey]:
        try:
            handle = self._open(hive, arch, key)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RegistryReadError(hive, arch, key, e) from e

        keys = []
        with handle:
            try:
                count = self._winreg.QueryInfoKey(handle)[0]
                for i in range(count):
                    name = self._winreg.EnumKey(handle, i)
                    keys.append(RegistryKey(hive=hive, arch=arch, key=f"{key}\\{name}"))
            except OSError as e:
                raise RegistryReadError(hive, arch, key, e) from e
        return keys

    def _read_values(self, hive: str, arch: str, key: str) -> List[RegistryValue]:
        try:
            handle = self._open(hive, arch, key)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RegistryReadError(hive, arch, key, e) from e

        values = []
        with handle:
            try:
                count = self._winreg.QueryInfoKey(handle)[1]
                for i in range(count):
                    name, data, value_type = self._winreg.EnumValue(handle, i)
                    values.append(
                        RegistryValue(
                            hive=hive, arch=arch, key=key, name=name, value=data, type=value_type
                        )
                    )
            except OSError as e:
                raise RegistryReadError(hive, arch, key, e) from e
        return values

    async def list_subkeys(self, hive: str, arch: str, key: str) -> List[RegistryKey]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self._read_subkeys(hive, arch, key))

    async def list_values(self, hive: str, arch: str, key: str) -> List[RegistryValue]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self._read_values(hive, arch, key))

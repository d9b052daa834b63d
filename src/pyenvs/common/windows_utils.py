"""PEP 514 registry walk.

Layout read here::

    HKLM|HKCU\\SOFTWARE\\Python
    |__ <Company>                 (e.g. PythonCore, ContinuumAnalytics)
        |__ <Tag>                 DisplayName, SysArchitecture, SysVersion, Version
            |__ InstallPath       (default) = install dir, ExecutablePath
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import RegistryReadError
from ..utils.path import norm_case_path
from .registry import HKCU, HKLM, REG_EXPAND_SZ, REG_SZ, RegistryKey, RegistryService

logger = logging.getLogger(__name__)

PYTHON_ROOT_KEY = "\\SOFTWARE\\Python"
ARCHITECTURES = ("x64", "x86")
HIVES = (HKLM, HKCU)


@dataclass(frozen=True)
class RegistryInterpreterData:
    """One interpreter as published in the registry.

    Every field except ``interpreter_path`` and ``distro_org_name`` may be
    absent, in which case it is None.
    """

    interpreter_path: str
    distro_org_name: str
    version_str: Optional[str] = None
    sys_version_str: Optional[str] = None
    bitness_str: Optional[str] = None
    company_display_name: Optional[str] = None


def is_32bit_host() -> bool:
    return platform.machine().lower() in ("x86", "i386", "i486", "i586", "i686")


def _as_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def get_interpreter_data_from_key(
    registry: RegistryService,
    product: RegistryKey,
    distro_org_name: str,
    log: logging.Logger = logger,
) -> Optional[RegistryInterpreterData]:
    """Read one product key and its InstallPath leaf.

    Returns:
        RegistryInterpreterData, or None if no interpreter path was found
    """
    fields: Dict[str, Optional[str]] = {}
    for value in await registry.list_values(product.hive, product.arch, product.key):
        if value.name == "SysArchitecture":
            fields["bitness_str"] = _as_text(value.value)
        elif value.name == "SysVersion":
            fields["sys_version_str"] = _as_text(value.value)
        elif value.name == "Version":
            fields["version_str"] = _as_text(value.value)
        elif value.name == "DisplayName":
            fields["company_display_name"] = _as_text(value.value)

    subkeys = await registry.list_subkeys(product.hive, product.arch, product.key)
    install_key = next((s for s in subkeys if s.key.endswith("InstallPath")), None)
    if install_key is None:
        return None

    interpreter_path = None
    install_dir = None
    for value in await registry.list_values(install_key.hive, install_key.arch, install_key.key):
        if value.name == "ExecutablePath":
            interpreter_path = _as_text(value.value)
            if value.type not in (REG_SZ, REG_EXPAND_SZ):
                log.debug("Registry interpreter path type [%s]: %s", value.type, value.value)
        elif value.name == "":
            install_dir = _as_text(value.value)

    if interpreter_path is None and install_dir is not None:
        interpreter_path = install_dir.rstrip("\\/") + "\\python.exe"

    if interpreter_path is None:
        return None

    return RegistryInterpreterData(interpreter_path=interpreter_path, distro_org_name=distro_org_name, **fields)


async def get_interpreter_data_from_registry(
    registry: RegistryService,
    hive: str,
    arch: str,
    vendor_key: str,
    log: logging.Logger = logger,
) -> List[RegistryInterpreterData]:
    """Read every product under one vendor key. A vendor without products yields []."""
    distro_org_name = vendor_key[vendor_key.rfind("\\") + 1 :]
    results = []
    for product in await registry.list_subkeys(hive, arch, vendor_key):
        try:
            data = await get_interpreter_data_from_key(registry, product, distro_org_name, log)
        except (RegistryReadError, OSError) as e:
            log.error("%s", e)
            continue
        if data is not None:
            results.append(data)
    return results


async def get_registry_interpreters(
    registry: RegistryService,
    include_all_architectures: bool = True,
    log: logging.Logger = logger,
    host_is_32bit: Optional[bool] = None,
) -> List[RegistryInterpreterData]:
    """Collect interpreters from every hive and registry view.

    Branches are read in a fixed order (x64 before x86, HKLM before HKCU)
    and a failure in one branch does not stop the others. Records with the
    same interpreter path are de-duplicated, the first one found wins.

    Args:
        registry: Registry to read from
        include_all_architectures: Also read the 32-bit view on a 32-bit host
        log: Logger for branch failures
        host_is_32bit: Override host detection (defaults to platform.machine())

    Returns:
        List of RegistryInterpreterData
    """
    if host_is_32bit is None:
        host_is_32bit = is_32bit_host()

    arches = [
        arch
        for arch in ARCHITECTURES
        if include_all_architectures or not (arch == "x86" and host_is_32bit)
    ]

    found: List[RegistryInterpreterData] = []
    for arch in arches:
        for hive in HIVES:
            try:
                vendors = await registry.list_subkeys(hive, arch, PYTHON_ROOT_KEY)
            except (RegistryReadError, OSError) as e:
                log.error("%s", e)
                continue

            for vendor in vendors:
                try:
                    found.extend(
                        await get_interpreter_data_from_registry(registry, hive, arch, vendor.key, log)
                    )
                except (RegistryReadError, OSError) as e:
                    log.error("%s", e)

    seen = set()
    unique = []
    for data in found:
        key = norm_case_path(data.interpreter_path, case_insensitive=True)
        if key in seen:
            continue
        seen.add(key)
        unique.append(data)
    return unique


def find_registry_interpreter(
    interpreters: List[RegistryInterpreterData], executable: str
) -> Optional[RegistryInterpreterData]:
    """Find the record whose interpreter path matches ``executable``."""
    wanted = norm_case_path(executable, case_insensitive=True)
    for data in interpreters:
        if norm_case_path(data.interpreter_path, case_insensitive=True) == wanted:
            return data
    return None

"""Unit tests for EnvironmentResolver and the registry merge."""

import json
import logging
import os

import pytest

from pyenvs.common.externals import OSType
from pyenvs.common.windows_utils import PYTHON_ROOT_KEY, RegistryInterpreterData
from pyenvs.info.types import Architecture, PythonEnvKind, PythonEnvSource, build_env_info
from pyenvs.info.version import PythonVersion, parse_version
from pyenvs.resolver import (
    EnvironmentResolver,
    identify_environment,
    merge_registry_data,
    resolve_all,
    resolve_env,
)
from tests.helpers.fakes import FakeProcessRunner, InMemoryRegistry
from tests.helpers.layout import make_dir, touch
from tests.helpers.registry_data import sample_registry_data


class RootEnumFailingRegistry(InMemoryRegistry):
    """Raises a raw OSError while enumerating one hive's Python root."""

    def __init__(self, data, hive="HKLM", arch="x64", error=None):
        super().__init__(data)
        self.broken = (hive, arch, PYTHON_ROOT_KEY)
        self.error = error or OSError("EnumKey failed")

    async def list_subkeys(self, hive, arch, key):
        if (hive, arch, key) == self.broken:
            raise self.error
        return await super().list_subkeys(hive, arch, key)


@pytest.fixture
def reg_root(layout_root):
    root = os.path.join(layout_root, "winreg")
    touch(os.path.join(root, "py39", "python.exe"))
    touch(os.path.join(root, "python38", "python.exe"))
    conda_prefix = os.path.join(root, "conda3")
    touch(os.path.join(conda_prefix, "python.exe"))
    touch(os.path.join(conda_prefix, "conda-meta", "python-3.8.5-h5fd99cc_1.json"), "{}")
    return root


@pytest.fixture
def registry(reg_root):
    return InMemoryRegistry(sample_registry_data(reg_root))


class TestResolveWithRegistry:
    """Reconciling channel results with registry records."""

    @pytest.mark.asyncio
    async def test_unknown_env_promoted_to_other_global(self, make_context, reg_root, registry):
        executable = os.path.join(reg_root, "py39", "python.exe")

        env = await EnvironmentResolver(make_context(registry=registry)).resolve_env(executable)

        assert env.kind == PythonEnvKind.OTHER_GLOBAL
        assert env.version == parse_version("3.9.0rc2")
        assert env.arch == Architecture.X64
        assert env.org == "PythonCore"
        assert env.display_name == "Python 3.9 (64-bit)"
        assert env.name == "py39"
        assert env.location == os.path.join(reg_root, "py39")
        assert env.source == [PythonEnvSource.WINDOWS_REGISTRY]
        assert env.file_info is not None

    @pytest.mark.asyncio
    async def test_32bit_interpreter_from_user_hive(self, make_context, reg_root, registry):
        executable = os.path.join(reg_root, "python38", "python.exe")

        env = await EnvironmentResolver(make_context(registry=registry)).resolve_env(executable)

        assert env.kind == PythonEnvKind.OTHER_GLOBAL
        assert env.version == PythonVersion(3, 8, 5)
        assert env.arch == Architecture.X86
        assert env.org == "PythonCodingPack"
        assert env.display_name == "Python 3.8 (32-bit)"

    @pytest.mark.asyncio
    async def test_conda_env_keeps_kind_and_version(self, make_context, reg_root, registry):
        executable = os.path.join(reg_root, "conda3", "python.exe")

        env = await EnvironmentResolver(make_context(registry=registry)).resolve_env(executable)

        assert env.kind == PythonEnvKind.CONDA
        # conda-meta gives 3.8.5; "py38_4.8.3" is no more specific.
        assert env.version == PythonVersion(3, 8, 5)
        assert env.arch == Architecture.X64
        assert env.org == "ContinuumAnalytics"
        assert env.display_name == "Anaconda py38_4.8.3"
        assert env.name == "conda3"
        assert env.source == [PythonEnvSource.WINDOWS_REGISTRY]

    @pytest.mark.asyncio
    async def test_conda_org_not_overwritten(self, make_context, reg_root, registry):
        prefix = os.path.join(reg_root, "conda3")
        info = {"root_prefix": prefix, "envs": [prefix], "envs_dirs": []}
        runner = FakeProcessRunner({("conda", "info", "--json"): json.dumps(info)})
        context = make_context(registry=registry, runner=runner, os_type=OSType.WINDOWS)

        env = await EnvironmentResolver(context).resolve_env(os.path.join(prefix, "python.exe"))

        assert env.kind == PythonEnvKind.CONDA
        assert env.org == "Anaconda, Inc."
        assert env.name == "base"
        assert env.display_name == "Anaconda py38_4.8.3"
        assert env.source == [PythonEnvSource.CONDA, PythonEnvSource.WINDOWS_REGISTRY]

    @pytest.mark.asyncio
    async def test_sys_version_used_without_version(self, make_context, reg_root):
        data = sample_registry_data(reg_root)
        del data["x64"]["HKLM"][2]["values"]["Version"]
        context = make_context(registry=InMemoryRegistry(data))

        env = await EnvironmentResolver(context).resolve_env(os.path.join(reg_root, "py39", "python.exe"))

        assert env.version == PythonVersion(3, 9, -1)
        assert env.kind == PythonEnvKind.OTHER_GLOBAL

    @pytest.mark.asyncio
    async def test_env_without_record_is_unchanged(self, make_context, layout_root, registry):
        env_dir = os.path.join(layout_root, "project", ".venv")
        executable = touch(os.path.join(env_dir, "bin", "python"))
        touch(os.path.join(env_dir, "pyvenv.cfg"), "version = 3.9.1\n")

        with_registry = await EnvironmentResolver(make_context(registry=registry)).resolve_env(executable)
        without_registry = await EnvironmentResolver(make_context()).resolve_env(executable)

        assert with_registry == without_registry
        assert with_registry.kind == PythonEnvKind.VENV
        assert with_registry.source == []

    @pytest.mark.asyncio
    async def test_path_match_ignores_case(self, make_context, reg_root, registry):
        executable = os.path.join(reg_root, "PY39", "PYTHON.EXE")

        env = await EnvironmentResolver(make_context(registry=registry)).resolve_env(executable)

        assert env.org == "PythonCore"
        assert env.executable == executable

    @pytest.mark.asyncio
    async def test_registry_failure_does_not_fail_resolution(self, make_context, reg_root, caplog):
        registry = InMemoryRegistry(
            sample_registry_data(reg_root),
            failing={("HKLM", "x64", "\\SOFTWARE\\Python")},
        )
        context = make_context(registry=registry)

        with caplog.at_level(logging.ERROR, logger="pyenvs.tests"):
            env = await EnvironmentResolver(context).resolve_env(os.path.join(reg_root, "py39", "python.exe"))

        assert env.kind == PythonEnvKind.UNKNOWN
        assert env.source == []
        assert "Failed to access registry" in caplog.text

    @pytest.mark.asyncio
    async def test_raw_os_error_only_skips_its_branch(self, make_context, reg_root, caplog):
        context = make_context(registry=RootEnumFailingRegistry(sample_registry_data(reg_root)))
        resolver = EnvironmentResolver(context)

        with caplog.at_level(logging.ERROR, logger="pyenvs.tests"):
            unlisted = await resolver.resolve_env(os.path.join(reg_root, "py39", "python.exe"))
            listed = await resolver.resolve_env(os.path.join(reg_root, "python38", "python.exe"))

        assert unlisted.kind == PythonEnvKind.UNKNOWN
        assert unlisted.source == []
        assert listed.org == "PythonCodingPack"
        assert "EnumKey failed" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_registry_error_means_no_record(self, make_context, layout_root, caplog):
        registry = RootEnumFailingRegistry({}, error=RuntimeError("registry service crashed"))
        executable = touch(os.path.join(layout_root, "usr", "bin", "python3"))

        with caplog.at_level(logging.ERROR, logger="pyenvs.tests"):
            env = await EnvironmentResolver(make_context(registry=registry)).resolve_env(executable)

        assert env.kind == PythonEnvKind.UNKNOWN
        assert env.source == []
        assert "Failed to read interpreters from the registry" in caplog.text

    @pytest.mark.asyncio
    async def test_resolution_is_repeatable(self, make_context, reg_root, registry):
        resolver = EnvironmentResolver(make_context(registry=registry))
        executable = os.path.join(reg_root, "py39", "python.exe")

        assert await resolver.resolve_env(executable) == await resolver.resolve_env(executable)


class TestMergeRegistryData:
    """Field-by-field merge policy."""

    @pytest.fixture
    def record(self):
        return RegistryInterpreterData(
            interpreter_path="C:\\Python39\\python.exe",
            distro_org_name="PythonCore",
            version_str="3.9.1",
            sys_version_str="3.9",
            bitness_str="64bit",
            company_display_name="Python 3.9 (64-bit)",
        )

    def test_merge_twice_is_same_as_once(self, make_context, record):
        context = make_context()
        env = build_env_info(PythonEnvKind.UNKNOWN, record.interpreter_path)

        once = merge_registry_data(env, record, context)

        assert merge_registry_data(once, record, context) == once
        assert once.source == [PythonEnvSource.WINDOWS_REGISTRY]

    def test_less_specific_registry_version_ignored(self, make_context, record):
        env = build_env_info(PythonEnvKind.VENV, record.interpreter_path, version=PythonVersion(3, 9, 7))
        record = RegistryInterpreterData(record.interpreter_path, "PythonCore", version_str="3.9")

        merged = merge_registry_data(env, record, make_context())

        assert merged.version == PythonVersion(3, 9, 7)
        assert merged.kind == PythonEnvKind.VENV

    def test_unknown_bitness_keeps_arch(self, make_context):
        env = build_env_info(PythonEnvKind.WINDOWS_STORE, "C:\\x\\python.exe", arch=Architecture.X64)
        record = RegistryInterpreterData("C:\\x\\python.exe", "PythonCore")

        merged = merge_registry_data(env, record, make_context())

        assert merged.arch == Architecture.X64
        assert merged.org == "PythonCore"

    def test_existing_display_name_kept(self, make_context, record):
        env = build_env_info(PythonEnvKind.PYENV, record.interpreter_path, display_name="3.9.1:pyenv")

        merged = merge_registry_data(env, record, make_context())

        assert merged.display_name == "3.9.1:pyenv"

    def test_layout_fields_untouched(self, make_context, record):
        env = build_env_info(
            PythonEnvKind.VENV,
            record.interpreter_path,
            name="env",
            location="C:\\work\\env",
        )
        env.search_location = "C:\\work"

        merged = merge_registry_data(env, record, make_context())

        assert (merged.name, merged.location, merged.search_location) == ("env", "C:\\work\\env", "C:\\work")
        assert env.source == []

    def test_unparseable_registry_version(self, make_context):
        env = build_env_info(PythonEnvKind.UNKNOWN, "C:\\custom\\python.exe")
        record = RegistryInterpreterData("C:\\custom\\python.exe", "Vendor", version_str="latest")

        merged = merge_registry_data(env, record, make_context())

        assert merged.version.is_unknown
        assert merged.kind == PythonEnvKind.OTHER_GLOBAL


class TestResolveEnv:
    """Channel selection, workspace handling and input validation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["", "   "])
    async def test_empty_path_rejected(self, make_context, path):
        with pytest.raises(ValueError):
            await EnvironmentResolver(make_context()).resolve_env(path)

    @pytest.mark.asyncio
    async def test_unknown_interpreter(self, make_context, layout_root):
        executable = touch(os.path.join(layout_root, "usr", "bin", "python3.11"))

        env = await resolve_env(executable, make_context())

        assert env.kind == PythonEnvKind.UNKNOWN
        assert env.version == PythonVersion(3, 11, -1)
        assert env.location == os.path.join(layout_root, "usr")
        assert env.name == "usr"
        assert env.search_location is None

    @pytest.mark.asyncio
    async def test_workspace_env_gets_search_location(self, make_context, layout_root):
        project = os.path.join(layout_root, "project")
        env_dir = os.path.join(project, ".venv")
        executable = touch(os.path.join(env_dir, "bin", "python"))
        touch(os.path.join(env_dir, "pyvenv.cfg"), "version = 3.10.4\n")

        env = await resolve_env(executable, make_context(workspace=[project]))

        assert env.kind == PythonEnvKind.VENV
        assert env.search_location == project

    @pytest.mark.asyncio
    async def test_env_outside_workspace(self, make_context, layout_root):
        env_dir = os.path.join(layout_root, "elsewhere", "env")
        executable = touch(os.path.join(env_dir, "bin", "python"))
        touch(os.path.join(env_dir, "pyvenv.cfg"), "version = 3.10.4\n")
        context = make_context(workspace=[os.path.join(layout_root, "project")])

        env = await resolve_env(executable, context)

        assert env.search_location is None

    @pytest.mark.asyncio
    async def test_pyenv_wins_over_conda(self, make_context, layout_root):
        pyenv_root = os.path.join(layout_root, ".pyenv")
        env_dir = os.path.join(pyenv_root, "versions", "miniconda3-4.7.12")
        executable = touch(os.path.join(env_dir, "bin", "python"))
        make_dir(os.path.join(env_dir, "conda-meta"))
        context = make_context(env={"PYENV_ROOT": pyenv_root})

        assert await identify_environment(executable, context) == PythonEnvKind.PYENV
        env = await resolve_env(executable, context)
        assert env.kind == PythonEnvKind.PYENV
        assert env.org == "miniconda3"

    @pytest.mark.asyncio
    async def test_pipenv_wins_over_venv(self, make_context, layout_root):
        project = os.path.join(layout_root, "project")
        touch(os.path.join(project, "Pipfile"))
        env_dir = os.path.join(project, ".venv")
        executable = touch(os.path.join(env_dir, "bin", "python"))
        touch(os.path.join(env_dir, "pyvenv.cfg"), "version = 3.10.4\n")

        assert await identify_environment(executable, make_context()) == PythonEnvKind.PIPENV

    @pytest.mark.asyncio
    async def test_malformed_conda_output_does_not_block(self, make_context, layout_root):
        prefix = os.path.join(layout_root, "miniconda")
        executable = touch(os.path.join(prefix, "bin", "python"))
        make_dir(os.path.join(prefix, "conda-meta"))
        runner = FakeProcessRunner({("conda", "info", "--json"): json.dumps({"envs": [None]})})

        env = await resolve_env(executable, make_context(runner=runner))

        assert env.kind == PythonEnvKind.CONDA
        assert env.name == "miniconda"
        assert env.location == prefix

    @pytest.mark.asyncio
    async def test_identify_agrees_with_resolve_on_unreadable_marker(self, make_context, layout_root):
        env_dir = os.path.join(layout_root, "env")
        executable = touch(os.path.join(env_dir, "bin", "python"))
        touch(os.path.join(env_dir, "pyvenv.cfg"), "version = 3.10.4\n")
        with open(os.path.join(env_dir, ".project"), "wb") as f:
            f.write(b"\xff\xfe\x00")
        context = make_context()

        assert await identify_environment(executable, context) == PythonEnvKind.VENV
        assert (await resolve_env(executable, context)).kind == PythonEnvKind.VENV

    @pytest.mark.asyncio
    async def test_identify_unknown(self, make_context, layout_root):
        executable = touch(os.path.join(layout_root, "usr", "bin", "python"))
        assert await identify_environment(executable, make_context()) == PythonEnvKind.UNKNOWN

    @pytest.mark.asyncio
    async def test_resolve_all_skips_failures(self, make_context, layout_root, caplog):
        executable = touch(os.path.join(layout_root, "usr", "bin", "python3"))

        with caplog.at_level(logging.ERROR, logger="pyenvs.tests"):
            envs = await resolve_all(["", executable], make_context())

        assert [env.executable for env in envs] == [executable]
        assert "Failed to resolve environment" in caplog.text

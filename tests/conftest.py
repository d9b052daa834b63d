"""Pytest configuration and shared fixtures."""

import logging
import os
import tempfile
from typing import Callable, Generator

import pytest

from pyenvs.common.externals import OSType, WorkspaceFolders
from pyenvs.context import ResolverContext
from tests.helpers.fakes import FakeProcessRunner


@pytest.fixture
def layout_root() -> Generator[str, None, None]:
    """Create an empty temporary directory for interpreter layouts.

    Resolved with realpath so paths compare equal on macOS (/var vs /private/var).
    """
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield os.path.realpath(tmp_dir)


@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger("pyenvs.tests")


@pytest.fixture
def make_context(layout_root: str, test_logger: logging.Logger) -> Callable[..., ResolverContext]:
    """Factory for contexts isolated from the real machine.

    Defaults: Linux paths, no registry, no workspace folders, a process
    runner that knows no commands, and HOME inside ``layout_root``.
    """

    def _make(**overrides) -> ResolverContext:
        env = {"HOME": os.path.join(layout_root, "home")}
        env.update(overrides.pop("env", {}))
        workspace = overrides.pop("workspace", [])
        kwargs = dict(
            workspace=WorkspaceFolders(list(workspace)),
            runner=FakeProcessRunner(),
            registry=None,
            env=env,
            os_type=OSType.LINUX,
            logger=test_logger,
        )
        kwargs.update(overrides)
        return ResolverContext(**kwargs)

    return _make

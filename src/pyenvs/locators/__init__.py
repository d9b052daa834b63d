"""Channel recognizers and locators."""

from .base import Recognizer, resolve_simple_env
from .conda import CondaRecognizer
from .pyenv import PyenvRecognizer
from .registry import WindowsRegistryLocator
from .virtual_envs import (
    PipenvRecognizer,
    VenvRecognizer,
    VirtualEnvRecognizer,
    VirtualEnvWrapperRecognizer,
)
from .windows_store import WindowsStoreRecognizer

# Most specific heuristic first. The first recognizer that accepts a path wins.
RECOGNIZER_ORDER = (
    PyenvRecognizer,
    CondaRecognizer,
    WindowsStoreRecognizer,
    PipenvRecognizer,
    VenvRecognizer,
    VirtualEnvWrapperRecognizer,
    VirtualEnvRecognizer,
)

__all__ = [
    "RECOGNIZER_ORDER",
    "Recognizer",
    "resolve_simple_env",
    "CondaRecognizer",
    "PyenvRecognizer",
    "WindowsRegistryLocator",
    "PipenvRecognizer",
    "VenvRecognizer",
    "VirtualEnvRecognizer",
    "VirtualEnvWrapperRecognizer",
    "WindowsStoreRecognizer",
]

"""The process-wide default registry and module-level shortcuts.

Every function here runs against the registry returned by ``get_default()``.
Applications that need more than one configuration should create ``DotEnv``
instances and pass them around; ``replace_default()`` is meant for tests and
bootstrap code.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, TypeVar

from pydantic import BaseModel

from ._decoder import Decoder
from ._registry import DotEnv

TModel = TypeVar("TModel", bound=BaseModel)

# ---------------------------------------------------------------------------
# Module-level registry management
# ---------------------------------------------------------------------------

_default_lock = threading.Lock()
_default = DotEnv()


def get_default() -> DotEnv:
    """Return the current default registry."""
    with _default_lock:
        return _default


def replace_default(env: DotEnv) -> Callable[[], None]:
    """Install *env* as the default registry.

    Returns a function that restores the previous default. Code that already
    holds a reference to the previous registry keeps using it.

    Usage::

        restore = replace_default(DotEnv("test.env"))
        try:
            ...
        finally:
            restore()
    """
    global _default
    with _default_lock:
        previous = _default
        _default = env

    def restore() -> None:
        replace_default(previous)

    return restore


# ---------------------------------------------------------------------------
# Shortcuts
# ---------------------------------------------------------------------------


def load(*, optional: bool = False) -> bool:
    """Load the config file of the default registry. See ``DotEnv.load``."""
    return get_default().load(optional=optional)


def load_with_decoder(decoder: Decoder, *, optional: bool = False) -> bool:
    return get_default().load_with_decoder(decoder, optional=optional)


def set_config_file(config_file: str | Path) -> None:
    get_default().set_config_file(config_file)


def set_prefix(prefix: str) -> None:
    get_default().set_prefix(prefix)


def get_prefix() -> str:
    return get_default().get_prefix()


def allow_empty_env_vars(allow: bool) -> None:
    get_default().allow_empty_env_vars(allow)


def lookup(key: str) -> tuple[Any, bool]:
    return get_default().lookup(key)


def get(key: str) -> Any:
    return get_default().get(key)


def is_set(key: str) -> bool:
    return get_default().is_set(key)


def get_string(key: str) -> str:
    return get_default().get_string(key)


def get_bool(key: str) -> bool:
    return get_default().get_bool(key)


def get_int(key: str) -> int:
    return get_default().get_int(key)


def get_uint(key: str) -> int:
    return get_default().get_uint(key)


def get_float(key: str) -> float:
    return get_default().get_float(key)


def get_duration(key: str) -> timedelta:
    return get_default().get_duration(key)


def get_time(key: str) -> datetime:
    return get_default().get_time(key)


def get_int_slice(key: str) -> list[int]:
    return get_default().get_int_slice(key)


def get_string_slice(key: str) -> list[str]:
    return get_default().get_string_slice(key)


def get_size_in_bytes(key: str) -> int:
    return get_default().get_size_in_bytes(key)


def set(key: str, value: Any) -> None:  # noqa: A001
    get_default().set(key, value)


def save() -> None:
    get_default().save()


def write(key: str, value: Any) -> None:
    get_default().write(key, value)


def unmarshal(model: type[TModel]) -> TModel:
    return get_default().unmarshal(model)

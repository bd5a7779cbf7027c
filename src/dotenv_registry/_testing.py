"""Test utilities for code that reads the default registry."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from ._default import replace_default
from ._registry import DotEnv


@contextmanager
def override_registry(
    values: Mapping[str, Any] | None = None,
    *,
    prefix: str = "",
    allow_empty_env_vars: bool = False,
) -> Iterator[DotEnv]:
    """Temporarily replace the default registry with a fresh ``DotEnv``.

    Usage::

        with override_registry({"DEBUG": "true"}) as env:
            assert get_bool("debug") is True
            env.set("extra", 42)  # mutate inside context
    """
    fake = DotEnv(prefix=prefix, allow_empty_env_vars=allow_empty_env_vars)
    for key, value in (values or {}).items():
        fake.set(key, value)

    restore = replace_default(fake)
    try:
        yield fake
    finally:
        restore()

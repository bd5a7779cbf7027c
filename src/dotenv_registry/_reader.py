"""``config()``: strict reads with explicit errors.

The ``get_*`` accessors of ``DotEnv`` never raise and fall back to zero
values. ``config()`` is the alternative for values that must be present and
well-formed:

1. Environment variable / cache, via ``DotEnv.lookup``
2. Default value (returned as-is, **not** passed through ``cast``)
3. Raise ``UndefinedValueError``
"""

from __future__ import annotations

from typing import Any, Callable

from ._casters import _cast_bool
from ._default import get_default
from ._registry import DotEnv
from ._types import UNDEFINED, UndefinedValueError, _Undefined


def _identity(value: Any) -> Any:
    """Return the value unchanged. Used as the default no-op caster."""
    return value


def _resolve_cast(cast: Callable | type | None) -> Callable[[Any], Any]:
    """Return the actual callable to apply to raw values."""
    if cast is None:
        return _identity
    if cast is bool:
        return _cast_bool
    return cast


def config(
    key: str,
    *,
    default: Any = UNDEFINED,
    cast: Callable | type | None = None,
    registry: DotEnv | None = None,
) -> Any:
    """Read a configuration value with type casting and fail-fast semantics.

    Parameters
    ----------
    key:
        Key to look up. The registry prefix is applied as for ``DotEnv.get``.
    default:
        Fallback value if the key is not set. Returned **as-is**
        (not passed through *cast*).
    cast:
        Callable to coerce the raw value. ``bool`` is special-cased to handle
        string representations like ``"true"`` / ``"0"``. Errors raised by the
        cast propagate.
    registry:
        Registry to read from. Defaults to the process-wide registry.
    """
    active = registry or get_default()

    value, found = active.lookup(key)
    if found:
        return _resolve_cast(cast)(value)

    if not isinstance(default, _Undefined):
        return default

    raise UndefinedValueError(key)

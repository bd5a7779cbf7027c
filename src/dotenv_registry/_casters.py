"""Cast helpers for config values.

These callables transform raw values (usually strings read from a dotenv
file or the environment) into the desired Python types.

Two families are provided:

* ``parse_*`` functions are strict and raise ``ValueError`` on bad input.
* ``to_*`` functions are lenient: they return the type's zero value instead
  of raising. The typed ``get_*`` accessors of the registry use these, so a
  malformed value never breaks a call site.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Sequence

from pydantic import TypeAdapter, ValidationError

# Zero value for ``to_time``: the first instant of year 1, in UTC.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_DATETIME_ADAPTER = TypeAdapter(datetime)
_TIMEDELTA_ADAPTER = TypeAdapter(timedelta)


# ---------------------------------------------------------------------------
# Bool caster
# ---------------------------------------------------------------------------

_TRUTHY = frozenset({"1", "true", "yes", "on", "t", "y"})
_FALSY = frozenset({"0", "false", "no", "off", "f", "n", ""})


def _cast_bool(value: Any) -> bool:
    """Cast a value to ``bool``, handling common string representations.

    Raises ``ValueError`` for unrecognised strings.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in _TRUTHY:
            return True
        if lower in _FALSY:
            return False
        raise ValueError(f"Cannot cast {value!r} to bool")
    raise ValueError(f"Cannot cast {type(value).__name__} to bool")


# ---------------------------------------------------------------------------
# Strict parsers
# ---------------------------------------------------------------------------


def parse_int(value: Any) -> int:
    """Parse an integer. Accepts ``0x``/``0o``/``0b`` prefixes and leading zeros."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Cannot cast {value!r} to int without losing precision")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if "_" in text:
            raise ValueError(f"Cannot cast {value!r} to int")
        try:
            return int(text, 10)
        except ValueError:
            try:
                return int(text, 0)
            except ValueError:
                raise ValueError(f"Cannot cast {value!r} to int") from None
    raise ValueError(f"Cannot cast {type(value).__name__} to int")


def parse_float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValueError(f"Cannot cast {value!r} to float") from None
    raise ValueError(f"Cannot cast {type(value).__name__} to float")


_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# Unit sizes in seconds.
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _parse_unit_duration(text: str) -> timedelta | None:
    """Parse ``1h30m``-style durations. Returns ``None`` if *text* is not one."""
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if not text:
        return None

    seconds = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            return None
        number, unit = match.groups()
        seconds += float(number) * _DURATION_UNITS[unit]
        pos = match.end()
    return timedelta(seconds=sign * seconds)


def format_duration(value: timedelta) -> str:
    """Render a ``timedelta`` as seconds (``"90s"``), readable by ``parse_duration``."""
    seconds = value.total_seconds()
    if seconds.is_integer():
        return f"{int(seconds)}s"
    return f"{seconds!r}s"


def parse_duration(value: Any) -> timedelta:
    """Parse a duration.

    Accepted forms:

    * ``timedelta`` instances (returned unchanged);
    * numbers and numeric strings, read as seconds;
    * unit strings such as ``"300ms"``, ``"1.5h"`` or ``"1h30m10s"``;
    * anything pydantic accepts for ``timedelta`` (ISO 8601 ``"PT1H"``,
      ``"HH:MM:SS"``).
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot cast {value!r} to timedelta")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return timedelta(seconds=float(text))
        except (ValueError, OverflowError):
            pass
        parsed = _parse_unit_duration(text)
        if parsed is not None:
            return parsed
    try:
        return _TIMEDELTA_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError(f"Cannot cast {value!r} to timedelta") from None


def parse_time(value: Any) -> datetime:
    """Parse a point in time.

    ISO 8601 strings (including a trailing ``Z`` and date-only values) are
    handled first; anything else is left to pydantic, which also accepts Unix
    timestamps.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    try:
        return _DATETIME_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError(f"Cannot cast {value!r} to datetime") from None


_SIZE_MULTIPLIERS = {"k": 1 << 10, "m": 1 << 20, "g": 1 << 30}


def parse_size_in_bytes(value: Any) -> int:
    """Convert strings like ``"1GB"`` or ``"12 mb"`` into a number of bytes.

    Negative sizes are clamped to ``0``.
    """
    text = to_string(value).strip()
    multiplier = 1
    if len(text) > 1 and text[-1] in "bB":
        if len(text) > 2 and text[-2].lower() in _SIZE_MULTIPLIERS:
            multiplier = _SIZE_MULTIPLIERS[text[-2].lower()]
            text = text[:-2].strip()
        else:
            text = text[:-1].strip()
    return max(parse_int(text), 0) * multiplier


# ---------------------------------------------------------------------------
# Lenient casters
# ---------------------------------------------------------------------------


def _lenient(parse: Callable[[Any], Any], zero: Any) -> Callable[[Any], Any]:
    def cast(value: Any) -> Any:
        if value is None:
            return zero
        try:
            return parse(value)
        except (ValueError, TypeError, OverflowError):
            return zero

    cast.__name__ = parse.__name__.replace("parse_", "to_")
    cast.__doc__ = f"Lenient form of ``{parse.__name__}``; returns ``{zero!r}`` on failure."
    return cast


def to_string(value: Any) -> str:
    """Render *value* as a string. ``None`` becomes ``""``."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(to_string(item) for item in value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return format_duration(value)
    return str(value)


to_bool = _lenient(_cast_bool, False)
to_int = _lenient(parse_int, 0)
to_float = _lenient(parse_float, 0.0)
to_duration = _lenient(parse_duration, timedelta(0))
to_time = _lenient(parse_time, ZERO_TIME)
to_size_in_bytes = _lenient(parse_size_in_bytes, 0)


def to_uint(value: Any) -> int:
    """Lenient non-negative integer; negative or invalid input gives ``0``."""
    return max(to_int(value), 0)


def _split_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        items = [to_string(item).strip() for item in value]
        return [item for item in items if item]
    text = to_string(value).strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    return Csv()(text)


def to_string_slice(value: Any) -> list[str]:
    """Split ``"a,b"`` or ``"[a, b]"`` into ``["a", "b"]``."""
    return _split_list(value)


def to_int_slice(value: Any) -> list[int]:
    """Like ``to_string_slice`` but casts items to int; any bad item gives ``[]``."""
    try:
        return [parse_int(item) for item in _split_list(value)]
    except ValueError:
        return []


# ---------------------------------------------------------------------------
# Csv
# ---------------------------------------------------------------------------


class Csv:
    """Split a string into a list, with optional per-element casting.

    >>> Csv()("a, b, c")
    ['a', 'b', 'c']
    >>> Csv(cast=int)("1,2,3")
    [1, 2, 3]
    """

    def __init__(
        self,
        cast: Callable[[str], Any] = str,
        delimiter: str = ",",
        strip: bool = True,
        post_process: Callable[[list], Any] | None = None,
    ) -> None:
        self.cast = cast
        self.delimiter = delimiter
        self.strip = strip
        self.post_process = post_process

    def __call__(self, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return value

        parts = str(value).split(self.delimiter)
        if self.strip:
            parts = [p.strip() for p in parts]
        result = [self.cast(p) for p in parts if p]

        if self.post_process is not None:
            return self.post_process(result)
        return result


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------


class Choices:
    """Validate that a value is one of a fixed set of choices.

    >>> Choices(["debug", "info", "warning"])("info")
    'info'
    """

    def __init__(
        self,
        choices: Sequence[Any],
        cast: Callable[[Any], Any] = str,
    ) -> None:
        self.choices = choices
        self.cast = cast

    def __call__(self, value: Any) -> Any:
        casted = self.cast(value)
        if casted not in self.choices:
            raise ValueError(
                f"{casted!r} is not a valid choice. Must be one of {list(self.choices)}"
            )
        return casted

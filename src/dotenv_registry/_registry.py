"""``DotEnv``: a prioritized .env configuration registry.

Lookup order for a key:

1. Environment variable (``{PREFIX}_{KEY}`` upper-cased, when a prefix is set)
2. Cache: values loaded from the config file or set explicitly with ``set()``
3. Declared defaults (only when binding a model with ``unmarshal()``)

For example, given::

    Defaults:     USER=default      ENDPOINT=https://localhost
    Config file:  USER=root         SECRET=secretFromConfig
    Environment:  SECRET=secretFromEnv

the resolved values are ``SECRET=secretFromEnv``, ``USER=root`` and
``ENDPOINT=https://localhost``.

A ``DotEnv`` is safe to share between threads for ``get_*()``/``set()``.
"""

from __future__ import annotations

import logging
import os
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from . import _casters
from ._binding import bind
from ._decoder import UTF8_BOM, Decoder, DotEnvDecoder
from ._types import ConfigFileNotFoundError
from ._writer import DEFAULT_FILE_MODE, write_file_atomic

TModel = TypeVar("TModel", bound=BaseModel)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".env"
PREFIX_SEPARATOR = "_"

_NEEDS_QUOTING = ("\n", "\r", '"', "'", "#", "\\")


def _format_value(value: str) -> str:
    """Render a value so that decoding it again gives back the same string."""
    if value == value.strip() and not any(char in value for char in _NEEDS_QUOTING):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class DotEnv:
    """Configuration registry backed by a dotenv file.

    Creating an instance does not read anything; call ``load()`` for that.
    """

    def __init__(
        self,
        config_file: str | Path = DEFAULT_CONFIG_FILE,
        *,
        decoder: Decoder | None = None,
        prefix: str = "",
        allow_empty_env_vars: bool = False,
    ) -> None:
        self._config_file = Path(config_file)
        self._decoder: Decoder = decoder or DotEnvDecoder()
        self._prefix = ""
        self._allow_empty_env_vars = allow_empty_env_vars
        self._lock = threading.Lock()
        self._cache: dict[str, Any] | None = None
        self.set_prefix(prefix)

    def __repr__(self) -> str:
        return f"<DotEnv config_file={str(self._config_file)!r} prefix={self.get_prefix()!r}>"

    # -- configuration --------------------------------------------------------

    @property
    def config_file(self) -> Path:
        return self._config_file

    def set_config_file(self, config_file: str | Path) -> None:
        """Set the path of the file ``load()`` and ``save()`` use."""
        self._config_file = Path(config_file)

    @property
    def decoder(self) -> Decoder:
        return self._decoder

    def set_decoder(self, decoder: Decoder) -> None:
        self._decoder = decoder

    def set_prefix(self, prefix: str) -> None:
        """Set a prefix applied to every key.

        With prefix ``"pro"``, ``get("port")`` looks for ``PRO_PORT`` in the
        environment and in the cache. An empty prefix disables prefixing.
        """
        self._prefix = prefix.upper() + PREFIX_SEPARATOR if prefix else ""

    def get_prefix(self) -> str:
        """Return the prefix set with ``set_prefix()``, without the separator."""
        return self._prefix.removesuffix(PREFIX_SEPARATOR)

    def allow_empty_env_vars(self, allow: bool) -> None:
        """Treat environment variables that are set but empty as valid values.

        When disabled (the default), an empty environment variable falls
        through to the cached value.
        """
        self._allow_empty_env_vars = allow

    def _effective_key(self, key: str) -> str:
        key = key.upper()
        if self._prefix and not key.startswith(self._prefix):
            key = self._prefix + key
        return key

    # -- loading ----------------------------------------------------------------

    def load(self, *, optional: bool = False) -> bool:
        """Read and decode the config file, replacing the cache.

        The cache is only replaced once the whole file decoded successfully.

        :param optional: If True, a missing file returns False instead of raising.
        :returns: True if the file was loaded.
        :raises ConfigFileNotFoundError: if the file does not exist.
        :raises DecodeError: if the file is malformed.
        """
        try:
            data = self._config_file.read_bytes()
        except FileNotFoundError:
            if optional:
                logger.debug("Config file %s not found, skipping", self._config_file)
                return False
            raise ConfigFileNotFoundError(self._config_file) from None

        data = data.removeprefix(UTF8_BOM.encode("utf-8"))
        config = {str(key).upper(): value for key, value in self._decoder.decode(data).items()}

        with self._lock:
            self._cache = config

        logger.debug("Loaded %d entries from %s", len(config), self._config_file)
        return True

    def load_with_decoder(self, decoder: Decoder, *, optional: bool = False) -> bool:
        """Install *decoder* and then ``load()``."""
        self.set_decoder(decoder)
        return self.load(optional=optional)

    # -- lookups ----------------------------------------------------------------

    def lookup(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, True)`` if *key* is set, else ``(None, False)``."""
        if not key:
            return None, False

        key = self._effective_key(key)

        env_value = os.environ.get(key)
        if env_value is not None and (env_value != "" or self._allow_empty_env_vars):
            return env_value, True

        with self._lock:
            if self._cache is not None and key in self._cache:
                return self._cache[key], True

        return None, False

    def get(self, key: str) -> Any:
        """Return the value for *key*, or ``None`` if it is not set."""
        value, _ = self.lookup(key)
        return value

    def is_set(self, key: str) -> bool:
        """True if *key* is set in the environment or the cache."""
        _, found = self.lookup(key)
        return found

    def get_string(self, key: str) -> str:
        return _casters.to_string(self.get(key))

    def get_bool(self, key: str) -> bool:
        return _casters.to_bool(self.get(key))

    def get_int(self, key: str) -> int:
        return _casters.to_int(self.get(key))

    def get_uint(self, key: str) -> int:
        return _casters.to_uint(self.get(key))

    def get_float(self, key: str) -> float:
        return _casters.to_float(self.get(key))

    def get_duration(self, key: str) -> timedelta:
        return _casters.to_duration(self.get(key))

    def get_time(self, key: str) -> datetime:
        return _casters.to_time(self.get(key))

    def get_int_slice(self, key: str) -> list[int]:
        return _casters.to_int_slice(self.get(key))

    def get_string_slice(self, key: str) -> list[str]:
        return _casters.to_string_slice(self.get(key))

    def get_size_in_bytes(self, key: str) -> int:
        """Return a size such as ``"10MB"`` or ``"512 kb"`` as a number of bytes."""
        return _casters.to_size_in_bytes(self.get(key))

    # -- mutation ---------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Set *key* in the cache.

        The value overrides the one loaded from the config file until the next
        ``load()``. Environment variables still take precedence.
        """
        key = self._effective_key(key)
        with self._lock:
            if self._cache is None:
                self._cache = {}
            self._cache[key] = value

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the cache."""
        with self._lock:
            return dict(self._cache or {})

    def save(self, *, mode: int = DEFAULT_FILE_MODE) -> None:
        """Write the whole cache to the config file as ``KEY=value`` lines.

        :raises ConfigWriteError: if the file cannot be written.
        """
        entries = self.to_dict()
        payload = "".join(
            f"{key}={_format_value(_casters.to_string(value))}\n"
            for key, value in entries.items()
        )
        write_file_atomic(self._config_file, payload.encode("utf-8"), mode)
        logger.debug("Saved %d entries to %s", len(entries), self._config_file)

    def write(self, key: str, value: Any) -> None:
        """``set(key, value)`` followed by ``save()``."""
        self.set(key, value)
        self.save()

    # -- binding ----------------------------------------------------------------

    def unmarshal(self, model: type[TModel]) -> TModel:
        """Build an instance of the pydantic *model* from this registry.

        See ``dotenv_registry.Env`` for how fields map to keys.
        """
        return bind(self, model)

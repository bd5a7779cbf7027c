"""dotenv-registry: load ``.env`` files and resolve settings by precedence.

Values are looked up in the process environment first, then in the cache
filled from the config file (or with ``set()``), then in declared defaults
when binding a model.

Provides:
- DotEnv: the registry (load, typed getters, set, save, model binding).
- DotEnvDecoder: the dotenv text decoder, pluggable through ``Decoder``.
- Module-level shortcuts acting on a process-wide default registry.
- config(): strict reads that raise instead of falling back to zero values.
"""

from ._version import __version__
from ._binding import Env, EnvModel, TextUnmarshaler
from ._casters import Choices, Csv, ZERO_TIME
from ._decoder import Decoder, DotEnvDecoder
from ._default import (
    allow_empty_env_vars,
    get,
    get_bool,
    get_default,
    get_duration,
    get_float,
    get_int,
    get_int_slice,
    get_prefix,
    get_size_in_bytes,
    get_string,
    get_string_slice,
    get_time,
    get_uint,
    is_set,
    load,
    load_with_decoder,
    lookup,
    replace_default,
    save,
    set,
    set_config_file,
    set_prefix,
    unmarshal,
    write,
)
from ._reader import config
from ._registry import DEFAULT_CONFIG_FILE, DotEnv
from ._testing import override_registry
from ._types import (
    BindError,
    ConfigError,
    ConfigFileNotFoundError,
    ConfigWriteError,
    DecodeError,
    UndefinedValueError,
    UnsupportedFieldTypeError,
)

__all__ = [
    "__version__",
    # Core
    "DotEnv",
    "DEFAULT_CONFIG_FILE",
    "Decoder",
    "DotEnvDecoder",
    "config",
    # Default registry
    "get_default",
    "replace_default",
    "load",
    "load_with_decoder",
    "set_config_file",
    "set_prefix",
    "get_prefix",
    "allow_empty_env_vars",
    "lookup",
    "get",
    "is_set",
    "get_string",
    "get_bool",
    "get_int",
    "get_uint",
    "get_float",
    "get_duration",
    "get_time",
    "get_int_slice",
    "get_string_slice",
    "get_size_in_bytes",
    "set",
    "save",
    "write",
    "unmarshal",
    # Binding
    "Env",
    "EnvModel",
    "TextUnmarshaler",
    # Helpers
    "Csv",
    "Choices",
    "ZERO_TIME",
    # Errors
    "ConfigError",
    "DecodeError",
    "ConfigFileNotFoundError",
    "ConfigWriteError",
    "BindError",
    "UnsupportedFieldTypeError",
    "UndefinedValueError",
    # Testing
    "override_registry",
]

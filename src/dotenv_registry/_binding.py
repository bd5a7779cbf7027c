"""Bind registry values onto pydantic models.

Fields declare their source key and default with ``Env`` metadata::

    class Database(EnvModel):
        url: Annotated[str, Env("DATABASE_URL", default="sqlite://")]

    class Settings(EnvModel):
        port: Annotated[int, Env("PORT", default="8080")]
        timeout: Annotated[timedelta, Env("TIMEOUT", default="30s")]
        hosts: Annotated[list[str], Env("HOSTS")]
        database: Database

    settings = Settings.load()          # the default registry
    settings = env.unmarshal(Settings)  # an explicit one

Resolution per field:

1. Nested models are bound recursively.
2. ``registry.get_string(env.name)`` (environment, then cache)
3. ``Env(default=...)``, when the value above is empty
4. The pydantic field default, when the field has one
5. The zero value of the field type (``""``, ``0``, ``False``, ``[]``, ...)

Values are converted with the caster registered for the field type. Types
providing an ``unmarshal_text(text)`` classmethod build themselves instead.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    List,
    Optional,
    Protocol,
    TypeVar,
    Union,
    get_args,
    get_origin,
    runtime_checkable,
)

from pydantic import BaseModel, ConfigDict, ValidationError

from ._casters import (
    to_bool,
    to_duration,
    to_float,
    to_int,
    to_int_slice,
    to_string,
    to_string_slice,
    to_time,
)
from ._types import BindError, UnsupportedFieldTypeError

if TYPE_CHECKING:
    from ._registry import DotEnv

TModel = TypeVar("TModel", bound=BaseModel)

_CASTERS: dict[Any, Callable[[Any], Any]] = {
    str: to_string,
    int: to_int,
    float: to_float,
    bool: to_bool,
    timedelta: to_duration,
    datetime: to_time,
    list[int]: to_int_slice,
    List[int]: to_int_slice,
    list[str]: to_string_slice,
    List[str]: to_string_slice,
}


@dataclass(frozen=True)
class Env:
    """Field metadata naming the key a value is read from.

    ``default`` is a raw string, converted like a value read from the file.
    """

    name: str
    default: Optional[str] = None


@runtime_checkable
class TextUnmarshaler(Protocol):
    """A type that can build itself from its text form."""

    @classmethod
    def unmarshal_text(cls, text: str) -> Any:
        ...


class EnvModel(BaseModel):
    """Base class for models bound from a registry.

    Allows arbitrary field types so ``TextUnmarshaler`` classes can be used.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def load(cls: type[TModel], registry: DotEnv | None = None) -> TModel:
        """Bind a new instance from *registry* (the default registry if omitted)."""
        from ._default import get_default

        return bind(registry or get_default(), cls)


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """``Optional[X]`` -> ``(X, True)``; anything else -> ``(annotation, False)``."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0], True
    return annotation, False


def _find_env(metadata: list[Any]) -> Env | None:
    for item in metadata:
        if isinstance(item, Env):
            return item
    return None


def _converter_for(field_name: str, annotation: Any) -> Callable[[str], Any]:
    target, optional = _unwrap_optional(annotation)

    if isinstance(target, type) and isinstance(target, TextUnmarshaler):

        def convert(text: str) -> Any:
            try:
                return target.unmarshal_text(text)
            except Exception as exc:
                raise BindError(f"Could not unmarshal field '{field_name}': {exc}") from exc

    else:
        caster = _CASTERS.get(target)
        if caster is None:
            raise UnsupportedFieldTypeError(field_name, annotation)
        convert = caster

    if optional:
        return lambda text: convert(text) if text else None
    return convert


def bind(registry: DotEnv, model: type[TModel]) -> TModel:
    """Build an instance of *model* from the values in *registry*.

    :raises UnsupportedFieldTypeError: if a field type has no caster.
    :raises BindError: if a value cannot be unmarshalled or the model rejects it.
    """
    if not _is_model(model):
        raise BindError(f"Expected a pydantic model class, got {model!r}")

    raw_data: dict[str, Any] = {}

    for field_name, field in model.model_fields.items():
        annotation = field.annotation

        nested, _ = _unwrap_optional(annotation)
        if _is_model(nested):
            raw_data[field_name] = bind(registry, nested)
            continue

        convert = _converter_for(field_name, annotation)

        env = _find_env(field.metadata)
        text = registry.get_string(env.name) if env is not None else ""
        if not text and env is not None and env.default is not None:
            text = env.default

        # Let pydantic apply its own default.
        if not text and not field.is_required():
            continue

        raw_data[field_name] = convert(text)

    try:
        return model.model_validate(raw_data)
    except ValidationError as exc:
        raise BindError(f"Could not bind {model.__name__}: {exc}") from exc

"""Base class and capability protocols for JSON data-transfer types."""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping
from typing import Any, Protocol, TypeVar, runtime_checkable

P = TypeVar("P", bound="Payload")

_JSON_KEY = "json"
_OMITEMPTY = "omitempty"


@runtime_checkable
class HeaderProvider(Protocol):
    """Request body that contributes extra HTTP headers of its own."""

    def metadata(self) -> Mapping[str, str]: ...


@runtime_checkable
class RawStream(Protocol):
    """Readable, closable byte source sent without JSON encoding."""

    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


def json_field(
    key: str,
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    omitempty: bool = False,
) -> Any:
    """Declare a dataclass field serialized under the JSON name ``key``."""

    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_JSON_KEY: key, _OMITEMPTY: omitempty},
    )


class Payload:
    """Mixin for dataclasses mirroring REST payloads.

    Subclasses are plain ``@dataclass`` types whose fields are declared with
    :func:`json_field` and all carry defaults. Payloads carry no behavior beyond
    (de)serialization and optional request metadata headers.
    """

    def metadata(self) -> dict[str, str]:
        return dict(getattr(self, "_metadata", None) or {})

    def set_metadata(self, headers: Mapping[str, str] | None) -> None:
        object.__setattr__(self, "_metadata", dict(headers or {}))

    def to_dict(self) -> dict[str, Any]:
        encoded: dict[str, Any] = {}
        for field in _json_fields(type(self)):
            value = getattr(self, field.name)
            if field.metadata[_OMITEMPTY] and _is_empty(value):
                continue
            encoded[field.metadata[_JSON_KEY]] = _encode(value)
        return encoded

    @classmethod
    def from_dict(cls: type[P], data: Mapping[str, Any]) -> P:
        instance = cls()
        instance.update_from_dict(data)
        return instance

    def update_from_dict(self, data: Mapping[str, Any]) -> None:
        """Merge ``data`` into this instance; keys absent from ``data`` are left alone."""

        if not isinstance(data, Mapping):
            raise TypeError(f"{type(self).__name__} expects a JSON object, got {type(data).__name__}")
        hints = typing.get_type_hints(type(self))
        for field in _json_fields(type(self)):
            key = field.metadata[_JSON_KEY]
            if key in data:
                setattr(self, field.name, _decode(hints.get(field.name, Any), data[key]))


def _json_fields(cls: type) -> list[dataclasses.Field]:
    return [field for field in dataclasses.fields(cls) if _JSON_KEY in field.metadata]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, bool):
        return value is False
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _encode(value: Any) -> Any:
    if isinstance(value, Payload):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def _decode(hint: Any, value: Any) -> Any:
    origin = typing.get_origin(hint)
    if origin in (typing.Union, types.UnionType):
        if value is None:
            return None
        candidates = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        return _decode(candidates[0], value) if len(candidates) == 1 else value
    if origin is list:
        if value is None:
            return []
        if not isinstance(value, list):
            raise TypeError(f"expected a JSON array, got {type(value).__name__}")
        (item_hint,) = typing.get_args(hint) or (Any,)
        return [_decode(item_hint, item) for item in value]
    if isinstance(hint, type) and issubclass(hint, Payload):
        if value is None:
            return None
        return hint.from_dict(value)
    return value

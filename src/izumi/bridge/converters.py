"""
Type coercion of loosely-typed argument values.

Values arriving from a remote caller (parsed JSON, URL parameters) rarely have
the exact type an exposed callable declares. The ConverterRegistry converts
them on a best-effort basis: registered per-type converters first, then a
conversion directed by the coarse Kind of source and target.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import re
from collections.abc import Callable, Mapping, Sequence
from collections.abc import Set as AbstractSet
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, get_args, get_origin, is_typeddict

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import ConversionError
from .introspection import SignatureIntrospector

logger = logging.getLogger(__name__)

Converter = Callable[[Any, Any], Any]


class Kind(Enum):
    """Coarse type classes. The value is the character used in signature strings."""

    BOOL = "b"
    INT = "i"
    FLOAT = "f"
    STRING = "s"
    ARRAY = "a"
    MAP = "m"
    OBJECT = "o"
    UNSUPPORTED = "_"


def _is_untyped(type_hint: Any) -> bool:
    return type_hint is Any or type_hint is object or type_hint is inspect.Parameter.empty


def kind_of(type_hint: Any) -> Kind:
    """Classify a type hint into its coarse Kind."""
    type_hint = SignatureIntrospector.unwrap_optional(SignatureIntrospector.unwrap_annotated(type_hint))
    if _is_untyped(type_hint):
        return Kind.OBJECT

    origin = get_origin(type_hint) or type_hint
    if origin is Callable:
        return Kind.UNSUPPORTED
    if not isinstance(origin, type):
        return Kind.OBJECT

    if issubclass(origin, bool):
        return Kind.BOOL
    if issubclass(origin, Enum):
        return Kind.OBJECT
    if issubclass(origin, int):
        return Kind.INT
    if issubclass(origin, float):
        return Kind.FLOAT
    if issubclass(origin, complex):
        return Kind.UNSUPPORTED
    if issubclass(origin, str):
        return Kind.STRING
    if issubclass(origin, (bytes, bytearray)):
        return Kind.ARRAY
    if issubclass(origin, Mapping):
        return Kind.MAP
    if issubclass(origin, (Sequence, AbstractSet)):
        return Kind.ARRAY
    return Kind.OBJECT


def _is_instance(value: Any, cls: type) -> bool:
    # bool is an int subclass but never passes as an integer
    if isinstance(value, bool) and cls is not bool and issubclass(cls, int):
        return False
    return isinstance(value, cls)


def kind_of_value(value: Any) -> Kind:
    """Classify a runtime value into its coarse Kind."""
    return kind_of(type(value))


def is_structured(type_hint: Any) -> bool:
    """Check whether a target type is filled from structured (map/object) data."""
    if get_args(type_hint) and get_origin(type_hint) in (list, tuple, set, frozenset, dict):
        return True
    if not isinstance(type_hint, type):
        return False
    return (
        dataclasses.is_dataclass(type_hint)
        or issubclass(type_hint, BaseModel)
        or is_typeddict(type_hint)
    )


def string_converter(value: Any, target_type: Any) -> str:  # noqa: ARG001
    """Make a string out of any value using a coarse, kind-based format."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return "%f" % value
    if isinstance(value, int):
        return "%d" % value
    return str(value)


# Tried in order, first match wins. RFC 3339 is handled separately.
TIME_LAYOUTS: tuple[str, ...] = (
    "%a %b %d %H:%M:%S %Y",  # ANSI C
    "%a %b %d %H:%M:%S %Z %Y",  # Unix date
    "%a %b %d %H:%M:%S %z %Y",  # Ruby date
    "%d %b %y %H:%M %Z",  # RFC 822
    "%d %b %y %H:%M %z",  # RFC 822 with numeric zone
    "%A, %d-%b-%y %H:%M:%S %Z",  # RFC 850
    "%a, %d %b %Y %H:%M:%S %Z",  # RFC 1123
    "%a, %d %b %Y %H:%M:%S %z",  # RFC 1123 with numeric zone
    "%I:%M%p",  # kitchen
    "%b %d %H:%M:%S",  # stamp
    "%b %d %H:%M:%S.%f",  # stamp with fraction
    "%Y-%m-%d",
    "%Y.%m.%d",
    "%Y/%d/%m",
)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_FRACTION_OVERFLOW = re.compile(r"(\.\d{6})\d+")


def _from_millis(millis: float) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)


def convert_time(value: Any) -> datetime:
    """
    Convert a value to a timezone-aware datetime.

    Plain numbers and numeric strings are interpreted as unix timestamps in
    milliseconds. Other strings are matched against RFC 3339 and then
    TIME_LAYOUTS. Results without zone information are taken as UTC.

    Raises:
        ValueError: If a string matches none of the known layouts
        TypeError: If the value is neither a number nor a string
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_millis(value)
    if not isinstance(value, str):
        raise TypeError(f"Cannot convert time object: {value!r}")

    text = value.strip()
    try:
        return _from_millis(int(text))
    except ValueError:
        pass

    # datetime only keeps microseconds
    text = _FRACTION_OVERFLOW.sub(r"\1", text)
    parsers: list[Callable[[str], datetime]] = [datetime.fromisoformat]
    parsers.extend(lambda s, layout=layout: datetime.strptime(s, layout) for layout in TIME_LAYOUTS)
    for parse in parsers:
        try:
            ret = parse(text)
        except ValueError:
            continue
        return ret if ret.tzinfo is not None else ret.replace(tzinfo=UTC)

    raise ValueError(f"No suitable time format identified: {value!r}")


def time_converter(value: Any, target_type: Any) -> datetime:  # noqa: ARG001
    """Converter adapter around convert_time."""
    return convert_time(value)


class ConverterRegistry:
    """
    Registry of per-type converters with kind-based fallback conversion.

    A string converter and a datetime converter are registered by default.
    """

    def __init__(self, builtins: bool = True):
        self._converters: dict[Any, Converter] = {}
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        if builtins:
            self._converters[str] = string_converter
            self._converters[datetime] = time_converter

    def register(self, target_type: Any, converter: Converter) -> None:
        """Register a converter for the given target type, replacing any existing one."""
        logger.info("Registering converter for type %s", getattr(target_type, "__name__", target_type))
        self._converters[target_type] = converter

    def unregister(self, target_type: Any) -> None:
        self._converters.pop(target_type, None)

    def find(self, target_type: Any) -> Converter | None:
        return self._converters.get(target_type)

    def __contains__(self, target_type: object) -> bool:
        return target_type in self._converters

    def convert(self, value: Any, target_type: Any) -> Any:
        """
        Convert a value to the target type.

        Values that already are instances of the target are returned unchanged.
        Otherwise the steps are: registered converter, string parsing, structured
        round-trip for maps and objects, and finally a direct cast.

        Raises:
            ConversionError: If the value cannot be converted at all
        """
        target = SignatureIntrospector.unwrap_optional(target_type)
        if _is_untyped(target) or (value is None and target is not target_type):
            return value

        origin = get_origin(target)
        if origin is None and isinstance(target, type) and _is_instance(value, target):
            return value

        converter = self._converters.get(target)
        if converter is not None:
            try:
                return converter(value, target)
            except Exception as e:
                logger.warning("Converter failed for type '%s': %s", getattr(target, "__name__", target), e)

        target_kind = kind_of(target)
        source_kind = kind_of_value(value)

        if source_kind is Kind.STRING:
            try:
                if target_kind is Kind.FLOAT:
                    value = float(value)
                elif target_kind is Kind.INT:
                    value = int(value)
                elif target_kind is Kind.STRING:
                    return value
                else:
                    logger.warning("No string conversion found for kind %s", target_kind.name)
            except ValueError as e:
                logger.warning("Parsing %r as %s failed: %s", value, target_kind.name, e)
        elif source_kind in (Kind.MAP, Kind.OBJECT, Kind.ARRAY) and is_structured(target):
            return self._round_trip(value, target)

        return self._cast(value, target, target_kind)

    def _adapter(self, target: Any) -> TypeAdapter[Any]:
        adapter = self._adapters.get(target)
        if adapter is None:
            adapter = TypeAdapter(target)
            self._adapters[target] = adapter
        return adapter

    def _round_trip(self, value: Any, target: Any) -> Any:
        """Serialize the value to plain JSON data and validate it into the target type."""
        try:
            data = self._adapter(Any).dump_python(value, mode="json")
        except PydanticSerializationError as e:
            try:
                data = {k: v for k, v in vars(value).items() if not k.startswith("_")}
            except TypeError:
                raise ConversionError(value, target, str(e)) from e

        try:
            return self._adapter(target).validate_python(data)
        except (ValidationError, TypeError) as e:
            raise ConversionError(value, target, str(e)) from e

    @staticmethod
    def _cast(value: Any, target: Any, target_kind: Kind) -> Any:
        origin = get_origin(target) or target
        if isinstance(origin, type) and _is_instance(value, origin):
            return value

        source_kind = kind_of_value(value)
        numeric = (Kind.INT, Kind.FLOAT, Kind.BOOL)
        if target_kind in (Kind.INT, Kind.FLOAT) and source_kind in numeric:
            return origin(value)
        if target_kind is Kind.ARRAY and source_kind is Kind.ARRAY and isinstance(origin, type):
            try:
                return origin(value)
            except (TypeError, ValueError) as e:
                raise ConversionError(value, target, str(e)) from e

        raise ConversionError(value, target)

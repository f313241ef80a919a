#!/usr/bin/env python3
"""
Unit tests for value conversion and type classification.
"""

import unittest
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from izumi.bridge import (
    BindingRegistry,
    ConversionError,
    ConverterRegistry,
    Kind,
    convert_time,
    kind_of,
    string_converter,
)


@dataclass
class Point:
    x: int
    y: int


@dataclass
class Vector:
    x: int
    y: int
    label: str = ""


class User(BaseModel):
    name: str
    age: int


class Color(Enum):
    RED = "red"


class SlottedPoint:
    __slots__ = ("x", "y")

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y


class Money:
    def __init__(self, amount: float):
        self.amount = amount


class TestStringConverter(unittest.TestCase):
    """Test the builtin string converter."""

    def test_formats(self):
        """Test the per-kind string formats."""
        self.assertEqual(string_converter(4545.65772, str), "4545.657720")
        self.assertEqual(string_converter(12, str), "12")
        self.assertEqual(string_converter(True, str), "true")
        self.assertEqual(string_converter(False, str), "false")
        self.assertEqual(string_converter("as is", str), "as is")
        self.assertEqual(string_converter([1, 2], str), "[1, 2]")

    def test_registry_uses_string_converter(self):
        """Test that the registry applies the builtin string converter."""
        converters = ConverterRegistry()

        self.assertIn(str, converters)
        self.assertEqual(converters.convert(4545.65772, str), "4545.657720")


class TestTimeConverter(unittest.TestCase):
    """Test conversion of time values."""

    EXPECTED = datetime(2015, 1, 3, tzinfo=UTC)

    def test_date_formats(self):
        """Test the supported date layouts and unix milliseconds."""
        for value in ["2015-01-03", "2015.01.03", "2015/03/01", "1420243200000"]:
            with self.subTest(value=value):
                self.assertEqual(convert_time(value), self.EXPECTED)

    def test_numbers_are_milliseconds(self):
        """Test that plain numbers are taken as unix timestamps in milliseconds."""
        self.assertEqual(convert_time(1420243200000), self.EXPECTED)
        self.assertEqual(convert_time(1420243200000.0), self.EXPECTED)
        self.assertEqual(convert_time(1420243200123), self.EXPECTED + timedelta(milliseconds=123))

    def test_rfc3339(self):
        """Test RFC 3339 timestamps, including nanosecond fractions."""
        self.assertEqual(
            convert_time("2015-01-03T10:20:30.123456789Z"),
            datetime(2015, 1, 3, 10, 20, 30, 123456, tzinfo=UTC),
        )
        self.assertEqual(
            convert_time("2015-01-03T12:00:00+02:00"),
            datetime(2015, 1, 3, 10, 0, 0, tzinfo=UTC),
        )

    def test_rfc1123(self):
        """Test RFC 1123 timestamps with named and numeric zones."""
        expected = datetime(2015, 1, 3, 10, 20, 30, tzinfo=UTC)

        self.assertEqual(convert_time("Sat, 03 Jan 2015 10:20:30 GMT"), expected)
        self.assertEqual(convert_time("Sat, 03 Jan 2015 10:20:30 +0000"), expected)

    def test_stamp_with_nanoseconds(self):
        """Test that stamp layouts accept fractions longer than microseconds."""
        self.assertEqual(
            convert_time("Jan 03 10:20:30.123456789"),
            datetime(1900, 1, 3, 10, 20, 30, 123456, tzinfo=UTC),
        )
        self.assertEqual(
            convert_time("Jan 03 10:20:30.123"),
            datetime(1900, 1, 3, 10, 20, 30, 123000, tzinfo=UTC),
        )

    def test_results_are_timezone_aware(self):
        """Test that results without zone information are taken as UTC."""
        result = convert_time("2015-01-03")

        self.assertIsNotNone(result.tzinfo)
        self.assertEqual(result.utcoffset(), timedelta(0))

    def test_datetime_passthrough(self):
        """Test that datetimes are returned unchanged."""
        value = datetime(2020, 5, 6, tzinfo=timezone(timedelta(hours=3)))

        self.assertIs(convert_time(value), value)

    def test_invalid_values(self):
        """Test that unknown layouts and unsupported types raise."""
        with self.assertRaises(ValueError):
            convert_time("not a time")
        with self.assertRaises(TypeError):
            convert_time([2015, 1, 3])
        with self.assertRaises(TypeError):
            convert_time(True)

    def test_registry_uses_time_converter(self):
        """Test that arguments declared as datetime are converted."""
        registry = BindingRegistry()

        def year(when: datetime) -> int:
            return when.year

        registry.expose_function(year, "Time", "year")

        self.assertEqual(registry.invoke("Time", "year", "2015.01.03"), 2015)
        self.assertEqual(registry.invoke("Time", "year", 1420243200000), 2015)


class TestConverterRegistry(unittest.TestCase):
    """Test the conversion steps of the converter registry."""

    def setUp(self):
        self.converters = ConverterRegistry()

    def test_instances_pass_through(self):
        """Test that values already of the target type keep their identity."""
        point = Point(1, 2)

        self.assertIs(self.converters.convert(point, Point), point)
        self.assertIs(self.converters.convert(point, Any), point)

    def test_untyped_and_optional(self):
        """Test untyped targets and None for optional targets."""
        self.assertEqual(self.converters.convert("x", Any), "x")
        self.assertIsNone(self.converters.convert(None, Optional[int]))
        self.assertEqual(self.converters.convert("5", int | None), 5)

    def test_string_parsing(self):
        """Test parsing of numbers from strings."""
        self.assertEqual(self.converters.convert("42", int), 42)
        self.assertEqual(self.converters.convert("4.5", float), 4.5)

    def test_numeric_casts(self):
        """Test direct casts between numeric kinds."""
        self.assertEqual(self.converters.convert(3, float), 3.0)
        self.assertIsInstance(self.converters.convert(3, float), float)
        self.assertEqual(self.converters.convert(3.9, int), 3)

    def test_array_casts(self):
        """Test casts between array types."""
        self.assertEqual(self.converters.convert([1, 2], tuple), (1, 2))
        self.assertEqual(self.converters.convert((1, 2), list), [1, 2])

    def test_bool_is_not_an_integer(self):
        """Test that booleans are cast to plain integers for int targets."""
        result = self.converters.convert(True, int)

        self.assertEqual(result, 1)
        self.assertIs(type(result), int)
        self.assertIs(self.converters.convert(False, bool), False)

    def test_unparsable_string(self):
        """Test that a string that cannot be parsed raises a conversion error."""
        with self.assertLogs("izumi.bridge.converters", "WARNING"):
            with self.assertRaises(ConversionError) as ctx:
                self.converters.convert("abc", int)
        self.assertIs(ctx.exception.target_type, int)
        self.assertEqual(ctx.exception.value, "abc")

    def test_map_to_dataclass(self):
        """Test filling a dataclass from a map."""
        self.assertEqual(self.converters.convert({"x": 1, "y": 2}, Point), Point(1, 2))

    def test_map_to_pydantic_model(self):
        """Test filling a pydantic model from a map with string numbers."""
        user = self.converters.convert({"name": "ann", "age": "31"}, User)

        self.assertEqual(user, User(name="ann", age=31))

    def test_object_to_other_object(self):
        """Test converting between structurally compatible object types."""
        self.assertEqual(self.converters.convert(Vector(3, 4, "v"), Point), Point(3, 4))

    def test_list_of_structs(self):
        """Test converting a list of maps into a list of dataclasses."""
        result = self.converters.convert([{"x": 1, "y": 2}, {"x": 3, "y": 4}], list[Point])

        self.assertEqual(result, [Point(1, 2), Point(3, 4)])

    def test_incompatible_struct(self):
        """Test that a map not matching the target raises a conversion error."""
        with self.assertRaises(ConversionError):
            self.converters.convert({"x": "not a number"}, Point)

    def test_unserializable_slotted_object(self):
        """Test that a slotted object without a structured form raises a conversion error."""
        with self.assertRaises(ConversionError) as ctx:
            self.converters.convert(SlottedPoint(1, 2), Point)
        self.assertIs(ctx.exception.target_type, Point)

    def test_custom_converter(self):
        """Test that a registered converter is used for its target type."""
        self.converters.register(Money, lambda value, target: Money(float(value)))

        result = self.converters.convert("3.5", Money)

        self.assertIsInstance(result, Money)
        self.assertEqual(result.amount, 3.5)
        self.assertIn(Money, self.converters)
        self.assertIsNotNone(self.converters.find(Money))

        self.converters.unregister(Money)
        self.assertNotIn(Money, self.converters)

    def test_failing_converter_falls_back(self):
        """Test that a failing converter logs a warning and conversion continues."""

        def broken(value: Any, target: Any) -> Any:
            raise RuntimeError("broken")

        self.converters.register(int, broken)

        with self.assertLogs("izumi.bridge.converters", "WARNING") as logs:
            self.assertEqual(self.converters.convert("5", int), 5)
        self.assertIn("broken", logs.output[0])

    def test_without_builtins(self):
        """Test a registry without builtin converters."""
        converters = ConverterRegistry(builtins=False)

        self.assertNotIn(str, converters)
        with self.assertRaises(ConversionError):
            converters.convert(12, str)

    def test_registry_converter_for_bindings(self):
        """Test registering a converter through the binding registry."""
        registry = BindingRegistry()
        registry.register_converter(Money, lambda value, target: Money(float(value) * 100))

        def cents(m: Money) -> float:
            return m.amount

        registry.expose_function(cents, "Bank", "cents")

        self.assertEqual(registry.invoke("Bank", "cents", "1.5"), 150.0)


class TestKinds(unittest.TestCase):
    """Test classification of types into kinds."""

    def test_kind_of(self):
        """Test the kind of common type hints."""
        cases = [
            (bool, Kind.BOOL),
            (int, Kind.INT),
            (float, Kind.FLOAT),
            (str, Kind.STRING),
            (list, Kind.ARRAY),
            (list[int], Kind.ARRAY),
            (tuple[int, str], Kind.ARRAY),
            (set[str], Kind.ARRAY),
            (bytes, Kind.ARRAY),
            (dict, Kind.MAP),
            (dict[str, int], Kind.MAP),
            (Point, Kind.OBJECT),
            (User, Kind.OBJECT),
            (Color, Kind.OBJECT),
            (datetime, Kind.OBJECT),
            (Any, Kind.OBJECT),
            (Optional[int], Kind.INT),
            (str | None, Kind.STRING),
            (Callable[[int], int], Kind.UNSUPPORTED),
            (complex, Kind.UNSUPPORTED),
        ]
        for type_hint, expected in cases:
            with self.subTest(type_hint=type_hint):
                self.assertEqual(kind_of(type_hint), expected)

    def test_signature_characters(self):
        """Test the signature string of a binding covering every kind."""
        registry = BindingRegistry()

        def f(a: bool, b: int, c: float, d: str, e: list, g: dict, h: Point) -> None:
            pass

        def g(callback: Callable[[int], int], n) -> None:
            pass

        self.assertEqual(registry.expose_function(f)[0].signature(), "bifsamo")
        self.assertEqual(registry.expose_function(g)[0].signature(), "_o")


if __name__ == "__main__":
    unittest.main()

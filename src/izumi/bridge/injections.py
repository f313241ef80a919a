"""
Injection sets: values supplied to callables by type instead of by position.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

T = TypeVar("T")


class Injections(dict[Any, Any]):
    """
    A mapping from type to the value that is injected for parameters of that type.

    Values are stored under their runtime type, so two values of the same type
    cannot live in one set; the later one wins.
    """

    @classmethod
    def of(cls, *values: Any) -> Injections:
        """Create an injection set holding each value under its own type."""
        ret = cls()
        for value in values:
            ret.add(value)
        return ret

    def add(self, value: Any) -> None:
        """Add a value under its runtime type."""
        self[type(value)] = value

    def find(self, target_type: type[T] | Any) -> T | None:
        """Return the value registered for the given type, or None."""
        return self.get(target_type)

    def __repr__(self) -> str:
        types = ", ".join(getattr(t, "__name__", str(t)) for t in self)
        return f"Injections({types})"


def merge_injections(*sets: Mapping[Any, Any] | None) -> Injections:
    """
    Merge injection sets from left to right.

    Later sets overwrite earlier ones on type collision, so call-scoped
    injections passed after binding singletons take precedence. ``None``
    entries are skipped.
    """
    ret = Injections()
    for injection_set in sets:
        if injection_set:
            ret.update(injection_set)
    return ret

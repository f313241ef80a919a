"""
Bindings: named, invocable units registered in a BindingRegistry.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .callables import CallableDescriptor, CallableKind
from .errors import BindingNotFoundError
from .filters import Filter, FilterChain
from .injections import Injections
from .introspection import SignatureIntrospector

if TYPE_CHECKING:
    from .registry import BindingRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BindingKey:
    """Unique two-level name of a binding."""

    interface_name: str
    method_name: str

    def __str__(self) -> str:
        return f"{self.interface_name}.{self.method_name}"


class Binding:
    """
    A callable exposed under an interface and method name.

    Besides the callable descriptor a binding holds the positions of its
    injected parameters, its singleton injections and its filter chain. All
    mutators return the binding itself so calls can be chained.
    """

    def __init__(self, key: BindingKey, descriptor: CallableDescriptor, registry: BindingRegistry):
        self.key = key
        self.descriptor = descriptor
        self.injections: dict[int, Any] = {}
        self.singletons = Injections()
        self.filters = FilterChain()
        self._registry = registry

    @property
    def interface_name(self) -> str:
        return self.key.interface_name

    @property
    def method_name(self) -> str:
        return self.key.method_name

    @property
    def name(self) -> str:
        """The interface name and the method name separated by a dot."""
        return str(self.key)

    @property
    def kind(self) -> CallableKind:
        return self.descriptor.kind

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    def add_injection(self, value: Any, as_type: Any = None) -> Binding:
        """
        Add a singleton injection and declare its type as injected.

        The value becomes the default for every parameter of its type, and
        those parameters are no longer taken from caller-supplied arguments.
        If the callable has several parameters of that type, all of them are
        injected with the same value.

        Args:
            value: The default value to inject
            as_type: Register the value under this type instead of type(value)
        """
        injected_type = type(value) if as_type is None else as_type
        self.singletons[injected_type] = value
        return self.declare_injection(injected_type)

    def declare_injection(self, injected_type: Any) -> Binding:
        """Declare parameters of the given type as injected without supplying a default."""
        for position, param_type in enumerate(self.descriptor.parameter_types()):
            if SignatureIntrospector.unwrap_optional(param_type) == injected_type:
                self.injections[position] = injected_type
        return self

    def is_injected(self, position: int) -> bool:
        return position in self.injections

    def add_filter(self, filter_: Filter) -> Binding:
        """Append a filter to this binding's filter chain."""
        self.filters.append(filter_)
        return self

    def clear_filters(self) -> Binding:
        self.filters.clear()
        return self

    def remove(self) -> None:
        """Remove this binding from its registry."""
        self._registry.remove(self.interface_name, self.method_name)

    def parameter_types(self, include_injected: bool = False) -> list[Any]:
        """Return the parameter types, by default only those supplied by the caller."""
        return [
            param_type
            for position, param_type in enumerate(self.descriptor.parameter_types())
            if include_injected or position not in self.injections
        ]

    def signature(self) -> str:
        """Return the signature string used by remote callers to validate calls."""
        return self.descriptor.signature(self.parameter_types())

    validation_string = signature

    def invoke(self, *args: Any) -> Any:
        """Invoke this binding with the given arguments."""
        return self.invoke_with(None, *args)

    def invoke_with(self, injections: Injections | dict[Any, Any] | None, *args: Any) -> Any:
        """Invoke this binding with run-time injections and the given arguments."""
        return self._registry.invoker.invoke(self, injections, *args)

    def as_bindings(self) -> Bindings:
        """Return a one element Bindings list holding this binding."""
        return Bindings([self])

    def __repr__(self) -> str:
        return f"Binding({self.name} -> {self.descriptor!r})"


class Bindings(list[Binding]):
    """A list of bindings with helpers applied to every element."""

    def add_injection(self, value: Any, as_type: Any = None) -> Bindings:
        for binding in self:
            binding.add_injection(value, as_type)
        return self

    def declare_injection(self, injected_type: Any) -> Bindings:
        for binding in self:
            binding.declare_injection(injected_type)
        return self

    def add_filter(self, filter_: Filter) -> Bindings:
        for binding in self:
            binding.add_filter(filter_)
        return self

    def clear_filters(self) -> Bindings:
        for binding in self:
            binding.clear_filters()
        return self

    def remove(self) -> None:
        for binding in self:
            binding.remove()

    def match(self, pattern: str) -> Bindings:
        """Return the bindings whose name ("interface.method") matches the regex pattern."""
        try:
            regex = re.compile(pattern)
        except re.error as e:
            logger.warning("Compilation of regexp pattern '%s' failed: %s", pattern, e)
            return Bindings()
        return Bindings(b for b in self if regex.search(b.name))

    def names(self) -> list[str]:
        return [b.name for b in self]

    def first(self) -> Binding:
        if not self:
            raise BindingNotFoundError("<empty>")
        return self[0]

    def invoke(self, *args: Any) -> Any:
        """Invoke the first binding of this list."""
        return self.first().invoke(*args)

    def invoke_with(self, injections: Injections | dict[Any, Any] | None, *args: Any) -> Any:
        """Invoke the first binding of this list with run-time injections."""
        return self.first().invoke_with(injections, *args)

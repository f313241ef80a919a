"""
Invocation engine: reconstructs a typed call from loosely-typed arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .converters import ConverterRegistry
from .errors import ArgumentCountError, InjectionNotSatisfiableError
from .injections import Injections, merge_injections

if TYPE_CHECKING:
    from .bindings import Binding

logger = logging.getLogger(__name__)


class Invoker:
    """
    Invokes bindings.

    One invocation merges the binding's singletons with the run-time
    injections, runs the filter chain, assembles the argument vector in
    declared parameter order, calls the descriptor and normalizes its result.
    No state is kept between invocations.
    """

    def __init__(self, converters: ConverterRegistry):
        self._converters = converters

    def invoke(self, binding: Binding, injections: Mapping[Any, Any] | None, *args: Any) -> Any:
        """
        Invoke a binding.

        Run-time injections override the binding's singletons. The binding
        itself is always resolvable by type from the merged injections.

        Returns:
            The normalized result, or None if a filter stopped the call

        Raises:
            InjectionNotSatisfiableError: If an injected parameter has no value
            ArgumentCountError: If too few or too many arguments were supplied
            ConversionError: If an argument cannot be converted
        """
        from .bindings import Binding

        merged = merge_injections(binding.singletons, injections, {Binding: binding})

        if not binding.filters.run(binding, merged):
            return None

        call_args = self.assemble_arguments(binding, merged, args)
        logger.debug("Invoking %s with %d parameters", binding.name, len(call_args))
        result = binding.descriptor.call(call_args)
        return self.normalize_return(binding, result)

    def assemble_arguments(self, binding: Binding, injections: Injections, args: tuple[Any, ...]) -> list[Any]:
        """Build the full parameter vector from injected values and supplied arguments."""
        descriptor = binding.descriptor
        supplied = descriptor.wrap_arguments(args)
        parameter_types = descriptor.parameter_types()
        expected = len(parameter_types) - len(binding.injections)

        ret: list[Any] = []
        consumed = 0
        injected = 0
        for position, param_type in enumerate(parameter_types):
            required_type = binding.injections.get(position)
            if required_type is not None:
                if required_type not in injections:
                    raise InjectionNotSatisfiableError(binding.name, position, required_type)
                value = injections[required_type]
                injected += 1
            else:
                if consumed >= len(supplied):
                    raise ArgumentCountError(binding.name, expected, len(supplied), injected)
                value = supplied[consumed]
                consumed += 1

            ret.append(self._converters.convert(value, param_type))

        if consumed != len(supplied) or consumed + injected != len(parameter_types):
            raise ArgumentCountError(binding.name, expected, len(supplied), injected)

        return ret

    @staticmethod
    def normalize_return(binding: Binding, result: Any) -> Any:
        """Map the physical return onto a single value."""
        arity = binding.descriptor.return_arity
        if arity == 0:
            return None
        if arity > 1:
            logger.warning("Too many return values for %s: %d/1. Ignoring.", binding.name, arity)
            if isinstance(result, tuple) and result:
                return result[0]
        return result

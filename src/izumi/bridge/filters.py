"""
Filter chains evaluated before a binding is invoked.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from .injections import Injections, merge_injections
from .introspection import SignatureIntrospector

if TYPE_CHECKING:
    from .bindings import Binding

logger = logging.getLogger(__name__)

# A filter receives the binding being invoked and the merged injections of the
# call. Returning False stops the invocation; the filter is expected to have
# answered the caller already (e.g. by setting an error status).
Filter = Callable[["Binding", Injections], bool]


class FilterChain:
    """
    Ordered, short-circuiting list of filters.

    All filters of one invocation receive the same Injections instance, so a
    filter may add values to it for later filters and for the call itself.
    """

    def __init__(self) -> None:
        self._filters: list[Filter] = []

    def append(self, filter_: Filter) -> None:
        self._filters.append(filter_)

    def clear(self) -> None:
        self._filters = []

    def run(self, binding: Binding, injections: Injections) -> bool:
        """Run the filters in order; return False as soon as one of them rejects."""
        for filter_ in self._filters:
            if not filter_(binding, injections):
                logger.debug("Invocation of '%s' stopped by filter %r", binding.name, filter_)
                return False
        return True

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[Filter]:
        return iter(self._filters)


def auto_inject_filter(func: Callable[..., bool]) -> Filter:
    """
    Create a filter whose parameters are resolved by type from the call's injections.

    Besides the injections themselves, the Binding being invoked and the
    Injections container can be requested. Parameters that cannot be resolved
    and have no default reject the call.

    Raises:
        TypeError: If func is not callable or is not annotated to return bool
    """
    if not callable(func):
        raise TypeError(f"Parameter is not a function: {type(func).__name__}")
    if SignatureIntrospector.return_type(func) is not bool:
        raise TypeError(f"Return parameter of {func!r} is not of type bool.")

    params = SignatureIntrospector.extract_parameters(func)

    def auto_injected(binding: Binding, injections: Injections) -> bool:
        from .bindings import Binding

        available = merge_injections(injections, {Binding: binding, Injections: injections})
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param in params:
            if param.type_hint in available:
                value = available[param.type_hint]
            elif param.has_default:
                value = param.default_value
            else:
                type_name = getattr(param.type_hint, "__name__", str(param.type_hint))
                logger.warning(
                    "Cannot fulfill injection during auto-injection for type '%s'. Aborting filter chain.",
                    type_name,
                )
                return False

            if param.is_keyword_only:
                kwargs[param.name] = value
            else:
                args.append(value)
        return bool(func(*args, **kwargs))

    auto_injected.__qualname__ = f"auto_inject_filter({getattr(func, '__qualname__', func)})"
    return auto_injected

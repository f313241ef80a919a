"""
Callable descriptors: a uniform view of every shape of exposed behaviour.

A descriptor knows the declared parameter types of its callable (receiver
excluded, injected slots included), how many values it returns and how to
physically call it with a fully assembled argument vector.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import Any

from .context import CallContext
from .converters import kind_of
from .introspection import SignatureIntrospector


class CallableKind(Enum):
    """Kinds of exposed callables."""

    FUNCTION = "function"
    METHOD = "method"
    ATTRIBUTE = "attribute"
    HANDLER = "handler"
    REMOTE_PROXY = "remote_proxy"


class CallableDescriptor(ABC):
    """Describes one exposed unit of behaviour."""

    kind: CallableKind

    @abstractmethod
    def parameter_types(self) -> list[Any]:
        """Declared parameter types in positional order, including injected slots."""

    @property
    def parameter_count(self) -> int:
        return len(self.parameter_types())

    def parameter_type_at(self, position: int) -> Any:
        return self.parameter_types()[position]

    @property
    def return_arity(self) -> int:
        """Number of declared return values."""
        return 1

    def wrap_arguments(self, args: tuple[Any, ...]) -> list[Any]:
        """Map the caller-supplied arguments onto the non-injected parameter slots."""
        return list(args)

    def signature(self, visible_types: list[Any]) -> str:
        """Encode the caller-visible parameter types, one character per parameter."""
        return "".join(kind_of(t).value for t in visible_types)

    @abstractmethod
    def call(self, args: list[Any]) -> Any:
        """Physically call the underlying behaviour with the assembled vector."""

    @staticmethod
    def _split_arguments(args: list[Any], keywords: list[str | None]) -> tuple[list[Any], dict[str, Any]]:
        """Separate the assembled vector into positional values and keyword-only values."""
        positional: list[Any] = []
        keyword: dict[str, Any] = {}
        for value, name in zip(args, keywords, strict=True):
            if name is None:
                positional.append(value)
            else:
                keyword[name] = value
        return positional, keyword


class FunctionCallable(CallableDescriptor):
    """A free function or any other plain callable."""

    kind = CallableKind.FUNCTION

    def __init__(self, func: Callable[..., Any]):
        if not callable(func):
            raise TypeError(f"Parameter is not a function: {type(func).__name__}")
        self.func = func
        self._types = SignatureIntrospector.parameter_types(func)
        self._keywords = SignatureIntrospector.keyword_names(func)
        self._return_arity = SignatureIntrospector.return_arity(func)

    def parameter_types(self) -> list[Any]:
        return list(self._types)

    @property
    def return_arity(self) -> int:
        return self._return_arity

    def call(self, args: list[Any]) -> Any:
        positional, keyword = self._split_arguments(args, self._keywords)
        return self.func(*positional, **keyword)

    def __repr__(self) -> str:
        return f"FunctionCallable({getattr(self.func, '__qualname__', self.func)!r})"


class MethodCallable(CallableDescriptor):
    """A method of an object; the stored receiver is prepended on every call."""

    kind = CallableKind.METHOD

    def __init__(self, receiver: Any, method_name: str):
        bound = getattr(receiver, method_name, None)
        if bound is None or not callable(bound):
            raise TypeError(f"'{type(receiver).__name__}' has no method '{method_name}'")
        self.receiver = receiver
        self.method_name = method_name
        # Plain functions are called with the receiver prepended, anything else
        # (static and class methods) through its bound form
        function = inspect.getattr_static(type(receiver), method_name, None)
        self._function = function if inspect.isfunction(function) else None
        self._bound = bound
        self._types = SignatureIntrospector.parameter_types(bound)
        self._keywords = SignatureIntrospector.keyword_names(bound)
        self._return_arity = SignatureIntrospector.return_arity(bound)

    def parameter_types(self) -> list[Any]:
        return list(self._types)

    @property
    def return_arity(self) -> int:
        return self._return_arity

    def call(self, args: list[Any]) -> Any:
        positional, keyword = self._split_arguments(args, self._keywords)
        if self._function is not None:
            return self._function(self.receiver, *positional, **keyword)
        return self._bound(*positional, **keyword)

    def __repr__(self) -> str:
        return f"MethodCallable({type(self.receiver).__name__}.{self.method_name})"


class AttributeCallable(CallableDescriptor):
    """A read-only getter for a public field of an object."""

    kind = CallableKind.ATTRIBUTE

    def __init__(self, owner: Any, field_name: str):
        if not hasattr(owner, field_name):
            raise AttributeError(f"'{type(owner).__name__}' has no attribute '{field_name}'")
        self.owner = owner
        self.field_name = field_name

    def parameter_types(self) -> list[Any]:
        # Reading a field takes no arguments
        return []

    def call(self, args: list[Any]) -> Any:  # noqa: ARG002
        return getattr(self.owner, self.field_name)

    def __repr__(self) -> str:
        return f"AttributeCallable({type(self.owner).__name__}.{self.field_name})"


Handler = Callable[[Any, Any], Any]


class HandlerCallable(CallableDescriptor):
    """
    A raw request handler called as ``handler(request, response)``.

    The only parameter slot is the CallContext, which must be injected.
    """

    kind = CallableKind.HANDLER

    def __init__(self, handler: Handler):
        if not callable(handler):
            raise TypeError(f"Handler is not callable: {type(handler).__name__}")
        self.handler = handler

    def parameter_types(self) -> list[Any]:
        return [CallContext]

    @property
    def return_arity(self) -> int:
        return 0

    def signature(self, visible_types: list[Any]) -> str:  # noqa: ARG002
        return ""

    def call(self, args: list[Any]) -> Any:
        context: CallContext = args[0]
        self.handler(context.request, context.response)
        return None

    def __repr__(self) -> str:
        return f"HandlerCallable({getattr(self.handler, '__qualname__', self.handler)!r})"


RemoteBinder = Callable[[CallContext, list[Any]], Any]


class RemoteProxyCallable(CallableDescriptor):
    """
    A proxy to a binding of a remote instance.

    The proxy function receives the injected CallContext and the complete list
    of caller-supplied arguments as one opaque bundle. The signature of the
    remote binding cannot be introspected and is given at construction.
    """

    kind = CallableKind.REMOTE_PROXY

    def __init__(self, proxy: RemoteBinder, remote_signature: str):
        self.proxy = proxy
        self.remote_signature = remote_signature

    def parameter_types(self) -> list[Any]:
        return [CallContext, list]

    def wrap_arguments(self, args: tuple[Any, ...]) -> list[Any]:
        return [list(args)]

    def signature(self, visible_types: list[Any]) -> str:  # noqa: ARG002
        return self.remote_signature

    def call(self, args: list[Any]) -> Any:
        return self.proxy(args[0], args[1])

    def __repr__(self) -> str:
        return f"RemoteProxyCallable({self.remote_signature!r})"

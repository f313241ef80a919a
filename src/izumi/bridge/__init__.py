"""
Chibi Izumi Bridge - dynamic binding registry and invocation engine.

Exposes functions, object methods, object attributes, raw request handlers and
proxies to remote instances under a two-level name (``interface.method``) and
invokes them by name with loosely-typed arguments:

- Registration of callables with per-binding and global injections
- Type-directed dependency injection of request-scoped objects
- Short-circuiting filter chains evaluated before each call
- Argument conversion with pluggable per-type converters
- Signature strings for client-side call validation
"""

from .bindings import Binding, BindingKey, Bindings
from .callables import (
    AttributeCallable,
    CallableDescriptor,
    CallableKind,
    FunctionCallable,
    HandlerCallable,
    MethodCallable,
    RemoteProxyCallable,
)
from .config import BridgeConfig
from .context import CallContext
from .converters import ConverterRegistry, Kind, convert_time, kind_of, string_converter, time_converter
from .errors import (
    ArgumentCountError,
    BindingNotFoundError,
    BridgeError,
    ConversionError,
    InjectionNotSatisfiableError,
    RemoteInvocationError,
    ResolutionError,
)
from .filters import Filter, FilterChain, auto_inject_filter
from .injections import Injections, merge_injections
from .invoker import Invoker
from .registry import BindingRegistry
from .remote import RemoteClient, remote_proxy

__all__ = [
    "ArgumentCountError",
    "AttributeCallable",
    "Binding",
    "BindingKey",
    "BindingNotFoundError",
    "BindingRegistry",
    "Bindings",
    "BridgeConfig",
    "BridgeError",
    "CallContext",
    "CallableDescriptor",
    "CallableKind",
    "ConversionError",
    "ConverterRegistry",
    "Filter",
    "FilterChain",
    "FunctionCallable",
    "HandlerCallable",
    "InjectionNotSatisfiableError",
    "Injections",
    "Invoker",
    "Kind",
    "MethodCallable",
    "RemoteClient",
    "RemoteInvocationError",
    "RemoteProxyCallable",
    "ResolutionError",
    "auto_inject_filter",
    "convert_time",
    "kind_of",
    "merge_injections",
    "remote_proxy",
    "string_converter",
    "time_converter",
]

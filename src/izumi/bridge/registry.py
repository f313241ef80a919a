"""
BindingRegistry - two-level namespace of exposed callables.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from .bindings import Binding, BindingKey, Bindings
from .callables import (
    AttributeCallable,
    CallableDescriptor,
    CallableKind,
    FunctionCallable,
    Handler,
    HandlerCallable,
    MethodCallable,
    RemoteProxyCallable,
)
from .config import BridgeConfig
from .context import CallContext
from .converters import Converter, ConverterRegistry
from .errors import BindingNotFoundError
from .injections import Injections
from .invoker import Invoker
from .logger_injection import AutoLoggerManager
from .remote import remote_proxy

logger = logging.getLogger(__name__)


class BindingRegistry:
    """
    Registry of bindings grouped by interface name and method name.

    The registry owns the global injections applied to all of its bindings,
    the converters used when invoking them and a revision counter that is
    incremented on every structural change, so caches depending on the
    exposed surface can detect staleness.

    Registration is expected to happen before concurrent invocation starts;
    the registry itself does no locking.
    """

    def __init__(self, config: BridgeConfig | None = None, converters: ConverterRegistry | None = None):
        self.config = config or BridgeConfig()
        self.converters = converters if converters is not None else ConverterRegistry()
        self.invoker = Invoker(self.converters)
        self._interfaces: dict[str, dict[str, Binding]] = {}
        self._global_injections = Injections()
        self._revision = 0

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def global_injections(self) -> Injections:
        return Injections(self._global_injections)

    def register(self, descriptor: CallableDescriptor, interface_name: str, method_name: str) -> Binding:
        """
        Register a callable descriptor under the given names.

        An existing binding with the same names is overwritten. All global
        injections are applied to the new binding.
        """
        if self.has(interface_name, method_name):
            logger.warning(
                "Binding '%s' already exposed for interface '%s'. Overwriting.", method_name, interface_name
            )

        binding = Binding(BindingKey(interface_name, method_name), descriptor, self)
        if descriptor.kind in (CallableKind.HANDLER, CallableKind.REMOTE_PROXY):
            binding.declare_injection(CallContext)
        for injected_type, value in self._global_injections.items():
            binding.add_injection(value, as_type=injected_type)
        if self.config.auto_inject_logger:
            AutoLoggerManager.inject_logger(binding)

        self._interfaces.setdefault(interface_name, {})[method_name] = binding
        self._revision += 1
        return binding

    def expose_function(
        self,
        func: Callable[..., Any],
        interface_name: str | None = None,
        method_name: str | None = None,
    ) -> Bindings:
        """
        Expose a single function. No receiver is required for this binding.

        Args:
            func: The function to expose
            interface_name: Defaults to the configured default interface name
            method_name: Defaults to the function name (lambdas use the default function name)
        """
        if not callable(func):
            raise TypeError(f"Parameter is not a function: {type(func).__name__}")

        if method_name is None:
            name = getattr(func, "__name__", "<lambda>")
            method_name = self.config.default_function_name if name == "<lambda>" else name

        binding = self.register(
            FunctionCallable(func), interface_name or self.config.default_interface_name, method_name
        )
        return binding.as_bindings()

    def expose_methods(self, obj: Any, pattern: str = "", interface_name: str | None = None) -> Bindings:
        """
        Expose the public methods of an object whose names match the regex pattern.

        An empty pattern matches all methods. Methods declaring more than one
        return value are skipped. The interface name defaults to the class name
        of the object.
        """
        interface_name = interface_name or type(obj).__name__
        regex = re.compile(pattern) if pattern else None

        ret = Bindings()
        for name in dir(type(obj)):
            if name.startswith("__"):
                continue
            if name.startswith("_"):
                logger.debug("Ignoring internal method '%s'.", name)
                continue
            if isinstance(inspect.getattr_static(type(obj), name), property):
                continue
            if not inspect.isroutine(getattr(obj, name)):
                continue
            if regex is not None and not regex.search(name):
                continue

            descriptor = MethodCallable(obj, name)
            if descriptor.return_arity > 1:
                logger.warning(
                    "Ignoring method '%s' due to invalid amount of return values. %d / %d",
                    name,
                    descriptor.return_arity,
                    1,
                )
                continue

            ret.append(self.register(descriptor, interface_name, name))
        return ret

    def expose_interface(self, obj: Any, interface_name: str | None = None) -> Bindings:
        """Expose all public methods of an object."""
        return self.expose_methods(obj, "", interface_name)

    def expose_method(self, obj: Any, name: str, interface_name: str | None = None) -> Bindings:
        """Expose a single method of an object."""
        return self.expose_methods(obj, f"^{re.escape(name)}$", interface_name)

    def expose_attributes(self, obj: Any, pattern: str = "", interface_name: str | None = None) -> Bindings:
        """
        Expose read-only getters for the public attributes of an object.

        Attributes are the dataclass fields of dataclass instances, and the
        instance dictionary entries or assigned slots of other objects.
        """
        interface_name = interface_name or type(obj).__name__
        regex = re.compile(pattern) if pattern else None

        ret = Bindings()
        for name in self._attribute_names(obj):
            if name.startswith("_"):
                continue
            if regex is not None and not regex.search(name):
                continue
            ret.append(self.register(AttributeCallable(obj, name), interface_name, name))
        return ret

    @staticmethod
    def _attribute_names(obj: Any) -> list[str]:
        """Dataclass fields, then instance dictionary entries, then assigned slots."""
        if dataclasses.is_dataclass(obj):
            return [f.name for f in dataclasses.fields(obj)]
        if hasattr(obj, "__dict__"):
            return list(vars(obj))

        names: list[str] = []
        for cls in type(obj).__mro__:
            slots = cls.__dict__.get("__slots__", ())
            for name in [slots] if isinstance(slots, str) else slots:
                if name not in names and name not in ("__dict__", "__weakref__") and hasattr(obj, name):
                    names.append(name)
        return names

    def expose_all_attributes(self, obj: Any, interface_name: str | None = None) -> Bindings:
        return self.expose_attributes(obj, "", interface_name)

    def expose_handler(self, handler: Handler, interface_name: str, method_name: str) -> Bindings:
        """
        Expose a raw request handler called as ``handler(request, response)``.

        Request and response are taken from the CallContext that must be
        supplied as run-time injection.
        """
        return self.register(HandlerCallable(handler), interface_name, method_name).as_bindings()

    def expose_remote_binding(
        self,
        url: str,
        remote_interface: str,
        remote_method: str,
        signature: str,
        local_interface: str,
        local_method: str,
    ) -> Bindings:
        """
        Expose a binding of a remote instance under a local name.

        The signature of the remote binding must be known in advance. Calls
        require a CallContext run-time injection.
        """
        proxy = remote_proxy(url, remote_interface, remote_method, self.config)
        descriptor = RemoteProxyCallable(proxy, signature)
        return self.register(descriptor, local_interface, local_method).as_bindings()

    def expose_yourself(self, interface_name: str | None = None) -> Bindings:
        """
        Expose discovery bindings of this registry.

        ``Bindings`` maps every binding name to its signature, ``Interfaces``
        lists the interface names.
        """
        interface_name = interface_name or self.config.internal_interface_name

        def bindings(registry: BindingRegistry) -> dict[str, str]:
            return {b.name: b.signature() for b in registry.bindings()}

        def interfaces(registry: BindingRegistry) -> list[str]:
            return registry.interface_names()

        ret = Bindings()
        ret.extend(self.expose_function(bindings, interface_name, "Bindings").add_injection(self))
        ret.extend(self.expose_function(interfaces, interface_name, "Interfaces").add_injection(self))
        return ret

    def setup_global_injection(self, value: Any, as_type: Any = None) -> None:
        """
        Declare a value as global injection.

        It is added as singleton to all existing bindings and to every binding
        registered later.
        """
        injected_type = type(value) if as_type is None else as_type
        logger.info("Setting up global injection for type %s", getattr(injected_type, "__name__", injected_type))
        self._global_injections[injected_type] = value
        self.bindings().add_injection(value, as_type=injected_type)

    def register_converter(self, target_type: Any, converter: Converter) -> None:
        self.converters.register(target_type, converter)

    def find(self, interface_name: str, method_name: str) -> Binding | None:
        """Look up a binding, returning None if it does not exist."""
        return self._interfaces.get(interface_name, {}).get(method_name)

    def get(self, interface_name: str, method_name: str) -> Binding:
        """
        Look up a binding.

        Raises:
            BindingNotFoundError: If the binding does not exist
        """
        binding = self.find(interface_name, method_name)
        if binding is None:
            raise BindingNotFoundError(interface_name, method_name)
        return binding

    def has(self, interface_name: str, method_name: str) -> bool:
        return self.find(interface_name, method_name) is not None

    def remove(self, interface_name: str, method_name: str) -> None:
        """Remove a single binding. Interfaces without bindings are dropped."""
        methods = self._interfaces.get(interface_name)
        if methods is None or method_name not in methods:
            return
        del methods[method_name]
        if not methods:
            del self._interfaces[interface_name]
        self._revision += 1

    def remove_interface(self, interface_name: str) -> None:
        """Remove an interface including all of its bindings."""
        if self._interfaces.pop(interface_name, None) is not None:
            self._revision += 1

    def interface_names(self) -> list[str]:
        return list(self._interfaces)

    def binding_names(self, interface_name: str) -> list[str]:
        """Return the method names of an interface; empty for unknown interfaces."""
        return list(self._interfaces.get(interface_name, {}))

    def interfaces(self) -> dict[str, Bindings]:
        return {name: Bindings(methods.values()) for name, methods in self._interfaces.items()}

    def bindings(self) -> Bindings:
        """Return all bindings of all interfaces."""
        return Bindings(b for methods in self._interfaces.values() for b in methods.values())

    def invoke(self, interface_name: str, method_name: str, *args: Any) -> Any:
        """Invoke a binding by name."""
        return self.invoke_with(interface_name, method_name, None, *args)

    def invoke_with(
        self,
        interface_name: str,
        method_name: str,
        injections: Mapping[Any, Any] | None,
        *args: Any,
    ) -> Any:
        """Invoke a binding by name with run-time injections."""
        return self.get(interface_name, method_name).invoke_with(injections, *args)

    def __repr__(self) -> str:
        return f"BindingRegistry(interfaces={len(self._interfaces)}, revision={self._revision})"

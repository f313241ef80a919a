"""
Exception types raised by the binding registry and invocation engine.
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base class of all errors raised by izumi.bridge."""


class ResolutionError(BridgeError):
    """A single invocation could not be resolved into a call."""


class BindingNotFoundError(ResolutionError):
    """Raised when no binding exists for an interface/method pair."""

    def __init__(self, interface_name: str, method_name: str | None = None):
        self.interface_name = interface_name
        self.method_name = method_name
        if method_name is None:
            msg = f"Binding set for '{interface_name}' is empty. Invocation not possible."
        else:
            msg = f"Binding '{interface_name}.{method_name}' not found."
        super().__init__(msg)


class InjectionNotSatisfiableError(ResolutionError):
    """Raised when a parameter marked as injected has no value in the merged injections."""

    def __init__(self, binding_name: str, position: int, required_type: Any):
        self.binding_name = binding_name
        self.position = position
        self.required_type = required_type
        type_name = getattr(required_type, "__name__", str(required_type))
        super().__init__(
            f"Injection for type '{type_name}' not found (parameter {position} of '{binding_name}')."
        )


class ArgumentCountError(ResolutionError):
    """Raised when the supplied arguments do not fit the non-injected parameters."""

    def __init__(self, binding_name: str, expected: int, supplied: int, injected: int):
        self.binding_name = binding_name
        self.expected = expected
        self.supplied = supplied
        self.injected = injected
        super().__init__(
            f"Argument count does not match for '{binding_name}': "
            f"{supplied} supplied / {expected} expected ({injected} injections applied)."
        )


class ConversionError(ResolutionError):
    """Raised when a value cannot be converted to the required parameter type."""

    def __init__(self, value: Any, target_type: Any, reason: str | None = None):
        self.value = value
        self.target_type = target_type
        type_name = getattr(target_type, "__name__", str(target_type))
        msg = f"Cannot convert {type(value).__name__} value {value!r} to '{type_name}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class RemoteInvocationError(BridgeError):
    """Raised when a remote binding call fails or the remote side reports an error."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Remote call to {url} failed: {message}")

"""
Signature introspection for exposed callables.

Extracts the declared parameter types (receiver excluded) and the number of
declared return values of functions and bound methods.
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin, get_type_hints

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterInfo:
    """Information about a single callable parameter."""

    name: str
    type_hint: Any
    default_value: Any = inspect.Parameter.empty
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD

    @property
    def has_default(self) -> bool:
        return self.default_value is not inspect.Parameter.empty

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY


class SignatureIntrospector:
    """Extracts parameter and return information from callables."""

    @staticmethod
    def _type_hints(func: Callable[..., Any]) -> dict[str, Any]:
        try:
            return get_type_hints(func)
        except (NameError, TypeError) as e:
            # Unresolvable forward references fall back to the raw annotations
            logger.debug("Could not resolve type hints of %r: %s", func, e)
            return dict(getattr(func, "__annotations__", {}) or {})

    @staticmethod
    def extract_parameters(func: Callable[..., Any]) -> list[ParameterInfo]:
        """
        Extract the positional parameters of a callable.

        For bound methods the receiver is not part of the result. Unannotated
        parameters are reported with ``Any`` as their type. ``*args`` and
        ``**kwargs`` are not supported by positional invocation and are skipped.
        """
        signature = inspect.signature(func)
        hints = SignatureIntrospector._type_hints(func)

        params: list[ParameterInfo] = []
        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                logger.debug("Skipping variadic parameter '%s' of %r", param.name, func)
                continue
            type_hint = hints.get(param.name, Any)
            params.append(ParameterInfo(param.name, type_hint, param.default, param.kind))
        return params

    @staticmethod
    def parameter_types(func: Callable[..., Any]) -> list[Any]:
        """Return the declared parameter types of a callable in positional order."""
        return [p.type_hint for p in SignatureIntrospector.extract_parameters(func)]

    @staticmethod
    def keyword_names(func: Callable[..., Any]) -> list[str | None]:
        """Return the name of each keyword-only parameter at its position, None for positional ones."""
        return [p.name if p.is_keyword_only else None for p in SignatureIntrospector.extract_parameters(func)]

    @staticmethod
    def return_type(func: Callable[..., Any]) -> Any:
        """Return the annotated return type of a callable, or ``inspect.Parameter.empty``."""
        return SignatureIntrospector._type_hints(func).get("return", inspect.Parameter.empty)

    @staticmethod
    def return_arity(func: Callable[..., Any]) -> int:
        """
        Return the number of declared return values.

        ``-> None`` declares zero values, a fixed-length ``tuple[A, B]``
        declares one value per element, everything else (including a missing
        annotation) declares exactly one.
        """
        hints = SignatureIntrospector._type_hints(func)
        if "return" not in hints:
            return 1

        ret = hints["return"]
        if ret is None or ret is type(None):
            return 0

        if get_origin(ret) is tuple:
            args = get_args(ret)
            if args and Ellipsis not in args:
                return len(args)
        return 1

    @staticmethod
    def unwrap_optional(type_hint: Any) -> Any:
        """Return ``X`` for ``X | None``/``Optional[X]``, otherwise the hint unchanged."""
        origin = get_origin(type_hint)
        if origin is Union or origin is types.UnionType:
            args = [a for a in get_args(type_hint) if a is not type(None)]
            if len(args) == 1:
                return args[0]
        return type_hint

    @staticmethod
    def unwrap_annotated(type_hint: Any) -> Any:
        """Strip ``Annotated[...]`` metadata from a type hint."""
        if get_origin(type_hint) is typing.Annotated:
            return get_args(type_hint)[0]
        return type_hint

"""
Automatic logger injection for exposed callables.

Callables that declare a ``logging.Logger`` parameter receive a logger named
after their binding, without the caller having to supply it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .bindings import Binding


class AutoLoggerManager:
    """Manages automatic logger injection for bindings."""

    LOGGER_PREFIX = "izumi.bridge"

    @staticmethod
    def should_auto_inject_logger(binding: Binding) -> bool:
        """Check if the binding declares a Logger parameter that has no singleton yet."""
        if logging.Logger in binding.singletons:
            return False
        return logging.Logger in binding.descriptor.parameter_types()

    @staticmethod
    def logger_name(binding: Binding) -> str:
        return f"{AutoLoggerManager.LOGGER_PREFIX}.{binding.interface_name}.{binding.method_name}"

    @staticmethod
    def create_logger(binding: Binding) -> logging.Logger:
        return logging.getLogger(AutoLoggerManager.logger_name(binding))

    @staticmethod
    def inject_logger(binding: Binding) -> Binding:
        """Add a binding-specific logger as singleton if the binding asks for one."""
        if AutoLoggerManager.should_auto_inject_logger(binding):
            binding.add_injection(AutoLoggerManager.create_logger(binding), as_type=logging.Logger)
        return binding

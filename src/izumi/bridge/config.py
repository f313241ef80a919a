"""
Configuration of a binding registry.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_INTERFACE_NAME = "main"
DEFAULT_FUNCTION_NAME = "f"
DEFAULT_INTERNAL_INTERFACE_NAME = "izumi"


@dataclass(frozen=True)
class BridgeConfig:
    """
    Settings shared by a registry, its bindings and its remote proxies.

    All values have sensible defaults, so ``BridgeConfig()`` is a complete
    configuration.
    """

    default_interface_name: str = DEFAULT_INTERFACE_NAME
    default_function_name: str = DEFAULT_FUNCTION_NAME
    internal_interface_name: str = DEFAULT_INTERNAL_INTERFACE_NAME
    auto_inject_logger: bool = True
    remote_timeout: float = 30.0
    crid_header: str = "x-izumi-crid"
    proxy_header: str = "x-izumi-proxy"
    error_header: str = "x-izumi-error"

    def with_changes(self, **changes: object) -> BridgeConfig:
        """Return a copy of this configuration with the given fields replaced."""
        from dataclasses import replace

        return replace(self, **changes)  # type: ignore[arg-type]

"""
Request-scoped call context handed to handler and remote bindings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class CallContext:
    """
    Request-scoped objects of one inbound call.

    The transport layer creates one context per request and supplies it as a
    run-time injection. Handler bindings receive its request and response,
    remote bindings forward its correlation id, headers and cookies.
    """

    request: Any = None
    response: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    client: httpx.Client | None = None
    external_url: str = ""
    error_status: int = 500
    return_status: int = 200

    def crid(self, header_name: str) -> str:
        """Return the correlation id sent by the caller, or an empty string."""
        for name, value in self.headers.items():
            if name.lower() == header_name.lower():
                return value
        return ""

"""
HTTP client for calling bindings of a remote instance, and the proxy function
installed by remote bindings.
"""

from __future__ import annotations

import logging
import random
import string
import threading
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx
from pydantic_core import to_jsonable_python

from .callables import RemoteBinder
from .config import BridgeConfig
from .context import CallContext
from .errors import RemoteInvocationError

logger = logging.getLogger(__name__)

CRID_ALPHABET = string.ascii_letters + string.digits
CRID_LENGTH = 20

# Headers that describe the inbound request itself and are never forwarded
EXCLUDED_HEADERS = frozenset({"cookie", "date", "content-length", "content-type", "host", "transfer-encoding"})


def generate_crid() -> str:
    """Generate a random correlation id."""
    return "".join(random.choices(CRID_ALPHABET, k=CRID_LENGTH))


class RemoteClient:
    """
    Client of a remote instance.

    Arguments are POSTed as a JSON array to ``<base_url>/<interface>/<method>``.
    Every call carries a correlation id derived from the base id and a call
    counter.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        crid: str | None = None,
        proxy_url: str = "",
        cookies: Mapping[str, str] | None = None,
        config: BridgeConfig | None = None,
    ):
        self.config = config or BridgeConfig()
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client if client is not None else httpx.Client(timeout=self.config.remote_timeout)
        self.base_crid = crid or generate_crid()
        self.proxy_url = proxy_url
        self.cookies: dict[str, str] = dict(cookies or {})
        self.headers: dict[str, str] = {}
        self._call_count = 0
        self._lock = threading.Lock()

    def copy_headers(self, headers: Mapping[str, str]) -> None:
        """Copy the headers of an inbound request to every outgoing call."""
        own = {self.config.crid_header.lower(), self.config.proxy_header.lower()}
        for name, value in headers.items():
            if name.lower() not in EXCLUDED_HEADERS and name.lower() not in own:
                self.headers[name] = value

    def next_crid(self) -> str:
        with self._lock:
            self._call_count += 1
            return f"{self.base_crid}.{self._call_count}"

    def url(self, interface_name: str, method_name: str) -> str:
        return f"{self.base_url}/{interface_name}/{method_name}"

    def invoke(self, interface_name: str, method_name: str, *args: Any) -> Any:
        """
        Invoke a binding on the remote side.

        Returns:
            The decoded JSON result, or the response text for other content types

        Raises:
            RemoteInvocationError: If the request fails or the remote side reports an error
        """
        url = self.url(interface_name, method_name)
        headers = dict(self.headers)
        headers["Content-Type"] = "application/json"
        headers[self.config.crid_header] = self.next_crid()
        if self.proxy_url:
            headers[self.config.proxy_header] = self.proxy_url
        if self.cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in self.cookies.items())

        logger.debug("Remote call %s (%s)", url, headers[self.config.crid_header])
        try:
            response = self.client.post(url, json=to_jsonable_python(list(args)), headers=headers)
        except httpx.HTTPError as e:
            raise RemoteInvocationError(url, str(e)) from e

        error = response.headers.get(self.config.error_header)
        if error:
            raise RemoteInvocationError(url, error)
        if response.is_error:
            raise RemoteInvocationError(url, f"HTTP {response.status_code}: {response.text}")

        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                return response.json()
            except ValueError as e:
                raise RemoteInvocationError(url, f"Remote response could not be parsed: {e}") from e
        return response.text

    def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> RemoteClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def remote_proxy(
    url: str,
    remote_interface: str,
    remote_method: str,
    config: BridgeConfig | None = None,
) -> RemoteBinder:
    """
    Create the proxy function of a remote binding.

    The proxy forwards the caller's correlation id, headers and cookies from
    the injected CallContext and returns whatever the remote side responds.

    Raises:
        ValueError: If url is not an absolute http(s) url
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ValueError(f"'{url}' parameter is not a valid url: {e}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValueError(f"'{url}' parameter is not a valid url")

    config = config or BridgeConfig()

    def proxy(context: CallContext, args: list[Any]) -> Any:
        crid = context.crid(config.crid_header) or None
        with RemoteClient(url, context.client, crid, context.external_url, context.cookies, config) as client:
            client.copy_headers(context.headers)
            return client.invoke(remote_interface, remote_method, *args)

    return proxy

"""Async JSON-RPC endpoint invoker over httpx."""

from __future__ import annotations

import itertools
import logging
import re
import time
from typing import Any

import httpx

from creation_trace.core.config import get_settings
from creation_trace.core.errors import RPCError

logger = logging.getLogger(__name__)

# Path segments and query values that look like credentials
_SECRET_SEGMENT_RE = re.compile(r"(?<=[/=])[A-Za-z0-9_\-]{24,}")


def mask_url(url: str) -> str:
    """Hide API-key-looking segments of an RPC URL for logging."""
    return _SECRET_SEGMENT_RE.sub("***", url)


class JsonRpcEndpoint:
    """One upstream JSON-RPC connection.

    ``send`` either returns the raw ``result`` member of the response or
    raises ``RPCError``. There is no retry here; the caller decides whether
    to move on to another endpoint.
    """

    def __init__(
        self,
        url: str,
        *,
        label: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self.url = url
        self._label = label
        self._ids = itertools.count(1)
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.rpc_timeout_seconds,
            headers={"User-Agent": settings.rpc_user_agent},
        )

    @property
    def safe_url(self) -> str:
        """URL suitable for logs: the un-templated label if known, else masked."""
        return self._label or mask_url(self.url)

    async def send(self, method: str, params: list[Any]) -> Any:
        """Invoke ``method`` with ``params`` and return the raw result.

        Raises:
            RPCError: on connection errors, timeouts, non-2xx responses,
                undecodable bodies, or a JSON-RPC ``error`` member.
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        started = time.monotonic()
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RPCError(f"RPC request failed: {e}", method=method) from e

        try:
            data = response.json()
        except ValueError as e:
            raise RPCError(f"RPC returned invalid JSON: {e}", method=method) from e

        logger.debug(
            "%s answered %s in %.0fms",
            self.safe_url,
            method,
            (time.monotonic() - started) * 1000,
            extra={"rpc_method": method, "endpoint": self.safe_url},
        )

        if not isinstance(data, dict):
            raise RPCError("RPC returned a malformed JSON-RPC envelope", method=method)

        if data.get("error") is not None:
            err = data["error"]
            if isinstance(err, dict):
                raise RPCError(
                    f"RPC error: {err.get('message', 'unknown')}",
                    code=err.get("code"),
                    method=method,
                )
            raise RPCError(f"RPC error: {err}", method=method)

        if "result" not in data:
            raise RPCError("RPC response has no result", method=method)

        return data["result"]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "JsonRpcEndpoint":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"JsonRpcEndpoint({self.safe_url!r})"

"""Chain descriptors and the trace method registry."""

from __future__ import annotations

import enum
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from creation_trace.core.config import Settings

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class TraceMethod(str, enum.Enum):
    """Trace-capable JSON-RPC methods, one per trace format."""

    TRACE_TRANSACTION = "trace_transaction"  # flat, Parity/OpenEthereum style
    DEBUG_TRACE_TRANSACTION = "debug_traceTransaction"  # nested, Geth callTracer

    def build_params(self, tx_hash: str) -> list[Any]:
        """Return the JSON-RPC params this method expects for ``tx_hash``."""
        if self is TraceMethod.DEBUG_TRACE_TRANSACTION:
            return [tx_hash, {"tracer": "callTracer"}]
        return [tx_hash]


class TraceSupportedRPC(BaseModel):
    """Binds an endpoint (by position in ``ChainConfig.rpc``) to a trace method."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    type: TraceMethod


class ChainConfig(BaseModel):
    """Immutable identity of a chain and its trace-capable endpoints.

    Accepts both the camelCase keys used by chain registries
    (``chainId``, ``traceSupportedRPCs``) and snake_case field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    chain_id: int = Field(alias="chainId")
    name: str
    rpc: tuple[str, ...] = ()
    supported: bool = True
    trace_supported_rpcs: tuple[TraceSupportedRPC, ...] = Field(
        default=(), alias="traceSupportedRPCs"
    )

    @model_validator(mode="after")
    def _check_binding_indexes(self) -> "ChainConfig":
        for binding in self.trace_supported_rpcs:
            if binding.index >= len(self.rpc):
                raise ValueError(
                    f"Trace binding index {binding.index} ({binding.type.value}) "
                    f"is out of range for {len(self.rpc)} rpc endpoint(s) "
                    f"on chain {self.chain_id}"
                )
        return self

    def resolved_rpc(self, settings: Settings) -> list[str]:
        """Expand ``{alchemy_api_key}``-style placeholders in the RPC URLs.

        Placeholders with no matching setting are left untouched.
        """
        values = settings.rpc_placeholders()

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            return values[key] if key in values else match.group(0)

        return [_PLACEHOLDER_RE.sub(_substitute, url) for url in self.rpc]

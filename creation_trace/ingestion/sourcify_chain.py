"""Recover the creation bytecode of factory-deployed contracts from traces."""

from __future__ import annotations

import logging
from typing import Any

from creation_trace.core.chains import ChainConfig, TraceMethod, TraceSupportedRPC
from creation_trace.core.config import get_settings
from creation_trace.core.errors import (
    CreationBytecodeError,
    ExhaustedSourcesError,
    RPCError,
    TraceAttempt,
    TraceErrorCode,
    UnsupportedChainError,
)
from creation_trace.ingestion.rpc_client import JsonRpcEndpoint
from creation_trace.ingestion.trace_parsers import (
    extract_from_geth_trace,
    extract_from_parity_traces,
)

logger = logging.getLogger(__name__)


class SourcifyChain:
    """A chain with one JSON-RPC endpoint per configured RPC URL.

    ``trace_supported_rpcs`` and ``providers`` are plain lists so that
    administrative code and tests can adjust them between recoveries.
    They must not be mutated while a recovery is in flight.
    """

    def __init__(
        self,
        config: ChainConfig | dict[str, Any],
        providers: list[JsonRpcEndpoint] | None = None,
    ) -> None:
        if not isinstance(config, ChainConfig):
            config = ChainConfig.model_validate(config)
        self.config = config
        self.chain_id = config.chain_id
        self.name = config.name
        self.rpc = list(config.rpc)
        self.supported = config.supported
        self.trace_supported_rpcs: list[TraceSupportedRPC] = list(config.trace_supported_rpcs)

        if providers is None:
            settings = get_settings()
            providers = [
                JsonRpcEndpoint(url, label=template)
                for url, template in zip(config.resolved_rpc(settings), config.rpc)
            ]
        self.providers: list[JsonRpcEndpoint] = providers

    # ── Public API ──────────────────────────────────────────────────────

    async def get_creation_bytecode_for_factory(self, tx_hash: str, address: str) -> str:
        """Return the init code used to create ``address`` inside ``tx_hash``.

        Trace bindings are tried in order and the first one that yields the
        bytecode wins. Transport and trace failures only move on to the next
        binding.

        Raises:
            UnsupportedChainError: no trace bindings are configured.
            ExhaustedSourcesError: every binding failed.
        """
        if not self.trace_supported_rpcs:
            raise UnsupportedChainError(self.chain_id)

        attempts: list[TraceAttempt] = []
        for binding in list(self.trace_supported_rpcs):
            context = {
                "chain_id": self.chain_id,
                "tx_hash": tx_hash,
                "address": address,
                "rpc_method": binding.type.value,
                "endpoint_index": binding.index,
            }
            try:
                bytecode = await self._extract_with_binding(binding, tx_hash, address)
            except CreationBytecodeError as e:
                code = e.error_code
                attempts.append(TraceAttempt(binding.index, binding.type.value, code, e.message))
                logger.warning(
                    "Failed to get creation bytecode for %s via %s on rpc %d: %s",
                    address,
                    binding.type.value,
                    binding.index,
                    e.message,
                    extra={**context, "error_code": code.value},
                )
                continue

            logger.info(
                "Fetched creation bytecode for %s from tx %s via %s",
                address,
                tx_hash,
                binding.type.value,
                extra=context,
            )
            return bytecode

        error = ExhaustedSourcesError(self.chain_id, address, tx_hash, attempts)
        logger.error(
            error.message,
            extra={
                "chain_id": self.chain_id,
                "tx_hash": tx_hash,
                "address": address,
                "attempts": [attempt.to_dict() for attempt in attempts],
            },
        )
        raise error

    async def extract_from_parity_trace_provider(
        self,
        tx_hash: str,
        address: str,
        provider: JsonRpcEndpoint,
    ) -> str:
        method = TraceMethod.TRACE_TRANSACTION
        traces = await provider.send(method.value, method.build_params(tx_hash))
        return extract_from_parity_traces(traces, tx_hash, address)

    async def extract_from_geth_trace_provider(
        self,
        tx_hash: str,
        address: str,
        provider: JsonRpcEndpoint,
    ) -> str:
        method = TraceMethod.DEBUG_TRACE_TRANSACTION
        trace = await provider.send(method.value, method.build_params(tx_hash))
        return extract_from_geth_trace(trace, tx_hash, address, self.chain_id)

    # ── Internals ───────────────────────────────────────────────────────

    async def _extract_with_binding(
        self,
        binding: TraceSupportedRPC,
        tx_hash: str,
        address: str,
    ) -> str:
        if binding.index >= len(self.providers):
            raise RPCError(
                f"No rpc endpoint at index {binding.index} on chain {self.chain_id}",
                method=binding.type.value,
            )
        provider = self.providers[binding.index]
        logger.debug(
            "Fetching %s for %s from %s",
            binding.type.value,
            tx_hash,
            provider.safe_url,
            extra={"chain_id": self.chain_id, "endpoint": provider.safe_url},
        )
        if binding.type is TraceMethod.TRACE_TRANSACTION:
            return await self.extract_from_parity_trace_provider(tx_hash, address, provider)
        return await self.extract_from_geth_trace_provider(tx_hash, address, provider)

    async def close(self) -> None:
        """Close every owned provider."""
        for provider in self.providers:
            await provider.close()

    async def __aenter__(self) -> "SourcifyChain":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"SourcifyChain(chain_id={self.chain_id}, name={self.name!r})"

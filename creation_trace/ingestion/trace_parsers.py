"""Locate a contract creation inside transaction traces.

Two trace families are supported and they are not interchangeable:

* ``trace_transaction`` (Parity/OpenEthereum, Erigon, Nethermind) returns a
  flat list of call records. Creations have ``type == "create"``, the new
  address in ``result.address`` and the init code in ``action.init``.
* ``debug_traceTransaction`` with the ``callTracer`` (Geth and forks)
  returns a single root frame with nested ``calls``. Creations have
  ``type`` ``CREATE``/``CREATE2``, the new address in ``to`` and the init
  code in ``input``.

Both parsers return the init code exactly as the node reported it.
"""

from __future__ import annotations

import logging
from typing import Any

from creation_trace.core.errors import (
    MalformedTraceError,
    MissingBytecodeFieldError,
    NoMatchingCreationError,
    factory_failure_message,
)

logger = logging.getLogger(__name__)

PARITY_CREATE_TYPE = "create"
GETH_CREATE_TYPES = frozenset({"CREATE", "CREATE2"})


def same_address(candidate: Any, address: str) -> bool:
    """Case-insensitive address comparison (checksummed vs lowercase)."""
    return isinstance(candidate, str) and candidate.lower() == address.lower()


# ── Flat traces (trace_transaction) ─────────────────────────────────────────


def extract_from_parity_traces(traces: Any, tx_hash: str, address: str) -> str:
    """Return the init code that created ``address`` from a flat trace list.

    Args:
        traces: Raw ``trace_transaction`` result.
        tx_hash: Transaction hash, used for error context.
        address: Contract expected to be created by the transaction.

    Raises:
        MalformedTraceError: ``traces`` is not a list.
        NoMatchingCreationError: no creation record targets ``address``.
        MissingBytecodeFieldError: the matching record has no ``action.init``.
    """
    if not isinstance(traces, list):
        raise MalformedTraceError(
            f"trace_transaction received empty or malformed response for tx {tx_hash}"
        )

    # A factory may deploy several contracts in one tx, so match on address.
    # Records whose ``result`` is not an object (failed creates) are not candidates.
    create_traces = [
        trace
        for trace in traces
        if isinstance(trace, dict)
        and trace.get("type") == PARITY_CREATE_TYPE
        and isinstance(trace.get("result"), dict)
    ]
    created_addresses = [
        trace["result"].get("address")
        for trace in create_traces
    ]
    created_addresses = [a for a in created_addresses if isinstance(a, str)]

    match = next(
        (
            trace
            for trace in create_traces
            if same_address(trace["result"].get("address"), address)
        ),
        None,
    )
    if match is None:
        raise NoMatchingCreationError(
            f"Provided tx {tx_hash} does not create the expected contract {address}. "
            f"Created contracts by this tx: {', '.join(created_addresses)}",
            created_addresses=created_addresses,
        )

    action = match.get("action")
    init = action.get("init") if isinstance(action, dict) else None
    if init is None:
        raise MissingBytecodeFieldError(".action.init")

    logger.debug("Found create trace for %s in tx %s", address, tx_hash)
    return init


# ── Nested traces (debug_traceTransaction / callTracer) ─────────────────────


def _is_geth_creation(frame: dict[str, Any]) -> bool:
    frame_type = frame.get("type")
    return isinstance(frame_type, str) and frame_type.upper() in GETH_CREATE_TYPES


def extract_from_geth_trace(
    trace: Any,
    tx_hash: str,
    address: str,
    chain_id: int,
) -> str:
    """Return the init code that created ``address`` from a callTracer tree.

    The root frame is checked first (a transaction sent to a factory that
    itself is a CREATE), then its ``calls`` depth-first in document order.

    Raises:
        MalformedTraceError: the response is not a frame at all.
        NoMatchingCreationError: no CREATE/CREATE2 frame targets ``address``.
        MissingBytecodeFieldError: the matching frame has no ``input``.
    """
    if not isinstance(trace, dict) or (
        not isinstance(trace.get("calls"), list) and "type" not in trace
    ):
        raise MalformedTraceError(
            f"debug_traceTransaction received empty or malformed response for tx {tx_hash}"
        )

    stack: list[dict[str, Any]] = [trace]
    seen: set[int] = set()
    while stack:
        frame = stack.pop()
        if id(frame) in seen:
            continue
        seen.add(id(frame))

        if _is_geth_creation(frame) and same_address(frame.get("to"), address):
            if frame.get("input") is None:
                raise MissingBytecodeFieldError(".input")
            logger.debug("Found %s frame for %s in tx %s", frame["type"], address, tx_hash)
            return frame["input"]

        children = frame.get("calls")
        if isinstance(children, list):
            stack.extend(child for child in reversed(children) if isinstance(child, dict))

    raise NoMatchingCreationError(factory_failure_message(address, tx_hash, chain_id))

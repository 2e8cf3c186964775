"""Error taxonomy for creation bytecode recovery.

Every failure carries a ``TraceErrorCode`` and can be rendered as an error
envelope:

    {
        "code": "EXHAUSTED_ALL_SOURCES",
        "message": "Couldnt get the creation bytecode for factory ...",
        "details": {...}
    }

Only ``UnsupportedChainError`` and ``ExhaustedSourcesError`` leave
``SourcifyChain.get_creation_bytecode_for_factory``. Transport and trace
errors are raised per attempt and absorbed by the binding loop.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TraceErrorCode(str, Enum):
    """Standard error codes for recovery failures."""

    RECOVERY_FAILURE = "RECOVERY_FAILURE"
    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    MALFORMED_TRACE = "MALFORMED_TRACE"
    NO_MATCHING_CREATION = "NO_MATCHING_CREATION"
    MISSING_BYTECODE_FIELD = "MISSING_BYTECODE_FIELD"
    EXHAUSTED_ALL_SOURCES = "EXHAUSTED_ALL_SOURCES"


def factory_failure_message(address: str, tx_hash: str, chain_id: int) -> str:
    return (
        f"Couldnt get the creation bytecode for factory {address} "
        f"with tx {tx_hash} on chain {chain_id}"
    )


class CreationBytecodeError(Exception):
    """Base class for every recovery failure."""

    error_code: TraceErrorCode = TraceErrorCode.RECOVERY_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.error_code.value,
            "message": self.message,
            "details": self.details() or None,
        }


class UnsupportedChainError(CreationBytecodeError):
    """The chain has no trace-capable endpoint configured."""

    error_code = TraceErrorCode.UNSUPPORTED_CHAIN

    def __init__(self, chain_id: int) -> None:
        super().__init__(
            f"No trace support for chain {chain_id}. "
            "No other method to get the creation bytecode"
        )
        self.chain_id = chain_id

    def details(self) -> dict[str, Any]:
        return {"chain_id": self.chain_id}


class RPCError(CreationBytecodeError):
    """Raised when a JSON-RPC invocation fails at the transport or envelope level."""

    error_code = TraceErrorCode.TRANSPORT_FAILURE

    def __init__(self, message: str, code: int | None = None, method: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.method = method

    def details(self) -> dict[str, Any]:
        details: dict[str, Any] = {}
        if self.method:
            details["method"] = self.method
        if self.code is not None:
            details["rpc_code"] = self.code
        return details


class TraceError(CreationBytecodeError):
    """A trace was returned but did not yield the creation bytecode."""


class MalformedTraceError(TraceError):
    error_code = TraceErrorCode.MALFORMED_TRACE


class NoMatchingCreationError(TraceError):
    error_code = TraceErrorCode.NO_MATCHING_CREATION

    def __init__(self, message: str, created_addresses: list[str] | None = None) -> None:
        super().__init__(message)
        self.created_addresses = list(created_addresses or [])

    def details(self) -> dict[str, Any]:
        if not self.created_addresses:
            return {}
        return {"created_addresses": self.created_addresses}


class MissingBytecodeFieldError(TraceError):
    """A matching creation record has no bytecode payload."""

    error_code = TraceErrorCode.MISSING_BYTECODE_FIELD

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} not found")
        self.field = field

    def details(self) -> dict[str, Any]:
        return {"field": self.field}


@dataclass(frozen=True)
class TraceAttempt:
    """One failed binding attempt, kept for diagnostics."""

    index: int
    method: str
    error_code: TraceErrorCode
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "method": self.method,
            "error_code": self.error_code.value,
            "message": self.message,
        }


class ExhaustedSourcesError(CreationBytecodeError):
    """Every trace binding was tried and none produced the bytecode."""

    error_code = TraceErrorCode.EXHAUSTED_ALL_SOURCES

    def __init__(
        self,
        chain_id: int,
        address: str,
        tx_hash: str,
        attempts: list[TraceAttempt] | None = None,
    ) -> None:
        super().__init__(factory_failure_message(address, tx_hash, chain_id))
        self.chain_id = chain_id
        self.address = address
        self.tx_hash = tx_hash
        self.attempts = list(attempts or [])

    def details(self) -> dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "address": self.address,
            "tx_hash": self.tx_hash,
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }

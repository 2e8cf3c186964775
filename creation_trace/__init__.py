"""Recover creation bytecode of factory-deployed contracts from node traces."""

from creation_trace.core.chains import ChainConfig, TraceMethod, TraceSupportedRPC
from creation_trace.core.errors import (
    CreationBytecodeError,
    ExhaustedSourcesError,
    UnsupportedChainError,
)
from creation_trace.ingestion.sourcify_chain import SourcifyChain

__all__ = [
    "ChainConfig",
    "CreationBytecodeError",
    "ExhaustedSourcesError",
    "SourcifyChain",
    "TraceMethod",
    "TraceSupportedRPC",
    "UnsupportedChainError",
]

"""Shared fixtures for the creation-trace test suite."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from creation_trace.core.chains import ChainConfig
from creation_trace.core.config import get_settings
from creation_trace.ingestion.rpc_client import JsonRpcEndpoint
from creation_trace.ingestion.sourcify_chain import SourcifyChain


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached; tests that patch the environment need a clean slate."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ── Chain Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def chain_dict() -> dict[str, Any]:
    """Registry-style chain entry with a single flat-trace binding."""
    return {
        "name": "TestChain",
        "chainId": 1,
        "rpc": ["http://localhost:8545"],
        "supported": True,
        "traceSupportedRPCs": [{"index": 0, "type": "trace_transaction"}],
    }


@pytest.fixture
def chain_config(chain_dict: dict[str, Any]) -> ChainConfig:
    return ChainConfig.model_validate(chain_dict)


@pytest_asyncio.fixture
async def sourcify_chain(chain_config: ChainConfig):
    chain = SourcifyChain(chain_config)
    yield chain
    await chain.close()


# ── Trace Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def parity_create_traces() -> list[dict[str, Any]]:
    return [
        {
            "type": "create",
            "result": {"address": "0xaddress"},
            "action": {"init": "0xcreationBytecode"},
        }
    ]


@pytest.fixture
def geth_nested_trace() -> dict[str, Any]:
    return {
        "calls": [
            {
                "type": "CALL",
                "calls": [
                    {"type": "CREATE", "to": "0xaddress", "input": "0xcreationBytecode"},
                ],
            }
        ]
    }


# ── HTTP Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def mock_endpoint() -> Callable[[Callable[[httpx.Request], httpx.Response]], JsonRpcEndpoint]:
    """Build a JsonRpcEndpoint whose HTTP traffic goes to ``handler``."""

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> JsonRpcEndpoint:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return JsonRpcEndpoint("http://localhost:8545", client=client)

    return _build


"""Shared fixtures for swap engine tests."""

from typing import Any, Dict, List, Optional

import pytest

from src.core.types import (
    MAX_SQRT_PRICE_LIMIT,
    MIN_SQRT_PRICE_LIMIT,
    AssetPair,
    Deployment,
    PoolDescriptor,
)
from src.transport.base import Transport

TOKEN = "0x58e0e291ebf6e03efeff6ef628ae34114545d0ed"
VIRTUAL_GDA = "0x6745b438dfaD081Dfe9740FDFF38d96865cF1729"
HOOK = "0x9424Ff87a08da0F96ed2212dA91FD439b5f98540"
SWAPPER = "0x9b4B3e8D33d64EACabffd414dc6cc7b7Ea42e722"
GDA_FORWARDER = "0x6DA13Bde224A05a288748d857b9e7DDEffd1dE08"
GDA_POOL = "0xAc89c2aEa192d404801a3334a071504a4Bc7AC63"
ACCOUNT = "0x1111111111111111111111111111111111111111"


class FakeTransport(Transport):
    """
    In-memory transport recording every call.

    ``fail_on`` maps a call index (0-based, dispatch order) to the exception
    that call raises instead of returning a hash.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.reads: List[Dict[str, Any]] = []
        self.waits: List[Dict[str, Any]] = []
        self.fail_on: Dict[int, Exception] = {}
        self.wait_error: Optional[Exception] = None
        self.read_values: List[Any] = []
        self.read_error: Optional[Exception] = None

    async def call(self, address, abi, function_name, args):
        index = len(self.calls)
        self.calls.append({"address": address, "function": function_name, "args": list(args)})
        if index in self.fail_on:
            raise self.fail_on[index]
        return "0x" + f"{index + 1:064x}"

    async def wait_for_confirmations(self, tx_hash, threshold):
        self.waits.append({"tx_hash": tx_hash, "threshold": threshold})
        if self.wait_error is not None:
            raise self.wait_error
        return {"status": 1, "blockNumber": 100, "transactionHash": tx_hash}

    async def read(self, address, abi, function_name, args):
        self.reads.append({"address": address, "function": function_name, "args": list(args)})
        if self.read_error is not None:
            raise self.read_error
        if len(self.read_values) > 1:
            return self.read_values.pop(0)
        return self.read_values[0] if self.read_values else None

    @property
    def function_names(self) -> List[str]:
        return [call["function"] for call in self.calls]


@pytest.fixture
def deployment():
    """Base mainnet deployment constants."""
    return Deployment(
        assets=AssetPair(input_asset=VIRTUAL_GDA, output_asset=TOKEN),
        pool=PoolDescriptor(
            currency0=TOKEN,
            currency1=VIRTUAL_GDA,
            fee_tier=3000,
            tick_spacing=60,
            hook_address=HOOK,
        ),
        swapper_address=SWAPPER,
        gda_forwarder_address=GDA_FORWARDER,
        distribution_pool_address=GDA_POOL,
        min_sqrt_price_limit=MIN_SQRT_PRICE_LIMIT,
        max_sqrt_price_limit=MAX_SQRT_PRICE_LIMIT,
    )


@pytest.fixture
def transport():
    """Fresh recording transport."""
    return FakeTransport()

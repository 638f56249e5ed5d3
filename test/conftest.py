"""Shared fixtures: real test accounts and a scripted async chain client."""

from collections.abc import Callable, Iterable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account

from src.bundle_rescue.models import Identities

RECIPIENT = "0x85BfE05492aFC3D04Ff3B2ca6771ACF6f853d90d"


async def _resolve(value: Any) -> Any:
    return value


class FakeEth:
    """Stands in for `AsyncWeb3.eth` with scripted chain heads.
    
    `block_number` and `chain_id` are awaitable properties, like the real
    async module. Once the scripted heads run out the last one repeats.
    """

    def __init__(self, heads: Iterable[int], chain_id: int = 1) -> None:
        self._heads = list(heads)
        self._chain_id = chain_id
        self.head_reads = 0
        self.get_transaction_count = AsyncMock(return_value=0)
        self.get_block = AsyncMock(return_value={"number": 0, "transactions": []})
        self.estimate_gas = AsyncMock(return_value=21000)
        self.contract = MagicMock()

    @property
    def block_number(self):
        index = min(self.head_reads, len(self._heads) - 1)
        self.head_reads += 1
        return _resolve(self._heads[index])

    @property
    def chain_id(self):
        return _resolve(self._chain_id)


@pytest.fixture
def identities() -> Identities:
    """Four distinct rescue roles backed by real keys."""
    return Identities(
        relay_signer=Account.from_key("0x" + "1" * 64),
        compromised=Account.from_key("0x" + "2" * 64),
        sponsor=Account.from_key("0x" + "3" * 64),
        safe_destination=RECIPIENT
    )


@pytest.fixture
def make_w3() -> Callable[..., MagicMock]:
    """Factory for a mock AsyncWeb3 whose `eth` is a FakeEth."""
    def factory(heads: Iterable[int] = (100,), chain_id: int = 1) -> MagicMock:
        w3 = MagicMock()
        w3.eth = FakeEth(heads, chain_id)
        return w3
    return factory

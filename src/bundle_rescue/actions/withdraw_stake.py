"""Withdraw the full stake of the compromised account."""

import logging

from eth_typing import ChecksumAddress
from web3 import AsyncWeb3

from ..models import TransactionIntent
from ..utils.contract_utility import ContractUtility

logger = logging.getLogger(__name__)


class WithdrawStake:
    """Withdraws everything the staker has locked in a staking contract."""

    def __init__(self, w3: AsyncWeb3, staking_address: str, staker: str) -> None:
        self.w3 = w3
        self.staking_address: ChecksumAddress = AsyncWeb3.to_checksum_address(staking_address)
        self.staker: ChecksumAddress = AsyncWeb3.to_checksum_address(staker)
        self.contract = w3.eth.contract(
            address=self.staking_address,
            abi=ContractUtility.get_contract_abi("Staking")
        )
        self._staked: int | None = None

    def description(self) -> str:
        return f"Withdraw stake of {self.staker} from {self.staking_address}"

    async def staked_balance(self) -> int:
        """Read the staked balance once; later calls reuse the same value."""
        if self._staked is None:
            self._staked = await self.contract.functions.balanceOf(self.staker).call()
            logger.info(f"Staked balance of {self.staker}: {self._staked}")
        return self._staked

    async def get_sponsored_transactions(self) -> list[TransactionIntent]:
        """Build a single withdraw call for the current staked balance.
        
        Raises:
            ValueError: If the staker has nothing staked
        """
        staked = await self.staked_balance()
        
        if staked == 0:
            raise ValueError(f"No stake to withdraw for {self.staker} in {self.staking_address}")
        
        return [
            TransactionIntent(
                to=self.staking_address,
                data=self.contract.encode_abi("withdraw", args=[staked]),
                sender=self.staker
            )
        ]

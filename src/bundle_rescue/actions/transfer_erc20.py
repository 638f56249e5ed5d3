"""Transfer ERC-20 tokens from the compromised account to a safe address."""

import logging

from eth_typing import ChecksumAddress
from web3 import AsyncWeb3

from ..models import TransactionIntent
from ..utils.contract_utility import ContractUtility
from .withdraw_stake import WithdrawStake

logger = logging.getLogger(__name__)


class TransferERC20:
    """Moves an ERC-20 balance from `sender` to `recipient`.
    
    With no explicit amount the sender's current token balance is read
    and transferred in full. When `released_by` is given, the stake that
    withdrawal releases earlier in the same bundle is added to that
    balance. An explicit amount is used as given.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        sender: str,
        recipient: str,
        token_address: str,
        amount: int | None = None,
        released_by: WithdrawStake | None = None
    ) -> None:
        self.w3 = w3
        self.sender: ChecksumAddress = AsyncWeb3.to_checksum_address(sender)
        self.recipient: ChecksumAddress = AsyncWeb3.to_checksum_address(recipient)
        self.token_address: ChecksumAddress = AsyncWeb3.to_checksum_address(token_address)
        self.amount = amount
        self.released_by = released_by
        self.contract = w3.eth.contract(
            address=self.token_address,
            abi=ContractUtility.get_contract_abi("ERC20")
        )

    def description(self) -> str:
        amount = self.amount if self.amount is not None else "full balance"
        return f"Transfer {amount} of {self.token_address} from {self.sender} to {self.recipient}"

    async def get_sponsored_transactions(self) -> list[TransactionIntent]:
        """Build a single transfer call.
        
        Raises:
            ValueError: If no amount was given and the sender holds no tokens
        """
        if (amount := self.amount) is None:
            amount = await self.contract.functions.balanceOf(self.sender).call()
            logger.info(f"Token balance of {self.sender}: {amount}")
            if self.released_by is not None:
                released = await self.released_by.staked_balance()
                logger.info(f"Including {released} released by {self.released_by.staking_address}")
                amount += released
            if amount == 0:
                raise ValueError(f"No {self.token_address} balance to transfer for {self.sender}")
        
        return [
            TransactionIntent(
                to=self.token_address,
                data=self.contract.encode_abi("transfer", args=[self.recipient, amount]),
                sender=self.sender
            )
        ]

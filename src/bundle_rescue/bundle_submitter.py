#!/usr/bin/env python3
"""Bundle signing and submission to a private relay.

This module signs an assembled bundle under each transaction's assigned
role, submits it for a single target block and waits for the relay's
outcome. Exactly one submission is made per submitter.
"""

import asyncio
import logging
from typing import Any

from eth_typing import ChecksumAddress
from web3 import AsyncWeb3
from web3.types import BlockData, TxParams

from .models import BundleResolution, BundleTransaction, SignedBundle
from .utils.relay_utility import RelayUtility

logger = logging.getLogger(__name__)


def _to_hex(value: Any) -> str:
    return (AsyncWeb3.to_hex(value) if isinstance(value, bytes) else str(value)).lower()


class BundleSubmitter:
    """Signs a bundle, sends it to the relay and resolves the outcome."""
    
    def __init__(
        self,
        w3: AsyncWeb3,
        relay: RelayUtility,
        blocks_in_future: int = 2,
        poll_interval: float = 1.0
    ) -> None:
        """
        Initialize the BundleSubmitter.
        
        Args:
            w3: Async web3 client for chain reads
            relay: Relay client used for simulation and submission
            blocks_in_future: Lookahead from the current head to the target block
            poll_interval: Seconds between head checks while waiting
        """
        self.w3: AsyncWeb3 = w3
        self.relay: RelayUtility = relay
        self.blocks_in_future: int = blocks_in_future
        self.poll_interval: float = poll_interval
        self.submitted: bool = False
    
    async def sign_bundle(self, bundle: list[BundleTransaction]) -> SignedBundle:
        """
        Sign every bundle transaction with its assigned signer.
        
        Nonces are taken from each signer's confirmed transaction count and
        incremented locally when a signer appears more than once.
        
        Args:
            bundle: Assembled bundle, funding transaction first
            
        Returns:
            SignedBundle in the same order as `bundle`
        """
        chain_id: int = await self.w3.eth.chain_id
        next_nonce: dict[ChecksumAddress, int] = {}
        raw_transactions: list[str] = []
        transaction_hashes: list[str] = []
        account_nonces: list[tuple[ChecksumAddress, int]] = []
        
        for entry in bundle:
            address = entry.signer.address
            if address not in next_nonce:
                next_nonce[address] = await self.w3.eth.get_transaction_count(address, "latest")
            nonce = next_nonce[address]
            next_nonce[address] = nonce + 1
            
            tx: TxParams = {k: v for k, v in entry.transaction.items() if k != 'from'}
            tx.setdefault('value', 0)
            tx['nonce'] = nonce
            tx['chainId'] = chain_id
            
            signed = entry.signer.sign_transaction(tx)
            raw_transactions.append(signed.raw_transaction.to_0x_hex())
            transaction_hashes.append(signed.hash.to_0x_hex())
            account_nonces.append((address, nonce))
        
        return SignedBundle(
            raw_transactions=tuple(raw_transactions),
            transaction_hashes=tuple(transaction_hashes),
            account_nonces=tuple(account_nonces)
        )
    
    async def get_target_block(self) -> int:
        """Current head plus the configured lookahead."""
        block_number: int = await self.w3.eth.block_number
        target_block_number = block_number + self.blocks_in_future
        logger.info(f"Current Block Number: {block_number}, Target Block Number: {target_block_number}")
        return target_block_number
    
    async def simulate(self, signed: SignedBundle) -> dict[str, Any]:
        """Simulate the bundle on top of the current head."""
        block_number: int = await self.w3.eth.block_number
        logger.info(f"Simulating bundle on top of block {block_number}")
        return await self.relay.simulate_bundle(
            list(signed.raw_transactions), block_number + 1, block_number
        )
    
    async def _nonces_valid(self, signed: SignedBundle) -> bool:
        """Whether no bundle account has moved past the nonce it uses."""
        for address, nonce in signed.account_nonces:
            current_nonce: int = await self.w3.eth.get_transaction_count(address, "latest")
            if nonce < current_nonce:
                logger.debug(f"{address} nonce {current_nonce} is past bundle nonce {nonce}")
                return False
        return True
    
    async def wait(self, signed: SignedBundle, target_block_number: int) -> BundleResolution:
        """
        Wait until the target block is known and resolve the outcome.
        
        Before the target block, an account nonce moving past the bundle's
        resolves ACCOUNT_NONCE_TOO_HIGH. Once the target block exists the
        bundle is included only if every one of its hashes is in that block.
        """
        while (block_number := await self.w3.eth.block_number) < target_block_number:
            if not await self._nonces_valid(signed):
                return BundleResolution.ACCOUNT_NONCE_TOO_HIGH
            logger.debug(f"Block {block_number}, waiting for {target_block_number}")
            await asyncio.sleep(self.poll_interval)
        
        block: BlockData = await self.w3.eth.get_block(target_block_number)
        block_hashes = {_to_hex(tx) for tx in block["transactions"]}
        
        if all(tx_hash.lower() in block_hashes for tx_hash in signed.transaction_hashes):
            return BundleResolution.BUNDLE_INCLUDED
        return BundleResolution.BLOCK_PASSED_WITHOUT_INCLUSION
    
    async def send_bundle(self, signed: SignedBundle) -> BundleResolution:
        """
        Submit the signed bundle for one target block and await the outcome.
        
        Args:
            signed: Signed bundle to submit
            
        Returns:
            The relay resolution for the target block
            
        Raises:
            RuntimeError: If this submitter already made its attempt
            RelayError: If the relay rejects the submission
        """
        if self.submitted:
            raise RuntimeError("Bundle already submitted; only one attempt is made per run")
        
        target_block_number = await self.get_target_block()
        
        self.submitted = True
        await self.relay.send_bundle(list(signed.raw_transactions), target_block_number)
        
        resolution = await self.wait(signed, target_block_number)
        
        # Use pattern matching for resolution handling
        match resolution:
            case BundleResolution.BUNDLE_INCLUDED:
                logger.info(f"✓ Congrats, bundle included in block {target_block_number}")
                block: BlockData = await self.w3.eth.get_block(target_block_number)
                logger.info(
                    f"  Block {block.get('number')} hash={_to_hex(block.get('hash', b''))} "
                    f"transactions={len(block.get('transactions', []))}"
                )
            case BundleResolution.BLOCK_PASSED_WITHOUT_INCLUSION:
                logger.warning(f"✗ Bundle not included in block {target_block_number}")
            case BundleResolution.ACCOUNT_NONCE_TOO_HIGH:
                logger.error(
                    "✗ Account nonce too high: a conflicting transaction from a bundle "
                    "account was already confirmed, bailing"
                )
        
        return resolution

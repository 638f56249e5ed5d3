#!/usr/bin/env python3
"""Gas estimation and fee pricing for rescue bundles.

Estimates are issued concurrently, one per intent, and stay positionally
aligned with the intent list. The gas price is derived once from a single
reference block and reused for every transaction in the bundle.
"""

import asyncio
import logging

from eth_typing import ChecksumAddress
from web3 import AsyncWeb3
from web3.types import BlockData, Wei

from .models import GasEstimates, TransactionIntent
from .utils.formatting import gas_price_to_gwei

logger = logging.getLogger(__name__)


async def estimate_gas(
    w3: AsyncWeb3,
    intents: list[TransactionIntent],
    default_sender: ChecksumAddress
) -> list[int]:
    """Estimate gas for every intent concurrently.
    
    Args:
        w3: Async web3 client used for the estimates
        intents: Unsigned transactions in bundle order
        default_sender: Sender for intents without an explicit one
        
    Returns:
        One estimate per intent, in the same order as `intents`
        
    Raises:
        Exception: The first estimation failure; no partial results are returned
    """
    tasks = [
        asyncio.ensure_future(w3.eth.estimate_gas(intent.to_tx_params(default_sender)))
        for intent in intents
    ]
    try:
        estimates = await asyncio.gather(*tasks)
    except BaseException:
        # Outstanding estimates are cancelled and their results collected
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return [int(estimate) for estimate in estimates]


def compute_gas_price(priority_fee: int, block: BlockData) -> Wei:
    """Uniform bundle gas price: priority fee plus the block's base fee."""
    return Wei(priority_fee + block.get("baseFeePerGas", 0))


async def calculate_gas_estimates(
    w3: AsyncWeb3,
    intents: list[TransactionIntent],
    default_sender: ChecksumAddress,
    priority_fee: int,
    block: BlockData
) -> GasEstimates:
    """Estimate, total and price the bundle against one reference block.
    
    Args:
        w3: Async web3 client
        intents: Unsigned transactions in bundle order
        default_sender: Compromised account address
        priority_fee: Priority fee per gas in wei
        block: Reference block providing the base fee
        
    Returns:
        GasEstimates for the bundle
    """
    estimates = await estimate_gas(w3, intents, default_sender)
    logger.info(f"Gas estimates: {estimates}")
    
    estimate_total = sum(estimates)
    logger.info(f"Gas estimate total: {estimate_total}")
    
    price = compute_gas_price(priority_fee, block)
    logger.info(f"Gas price: {gas_price_to_gwei(price)} gwei (block {block.get('number')})")
    
    return GasEstimates(
        estimates=tuple(estimates),
        estimate_total=estimate_total,
        price=price,
        block=block
    )

"""Diagnostic rendering of prices and bundles."""

import logging
from decimal import Decimal

from web3 import Web3

from ..models import BundleTransaction, SignedBundle

logger = logging.getLogger(__name__)


def gas_price_to_gwei(price: int) -> Decimal:
    """Convert a wei gas price to gwei."""
    return Web3.from_wei(price, 'gwei')


def print_transactions(bundle: list[BundleTransaction], signed: SignedBundle) -> None:
    """Log every bundle transaction next to its signed form."""
    logger.info("=" * 60)
    logger.info(f"Bundle ({len(bundle)} transactions)")
    logger.info("=" * 60)
    
    for index, (entry, raw_tx) in enumerate(zip(bundle, signed.raw_transactions)):
        tx = entry.transaction
        _, nonce = signed.account_nonces[index]
        logger.info(f"[{index}] signer={entry.signer.address}")
        logger.info(f"  to: {tx.get('to')}")
        logger.info(f"  value: {tx.get('value', 0)} wei")
        logger.info(f"  gas: {tx.get('gas')} @ {gas_price_to_gwei(tx.get('gasPrice', 0))} gwei")
        logger.info(f"  nonce: {nonce}")
        logger.info(f"  data: {tx.get('data', '0x')}")
        logger.info(f"  hash: {signed.transaction_hashes[index]}")
        logger.info(f"  signed: {raw_tx}")
    
    logger.info("=" * 60)

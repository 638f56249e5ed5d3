#!/usr/bin/env python3
"""Bundle assembly.

Position 0 of a bundle is always the sponsor's funding transaction;
positions 1..N are the rescue transactions in the order the actions
produced them, each signed by the compromised account.
"""

import logging

from web3.types import TxParams, Wei

from .models import BundleTransaction, GasEstimates, Identities, TransactionIntent

logger = logging.getLogger(__name__)

FUNDING_GAS_LIMIT = 90000
SAFETY_MULTIPLIER = 3


class EmptyBundleError(ValueError):
    """Raised when there are no rescue transactions to fund."""


def funding_value(gas: GasEstimates, safety_multiplier: int = SAFETY_MULTIPLIER) -> Wei:
    """Native value the sponsor sends to cover the rescue transactions' gas."""
    return Wei(safety_multiplier * gas.estimate_total * gas.price)


def build_bundle(
    identities: Identities,
    gas: GasEstimates,
    intents: list[TransactionIntent],
    *,
    funding_gas_limit: int = FUNDING_GAS_LIMIT,
    safety_multiplier: int = SAFETY_MULTIPLIER,
    allow_empty: bool = False
) -> list[BundleTransaction]:
    """
    Assemble the ordered bundle.
    
    Args:
        identities: Rescue roles
        gas: Estimates aligned with `intents` and the uniform price
        intents: Rescue transactions in producer order
        funding_gas_limit: Fixed gas limit of the funding transfer
        safety_multiplier: Factor applied to the estimated gas cost
        allow_empty: Return a funding-only bundle instead of raising
        
    Returns:
        Bundle entries, funding transaction first
        
    Raises:
        EmptyBundleError: If `intents` is empty and `allow_empty` is False
        ValueError: If estimates and intents are not the same length
    """
    if not intents and not allow_empty:
        raise EmptyBundleError(
            "No rescue transactions: refusing to build a funding-only bundle"
        )
    
    if len(gas.estimates) != len(intents):
        raise ValueError(
            f"Gas estimates ({len(gas.estimates)}) do not match "
            f"rescue transactions ({len(intents)})"
        )
    
    funding_tx: TxParams = {
        'from': identities.sponsor.address,
        'to': identities.compromised.address,
        'value': funding_value(gas, safety_multiplier),
        'gasPrice': gas.price,
        'gas': funding_gas_limit,
    }
    bundle = [BundleTransaction(transaction=funding_tx, signer=identities.sponsor)]
    
    for intent, estimate in zip(intents, gas.estimates):
        tx = intent.to_tx_params(identities.compromised.address)
        tx['gasPrice'] = gas.price
        tx['gas'] = estimate
        bundle.append(BundleTransaction(transaction=tx, signer=identities.compromised))
    
    logger.debug(f"Built bundle of {len(bundle)} transactions ({len(intents)} rescue)")
    return bundle

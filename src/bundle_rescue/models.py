#!/usr/bin/env python3
"""Data models for the bundle rescue pipeline.

This module provides the immutable data classes passed between the
pipeline stages: the identity set, unsigned transaction intents, gas
estimates, bundle entries and the relay resolution outcome.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from web3.types import BlockData, TxParams, Wei


class BundleResolution(Enum):
    """Resolution of a bundle submitted for a single target block."""
    BUNDLE_INCLUDED = "bundle_included"
    BLOCK_PASSED_WITHOUT_INCLUSION = "block_passed_without_inclusion"
    ACCOUNT_NONCE_TOO_HIGH = "account_nonce_too_high"


@dataclass(frozen=True, slots=True)
class Identities:
    """The four roles taking part in a rescue.
    
    Attributes:
        relay_signer: Signs relay requests only, holds no assets
        compromised: Account under threat that owns the assets
        sponsor: Clean account paying for gas
        safe_destination: Address receiving the rescued assets
    """
    
    relay_signer: LocalAccount
    compromised: LocalAccount
    sponsor: LocalAccount
    safe_destination: ChecksumAddress
    
    def __post_init__(self) -> None:
        """Validate that no two roles share an address."""
        addresses = [
            self.relay_signer.address,
            self.compromised.address,
            self.sponsor.address,
            self.safe_destination,
        ]
        if len({address.lower() for address in addresses}) != len(addresses):
            raise ValueError(
                "Relay signer, compromised, sponsor and safe destination "
                "must be four distinct accounts"
            )


@dataclass(frozen=True, slots=True)
class TransactionIntent:
    """An unsigned transaction produced by an action.
    
    Gas price and gas limit are deliberately absent; the pipeline
    assigns them once the whole bundle has been estimated.
    
    Attributes:
        to: Target contract or account
        data: ABI-encoded call data (0x-prefixed)
        value: Native value to send, if any
        sender: Explicit sender, defaults to the compromised account
    """
    
    to: ChecksumAddress
    data: str = "0x"
    value: Wei | None = None
    sender: ChecksumAddress | None = None
    
    def to_tx_params(self, default_sender: ChecksumAddress | None = None) -> TxParams:
        """Convert to web3 transaction params.
        
        Args:
            default_sender: Sender used when the intent has no override
            
        Returns:
            TxParams with 'from' set when a sender is known
        """
        tx: TxParams = {"to": self.to, "data": self.data}
        if self.value is not None:
            tx["value"] = self.value
        if sender := self.sender or default_sender:
            tx["from"] = sender
        return tx
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "to": self.to,
            "data": self.data,
            "value": self.value,
            "sender": self.sender,
        }


@dataclass(frozen=True, slots=True)
class GasEstimates:
    """Gas estimates and uniform price for one bundle.
    
    Attributes:
        estimates: One estimate per intent, same order as the intents
        estimate_total: Sum of all estimates
        price: Gas price applied to every bundle transaction
        block: Reference block the price was derived from
    """
    
    estimates: tuple[int, ...]
    estimate_total: int
    price: Wei
    block: BlockData
    
    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"GasEstimates(count={len(self.estimates)}, "
            f"total={self.estimate_total}, "
            f"price={self.price})"
        )


@dataclass(frozen=True, slots=True)
class BundleTransaction:
    """A bundle entry: a transaction and the account that must sign it."""
    transaction: TxParams
    signer: LocalAccount


@dataclass(frozen=True, slots=True)
class SignedBundle:
    """Signed form of a bundle, order preserved.
    
    Attributes:
        raw_transactions: 0x-prefixed raw signed transactions
        transaction_hashes: Hash of each signed transaction
        account_nonces: (address, nonce) consumed by each transaction
    """
    
    raw_transactions: tuple[str, ...]
    transaction_hashes: tuple[str, ...]
    account_nonces: tuple[tuple[ChecksumAddress, int], ...]
    
    def __len__(self) -> int:
        return len(self.raw_transactions)

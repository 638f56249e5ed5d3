#!/usr/bin/env python3
"""Configuration management for Bundle Rescue.

This module provides type-safe configuration dataclasses with validation
for the rescue pipeline. Configuration is loaded from environment variables
once at startup and passed explicitly to every component.
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from eth_account import Account
from web3 import Web3
from web3.types import Wei

from .models import Identities

# Get logger for this module
logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "https://relay.flashbots.net"


def _validate_url(url: str, name: str, env_var: str) -> None:
    if not url:
        raise ValueError(f"{name} is required ({env_var})")
    
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise ValueError(
            f"Invalid {name} scheme: {parsed.scheme}. Expected http or https"
        )


def _validate_private_key(key: str, env_var: str) -> None:
    """Basic private key validation (64 hex chars, optionally 0x prefixed)."""
    if not key:
        raise ValueError(f"{env_var} is required")
    
    if key.startswith('0x'):
        key = key[2:]
    
    if len(key) != 64:
        raise ValueError(
            f"Invalid private key length for {env_var}. "
            f"Expected 64 hex characters, got {len(key)}"
        )
    
    try:
        int(key, 16)
    except ValueError:
        raise ValueError(
            f"Invalid private key format for {env_var}. Must be hexadecimal"
        ) from None


def _checksum(address: str, name: str) -> str:
    if not Web3.is_address(address):
        raise ValueError(f"Invalid {name}: {address}")
    return Web3.to_checksum_address(address)


@dataclass(frozen=True, slots=True)
class ChainConfig:
    """Endpoints used by the rescue.
    
    Attributes:
        rpc_url: HTTP(S) JSON-RPC endpoint for chain reads
        relay_url: HTTP(S) endpoint of the private bundle relay
        request_timeout: Relay HTTP request timeout in seconds
    """
    
    rpc_url: str
    relay_url: str = DEFAULT_RELAY_URL
    request_timeout: int = 30
    
    def __post_init__(self) -> None:
        """Validate endpoint configuration."""
        _validate_url(self.rpc_url, "RPC URL", "RPC_URL")
        _validate_url(self.relay_url, "relay URL", "RELAY_URL")
        
        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class AccountsConfig:
    """Credentials for the rescue roles.
    
    Attributes:
        relay_signing_key: Key used to authenticate relay requests
        compromised_private_key: Key of the account holding the assets
        sponsor_private_key: Key of the account paying for gas
        recipient: Safe destination address for rescued assets
    """
    
    relay_signing_key: str
    compromised_private_key: str
    sponsor_private_key: str
    recipient: str
    
    def __post_init__(self) -> None:
        """Validate credentials and checksum the recipient."""
        _validate_private_key(self.relay_signing_key, "RELAY_SIGNING_KEY")
        _validate_private_key(self.compromised_private_key, "COMPROMISED_PRIVATE_KEY")
        _validate_private_key(self.sponsor_private_key, "SPONSOR_PRIVATE_KEY")
        
        if not self.recipient:
            raise ValueError("Recipient address is required (RECIPIENT)")
        
        checksummed = _checksum(self.recipient, "recipient address")
        if checksummed != self.recipient:
            # Use object.__setattr__ since dataclass is frozen
            object.__setattr__(self, 'recipient', checksummed)
    
    def identities(self) -> Identities:
        """Build the identity set from the configured keys.
        
        Raises:
            ValueError: If two roles resolve to the same address
        """
        return Identities(
            relay_signer=Account.from_key(self.relay_signing_key),
            compromised=Account.from_key(self.compromised_private_key),
            sponsor=Account.from_key(self.sponsor_private_key),
            safe_destination=self.recipient,
        )


@dataclass(frozen=True, slots=True)
class BundleConfig:
    """Pricing and targeting parameters for the bundle."""
    priority_gas_price_gwei: int = 0  # added on top of the base fee
    blocks_in_future: int = 2  # target block = head + blocks_in_future
    funding_gas_limit: int = 90000  # gas limit of the sponsor's funding tx
    safety_multiplier: int = 3  # funding value = multiplier * total gas * price
    poll_interval: float = 1.0  # seconds between head checks while waiting
    
    def __post_init__(self) -> None:
        """Validate bundle configuration."""
        if self.priority_gas_price_gwei < 0:
            raise ValueError(
                f"Priority gas price must be non-negative, got {self.priority_gas_price_gwei}"
            )
        
        if self.blocks_in_future <= 0:
            raise ValueError(f"Blocks in future must be positive, got {self.blocks_in_future}")
        if self.blocks_in_future > 25:
            raise ValueError(f"Blocks in future too high (max 25), got {self.blocks_in_future}")
        
        if self.funding_gas_limit < 21000:
            raise ValueError(
                f"Funding gas limit must cover a transfer (min 21000), got {self.funding_gas_limit}"
            )
        
        if self.safety_multiplier < 1:
            raise ValueError(f"Safety multiplier must be at least 1, got {self.safety_multiplier}")
        
        if self.poll_interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.poll_interval}")
    
    @property
    def priority_fee(self) -> Wei:
        """Priority fee per gas in wei."""
        return Web3.to_wei(self.priority_gas_price_gwei, 'gwei')


@dataclass(frozen=True, slots=True)
class ActionsConfig:
    """Which assets to rescue.
    
    Attributes:
        staking_contract_address: Staking contract to withdraw from, if any
        token_contract_address: ERC-20 token to transfer out, if any
        token_amount: Token amount in base units (defaults to the full balance)
    """
    
    staking_contract_address: str | None = None
    token_contract_address: str | None = None
    token_amount: int | None = None
    
    def __post_init__(self) -> None:
        """Validate action configuration."""
        if not self.staking_contract_address and not self.token_contract_address:
            raise ValueError(
                "At least one action is required "
                "(STAKING_CONTRACT_ADDRESS and/or TOKEN_CONTRACT_ADDRESS)"
            )
        
        for field_name, label in (
            ('staking_contract_address', "staking contract address"),
            ('token_contract_address', "token contract address"),
        ):
            if address := getattr(self, field_name):
                checksummed = _checksum(address, label)
                if checksummed != address:
                    object.__setattr__(self, field_name, checksummed)
        
        if self.token_amount is not None and self.token_amount <= 0:
            raise ValueError(f"Token amount must be positive, got {self.token_amount}")


@dataclass(frozen=True, slots=True)
class RescueConfig:
    """Main configuration for a rescue run.
    
    Attributes:
        chain: Chain and relay endpoints
        accounts: Credentials of the rescue roles
        bundle: Pricing and targeting parameters
        actions: Assets to rescue
        simulate: Simulate the bundle against the relay before sending
    """
    
    chain: ChainConfig
    accounts: AccountsConfig
    bundle: BundleConfig
    actions: ActionsConfig
    simulate: bool = False
    
    @classmethod
    def from_env(cls, simulate: bool = False) -> "RescueConfig":
        """Load configuration from environment variables.
        
        Args:
            simulate: Whether to simulate the bundle before sending it
            
        Returns:
            RescueConfig instance with loaded values
            
        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        rpc_url = os.environ.get("RPC_URL", "")
        if not rpc_url:
            raise ValueError(
                "RPC_URL environment variable is required. "
                "This should be a JSON-RPC endpoint for the target chain."
            )
        
        chain_config = ChainConfig(
            rpc_url=rpc_url,
            relay_url=os.environ.get("RELAY_URL", DEFAULT_RELAY_URL),
            request_timeout=int(os.environ.get("REQUEST_TIMEOUT", "30"))
        )
        
        for env_var in (
            "RELAY_SIGNING_KEY",
            "COMPROMISED_PRIVATE_KEY",
            "SPONSOR_PRIVATE_KEY",
            "RECIPIENT",
        ):
            if not os.environ.get(env_var, "").strip():
                raise ValueError(f"{env_var} environment variable is required.")
        
        accounts_config = AccountsConfig(
            relay_signing_key=os.environ["RELAY_SIGNING_KEY"].strip(),
            compromised_private_key=os.environ["COMPROMISED_PRIVATE_KEY"].strip(),
            sponsor_private_key=os.environ["SPONSOR_PRIVATE_KEY"].strip(),
            recipient=os.environ["RECIPIENT"].strip()
        )
        
        bundle_config = BundleConfig(
            priority_gas_price_gwei=int(os.environ.get("PRIORITY_GAS_PRICE", "0")),
            blocks_in_future=int(os.environ.get("BLOCKS_IN_FUTURE", "2")),
            funding_gas_limit=int(os.environ.get("FUNDING_GAS_LIMIT", "90000")),
            safety_multiplier=int(os.environ.get("SAFETY_MULTIPLIER", "3")),
            poll_interval=float(os.environ.get("POLL_INTERVAL", "1.0"))
        )
        
        token_amount = os.environ.get("TOKEN_AMOUNT")
        actions_config = ActionsConfig(
            staking_contract_address=os.environ.get("STAKING_CONTRACT_ADDRESS") or None,
            token_contract_address=os.environ.get("TOKEN_CONTRACT_ADDRESS") or None,
            token_amount=int(token_amount) if token_amount else None
        )
        
        return cls(
            chain=chain_config,
            accounts=accounts_config,
            bundle=bundle_config,
            actions=actions_config,
            simulate=simulate
        )
    
    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Bundle Rescue Configuration")
        logger.info("=" * 60)
        
        logger.info("Chain:")
        logger.info(f"  RPC URL: {self.chain.rpc_url}")
        logger.info(f"  Relay URL: {self.chain.relay_url}")
        logger.info(f"  Request Timeout: {self.chain.request_timeout} seconds")
        
        logger.info("Accounts:")
        logger.info("  Relay Signing Key: [CONFIGURED]")
        logger.info("  Compromised Key: [CONFIGURED]")
        logger.info("  Sponsor Key: [CONFIGURED]")
        logger.info(f"  Recipient: {self.accounts.recipient}")
        
        logger.info("Bundle Settings:")
        logger.info(f"  Priority Gas Price: {self.bundle.priority_gas_price_gwei} gwei")
        logger.info(f"  Blocks In Future: {self.bundle.blocks_in_future}")
        logger.info(f"  Funding Gas Limit: {self.bundle.funding_gas_limit}")
        logger.info(f"  Safety Multiplier: {self.bundle.safety_multiplier}x")
        
        logger.info("Actions:")
        if self.actions.staking_contract_address:
            logger.info(f"  Withdraw Stake: {self.actions.staking_contract_address}")
        if self.actions.token_contract_address:
            amount = self.actions.token_amount if self.actions.token_amount is not None else "full balance"
            logger.info(f"  Transfer ERC20: {self.actions.token_contract_address} ({amount})")
        
        logger.info(f"  Simulate: {'YES' if self.simulate else 'NO'}")
        logger.info("=" * 60)

"""Rescue actions: one producer per class of asset."""

from .base import ActionProducer, collect_sponsored_transactions
from .transfer_erc20 import TransferERC20
from .withdraw_stake import WithdrawStake

__all__ = ["ActionProducer", "TransferERC20", "WithdrawStake", "collect_sponsored_transactions"]

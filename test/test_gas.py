#!/usr/bin/env python3
"""Tests for gas estimation and fee pricing."""

import asyncio

import pytest
from web3 import Web3

from src.bundle_rescue.gas import calculate_gas_estimates, compute_gas_price, estimate_gas
from src.bundle_rescue.models import TransactionIntent

COMPROMISED = "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"
OTHER_SENDER = "0x6813Eb9362372EEF6200f3b1dbC3f819671cBA69"
TOKEN = "0x595832F8FC6BF59c85C527fEC3740A1b7a361269"
STAKING = "0xba33Aa06901B7662e17869f588b77c04fb0Cd872"

GWEI = 10**9


@pytest.fixture
def intents():
    return [
        TransactionIntent(to=STAKING, data="0x01"),
        TransactionIntent(to=TOKEN, data="0x02", sender=OTHER_SENDER),
    ]


class TestEstimateGas:
    """Tests for estimate_gas."""
    
    @pytest.mark.asyncio
    async def test_one_estimate_per_intent_with_default_sender(self, make_w3, intents):
        w3 = make_w3()
        w3.eth.estimate_gas.side_effect = [21000, 65000]
        
        estimates = await estimate_gas(w3, intents, COMPROMISED)
        
        assert estimates == [21000, 65000]
        sent = [call.args[0] for call in w3.eth.estimate_gas.call_args_list]
        assert sent[0]["from"] == COMPROMISED
        assert sent[1]["from"] == OTHER_SENDER
    
    @pytest.mark.asyncio
    async def test_estimates_are_concurrent(self, make_w3, intents):
        w3 = make_w3()
        started = 0
        all_started = asyncio.Event()
        
        async def estimate(tx):
            nonlocal started
            started += 1
            if started == len(intents):
                all_started.set()
            # A sequential implementation would never get here for the first call
            await asyncio.wait_for(all_started.wait(), timeout=1)
            return 30000
        
        w3.eth.estimate_gas.side_effect = estimate
        
        assert await estimate_gas(w3, intents, COMPROMISED) == [30000, 30000]
    
    @pytest.mark.asyncio
    async def test_order_follows_intents_not_completion(self, make_w3, intents):
        w3 = make_w3()
        
        async def estimate(tx):
            # First intent finishes last
            await asyncio.sleep(0.05 if tx["to"] == STAKING else 0)
            return 21000 if tx["to"] == STAKING else 65000
        
        w3.eth.estimate_gas.side_effect = estimate
        
        assert await estimate_gas(w3, intents, COMPROMISED) == [21000, 65000]
    
    @pytest.mark.asyncio
    async def test_single_failure_fails_all(self, make_w3, intents):
        w3 = make_w3()
        w3.eth.estimate_gas.side_effect = [21000, ValueError("execution reverted")]
        
        with pytest.raises(ValueError, match="execution reverted"):
            await estimate_gas(w3, intents, COMPROMISED)
    
    @pytest.mark.asyncio
    async def test_failure_cancels_outstanding_estimates(self, make_w3, intents):
        w3 = make_w3()
        cancelled = asyncio.Event()
        
        async def estimate(tx):
            if tx["to"] == TOKEN:
                raise ValueError("execution reverted")
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise
        
        w3.eth.estimate_gas.side_effect = estimate
        
        with pytest.raises(ValueError, match="execution reverted"):
            await estimate_gas(w3, intents, COMPROMISED)
        
        assert cancelled.is_set()


class TestComputeGasPrice:
    """Tests for compute_gas_price."""
    
    def test_priority_plus_base_fee(self):
        block = {"number": 1, "baseFeePerGas": 100 * GWEI}
        
        assert compute_gas_price(2 * GWEI, block) == 102 * GWEI
    
    def test_zero_priority_fee(self):
        assert compute_gas_price(0, {"baseFeePerGas": 100 * GWEI}) == 100 * GWEI
    
    def test_missing_base_fee(self):
        assert compute_gas_price(3 * GWEI, {"number": 1}) == 3 * GWEI


class TestCalculateGasEstimates:
    """Tests for calculate_gas_estimates."""
    
    @pytest.mark.asyncio
    async def test_scenario_two_intents(self, make_w3, intents):
        w3 = make_w3()
        w3.eth.estimate_gas.side_effect = [21000, 65000]
        block = {"number": 500, "baseFeePerGas": Web3.to_wei(100, "gwei")}
        
        gas = await calculate_gas_estimates(w3, intents, COMPROMISED, 0, block)
        
        assert gas.estimates == (21000, 65000)
        assert gas.estimate_total == 86000
        assert gas.price == 100 * GWEI
        assert gas.block is block
    
    @pytest.mark.asyncio
    async def test_price_comes_from_the_given_block_only(self, make_w3, intents):
        w3 = make_w3()
        w3.eth.estimate_gas.side_effect = [21000, 65000]
        
        await calculate_gas_estimates(w3, intents, COMPROMISED, GWEI, {"baseFeePerGas": GWEI})
        
        w3.eth.get_block.assert_not_called()

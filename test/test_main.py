#!/usr/bin/env python3
"""Tests for the command line entry point and its exit statuses."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import main
from src.bundle_rescue.bundle_builder import EmptyBundleError
from src.bundle_rescue.models import BundleResolution
from src.bundle_rescue.utils.relay_utility import RelayError


def rescuer_returning(**run_kwargs):
    rescuer = MagicMock()
    rescuer.run = AsyncMock(**run_kwargs)
    return rescuer


class TestMain:
    """Tests for main()."""
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("resolution,expected", [
        (BundleResolution.BUNDLE_INCLUDED, 0),
        (BundleResolution.BLOCK_PASSED_WITHOUT_INCLUSION, 0),
        (BundleResolution.ACCOUNT_NONCE_TOO_HIGH, 3),
    ])
    async def test_resolution_exit_codes(self, resolution, expected):
        rescuer = rescuer_returning(return_value=resolution)
        
        with patch.object(main.BundleRescuer, 'from_env', return_value=rescuer):
            assert await main.main([]) == expected
        
        rescuer.run.assert_awaited_once()
    
    def test_every_resolution_has_an_exit_code(self):
        assert set(main.EXIT_CODES) == set(BundleResolution)
    
    @pytest.mark.asyncio
    async def test_configuration_error(self, caplog):
        with patch.object(main.BundleRescuer, 'from_env', side_effect=ValueError("RPC_URL environment variable is required.")):
            assert await main.main([]) == 1
        
        assert "Configuration Error" in caplog.text
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        EmptyBundleError("no rescue transactions"),
        RelayError("bundle rejected"),
        ConnectionError("rpc down"),
    ])
    async def test_fatal_errors(self, error):
        rescuer = rescuer_returning(side_effect=error)
        
        with patch.object(main.BundleRescuer, 'from_env', return_value=rescuer):
            assert await main.main([]) == 1
    
    @pytest.mark.asyncio
    async def test_simulate_flag(self):
        rescuer = rescuer_returning(return_value=BundleResolution.BUNDLE_INCLUDED)
        
        with patch.object(main.BundleRescuer, 'from_env', return_value=rescuer) as mock_from_env:
            await main.main(["--simulate", "--log-level", "DEBUG"])
        
        mock_from_env.assert_called_once_with(simulate=True)


def test_parse_args_defaults(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    
    args = main.parse_args([])
    
    assert args.simulate is False
    assert args.log_level == "INFO"

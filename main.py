#!/usr/bin/env python3
"""Entry point for the bundle rescue tool.

Runs one rescue attempt: fund the compromised account from the sponsor
and move its assets to the safe destination in a single relay bundle
targeted at one future block, then exit.
"""

import argparse
import asyncio
import logging
import os
import sys

# Configure logging before any other imports create loggers
def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.
    
    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

# Get logger for this module
logger = logging.getLogger(__name__)

from src.bundle_rescue.bundle_builder import EmptyBundleError
from src.bundle_rescue.models import BundleResolution
from src.bundle_rescue.rescuer import BundleRescuer
from src.bundle_rescue.utils.relay_utility import RelayError

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NONCE_CONFLICT = 3

EXIT_CODES: dict[BundleResolution, int] = {
    BundleResolution.BUNDLE_INCLUDED: EXIT_OK,
    BundleResolution.BLOCK_PASSED_WITHOUT_INCLUSION: EXIT_OK,
    BundleResolution.ACCOUNT_NONCE_TOO_HIGH: EXIT_NONCE_CONFLICT,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Bundle Rescue - move assets out of a compromised account via a private relay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  RPC_URL                  - JSON-RPC endpoint for chain reads
  RELAY_URL                - Private relay endpoint (default: https://relay.flashbots.net)
  RELAY_SIGNING_KEY        - Key signing relay requests (holds no assets)
  COMPROMISED_PRIVATE_KEY  - Key of the account holding the assets
  SPONSOR_PRIVATE_KEY      - Key of the account paying for gas
  RECIPIENT                - Safe destination address
  PRIORITY_GAS_PRICE       - Priority fee in gwei (default: 0)
  BLOCKS_IN_FUTURE         - Target block lookahead (default: 2)
  STAKING_CONTRACT_ADDRESS - Staking contract to withdraw from (optional)
  TOKEN_CONTRACT_ADDRESS   - ERC-20 token to transfer (optional)
  TOKEN_AMOUNT             - Token amount in base units (default: full balance)
  LOG_LEVEL                - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        default=False,
        help="Simulate the bundle against the relay before sending it"
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point for the bundle rescue tool.
    
    Parses startup arguments, loads configuration from environment
    and runs a single rescue attempt.
    
    Returns:
        Process exit status
    """
    args: argparse.Namespace = parse_args(argv)
    setup_logging(args.log_level)
    
    logger.info("=== Bundle Rescue Starting ===")
    logger.info("Loading configuration from environment...")
    
    try:
        rescuer: BundleRescuer = BundleRescuer.from_env(simulate=args.simulate)
    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - RPC_URL: JSON-RPC endpoint")
        logger.error("  - RELAY_SIGNING_KEY, COMPROMISED_PRIVATE_KEY, SPONSOR_PRIVATE_KEY")
        logger.error("  - RECIPIENT: Safe destination address")
        logger.error("  - STAKING_CONTRACT_ADDRESS and/or TOKEN_CONTRACT_ADDRESS")
        return EXIT_FAILURE
    
    try:
        resolution: BundleResolution = await rescuer.run()
        
    except EmptyBundleError as e:
        logger.error(f"Nothing to rescue: {e}")
        return EXIT_FAILURE
        
    except RelayError as e:
        logger.error(f"Relay Error: {e}")
        return EXIT_FAILURE
        
    except KeyboardInterrupt:
        logger.info("\nReceived interrupt signal, aborting...")
        return 130
        
    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        return EXIT_FAILURE
    
    logger.info(f"=== Bundle Rescue Finished: {resolution.name} ===")
    return EXIT_CODES[resolution]


if __name__ == "__main__":
    # Run the main async function
    sys.exit(asyncio.run(main()))

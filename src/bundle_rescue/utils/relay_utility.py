import json
import logging
from typing import Any

import httpx
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import Web3

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """Raised when the relay answers a request with a JSON-RPC error."""


class RelayUtility:
    """Utility for interacting with a private bundle relay.
    
    Every request is authenticated with the relay signer, an identity
    that holds no assets and only establishes reputation with the relay.
    """
    
    DEFAULT_RELAY_URL: str = "https://relay.flashbots.net"

    def __init__(self, signer: LocalAccount, url: str = DEFAULT_RELAY_URL, timeout: float = 30.0) -> None:
        """Initialize relay utility.
        
        Args:
            signer: Relay authentication account
            url: Relay JSON-RPC endpoint
            timeout: HTTP request timeout in seconds
        """
        self.signer: LocalAccount = signer
        self.url: str = url
        self.timeout: float = timeout
        self._request_id: int = 0

    def _sign_body(self, body: str) -> str:
        """Build the relay signature header value for a request body."""
        message = encode_defunct(text=Web3.keccak(text=body).to_0x_hex())
        signature = self.signer.sign_message(message).signature.to_0x_hex()
        return f"{self.signer.address}:{signature}"

    async def _relay_post(self, method: str, params: list[Any]) -> Any:
        """Post a signed JSON-RPC request to the relay.
        
        Args:
            method: JSON-RPC method name
            params: JSON-RPC params
            
        Returns:
            The `result` member of the response
            
        Raises:
            httpx.HTTPStatusError: If the request fails at the HTTP level
            RelayError: If the relay returns a JSON-RPC error
        """
        self._request_id += 1
        body: str = json.dumps({
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        })
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "X-Flashbots-Signature": self._sign_body(body),
        }

        async with httpx.AsyncClient() as client:
            logger.debug(f"Posting {method} to {self.url}")
            response: httpx.Response = await client.post(
                self.url, content=body, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            decoded: dict[str, Any] = response.json()

        match decoded:
            case {"error": {"message": message}}:
                logger.error(f"Relay rejected {method}: {message}")
                raise RelayError(message)
            case {"error": error}:
                logger.error(f"Relay rejected {method}: {error}")
                raise RelayError(str(error))
            case {"result": result}:
                return result
            case _:
                raise RelayError(f"Unknown relay response format: {decoded}")

    async def send_bundle(self, raw_transactions: list[str], block_number: int) -> str | None:
        """
        Submit a bundle for inclusion in exactly one block.
        
        Args:
            raw_transactions: 0x-prefixed signed transactions, in execution order
            block_number: The only block the bundle may be included in
            
        Returns:
            The relay's bundle hash, if it reports one
        """
        params = [{
            "txs": raw_transactions,
            "blockNumber": hex(block_number),
        }]
        result: dict[str, Any] | None = await self._relay_post("eth_sendBundle", params)
        bundle_hash = result.get("bundleHash") if isinstance(result, dict) else None
        logger.info(f"Bundle accepted by relay for block {block_number} (bundleHash={bundle_hash})")
        return bundle_hash

    async def simulate_bundle(
        self,
        raw_transactions: list[str],
        block_number: int,
        state_block_number: int | str = "latest"
    ) -> dict[str, Any]:
        """
        Simulate a bundle on top of a given state block.
        
        Returns:
            The relay's simulation result
            
        Raises:
            RelayError: If the simulation fails or any transaction reverts
        """
        params = [{
            "txs": raw_transactions,
            "blockNumber": hex(block_number),
            "stateBlockNumber": (
                hex(state_block_number) if isinstance(state_block_number, int) else state_block_number
            ),
        }]
        result: dict[str, Any] = await self._relay_post("eth_callBundle", params)

        for tx_result in result.get("results", []):
            if error := tx_result.get("error") or tx_result.get("revert"):
                raise RelayError(f"Simulated transaction {tx_result.get('txHash')} failed: {error}")

        logger.info(f"Simulation succeeded: totalGasUsed={result.get('totalGasUsed')}")
        return result

import json
from pathlib import Path
from typing import Any

from web3 import AsyncWeb3


class ContractUtility:
    """
    Utility for read-only chain access and ABI loading.
    
    Holds no keys: every transaction is signed explicitly by the
    role that owns it, never by a provider middleware.
    """

    def __init__(self, rpc_url: str) -> None:
        """
        Initialize the ContractUtility.
        
        Args:
            rpc_url: RPC URL for the network (required)
        """
        if not rpc_url:
            raise ValueError("RPC URL is required")
            
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.rpc_url))

    @staticmethod
    def get_contract_abi(contract_name: str) -> list[dict[str, Any]]:
        """Fetches ABI of the given contract from the contracts folder.
        
        Args:
            contract_name: Name of the contract (without .json extension)
            
        Returns:
            List of ABI dictionaries for the contract
            
        Raises:
            FileNotFoundError: If the contract file doesn't exist
            json.JSONDecodeError: If the contract file is invalid JSON
        """
        contract_path: Path = (
            Path(__file__).parent.parent
            / "contracts"
            / f"{contract_name}.json"
        ).resolve()
        
        with contract_path.open() as file:
            contract_data: dict[str, Any] = json.load(file)

        return contract_data["abi"]

"""
EVM adapter for asset registries deployed on Ethereum-compatible chains.

Read-only: exposes the registry reads the settlement checks need, so sale
terms can be validated against live chain state before a purchase is sent.
"""

import logging
from typing import Optional, Dict, Any, List

from web3 import Web3
from web3.exceptions import ContractLogicError

from ..errors import AssetNotFoundError
from ..utils import normalize_address, is_null_address

logger = logging.getLogger(__name__)

# Minimal ERC-721 + AccessControl read ABI
ASSET_REGISTRY_ABI: List[Dict[str, Any]] = [
    {
        "name": "ownerOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "getApproved",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "isApprovedForAll",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "operator", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "tokenURI",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "hasRole",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "role", "type": "bytes32"},
            {"name": "account", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class EVMAssetRegistry:
    """Asset registry reader backed by a deployed ERC-721 contract"""

    def __init__(self, w3: Web3, address: str):
        self.w3 = w3
        self.address = normalize_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=ASSET_REGISTRY_ABI)

    @classmethod
    def connect(cls, rpc_url: str, address: str,
                chain_id: Optional[int] = None) -> "EVMAssetRegistry":
        """Open an HTTP provider and bind to the registry at address"""
        w3 = Web3(Web3.HTTPProvider(rpc_url))
        if not w3.is_connected():
            raise ConnectionError(f"Failed to connect to {rpc_url}")

        if chain_id is not None and w3.eth.chain_id != chain_id:
            logger.warning(f"Chain ID mismatch: expected {chain_id}, got {w3.eth.chain_id}")

        logger.info(f"Connected to asset registry {address} at {rpc_url}")
        return cls(w3, address)

    def owner_of(self, asset_id: int) -> str:
        try:
            owner = self.contract.functions.ownerOf(asset_id).call()
        except ContractLogicError as e:
            raise AssetNotFoundError(f"Asset {asset_id} does not exist in {self.address}") from e
        return normalize_address(owner)

    def get_approved(self, asset_id: int) -> Optional[str]:
        approved = self.contract.functions.getApproved(asset_id).call()
        if is_null_address(approved):
            return None
        return normalize_address(approved)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return self.contract.functions.isApprovedForAll(
            normalize_address(owner), normalize_address(operator)
        ).call()

    def token_uri(self, asset_id: int) -> str:
        return self.contract.functions.tokenURI(asset_id).call()

    def has_role(self, role: str, account: str) -> bool:
        return self.contract.functions.hasRole(
            Web3.to_bytes(hexstr=role), normalize_address(account)
        ).call()

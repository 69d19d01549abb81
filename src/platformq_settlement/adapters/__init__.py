"""
Chain adapters for asset registries.
"""

from .evm import EVMAssetRegistry, ASSET_REGISTRY_ABI

__all__ = [
    "EVMAssetRegistry",
    "ASSET_REGISTRY_ABI",
]

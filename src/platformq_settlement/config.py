"""
Settlement client configuration.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettlementSettings(BaseSettings):
    """Settings read from SETTLEMENT_* environment variables or .env"""

    model_config = SettingsConfigDict(
        env_prefix="SETTLEMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Chain
    rpc_url: str = "http://localhost:8545"
    chain_id: int = 1

    # Deployed contracts
    registry_address: Optional[str] = None
    engine_address: Optional[str] = None
    trusted_authority: Optional[str] = None

    # Signing
    signer_private_key: Optional[SecretStr] = Field(default=None, repr=False)

    log_level: str = "INFO"


@lru_cache()
def get_settings() -> SettlementSettings:
    return SettlementSettings()

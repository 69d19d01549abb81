"""
Pytest configuration for settlement tests
"""

import pytest
from eth_account import Account
from eth_utils import to_checksum_address

from platformq_settlement import (
    CallContext,
    ExecutionHost,
    InMemoryAssetRegistry,
    SaleTerms,
    SaleTermsSigner,
    SettlementEngine,
    MINTER_ROLE,
    derive_prefix,
)

REGISTRY_ADDRESS = "0x" + "a1" * 20
ENGINE_ADDRESS = "0x" + "e0" * 20
BUYER_FUNDS = 10 ** 20


def account_from_seed(seed: int):
    """Deterministic test account with private key seed repeated 32 times"""
    return Account.from_key("0x" + f"{seed:02x}" * 32)


def _creator_account():
    # Creators whose prefix starts with "0" cannot lazily mint
    for seed in range(0x20, 0x80):
        account = account_from_seed(seed)
        if not derive_prefix(account.address).startswith("0"):
            return account
    raise RuntimeError("No usable creator key")


@pytest.fixture
def deployer():
    return account_from_seed(0x11)


@pytest.fixture
def authority():
    return account_from_seed(0x12)


@pytest.fixture
def buyer():
    return account_from_seed(0x13)


@pytest.fixture
def outsider():
    return account_from_seed(0x14)


@pytest.fixture
def creator():
    return _creator_account()


@pytest.fixture
def recipients():
    """Two plain (code-free) payment recipients"""
    return [to_checksum_address("0x" + "c1" * 20), to_checksum_address("0x" + "c2" * 20)]


@pytest.fixture
def host(buyer):
    host = ExecutionHost()
    host.ledger.deposit(buyer.address, BUYER_FUNDS)
    return host


@pytest.fixture
def registry(host, deployer):
    return host.deploy(InMemoryAssetRegistry(host, REGISTRY_ADDRESS, deployer.address))


@pytest.fixture
def engine(host, registry, deployer, authority):
    """Engine with MINTER_ROLE on the registry and a rotated-in trusted authority"""
    engine = host.deploy(SettlementEngine(host, ENGINE_ADDRESS, deployer.address))
    admin = CallContext(sender=deployer.address)
    registry.access.grant_role(admin, MINTER_ROLE, engine.address)
    engine.set_trusted_authority(admin, authority.address)
    return engine


@pytest.fixture
def make_terms(registry, engine):
    """Build sale terms scoped to the test registry and engine"""
    def _make(asset_id, recipients, amounts, is_preexisting=False,
              metadata="", settlement_context_id=None):
        return SaleTerms(
            asset_registry_id=registry.address,
            asset_id=asset_id,
            settlement_context_id=settlement_context_id or engine.address,
            recipients=tuple(recipients),
            amounts=tuple(amounts),
            is_preexisting=is_preexisting,
            delivery_metadata=metadata,
        )
    return _make


@pytest.fixture
def sign():
    """Sign terms with a test account"""
    def _sign(account, terms):
        return SaleTermsSigner(account.key.hex()).sign(terms)
    return _sign


@pytest.fixture
def mint(registry, deployer):
    """Create an asset directly as the registry admin"""
    admin = CallContext(sender=deployer.address)
    if not registry.has_role(MINTER_ROLE, deployer.address):
        registry.access.grant_role(admin, MINTER_ROLE, deployer.address)

    def _mint(owner, asset_id, metadata=""):
        registry.create(admin, owner, asset_id, metadata)
        return asset_id
    return _mint

"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests should be completely isolated from:
- Network (RPC, HTTP)
- File system (except tmp_path)
"""

import pytest

from socean.shared.system.logging import Logger
from tests.mocks.mock_pool import (
    fee,
    make_pool_account,
    make_stake_pool,
    make_validator,
    make_validator_list_account,
)


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Automatically disable all network I/O for unit tests.
    Any test that accidentally tries to make a network call will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Unit tests must be pure logic with no external dependencies. "
            "Use MockRpcClient instead."
        )

    # solana-py's AsyncClient talks HTTP through httpx
    monkeypatch.setattr("httpx.AsyncClient.post", block_network)
    monkeypatch.setattr("httpx.AsyncClient.send", block_network)


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep console output off during tests."""
    Logger.set_silent(True)
    yield
    Logger.set_silent(None)


# ============================================================================
# STAKE POOL FIXTURES
# ============================================================================


@pytest.fixture
def one_to_one_pool():
    """1,000,000 droplets backed by 1,000,000 lamports, no fees."""
    return make_stake_pool(total_lamports=1_000_000, pool_token_supply=1_000_000)


@pytest.fixture
def large_pool():
    """Pool priced at 1.25 lamports per droplet with a 0.1% withdrawal fee."""
    return make_stake_pool(
        total_lamports=1_250_000_000_000,
        pool_token_supply=1_000_000_000_000,
        withdrawal_fee=fee(1, 1000),
    )


@pytest.fixture
def validators_100_50_200():
    """Three validators with total stakes (in SOL) 100, 50 and 200, in that order."""
    sol = 1_000_000_000
    return [
        make_validator(active=100 * sol),
        make_validator(active=50 * sol),
        make_validator(active=200 * sol),
    ]


@pytest.fixture
def pool_factory():
    """(stake_pool, validators, **kw) -> (StakePoolAccount, ValidatorListAccount)."""
    def build(stake_pool, validators, **kwargs):
        return make_pool_account(stake_pool), make_validator_list_account(validators, **kwargs)
    return build

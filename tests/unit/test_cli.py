"""
CLI Unit Tests
==============
Typer commands rendered against a mocked pool.
"""

import pytest
from typer.testing import CliRunner

from socean import cli
from socean.client import Socean
from tests.mocks import MockAccountInfo, MockRpcClient
from tests.mocks.mock_pool import (
    POOL_ADDRESS,
    PROGRAM_ID,
    encode_stake_pool,
    encode_validator_list,
    make_stake_pool,
    make_validator,
    make_validator_list_account,
)

SOL = 1_000_000_000

runner = CliRunner()


@pytest.fixture
def rpc(monkeypatch):
    stake_pool = make_stake_pool(total_lamports=30 * SOL, pool_token_supply=30 * SOL)
    validator_list = make_validator_list_account(
        [make_validator(active=10 * SOL), make_validator(active=20 * SOL)],
        pubkey=stake_pool.validator_list,
    )
    client = MockRpcClient()
    client.set_account_info(POOL_ADDRESS, MockAccountInfo(5_000_000, encode_stake_pool(stake_pool), PROGRAM_ID))
    client.set_account_info(
        stake_pool.validator_list,
        MockAccountInfo(5_000_000, encode_validator_list(validator_list.data), PROGRAM_ID),
    )
    monkeypatch.setattr(cli, "Socean", lambda cluster, rpc_url: Socean("testnet", client=client))
    return client


class TestCommands:
    def test_pool(self, rpc):
        result = runner.invoke(cli.app, ["pool"])

        assert result.exit_code == 0
        assert "Total staked" in result.output

    def test_validators(self, rpc):
        result = runner.invoke(cli.app, ["validators"])

        assert result.exit_code == 0
        assert "Validators (2)" in result.output

    def test_quote_deposit(self, rpc):
        result = runner.invoke(cli.app, ["quote-deposit", str(SOL)])

        assert result.exit_code == 0
        assert "Deposit quote" in result.output

    def test_quote_withdraw(self, rpc):
        result = runner.invoke(cli.app, ["quote-withdraw", str(SOL)])

        assert result.exit_code == 0
        assert f"burn {SOL} droplets" in result.output

    def test_unserviceable_withdraw_exits_1(self, rpc):
        result = runner.invoke(cli.app, ["quote-withdraw", str(40 * SOL)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_rpc_failure_exits_1(self, rpc):
        rpc.raise_on = "get_account_info"

        result = runner.invoke(cli.app, ["pool"])

        assert result.exit_code == 1

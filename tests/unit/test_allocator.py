"""
Withdrawal Allocator Unit Tests
===============================
How calc_withdrawals splits a request across validator stake accounts.
"""

import pytest

from socean.errors import WithdrawalUnserviceableError
from socean.stake_pool.allocator import (
    calc_withdrawals,
    calc_withdrawals_inverse,
    sorted_validators,
    stake_available_to_withdraw,
    total_unstaked_droplets,
    total_withdraw_lamports,
    total_withdrawal_fees_droplets,
)
from socean.stake_pool.pda import find_transient_stake_account, find_validator_stake_account
from tests.mocks.mock_pool import POOL_ADDRESS, PROGRAM_ID, fee, make_stake_pool, make_validator

SOL = 1_000_000_000
MIN_ACTIVE = 100_000_000
RENT = 2_282_880


def main_account(validator):
    return find_validator_stake_account(PROGRAM_ID, POOL_ADDRESS, validator.vote_account_address)


def transient_account(validator):
    return find_transient_stake_account(PROGRAM_ID, POOL_ADDRESS, validator.vote_account_address)


@pytest.fixture
def sol_pool():
    """1:1 pool holding 350 SOL, no fees."""
    return make_stake_pool(total_lamports=350 * SOL, pool_token_supply=350 * SOL)


class TestStakeAvailable:
    """Active stake first, transient only when active is empty."""

    def test_active_keeps_minimum(self, sol_pool, pool_factory):
        validator = make_validator(active=10 * SOL, transient=5 * SOL)
        pool_account, _ = pool_factory(sol_pool, [validator])

        available = stake_available_to_withdraw(validator, pool_account)

        assert available.lamports == 10 * SOL - MIN_ACTIVE
        assert available.stake_account == main_account(validator)

    def test_transient_keeps_rent_and_minimum(self, sol_pool, pool_factory):
        validator = make_validator(active=0, transient=5 * SOL)
        pool_account, _ = pool_factory(sol_pool, [validator])

        available = stake_available_to_withdraw(validator, pool_account)

        assert available.lamports == 5 * SOL - RENT - MIN_ACTIVE
        assert available.stake_account == transient_account(validator)

    def test_at_minimum_is_zero(self, sol_pool, pool_factory):
        validator = make_validator(active=MIN_ACTIVE)
        pool_account, _ = pool_factory(sol_pool, [validator])
        assert stake_available_to_withdraw(validator, pool_account).lamports == 0

    def test_custom_minimum(self, sol_pool, pool_factory):
        validator = make_validator(active=1000)
        pool_account, _ = pool_factory(sol_pool, [validator])
        assert stake_available_to_withdraw(validator, pool_account, min_active_stake_lamports=0).lamports == 1000


class TestSortedValidators:
    def test_ascending_by_total_stake(self, validators_100_50_200):
        ordered = sorted_validators(validators_100_50_200)
        assert [v.total_stake // SOL for v in ordered] == [50, 100, 200]

    def test_ties_keep_list_order(self):
        a, b = make_validator(active=5, transient=5), make_validator(active=10)
        assert sorted_validators([a, b]) == [a, b]
        assert sorted_validators([b, a]) == [b, a]


class TestCalcWithdrawals:
    """Forward allocation from a droplet amount."""

    def test_lightest_validator_first(self, sol_pool, pool_factory, validators_100_50_200):
        pool_account, validator_list = pool_factory(sol_pool, validators_100_50_200)

        receipts = calc_withdrawals(1 * SOL, pool_account, validator_list.data)

        assert len(receipts) == 1
        assert receipts[0].stake_account == main_account(validators_100_50_200[1])
        assert receipts[0].withdrawal_receipt.droplets_unstaked == 1 * SOL

    def test_spills_into_next_lightest(self, sol_pool, pool_factory, validators_100_50_200):
        pool_account, validator_list = pool_factory(sol_pool, validators_100_50_200)

        receipts = calc_withdrawals(120 * SOL, pool_account, validator_list.data)

        assert [r.stake_account for r in receipts] == [
            main_account(validators_100_50_200[1]),
            main_account(validators_100_50_200[0]),
        ]
        assert receipts[0].withdrawal_receipt.droplets_unstaked == 50 * SOL - MIN_ACTIVE
        assert total_unstaked_droplets(receipts) == 120 * SOL

    @pytest.mark.parametrize("droplets", [1, 999, 49_900_000_000, 150 * SOL, 250 * SOL])
    def test_droplets_are_conserved(self, droplets, pool_factory, validators_100_50_200):
        pool = make_stake_pool(
            total_lamports=437 * SOL,
            pool_token_supply=350 * SOL,
            withdrawal_fee=fee(3, 1000),
        )
        pool_account, validator_list = pool_factory(pool, validators_100_50_200)

        receipts = calc_withdrawals(droplets, pool_account, validator_list.data)

        assert total_unstaked_droplets(receipts) == droplets
        assert all(r.withdrawal_receipt.droplets_unstaked > 0 for r in receipts)

    def test_empty_list_uses_reserve(self, one_to_one_pool, pool_factory):
        pool_account, validator_list = pool_factory(one_to_one_pool, [])

        receipts = calc_withdrawals(10, pool_account, validator_list.data)

        assert len(receipts) == 1
        assert receipts[0].stake_account == one_to_one_pool.reserve_stake
        assert receipts[0].withdrawal_receipt.droplets_unstaked == 10

    def test_transient_only_validator(self, sol_pool, pool_factory):
        validator = make_validator(active=0, transient=5 * SOL)
        pool_account, validator_list = pool_factory(sol_pool, [validator])

        receipts = calc_withdrawals(1 * SOL, pool_account, validator_list.data)

        assert receipts[0].stake_account == transient_account(validator)

    def test_skips_validators_at_minimum(self, sol_pool, pool_factory):
        drained = make_validator(active=MIN_ACTIVE)
        healthy = make_validator(active=10 * SOL)
        pool_account, validator_list = pool_factory(sol_pool, [drained, healthy])

        receipts = calc_withdrawals(1 * SOL, pool_account, validator_list.data)

        assert [r.stake_account for r in receipts] == [main_account(healthy)]

    def test_unserviceable_when_stake_runs_out(self, sol_pool, pool_factory, validators_100_50_200):
        pool_account, validator_list = pool_factory(sol_pool, validators_100_50_200)

        with pytest.raises(WithdrawalUnserviceableError, match="retry next epoch"):
            calc_withdrawals(350 * SOL, pool_account, validator_list.data)

    def test_unserviceable_when_all_transient_below_buffer(self, sol_pool, pool_factory):
        validators = [make_validator(active=0, transient=RENT) for _ in range(3)]
        pool_account, validator_list = pool_factory(sol_pool, validators)

        with pytest.raises(WithdrawalUnserviceableError) as exc_info:
            calc_withdrawals(1, pool_account, validator_list.data)
        assert exc_info.value.reason


class TestCalcWithdrawalsInverse:
    """Lamport-target allocation, best effort."""

    @pytest.mark.parametrize("lamports", [1, 1_000, 3 * SOL, 75 * SOL])
    def test_pays_at_least_target(self, lamports, large_pool, pool_factory):
        validators = [make_validator(active=60 * SOL), make_validator(active=40 * SOL)]
        pool_account, validator_list = pool_factory(large_pool, validators)

        receipts = calc_withdrawals_inverse(lamports, pool_account, validator_list.data)

        assert total_withdraw_lamports(receipts) >= lamports

    def test_empty_list_uses_reserve(self, large_pool, pool_factory):
        pool_account, validator_list = pool_factory(large_pool, [])

        receipts = calc_withdrawals_inverse(5 * SOL, pool_account, validator_list.data)

        assert receipts[0].stake_account == large_pool.reserve_stake
        assert receipts[0].withdrawal_receipt.lamports_received >= 5 * SOL

    def test_unserviceable(self, large_pool, pool_factory):
        pool_account, validator_list = pool_factory(large_pool, [make_validator(active=1 * SOL)])

        with pytest.raises(WithdrawalUnserviceableError):
            calc_withdrawals_inverse(2 * SOL, pool_account, validator_list.data)


class TestTotals:
    def test_sums(self, pool_factory):
        pool = make_stake_pool(total_lamports=10 * SOL, pool_token_supply=10 * SOL, withdrawal_fee=fee(1, 100))
        validators = [make_validator(active=3 * SOL), make_validator(active=5 * SOL)]
        pool_account, validator_list = pool_factory(pool, validators)

        receipts = calc_withdrawals(4 * SOL, pool_account, validator_list.data)

        assert total_unstaked_droplets(receipts) == 4 * SOL
        assert total_withdrawal_fees_droplets(receipts) == sum(
            r.withdrawal_receipt.droplets_fee_paid for r in receipts
        )
        assert total_withdraw_lamports(receipts) == sum(
            r.withdrawal_receipt.lamports_received for r in receipts
        )

    def test_empty(self):
        assert total_withdraw_lamports([]) == 0

"""
Fee Accounting Unit Tests
=========================
Deposit / withdrawal receipts against known pool states.
"""

import pytest

from socean.stake_pool.fees import (
    calc_deposit,
    calc_sol_deposit,
    calc_sol_deposit_inverse,
    calc_stake_deposit,
    calc_withdrawal_receipt,
    est_droplets_unstaked_by_withdrawal,
)
from socean.stake_pool.schema import Fee
from tests.mocks.mock_pool import ZERO_FEE, fee, make_stake_pool


class TestDeposit:
    """calc_deposit and its SOL / stake wrappers."""

    def test_one_to_one_no_fee(self, one_to_one_pool):
        receipt = calc_deposit(500, one_to_one_pool, ZERO_FEE, 0)

        assert receipt.lamports_staked == 500
        assert receipt.droplets_received == 500
        assert receipt.droplets_fee_paid == 0
        assert receipt.referral_fee_paid == 0

    def test_one_percent_fee(self, one_to_one_pool):
        receipt = calc_deposit(1000, one_to_one_pool, fee(1, 100), 0)

        assert receipt.droplets_fee_paid == 10
        assert receipt.droplets_received == 990
        assert receipt.droplets_received + receipt.droplets_fee_paid == 1000

    def test_referral_is_part_of_fee(self, one_to_one_pool):
        receipt = calc_deposit(1000, one_to_one_pool, fee(1, 100), 50)

        assert receipt.droplets_fee_paid == 10
        assert receipt.referral_fee_paid == 5
        assert receipt.manager_fee_paid == 5

    def test_referral_rounds_down(self, one_to_one_pool):
        receipt = calc_deposit(1100, one_to_one_pool, fee(1, 100), 33)
        # fee 11, 11 * 33 / 100 = 3.63
        assert receipt.referral_fee_paid == 3

    @pytest.mark.parametrize("total,supply", [(0, 1000), (1000, 0), (0, 0)])
    def test_empty_pool_prices_one_to_one(self, total, supply):
        pool = make_stake_pool(total_lamports=total, pool_token_supply=supply)
        assert calc_deposit(777, pool, ZERO_FEE, 0).droplets_received == 777

    def test_price_rounds_down(self):
        # 1.5 lamports per droplet
        pool = make_stake_pool(total_lamports=3_000, pool_token_supply=2_000)
        assert calc_deposit(1000, pool, ZERO_FEE, 0).droplets_received == 666

    @pytest.mark.parametrize("bad_fee", [Fee(denominator=0, numerator=5), Fee(denominator=100, numerator=0)])
    def test_degenerate_fee_is_zero(self, one_to_one_pool, bad_fee):
        assert calc_deposit(1000, one_to_one_pool, bad_fee, 100).droplets_fee_paid == 0

    def test_sol_and_stake_use_their_own_fees(self):
        pool = make_stake_pool(
            sol_deposit_fee=fee(1, 100),
            sol_referral_fee=50,
            stake_deposit_fee=fee(2, 100),
            stake_referral_fee=0,
        )

        sol = calc_sol_deposit(1000, pool)
        stake = calc_stake_deposit(1000, pool)

        assert (sol.droplets_fee_paid, sol.referral_fee_paid) == (10, 5)
        assert (stake.droplets_fee_paid, stake.referral_fee_paid) == (20, 0)

    def test_wide_intermediate_product(self):
        # lamports * supply exceeds u64, the result does not
        supply = 10 ** 18
        pool = make_stake_pool(total_lamports=supply, pool_token_supply=supply)
        assert calc_deposit(10 ** 17, pool, ZERO_FEE, 0).droplets_received == 10 ** 17


class TestSolDepositInverse:
    """Best-effort lamports for a droplet target."""

    @pytest.mark.parametrize("wanted", [1, 99, 1000, 123_456])
    def test_covers_target(self, wanted):
        pool = make_stake_pool(
            total_lamports=1_300_000,
            pool_token_supply=1_000_000,
            sol_deposit_fee=fee(3, 1000),
        )
        lamports = calc_sol_deposit_inverse(wanted, pool)
        assert calc_sol_deposit(lamports, pool).droplets_received >= wanted

    def test_one_to_one_is_exact(self, one_to_one_pool):
        assert calc_sol_deposit_inverse(500, one_to_one_pool) == 500


class TestWithdrawalReceipt:
    """calc_withdrawal_receipt is authoritative."""

    def test_one_to_one_no_fee(self, one_to_one_pool):
        receipt = calc_withdrawal_receipt(500, one_to_one_pool)

        assert receipt.droplets_unstaked == 500
        assert receipt.lamports_received == 500
        assert receipt.droplets_fee_paid == 0

    def test_rounds_up(self):
        # 1.5 lamports per droplet: 3 droplets -> 4.5 -> 5
        pool = make_stake_pool(total_lamports=3_000, pool_token_supply=2_000)
        assert calc_withdrawal_receipt(3, pool).lamports_received == 5

    def test_fee_is_deducted_before_conversion(self):
        pool = make_stake_pool(withdrawal_fee=fee(1, 100))
        receipt = calc_withdrawal_receipt(1000, pool)

        assert receipt.droplets_fee_paid == 10
        assert receipt.lamports_received == 990

    def test_too_small_yields_zero(self):
        # 1 droplet is worth 0.001 lamports
        pool = make_stake_pool(total_lamports=1_000, pool_token_supply=1_000_000)
        receipt = calc_withdrawal_receipt(1, pool)
        assert receipt.lamports_received == 0
        assert receipt.droplets_unstaked == 1

    def test_zero_supply_yields_zero(self):
        pool = make_stake_pool(total_lamports=1_000, pool_token_supply=0)
        assert calc_withdrawal_receipt(1000, pool).lamports_received == 0

    @pytest.mark.parametrize("numerator,denominator", [(0, 1), (1, 1000), (3, 100), (1, 2), (99, 100)])
    @pytest.mark.parametrize("amount", [0, 1, 7, 1_000, 999_983, 10 ** 12])
    def test_fee_never_increases_payout(self, numerator, denominator, amount):
        pool = make_stake_pool(
            total_lamports=1_234_567_890,
            pool_token_supply=1_000_000_000,
            withdrawal_fee=fee(numerator, denominator),
        )
        receipt = calc_withdrawal_receipt(amount, pool)
        fee_free_upper_bound = -(-amount * 1_234_567_890 // 1_000_000_000)
        assert receipt.lamports_received <= fee_free_upper_bound


class TestWithdrawalEstimate:
    """est_droplets_unstaked_by_withdrawal is approximate."""

    def test_one_to_one(self, one_to_one_pool):
        assert est_droplets_unstaked_by_withdrawal(500, one_to_one_pool) == 500

    def test_inflates_for_fee(self):
        pool = make_stake_pool(withdrawal_fee=fee(1, 100))
        # 990 * 100 / 99
        assert est_droplets_unstaked_by_withdrawal(990, pool) == 1000

    def test_estimate_never_pays_more_than_asked(self, large_pool):
        for lamports in (1, 10, 12_345, 10 ** 9, 987_654_321_012):
            droplets = est_droplets_unstaked_by_withdrawal(lamports, large_pool)
            assert calc_withdrawal_receipt(droplets, large_pool).lamports_received <= lamports

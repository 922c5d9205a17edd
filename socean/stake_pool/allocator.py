"""
Validator Withdrawal Allocator
==============================
Splits "withdraw D droplets" across the pool's validator stake accounts.

Rules:
- No validators: the whole amount comes out of the reserve stake account.
- Lightest validators (active + transient) are drained first.
- A validator with active stake is drawn from its main stake account, keeping
  MIN_ACTIVE_STAKE_LAMPORTS behind so the staker can still remove it.
- A validator with no active stake is drawn from its transient stake account,
  keeping rent exemption plus the same minimum behind.
- Anything left after one pass over the validators is an error, never a
  partial split.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from socean.config.settings import Settings
from socean.errors import WithdrawalUnserviceableError
from socean.shared.system.logging import Logger
from socean.stake_pool.fees import calc_withdrawal_receipt, est_droplets_unstaked_by_withdrawal
from socean.stake_pool.numberu64 import Numberu64
from socean.stake_pool.pda import find_transient_stake_account, find_validator_stake_account
from socean.stake_pool.receipts import (
    ValidatorStakeAvailableToWithdraw,
    ValidatorWithdrawalReceipt,
    WithdrawalReceipt,
)
from socean.stake_pool.schema import StakePool, StakePoolAccount, ValidatorList, ValidatorStakeInfo

# Droplet estimate bumps tried before the inverse allocator gives up on a draw
MAX_INVERSE_NUDGES = 64


def stake_available_to_withdraw(
    validator: ValidatorStakeInfo,
    stake_pool_account: StakePoolAccount,
    min_active_stake_lamports: Optional[int] = None,
    rent_exempt_lamports: Optional[int] = None,
) -> ValidatorStakeAvailableToWithdraw:
    """
    Lamports that can be taken from a validator right now, and from which account.

    Active stake always wins over transient stake for the same validator.
    """
    if min_active_stake_lamports is None:
        min_active_stake_lamports = Settings.MIN_ACTIVE_STAKE_LAMPORTS
    if rent_exempt_lamports is None:
        rent_exempt_lamports = Settings.STAKE_ACCOUNT_RENT_EXEMPT_LAMPORTS

    program_id = stake_pool_account.owner
    pool = stake_pool_account.pubkey
    vote = validator.vote_account_address

    if validator.active_stake_lamports > 0:
        return ValidatorStakeAvailableToWithdraw(
            lamports=validator.active_stake_lamports.sat_sub(min_active_stake_lamports),
            stake_account=find_validator_stake_account(program_id, pool, vote),
        )
    return ValidatorStakeAvailableToWithdraw(
        lamports=validator.transient_stake_lamports.sat_sub(rent_exempt_lamports + min_active_stake_lamports),
        stake_account=find_transient_stake_account(program_id, pool, vote),
    )


def sorted_validators(validators: Iterable[ValidatorStakeInfo]) -> List[ValidatorStakeInfo]:
    """Ascending by total stake. Ties keep validator list order."""
    return sorted(validators, key=lambda v: v.total_stake)


def calc_withdrawals(
    droplets: int,
    stake_pool_account: StakePoolAccount,
    validator_list: ValidatorList,
    min_active_stake_lamports: Optional[int] = None,
) -> List[ValidatorWithdrawalReceipt]:
    """
    Plan a withdrawal of `droplets` across the pool's stake accounts.

    Args:
        droplets: Total pool tokens to unstake
        stake_pool_account: Pool snapshot (owner is the stake pool program)
        validator_list: Validator list snapshot from the same read
        min_active_stake_lamports: Override of Settings.MIN_ACTIVE_STAKE_LAMPORTS

    Returns:
        One receipt per non-zero draw. The droplets_unstaked sum to `droplets`.

    Raises:
        WithdrawalUnserviceableError: rounding or eligibility rules prevent an exact split
    """
    stake_pool = stake_pool_account.data
    requested = Numberu64(droplets)

    if not validator_list.validators:
        Logger.debug(f"[ALLOCATOR] No validators, withdrawing {requested} droplets from reserve")
        return [
            ValidatorWithdrawalReceipt(
                stake_account=stake_pool.reserve_stake,
                withdrawal_receipt=calc_withdrawal_receipt(requested, stake_pool),
            )
        ]

    receipts: List[ValidatorWithdrawalReceipt] = []
    remaining = requested

    for validator in sorted_validators(validator_list.validators):
        if remaining == 0:
            break

        available = stake_available_to_withdraw(validator, stake_pool_account, min_active_stake_lamports)
        if available.lamports == 0:
            continue

        serviceable = est_droplets_unstaked_by_withdrawal(available.lamports, stake_pool)
        to_unstake = min(remaining, serviceable)
        if to_unstake == 0:
            continue

        receipt = calc_withdrawal_receipt(to_unstake, stake_pool)
        if receipt.lamports_received > available.lamports:
            reason = (
                f"Withdrawal of {to_unstake} droplets from {available.stake_account} would take "
                f"{receipt.lamports_received} lamports, only {available.lamports} available"
            )
            Logger.warning(f"[ALLOCATOR] {reason}")
            raise WithdrawalUnserviceableError(reason)

        receipts.append(ValidatorWithdrawalReceipt(stake_account=available.stake_account, withdrawal_receipt=receipt))
        remaining = remaining - to_unstake

    if remaining > 0:
        reason = (
            f"{remaining} of {requested} droplets could not be serviced, "
            "too many transient accounts, retry next epoch"
        )
        Logger.warning(f"[ALLOCATOR] {reason}")
        raise WithdrawalUnserviceableError(reason)

    Logger.debug(f"[ALLOCATOR] {requested} droplets split across {len(receipts)} stake account(s)")
    return receipts


def _droplets_covering_lamports(lamports: int, stake_pool: StakePool) -> WithdrawalReceipt:
    """
    Smallest receipt found (by nudging the estimate upwards) paying at least `lamports`.

    Returns the last receipt tried; it may still fall short if the bound is hit.
    """
    droplets = est_droplets_unstaked_by_withdrawal(lamports, stake_pool)
    receipt = calc_withdrawal_receipt(droplets, stake_pool)
    for _ in range(MAX_INVERSE_NUDGES):
        if receipt.lamports_received >= lamports:
            break
        shortfall = lamports - int(receipt.lamports_received)
        droplets = droplets + max(1, int(est_droplets_unstaked_by_withdrawal(shortfall, stake_pool)))
        receipt = calc_withdrawal_receipt(droplets, stake_pool)
    return receipt


def calc_withdrawals_inverse(
    lamports: int,
    stake_pool_account: StakePoolAccount,
    validator_list: ValidatorList,
    min_active_stake_lamports: Optional[int] = None,
) -> List[ValidatorWithdrawalReceipt]:
    """
    Plan a withdrawal that pays out at least `lamports`. Best effort only.

    Allocates in lamport space, then finds droplets per draw whose receipt
    covers the lamports taken. Rounding always costs the withdrawer, so the
    plan burns at least as many droplets as a forward plan for the same payout.
    Check the result with total_withdraw_lamports before relying on it.

    Raises:
        WithdrawalUnserviceableError: a draw cannot be covered or stake runs out
    """
    stake_pool = stake_pool_account.data
    requested = Numberu64(lamports)

    if not validator_list.validators:
        return [
            ValidatorWithdrawalReceipt(
                stake_account=stake_pool.reserve_stake,
                withdrawal_receipt=_droplets_covering_lamports(requested, stake_pool),
            )
        ]

    receipts: List[ValidatorWithdrawalReceipt] = []
    remaining = requested

    for validator in sorted_validators(validator_list.validators):
        if remaining == 0:
            break

        available = stake_available_to_withdraw(validator, stake_pool_account, min_active_stake_lamports)
        to_take = min(remaining, available.lamports)
        if to_take == 0:
            continue

        receipt = _droplets_covering_lamports(to_take, stake_pool)
        if receipt.lamports_received > available.lamports:
            # Overshot a nearly drained account, settle for what it holds
            receipt = calc_withdrawal_receipt(
                est_droplets_unstaked_by_withdrawal(available.lamports, stake_pool),
                stake_pool,
            )
        if receipt.droplets_unstaked == 0:
            continue

        receipts.append(ValidatorWithdrawalReceipt(stake_account=available.stake_account, withdrawal_receipt=receipt))
        remaining = remaining.sat_sub(receipt.lamports_received)

    if remaining > 0:
        reason = (
            f"{remaining} of {requested} lamports could not be serviced, "
            "too many transient accounts, retry next epoch"
        )
        Logger.warning(f"[ALLOCATOR] {reason}")
        raise WithdrawalUnserviceableError(reason)

    return receipts


# ═══════════════════════════════════════════════════════════════════════════════
# TOTALS
# ═══════════════════════════════════════════════════════════════════════════════

def total_withdraw_lamports(receipts: Iterable[ValidatorWithdrawalReceipt]) -> Numberu64:
    return sum((r.withdrawal_receipt.lamports_received for r in receipts), Numberu64(0))


def total_unstaked_droplets(receipts: Iterable[ValidatorWithdrawalReceipt]) -> Numberu64:
    return sum((r.withdrawal_receipt.droplets_unstaked for r in receipts), Numberu64(0))


def total_withdrawal_fees_droplets(receipts: Iterable[ValidatorWithdrawalReceipt]) -> Numberu64:
    return sum((r.withdrawal_receipt.droplets_fee_paid for r in receipts), Numberu64(0))

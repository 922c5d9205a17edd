"""
Fee Accounting
==============
Integer-only deposit / withdrawal math, in the same order of operations as
the stake pool program so predictions match the ledger exactly.

Products are formed at full width (the program widens to u128) and only the
final values are narrowed back to Numberu64.

All functions are pure over the supplied StakePool snapshot.
"""

from __future__ import annotations

from socean.stake_pool.numberu64 import Numberu64, ceil_div
from socean.stake_pool.receipts import DepositReceipt, WithdrawalReceipt
from socean.stake_pool.schema import Fee, StakePool


def _has_price(stake_pool: StakePool) -> bool:
    return stake_pool.total_lamports != 0 and stake_pool.pool_token_supply != 0


def calc_pool_tokens_for_deposit(lamports: int, stake_pool: StakePool) -> Numberu64:
    """Droplets minted for `lamports`, before fees. An empty pool prices 1:1."""
    if not _has_price(stake_pool):
        return Numberu64(lamports)
    return Numberu64(int(lamports) * int(stake_pool.pool_token_supply) // int(stake_pool.total_lamports))


def apply_fee(fee: Fee, amount: int) -> Numberu64:
    """floor(amount * numerator / denominator), zero for a zero fee."""
    if fee.is_zero:
        return Numberu64(0)
    return Numberu64(int(fee.numerator) * int(amount) // int(fee.denominator))


def calc_deposit(
    lamports_to_stake: int,
    stake_pool: StakePool,
    deposit_fee: Fee,
    referral_fee_percent: int,
) -> DepositReceipt:
    """
    Receipt for depositing `lamports_to_stake`.

    Args:
        lamports_to_stake: Lamports being deposited
        stake_pool: Pool snapshot
        deposit_fee: sol_deposit_fee or stake_deposit_fee
        referral_fee_percent: 0-100, share of the fee paid to the referrer

    Returns:
        DepositReceipt, referral_fee_paid is always a part of droplets_fee_paid
    """
    lamports = Numberu64(lamports_to_stake)
    minted = calc_pool_tokens_for_deposit(lamports, stake_pool)
    fee_paid = apply_fee(deposit_fee, minted)
    referral_fee_paid = Numberu64(int(fee_paid) * int(referral_fee_percent) // 100)
    return DepositReceipt(
        lamports_staked=lamports,
        droplets_received=minted - fee_paid,
        droplets_fee_paid=fee_paid,
        referral_fee_paid=referral_fee_paid,
    )


def calc_sol_deposit(lamports_to_stake: int, stake_pool: StakePool) -> DepositReceipt:
    """Receipt for a DepositSol."""
    return calc_deposit(lamports_to_stake, stake_pool, stake_pool.sol_deposit_fee, stake_pool.sol_referral_fee)


def calc_stake_deposit(stake_lamports: int, stake_pool: StakePool) -> DepositReceipt:
    """Receipt for depositing an already-delegated stake account worth `stake_lamports`."""
    return calc_deposit(stake_lamports, stake_pool, stake_pool.stake_deposit_fee, stake_pool.stake_referral_fee)


def calc_sol_deposit_inverse(droplets_to_receive: int, stake_pool: StakePool) -> Numberu64:
    """
    Lamports to deposit so that at least `droplets_to_receive` come back.

    Best effort: rounds every step up, so the result may overshoot by a few
    lamports. Check the answer with calc_sol_deposit.
    """
    fee = stake_pool.sol_deposit_fee
    minted = int(droplets_to_receive)
    if not fee.is_zero:
        minted = int(ceil_div(minted * int(fee.denominator), int(fee.denominator) - int(fee.numerator)))
    if not _has_price(stake_pool):
        return Numberu64(minted)
    return ceil_div(minted * int(stake_pool.total_lamports), stake_pool.pool_token_supply)


def calc_withdrawal_receipt(droplets_to_unstake: int, stake_pool: StakePool) -> WithdrawalReceipt:
    """
    Authoritative receipt for unstaking `droplets_to_unstake` from one stake account.

    Lamports are rounded up like the program does. A withdrawal too small to be
    worth a single lamport yields zero lamports; that is a valid result.
    """
    droplets = Numberu64(droplets_to_unstake)
    fee_paid = apply_fee(stake_pool.withdrawal_fee, droplets)
    burnt = droplets - fee_paid

    numerator = int(burnt) * int(stake_pool.total_lamports)
    supply = int(stake_pool.pool_token_supply)
    if supply == 0 or numerator < supply:
        lamports = Numberu64(0)
    else:
        lamports = ceil_div(numerator, supply)

    return WithdrawalReceipt(
        droplets_unstaked=droplets,
        lamports_received=lamports,
        droplets_fee_paid=fee_paid,
    )


def est_droplets_unstaked_by_withdrawal(lamports_to_receive: int, stake_pool: StakePool) -> Numberu64:
    """
    Approximate droplets to burn to get `lamports_to_receive` back.

    Loses precision to integer truncation, especially for small amounts.
    Never use it as a receipt; calc_withdrawal_receipt is authoritative.
    """
    if _has_price(stake_pool):
        droplets = int(lamports_to_receive) * int(stake_pool.pool_token_supply) // int(stake_pool.total_lamports)
    else:
        droplets = int(lamports_to_receive)

    fee = stake_pool.withdrawal_fee
    if not fee.is_zero and fee.numerator < fee.denominator:
        droplets = droplets * int(fee.denominator) // (int(fee.denominator) - int(fee.numerator))
    return Numberu64(droplets)

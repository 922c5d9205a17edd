"""
Stake pool accounting: u64 math, fees, withdrawal allocation, account
decoding and instruction building.
"""

from socean.stake_pool.numberu64 import Numberu64, U64_MAX, ceil_div
from socean.stake_pool.receipts import (
    DepositReceipt,
    WithdrawalReceipt,
    ValidatorWithdrawalReceipt,
    ValidatorAllStakeAccounts,
    ValidatorStakeAvailableToWithdraw,
)
from socean.stake_pool.schema import (
    AccountType,
    StakeStatus,
    Fee,
    Lockup,
    StakePool,
    ValidatorStakeInfo,
    ValidatorList,
    StakePoolAccount,
    ValidatorListAccount,
    decode_stake_pool,
    decode_validator_list,
    decode_stake_account_voter,
)
from socean.stake_pool.fees import (
    calc_deposit,
    calc_sol_deposit,
    calc_stake_deposit,
    calc_sol_deposit_inverse,
    calc_withdrawal_receipt,
    est_droplets_unstaked_by_withdrawal,
)
from socean.stake_pool.allocator import (
    stake_available_to_withdraw,
    sorted_validators,
    calc_withdrawals,
    calc_withdrawals_inverse,
    total_withdraw_lamports,
    total_unstaked_droplets,
    total_withdrawal_fees_droplets,
)

__all__ = [
    "Numberu64",
    "U64_MAX",
    "ceil_div",
    "DepositReceipt",
    "WithdrawalReceipt",
    "ValidatorWithdrawalReceipt",
    "ValidatorAllStakeAccounts",
    "ValidatorStakeAvailableToWithdraw",
    "AccountType",
    "StakeStatus",
    "Fee",
    "Lockup",
    "StakePool",
    "ValidatorStakeInfo",
    "ValidatorList",
    "StakePoolAccount",
    "ValidatorListAccount",
    "decode_stake_pool",
    "decode_validator_list",
    "decode_stake_account_voter",
    "calc_deposit",
    "calc_sol_deposit",
    "calc_stake_deposit",
    "calc_sol_deposit_inverse",
    "calc_withdrawal_receipt",
    "est_droplets_unstaked_by_withdrawal",
    "stake_available_to_withdraw",
    "sorted_validators",
    "calc_withdrawals",
    "calc_withdrawals_inverse",
    "total_withdraw_lamports",
    "total_unstaked_droplets",
    "total_withdrawal_fees_droplets",
]

"""
Socean stake pool SDK.

Predicts deposit / withdrawal outcomes off-chain, splits withdrawals across
the pool's validators and runs the resulting staged transactions.
"""

__version__ = "0.1.0"

from socean.client import Socean
from socean.config import Settings, SoceanConfig
from socean.errors import (
    SoceanError,
    Numberu64Error,
    RpcError,
    TransactionRejectedError,
    AccountDoesNotExistError,
    WithdrawalUnserviceableError,
    WalletPublicKeyUnavailableError,
    StakeAccountToDepositInvalidError,
    StakeAccountNotRentExemptError,
    TransactionSequenceError,
)
from socean.execution import (
    TransactionWithSigners,
    TransactionSequence,
    TransactionSequenceSignatures,
    WalletAdapter,
    KeypairWallet,
    TransactionSequenceBuilder,
    WithdrawStakePlan,
    ExecutorConfig,
    TransactionSequenceExecutor,
    sign_and_send_transaction_sequence,
)
from socean.stake_pool import (
    Numberu64,
    StakePool,
    ValidatorList,
    StakePoolAccount,
    ValidatorListAccount,
    DepositReceipt,
    WithdrawalReceipt,
    ValidatorWithdrawalReceipt,
    calc_sol_deposit,
    calc_stake_deposit,
    calc_withdrawal_receipt,
    calc_withdrawals,
    calc_withdrawals_inverse,
)

__all__ = [
    "Socean",
    "Settings",
    "SoceanConfig",
    "SoceanError",
    "Numberu64Error",
    "RpcError",
    "TransactionRejectedError",
    "AccountDoesNotExistError",
    "WithdrawalUnserviceableError",
    "WalletPublicKeyUnavailableError",
    "StakeAccountToDepositInvalidError",
    "StakeAccountNotRentExemptError",
    "TransactionSequenceError",
    "TransactionWithSigners",
    "TransactionSequence",
    "TransactionSequenceSignatures",
    "WalletAdapter",
    "KeypairWallet",
    "TransactionSequenceBuilder",
    "WithdrawStakePlan",
    "ExecutorConfig",
    "TransactionSequenceExecutor",
    "sign_and_send_transaction_sequence",
    "Numberu64",
    "StakePool",
    "ValidatorList",
    "StakePoolAccount",
    "ValidatorListAccount",
    "DepositReceipt",
    "WithdrawalReceipt",
    "ValidatorWithdrawalReceipt",
    "calc_sol_deposit",
    "calc_stake_deposit",
    "calc_withdrawal_receipt",
    "calc_withdrawals",
    "calc_withdrawals_inverse",
]

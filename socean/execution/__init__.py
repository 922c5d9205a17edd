from socean.execution.transactions import (
    TransactionWithSigners,
    TransactionSequence,
    TransactionSequenceSignatures,
    WalletAdapter,
    KeypairWallet,
)
from socean.execution.sequence_builder import TransactionSequenceBuilder, WithdrawStakePlan
from socean.execution.sequence_executor import (
    ExecutorConfig,
    TransactionSequenceExecutor,
    sign_and_send_transaction_sequence,
)

__all__ = [
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
]

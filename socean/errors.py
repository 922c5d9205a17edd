"""
SDK Errors
==========
Every failure the SDK raises derives from SoceanError so callers can tell
"the ledger said no" (RpcError, TransactionSequenceError) apart from a local
computation refusing a request (WithdrawalUnserviceableError, Numberu64Error).

Nothing here is retried automatically: resubmitting a stale plan could spend
against what the wallet owner intended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from solders.pubkey import Pubkey


class SoceanError(Exception):
    """Base class for all SDK errors."""


class Numberu64Error(SoceanError, OverflowError):
    """A u64 operation left the range [0, 2^64 - 1] or divided by zero."""


class RpcError(SoceanError):
    """Wrapper around a failed ledger read or write."""

    def __init__(self, cause: BaseException, method: str = ""):
        self.cause = cause
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}{cause}")

    def __reduce__(self):
        return self.__class__, (self.cause, self.method)


class TransactionRejectedError(RpcError):
    """A submitted transaction landed with an error or never confirmed."""

    def __init__(self, signature: str, err: object):
        self.signature = signature
        self.err = err
        super().__init__(RuntimeError(f"Transaction {signature} failed: {err}"), "confirm_transaction")

    def __reduce__(self):
        return self.__class__, (self.signature, self.err)


class AccountDoesNotExistError(SoceanError):
    """Given account does not exist."""

    def __init__(self, account: Pubkey):
        self.account = account
        super().__init__(f"Account {account} does not exist")


class WithdrawalUnserviceableError(SoceanError):
    """The withdrawal cannot be split across the pool's stake accounts right now."""

    def __init__(self, reason: str = "Could not determine withdrawal procedure"):
        self.reason = reason
        super().__init__(reason)


class WalletPublicKeyUnavailableError(SoceanError):
    """Wallet adapter does not have a readable public key."""

    def __init__(self):
        super().__init__("Wallet adapter public key not available")


class StakeAccountToDepositInvalidError(SoceanError):
    """The stake account is not delegated to one of the pool's validators."""

    def __init__(self, stake_account: Pubkey, reason: str):
        self.stake_account = stake_account
        self.reason = reason
        super().__init__(f"Stake account {stake_account} cannot be deposited: {reason}")


class StakeAccountNotRentExemptError(SoceanError):
    """The stake account's balance is below the rent-exempt minimum."""

    def __init__(self, stake_account: Pubkey, lamports: int, rent_exempt_lamports: int):
        self.stake_account = stake_account
        self.lamports = lamports
        self.rent_exempt_lamports = rent_exempt_lamports
        super().__init__(
            f"Stake account {stake_account} holds {lamports} lamports, "
            f"needs at least {rent_exempt_lamports} to be rent exempt"
        )


@dataclass(eq=False)
class TransactionSequenceError(SoceanError):
    """
    Raised when a stage of a transaction sequence fails.

    Stages before `failed_stage` are fully confirmed and stay in effect; there is
    no rollback on the ledger. `completed` holds, per stage, the signatures of the
    transactions that did confirm (including the successes inside the failed stage).
    `failures` holds every error raised inside the failed stage, `cause` first.
    """

    failed_stage: int
    total_stages: int
    cause: Optional[BaseException] = None
    completed: List[List[str]] = field(default_factory=list)
    failures: List[BaseException] = field(default_factory=list)

    def __post_init__(self):
        super().__init__(str(self))
        if self.cause is not None and not self.failures:
            self.failures = [self.cause]

    def __reduce__(self):
        return self.__class__, (self.failed_stage, self.total_stages, self.cause, self.completed, self.failures)

    def __str__(self) -> str:
        confirmed = sum(len(stage) for stage in self.completed)
        return (
            f"Transaction sequence halted at stage {self.failed_stage + 1}/{self.total_stages} "
            f"({confirmed} transaction(s) confirmed): {self.cause}"
        )

    @property
    def signatures(self) -> List[str]:
        """Flat list of every confirmed signature, in submission order."""
        return [sig for stage in self.completed for sig in stage]

from dataclasses import dataclass

from solders.pubkey import Pubkey

from socean.stake_pool.numberu64 import Numberu64


@dataclass(frozen=True)
class DepositReceipt:
    """Breakdown of a single deposit into the stake pool."""

    lamports_staked: Numberu64
    # Droplets the depositor receives, deposit fee already deducted
    droplets_received: Numberu64
    # Total deposit fee in droplets, including referral_fee_paid
    droplets_fee_paid: Numberu64
    # Portion of droplets_fee_paid routed to the referrer
    referral_fee_paid: Numberu64

    @property
    def manager_fee_paid(self) -> Numberu64:
        return self.droplets_fee_paid - self.referral_fee_paid


@dataclass(frozen=True)
class WithdrawalReceipt:
    """Breakdown of a single withdrawal from a single stake account."""

    droplets_unstaked: Numberu64
    # Lamports received, withdrawal fee already deducted
    lamports_received: Numberu64
    droplets_fee_paid: Numberu64


@dataclass(frozen=True)
class ValidatorWithdrawalReceipt:
    """
    A withdrawal receipt plus the stake account to withdraw it from.

    stake_account may be a validator stake account, a transient stake
    account, or the pool's reserve stake account.
    """

    stake_account: Pubkey
    withdrawal_receipt: WithdrawalReceipt


@dataclass(frozen=True)
class ValidatorAllStakeAccounts:
    main: Pubkey
    transient: Pubkey


@dataclass(frozen=True)
class ValidatorStakeAvailableToWithdraw:
    lamports: Numberu64
    # Main or transient stake account, whichever must be drawn from
    stake_account: Pubkey

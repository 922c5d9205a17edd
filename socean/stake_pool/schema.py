"""
Stake Pool Account Schema
=========================
Decoded representations of the on-chain StakePool and ValidatorList accounts,
plus the typed Borsh readers that produce them.

Each record type has exactly one decode function; there is no shared schema
registry. Addresses are read as raw 32-byte values, which is already the order
Pubkey expects.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, List, Optional, TypeVar

from solders.pubkey import Pubkey

from socean.stake_pool.numberu64 import Numberu64

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class AccountType(IntEnum):
    UNINITIALIZED = 0
    STAKE_POOL = 1
    VALIDATOR_LIST = 2


class StakeStatus(IntEnum):
    ACTIVE = 0
    DEACTIVATING_TRANSIENT = 1
    READY_FOR_REMOVAL = 2


# ═══════════════════════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Fee:
    """Fee as a rational numerator / denominator."""

    denominator: Numberu64
    numerator: Numberu64

    @property
    def is_zero(self) -> bool:
        return self.numerator == 0 or self.denominator == 0

    def __str__(self) -> str:
        if self.is_zero:
            return "0%"
        return f"{self.numerator}/{self.denominator} ({100 * self.numerator / self.denominator:.4g}%)"


@dataclass(frozen=True)
class Lockup:
    unix_timestamp: int
    epoch: Numberu64
    custodian: Pubkey


@dataclass(frozen=True)
class StakePool:
    """Aggregate pool state, valid as of `last_update_epoch`."""

    account_type: AccountType
    manager: Pubkey
    staker: Pubkey
    stake_deposit_authority: Pubkey
    stake_withdraw_bump_seed: int
    validator_list: Pubkey
    reserve_stake: Pubkey
    pool_mint: Pubkey
    manager_fee_account: Pubkey
    token_program_id: Pubkey
    total_lamports: Numberu64
    pool_token_supply: Numberu64
    last_update_epoch: Numberu64
    lockup: Lockup
    epoch_fee: Fee
    next_epoch_fee: Optional[Fee]
    preferred_deposit_validator_vote_address: Optional[Pubkey]
    preferred_withdraw_validator_vote_address: Optional[Pubkey]
    stake_deposit_fee: Fee
    withdrawal_fee: Fee
    next_withdrawal_fee: Optional[Fee]
    stake_referral_fee: int
    sol_deposit_authority: Optional[Pubkey]
    sol_deposit_fee: Fee
    sol_referral_fee: int

    def is_stale(self, current_epoch: int) -> bool:
        """Totals are only valid for the epoch they were last refreshed in."""
        return self.last_update_epoch < current_epoch


@dataclass(frozen=True)
class ValidatorStakeInfo:
    active_stake_lamports: Numberu64
    transient_stake_lamports: Numberu64
    last_update_epoch: Numberu64
    transient_seed_suffix_start: Numberu64
    transient_seed_suffix_end: Numberu64
    status: StakeStatus
    vote_account_address: Pubkey

    @property
    def total_stake(self) -> Numberu64:
        return self.active_stake_lamports + self.transient_stake_lamports

    def is_stale(self, current_epoch: int) -> bool:
        return self.last_update_epoch < current_epoch


@dataclass(frozen=True)
class ValidatorList:
    account_type: AccountType
    max_validators: int
    validators: List[ValidatorStakeInfo] = field(default_factory=list)


@dataclass(frozen=True)
class StakePoolAccount:
    """A decoded StakePool plus its account metadata. `owner` is the program id."""

    pubkey: Pubkey
    data: StakePool
    lamports: int
    owner: Pubkey
    executable: bool = False


@dataclass(frozen=True)
class ValidatorListAccount:
    pubkey: Pubkey
    data: ValidatorList
    lamports: int
    owner: Pubkey
    executable: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# BORSH READER
# ═══════════════════════════════════════════════════════════════════════════════

class BorshReader:
    """Little-endian cursor over raw account bytes."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = bytes(data)
        self.offset = offset

    def _unpack(self, fmt: str):
        try:
            value = struct.unpack_from(fmt, self.data, self.offset)[0]
        except struct.error as e:
            raise ValueError(f"Account data truncated at offset {self.offset}: {e}") from e
        self.offset += struct.calcsize(fmt)
        return value

    def u8(self) -> int:
        return self._unpack("<B")

    def u32(self) -> int:
        return self._unpack("<I")

    def i64(self) -> int:
        return self._unpack("<q")

    def u64(self) -> Numberu64:
        return Numberu64(self._unpack("<Q"))

    def pubkey(self) -> Pubkey:
        end = self.offset + 32
        if end > len(self.data):
            raise ValueError(f"Account data truncated at offset {self.offset}: need 32 bytes for pubkey")
        key = Pubkey.from_bytes(self.data[self.offset:end])
        self.offset = end
        return key

    def option(self, read: Callable[[], T]) -> Optional[T]:
        tag = self.u8()
        if tag == 0:
            return None
        if tag != 1:
            raise ValueError(f"Invalid option tag {tag} at offset {self.offset - 1}")
        return read()

    def vec(self, read: Callable[[], T]) -> List[T]:
        return [read() for _ in range(self.u32())]


def _read_fee(reader: BorshReader) -> Fee:
    # Field order on chain is denominator first
    denominator = reader.u64()
    numerator = reader.u64()
    return Fee(denominator=denominator, numerator=numerator)


def _read_lockup(reader: BorshReader) -> Lockup:
    return Lockup(
        unix_timestamp=reader.i64(),
        epoch=reader.u64(),
        custodian=reader.pubkey(),
    )


def _read_validator_stake_info(reader: BorshReader) -> ValidatorStakeInfo:
    return ValidatorStakeInfo(
        active_stake_lamports=reader.u64(),
        transient_stake_lamports=reader.u64(),
        last_update_epoch=reader.u64(),
        transient_seed_suffix_start=reader.u64(),
        transient_seed_suffix_end=reader.u64(),
        status=StakeStatus(reader.u8()),
        vote_account_address=reader.pubkey(),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# DECODERS
# ═══════════════════════════════════════════════════════════════════════════════

def decode_stake_pool(data: bytes) -> StakePool:
    """Decode raw StakePool account data."""
    r = BorshReader(data)
    account_type = AccountType(r.u8())
    if account_type != AccountType.STAKE_POOL:
        raise ValueError(f"Expected a StakePool account, got {account_type.name}")
    return StakePool(
        account_type=account_type,
        manager=r.pubkey(),
        staker=r.pubkey(),
        stake_deposit_authority=r.pubkey(),
        stake_withdraw_bump_seed=r.u8(),
        validator_list=r.pubkey(),
        reserve_stake=r.pubkey(),
        pool_mint=r.pubkey(),
        manager_fee_account=r.pubkey(),
        token_program_id=r.pubkey(),
        total_lamports=r.u64(),
        pool_token_supply=r.u64(),
        last_update_epoch=r.u64(),
        lockup=_read_lockup(r),
        epoch_fee=_read_fee(r),
        next_epoch_fee=r.option(lambda: _read_fee(r)),
        preferred_deposit_validator_vote_address=r.option(r.pubkey),
        preferred_withdraw_validator_vote_address=r.option(r.pubkey),
        stake_deposit_fee=_read_fee(r),
        withdrawal_fee=_read_fee(r),
        next_withdrawal_fee=r.option(lambda: _read_fee(r)),
        stake_referral_fee=r.u8(),
        sol_deposit_authority=r.option(r.pubkey),
        sol_deposit_fee=_read_fee(r),
        sol_referral_fee=r.u8(),
    )


def decode_validator_list(data: bytes) -> ValidatorList:
    """Decode raw ValidatorList account data (trailing unused capacity is ignored)."""
    r = BorshReader(data)
    account_type = AccountType(r.u8())
    if account_type != AccountType.VALIDATOR_LIST:
        raise ValueError(f"Expected a ValidatorList account, got {account_type.name}")
    max_validators = r.u32()
    validators = r.vec(lambda: _read_validator_stake_info(r))
    return ValidatorList(
        account_type=account_type,
        max_validators=max_validators,
        validators=validators,
    )


# StakeState::Stake layout: u32 tag, Meta (rent reserve u64, staker, withdrawer,
# Lockup), then Delegation starting with the voter pubkey.
STAKE_STATE_STAKE_TAG = 2
_DELEGATION_VOTER_OFFSET = 4 + 8 + 32 + 32 + 8 + 8 + 32


def decode_stake_account_voter(data: bytes) -> Optional[Pubkey]:
    """Vote account a stake account is delegated to, or None if not delegated."""
    r = BorshReader(data)
    if r.u32() != STAKE_STATE_STAKE_TAG:
        return None
    r.offset = _DELEGATION_VOTER_OFFSET
    return r.pubkey()

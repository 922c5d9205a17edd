"""
Mock Stake Pool State
=====================
Factories for pool / validator snapshots and their raw account encodings.
"""

import struct
from typing import List, Optional

from solders.pubkey import Pubkey

from socean.config.cluster import STAKE_POOL_PROGRAM_ID
from socean.stake_pool.numberu64 import Numberu64
from socean.stake_pool.schema import (
    AccountType,
    Fee,
    Lockup,
    StakePool,
    StakePoolAccount,
    StakeStatus,
    ValidatorList,
    ValidatorListAccount,
    ValidatorStakeInfo,
)

PROGRAM_ID = Pubkey.from_string(STAKE_POOL_PROGRAM_ID)
POOL_ADDRESS = Pubkey.from_string("5oc4nDMhYqP8dB5DW8DHtoLJpcasB19Tacu3GWAMbQAC")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")

ZERO_FEE = Fee(denominator=Numberu64(0), numerator=Numberu64(0))


def fee(numerator: int, denominator: int) -> Fee:
    return Fee(denominator=Numberu64(denominator), numerator=Numberu64(numerator))


def make_stake_pool(
    total_lamports: int = 1_000_000,
    pool_token_supply: int = 1_000_000,
    last_update_epoch: int = 100,
    sol_deposit_fee: Fee = ZERO_FEE,
    stake_deposit_fee: Fee = ZERO_FEE,
    withdrawal_fee: Fee = ZERO_FEE,
    sol_referral_fee: int = 0,
    stake_referral_fee: int = 0,
    reserve_stake: Optional[Pubkey] = None,
    sol_deposit_authority: Optional[Pubkey] = None,
) -> StakePool:
    """StakePool with fixed, distinct addresses. Defaults: 1:1 price, no fees."""
    return StakePool(
        account_type=AccountType.STAKE_POOL,
        manager=Pubkey.new_unique(),
        staker=Pubkey.new_unique(),
        stake_deposit_authority=Pubkey.new_unique(),
        stake_withdraw_bump_seed=255,
        validator_list=Pubkey.new_unique(),
        reserve_stake=reserve_stake or Pubkey.new_unique(),
        pool_mint=Pubkey.new_unique(),
        manager_fee_account=Pubkey.new_unique(),
        token_program_id=TOKEN_PROGRAM_ID,
        total_lamports=Numberu64(total_lamports),
        pool_token_supply=Numberu64(pool_token_supply),
        last_update_epoch=Numberu64(last_update_epoch),
        lockup=Lockup(unix_timestamp=0, epoch=Numberu64(0), custodian=Pubkey.default()),
        epoch_fee=ZERO_FEE,
        next_epoch_fee=None,
        preferred_deposit_validator_vote_address=None,
        preferred_withdraw_validator_vote_address=None,
        stake_deposit_fee=stake_deposit_fee,
        withdrawal_fee=withdrawal_fee,
        next_withdrawal_fee=None,
        stake_referral_fee=stake_referral_fee,
        sol_deposit_authority=sol_deposit_authority,
        sol_deposit_fee=sol_deposit_fee,
        sol_referral_fee=sol_referral_fee,
    )


def make_validator(
    active: int,
    transient: int = 0,
    last_update_epoch: int = 100,
    vote: Optional[Pubkey] = None,
) -> ValidatorStakeInfo:
    return ValidatorStakeInfo(
        active_stake_lamports=Numberu64(active),
        transient_stake_lamports=Numberu64(transient),
        last_update_epoch=Numberu64(last_update_epoch),
        transient_seed_suffix_start=Numberu64(0),
        transient_seed_suffix_end=Numberu64(0),
        status=StakeStatus.ACTIVE,
        vote_account_address=vote or Pubkey.new_unique(),
    )


def make_pool_account(stake_pool: StakePool, pubkey: Pubkey = POOL_ADDRESS) -> StakePoolAccount:
    return StakePoolAccount(pubkey=pubkey, data=stake_pool, lamports=5_000_000, owner=PROGRAM_ID)


def make_validator_list_account(
    validators: List[ValidatorStakeInfo],
    pubkey: Optional[Pubkey] = None,
) -> ValidatorListAccount:
    return ValidatorListAccount(
        pubkey=pubkey or Pubkey.new_unique(),
        data=ValidatorList(
            account_type=AccountType.VALIDATOR_LIST,
            max_validators=max(len(validators), 10),
            validators=list(validators),
        ),
        lamports=5_000_000,
        owner=PROGRAM_ID,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# RAW ENCODINGS
# ═══════════════════════════════════════════════════════════════════════════════

def _fee_bytes(f: Fee) -> bytes:
    return struct.pack("<QQ", f.denominator, f.numerator)


def _option(value, encode) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + encode(value)


def encode_stake_pool(pool: StakePool) -> bytes:
    out = bytes([pool.account_type])
    out += bytes(pool.manager) + bytes(pool.staker) + bytes(pool.stake_deposit_authority)
    out += bytes([pool.stake_withdraw_bump_seed])
    out += bytes(pool.validator_list) + bytes(pool.reserve_stake) + bytes(pool.pool_mint)
    out += bytes(pool.manager_fee_account) + bytes(pool.token_program_id)
    out += struct.pack("<QQQ", pool.total_lamports, pool.pool_token_supply, pool.last_update_epoch)
    out += struct.pack("<qQ", pool.lockup.unix_timestamp, pool.lockup.epoch) + bytes(pool.lockup.custodian)
    out += _fee_bytes(pool.epoch_fee)
    out += _option(pool.next_epoch_fee, _fee_bytes)
    out += _option(pool.preferred_deposit_validator_vote_address, bytes)
    out += _option(pool.preferred_withdraw_validator_vote_address, bytes)
    out += _fee_bytes(pool.stake_deposit_fee)
    out += _fee_bytes(pool.withdrawal_fee)
    out += _option(pool.next_withdrawal_fee, _fee_bytes)
    out += bytes([pool.stake_referral_fee])
    out += _option(pool.sol_deposit_authority, bytes)
    out += _fee_bytes(pool.sol_deposit_fee)
    out += bytes([pool.sol_referral_fee])
    return out


def encode_validator_list(validator_list: ValidatorList, spare_capacity: int = 0) -> bytes:
    out = bytes([validator_list.account_type])
    out += struct.pack("<II", validator_list.max_validators, len(validator_list.validators))
    for v in validator_list.validators:
        out += struct.pack(
            "<QQQQQB",
            v.active_stake_lamports,
            v.transient_stake_lamports,
            v.last_update_epoch,
            v.transient_seed_suffix_start,
            v.transient_seed_suffix_end,
            v.status,
        )
        out += bytes(v.vote_account_address)
    # Unused capacity is zero-filled on chain
    return out + bytes(spare_capacity)


def encode_delegated_stake_account(voter: Pubkey) -> bytes:
    """200 byte StakeState::Stake with only the tag and the voter filled in."""
    data = bytearray(200)
    data[0:4] = struct.pack("<I", 2)
    data[124:156] = bytes(voter)
    return bytes(data)

"""
Stake Pool Instructions
=======================
Pure builders for the stake pool program instructions the SDK sends, plus the
one stake program instruction (Authorize) a stake deposit needs.

Account order and writability follow the program's instruction processor
exactly; data is packed little-endian with struct.
"""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import List, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.sysvar import CLOCK, STAKE_HISTORY

STAKE_PROGRAM_ID = Pubkey.from_string("Stake11111111111111111111111111111111111111")

# Size of a stake account
STAKE_STATE_LEN = 200


class StakePoolInstruction(IntEnum):
    INITIALIZE = 0
    ADD_VALIDATOR_TO_POOL = 1
    REMOVE_VALIDATOR_FROM_POOL = 2
    DECREASE_VALIDATOR_STAKE = 3
    INCREASE_VALIDATOR_STAKE = 4
    SET_PREFERRED_VALIDATOR = 5
    UPDATE_VALIDATOR_LIST_BALANCE = 7
    UPDATE_STAKE_POOL_BALANCE = 8
    CLEANUP_REMOVED_VALIDATOR_ENTRIES = 9
    DEPOSIT_STAKE = 10
    WITHDRAW_STAKE = 11
    SET_MANAGER = 12
    SET_FEE = 13
    SET_STAKER = 14
    DEPOSIT_SOL = 15
    SET_FUNDING_AUTHORITY = 16
    WITHDRAW_SOL = 17


class StakeAuthorize(IntEnum):
    STAKER = 0
    WITHDRAWER = 1


# Stake program instruction index for Authorize
_STAKE_AUTHORIZE_IX = 1


def _meta(pubkey: Pubkey, is_writable: bool = False, is_signer: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=is_signer, is_writable=is_writable)


# ═══════════════════════════════════════════════════════════════════════════════
# USER ACTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def deposit_sol(
    program_id: Pubkey,
    stake_pool: Pubkey,
    withdraw_authority: Pubkey,
    reserve_stake: Pubkey,
    lamports_from: Pubkey,
    pool_tokens_to: Pubkey,
    manager_fee_account: Pubkey,
    referrer_pool_tokens_account: Pubkey,
    pool_mint: Pubkey,
    token_program_id: Pubkey,
    lamports: int,
    sol_deposit_authority: Optional[Pubkey] = None,
) -> Instruction:
    """Deposit `lamports` from a system account into the reserve, minting pool tokens."""
    accounts = [
        _meta(stake_pool, is_writable=True),
        _meta(withdraw_authority),
        _meta(reserve_stake, is_writable=True),
        _meta(lamports_from, is_writable=True, is_signer=True),
        _meta(pool_tokens_to, is_writable=True),
        _meta(manager_fee_account, is_writable=True),
        _meta(referrer_pool_tokens_account, is_writable=True),
        _meta(pool_mint, is_writable=True),
        _meta(CLOCK),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(token_program_id),
    ]
    if sol_deposit_authority is not None:
        accounts.append(_meta(sol_deposit_authority, is_signer=True))
    data = struct.pack("<BQ", StakePoolInstruction.DEPOSIT_SOL, lamports)
    return Instruction(program_id, data, accounts)


def deposit_stake(
    program_id: Pubkey,
    stake_pool: Pubkey,
    validator_list: Pubkey,
    deposit_authority: Pubkey,
    withdraw_authority: Pubkey,
    deposit_stake_account: Pubkey,
    validator_stake_account: Pubkey,
    reserve_stake: Pubkey,
    pool_tokens_to: Pubkey,
    manager_fee_account: Pubkey,
    referrer_pool_tokens_account: Pubkey,
    pool_mint: Pubkey,
    token_program_id: Pubkey,
) -> Instruction:
    """
    Deposit a delegated stake account into the pool.

    The stake account's staker and withdrawer must already be the pool's
    deposit authority (see authorize()).
    """
    accounts = [
        _meta(stake_pool, is_writable=True),
        _meta(validator_list, is_writable=True),
        _meta(deposit_authority),
        _meta(withdraw_authority),
        _meta(deposit_stake_account, is_writable=True),
        _meta(validator_stake_account, is_writable=True),
        _meta(reserve_stake, is_writable=True),
        _meta(pool_tokens_to, is_writable=True),
        _meta(manager_fee_account, is_writable=True),
        _meta(referrer_pool_tokens_account, is_writable=True),
        _meta(pool_mint, is_writable=True),
        _meta(CLOCK),
        _meta(STAKE_HISTORY),
        _meta(token_program_id),
        _meta(STAKE_PROGRAM_ID),
    ]
    data = struct.pack("<B", StakePoolInstruction.DEPOSIT_STAKE)
    return Instruction(program_id, data, accounts)


def withdraw_stake(
    program_id: Pubkey,
    stake_pool: Pubkey,
    validator_list: Pubkey,
    withdraw_authority: Pubkey,
    stake_split_from: Pubkey,
    stake_split_to: Pubkey,
    user_stake_authority: Pubkey,
    user_transfer_authority: Pubkey,
    user_pool_token_account: Pubkey,
    manager_fee_account: Pubkey,
    pool_mint: Pubkey,
    token_program_id: Pubkey,
    pool_tokens: int,
) -> Instruction:
    """Burn `pool_tokens` and split the matching stake into `stake_split_to`."""
    accounts = [
        _meta(stake_pool, is_writable=True),
        _meta(validator_list, is_writable=True),
        _meta(withdraw_authority),
        _meta(stake_split_from, is_writable=True),
        _meta(stake_split_to, is_writable=True),
        _meta(user_stake_authority),
        _meta(user_transfer_authority, is_signer=True),
        _meta(user_pool_token_account, is_writable=True),
        _meta(manager_fee_account, is_writable=True),
        _meta(pool_mint, is_writable=True),
        _meta(CLOCK),
        _meta(token_program_id),
        _meta(STAKE_PROGRAM_ID),
    ]
    data = struct.pack("<BQ", StakePoolInstruction.WITHDRAW_STAKE, pool_tokens)
    return Instruction(program_id, data, accounts)


# ═══════════════════════════════════════════════════════════════════════════════
# EPOCH REFRESH (permissionless)
# ═══════════════════════════════════════════════════════════════════════════════

def update_validator_list_balance(
    program_id: Pubkey,
    stake_pool: Pubkey,
    withdraw_authority: Pubkey,
    validator_list: Pubkey,
    reserve_stake: Pubkey,
    validator_and_transient_stake_pairs: List[Pubkey],
    start_index: int,
    no_merge: bool = False,
) -> Instruction:
    """
    Refresh the balances of a run of validators starting at `start_index`.

    `validator_and_transient_stake_pairs` is the flat list
    [validator_stake_0, transient_stake_0, validator_stake_1, ...].
    """
    accounts = [
        _meta(stake_pool),
        _meta(withdraw_authority),
        _meta(validator_list, is_writable=True),
        _meta(reserve_stake, is_writable=True),
        _meta(CLOCK),
        _meta(STAKE_HISTORY),
        _meta(STAKE_PROGRAM_ID),
    ]
    accounts.extend(_meta(key, is_writable=True) for key in validator_and_transient_stake_pairs)
    data = struct.pack("<BI?", StakePoolInstruction.UPDATE_VALIDATOR_LIST_BALANCE, start_index, no_merge)
    return Instruction(program_id, data, accounts)


def update_stake_pool_balance(
    program_id: Pubkey,
    stake_pool: Pubkey,
    withdraw_authority: Pubkey,
    validator_list: Pubkey,
    reserve_stake: Pubkey,
    manager_fee_account: Pubkey,
    pool_mint: Pubkey,
    token_program_id: Pubkey,
) -> Instruction:
    accounts = [
        _meta(stake_pool, is_writable=True),
        _meta(withdraw_authority),
        _meta(validator_list, is_writable=True),
        _meta(reserve_stake),
        _meta(manager_fee_account, is_writable=True),
        _meta(pool_mint, is_writable=True),
        _meta(token_program_id),
    ]
    data = struct.pack("<B", StakePoolInstruction.UPDATE_STAKE_POOL_BALANCE)
    return Instruction(program_id, data, accounts)


def cleanup_removed_validator_entries(
    program_id: Pubkey,
    stake_pool: Pubkey,
    validator_list: Pubkey,
) -> Instruction:
    accounts = [
        _meta(stake_pool),
        _meta(validator_list, is_writable=True),
    ]
    data = struct.pack("<B", StakePoolInstruction.CLEANUP_REMOVED_VALIDATOR_ENTRIES)
    return Instruction(program_id, data, accounts)


# ═══════════════════════════════════════════════════════════════════════════════
# STAKE PROGRAM
# ═══════════════════════════════════════════════════════════════════════════════

def authorize(
    stake_account: Pubkey,
    authority: Pubkey,
    new_authority: Pubkey,
    stake_authorize: StakeAuthorize,
) -> Instruction:
    """Stake program Authorize: hand staker or withdrawer rights to `new_authority`."""
    accounts = [
        _meta(stake_account, is_writable=True),
        _meta(CLOCK),
        _meta(authority, is_signer=True),
    ]
    data = struct.pack("<I", _STAKE_AUTHORIZE_IX) + bytes(new_authority) + struct.pack("<I", stake_authorize)
    return Instruction(STAKE_PROGRAM_ID, data, accounts)

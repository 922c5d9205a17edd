"""
Program Derived Addresses
=========================
Deterministic addresses owned by the stake pool program. Pure, no RPC.
"""

from solders.pubkey import Pubkey


def find_withdraw_authority(program_id: Pubkey, stake_pool: Pubkey) -> Pubkey:
    """Authority that signs for every stake account the pool owns."""
    key, _bump = Pubkey.find_program_address([bytes(stake_pool), b"withdraw"], program_id)
    return key


def find_deposit_authority(program_id: Pubkey, stake_pool: Pubkey) -> Pubkey:
    """Default stake deposit authority, used when the pool sets none of its own."""
    key, _bump = Pubkey.find_program_address([bytes(stake_pool), b"deposit"], program_id)
    return key


def find_validator_stake_account(program_id: Pubkey, stake_pool: Pubkey, vote_account: Pubkey) -> Pubkey:
    key, _bump = Pubkey.find_program_address([bytes(vote_account), bytes(stake_pool)], program_id)
    return key


def find_transient_stake_account(program_id: Pubkey, stake_pool: Pubkey, vote_account: Pubkey) -> Pubkey:
    key, _bump = Pubkey.find_program_address(
        [b"transient", bytes(vote_account), bytes(stake_pool)],
        program_id,
    )
    return key

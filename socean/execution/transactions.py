"""
Transaction Types & Wallet Boundary
===================================
Data shapes shared by the sequence builder and executor, and the signer
capability the executor calls out to.

A TransactionSequence is a list of stages; every transaction in stage i must
confirm before anything in stage i+1 is sent.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, runtime_checkable

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from socean.shared.system.logging import Logger


@dataclass
class TransactionWithSigners:
    """Instructions for one transaction plus the signers needed besides the wallet."""

    instructions: List[Instruction]
    signers: List[Keypair] = field(default_factory=list)


TransactionSequence = List[List[TransactionWithSigners]]
TransactionSequenceSignatures = List[List[str]]


@runtime_checkable
class WalletAdapter(Protocol):
    """
    External signer. The SDK never touches the wallet's key material.

    public_key is None while the wallet is disconnected.
    """

    @property
    def public_key(self) -> Optional[Pubkey]:
        ...

    async def sign_all_transactions(self, transactions: List[Transaction]) -> List[Transaction]:
        ...


class KeypairWallet:
    """WalletAdapter backed by a local keypair, for scripts and the CLI."""

    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @classmethod
    def from_env(cls, var: str = "SOLANA_PRIVATE_KEY") -> "KeypairWallet":
        """Load a base58 secret key from the environment."""
        pk = os.getenv(var)
        if not pk:
            raise ValueError(f"{var} is not set")
        try:
            keypair = Keypair.from_base58_string(pk)
        except ValueError as e:
            Logger.error(f"[WALLET] Invalid key format in {var}: {e}")
            raise
        return cls(keypair)

    @property
    def public_key(self) -> Optional[Pubkey]:
        return self.keypair.pubkey()

    async def sign_all_transactions(self, transactions: List[Transaction]) -> List[Transaction]:
        for tx in transactions:
            tx.partial_sign([self.keypair], tx.message.recent_blockhash)
        return transactions

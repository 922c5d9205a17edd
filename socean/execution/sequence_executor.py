"""
Transaction Sequence Executor
=============================
Signs, submits and confirms a TransactionSequence stage by stage.

The "Pilot" of the execution pipeline.
Handles the messy real-world interaction with the cluster.

Per stage:
1. Fetch one recent blockhash
2. Wallet signs every transaction (before any extra signer)
3. Extra signers (fresh stake accounts) partial-sign
4. Send + confirm all transactions concurrently
5. Barrier: the next stage starts only once every transaction confirmed

A failure halts the sequence. Earlier stages stay on the ledger; the raised
TransactionSequenceError lists exactly the signatures that confirmed.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, List, Optional

from solders.hash import Hash
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction
from solana.rpc.types import TxOpts

from socean.config.settings import Settings
from socean.errors import TransactionRejectedError, TransactionSequenceError, WalletPublicKeyUnavailableError
from socean.shared.system.logging import Logger
from socean.shared.system.rpc import try_rpc
from socean.execution.transactions import (
    TransactionSequence,
    TransactionSequenceSignatures,
    TransactionWithSigners,
    WalletAdapter,
)


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ExecutorConfig:
    """Confirmation options applied to every transaction in a sequence."""

    # "processed" avoids blockhash-not-found when simulating
    preflight_commitment: str = Settings.PREFLIGHT_COMMITMENT
    commitment: str = Settings.COMMITMENT
    skip_preflight: bool = Settings.SKIP_PREFLIGHT


# ═══════════════════════════════════════════════════════════════════════════════
# EXECUTOR
# ═══════════════════════════════════════════════════════════════════════════════

class TransactionSequenceExecutor:
    """
    Runs TransactionSequences against an AsyncClient.

    Usage:
        executor = TransactionSequenceExecutor(async_client)
        signatures = await executor.execute(wallet, sequence)
    """

    def __init__(self, client: Any, config: Optional[ExecutorConfig] = None):
        """
        Args:
            client: solana.rpc.async_api.AsyncClient (or compatible)
            config: Confirmation options
        """
        self.client = client
        self.config = config or ExecutorConfig()

        # Statistics
        self._sequences = 0
        self._stages_confirmed = 0
        self._transactions_sent = 0
        self._transactions_confirmed = 0
        self._failures = 0

    async def execute(
        self,
        wallet: WalletAdapter,
        sequence: TransactionSequence,
    ) -> TransactionSequenceSignatures:
        """
        Sign and send `sequence`, waiting for each stage to confirm before the next.

        Returns:
            Signatures per stage, in transaction order

        Raises:
            WalletPublicKeyUnavailableError: before any network call
            TransactionSequenceError: a stage failed (carries confirmed signatures)
        """
        fee_payer = wallet.public_key
        if fee_payer is None:
            raise WalletPublicKeyUnavailableError()

        self._sequences += 1
        total = len(sequence)
        completed: TransactionSequenceSignatures = []

        for stage_index, stage in enumerate(sequence):
            start = time.time()
            try:
                signatures = await self._run_stage(wallet, fee_payer, stage)
            except _StageFailed as e:
                self._failures += 1
                completed.append(e.confirmed)
                for failure in e.failures:
                    Logger.error(f"[EXECUTOR] Stage {stage_index + 1}/{total} transaction failed: {failure}")
                Logger.error(
                    f"[EXECUTOR] Stage {stage_index + 1}/{total} failed after "
                    f"{len(e.confirmed)}/{len(stage)} confirmation(s): {e.cause}"
                )
                raise TransactionSequenceError(
                    failed_stage=stage_index,
                    total_stages=total,
                    cause=e.cause,
                    completed=completed,
                    failures=e.failures,
                ) from e.cause
            except Exception as e:
                # Blockhash fetch or signing failed, nothing in this stage was sent
                self._failures += 1
                Logger.error(f"[EXECUTOR] Stage {stage_index + 1}/{total} could not be sent: {e}")
                raise TransactionSequenceError(
                    failed_stage=stage_index,
                    total_stages=total,
                    cause=e,
                    completed=completed,
                ) from e

            completed.append(signatures)
            self._stages_confirmed += 1
            Logger.success(
                f"[EXECUTOR] Stage {stage_index + 1}/{total} confirmed "
                f"({len(signatures)} tx, {(time.time() - start) * 1000:.0f}ms)"
            )

        return completed

    async def _run_stage(
        self,
        wallet: WalletAdapter,
        fee_payer: Pubkey,
        stage: List[TransactionWithSigners],
    ) -> List[str]:
        resp = await try_rpc(
            self.client.get_latest_blockhash(self.config.preflight_commitment),
            "get_latest_blockhash",
        )
        blockhash: Hash = resp.value.blockhash

        unsigned = [
            Transaction.new_unsigned(Message.new_with_blockhash(item.instructions, fee_payer, blockhash))
            for item in stage
        ]

        # Wallet first: some wallets rebuild the transaction they are handed
        signed = await wallet.sign_all_transactions(unsigned)
        for tx, item in zip(signed, stage):
            if item.signers:
                tx.partial_sign(item.signers, blockhash)

        results = await asyncio.gather(
            *(self._send_and_confirm(tx) for tx in signed),
            return_exceptions=True,
        )

        confirmed = [r for r in results if isinstance(r, str)]
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise _StageFailed(confirmed, failures)
        return confirmed

    async def _send_and_confirm(self, tx: Transaction) -> str:
        self._transactions_sent += 1
        opts = TxOpts(
            skip_confirmation=True,
            skip_preflight=self.config.skip_preflight,
            preflight_commitment=self.config.preflight_commitment,
        )
        resp = await try_rpc(self.client.send_raw_transaction(bytes(tx), opts=opts), "send_raw_transaction")
        signature: Signature = resp.value
        Logger.debug(f"[EXECUTOR] Sent {signature}")

        status = await try_rpc(
            self.client.confirm_transaction(signature, self.config.commitment),
            "confirm_transaction",
        )
        statuses = status.value
        if not statuses or statuses[0] is None:
            raise TransactionRejectedError(str(signature), "not confirmed")
        if statuses[0].err is not None:
            raise TransactionRejectedError(str(signature), statuses[0].err)

        self._transactions_confirmed += 1
        return str(signature)

    def get_stats(self) -> dict:
        """Get execution statistics."""
        return {
            "sequences": self._sequences,
            "stages_confirmed": self._stages_confirmed,
            "transactions_sent": self._transactions_sent,
            "transactions_confirmed": self._transactions_confirmed,
            "failures": self._failures,
        }


class _StageFailed(Exception):
    def __init__(self, confirmed: List[str], failures: List[BaseException]):
        super().__init__(str(failures[0]))
        self.confirmed = confirmed
        self.failures = failures
        self.cause = failures[0]


async def sign_and_send_transaction_sequence(
    wallet: WalletAdapter,
    sequence: TransactionSequence,
    client: Any,
    config: Optional[ExecutorConfig] = None,
) -> TransactionSequenceSignatures:
    """One-shot helper around TransactionSequenceExecutor.execute()."""
    return await TransactionSequenceExecutor(client, config).execute(wallet, sequence)

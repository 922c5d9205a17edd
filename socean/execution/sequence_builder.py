"""
Transaction Sequence Builder
============================
Pure, deterministic assembly of the staged transactions for one user action.

The "Architect" of the execution pipeline: no RPC, no wallet, no clock.
Everything it needs comes from one snapshot (pool, validator list, epoch).

Layout of every sequence:
    [validator refresh txs]   only if the pool is stale and some validator is
    [pool balance refresh]    only if the pool is stale
    [cleanup removed]         only if the pool is stale
    [action txs]              deposit / withdraw
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account

from socean.config.settings import Settings
from socean.shared.system.logging import Logger
from socean.execution.transactions import TransactionSequence, TransactionWithSigners
from socean.stake_pool import instructions as ix
from socean.stake_pool.pda import (
    find_transient_stake_account,
    find_validator_stake_account,
    find_withdraw_authority,
)
from socean.stake_pool.receipts import ValidatorWithdrawalReceipt
from socean.stake_pool.schema import StakePoolAccount, ValidatorListAccount


@dataclass
class WithdrawStakePlan:
    """A withdrawal sequence plus the fresh stake accounts that receive the stake."""

    transaction_sequence: TransactionSequence
    stake_accounts: List[Keypair] = field(default_factory=list)
    receipts: List[ValidatorWithdrawalReceipt] = field(default_factory=list)


def _chunks(items: list, size: int) -> List[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class TransactionSequenceBuilder:
    """
    Builds TransactionSequences from a single pool snapshot.

    Usage:
        builder = TransactionSequenceBuilder(pool_acc, validator_list_acc, epoch)
        sequence = builder.build_deposit_sol_sequence(wallet, lamports, ata)
    """

    def __init__(
        self,
        stake_pool_account: StakePoolAccount,
        validator_list_account: ValidatorListAccount,
        current_epoch: int,
        max_validators_to_update: Optional[int] = None,
        max_withdrawals_per_tx: Optional[int] = None,
    ):
        self.stake_pool_account = stake_pool_account
        self.validator_list_account = validator_list_account
        self.current_epoch = current_epoch
        if max_validators_to_update is None:
            max_validators_to_update = Settings.MAX_VALIDATORS_TO_UPDATE
        if max_withdrawals_per_tx is None:
            max_withdrawals_per_tx = Settings.MAX_WITHDRAWALS_PER_TX
        if max_validators_to_update < 1 or max_withdrawals_per_tx < 1:
            raise ValueError(
                f"Transaction capacities must be at least 1, got "
                f"max_validators_to_update={max_validators_to_update}, "
                f"max_withdrawals_per_tx={max_withdrawals_per_tx}"
            )
        self.max_validators_to_update = max_validators_to_update
        self.max_withdrawals_per_tx = max_withdrawals_per_tx

        self.program_id = stake_pool_account.owner
        self.pool = stake_pool_account.data
        self.withdraw_authority = find_withdraw_authority(self.program_id, stake_pool_account.pubkey)

    @property
    def is_stale(self) -> bool:
        return self.pool.is_stale(self.current_epoch)

    # ═══════════════════════════════════════════════════════════════════════
    # REFRESH PHASE
    # ═══════════════════════════════════════════════════════════════════════

    def build_validator_refresh_stage(self) -> List[TransactionWithSigners]:
        """
        One UpdateValidatorListBalance tx per run of consecutive stale validators.

        Runs are capped at max_validators_to_update and broken by validators
        already current for this epoch, which are skipped.
        """
        validators = self.validator_list_account.data.validators
        runs: List[List[int]] = []
        current: List[int] = []
        for index, validator in enumerate(validators):
            if not validator.is_stale(self.current_epoch):
                if current:
                    runs.append(current)
                    current = []
                continue
            current.append(index)
            if len(current) == self.max_validators_to_update:
                runs.append(current)
                current = []
        if current:
            runs.append(current)

        stage = []
        for run in runs:
            pairs: List[Pubkey] = []
            for index in run:
                vote = validators[index].vote_account_address
                pairs.append(find_validator_stake_account(self.program_id, self.stake_pool_account.pubkey, vote))
                pairs.append(find_transient_stake_account(self.program_id, self.stake_pool_account.pubkey, vote))
            stage.append(
                TransactionWithSigners(
                    instructions=[
                        ix.update_validator_list_balance(
                            self.program_id,
                            self.stake_pool_account.pubkey,
                            self.withdraw_authority,
                            self.validator_list_account.pubkey,
                            self.pool.reserve_stake,
                            pairs,
                            start_index=run[0],
                        )
                    ]
                )
            )
        return stage

    def build_refresh_sequence(self) -> TransactionSequence:
        """Refresh stages needed before acting on this snapshot; empty when current."""
        if not self.is_stale:
            return []

        sequence: TransactionSequence = []
        validator_stage = self.build_validator_refresh_stage()
        if validator_stage:
            sequence.append(validator_stage)

        sequence.append([
            TransactionWithSigners(
                instructions=[
                    ix.update_stake_pool_balance(
                        self.program_id,
                        self.stake_pool_account.pubkey,
                        self.withdraw_authority,
                        self.validator_list_account.pubkey,
                        self.pool.reserve_stake,
                        self.pool.manager_fee_account,
                        self.pool.pool_mint,
                        self.pool.token_program_id,
                    )
                ]
            )
        ])
        sequence.append([
            TransactionWithSigners(
                instructions=[
                    ix.cleanup_removed_validator_entries(
                        self.program_id,
                        self.stake_pool_account.pubkey,
                        self.validator_list_account.pubkey,
                    )
                ]
            )
        ])

        Logger.debug(
            f"[SEQUENCE] Pool stale (epoch {self.pool.last_update_epoch} < {self.current_epoch}), "
            f"prepending {len(sequence)} refresh stage(s), {len(validator_stage)} validator tx(s)"
        )
        return sequence

    def _with_refresh(self, action_stage: List[TransactionWithSigners]) -> TransactionSequence:
        return self.build_refresh_sequence() + [action_stage]

    # ═══════════════════════════════════════════════════════════════════════
    # ACTIONS
    # ═══════════════════════════════════════════════════════════════════════

    def build_deposit_sol_sequence(
        self,
        wallet: Pubkey,
        lamports: int,
        pool_token_to: Pubkey,
        create_ata_ix: Optional[Instruction] = None,
        referrer: Optional[Pubkey] = None,
    ) -> TransactionSequence:
        """
        Deposit SOL from `wallet`, minting pool tokens into `pool_token_to`.

        Args:
            wallet: Funding and fee-paying wallet
            lamports: Amount to deposit
            pool_token_to: Wallet's pool token account
            create_ata_ix: Prepended when pool_token_to does not exist yet
            referrer: Referrer's pool token account (defaults to the manager fee account)
        """
        instructions = [create_ata_ix] if create_ata_ix is not None else []
        instructions.append(
            ix.deposit_sol(
                self.program_id,
                self.stake_pool_account.pubkey,
                self.withdraw_authority,
                self.pool.reserve_stake,
                wallet,
                pool_token_to,
                self.pool.manager_fee_account,
                referrer or self.pool.manager_fee_account,
                self.pool.pool_mint,
                self.pool.token_program_id,
                lamports,
                self.pool.sol_deposit_authority,
            )
        )
        return self._with_refresh([TransactionWithSigners(instructions=instructions)])

    def build_deposit_stake_sequence(
        self,
        wallet: Pubkey,
        stake_account: Pubkey,
        validator_vote: Pubkey,
        pool_token_to: Pubkey,
        create_ata_ix: Optional[Instruction] = None,
        referrer: Optional[Pubkey] = None,
    ) -> TransactionSequence:
        """
        Deposit a stake account delegated to `validator_vote`.

        The wallet must be the stake account's staker and withdrawer; both are
        handed to the pool's deposit authority in the same transaction.
        """
        deposit_authority = self.pool.stake_deposit_authority
        instructions = [create_ata_ix] if create_ata_ix is not None else []
        instructions.extend([
            ix.authorize(stake_account, wallet, deposit_authority, ix.StakeAuthorize.STAKER),
            ix.authorize(stake_account, wallet, deposit_authority, ix.StakeAuthorize.WITHDRAWER),
            ix.deposit_stake(
                self.program_id,
                self.stake_pool_account.pubkey,
                self.validator_list_account.pubkey,
                deposit_authority,
                self.withdraw_authority,
                stake_account,
                find_validator_stake_account(self.program_id, self.stake_pool_account.pubkey, validator_vote),
                self.pool.reserve_stake,
                pool_token_to,
                self.pool.manager_fee_account,
                referrer or self.pool.manager_fee_account,
                self.pool.pool_mint,
                self.pool.token_program_id,
            ),
        ])
        return self._with_refresh([TransactionWithSigners(instructions=instructions)])

    def build_withdraw_stake_sequence(
        self,
        wallet: Pubkey,
        receipts: List[ValidatorWithdrawalReceipt],
        user_pool_token_account: Pubkey,
        rent_lamports: Optional[int] = None,
    ) -> WithdrawStakePlan:
        """
        Withdraw per the allocator's receipts into freshly created stake accounts.

        Each draw gets a new stake account whose keypair co-signs its transaction.
        At most max_withdrawals_per_tx draws share a transaction; all action
        transactions go out in a single stage.
        """
        if rent_lamports is None:
            rent_lamports = Settings.STAKE_ACCOUNT_RENT_EXEMPT_LAMPORTS

        stake_accounts: List[Keypair] = []
        action_stage: List[TransactionWithSigners] = []

        for chunk in _chunks(receipts, self.max_withdrawals_per_tx):
            instructions: List[Instruction] = []
            signers: List[Keypair] = []
            for receipt in chunk:
                split_to = Keypair()
                stake_accounts.append(split_to)
                signers.append(split_to)
                instructions.append(
                    create_account(
                        CreateAccountParams(
                            from_pubkey=wallet,
                            to_pubkey=split_to.pubkey(),
                            lamports=rent_lamports,
                            space=ix.STAKE_STATE_LEN,
                            owner=ix.STAKE_PROGRAM_ID,
                        )
                    )
                )
                instructions.append(
                    ix.withdraw_stake(
                        self.program_id,
                        self.stake_pool_account.pubkey,
                        self.validator_list_account.pubkey,
                        self.withdraw_authority,
                        receipt.stake_account,
                        split_to.pubkey(),
                        wallet,
                        wallet,
                        user_pool_token_account,
                        self.pool.manager_fee_account,
                        self.pool.pool_mint,
                        self.pool.token_program_id,
                        receipt.withdrawal_receipt.droplets_unstaked,
                    )
                )
            action_stage.append(TransactionWithSigners(instructions=instructions, signers=signers))

        Logger.debug(
            f"[SEQUENCE] Withdrawal: {len(receipts)} draw(s) in {len(action_stage)} tx(s)"
        )
        return WithdrawStakePlan(
            transaction_sequence=self._with_refresh(action_stage),
            stake_accounts=stake_accounts,
            receipts=list(receipts),
        )

"""
Socean Client
=============
Async facade over the deployed stake pool: reads one snapshot per action,
plans it with the pure accounting/builder modules and, for the executing
variants, hands the sequence to the executor.

Usage:
    async with Socean("mainnet-beta") as socean:
        pool = await socean.get_stake_pool_account()
        signatures = await socean.deposit_sol(wallet, 1_000_000_000)
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Tuple

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solana.rpc.async_api import AsyncClient
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import create_associated_token_account, get_associated_token_address

from socean.config.cluster import SoceanConfig
from socean.errors import (
    AccountDoesNotExistError,
    StakeAccountNotRentExemptError,
    StakeAccountToDepositInvalidError,
    WalletPublicKeyUnavailableError,
)
from socean.execution.sequence_builder import TransactionSequenceBuilder, WithdrawStakePlan
from socean.execution.sequence_executor import ExecutorConfig, TransactionSequenceExecutor
from socean.execution.transactions import TransactionSequence, TransactionSequenceSignatures, WalletAdapter
from socean.shared.system.logging import Logger
from socean.shared.system.rpc import try_rpc
from socean.stake_pool.allocator import calc_withdrawals
from socean.stake_pool.fees import calc_sol_deposit
from socean.stake_pool.instructions import STAKE_STATE_LEN
from socean.stake_pool.pda import find_transient_stake_account, find_validator_stake_account
from socean.stake_pool.receipts import DepositReceipt, ValidatorAllStakeAccounts, ValidatorWithdrawalReceipt
from socean.stake_pool.schema import (
    StakePoolAccount,
    ValidatorListAccount,
    decode_stake_account_voter,
    decode_stake_pool,
    decode_validator_list,
)


class Socean:
    """
    Client for the Socean stake pool on one cluster.

    Args:
        cluster: "mainnet-beta" or "testnet" (defaults to Settings.CLUSTER)
        rpc_url: Custom RPC endpoint
        client: Pre-built AsyncClient (or compatible), mainly for tests
        executor_config: Confirmation options for the executing variants
    """

    def __init__(
        self,
        cluster: Optional[str] = None,
        rpc_url: Optional[str] = None,
        client: Optional[Any] = None,
        executor_config: Optional[ExecutorConfig] = None,
    ):
        self.config = SoceanConfig.for_cluster(cluster, rpc_url)
        self._owns_client = client is None
        self.client = client if client is not None else AsyncClient(self.config.rpc_url)
        self.executor = TransactionSequenceExecutor(self.client, executor_config)

    async def __aenter__(self) -> "Socean":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()

    # ═══════════════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════════════

    async def _get_account(self, pubkey: Pubkey) -> Any:
        resp = await try_rpc(self.client.get_account_info(pubkey), "get_account_info")
        if resp.value is None:
            raise AccountDoesNotExistError(pubkey)
        return resp.value

    async def get_stake_pool_account(self) -> StakePoolAccount:
        """Fetch and decode the pool account. Raises AccountDoesNotExistError if missing."""
        address = self.config.stake_pool_address
        account = await self._get_account(address)
        Logger.debug(f"[POOL] Fetched stake pool {address}")
        return StakePoolAccount(
            pubkey=address,
            data=decode_stake_pool(bytes(account.data)),
            lamports=account.lamports,
            owner=account.owner,
            executable=account.executable,
        )

    async def get_validator_list_account(self, validator_list: Pubkey) -> ValidatorListAccount:
        account = await self._get_account(validator_list)
        data = decode_validator_list(bytes(account.data))
        Logger.debug(f"[POOL] Fetched validator list {validator_list} ({len(data.validators)} validators)")
        return ValidatorListAccount(
            pubkey=validator_list,
            data=data,
            lamports=account.lamports,
            owner=account.owner,
            executable=account.executable,
        )

    async def get_current_epoch(self) -> int:
        resp = await try_rpc(self.client.get_epoch_info(), "get_epoch_info")
        return resp.value.epoch

    async def get_stake_account_rent(self) -> int:
        resp = await try_rpc(
            self.client.get_minimum_balance_for_rent_exemption(STAKE_STATE_LEN),
            "get_minimum_balance_for_rent_exemption",
        )
        return resp.value

    async def _snapshot(self) -> Tuple[StakePoolAccount, ValidatorListAccount, int]:
        """Pool, validator list and epoch, read once per action."""
        stake_pool = await self.get_stake_pool_account()
        validator_list, epoch = await asyncio.gather(
            self.get_validator_list_account(stake_pool.data.validator_list),
            self.get_current_epoch(),
        )
        return stake_pool, validator_list, epoch

    async def _builder(self) -> TransactionSequenceBuilder:
        stake_pool, validator_list, epoch = await self._snapshot()
        return TransactionSequenceBuilder(stake_pool, validator_list, epoch)

    # ═══════════════════════════════════════════════════════════════════════
    # ADDRESSES
    # ═══════════════════════════════════════════════════════════════════════

    def validator_stake_account(self, vote_account: Pubkey) -> Pubkey:
        return find_validator_stake_account(
            self.config.stake_pool_program_id, self.config.stake_pool_address, vote_account
        )

    def transient_stake_account(self, vote_account: Pubkey) -> Pubkey:
        return find_transient_stake_account(
            self.config.stake_pool_program_id, self.config.stake_pool_address, vote_account
        )

    def get_validator_all_stake_accounts(self, vote_account: Pubkey) -> ValidatorAllStakeAccounts:
        return ValidatorAllStakeAccounts(
            main=self.validator_stake_account(vote_account),
            transient=self.transient_stake_account(vote_account),
        )

    async def get_or_create_associated_address(
        self, mint: Pubkey, owner: Pubkey
    ) -> Tuple[Pubkey, Optional[Instruction]]:
        """
        Owner's associated token account, plus a create instruction if it is not a token account yet.

        An address that has only received lamports is a system account and
        still needs creating.
        """
        ata = get_associated_token_address(owner, mint)
        resp = await try_rpc(self.client.get_account_info(ata), "get_account_info")
        if resp.value is not None and resp.value.owner == TOKEN_PROGRAM_ID:
            return ata, None
        Logger.info(f"[POOL] Associated token account {ata} not initialized, will create it")
        return ata, create_associated_token_account(owner, owner, mint)

    # ═══════════════════════════════════════════════════════════════════════
    # QUOTES
    # ═══════════════════════════════════════════════════════════════════════

    async def quote_sol_deposit(self, lamports: int) -> DepositReceipt:
        stake_pool = await self.get_stake_pool_account()
        return calc_sol_deposit(lamports, stake_pool.data)

    async def quote_withdrawal(self, droplets: int) -> List[ValidatorWithdrawalReceipt]:
        stake_pool = await self.get_stake_pool_account()
        validator_list = await self.get_validator_list_account(stake_pool.data.validator_list)
        return calc_withdrawals(droplets, stake_pool, validator_list.data)

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSACTION SEQUENCES
    # ═══════════════════════════════════════════════════════════════════════

    async def deposit_sol_transactions(
        self,
        wallet: Pubkey,
        lamports: int,
        referrer: Optional[Pubkey] = None,
    ) -> TransactionSequence:
        """Sequence depositing `lamports` from `wallet`, refresh stages included when stale."""
        builder = await self._builder()
        pool_token_to, create_ix = await self.get_or_create_associated_address(builder.pool.pool_mint, wallet)
        return builder.build_deposit_sol_sequence(wallet, lamports, pool_token_to, create_ix, referrer)

    async def deposit_stake_transactions(
        self,
        wallet: Pubkey,
        stake_account: Pubkey,
        referrer: Optional[Pubkey] = None,
    ) -> TransactionSequence:
        """
        Sequence depositing a stake account owned by `wallet`.

        Raises:
            StakeAccountToDepositInvalidError: not delegated to a pool validator
            StakeAccountNotRentExemptError: balance below rent exemption
        """
        builder = await self._builder()

        account = await self._get_account(stake_account)
        voter = decode_stake_account_voter(bytes(account.data))
        if voter is None:
            raise StakeAccountToDepositInvalidError(stake_account, "stake account is not delegated")
        pool_votes = {v.vote_account_address for v in builder.validator_list_account.data.validators}
        if voter not in pool_votes:
            raise StakeAccountToDepositInvalidError(
                stake_account, f"delegated to {voter}, which is not a pool validator"
            )

        rent = await self.get_stake_account_rent()
        if account.lamports < rent:
            raise StakeAccountNotRentExemptError(stake_account, account.lamports, rent)

        pool_token_to, create_ix = await self.get_or_create_associated_address(builder.pool.pool_mint, wallet)
        return builder.build_deposit_stake_sequence(wallet, stake_account, voter, pool_token_to, create_ix, referrer)

    async def withdraw_stake_transactions(self, wallet: Pubkey, droplets: int) -> WithdrawStakePlan:
        """
        Plan and build a withdrawal of `droplets` into new stake accounts.

        Raises:
            WithdrawalUnserviceableError: no exact split exists right now
        """
        builder = await self._builder()
        receipts = calc_withdrawals(droplets, builder.stake_pool_account, builder.validator_list_account.data)
        rent = await self.get_stake_account_rent()
        # Withdrawing implies the pool token account already exists
        user_pool_token_account = get_associated_token_address(wallet, builder.pool.pool_mint)
        return builder.build_withdraw_stake_sequence(wallet, receipts, user_pool_token_account, rent)

    # ═══════════════════════════════════════════════════════════════════════
    # EXECUTING VARIANTS
    # ═══════════════════════════════════════════════════════════════════════

    @staticmethod
    def _require_public_key(wallet: WalletAdapter) -> Pubkey:
        if wallet.public_key is None:
            raise WalletPublicKeyUnavailableError()
        return wallet.public_key

    async def deposit_sol(
        self,
        wallet: WalletAdapter,
        lamports: int,
        referrer: Optional[Pubkey] = None,
    ) -> TransactionSequenceSignatures:
        owner = self._require_public_key(wallet)
        Logger.section("Deposit SOL")
        sequence = await self.deposit_sol_transactions(owner, lamports, referrer)
        return await self.executor.execute(wallet, sequence)

    async def deposit_stake(
        self,
        wallet: WalletAdapter,
        stake_account: Pubkey,
        referrer: Optional[Pubkey] = None,
    ) -> TransactionSequenceSignatures:
        owner = self._require_public_key(wallet)
        Logger.section("Deposit Stake")
        sequence = await self.deposit_stake_transactions(owner, stake_account, referrer)
        return await self.executor.execute(wallet, sequence)

    async def withdraw_stake(
        self,
        wallet: WalletAdapter,
        droplets: int,
    ) -> Tuple[TransactionSequenceSignatures, WithdrawStakePlan]:
        """Returns the signatures and the plan (whose stake_accounts received the stake)."""
        owner = self._require_public_key(wallet)
        Logger.section("Withdraw Stake")
        plan = await self.withdraw_stake_transactions(owner, droplets)
        signatures = await self.executor.execute(wallet, plan.transaction_sequence)
        return signatures, plan

"""
Socean CLI
==========
Read-only command-line view of the stake pool, built with Typer + Rich.

Commands:
    socean pool
    socean validators
    socean quote-deposit 1000000000
    socean quote-withdraw 1000000000 --cluster mainnet-beta
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from socean.client import Socean
from socean.errors import SoceanError
from socean.shared.system.logging import Logger
from socean.stake_pool.allocator import (
    sorted_validators,
    total_unstaked_droplets,
    total_withdraw_lamports,
    total_withdrawal_fees_droplets,
)

app = typer.Typer(
    name="socean",
    help="Socean stake pool - inspect the pool and quote deposits / withdrawals",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

LAMPORTS_PER_SOL = 1_000_000_000

_state = {"cluster": None, "rpc_url": None}


def _sol(lamports: int) -> str:
    return f"{lamports / LAMPORTS_PER_SOL:,.9f}"


def _run(coro_factory):
    """Run an async command against a fresh client, turning SDK errors into exit code 1."""

    async def runner():
        async with Socean(_state["cluster"], _state["rpc_url"]) as socean:
            return await coro_factory(socean)

    try:
        return asyncio.run(runner())
    except (SoceanError, ValueError) as e:
        console.print(f"[bold red]❌ Error: {e}[/bold red]")
        raise typer.Exit(1)


@app.callback()
def main(
    cluster: Optional[str] = typer.Option(
        None,
        "--cluster",
        help="mainnet-beta or testnet (defaults to SOCEAN_CLUSTER)",
    ),
    rpc_url: Optional[str] = typer.Option(
        None,
        "--rpc-url",
        help="Custom RPC endpoint",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show SDK log output",
    ),
):
    _state["cluster"] = cluster
    _state["rpc_url"] = rpc_url
    Logger.set_silent(not verbose)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: POOL
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def pool():
    """Stake pool summary: totals, price, fees and last update epoch."""

    async def fetch(socean: Socean):
        stake_pool, epoch = await asyncio.gather(socean.get_stake_pool_account(), socean.get_current_epoch())
        return stake_pool, epoch

    stake_pool, epoch = _run(fetch)
    data = stake_pool.data

    price = data.total_lamports / data.pool_token_supply if data.pool_token_supply else 1.0
    stale = "[yellow]stale[/yellow]" if data.is_stale(epoch) else "[green]current[/green]"

    table = Table(show_header=False, box=None)
    table.add_row("Address", str(stake_pool.pubkey))
    table.add_row("Pool mint", str(data.pool_mint))
    table.add_row("Reserve", str(data.reserve_stake))
    table.add_row("Total staked", f"{_sol(data.total_lamports)} SOL")
    table.add_row("Token supply", f"{_sol(data.pool_token_supply)} scnSOL")
    table.add_row("Price", f"{price:.9f} SOL / scnSOL")
    table.add_row("Last update", f"epoch {data.last_update_epoch} ({stale}, now {epoch})")
    table.add_row("SOL deposit fee", str(data.sol_deposit_fee))
    table.add_row("Stake deposit fee", str(data.stake_deposit_fee))
    table.add_row("Withdrawal fee", str(data.withdrawal_fee))
    table.add_row("Referral", f"SOL {data.sol_referral_fee}% / stake {data.stake_referral_fee}%")

    console.print(Panel.fit(table, title=f"[bold cyan]🌊 Socean ({_state['cluster'] or 'default cluster'})[/bold cyan]", border_style="cyan"))


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: VALIDATORS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command()
def validators():
    """Validator list, lightest first (the order withdrawals drain them in)."""
    async def fetch(socean: Socean):
        stake_pool = await socean.get_stake_pool_account()
        validator_list, epoch = await asyncio.gather(
            socean.get_validator_list_account(stake_pool.data.validator_list),
            socean.get_current_epoch(),
        )
        return validator_list, epoch

    validator_list, epoch = _run(fetch)

    table = Table(title=f"Validators ({len(validator_list.data.validators)})")
    table.add_column("Vote account")
    table.add_column("Active SOL", justify="right")
    table.add_column("Transient SOL", justify="right")
    table.add_column("Status")
    table.add_column("Updated", justify="right")
    for v in sorted_validators(validator_list.data.validators):
        updated = str(v.last_update_epoch) if not v.is_stale(epoch) else f"[yellow]{v.last_update_epoch}[/yellow]"
        table.add_row(
            str(v.vote_account_address),
            _sol(v.active_stake_lamports),
            _sol(v.transient_stake_lamports),
            v.status.name,
            updated,
        )
    console.print(table)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND: QUOTES
# ═══════════════════════════════════════════════════════════════════════════════

@app.command("quote-deposit")
def quote_deposit(
    lamports: int = typer.Argument(..., min=1, help="Lamports to deposit"),
):
    """Droplets received for a SOL deposit, fees included."""
    receipt = _run(lambda socean: socean.quote_sol_deposit(lamports))

    table = Table(show_header=False, box=None)
    table.add_row("Deposit", f"{_sol(receipt.lamports_staked)} SOL")
    table.add_row("Receive", f"{_sol(receipt.droplets_received)} scnSOL")
    table.add_row("Fee", f"{receipt.droplets_fee_paid} droplets")
    table.add_row("  of which referral", f"{receipt.referral_fee_paid} droplets")
    console.print(Panel.fit(table, title="[bold green]Deposit quote[/bold green]", border_style="green"))


@app.command("quote-withdraw")
def quote_withdraw(
    droplets: int = typer.Argument(..., min=1, help="Droplets (scnSOL atomic units) to withdraw"),
):
    """How a withdrawal would be split across stake accounts."""
    receipts = _run(lambda socean: socean.quote_withdrawal(droplets))

    table = Table(title="Withdrawal plan")
    table.add_column("Stake account")
    table.add_column("Droplets", justify="right")
    table.add_column("Lamports", justify="right")
    table.add_column("Fee (droplets)", justify="right")
    for r in receipts:
        table.add_row(
            str(r.stake_account),
            str(r.withdrawal_receipt.droplets_unstaked),
            str(r.withdrawal_receipt.lamports_received),
            str(r.withdrawal_receipt.droplets_fee_paid),
        )
    console.print(table)
    console.print(
        f"Total: burn [bold]{total_unstaked_droplets(receipts)}[/bold] droplets, "
        f"receive [bold]{_sol(total_withdraw_lamports(receipts))}[/bold] SOL, "
        f"fees {total_withdrawal_fees_droplets(receipts)} droplets"
    )


if __name__ == "__main__":
    app()

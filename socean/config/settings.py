import os
from dotenv import load_dotenv

# Load Environment Variables from the working directory .env
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # CLUSTER SELECTION
    # ═══════════════════════════════════════════════════════════════════

    CLUSTER = os.getenv("SOCEAN_CLUSTER", "testnet")  # "mainnet-beta" or "testnet"
    RPC_URL = os.getenv("SOCEAN_RPC_URL", "")  # Empty = public cluster endpoint

    # ═══════════════════════════════════════════════════════════════════
    # TRANSPORT CAPACITY (transaction size limits, tune per environment)
    # ═══════════════════════════════════════════════════════════════════

    MAX_VALIDATORS_TO_UPDATE = int(os.getenv("SOCEAN_MAX_VALIDATORS_TO_UPDATE", "5"))
    MAX_WITHDRAWALS_PER_TX = int(os.getenv("SOCEAN_MAX_WITHDRAWALS_PER_TX", "4"))

    # ═══════════════════════════════════════════════════════════════════
    # WITHDRAWAL ALLOCATION
    # ═══════════════════════════════════════════════════════════════════

    # Stake left behind so the staker can still remove the validator (0.1 SOL)
    MIN_ACTIVE_STAKE_LAMPORTS = 100_000_000
    # Rent-exempt reserve of a 200 byte stake account
    STAKE_ACCOUNT_RENT_EXEMPT_LAMPORTS = 2_282_880

    # ═══════════════════════════════════════════════════════════════════
    # CONFIRMATION
    # ═══════════════════════════════════════════════════════════════════

    # "processed" avoids blockhash-not-found during preflight simulation
    PREFLIGHT_COMMITMENT = "processed"
    COMMITMENT = "confirmed"
    SKIP_PREFLIGHT = _env_flag("SOCEAN_SKIP_PREFLIGHT", False)

    # ═══════════════════════════════════════════════════════════════════
    # LOGGING
    # ═══════════════════════════════════════════════════════════════════

    SILENT_MODE = _env_flag("SOCEAN_SILENT", True)  # SDK stays quiet unless asked
    LOG_DIR = os.getenv("SOCEAN_LOG_DIR", "")  # Empty = no log file

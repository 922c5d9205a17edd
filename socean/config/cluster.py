from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from socean.config.settings import Settings

CLUSTER_RPC_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "testnet": "https://api.testnet.solana.com",
}

STAKE_POOL_ADDRESSES = {
    "mainnet-beta": "5oc4nmbNTda9fx8Tw57ShLD132aqDK65vuHH4RU1K4LZ",
    "testnet": "5oc4nDMhYqP8dB5DW8DHtoLJpcasB19Tacu3GWAMbQAC",
}

# Same deployment on every cluster
STAKE_POOL_PROGRAM_ID = "5ocnV1qiCgaQR8Jb8xWnVbApfaygJ8tNoZfgPwsgx9kx"


@dataclass(frozen=True)
class SoceanConfig:
    cluster: str
    rpc_url: str
    stake_pool_program_id: Pubkey
    stake_pool_address: Pubkey

    @classmethod
    def for_cluster(cls, cluster: Optional[str] = None, rpc_url: Optional[str] = None) -> "SoceanConfig":
        """
        Resolve the deployed pool for a cluster.

        Args:
            cluster: "mainnet-beta" or "testnet" (defaults to Settings.CLUSTER)
            rpc_url: Custom RPC endpoint, overrides the public cluster endpoint
        """
        cluster = cluster or Settings.CLUSTER
        if cluster not in STAKE_POOL_ADDRESSES:
            raise ValueError(
                f"Unknown cluster {cluster!r}, expected one of {sorted(STAKE_POOL_ADDRESSES)}"
            )
        return cls(
            cluster=cluster,
            rpc_url=rpc_url or Settings.RPC_URL or CLUSTER_RPC_URLS[cluster],
            stake_pool_program_id=Pubkey.from_string(STAKE_POOL_PROGRAM_ID),
            stake_pool_address=Pubkey.from_string(STAKE_POOL_ADDRESSES[cluster]),
        )

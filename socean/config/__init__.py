from socean.config.settings import Settings
from socean.config.cluster import SoceanConfig, CLUSTER_RPC_URLS, STAKE_POOL_ADDRESSES, STAKE_POOL_PROGRAM_ID

__all__ = [
    "Settings",
    "SoceanConfig",
    "CLUSTER_RPC_URLS",
    "STAKE_POOL_ADDRESSES",
    "STAKE_POOL_PROGRAM_ID",
]

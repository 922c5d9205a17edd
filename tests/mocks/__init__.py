"""
Socean Test Mocks
=================
Reusable mock classes for isolated testing.
"""

from tests.mocks.mock_rpc import MockRpcClient, MockAccountInfo
from tests.mocks.mock_wallet import MockWallet

__all__ = [
    "MockRpcClient",
    "MockAccountInfo",
    "MockWallet",
]

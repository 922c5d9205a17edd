"""
RPC call wrapper: every ledger read or write funnels through try_rpc so
failures surface uniformly as RpcError.
"""

from typing import Awaitable, TypeVar

from socean.errors import RpcError, SoceanError
from socean.shared.system.logging import Logger

T = TypeVar("T")


async def try_rpc(call: Awaitable[T], method: str = "") -> T:
    """Await an RPC coroutine, wrapping any transport or node failure in RpcError."""
    try:
        return await call
    except SoceanError:
        raise
    except Exception as e:
        Logger.error(f"[RPC] {method or 'call'} failed: {e}")
        raise RpcError(e, method) from e

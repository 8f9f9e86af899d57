"""
Shared Utility Functions

Common helper functions used across multiple modules.
"""

import asyncio
import hashlib
import hmac
from typing import Any, Callable, Optional, TypeVar

from app.core.errors import CollaboratorTransportError

T = TypeVar("T")


async def run_blocking(
    func: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = None,
    context: str = "",
    **kwargs: Any,
) -> T:
    """
    Run a blocking call in a worker thread, bounded by a timeout.

    A backend that hangs (bad auth, dead disk, unreachable service) would
    otherwise block the request forever.

    Args:
        func: Blocking callable
        timeout: Seconds to wait, None for no limit
        context: Operation description used in the timeout error

    Raises:
        CollaboratorTransportError: If the call does not finish in time
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs), timeout=timeout
        )
    except asyncio.TimeoutError:
        raise CollaboratorTransportError(
            f"timed out after {timeout}s {context}".rstrip()
        ) from None


def sign_value(value: str, key: str) -> str:
    """Append an HMAC-SHA256 signature: "<value>.<hexdigest>"."""
    digest = hmac.new(key.encode(), value.encode(), hashlib.sha256).hexdigest()
    return f"{value}.{digest}"


def unsign_value(signed: str, key: str) -> Optional[str]:
    """Return the value from sign_value output, or None if the signature is wrong."""
    value, sep, digest = signed.rpartition(".")
    if not sep or not value:
        return None
    expected = hmac.new(key.encode(), value.encode(), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(expected, digest):
        return None
    return value


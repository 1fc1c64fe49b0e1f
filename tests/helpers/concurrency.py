"""Concurrency test utilities for async integration tests.

Provides utilities to run several coroutines against one repository at the
same time and to force them to interleave at repository calls, so race
handling in the session lifecycle can be exercised deterministically.
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, List


async def run_concurrently(
    targets: List[Callable[[], Awaitable[Any]]], timeout: float = 10.0
) -> List[Any]:
    """Start all targets at once and wait for them.

    Args:
        targets: Coroutine factories to run concurrently
        timeout: Maximum time to wait for all of them

    Returns:
        Results (or raised exceptions) aligned with targets
    """
    tasks = [asyncio.ensure_future(target()) for target in targets]
    return await asyncio.wait_for(
        asyncio.gather(*tasks, return_exceptions=True), timeout=timeout
    )


def yield_after(obj: Any, *method_names: str) -> None:
    """Patch async methods of ``obj`` to hand control to the loop after returning.

    Every concurrent caller then finishes the patched read before any of them
    continues, which reproduces check-then-act races.
    """
    for name in method_names:
        original = getattr(obj, name)

        @functools.wraps(original)
        async def wrapper(*args, _original=original, **kwargs):
            result = await _original(*args, **kwargs)
            await asyncio.sleep(0)
            return result

        setattr(obj, name, wrapper)

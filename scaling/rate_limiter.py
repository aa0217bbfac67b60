"""Batch pacing for generation requests.

Independent artifacts may be generated a few at a time; after each batch the
helper sleeps so a burst of requests does not trip the provider's rate limits.
"""

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def batch_generate(
    items: Sequence[T],
    generate_fn: Callable[[T], Awaitable[R]],
    batch_size: int = 5,
    delay_seconds: float = 1.0,
) -> list[R]:
    """Run *generate_fn* over *items* in fixed-size concurrent batches.

    Results keep the order of *items*. A batch size of 1 is plain sequential
    generation.
    """
    results: list[R] = []
    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        results.extend(await asyncio.gather(*(generate_fn(item) for item in batch)))
        if delay_seconds and start + batch_size < len(items):
            await asyncio.sleep(delay_seconds)
    return results

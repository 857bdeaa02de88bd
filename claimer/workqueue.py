import asyncio
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

# python insantiates generics separate to function definition
T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Sequence[T],
    work: Callable[[int, T], Awaitable[R]],
    on_result: Callable[[int, T, R], None],
    concurrency: int = 1,
    stop: Optional[asyncio.Event] = None,
) -> list[int]:
    """
    Dispatches `work` over `items` in order with at most `concurrency` calls in flight.
    With a concurrency of 1 every call completes before the next one starts.

    Results are handed to `on_result` one at a time under a lock.
    Once `stop` is set no further item is dispatched, calls in flight still complete.

    Returns the indices of the items that were never dispatched
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    slots = asyncio.Semaphore(concurrency)
    lock = asyncio.Lock()
    in_flight: list[asyncio.Task] = []

    async def run(idx: int, item: T) -> None:
        try:
            result = await work(idx, item)
            async with lock:
                on_result(idx, item, result)
        finally:
            slots.release()

    for idx, item in enumerate(items):
        await slots.acquire()
        if stop is not None and stop.is_set():
            slots.release()
            await asyncio.gather(*in_flight)
            return list(range(idx, len(items)))
        in_flight.append(asyncio.create_task(run(idx, item)))

    await asyncio.gather(*in_flight)
    return []

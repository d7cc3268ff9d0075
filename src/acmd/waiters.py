"""Queues of callers waiting for modules that have not been defined yet."""

import asyncio
from typing import Any

__all__ = ["WaiterQueues", "settle_waiters"]


class WaiterQueues:
    """FIFO queues of futures, one per requested module name or id."""

    def __init__(self):
        self._queues: dict[str, list[asyncio.Future]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._queues

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._queues.values())

    def keys(self) -> list[str]:
        return list(self._queues.keys())

    def wait_for(self, key: str) -> "asyncio.Future[Any]":
        """Queue a new waiter for the given key and return it."""
        waiter = asyncio.get_running_loop().create_future()
        self._queues.setdefault(key, []).append(waiter)
        return waiter

    def drain(self, *keys: str) -> list[asyncio.Future]:
        """
        Remove the queues for the given keys.

        Returns:
            The waiters of each key in turn, each queue in the order it was filled.
        """
        drained = []
        for key in keys:
            drained.extend(self._queues.pop(key, []))
        return drained


def settle_waiters(waiters: list[asyncio.Future], loader: asyncio.Future):
    """Settle every waiter with the outcome of a finished loader.

    Waiters that were cancelled while queued are skipped.
    """
    for waiter in waiters:
        if waiter.done():
            continue
        if loader.cancelled():
            waiter.cancel()
        elif loader.exception() is not None:
            waiter.set_exception(loader.exception())
        else:
            waiter.set_result(loader.result())

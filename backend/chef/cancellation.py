"""
Cooperative Cancellation
A token passed explicitly through every suspend point of a generation request
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from chef.errors import GenerationCancelled

T = TypeVar("T")


class CancelToken:
    """Signals that a generation request has been superseded.

    Network calls go through ``run`` and delays through ``sleep`` so that a
    cancelled request stops at its next suspend point instead of finishing
    wasted work.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "superseded") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationCancelled(self.reason or "cancelled")

    async def sleep(self, delay: float) -> None:
        """Wait ``delay`` seconds unless cancelled first"""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, abandoning it as soon as the token is cancelled"""
        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            if not waiter.done():
                waiter.cancel()

        if work.done():
            return work.result()

        work.cancel()
        try:
            await work
        except asyncio.CancelledError:
            pass
        raise GenerationCancelled(self.reason or "cancelled")


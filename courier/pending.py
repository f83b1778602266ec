from __future__ import annotations
"""
One-shot reply slots used by `ask(...)`.

A `PendingResponse` is created by the asking task and travels inside the
message. Whoever settles it first wins: the actor (`fulfil`), the runtime
(`fail`, when the actor stops or its behavior raises) or the asker itself
(`expire`, on timeout). Every later attempt is a no-op that returns False.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import anyio

from .exceptions import AskTimeout


class SlotState(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    FAILED = "failed"
    EXPIRED = "expired"


@dataclass(slots=True, eq=False)
class PendingResponse:
    """
    Reply slot for a single request.

    Waiting on the slot suspends only the calling task (an `anyio.Event`),
    so any number of concurrent asks costs no threads.
    """

    _done: anyio.Event = field(default_factory=anyio.Event)
    _state: SlotState = SlotState.PENDING
    _value: Any = None
    _error: Optional[BaseException] = None

    @property
    def state(self) -> SlotState:
        return self._state

    @property
    def settled(self) -> bool:
        return self._state is not SlotState.PENDING

    def fulfil(self, value: Any) -> bool:
        """Deliver a reply. Returns False if the slot was already settled."""
        if self.settled:
            return False
        self._state = SlotState.FULFILLED
        self._value = value
        self._done.set()
        return True

    def fail(self, error: BaseException) -> bool:
        """Deliver an error. Returns False if the slot was already settled."""
        if self.settled:
            return False
        self._state = SlotState.FAILED
        self._error = error
        self._done.set()
        return True

    def expire(self) -> bool:
        """Mark the slot as timed out. Returns False if already settled."""
        if self.settled:
            return False
        self._state = SlotState.EXPIRED
        self._done.set()
        return True

    async def wait(self, timeout: Optional[float] = None) -> Any:
        """
        Suspend until the slot settles and return the reply.

        Raises
        ------
        AskTimeout
            If nothing settled the slot within `timeout` seconds.
        BaseException
            Whatever error the slot was failed with.
        """
        try:
            with anyio.fail_after(timeout):
                await self._done.wait()
        except TimeoutError:
            # A settlement that raced the deadline still wins.
            if self.expire():
                raise AskTimeout(f"ask() timed out after {timeout} seconds.") from None
        return self.result()

    def result(self) -> Any:
        if self._state is SlotState.FULFILLED:
            return self._value
        if self._state is SlotState.FAILED:
            assert self._error is not None
            raise self._error
        if self._state is SlotState.EXPIRED:
            raise AskTimeout("ask() reply slot has expired.")
        raise RuntimeError("Reply slot is still pending.")

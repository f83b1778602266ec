from __future__ import annotations
"""
Mailbox primitives for courier actors.

A mailbox is a FIFO queue of messages with exactly one consumer, the owning
actor's receive loop. Any number of tasks may put concurrently.

Implementation notes
--------------------
We use `anyio.create_memory_object_stream` because:
- it is async-native,
- works across asyncio/trio backends,
- supports backpressure with bounded capacity,
- serves blocked senders in the order they started waiting.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import anyio
import anyio.abc
from anyio.streams.memory import MemoryObjectStreamStatistics

from .exceptions import MailboxClosed, MailboxFull
from .message import Message


class OverflowPolicy(str, Enum):
    """
    How a bounded mailbox treats a sender when it is full.

    BLOCK
        Suspend the sender until the actor frees a slot.
    FAIL
        Reject the message with `MailboxFull`.
    """

    BLOCK = "block"
    FAIL = "fail"


@dataclass(slots=True)
class Mailbox:
    """
    A mailbox backed by an AnyIO memory object stream.

    Parameters
    ----------
    capacity:
        Maximum number of pending messages. If None, capacity is unbounded
        and `put` never suspends.
    overflow:
        Fixed policy applied when a bounded mailbox is full.
    """

    capacity: Optional[int] = None
    overflow: OverflowPolicy = OverflowPolicy.BLOCK
    _send: anyio.abc.ObjectSendStream[Message] = field(init=False)
    _recv: anyio.abc.ObjectReceiveStream[Message] = field(init=False)
    _closed: bool = field(init=False, default=False)
    _blocked: set[anyio.CancelScope] = field(init=False, default_factory=set)

    def __post_init__(self) -> None:
        if self.capacity is not None and self.capacity < 1:
            raise ValueError("Mailbox capacity must be >= 1 or None for unbounded.")
        self.overflow = OverflowPolicy(self.overflow)
        size = math.inf if self.capacity is None else self.capacity
        send, recv = anyio.create_memory_object_stream[Message](size)
        self._send = send
        self._recv = recv
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return self._send.statistics().current_buffer_used

    def statistics(self) -> MemoryObjectStreamStatistics:
        return self._send.statistics()

    async def put(self, message: Message) -> None:
        """
        Enqueue a message at the tail.

        Raises
        ------
        MailboxClosed
            If the mailbox is closed, or gets closed while the sender waits
            for space.
        MailboxFull
            If the mailbox is full and its policy is `OverflowPolicy.FAIL`.
        """
        if self.overflow is OverflowPolicy.FAIL:
            self.put_nowait(message)
            return
        if self._closed:
            raise MailboxClosed("Mailbox is closed.")
        with anyio.CancelScope() as scope:
            self._blocked.add(scope)
            try:
                await self._send.send(message)
                return
            except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
                raise MailboxClosed("Mailbox is closed.") from e
            finally:
                self._blocked.discard(scope)
        # Only reached when close() cancelled the wait for space.
        raise MailboxClosed("Mailbox was closed while waiting for space.")

    def put_nowait(self, message: Message) -> None:
        """
        Enqueue a message without ever suspending.

        Raises
        ------
        MailboxClosed
            If the mailbox is closed.
        MailboxFull
            If the mailbox is bounded and full, whatever its policy.
        """
        if self._closed:
            raise MailboxClosed("Mailbox is closed.")
        try:
            self._send.send_nowait(message)
        except anyio.WouldBlock as e:
            raise MailboxFull(f"Mailbox is full (capacity={self.capacity}).") from e
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise MailboxClosed("Mailbox is closed.") from e

    async def get(self) -> Optional[Message]:
        """
        Dequeue the next message.

        Returns None once the mailbox is closed and nothing is left to read.
        """
        try:
            return await self._recv.receive()
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            return None

    def close(self) -> None:
        """
        Stop accepting messages.

        Messages accepted before the close stay readable. A `get` suspended
        on an empty mailbox wakes up and returns None. Senders still waiting
        for space are released with `MailboxClosed`; their messages were
        never accepted.
        """
        if self._closed:
            return
        self._closed = True
        for scope in list(self._blocked):
            scope.cancel()
        self._send.close()

    def drain(self) -> list[Message]:
        """
        Close the mailbox and hand back everything still queued.

        Any sender arriving afterwards fails with `MailboxClosed`.
        """
        self.close()
        leftover: list[Message] = []
        while True:
            try:
                leftover.append(self._recv.receive_nowait())
            except (anyio.WouldBlock, anyio.EndOfStream, anyio.ClosedResourceError):
                break
        self._recv.close()
        return leftover

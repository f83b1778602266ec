from __future__ import annotations

from collections.abc import Awaitable, Iterable
from typing import Optional, Protocol, TypeVar, Union

from .message import Effect, Message

StateT = TypeVar("StateT")

Transition = tuple[StateT, Optional[Iterable[Effect]]]


class Behavior(Protocol[StateT]):
    """
    Protocol for actor behaviors.

    Usage
    -----
    def counter(count: int, message: Message) -> Transition[int]:
        if message.payload == "inc":
            return count + 1, None
        if message.payload == "get":
            return count, [Reply(message, count)]
        return count, None

    Coroutine functions are accepted as well; the runtime awaits them.
    """

    def __call__(
        self, state: StateT, message: Message, /
    ) -> Union[Transition[StateT], Awaitable[Transition[StateT]]]: ...

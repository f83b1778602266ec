from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal, Optional

from .address import ActorAddress

DeadLetterKind = Literal["tell", "ask", "reply"]
DeadLetterReason = Literal["not_found", "closed", "full", "discarded", "expired"]


@dataclass(frozen=True, slots=True)
class DeadLetter:
    """
    A message that never reached, or never came back from, its actor.

    This is for diagnostics and observability only.

    Attributes
    ----------
    target:
        Address of the intended recipient. For a late reply, the address of
        the actor that replied.
    message:
        The payload (or the reply value for kind "reply").
    kind:
        "tell" or "ask" for undelivered requests, "reply" for replies that
        arrived after their ask timed out or was already settled.
    reason:
        Why it was not delivered.
    when:
        Monotonic event loop time at which it was recorded.
    """

    target: ActorAddress
    message: Any
    kind: DeadLetterKind
    reason: DeadLetterReason
    when: float

    @property
    def expects_reply(self) -> bool:
        return self.kind == "ask"


class DeadLetterMailbox:
    """Bounded in-memory record of dead letters, oldest dropped first."""

    def __init__(self, maxlen: Optional[int] = None) -> None:
        self._messages: deque[DeadLetter] = deque(maxlen=maxlen)

    @property
    def messages(self) -> list[DeadLetter]:
        return list(self._messages)

    def push(self, dead_letter: DeadLetter) -> None:
        self._messages.append(dead_letter)

    def extend(self, dead_letters: Iterable[DeadLetter]) -> None:
        self._messages.extend(dead_letters)

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)

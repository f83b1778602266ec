from __future__ import annotations
"""
Messages and the effects a behavior may return.

A behavior never talks to other actors directly. It returns a new state
plus a list of effects, and the runtime dispatches them after the state has
been replaced.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

from .pending import PendingResponse

if TYPE_CHECKING:  # pragma: no cover
    from .ref import ActorHandle


@dataclass(frozen=True, slots=True)
class Message:
    """
    What an actor's behavior receives.

    Attributes
    ----------
    payload:
        The user-provided value. Any shape; behaviors dispatch on it.
    reply:
        One-shot reply slot when the message was sent with `ask(...)`.
        None for `tell(...)`.
    """

    payload: Any
    reply: Optional[PendingResponse] = None

    @property
    def expects_reply(self) -> bool:
        return self.reply is not None


@dataclass(frozen=True, slots=True)
class Tell:
    """Fire-and-forget `payload` to another actor."""

    target: "ActorHandle"
    payload: Any


@dataclass(frozen=True, slots=True)
class Reply:
    """
    Answer an ask.

    `request` may be the message currently being handled or one the actor
    kept in its state to answer later.
    """

    request: Message
    value: Any = None


Effect = Union[Tell, Reply]

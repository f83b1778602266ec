from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .address import ActorAddress


@dataclass(slots=True, frozen=True)
class ActorEvent:
    """
    Base class for all lifecycle events emitted by the runtime.

    Attributes
    ----------
    address : ActorAddress
        The address of the actor that generated this event.
    """

    address: ActorAddress


@dataclass(slots=True, frozen=True)
class ActorStarted(ActorEvent):
    """
    Event emitted when an actor has entered the RUNNING state.

    The actor accepts messages from this point on.
    """

    pass


@dataclass(slots=True, frozen=True)
class ActorCrashed(ActorEvent):
    """
    Event emitted when an actor's behavior raises.

    Attributes
    ----------
    error : BaseException
        The exception raised by the behavior.
    resumed : bool
        True when the actor kept running under `FailurePolicy.RESUME`. When
        False an `ActorStopped` event with reason "failure" follows.
    """

    error: BaseException
    resumed: bool = False


@dataclass(slots=True, frozen=True)
class ActorStopped(ActorEvent):
    """
    Event emitted when an actor reaches the STOPPED state.

    Attributes
    ----------
    reason : str | None
        "stopped" for an explicit stop, "failure" after a fatal behavior
        error, "shutdown" when the runtime closed.
    """

    reason: Optional[str] = None

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .address import ActorAddress
from .deadletters import DeadLetter
from .events import ActorEvent


@dataclass(frozen=True, slots=True)
class FailureInfo:
    """
    Details of a behavior failure.

    Attributes
    ----------
    address:
        The failing actor.
    message:
        The payload that was being processed.
    error:
        The exception raised by the behavior.
    resumed:
        Whether the actor kept running afterwards.
    """

    address: ActorAddress
    message: Any
    error: BaseException
    resumed: bool


@runtime_checkable
class RuntimeHooks(Protocol):
    """
    Observer for runtime activity.

    Every method is optional in practice: the runtime only calls the ones
    the object defines. Hooks run inline on the event loop and should return
    quickly. An exception raised by a hook is logged and otherwise ignored.
    """

    def on_event(self, event: ActorEvent) -> None: ...

    def on_failure(self, failure: FailureInfo) -> None: ...

    def on_dead_letter(self, dead_letter: DeadLetter) -> None: ...

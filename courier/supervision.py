from __future__ import annotations
"""
Failure and stop policies for courier actors.

Both policies are fixed per actor when it is started. There is no restart
and no parent/child escalation: a failure is local to the actor that raised
it.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """
    What the runtime does when a behavior raises.

    STOP
        Stop the failing actor. Its queued messages are discarded and every
        pending ask against it fails with `ActorStopped`.
    RESUME
        Log the error and keep processing with the state the actor had
        before the failing message. Must be chosen explicitly.
    """

    STOP = "stop"
    RESUME = "resume"


class StopPolicy(str, Enum):
    """
    What happens to messages still queued when an actor is stopped.

    DISCARD
        Drop them. Their asks fail with `ActorStopped` and each one is
        recorded as a dead letter.
    DRAIN
        Process every message accepted before the stop, then stop.
    """

    DISCARD = "discard"
    DRAIN = "drain"


class ActorStatus(str, Enum):
    """Lifecycle of a single actor. Transitions only move forward."""

    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = (
    ActorStatus.STARTING,
    ActorStatus.RUNNING,
    ActorStatus.STOPPING,
    ActorStatus.STOPPED,
)

from __future__ import annotations


class CourierError(Exception):
    """Base exception for all courier runtime errors."""


class MailboxFull(CourierError):
    """
    Raised when a bounded mailbox rejects a message.

    Only mailboxes configured with `OverflowPolicy.FAIL` raise this from
    `put(...)`. `put_nowait(...)` raises it for any full bounded mailbox.
    """


class MailboxClosed(CourierError):
    """
    Raised when attempting to put messages into a mailbox that has been closed.

    Mailboxes are closed when their actor starts stopping.
    """


class ActorStopped(CourierError):
    """
    Raised when interacting with an actor that is no longer running.

    This can happen if:
    - the actor was explicitly stopped while an `ask(...)` was still pending,
    - the actor crashed under the default failure policy,
    - the runtime was shut down.
    """


class ActorNotFound(ActorStopped):
    """
    Raised when a handle no longer resolves to a live actor.

    Subclasses `ActorStopped` so callers of `ask(...)` can catch a single
    error type for every "actor is gone" outcome.
    """


class AskTimeout(CourierError):
    """
    Raised when an `ask(...)` operation times out.

    Timeouts are controlled by the caller, not the actor. The actor may still
    process the message later; its reply is then discarded.
    """


class RuntimeNotRunning(CourierError):
    """Raised when starting actors on a runtime that is not open."""


class BehaviorFailed(CourierError):
    """
    Raised to the asker when the behavior failed on its message and the
    actor resumed under `FailurePolicy.RESUME`.

    The behavior's own exception is available as `__cause__`.
    """

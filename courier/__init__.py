__version__ = "0.1.0"

from .address import ActorAddress
from .conf import monkay, settings
from .deadletters import DeadLetter
from .exceptions import (
    ActorNotFound,
    ActorStopped,
    AskTimeout,
    BehaviorFailed,
    CourierError,
    MailboxClosed,
    MailboxFull,
    RuntimeNotRunning,
)
from .mailbox import Mailbox, OverflowPolicy
from .message import Message, Reply, Tell
from .pending import PendingResponse
from .ref import ActorHandle
from .runtime import ActorRuntime
from .supervision import ActorStatus, FailurePolicy, StopPolicy

__all__ = [
    "ActorAddress",
    "ActorHandle",
    "ActorNotFound",
    "ActorRuntime",
    "ActorStatus",
    "ActorStopped",
    "AskTimeout",
    "BehaviorFailed",
    "CourierError",
    "DeadLetter",
    "FailurePolicy",
    "Mailbox",
    "MailboxClosed",
    "MailboxFull",
    "Message",
    "OverflowPolicy",
    "PendingResponse",
    "Reply",
    "RuntimeNotRunning",
    "StopPolicy",
    "Tell",
    "monkay",
    "settings",
]

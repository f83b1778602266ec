from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """
    Default configuration for courier runtimes.

    Override by pointing `COURIER_SETTINGS_MODULE` at a subclass, e.g.
    `myproject.settings.CourierSettings`.

    Attributes
    ----------
    mailbox_capacity:
        Default capacity for new mailboxes. None means unbounded.
    mailbox_overflow:
        What a bounded mailbox does when full: "block" or "fail".
    failure_policy:
        What happens when a behavior raises: "stop" or "resume".
    stop_policy:
        What happens to queued messages on stop: "discard" or "drain".
    ask_timeout:
        Default `ask(...)` deadline in seconds. None waits forever.
    max_events:
        Number of lifecycle events retained by each runtime.
    max_dead_letters:
        Number of dead letters retained by each runtime.
    logger_name:
        Root logger name used by runtimes.
    log_level, log_format:
        Used by the CLI when configuring logging ("text" or "json").
    """

    mailbox_capacity: Optional[int] = None
    mailbox_overflow: str = "block"
    failure_policy: str = "stop"
    stop_policy: str = "discard"
    ask_timeout: Optional[float] = 5.0
    max_events: int = 1000
    max_dead_letters: int = 1000
    logger_name: str = "courier"
    log_level: str = "WARNING"
    log_format: str = "text"

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ActorAddress:
    """
    Opaque actor identity.

    This is *not* a runtime pointer. Two addresses are equal when they name
    the same actor of the same runtime; addresses are never reused within a
    runtime, so a stale address stays stale.
    """

    runtime: str
    serial: int

    def __str__(self) -> str:
        return f"{self.runtime}:{self.serial}"

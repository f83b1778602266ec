from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .address import ActorAddress
from .supervision import ActorStatus

if TYPE_CHECKING:  # pragma: no cover
    from .runtime import ActorRuntime

_DEFAULT: Any = object()


@dataclass(frozen=True, slots=True)
class ActorHandle:
    """
    Reference to an actor started by an `ActorRuntime`.

    A handle is only an address plus the runtime that owns it. It never
    exposes the actor's state. Once the actor stops, every operation through
    the handle raises `ActorNotFound`.
    """

    address: ActorAddress
    _runtime: "ActorRuntime" = field(compare=False, repr=False)

    @property
    def status(self) -> ActorStatus:
        return self._runtime.status(self)

    async def tell(self, message: Any) -> None:
        await self._runtime.tell(self, message)

    def tell_nowait(self, message: Any) -> None:
        self._runtime.tell_nowait(self, message)

    async def ask(self, message: Any, *, timeout: Optional[float] = _DEFAULT) -> Any:
        if timeout is _DEFAULT:
            return await self._runtime.ask(self, message)
        return await self._runtime.ask(self, message, timeout=timeout)

    async def stop(self) -> None:
        await self._runtime.stop(self)

    def __str__(self) -> str:
        return str(self.address)

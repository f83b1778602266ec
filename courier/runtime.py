from __future__ import annotations

"""
ActorRuntime: lifecycle, starting, messaging and shutdown.

This is the runtime entry-point. It owns:
- the task group where actor loops run,
- the registry of live actors,
- the ask/reply bridge,
- shutdown semantics.
"""

import inspect
import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Optional

import anyio
import anyio.abc

from .address import ActorAddress
from .conf import settings
from .deadletters import DeadLetter, DeadLetterKind, DeadLetterMailbox, DeadLetterReason
from .events import ActorCrashed, ActorEvent, ActorStarted
from .events import ActorStopped as ActorStoppedEvent
from .exceptions import (
    ActorNotFound,
    ActorStopped,
    AskTimeout,
    BehaviorFailed,
    MailboxClosed,
    MailboxFull,
    RuntimeNotRunning,
)
from .hooks import FailureInfo
from .mailbox import Mailbox, OverflowPolicy
from .message import Effect, Message, Reply, Tell
from .pending import PendingResponse
from .ref import ActorHandle
from .registry import Registry
from .supervision import ActorStatus, FailurePolicy, StopPolicy
from .typing import Behavior

_runtime_ids = count(1)
_DEFAULT: Any = object()


@dataclass(slots=True, eq=False)
class _ActorRuntime:
    """
    Internal runtime record for a single actor.

    Notes
    -----
    - `state` is only ever written by the actor's own loop.
    - `outstanding` holds every ask slot sent to this actor that has not
      settled yet, including replies the behavior deferred.
    """

    address: ActorAddress
    name: Optional[str]
    behavior: Behavior[Any]
    state: Any
    mailbox: Mailbox
    failure_policy: FailurePolicy
    stop_policy: StopPolicy

    status: ActorStatus = ActorStatus.STARTING
    stop_reason: Optional[str] = None
    outstanding: set[PendingResponse] = field(default_factory=set)
    stopped: anyio.Event = field(default_factory=anyio.Event)
    task: Optional[anyio.TaskInfo] = None
    dispatch_scope: Optional[anyio.CancelScope] = None
    processed: int = 0
    failures: int = 0

    def advance(self, status: ActorStatus) -> bool:
        """Move forward in the lifecycle. Returns False for backwards moves."""
        if status.rank <= self.status.rank:
            return False
        self.status = status
        return True


class ActorRuntime:
    """
    Root runtime container for actors.

    Parameters
    ----------
    name:
        Runtime name, used in actor addresses and logger names.
    hooks:
        Optional observer with `on_event`, `on_failure` and/or
        `on_dead_letter` methods.
    logger:
        Logging sink. Defaults to `<logger_name>.runtime.<name>`.
    on_dead_letter:
        Optional callback invoked for every dead letter.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        hooks: Any = None,
        logger: Optional[logging.Logger] = None,
        on_dead_letter: Optional[Callable[[DeadLetter], Any]] = None,
    ) -> None:
        self.name = name or f"runtime-{next(_runtime_ids)}"
        self._logger = logger or logging.getLogger(f"{settings.logger_name}.runtime.{self.name}")
        self._hooks = hooks
        self._on_dead_letter = on_dead_letter

        self._tg: anyio.abc.TaskGroup | None = None
        self._closed = False

        self._registry: Registry[_ActorRuntime] = Registry()
        self._serials = count(1)
        self._events: deque[ActorEvent] = deque(maxlen=settings.max_events)
        self.dead_letters = DeadLetterMailbox(maxlen=settings.max_dead_letters)

    @property
    def running(self) -> bool:
        return self._tg is not None and not self._closed

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    async def open(self) -> None:
        """Open the runtime. Must be called before `start(...)`."""
        if self._closed:
            raise RuntimeNotRunning("ActorRuntime is closed.")
        if self._tg is not None:
            return
        self._tg = await anyio.create_task_group().__aenter__()
        self._logger.info("Runtime %s opened", self.name)

    async def start(
        self,
        initial_state: Any,
        behavior: Behavior[Any],
        *,
        name: Optional[str] = None,
        mailbox_capacity: Optional[int] = _DEFAULT,
        overflow: OverflowPolicy | str | None = None,
        failure_policy: FailurePolicy | str | None = None,
        stop_policy: StopPolicy | str | None = None,
    ) -> ActorHandle:
        """
        Start a new actor and return its handle.

        The actor is RUNNING by the time this returns. Omitted options fall
        back to the configured defaults.

        Raises
        ------
        RuntimeNotRunning
            If the runtime is not open.
        ValueError
            If `name` is already taken by a live actor.
        """
        if not self.running:
            raise RuntimeNotRunning(
                "ActorRuntime is not running. Did you call await runtime.open()?"
            )
        assert self._tg is not None

        if mailbox_capacity is _DEFAULT:
            mailbox_capacity = settings.mailbox_capacity
        mailbox = Mailbox(
            capacity=mailbox_capacity,
            overflow=OverflowPolicy(overflow or settings.mailbox_overflow),
        )

        rt = _ActorRuntime(
            address=ActorAddress(runtime=self.name, serial=next(self._serials)),
            name=name,
            behavior=behavior,
            state=initial_state,
            mailbox=mailbox,
            failure_policy=FailurePolicy(failure_policy or settings.failure_policy),
            stop_policy=StopPolicy(stop_policy or settings.stop_policy),
        )
        self._registry.register(rt.address, rt, name=name)

        try:
            await self._tg.start(self._run_actor, rt)
        except BaseException:
            self._registry.unregister(rt.address)
            rt.mailbox.drain()
            raise
        return ActorHandle(address=rt.address, _runtime=self)

    async def tell(self, handle: ActorHandle, message: Any) -> None:
        """
        Send a message without waiting for any result.

        Raises
        ------
        ActorNotFound
            If the handle no longer points to a live actor.
        MailboxClosed
            If the actor is stopping.
        MailboxFull
            If the actor's bounded mailbox is full and rejects overflow.
        """
        rt = self._resolve(handle, message, kind="tell")
        try:
            await rt.mailbox.put(Message(payload=message))
        except MailboxClosed:
            self._dead_letter(rt.address, message, kind="tell", reason="closed")
            raise
        except MailboxFull:
            self._dead_letter(rt.address, message, kind="tell", reason="full")
            raise

    def tell_nowait(self, handle: ActorHandle, message: Any) -> None:
        """Like `tell(...)`, but never suspends; a full mailbox always fails."""
        rt = self._resolve(handle, message, kind="tell")
        try:
            rt.mailbox.put_nowait(Message(payload=message))
        except MailboxClosed:
            self._dead_letter(rt.address, message, kind="tell", reason="closed")
            raise
        except MailboxFull:
            self._dead_letter(rt.address, message, kind="tell", reason="full")
            raise

    async def ask(
        self,
        handle: ActorHandle,
        message: Any,
        *,
        timeout: Optional[float] = _DEFAULT,
    ) -> Any:
        """
        Send a message and wait for the actor to reply.

        Raises
        ------
        AskTimeout
            If no reply arrived within `timeout` seconds. A reply sent later
            is discarded.
        ActorStopped
            If the actor stopped, or crashed, before replying.
        BehaviorFailed
            If the behavior raised while handling this message and the
            actor resumed under `FailurePolicy.RESUME`.
        MailboxFull
            If the actor's bounded mailbox is full and rejects overflow.
        """
        if timeout is _DEFAULT:
            timeout = settings.ask_timeout
        deadline = None if timeout is None else anyio.current_time() + timeout

        rt = self._resolve(handle, message, kind="ask")
        slot = PendingResponse()
        rt.outstanding.add(slot)
        try:
            try:
                # The deadline covers waiting for mailbox space as well.
                with anyio.fail_after(timeout):
                    await rt.mailbox.put(Message(payload=message, reply=slot))
            except TimeoutError:
                slot.expire()
                self._dead_letter(rt.address, message, kind="ask", reason="expired")
                raise AskTimeout(
                    f"ask() timed out after {timeout} seconds waiting for mailbox space."
                ) from None
            except MailboxClosed as e:
                self._dead_letter(rt.address, message, kind="ask", reason="closed")
                raise ActorStopped(f"Actor {rt.address} is stopping.") from e
            except MailboxFull:
                self._dead_letter(rt.address, message, kind="ask", reason="full")
                raise
            remaining = None if deadline is None else max(deadline - anyio.current_time(), 0.0)
            return await slot.wait(remaining)
        finally:
            rt.outstanding.discard(slot)

    async def stop(self, handle: ActorHandle) -> None:
        """
        Stop an actor.

        Notes
        -----
        - Stopping an actor that is already stopping waits for it again.
        - Stopping an actor that is already STOPPED raises `ActorNotFound`.
        - Every unanswered ask against the actor fails with `ActorStopped`.
        - Queued messages are discarded or drained per the actor's
          `StopPolicy`.
        - Returns once the actor is STOPPED, except when an actor stops
          itself from its own behavior: the loop then ends after the
          current message.
        """
        rt = self._registry.lookup(handle.address)
        if rt is None or rt.status is ActorStatus.STOPPED:
            raise ActorNotFound(f"Actor {handle.address} is not running.")
        self._request_stop(rt, reason="stopped")
        if self._is_own_loop(rt):
            return
        await rt.stopped.wait()

    def status(self, handle: ActorHandle) -> ActorStatus:
        rt = self._registry.lookup(handle.address)
        if rt is None:
            return ActorStatus.STOPPED
        return rt.status

    def lookup(self, address: ActorAddress) -> Optional[ActorHandle]:
        rt = self._registry.lookup(address)
        if rt is None:
            return None
        return ActorHandle(address=rt.address, _runtime=self)

    def lookup_name(self, name: str) -> Optional[ActorHandle]:
        rt = self._registry.lookup_name(name)
        if rt is None:
            return None
        return ActorHandle(address=rt.address, _runtime=self)

    def actors(self) -> tuple[ActorHandle, ...]:
        return tuple(ActorHandle(address=rt.address, _runtime=self) for rt in self._registry)

    def events(self) -> tuple[ActorEvent, ...]:
        return tuple(self._events)

    def _resolve(self, handle: ActorHandle, message: Any, *, kind: DeadLetterKind) -> _ActorRuntime:
        rt = self._registry.lookup(handle.address)
        if rt is None or rt.status is ActorStatus.STOPPED:
            self._dead_letter(handle.address, message, kind=kind, reason="not_found")
            raise ActorNotFound(f"Actor {handle.address} is not running.")
        return rt

    def _is_own_loop(self, rt: _ActorRuntime) -> bool:
        return rt.task is not None and rt.task.id == anyio.get_current_task().id

    def _request_stop(self, rt: _ActorRuntime, *, reason: str) -> None:
        if not rt.advance(ActorStatus.STOPPING):
            return
        rt.stop_reason = reason
        self._logger.info("Actor %s stopping (%s)", rt.address, reason)
        rt.mailbox.close()
        if rt.dispatch_scope is not None:
            rt.dispatch_scope.cancel()

    async def _run_actor(
        self,
        rt: _ActorRuntime,
        *,
        task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Actor receive loop: one message at a time until stopped."""
        rt.task = anyio.get_current_task()
        try:
            rt.advance(ActorStatus.RUNNING)
            self._emit(ActorStarted(address=rt.address))
            self._logger.info("Actor %s started", rt.address)
            task_status.started()

            while True:
                if rt.status is ActorStatus.STOPPING and (
                    rt.stop_policy is StopPolicy.DISCARD or rt.stop_reason == "failure"
                ):
                    break

                message = await rt.mailbox.get()
                if message is None:
                    break

                await self._process(rt, message)
        finally:
            self._finalize(rt)

    async def _process(self, rt: _ActorRuntime, message: Message) -> None:
        self._logger.debug("Actor %s received %r", rt.address, message.payload)
        try:
            outcome = rt.behavior(rt.state, message)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            new_state, effects = _unpack_transition(outcome)
        except Exception as exc:
            self._handle_failure(rt, message, exc)
            return

        rt.state = new_state
        rt.processed += 1
        if effects:
            await self._dispatch(rt, effects)

    async def _dispatch(self, rt: _ActorRuntime, effects: Iterable[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, Reply):
                self._deliver_reply(rt, effect)
            elif isinstance(effect, Tell):
                await self._deliver_tell(rt, effect)
            else:
                self._logger.warning(
                    "Actor %s returned an unknown effect %r; ignoring it", rt.address, effect
                )

    def _deliver_reply(self, rt: _ActorRuntime, effect: Reply) -> None:
        slot = effect.request.reply
        if slot is None:
            self._logger.debug(
                "Actor %s replied to %r, which was not an ask", rt.address, effect.request.payload
            )
            return
        if not slot.fulfil(effect.value):
            self._logger.debug("Actor %s sent a late reply; discarding it", rt.address)
            self._dead_letter(rt.address, effect.value, kind="reply", reason="expired")

    async def _deliver_tell(self, rt: _ActorRuntime, effect: Tell) -> None:
        target = self._registry.lookup(effect.target.address)
        if target is None or target.status is ActorStatus.STOPPED:
            self._dead_letter(effect.target.address, effect.payload, kind="tell", reason="not_found")
            return
        message = Message(payload=effect.payload)
        try:
            if rt.status is not ActorStatus.RUNNING:
                # A stopping actor never waits on another actor's mailbox.
                target.mailbox.put_nowait(message)
                return
            with anyio.CancelScope() as scope:
                rt.dispatch_scope = scope
                try:
                    await target.mailbox.put(message)
                finally:
                    rt.dispatch_scope = None
            if scope.cancelled_caught:
                self._dead_letter(target.address, effect.payload, kind="tell", reason="closed")
        except MailboxClosed:
            self._dead_letter(target.address, effect.payload, kind="tell", reason="closed")
        except MailboxFull:
            self._dead_letter(target.address, effect.payload, kind="tell", reason="full")

    def _handle_failure(self, rt: _ActorRuntime, message: Message, exc: Exception) -> None:
        """Apply the actor's failure policy to an error raised by its behavior."""
        rt.failures += 1
        resumed = rt.failure_policy is FailurePolicy.RESUME

        self._emit(ActorCrashed(address=rt.address, error=exc, resumed=resumed))
        self._call_hook(
            "on_failure",
            FailureInfo(address=rt.address, message=message.payload, error=exc, resumed=resumed),
        )

        if resumed:
            self._logger.warning(
                "Actor %s failed on %r; resuming with previous state",
                rt.address,
                message.payload,
                exc_info=exc,
            )
            if message.reply is not None:
                error = BehaviorFailed(f"Actor {rt.address} failed on {message.payload!r}: {exc!r}")
                error.__cause__ = exc
                message.reply.fail(error)
            return

        self._logger.error(
            "Actor %s failed on %r; stopping", rt.address, message.payload, exc_info=exc
        )
        if message.reply is not None:
            error = ActorStopped(f"Actor {rt.address} failed: {exc!r}")
            error.__cause__ = exc
            message.reply.fail(error)
        self._request_stop(rt, reason="failure")
        rt.stop_reason = "failure"

    def _finalize(self, rt: _ActorRuntime) -> None:
        """Discard what is left, fail pending asks and deregister."""
        if rt.stop_reason is None:
            rt.stop_reason = "shutdown" if self._closed else "stopped"
        rt.advance(ActorStatus.STOPPING)

        for message in rt.mailbox.drain():
            if message.reply is not None:
                message.reply.fail(ActorStopped(f"Actor {rt.address} stopped."))
            self._dead_letter(
                rt.address,
                message.payload,
                kind="ask" if message.expects_reply else "tell",
                reason="discarded",
            )

        for slot in list(rt.outstanding):
            slot.fail(ActorStopped(f"Actor {rt.address} stopped."))
        rt.outstanding.clear()

        rt.advance(ActorStatus.STOPPED)
        self._registry.unregister(rt.address)
        self._emit(ActorStoppedEvent(address=rt.address, reason=rt.stop_reason))
        self._logger.info("Actor %s stopped (%s)", rt.address, rt.stop_reason)
        rt.stopped.set()

    def _emit(self, event: ActorEvent) -> None:
        self._events.append(event)
        self._call_hook("on_event", event)

    def _dead_letter(
        self,
        target: ActorAddress,
        message: Any,
        *,
        kind: DeadLetterKind,
        reason: DeadLetterReason,
    ) -> None:
        dead_letter = DeadLetter(
            target=target,
            message=message,
            kind=kind,
            reason=reason,
            when=anyio.current_time(),
        )
        self.dead_letters.push(dead_letter)
        if reason != "expired":
            self._logger.warning("Dead letter to %s (%s, %s): %r", target, kind, reason, message)

        if self._on_dead_letter is not None:
            try:
                self._on_dead_letter(dead_letter)
            except Exception:
                self._logger.exception("on_dead_letter callback failed")
        self._call_hook("on_dead_letter", dead_letter)

    def _call_hook(self, name: str, payload: Any) -> None:
        if self._hooks is None:
            return
        fn = getattr(self._hooks, name, None)
        if fn is None:
            return
        try:
            fn(payload)
        except Exception:
            self._logger.exception("Runtime hook %s failed", name)

    async def aclose(self) -> None:
        """Stop every actor, fail their pending asks and close the runtime."""
        if self._closed:
            return
        self._closed = True

        records = self._registry.snapshot()
        for rt in records:
            self._request_stop(rt, reason="shutdown")
        for rt in records:
            if not self._is_own_loop(rt):
                await rt.stopped.wait()

        if self._tg is not None:
            tg = self._tg
            self._tg = None
            await tg.__aexit__(None, None, None)
        self._logger.info("Runtime %s closed", self.name)

    async def __aenter__(self) -> "ActorRuntime":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def _unpack_transition(outcome: Any) -> tuple[Any, Optional[Iterable[Effect]]]:
    """Validate what a behavior returned."""
    if not isinstance(outcome, tuple) or len(outcome) != 2:
        raise TypeError(
            "Behaviors must return a (new_state, effects) tuple, "
            f"got {type(outcome).__name__}."
        )
    new_state, effects = outcome
    if effects is not None and not isinstance(effects, Iterable):
        raise TypeError(f"Behavior effects must be iterable or None, got {type(effects).__name__}.")
    return new_state, effects

import logging

import anyio
import pytest

from courier import ActorRuntime, ActorStopped, DeadLetter
from courier.events import ActorCrashed, ActorStarted
from courier.events import ActorStopped as ActorStoppedEvent
from courier.hooks import FailureInfo, RuntimeHooks

pytestmark = pytest.mark.anyio


class RecordingHooks:
    def __init__(self):
        self.events = []
        self.failures = []
        self.dead_letters = []

    def on_event(self, event):
        self.events.append(event)

    def on_failure(self, failure: FailureInfo):
        self.failures.append(failure)

    def on_dead_letter(self, dl):
        self.dead_letters.append(dl)


class ExplodingHooks:
    def on_event(self, event):
        raise RuntimeError("hook failure")


async def test_lifecycle_events_are_recorded(counter):
    async with ActorRuntime() as runtime:
        handle = await runtime.start(0, counter)
        await handle.stop()

        events = runtime.events()

    assert isinstance(events[0], ActorStarted)
    assert isinstance(events[-1], ActorStoppedEvent)
    assert events[-1].reason == "stopped"
    assert {e.address for e in events} == {handle.address}


async def test_hooks_receive_events_failures_and_dead_letters(counter):
    hooks = RecordingHooks()
    assert isinstance(hooks, RuntimeHooks)

    async with ActorRuntime(hooks=hooks) as runtime:
        handle = await runtime.start(0, counter)

        with pytest.raises(ActorStopped):
            await handle.ask("boom", timeout=1.0)
        await anyio.wait_all_tasks_blocked()

        with pytest.raises(ActorStopped):
            await handle.tell("after")

    assert any(isinstance(e, ActorStarted) for e in hooks.events)
    assert any(isinstance(e, ActorCrashed) for e in hooks.events)
    assert hooks.failures[0].message == "boom"
    assert hooks.failures[0].resumed is False
    assert hooks.dead_letters[-1].message == "after"


async def test_failing_hook_does_not_break_runtime(caplog, counter):
    caplog.set_level(logging.ERROR, logger="courier")

    async with ActorRuntime(hooks=ExplodingHooks()) as runtime:
        handle = await runtime.start(0, counter)
        await handle.tell("inc")

        assert await handle.ask("get", timeout=1.0) == 1

    assert any("hook on_event failed" in r.getMessage() for r in caplog.records)


async def test_on_dead_letter_callback_is_called(counter):
    seen: list[DeadLetter] = []

    async with ActorRuntime(on_dead_letter=seen.append) as runtime:
        handle = await runtime.start(0, counter)
        await handle.stop()

        with pytest.raises(ActorStopped):
            await handle.ask("get", timeout=1.0)

    assert len(seen) == 1
    assert seen[0].expects_reply is True
    assert seen[0].reason == "not_found"
    assert runtime.dead_letters.messages == seen


async def test_lifecycle_is_logged(caplog, counter):
    caplog.set_level(logging.DEBUG, logger="courier")

    async with ActorRuntime("logged") as runtime:
        handle = await runtime.start(0, counter)
        await handle.tell("inc")
        await handle.stop()

    messages = [r.getMessage() for r in caplog.records if r.name == "courier.runtime.logged"]
    assert f"Actor {handle.address} started" in messages
    assert f"Actor {handle.address} received 'inc'" in messages
    assert f"Actor {handle.address} stopped (stopped)" in messages


async def test_injected_logger_is_used(caplog, counter):
    sink = logging.getLogger("tests.sink")
    caplog.set_level(logging.INFO, logger="tests.sink")

    async with ActorRuntime(logger=sink) as runtime:
        await runtime.start(0, counter)

    assert any(r.name == "tests.sink" for r in caplog.records)
    assert runtime.logger is sink

import anyio
import pytest

from courier import ActorNotFound, ActorRuntime, ActorStatus, ActorStopped, Message, StopPolicy
from courier.events import ActorStopped as ActorStoppedEvent

pytestmark = pytest.mark.anyio


async def test_aclose_stops_every_actor(counter):
    runtime = ActorRuntime()
    await runtime.open()

    handles = [await runtime.start(0, counter) for _ in range(3)]
    await runtime.aclose()

    assert not runtime.running
    assert runtime.actors() == ()
    assert all(h.status is ActorStatus.STOPPED for h in handles)

    stopped = [e for e in runtime.events() if isinstance(e, ActorStoppedEvent)]
    assert [e.reason for e in stopped] == ["shutdown"] * 3


async def test_aclose_fails_pending_asks():
    held = anyio.Event()

    def holding(stash, message: Message):
        held.set()
        return [*stash, message], None

    outcomes = []

    async def asker(handle):
        try:
            outcomes.append(await handle.ask("hold", timeout=5.0))
        except ActorStopped as e:
            outcomes.append(e)

    async with anyio.create_task_group() as tg:
        async with ActorRuntime() as runtime:
            handle = await runtime.start([], holding)
            tg.start_soon(asker, handle)
            await held.wait()
        # The asker is still waiting when the runtime closes.

    assert len(outcomes) == 1
    assert isinstance(outcomes[0], ActorStopped)


async def test_operations_after_shutdown_fail(counter):
    async with ActorRuntime() as runtime:
        handle = await runtime.start(0, counter)

    with pytest.raises(ActorNotFound):
        await handle.tell("inc")
    with pytest.raises(ActorNotFound):
        await handle.ask("get", timeout=1.0)


async def test_shutdown_drains_actors_that_ask_for_it(recorder):
    async with ActorRuntime() as runtime:
        handle = await runtime.start([], recorder, stop_policy=StopPolicy.DRAIN)
        for i in range(5):
            handle.tell_nowait(i)

    dead = [dl for dl in runtime.dead_letters.messages if dl.reason == "discarded"]
    assert dead == []
    assert handle.status is ActorStatus.STOPPED


async def test_shutdown_discards_by_default(recorder):
    entered, gate = anyio.Event(), anyio.Event()

    async def gated_recorder(seen, message: Message):
        if message.payload == "block":
            entered.set()
            await gate.wait()
            return seen, None
        return recorder(seen, message)

    async with ActorRuntime() as runtime:
        handle = await runtime.start([], gated_recorder)
        await handle.tell("block")
        await entered.wait()
        for i in range(5):
            handle.tell_nowait(i)
        gate.set()

    discarded = [dl.message for dl in runtime.dead_letters.messages if dl.reason == "discarded"]
    assert discarded == [0, 1, 2, 3, 4]


async def test_aclose_is_idempotent():
    runtime = ActorRuntime()
    await runtime.open()
    await runtime.aclose()
    await runtime.aclose()

    assert not runtime.running

import anyio
import pytest

from courier import (
    ActorRuntime,
    ActorStatus,
    ActorStopped,
    AskTimeout,
    MailboxClosed,
    Message,
    Reply,
    StopPolicy,
    Tell,
)

pytestmark = pytest.mark.anyio


def parked(gate: anyio.Event, seen: list):
    """Waits on `gate` for every message, so its mailbox fills up."""

    async def behavior(state, message: Message):
        await gate.wait()
        seen.append(message.payload)
        if message.expects_reply:
            return state, [Reply(message, message.payload)]
        return state, None

    return behavior


async def _fill(runtime: ActorRuntime, gate: anyio.Event, seen: list, **options):
    # One message in the behavior, one in the single mailbox slot.
    handle = await runtime.start(None, parked(gate, seen), mailbox_capacity=1, **options)
    await handle.tell("working")
    await anyio.wait_all_tasks_blocked()
    await handle.tell("queued")
    return handle


@pytest.mark.parametrize("stop_policy", [StopPolicy.DISCARD, StopPolicy.DRAIN])
async def test_stop_releases_blocked_tell(stop_policy):
    gate = anyio.Event()
    seen: list = []
    outcomes = []

    async with ActorRuntime() as runtime:
        handle = await _fill(runtime, gate, seen, stop_policy=stop_policy)

        async def teller():
            try:
                await handle.tell("late")
            except MailboxClosed as e:
                outcomes.append(e)

        async with anyio.create_task_group() as tg:
            tg.start_soon(teller)
            await anyio.wait_all_tasks_blocked()
            tg.start_soon(runtime.stop, handle)
            await anyio.wait_all_tasks_blocked()

            assert len(outcomes) == 1
            gate.set()

        assert handle.status is ActorStatus.STOPPED

    late = [dl for dl in runtime.dead_letters.messages if dl.message == "late"]
    assert [(dl.kind, dl.reason) for dl in late] == [("tell", "closed")]
    if stop_policy is StopPolicy.DRAIN:
        assert seen == ["working", "queued"]
    else:
        assert seen == ["working"]


async def test_stop_releases_blocked_ask():
    gate = anyio.Event()
    outcomes = []

    async with ActorRuntime() as runtime:
        handle = await _fill(runtime, gate, [])

        async def asker():
            try:
                await handle.ask("late", timeout=None)
            except ActorStopped as e:
                outcomes.append(e)

        async with anyio.create_task_group() as tg:
            tg.start_soon(asker)
            await anyio.wait_all_tasks_blocked()
            tg.start_soon(runtime.stop, handle)
            await anyio.wait_all_tasks_blocked()
            gate.set()

    assert len(outcomes) == 1
    assert isinstance(outcomes[0].__cause__, MailboxClosed)


async def test_blocked_tell_effect_does_not_hang_stop():
    gate = anyio.Event()

    async with ActorRuntime() as runtime:
        sink = await _fill(runtime, gate, [])

        def forwarder(state, message: Message):
            return state, [Tell(sink, message.payload)]

        source = await runtime.start(None, forwarder)
        await source.tell("forwarded")
        await anyio.wait_all_tasks_blocked()
        assert source.status is ActorStatus.RUNNING

        with anyio.fail_after(1):
            await source.stop()

        assert source.status is ActorStatus.STOPPED
        assert sink.status is ActorStatus.RUNNING
        forwarded = [dl for dl in runtime.dead_letters.messages if dl.message == "forwarded"]
        assert forwarded[0].target == sink.address
        assert forwarded[0].reason == "closed"
        gate.set()


async def test_actor_telling_itself_into_a_full_mailbox_can_be_stopped():
    holder = {}

    def doubling(state, message: Message):
        if message.payload == "split":
            return state, [Tell(holder["self"], "left"), Tell(holder["self"], "right")]
        return state, None

    with anyio.fail_after(1):
        async with ActorRuntime() as runtime:
            handle = await runtime.start(None, doubling, mailbox_capacity=1)
            holder["self"] = handle
            await handle.tell("split")
            await anyio.wait_all_tasks_blocked()

            await handle.stop()

    reasons = {dl.message: dl.reason for dl in runtime.dead_letters.messages}
    assert reasons == {"left": "discarded", "right": "closed"}


async def test_blocked_tell_effect_does_not_hang_shutdown():
    gate = anyio.Event()

    with anyio.fail_after(1):
        async with ActorRuntime() as runtime:
            sink = await _fill(runtime, gate, [])

            def forwarder(state, message: Message):
                return state, [Tell(sink, message.payload)]

            source = await runtime.start(None, forwarder)
            await source.tell("forwarded")
            await anyio.wait_all_tasks_blocked()
            # Lets the sink finish once shutdown has closed its mailbox.
            gate.set()

    assert source.status is ActorStatus.STOPPED
    assert sink.status is ActorStatus.STOPPED


async def test_ask_timeout_covers_waiting_for_mailbox_space():
    gate = anyio.Event()

    async with ActorRuntime() as runtime:
        handle = await _fill(runtime, gate, [])

        with anyio.fail_after(1):
            with pytest.raises(AskTimeout):
                await handle.ask("late", timeout=0.05)

        expired = [dl for dl in runtime.dead_letters.messages if dl.message == "late"]
        assert [(dl.kind, dl.reason) for dl in expired] == [("ask", "expired")]
        assert handle.status is ActorStatus.RUNNING
        gate.set()


async def test_ask_deadline_spans_enqueue_and_reply():
    gate = anyio.Event()
    seen: list = []

    async with ActorRuntime() as runtime:
        handle = await _fill(runtime, gate, seen)

        async def release_soon():
            await anyio.sleep(0.05)
            gate.set()

        async with anyio.create_task_group() as tg:
            tg.start_soon(release_soon)
            # Space frees up after 0.05s; the reply needs the rest of the budget.
            assert await handle.ask("next", timeout=1.0) == "next"

        assert seen == ["working", "queued", "next"]

from __future__ import annotations

from typing import Annotated, Any

import anyio
from sayer import Option, error, group, info, success

from courier import ActorHandle, ActorRuntime, AskTimeout, Message, Reply
from courier.conf import settings
from courier.observability import setup_logging

help = """
Demo CLI Module.

**Run small actor scenarios against a fresh runtime**

Each command opens its own runtime, runs one scenario and shuts the
runtime down again.
"""

demo = group(
    name="demo",
    help=help,
)


def _counter(count: int, message: Message) -> tuple[int, Any]:
    if message.payload == "inc":
        return count + 1, None
    if message.payload == "get":
        return count, [Reply(message, count)]
    return count, None


async def _send_many(handle: ActorHandle, messages: int) -> None:
    for _ in range(messages):
        await handle.tell("inc")


@demo.command()
async def counter(
    senders: Annotated[int, Option(help="Number of concurrent senders")] = 10,
    messages: Annotated[int, Option(help="Messages sent by each sender")] = 10,
) -> None:
    """
    Increment one counter actor from several concurrent senders.

    Every sender tells the actor "inc" `messages` times. Once all senders are
    done the counter is asked for its value, which must equal
    `senders * messages`.
    """
    setup_logging(settings.log_level, settings.log_format, settings.logger_name)

    async with ActorRuntime("demo") as runtime:
        handle = await runtime.start(0, _counter)
        async with anyio.create_task_group() as tg:
            for _ in range(senders):
                tg.start_soon(_send_many, handle, messages)
        total = await handle.ask("get")

    expected = senders * messages
    if total != expected:
        error(f"Counter reached {total}, expected {expected}.")
        raise SystemExit(1)
    success(f"Counter reached {total} ({senders} senders x {messages} messages).")


@demo.command()
async def ping(
    delay: Annotated[float, Option(help="Seconds the actor waits before replying")] = 0.01,
    timeout: Annotated[float, Option(help="Seconds the caller waits for the reply")] = 1.0,
) -> None:
    """
    Ask a single actor "ping" and wait for its "pong".

    Exits with status 1 when the reply does not arrive within `timeout`.
    """
    setup_logging(settings.log_level, settings.log_format, settings.logger_name)

    async def pong(state: None, message: Message) -> tuple[None, Any]:
        await anyio.sleep(delay)
        return state, [Reply(message, "pong")]

    async with ActorRuntime("demo") as runtime:
        handle = await runtime.start(None, pong)
        started = anyio.current_time()
        try:
            reply = await handle.ask("ping", timeout=timeout)
        except AskTimeout:
            error(f"No reply within {timeout} seconds.")
            raise SystemExit(1) from None
        elapsed = anyio.current_time() - started

    info(f"Round trip took {elapsed * 1000:.1f} ms.")
    success(f"Received {reply!r}.")

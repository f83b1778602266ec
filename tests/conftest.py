import pytest
from sayer.testing import SayerTestClient

from courier import Message, Reply
from courier.cli.app import app


def _counter(count: int, message: Message):
    if message.payload == "inc":
        return count + 1, None
    if message.payload == "get":
        return count, [Reply(message, count)]
    if message.payload == "boom":
        raise RuntimeError("crash")
    return count, None


def _recorder(seen: list, message: Message):
    if message.payload == "get":
        return seen, [Reply(message, list(seen))]
    return [*seen, message.payload], None


def _echo(state, message: Message):
    return state, [Reply(message, message.payload)]


@pytest.fixture()
def counter():
    """Counts "inc", answers "get" and raises on "boom"."""
    return _counter


@pytest.fixture()
def recorder():
    """Appends every payload to its state and answers "get" with a copy."""
    return _recorder


@pytest.fixture()
def echo():
    return _echo


@pytest.fixture()
def cli() -> SayerTestClient:
    return SayerTestClient(app)


@pytest.fixture(scope="module")
def anyio_backend():
    return ("asyncio", {"debug": True})

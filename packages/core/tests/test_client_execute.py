from unittest.mock import AsyncMock, MagicMock

import pytest

from command_client_core.adapters.memory import InMemoryTransport
from command_client_core.client import ServiceClient
from command_client_core.command import Command
from command_client_core.events.types import (
    CommandErrorEvent,
    Phase,
    PrepareEvent,
    Priority,
    ProcessEvent,
)
from command_client_core.ports.transport import ITransport
from command_client_core.primitives.exceptions import CommandException, TransportError
from command_client_core.transaction import TransactionState

# --- Helpers ---


class ConnError(Exception):
    pass


def serialize(event: PrepareEvent) -> None:
    event.request = {"op": event.command.name, **event.command.parameters}


def deserialize(event: ProcessEvent) -> None:
    event.result = event.response["body"]


def respond(request: dict) -> dict:
    if request["op"] == "Fail":
        raise ConnError("connection refused")
    return {"body": f"{request['op']}-ok"}


def make_client(handler=respond) -> tuple[ServiceClient, InMemoryTransport]:
    transport = InMemoryTransport(handler)
    client = ServiceClient(transport)
    client.pipeline.on(Phase.PREPARE, serialize)
    client.pipeline.on(Phase.PROCESS, deserialize)
    return client, transport


# --- Tests ---


@pytest.mark.asyncio()
async def test_execute_without_listeners_returns_none() -> None:
    transport = InMemoryTransport(lambda request: "pong")
    client = ServiceClient(transport)

    result = await client.execute(Command(name="Ping"))

    assert result is None
    assert transport.sent == [None]


@pytest.mark.asyncio()
async def test_execute_returns_process_result() -> None:
    client, transport = make_client()

    result = await client.execute(client.make_command("GetUser", {"id": 1}))

    assert result == "GetUser-ok"
    assert transport.sent == [{"op": "GetUser", "id": 1}]


@pytest.mark.asyncio()
async def test_prepare_result_short_circuits_transport() -> None:
    transport = AsyncMock(spec=ITransport)
    client = ServiceClient(transport)
    process = MagicMock()
    client.pipeline.on(Phase.PREPARE, lambda e: e.intercept("cached"))
    client.pipeline.on(Phase.PROCESS, process)

    result = await client.execute(Command(name="GetUser"))

    assert result == "cached"
    transport.send.assert_not_called()
    process.assert_not_called()


@pytest.mark.asyncio()
async def test_exactly_one_send_before_process() -> None:
    order: list[str] = []
    transport = AsyncMock(spec=ITransport)
    transport.send.side_effect = lambda request: order.append("send") or "resp"
    client = ServiceClient(transport)
    client.pipeline.on(Phase.PROCESS, lambda e: order.append("process"))

    await client.execute(Command(name="Ping"))

    assert order == ["send", "process"]
    transport.send.assert_called_once()


@pytest.mark.asyncio()
async def test_transport_failure_raises_command_exception() -> None:
    client, _ = make_client()
    command = Command(name="Fail")

    with pytest.raises(CommandException) as exc_info:
        await client.execute(command)

    error = exc_info.value
    assert isinstance(error.cause, TransportError)
    assert isinstance(error.cause.__cause__, ConnError)
    assert error.__cause__ is error.cause
    assert error.command is command
    assert error.request == {"op": "Fail"}
    assert error.response is None
    assert error.transaction.state is TransactionState.FAILED
    assert "connection refused" in str(error)


@pytest.mark.asyncio()
async def test_error_listener_sees_transport_error() -> None:
    client, _ = make_client()
    seen: list[CommandErrorEvent] = []
    client.pipeline.on(Phase.ERROR, seen.append)

    with pytest.raises(CommandException):
        await client.execute(Command(name="Fail"))

    assert len(seen) == 1
    assert isinstance(seen[0].request_error.exception, TransportError)


@pytest.mark.asyncio()
async def test_handled_error_returns_none() -> None:
    client, _ = make_client()
    client.pipeline.on(Phase.ERROR, lambda e: e.mark_handled())

    result = await client.execute(Command(name="Fail"))

    assert result is None


@pytest.mark.asyncio()
async def test_stopped_error_propagation_suppresses_failure() -> None:
    client, _ = make_client()
    later = MagicMock()
    client.pipeline.on(Phase.ERROR, lambda e: e.stop_propagation())
    client.pipeline.on(Phase.ERROR, later, priority=Priority.LATE)

    result = await client.execute(Command(name="Fail"))

    assert result is None
    later.assert_not_called()


@pytest.mark.asyncio()
async def test_intercepted_error_returns_injected_result() -> None:
    client, _ = make_client()
    client.pipeline.on(Phase.ERROR, lambda e: e.intercept("fallback"))

    result = await client.execute(Command(name="Fail"))

    assert result == "fallback"


@pytest.mark.asyncio()
async def test_listener_error_is_wrapped() -> None:
    client, _ = make_client()

    def explode(event: ProcessEvent) -> None:
        raise KeyError("body")

    client.pipeline.on(Phase.PROCESS, explode, priority=Priority.EARLY)

    with pytest.raises(CommandException) as exc_info:
        await client.execute(Command(name="Ping"))

    assert isinstance(exc_info.value.cause, KeyError)
    assert str(exc_info.value).startswith("Error executing command:")


@pytest.mark.asyncio()
async def test_prepare_listener_error_is_wrapped_without_sending() -> None:
    transport = AsyncMock(spec=ITransport)
    client = ServiceClient(transport)

    def explode(event: PrepareEvent) -> None:
        raise ValueError("missing parameter 'id'")

    client.pipeline.on(Phase.PREPARE, explode)

    with pytest.raises(CommandException) as exc_info:
        await client.execute(Command(name="GetUser"))

    assert isinstance(exc_info.value.cause, ValueError)
    transport.send.assert_not_called()


@pytest.mark.asyncio()
async def test_command_exception_from_listener_is_not_wrapped() -> None:
    client, _ = make_client()
    raised: list[CommandException] = []

    def reject(event: PrepareEvent) -> None:
        error = CommandException("rejected", event.transaction)
        raised.append(error)
        raise error

    client.pipeline.on(Phase.PREPARE, reject)

    with pytest.raises(CommandException) as exc_info:
        await client.execute(Command(name="Ping"))

    assert exc_info.value is raised[0]
    assert exc_info.value.cause is None


@pytest.mark.asyncio()
async def test_command_exception_from_transport_passes_through() -> None:
    command = Command(name="Ping")

    async def send(request):
        raise CommandException("from transport", MagicMock(command=command))

    transport = AsyncMock(spec=ITransport)
    transport.send.side_effect = send
    client = ServiceClient(transport)
    error_listener = MagicMock()
    client.pipeline.on(Phase.ERROR, error_listener)

    with pytest.raises(CommandException, match="from transport") as exc_info:
        await client.execute(command)

    assert not isinstance(exc_info.value.cause, CommandException)
    error_listener.assert_not_called()


@pytest.mark.asyncio()
async def test_error_listener_failure_is_wrapped_once() -> None:
    client, _ = make_client()

    def explode(event: CommandErrorEvent) -> None:
        raise RuntimeError("error listener bug")

    client.pipeline.on(Phase.ERROR, explode)

    with pytest.raises(CommandException) as exc_info:
        await client.execute(Command(name="Fail"))

    assert isinstance(exc_info.value.cause, RuntimeError)
    assert not isinstance(exc_info.value.cause, CommandException)


@pytest.mark.asyncio()
async def test_transaction_state_after_success() -> None:
    client, _ = make_client()
    states: list[TransactionState] = []
    client.pipeline.on(
        Phase.PROCESS,
        lambda e: states.append(e.transaction.state),
        priority=Priority.LATE,
    )

    await client.execute(Command(name="Ping"))

    assert states == [TransactionState.SENT]


@pytest.mark.asyncio()
async def test_shared_pipeline_between_clients() -> None:
    first, _ = make_client()
    second = ServiceClient(InMemoryTransport(respond), pipeline=first.pipeline)

    assert await second.execute(Command(name="Ping")) == "Ping-ok"

from unittest.mock import MagicMock

from command_client_core.client import ServiceClient
from command_client_core.command import Command


def test_command_exposes_parameters() -> None:
    command = Command(name="GetUser", parameters={"id": 7})

    assert command.name == "GetUser"
    assert command["id"] == 7
    assert command.get("missing", "fallback") == "fallback"
    assert command.has_param("id")
    assert "id" in command
    assert "other" not in command


def test_command_identity_semantics() -> None:
    first = Command(name="Ping")
    second = Command(name="Ping")

    assert first == first
    assert first != second
    assert len({first, second}) == 2


def test_command_ids_are_unique() -> None:
    assert Command(name="Ping").command_id != Command(name="Ping").command_id


def test_make_command_merges_defaults() -> None:
    client = ServiceClient(MagicMock(), {"defaults": {"region": "eu", "limit": 10}})

    command = client.make_command("ListUsers", {"limit": 50})

    assert command.name == "ListUsers"
    assert command.parameters == {"region": "eu", "limit": 50}


def test_make_command_without_parameters() -> None:
    client = ServiceClient(MagicMock())

    command = client.make_command("Ping")

    assert command.parameters == {}

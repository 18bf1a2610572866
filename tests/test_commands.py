from __future__ import annotations

import json

import pytest

from paddy_remote.services import commands
from paddy_remote.services.commands import (
    CameraCommand,
    DoorAction,
    MoveDirection,
    ScoopDirection,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("command", "expected"),
    [
        (commands.move(MoveDirection.FORWARD), {"type": "move", "cmd": "FORWARD"}),
        (commands.move(MoveDirection.BACKWARD), {"type": "move", "cmd": "BACKWARD"}),
        (commands.move("STOP"), {"type": "move", "cmd": "STOP"}),
        (commands.horn(), {"type": "horn"}),
        (commands.door(DoorAction.OPEN), {"type": "door", "action": "OPEN"}),
        (commands.door("CLOSE"), {"type": "door", "action": "CLOSE"}),
        (commands.scoop(ScoopDirection.UP), {"type": "scoop", "cmd": "UP"}),
        (commands.camera(CameraCommand.LEFT), {"type": "camera", "cmd": "LEFT"}),
        (commands.camera(CameraCommand.START), {"type": "camera", "cmd": "START"}),
        (commands.horn_timer_set(5), {"type": "horn_timer_set", "minutes": 5}),
        (commands.horn_timer_clear(), {"type": "horn_timer_clear"}),
        (commands.controller_connected(), {"type": "controller_connected"}),
    ],
)
def test_command_wire_shape(command: commands.Command, expected: dict):
    assert json.loads(command.encode()) == expected


@pytest.mark.unit
def test_encode_puts_type_first_and_is_compact():
    assert commands.door(DoorAction.OPEN).encode() == '{"type":"door","action":"OPEN"}'


@pytest.mark.unit
def test_commands_are_immutable():
    cmd = commands.horn()
    with pytest.raises(AttributeError):
        cmd.type = "move"  # type: ignore[misc]


@pytest.mark.unit
def test_unknown_direction_rejected():
    with pytest.raises(ValueError):
        commands.move("UPWARD")


@pytest.mark.unit
@pytest.mark.parametrize("minutes", [0, -1, 2.5, True, "5", None])
def test_horn_timer_set_rejects_invalid_minutes(minutes):
    with pytest.raises(ValueError):
        commands.horn_timer_set(minutes)  # type: ignore[arg-type]


@pytest.mark.unit
def test_decode_json_text():
    assert commands.decode_payload('{"type": "battery", "level": 80}') == {
        "type": "battery",
        "level": 80,
    }


@pytest.mark.unit
def test_decode_utf8_json_bytes():
    assert commands.decode_payload(b'{"type":"connection_status","connected":true}') == {
        "type": "connection_status",
        "connected": True,
    }


@pytest.mark.unit
def test_undecodable_payloads_pass_through_unchanged():
    assert commands.decode_payload("hello paddy") == "hello paddy"
    raw = b"\xff\xd8\xff\xe0JFIF"
    assert commands.decode_payload(raw) is raw
    text_bytes = b"not json"
    assert commands.decode_payload(text_bytes) is text_bytes


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        b"\x00\x01",
        bytearray(b"\x00"),
        "data:image/jpeg;base64,/9j/4AAQ",
        "an image arrived",
        "x" * 1001,
        {"type": "image"},
        {"type": "camera_frame", "data": "abc"},
        {"frame": 3},
    ],
)
def test_bulk_media_heuristic_positive(payload):
    assert commands.is_bulk_media(payload)


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    ["hello", "x" * 1000, {"type": "battery", "level": 50}, 42, None, [1, 2]],
)
def test_bulk_media_heuristic_negative(payload):
    assert not commands.is_bulk_media(payload)


@pytest.mark.unit
def test_describe_never_includes_payload_content():
    assert commands.describe({"type": "camera_frame", "data": "A" * 5000}) == (
        "type='camera_frame' keys=2"
    )
    assert commands.describe(b"\x00" * 10) == "bytes[10]"


@pytest.mark.unit
def test_deeply_nested_json_passes_through_unchanged():
    nested = "[" * 100_000
    assert commands.decode_payload(nested) is nested
    nested_bytes = b"[" * 100_000
    assert commands.decode_payload(nested_bytes) is nested_bytes

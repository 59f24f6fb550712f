import pytest

from relaychat.message import (
    MAX_FRAME_SIZE,
    MESSAGE_SIZE,
    NO_MESSAGE,
    UNKNOWN_USER,
    USERNAME_SIZE,
    ChatMessage,
    deserialize,
    serialize,
)


def test_serialize_joins_with_pipe():
    assert serialize("alice", "hi there") == b"alice|hi there"


def test_serialize_empty_message():
    assert serialize("bob", "") == b"bob|"


@pytest.mark.parametrize(
    "username, message",
    [("alice", "hello"), ("bob", "a b c"), ("x", "EXIT"), ("name", "ünïcödé")],
)
def test_round_trip(username, message):
    assert deserialize(serialize(username, message)) == ChatMessage(username, message)


def test_serialize_is_capped_at_frame_size():
    data = serialize("u" * 100, "m" * 1000)
    assert len(data) == MAX_FRAME_SIZE
    assert data.startswith(b"u" * 100 + b"|")


def test_deserialize_empty_gives_defaults():
    assert deserialize(b"") == ChatMessage(UNKNOWN_USER, NO_MESSAGE)


def test_deserialize_defaults_are_source_strings():
    result = deserialize(b"|||")
    assert result.username == "Unknown"
    assert result.message == "Null"


def test_deserialize_username_only():
    assert deserialize(b"carol") == ChatMessage("carol", NO_MESSAGE)
    assert deserialize(b"carol|") == ChatMessage("carol", NO_MESSAGE)


def test_deserialize_skips_leading_and_repeated_separators():
    assert deserialize(b"||dave||hey") == ChatMessage("dave", "hey")


def test_deserialize_drops_fields_after_second():
    assert deserialize(b"eve|one|two") == ChatMessage("eve", "one")


def test_deserialize_stops_at_nul():
    assert deserialize(b"frank|hi\0|junk") == ChatMessage("frank", "hi")


def test_deserialize_accepts_str():
    assert deserialize("grace|yo") == ChatMessage("grace", "yo")


def test_deserialize_truncates_fields():
    result = deserialize(b"u" * 50 + b"|" + b"m" * 400)
    assert result.username == "u" * USERNAME_SIZE
    assert result.message == "m" * MESSAGE_SIZE


def test_chat_message_defaults():
    assert ChatMessage() == ChatMessage(UNKNOWN_USER, NO_MESSAGE)
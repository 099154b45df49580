"""Test the character buffer."""

import pytest

from tilevi.buffer import TextBuffer
from tilevi.errors import UnresolvedPositionError


def test_empty_buffer_has_one_empty_line():
    buf = TextBuffer()
    assert buf.line(0) == ""
    assert buf.line_len(0) == 0
    assert buf.line(1) is None
    assert buf.line_len(1) is None
    assert buf.line_count() == 1


def test_trailing_newline_opens_an_empty_last_line():
    buf = TextBuffer("ab\ncd\n")
    assert buf.line(0) == "ab"
    assert buf.line(1) == "cd"
    assert buf.line(2) == ""
    assert buf.line(3) is None
    assert buf.line(-1) is None


def test_load_strips_carriage_returns_and_remembers_them():
    buf = TextBuffer()
    buf.load(b"one\r\ntwo\r\n")
    assert str(buf) == "one\ntwo\n"
    assert buf.crlf is True
    assert bytes(buf) == b"one\r\ntwo\r\n"


def test_load_without_carriage_returns_writes_plain_newlines():
    buf = TextBuffer()
    buf.load(b"one\ntwo\n")
    assert buf.crlf is False
    assert bytes(buf) == b"one\ntwo\n"


def test_bytes_are_decoded_one_character_each():
    buf = TextBuffer()
    buf.load(b"caf\xc3\xa9\n")
    # Two bytes, two characters
    assert buf.line_len(0) == 5
    assert bytes(buf) == b"caf\xc3\xa9\n"


def test_serialize_encodes_wide_characters_as_utf8():
    buf = TextBuffer("a")
    buf.insert("€", 1, 0)
    out = bytearray(b">")
    buf.serialize(out)
    assert out == bytearray(b">a\xe2\x82\xac")


def test_offset_resolves_line_ends_and_buffer_end():
    buf = TextBuffer("ab\ncd")
    assert buf.offset(0, 0) == 0
    assert buf.offset(2, 0) == 2  # the newline itself
    assert buf.offset(0, 1) == 3
    assert buf.offset(2, 1) == len(buf)


@pytest.mark.parametrize("col,row", [(3, 0), (0, 2), (5, 1)])
def test_offset_rejects_positions_outside_the_text(col, row):
    buf = TextBuffer("ab\ncd")
    with pytest.raises(UnresolvedPositionError):
        buf.offset(col, row)


def test_insert_places_character_before_position():
    buf = TextBuffer("hello\n")
    assert buf.insert("X", 0, 0)
    assert str(buf) == "Xhello\n"
    assert buf.insert("!", 6, 0)
    assert str(buf) == "Xhello!\n"


def test_insert_newline_splits_line():
    buf = TextBuffer("abcd")
    assert buf.insert("\n", 2, 0)
    assert buf.lines() == ["ab", "cd"]


def test_insert_at_unresolvable_position_is_ignored():
    buf = TextBuffer("ab")
    assert buf.insert("x", 7, 0) is False
    assert str(buf) == "ab"


def test_delete_returns_removed_character():
    buf = TextBuffer("ab\ncd")
    assert buf.delete(1, 0) == "b"
    assert buf.delete(1, 0) == "\n"
    assert str(buf) == "acd"


def test_delete_at_end_of_buffer_returns_none():
    buf = TextBuffer("ab")
    assert buf.delete(2, 0) is None
    assert buf.delete(0, 4) is None
    assert str(buf) == "ab"


POSITIONS = [
    ("", 0, 0),
    ("abc", 0, 0),
    ("abc", 3, 0),
    ("ab\ncd", 2, 0),
    ("ab\ncd", 0, 1),
    ("ab\ncd\n", 0, 2),
    ("\n\n", 0, 1),
]


@pytest.mark.parametrize("c", ["x", "\n", "€"])
@pytest.mark.parametrize("text,col,row", POSITIONS)
def test_insert_then_delete_restores_buffer(text, col, row, c):
    buf = TextBuffer(text)
    assert buf.insert(c, col, row)
    assert buf.delete(col, row) == c
    assert str(buf) == text


@pytest.mark.parametrize("text,col,row", [
    ("abc", 0, 0),
    ("abc", 2, 0),
    ("ab\ncd", 2, 0),
    ("ab\ncd", 1, 1),
    ("ab\ncd\n", 2, 1),
    ("\n\n", 0, 0),
])
def test_delete_then_insert_restores_buffer(text, col, row):
    buf = TextBuffer(text)
    removed = buf.delete(col, row)
    assert removed is not None
    assert buf.insert(removed, col, row)
    assert str(buf) == text


@pytest.mark.parametrize("raw,text,written", [
    (b"a\nb\n", "a\nb\n", b"a\nb\n"),
    (b"a\r\nb\r\n", "a\nb\n", b"a\r\nb\r\n"),
    (b"a\r\nb\nc", "a\nb\nc", b"a\r\nb\r\nc"),
    (b"a\nb\r\n\r\n", "a\nb\n\n", b"a\r\nb\r\n\r\n"),
    (b"a\rb", "ab", b"ab"),
    (b"", "", b""),
])
def test_load_then_serialize_normalizes_line_endings(raw, text, written):
    buf = TextBuffer()
    buf.load(raw)
    assert str(buf) == text
    assert bytes(buf) == written

# tests/test_metadata_codec.py

import pytest

from src.Services.trip_notes import encode, decode, strip, replace


SCENARIO_C = (
    "[TRIPMETA:status=completed,startedAt=2024-01-01T08:00:00Z,completedAt=2024-01-01T08:30:00Z]\n"
    "[Start] 10.000000, 105.000000\n"
    "https://maps.example/?q=10.000000,105.000000\n"
    "Ghi chú test"
)


def test_encode_keeps_insertion_order():
    line = encode({"status": "in_progress", "startedAt": "2024-01-01T08:00:00.000Z"})
    assert line == "[TRIPMETA:status=in_progress,startedAt=2024-01-01T08:00:00.000Z]"


def test_decode_reads_encoded_fields():
    fields = {"status": "in_progress", "startedAt": "2024-01-01T08:00:00.000Z"}
    notes = encode(fields) + "\nfree text"
    assert decode(notes) == fields


def test_decode_scenario_c():
    decoded = decode(SCENARIO_C)
    assert decoded["status"] == "completed"
    assert decoded["startedAt"] == "2024-01-01T08:00:00Z"
    assert decoded["completedAt"] == "2024-01-01T08:30:00Z"


def test_decode_without_prefix_is_empty():
    assert decode(None) == {}
    assert decode("") == {}
    assert decode("just some text") == {}


def test_decode_only_looks_at_first_line():
    assert decode("text first\n[TRIPMETA:status=in_progress]") == {}


def test_decode_unterminated_prefix_is_empty():
    assert decode("[TRIPMETA:status=") == {}


def test_decode_malformed_entry_is_empty():
    assert decode("[TRIPMETA:status=completed,garbage]") == {}
    assert decode("[TRIPMETA:=completed]") == {}


def test_decode_empty_body():
    assert decode("[TRIPMETA:]\ntext") == {}


def test_strip_removes_prefix_and_line_break():
    assert strip("[TRIPMETA:status=completed]\nhello\nworld") == "hello\nworld"
    assert strip("[TRIPMETA:status=completed]") == ""


def test_strip_without_prefix_is_unchanged():
    assert strip("hello") == "hello"
    assert strip(None) == ""


def test_strip_unterminated_prefix_is_unchanged():
    assert strip("[TRIPMETA:status=") == "[TRIPMETA:status="


def test_strip_removes_stacked_prefixes():
    assert strip("[TRIPMETA:a=1]\n[TRIPMETA:b=2]\nhello") == "hello"


@pytest.mark.parametrize("notes", [
    "",
    "plain text, no prefix",
    "[TRIPMETA:]",
    "[TRIPMETA:status=completed]",
    "[TRIPMETA:status=completed]\nhello",
    "[TRIPMETA:a=1]\n[TRIPMETA:b=2]\nhello",
    "[TRIPMETA:status=",
    "[TRIPMETA:garbage]\nhello",
    "[TRIPMETA:status=in_progress]\r\nhello",
    SCENARIO_C,
])
def test_strip_is_idempotent(notes):
    once = strip(notes)
    assert strip(once) == once


@pytest.mark.parametrize("fields", [
    {},
    {"status": "completed"},
    {"status": "in_progress", "startedAt": "2024-01-01T08:00:00.000Z"},
    {"status": "completed", "startedAt": "2024-01-01T08:00:00.000Z", "completedAt": "2024-01-01T08:45:00.000Z", "source": "app"},
    {"note": ""},
])
@pytest.mark.parametrize("body", ["", "hello", "[Start] 1.000000, 2.000000\nhttps://www.google.com/maps?q=1.000000,2.000000"])
def test_decode_reads_back_encoded_fields(fields, body):
    notes = encode(fields) + (f"\n{body}" if body else "")
    assert decode(notes) == fields
    assert strip(notes) == body
    assert list(decode(notes)) == list(fields)


@pytest.mark.parametrize("notes", [
    "[TRIPMETA:status=",
    "[TRIPMETA:garbage]",
    "text first\n[TRIPMETA:status=in_progress]",
    "no prefix at all",
])
def test_replace_over_any_input_decodes_to_new_fields(notes):
    result = replace(notes, {"status": "completed"})
    assert decode(result) == {"status": "completed"}


def test_crlf_prefix_is_read():
    notes = "[TRIPMETA:status=in_progress,startedAt=2024-01-01T08:00:00.000Z]\r\nhello"
    assert decode(notes) == {"status": "in_progress", "startedAt": "2024-01-01T08:00:00.000Z"}
    assert strip(notes) == "hello"


def test_replace_swaps_the_prefix():
    notes = "[TRIPMETA:status=in_progress]\n[Start] 1.000000, 2.000000\nhello"
    result = replace(notes, {"status": "completed"})
    assert result == "[TRIPMETA:status=completed]\n[Start] 1.000000, 2.000000\nhello"


def test_replace_on_plain_notes_prepends():
    assert replace("hello", {"status": "completed"}) == "[TRIPMETA:status=completed]\nhello"
    assert replace(None, {"status": "completed"}) == "[TRIPMETA:status=completed]"

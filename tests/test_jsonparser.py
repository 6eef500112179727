import json

import pytest

from ssrkit.jsonparser import JsonParseError, parse, parse_text
from ssrkit.jsonvalue import JsonType


@pytest.mark.parametrize(
    "document",
    [
        '{"server": "0.0.0.0", "server_port": 8388, "fast_open": false}',
        "[1, 2, 3]",
        '[true, false, null, "x"]',
        '{"nested": {"list": [1, [2, {"k": "v"}]]}}',
        "[]",
        "{}",
        '"plain string"',
        "-42",
        "1.5",
        "0.25",
        "1e2",
        "2E+3",
        "5e-1",
        "9223372036854775807",
        '{"esc": "a\\nb\\tc\\"d\\\\e\\/f"}',
        '"\\u00e9\\u4e2d"',
    ],
)
def test_matches_standard_json(document):
    assert parse_text(document).to_python() == json.loads(document)


def test_bytes_input_with_bom():
    document = b'\xef\xbb\xbf{"a": [1]}'
    assert parse(document).to_python() == {"a": [1]}


def test_number_types():
    assert parse_text("2").type is JsonType.INTEGER
    assert parse_text("1.5").type is JsonType.DOUBLE
    assert parse_text("1e2").type is JsonType.DOUBLE


def test_trailing_commas_accepted():
    assert parse_text("[1,2,]").to_python() == json.loads("[1,2]")
    assert parse_text('{"a":1,}').to_python() == json.loads('{"a":1}')


def test_lone_minus_reads_as_zero():
    assert int(parse_text("[-]")[0]) == 0


def test_duplicate_names_are_kept():
    value = parse_text('{"a":1,"a":2}')
    assert [(name, int(item)) for name, item in value.items()] == [("a", 1), ("a", 2)]


def test_nul_ends_document():
    assert int(parse(b"17\x00garbage")) == 17


def test_surrogate_half_kept():
    assert str(parse_text('"\\ud83d"')) == "\ud83d"


def test_escaped_object_name():
    value = parse_text('{"k\\u0041y": true}')
    assert [name for name, _ in value.items()] == ["kAy"]
    assert value.to_python() == {"kAy": True}


def test_line_comment_enabled():
    document = '{"a": 1 // note\n, "b": 2}'
    assert parse_text(document, enable_comments=True).to_python() == {"a": 1, "b": 2}


def test_block_comment_enabled():
    document = "/* head */ [1 /* mid */, 2]"
    assert parse_text(document, enable_comments=True).to_python() == [1, 2]


def test_comment_rejected_when_disabled():
    with pytest.raises(JsonParseError, match="when seeking value"):
        parse_text("// note\n1")


def test_comment_directly_after_number():
    with pytest.raises(JsonParseError, match="Comment not allowed here"):
        parse_text("[1/* c */]", enable_comments=True)


def test_unterminated_block_comment():
    with pytest.raises(JsonParseError, match="Unexpected EOF in block comment"):
        parse_text("1 /* open", enable_comments=True)


def test_bad_comment_opening():
    with pytest.raises(JsonParseError, match="in comment opening sequence"):
        parse_text("1 /x", enable_comments=True)


@pytest.mark.parametrize(
    "document, fragment",
    [
        ("[1 2]", "Expected , before 2"),
        ('{"a" 1}', "Expected : before 1"),
        ("1 x", "Trailing garbage: `x`"),
        ("]", "Unexpected ]"),
        ("tru", "Unknown value"),
        ("nul1", "Unknown value"),
        ('"abc', "Unexpected EOF in string"),
        ("1.", "Expected digit after `.`"),
        ("1e", "Expected digit after `e`"),
        ("-.5", "Expected digit before `.`"),
        ("01", "Unexpected `0` before `1`"),
        ('"\\u12"', "Invalid character value `u`"),
        ("{,}", "in object"),
        ('{"a":1 "b":2}', 'Expected , before "'),
        ("[,1]", "when seeking value"),
    ],
)
def test_error_messages(document, fragment):
    with pytest.raises(JsonParseError) as info:
        parse_text(document)
    assert fragment in str(info.value)


def test_empty_input_fails():
    with pytest.raises(JsonParseError):
        parse(b"")


def test_error_reports_line():
    with pytest.raises(JsonParseError) as info:
        parse_text("[\n\n  x]")
    assert info.value.line == 3
    assert str(info.value).startswith(f"{info.value.line}:{info.value.column}:")


def test_unclosed_array_fails():
    with pytest.raises(JsonParseError, match="Expected , before"):
        parse_text("[1")
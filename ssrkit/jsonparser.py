"""A lenient, byte-oriented JSON parser producing ``JsonValue`` trees.

Behaviour worth knowing:

* a UTF-8 byte order mark at the start is skipped;
* trailing commas in arrays and objects are accepted;
* a NUL byte is treated like the end of the input, so anything after a NUL
  that follows a complete value is ignored;
* integers are 64-bit and wrap on overflow; a lone ``-`` reads as ``0``;
* ``//`` and ``/* */`` comments are accepted when ``enable_comments`` is set,
  but not directly after a number.

Errors carry a ``line:column`` position.  Lines count from 1; on the first
line the column counts from 0, on later lines it counts from the newline.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .jsonescape import decode_escape
from .jsonvalue import JsonType, JsonValue

__all__ = ["JsonParseError", "parse", "parse_text"]

_BOM = b"\xef\xbb\xbf"
_INT64_SPAN = 1 << 64
_INT64_MIN = 1 << 63

_NUL = 0
_LF = ord("\n")
_CR = ord("\r")
_WHITESPACE = frozenset(b" \t\r\n")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_SLASH = ord("/")
_STAR = ord("*")
_COMMA = ord(",")
_COLON = ord(":")
_MINUS = ord("-")
_PLUS = ord("+")
_DOT = ord(".")
_ZERO = ord("0")

_LITERALS = {
    ord("t"): (b"true", JsonType.BOOLEAN, True),
    ord("f"): (b"false", JsonType.BOOLEAN, False),
    ord("n"): (b"null", JsonType.NULL, None),
}


class JsonParseError(ValueError):
    """Raised when a document cannot be parsed."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class _Flag(enum.IntFlag):
    NONE = 0
    NEED_COMMA = enum.auto()
    SEEK_VALUE = enum.auto()
    NEED_COLON = enum.auto()
    DONE = enum.auto()
    LINE_COMMENT = enum.auto()
    BLOCK_COMMENT = enum.auto()


@dataclass
class _Frame:
    node: JsonValue
    key: str | None = None


def _is_digit(byte: int) -> bool:
    return 0x30 <= byte <= 0x39


def _wrap64(value: int) -> int:
    return (value + _INT64_MIN) % _INT64_SPAN - _INT64_MIN


def _pow10(exponent: int) -> float:
    try:
        return 10.0 ** exponent
    except OverflowError:
        return float("inf")


def _char(byte: int) -> str:
    return "EOF" if byte == _NUL else chr(byte)


def _text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8", "surrogatepass")
    except UnicodeDecodeError:
        return raw.decode("utf-8", "surrogateescape")


class _Parser:
    def __init__(self, data: bytes, enable_comments: bool) -> None:
        self.data = data
        self.end = len(data)
        self.comments = enable_comments
        self.line = 1
        self.line_begin = 0
        self.stack: list[_Frame] = []
        self.root: JsonValue | None = None

    # -- helpers ---------------------------------------------------------

    def byte(self, pos: int) -> int:
        return self.data[pos] if pos < self.end else _NUL

    def error(self, pos: int, message: str) -> JsonParseError:
        column = pos - self.line_begin
        return JsonParseError(f"{self.line}:{column}: {message}", self.line, column)

    def string_error(self, pos: int, message: str) -> JsonParseError:
        column = pos - self.line_begin
        return JsonParseError(f"{message} (at {self.line}:{column})", self.line, column)

    def whitespace(self, byte: int, pos: int) -> bool:
        if byte not in _WHITESPACE:
            return False
        if byte == _LF:
            self.line += 1
            self.line_begin = pos
        return True

    @property
    def top(self) -> JsonValue | None:
        return self.stack[-1].node if self.stack else None

    def attach(self, node: JsonValue, flags: _Flag) -> _Flag:
        """Hand a finished value to its parent and return the new flags."""
        flags |= _Flag.NEED_COMMA
        if not self.stack:
            self.root = node
            return flags | _Flag.DONE
        parent = self.stack[-1]
        if parent.node.type is JsonType.ARRAY:
            parent.node.value.append(node)
            flags |= _Flag.SEEK_VALUE
        else:
            parent.node.value.append((parent.key, node))
            parent.key = None
        return flags

    # -- tokens ----------------------------------------------------------

    def read_string(self, pos: int) -> tuple[str, int]:
        """Read string contents starting at ``pos``; return text and closing-quote index."""
        out = bytearray()
        while True:
            byte = self.byte(pos)
            if byte == _NUL:
                raise self.string_error(pos, "Unexpected EOF in string")
            if byte == _QUOTE:
                return _text(bytes(out)), pos
            if byte == _BACKSLASH:
                pos += 1
                if self.byte(pos) == _NUL:
                    raise self.string_error(pos, "Unexpected EOF in string")
                try:
                    decoded, pos = decode_escape(self.data, pos)
                except ValueError:
                    raise self.string_error(pos, "Invalid character value `u`") from None
                out += decoded
                continue
            out.append(byte)
            pos += 1

    def read_number(self, pos: int) -> tuple[JsonValue, int]:
        """Read a number starting at ``pos``; return it and the index of the byte after it."""
        negative = self.byte(pos) == _MINUS
        if negative:
            pos += 1
        integer = 0
        dbl = 0.0
        is_double = False
        digits = 0
        fraction = 0
        exponent = 0
        leading_zero = False
        in_exponent = False
        exp_signed = False
        exp_negative = False

        while True:
            byte = self.byte(pos)
            if self.comments and byte == _SLASH:
                raise self.error(pos, "Comment not allowed here")
            if _is_digit(byte):
                digits += 1
                digit = byte - _ZERO
                if in_exponent:
                    exp_signed = True
                    exponent = exponent * 10 + digit
                elif not is_double:
                    if leading_zero:
                        raise self.error(pos, f"Unexpected `0` before `{chr(byte)}`")
                    if digits == 1 and byte == _ZERO:
                        leading_zero = True
                    integer = _wrap64(integer * 10 + digit)
                else:
                    fraction = _wrap64(fraction * 10 + digit)
                pos += 1
                continue
            if byte in (_PLUS, _MINUS):
                if in_exponent and not exp_signed:
                    exp_signed = True
                    exp_negative = byte == _MINUS
                    pos += 1
                    continue
            elif byte == _DOT and not is_double:
                if not digits:
                    raise self.error(pos, "Expected digit before `.`")
                is_double = True
                dbl = float(integer)
                digits = 0
                pos += 1
                continue

            if not in_exponent:
                if is_double:
                    if not digits:
                        raise self.error(pos, "Expected digit after `.`")
                    dbl += fraction / _pow10(digits)
                if byte in b"eE" and byte != _NUL:
                    in_exponent = True
                    if not is_double:
                        is_double = True
                        dbl = float(integer)
                    digits = 0
                    leading_zero = False
                    pos += 1
                    continue
            else:
                if not digits:
                    raise self.error(pos, "Expected digit after `e`")
                dbl *= _pow10(-exponent if exp_negative else exponent)
            break

        if is_double:
            return JsonValue(JsonType.DOUBLE, -dbl if negative else dbl), pos
        return JsonValue(JsonType.INTEGER, _wrap64(-integer) if negative else integer), pos

    def read_literal(self, pos: int, word: bytes) -> int:
        """Check that ``word`` stands at ``pos``; return the index past it."""
        if self.data.startswith(word, pos):
            return pos + len(word)
        if self.end - pos < len(word) - 1:
            raise self.error(pos, "Unknown value")
        matched = 1
        while matched < len(word) and self.byte(pos + matched) == word[matched]:
            matched += 1
        raise self.error(pos + matched, "Unknown value")

    # -- main loop -------------------------------------------------------

    def run(self) -> JsonValue:
        flags = _Flag.SEEK_VALUE
        pos = 0
        while True:
            byte = self.byte(pos)

            if self.comments:
                if flags & _Flag.LINE_COMMENT:
                    if byte in (_CR, _LF, _NUL):
                        flags &= ~_Flag.LINE_COMMENT
                    else:
                        pos += 1
                    continue
                if flags & _Flag.BLOCK_COMMENT:
                    if byte == _NUL:
                        raise self.error(pos, "Unexpected EOF in block comment")
                    if byte == _STAR and self.byte(pos + 1) == _SLASH and pos + 1 < self.end:
                        flags &= ~_Flag.BLOCK_COMMENT
                        pos += 2
                    else:
                        pos += 1
                    continue
                if byte == _SLASH:
                    pos += 1
                    if pos == self.end:
                        raise self.error(pos, "EOF unexpected")
                    opener = self.data[pos]
                    if opener == _SLASH:
                        flags |= _Flag.LINE_COMMENT
                    elif opener == _STAR:
                        flags |= _Flag.BLOCK_COMMENT
                    else:
                        raise self.error(
                            pos, f"Unexpected `{_char(opener)}` in comment opening sequence"
                        )
                    pos += 1
                    continue

            if flags & _Flag.DONE:
                if byte == _NUL:
                    break
                if self.whitespace(byte, pos):
                    pos += 1
                    continue
                raise self.error(pos, f"Trailing garbage: `{_char(byte)}`")

            if flags & _Flag.SEEK_VALUE:
                flags, pos = self.seek_value(flags, byte, pos)
            else:
                flags, pos = self.in_object(flags, byte, pos)

        assert self.root is not None
        return self.root

    def seek_value(self, flags: _Flag, byte: int, pos: int) -> tuple[_Flag, int]:
        if self.whitespace(byte, pos):
            return flags, pos + 1
        top = self.top
        if byte == ord("]"):
            if top is None or top.type is not JsonType.ARRAY:
                raise self.error(pos, "Unexpected ]")
            flags &= ~(_Flag.NEED_COMMA | _Flag.SEEK_VALUE)
            return self.attach(self.stack.pop().node, flags), pos + 1
        if flags & _Flag.NEED_COMMA:
            if byte == _COMMA:
                return flags & ~_Flag.NEED_COMMA, pos + 1
            raise self.error(pos, f"Expected , before {_char(byte)}")
        if flags & _Flag.NEED_COLON:
            if byte == _COLON:
                return flags & ~_Flag.NEED_COLON, pos + 1
            raise self.error(pos, f"Expected : before {_char(byte)}")

        flags &= ~_Flag.SEEK_VALUE
        if byte == ord("{"):
            self.stack.append(_Frame(JsonValue(JsonType.OBJECT)))
            return flags, pos + 1
        if byte == ord("["):
            self.stack.append(_Frame(JsonValue(JsonType.ARRAY)))
            return flags | _Flag.SEEK_VALUE, pos + 1
        if byte == _QUOTE:
            text, closing = self.read_string(pos + 1)
            return self.attach(JsonValue(JsonType.STRING, text), flags), closing + 1
        if byte in _LITERALS:
            word, jtype, value = _LITERALS[byte]
            after = self.read_literal(pos, word)
            return self.attach(JsonValue(jtype, value), flags), after
        if _is_digit(byte) or byte == _MINUS:
            node, after = self.read_number(pos)
            return self.attach(node, flags), after
        raise self.error(pos, f"Unexpected {_char(byte)} when seeking value")

    def in_object(self, flags: _Flag, byte: int, pos: int) -> tuple[_Flag, int]:
        if self.whitespace(byte, pos):
            return flags, pos + 1
        if byte == _QUOTE:
            if flags & _Flag.NEED_COMMA:
                raise self.error(pos, 'Expected , before "')
            name, closing = self.read_string(pos + 1)
            self.stack[-1].key = name
            return flags | _Flag.SEEK_VALUE | _Flag.NEED_COLON, closing + 1
        if byte == ord("}"):
            flags &= ~_Flag.NEED_COMMA
            return self.attach(self.stack.pop().node, flags), pos + 1
        if byte == _COMMA and flags & _Flag.NEED_COMMA:
            return flags & ~_Flag.NEED_COMMA, pos + 1
        raise self.error(pos, f"Unexpected `{_char(byte)}` in object")


def parse(data: bytes | bytearray | memoryview, enable_comments: bool = False) -> JsonValue:
    """Parse a JSON document given as bytes; raise JsonParseError on bad input."""
    raw = bytes(data)
    if raw.startswith(_BOM):
        raw = raw[len(_BOM):]
    return _Parser(raw, enable_comments).run()


def parse_text(text: str, enable_comments: bool = False) -> JsonValue:
    """Parse a JSON document given as text."""
    return parse(text.encode("utf-8", "surrogatepass"), enable_comments)
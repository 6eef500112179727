"""Decoding of backslash escapes inside JSON string literals.

Strings are handled as bytes.  A ``\\u`` escape names one 16-bit code unit,
which is written out as UTF-8 on its own.  Surrogate halves are not paired;
each half becomes a three-byte sequence.
"""

from __future__ import annotations

_SIMPLE_ESCAPES = {
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
}

_HEX_DIGITS = {
    **{ord(c): i for i, c in enumerate("0123456789")},
    **{ord(c): 10 + i for i, c in enumerate("abcdef")},
    **{ord(c): 10 + i for i, c in enumerate("ABCDEF")},
}


def _as_byte(char: int | str | bytes) -> int:
    if isinstance(char, int):
        return char
    if isinstance(char, (str, bytes)) and len(char) == 1:
        return ord(char)
    raise TypeError(f"expected a single character, got {char!r}")


def hex_value(char: int | str | bytes) -> int:
    """Return the value of one hexadecimal digit.

    ``char`` may be a byte value, a one-character string or a one-byte bytes
    object.  Raises ValueError when it is not a hexadecimal digit.
    """
    byte = _as_byte(char)
    try:
        return _HEX_DIGITS[byte]
    except KeyError:
        raise ValueError(f"not a hexadecimal digit: {char!r}") from None


def encode_uchar(value: int) -> bytes:
    """Encode one 16-bit code unit as one, two or three UTF-8 bytes."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"code unit {value:#x} out of range")
    high, low = value >> 8, value & 0xFF
    if high == 0 and low <= 0x7F:
        return bytes((low,))
    if value <= 0x7FF:
        return bytes((
            0xC0 | ((low & 0xC0) >> 6) | ((high & 0x7) << 2),
            0x80 | (low & 0x3F),
        ))
    return bytes((
        0xE0 | ((high & 0xF0) >> 4),
        0x80 | ((high & 0xF) << 2) | ((low & 0xC0) >> 6),
        0x80 | (low & 0x3F),
    ))


def decode_escape(data: bytes, pos: int) -> tuple[bytes, int]:
    """Decode the escape whose letter is at ``data[pos]``, just after a backslash.

    Returns the decoded bytes and the position just past the escape.  Any
    character other than ``b f n r t u`` stands for itself, so ``\\"``,
    ``\\\\`` and ``\\/`` yield the character after the backslash.  Raises
    ValueError at the end of the data or on a malformed ``\\u`` escape.
    """
    if pos >= len(data):
        raise ValueError("Unexpected EOF in string")
    letter = data[pos]
    if letter in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[letter], pos + 1
    if letter != ord("u"):
        return bytes((letter,)), pos + 1
    digits = data[pos + 1:pos + 5]
    if len(digits) < 4:
        raise ValueError("Invalid character value `u`")
    try:
        value = 0
        for digit in digits:
            value = value * 16 + hex_value(digit)
    except ValueError:
        raise ValueError("Invalid character value `u`") from None
    return encode_uchar(value), pos + 5
"""The loosely JSON-like text format of the nv::Message used by webfig."""

import re
from typing import Callable, Dict, List, Tuple, Union

from .message import MessageFormatError, WinboxMessage

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF

_Text = Union[str, bytes, bytearray, memoryview]

_LEADING_SPACE = "[ \t\n\v\f\r]*"
_DEC_INT = re.compile(_LEADING_SPACE + r"([+-]?)([0-9]+)", re.ASCII)
_HEX_INT = re.compile(
    _LEADING_SPACE + r"([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)", re.ASCII
)

_DIGITS = re.compile(r"([0-9]+)", re.ASCII)
_RAW = re.compile(r"\[([,0-9]+)\]", re.ASCII)
_STRING = re.compile(r"'([^\n\r]+?)'(?:,|})")
_MESSAGE = re.compile(r"(\{[^\n\r]+?\})(?:,|})")
_BOOL_LIST = re.compile(r"\[([0-1,]+)\](?:,|})", re.ASCII)
_INT_LIST = re.compile(r"\[([0-9,]+)\](?:,|})", re.ASCII)
_ANY_LIST = re.compile(r"\[([^\n\r]+?)\](?:,|})")


def _as_text(value: _Text) -> str:
    if isinstance(value, str):
        return value
    return bytes(value).decode("utf-8", errors="surrogateescape")


def _parse_int(text: str, base: int, bits: int) -> int:
    """Parse a leading signed integer, rejecting values outside the signed range."""
    pattern = _HEX_INT if base == 16 else _DEC_INT
    match = pattern.match(text)
    if match is None:
        raise MessageFormatError(f"invalid integer {text!r}")
    value = int(match.group(2), base)
    if match.group(1) == "-":
        value = -value
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise MessageFormatError(f"integer {text!r} out of range")
    return value


def _join(items) -> str:
    return ",".join(items)


def serialize_json(message: WinboxMessage) -> str:
    """Serialize ``message`` to text; IPv6 values and raw arrays are not written."""
    parts: List[str] = []

    parts.extend(f"b{name:x}:{int(flag)}" for name, flag in sorted(message.bools.items()))
    parts.extend(f"u{name:x}:{value}" for name, value in sorted(message.u32s.items()))
    parts.extend(f"q{name:x}:{value}" for name, value in sorted(message.u64s.items()))
    parts.extend(f"s{name:x}:'{text}'" for name, text in sorted(message.strings.items()))
    parts.extend(
        f"r{name:x}:[{_join(str(byte) for byte in data)}]"
        for name, data in sorted(message.raw.items())
    )
    parts.extend(
        f"m{name:x}:{serialize_json(child)}" for name, child in sorted(message.msgs.items())
    )
    parts.extend(
        f"B{name:x}:[{_join(str(int(flag)) for flag in flags)}]"
        for name, flags in sorted(message.bool_arrays.items())
    )
    parts.extend(
        f"U{name:x}:[{_join(str(value) for value in values)}]"
        for name, values in sorted(message.u32_arrays.items())
    )
    parts.extend(
        f"Q{name:x}:[{_join(str(value) for value in values)}]"
        for name, values in sorted(message.u64_arrays.items())
    )
    parts.extend(
        f"S{name:x}:[{_join(f"'{text}'" for text in texts)}]"
        for name, texts in sorted(message.string_arrays.items())
    )
    parts.extend(
        f"M{name:x}:[{_join(serialize_json(child) for child in children)}]"
        for name, children in sorted(message.msg_arrays.items())
    )

    return "{" + ",".join(parts) + "}"


def _match(pattern: "re.Pattern[str]", rest: str, what: str) -> "re.Match[str]":
    match = pattern.match(rest)
    if match is None:
        raise MessageFormatError(f"malformed {what} value")
    return match


def _delimited(pattern: "re.Pattern[str]", rest: str, what: str) -> Tuple[str, str]:
    """Match a value followed by ',' or '}', leaving that delimiter in place."""
    match = _match(pattern, rest, what)
    return match.group(1), rest[match.end() - 1:]


def _parse_bool(message: WinboxMessage, name: int, rest: str) -> str:
    if len(rest) <= 1:
        return rest
    if rest[0] == "1":
        message.bools.setdefault(name, True)
    elif rest[0] == "0":
        message.bools.setdefault(name, False)
    else:
        raise MessageFormatError(f"invalid boolean {rest[0]!r}")
    return rest[1:]


def _parse_u32(message: WinboxMessage, name: int, rest: str) -> str:
    digits = _match(_DIGITS, rest, "u32").group(1)
    message.u32s.setdefault(name, _parse_int(digits, 10, 32) & _MASK32)
    return rest[len(digits):]


def _parse_u64(message: WinboxMessage, name: int, rest: str) -> str:
    digits = _match(_DIGITS, rest, "u64").group(1)
    message.u64s.setdefault(name, _parse_int(digits, 10, 64) & _MASK64)
    return rest[len(digits):]


def _raw_byte(text: str) -> int:
    value = min(int(text) if text else 0, _MASK64)
    return value & 0xFF


def _parse_raw(message: WinboxMessage, name: int, rest: str) -> str:
    match = _match(_RAW, rest, "raw")
    message.raw.setdefault(name, bytes(_raw_byte(item) for item in match.group(1).split(",")))
    return rest[match.end():]


def _parse_string(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_STRING, rest, "string")
    message.strings.setdefault(name, value)
    return rest


def _parse_message(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_MESSAGE, rest, "message")
    message.msgs.setdefault(name, parse_json(value))
    return rest


def _parse_bool_array(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_BOOL_LIST, rest, "boolean array")
    message.bool_arrays.setdefault(name, [item == "1" for item in value.split(",")])
    return rest


def _parse_u32_array(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_INT_LIST, rest, "u32 array")
    message.u32_arrays.setdefault(
        name, [_parse_int(item, 10, 32) & _MASK32 for item in value.split(",")]
    )
    return rest


def _parse_u64_array(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_INT_LIST, rest, "u64 array")
    message.u64_arrays.setdefault(
        name, [_parse_int(item, 10, 64) & _MASK64 for item in value.split(",")]
    )
    return rest


def _unquote(item: str) -> str:
    if len(item) < 2 or item[0] != "'" or item[-1] != "'":
        raise MessageFormatError(f"string array entry {item!r} is not quoted")
    return item[1:-1]


def _parse_string_array(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_ANY_LIST, rest, "string array")
    message.string_arrays.setdefault(name, [_unquote(item) for item in value.split(",")])
    return rest


def _parse_message_array(message: WinboxMessage, name: int, rest: str) -> str:
    value, rest = _delimited(_ANY_LIST, rest, "message array")
    message.msg_arrays.setdefault(name, [parse_json(item) for item in value.split(",")])
    return rest


_HANDLERS: Dict[str, Callable[[WinboxMessage, int, str], str]] = {
    "b": _parse_bool,
    "u": _parse_u32,
    "q": _parse_u64,
    "r": _parse_raw,
    "s": _parse_string,
    "m": _parse_message,
    "B": _parse_bool_array,
    "U": _parse_u32_array,
    "Q": _parse_u64_array,
    "S": _parse_string_array,
    "M": _parse_message_array,
}


def parse_json(text: _Text) -> WinboxMessage:
    """Parse the text form of a message; raise MessageFormatError if it is malformed."""
    source = _as_text(text)
    if len(source) <= 1 or source[0] != "{":
        raise MessageFormatError("message must start with '{'")

    message = WinboxMessage()
    rest = source[1:]
    while len(rest) >= 4:
        kind, rest = rest[0], rest[1:]
        name_text, separator, rest = rest.partition(":")
        if not separator:
            raise MessageFormatError("variable name is not followed by ':'")
        name = _parse_int(name_text, 16, 32) & _MASK32

        handler = _HANDLERS.get(kind)
        if handler is None:
            raise MessageFormatError(f"unknown variable type {kind!r}")
        rest = handler(message, name, rest)

        if not rest or rest[0] not in ",}":
            raise MessageFormatError("variable is not followed by ',' or '}'")
        rest = rest[1:]
    return message
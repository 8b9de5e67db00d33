"""In-memory representation of the RouterOS nv::Message."""

import copy
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Union

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
IP6_LENGTH = 16

# Well-known variable names.
SYS_TO = 0x00FF0001
FROM = 0x00FF0002
REPLY_EXPECTED = 0x00FF0005
REQUEST_ID = 0x00FF0006
COMMAND = 0x00FF0007
ERROR_CODE = 0x00FF0008
ERROR_STRING = 0x00FF0009
SESSION_ID = 0x00FE0001


class ErrorCode(IntEnum):
    """Error codes the server may report in the error-code variable."""

    NOT_IMPLEMENTED = 0x00FE0002
    NOT_IMPLEMENTED_V2 = 0x00FE0003
    OBJECT_NONEXISTENT = 0x00FE0004
    NOT_PERMITTED = 0x00FE0009
    TIMEOUT = 0x00FE000D
    OBJECT_NONEXISTENT_2 = 0x00FE0011
    BUSY = 0x00FE0012


_ERROR_TEXT = {
    ErrorCode.NOT_IMPLEMENTED: "Feature not implemented",
    ErrorCode.NOT_IMPLEMENTED_V2: "Feature not implemented",
    ErrorCode.OBJECT_NONEXISTENT: "Object doesn't exist",
    ErrorCode.OBJECT_NONEXISTENT_2: "Object doesn't exist",
    ErrorCode.NOT_PERMITTED: "Not permitted",
    ErrorCode.TIMEOUT: "Timeout",
    ErrorCode.BUSY: "Busy",
}

_Text = Union[str, bytes, bytearray]


class MessageFormatError(ValueError):
    """Raised when a message or one of its values is malformed."""


def _to_text(value: _Text) -> str:
    if isinstance(value, str):
        return value
    return bytes(value).decode("utf-8", errors="surrogateescape")


def _to_ip6(value) -> bytes:
    data = bytes(value)
    if len(data) != IP6_LENGTH:
        raise MessageFormatError(f"IPv6 value must be {IP6_LENGTH} bytes, got {len(data)}")
    return data


@dataclass
class WinboxMessage:
    """A set of typed variables keyed by their 24-bit numeric names.

    Strings are held as ``str``; raw values and IPv6 addresses as ``bytes``.
    """

    bools: Dict[int, bool] = field(default_factory=dict)
    u32s: Dict[int, int] = field(default_factory=dict)
    u64s: Dict[int, int] = field(default_factory=dict)
    ip6s: Dict[int, bytes] = field(default_factory=dict)
    strings: Dict[int, str] = field(default_factory=dict)
    msgs: Dict[int, "WinboxMessage"] = field(default_factory=dict)
    raw: Dict[int, bytes] = field(default_factory=dict)
    bool_arrays: Dict[int, List[bool]] = field(default_factory=dict)
    u32_arrays: Dict[int, List[int]] = field(default_factory=dict)
    u64_arrays: Dict[int, List[int]] = field(default_factory=dict)
    ip6_arrays: Dict[int, List[bytes]] = field(default_factory=dict)
    string_arrays: Dict[int, List[str]] = field(default_factory=dict)
    msg_arrays: Dict[int, List["WinboxMessage"]] = field(default_factory=dict)
    raw_arrays: Dict[int, List[bytes]] = field(default_factory=dict)

    def reset(self) -> None:
        """Remove every variable from the message."""
        for variable_map in fields(self):
            getattr(self, variable_map.name).clear()

    # -- errors -----------------------------------------------------------

    def has_error(self) -> bool:
        """True if the message carries an error string or error code."""
        return ERROR_STRING in self.strings or ERROR_CODE in self.u32s

    def get_error_string(self) -> str:
        """Return the error text, or an empty string if there is no error."""
        if ERROR_STRING in self.strings:
            return self.strings[ERROR_STRING]
        if ERROR_CODE in self.u32s:
            try:
                return _ERROR_TEXT[ErrorCode(self.u32s[ERROR_CODE])]
            except ValueError:
                return "Unknown error code"
        return ""

    def get_session_id(self) -> int:
        """Return the session id variable, or 0 if absent."""
        return self.get_u32(SESSION_ID)

    # -- getters ----------------------------------------------------------

    def get_boolean(self, name: int) -> bool:
        return self.bools.get(name, False)

    def get_u32(self, name: int) -> int:
        return self.u32s.get(name, 0)

    def get_u64(self, name: int) -> int:
        return self.u64s.get(name, 0)

    def get_ip6(self, name: int) -> bytes:
        return self.ip6s.get(name, bytes(IP6_LENGTH))

    def get_string(self, name: int) -> str:
        return self.strings.get(name, "")

    def get_msg(self, name: int) -> "WinboxMessage":
        found = self.msgs.get(name)
        return copy.deepcopy(found) if found is not None else WinboxMessage()

    def get_raw(self, name: int) -> bytes:
        return self.raw.get(name, b"")

    def get_boolean_array(self, name: int) -> List[bool]:
        return list(self.bool_arrays.get(name, ()))

    def get_u32_array(self, name: int) -> List[int]:
        return list(self.u32_arrays.get(name, ()))

    def get_u64_array(self, name: int) -> List[int]:
        return list(self.u64_arrays.get(name, ()))

    def get_ip6_array(self, name: int) -> List[bytes]:
        return list(self.ip6_arrays.get(name, ()))

    def get_string_array(self, name: int) -> List[str]:
        return list(self.string_arrays.get(name, ()))

    def get_msg_array(self, name: int) -> List["WinboxMessage"]:
        return copy.deepcopy(self.msg_arrays.get(name, []))

    def get_raw_array(self, name: int) -> List[bytes]:
        return list(self.raw_arrays.get(name, ()))

    # -- routing helpers --------------------------------------------------

    def set_to(self, to: int, handler: Optional[int] = None) -> None:
        """Set the destination (and optionally the handler), replacing any previous one."""
        self.u32_arrays.pop(SYS_TO, None)
        destination = [to] if handler is None else [to, handler]
        self.add_u32_array(SYS_TO, destination)

    def set_command(self, command: int) -> None:
        self.add_u32(COMMAND, command)

    def set_reply_expected(self, reply_expected: bool) -> None:
        self.add_boolean(REPLY_EXPECTED, reply_expected)

    def set_request_id(self, request_id: int) -> None:
        self.add_u32(REQUEST_ID, request_id)

    def set_session_id(self, session_id: int) -> None:
        self.add_u32(SESSION_ID, session_id)

    # -- adders -----------------------------------------------------------
    # Booleans and u32 values overwrite; every other kind keeps the first value added.

    def add_boolean(self, name: int, value: bool) -> None:
        self.bools[name] = bool(value)

    def add_u32(self, name: int, value: int) -> None:
        self.u32s[name] = value & _MASK32

    def add_u64(self, name: int, value: int) -> None:
        self.u64s.setdefault(name, value & _MASK64)

    def add_ip6(self, name: int, value) -> None:
        self.ip6s.setdefault(name, _to_ip6(value))

    def add_string(self, name: int, value: _Text) -> None:
        self.strings.setdefault(name, _to_text(value))

    def add_msg(self, name: int, value: "WinboxMessage") -> None:
        self.msgs.setdefault(name, copy.deepcopy(value))

    def add_raw(self, name: int, value) -> None:
        self.raw.setdefault(name, bytes(value))

    def add_boolean_array(self, name: int, value: Iterable[bool]) -> None:
        self.bool_arrays.setdefault(name, [bool(item) for item in value])

    def add_u32_array(self, name: int, value: Iterable[int]) -> None:
        self.u32_arrays.setdefault(name, [item & _MASK32 for item in value])

    def add_u64_array(self, name: int, value: Iterable[int]) -> None:
        self.u64_arrays.setdefault(name, [item & _MASK64 for item in value])

    def add_ip6_array(self, name: int, value: Iterable) -> None:
        self.ip6_arrays.setdefault(name, [_to_ip6(item) for item in value])

    def add_string_array(self, name: int, value: Iterable[_Text]) -> None:
        self.string_arrays.setdefault(name, [_to_text(item) for item in value])

    def add_msg_array(self, name: int, value: Iterable["WinboxMessage"]) -> None:
        self.msg_arrays.setdefault(name, [copy.deepcopy(item) for item in value])

    def add_raw_array(self, name: int, value: Iterable) -> None:
        self.raw_arrays.setdefault(name, [bytes(item) for item in value])

    def erase_u32(self, name: int) -> None:
        self.u32s.pop(name, None)
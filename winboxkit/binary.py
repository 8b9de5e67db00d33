"""Binary (M2) wire format of the nv::Message."""

import struct
from enum import IntEnum
from typing import Callable, List, Optional, TypeVar, Union

from .message import MessageFormatError, WinboxMessage

_MASK32 = 0xFFFFFFFF
SHORT_LENGTH = 0x01000000
TYPE_MASK = 0xF8000000
NAME_MASK = 0x00FFFFFF
M2_MAGIC = b"M2"

_T = TypeVar("_T")
_BytesLike = Union[bytes, bytearray, memoryview]


class VariableType(IntEnum):
    """Type codes held in the top five bits of a variable's type-name word."""

    BOOL = 0x00000000
    U32 = 0x08000000
    U64 = 0x10000000
    IP6 = 0x18000000
    STRING = 0x20000000
    MESSAGE = 0x28000000
    RAW = 0x30000000
    BOOL_ARRAY = 0x80000000
    U32_ARRAY = 0x88000000
    U64_ARRAY = 0x90000000
    IP6_ARRAY = 0x98000000
    STRING_ARRAY = 0xA0000000
    MESSAGE_ARRAY = 0xA8000000
    RAW_ARRAY = 0xB0000000


def _encode_text(value: str) -> bytes:
    return value.encode("utf-8", errors="surrogateescape")


def _decode_text(value: bytes) -> str:
    return value.decode("utf-8", errors="surrogateescape")


def _type_word(kind: int, name: int) -> bytes:
    return struct.pack("<I", (kind | name) & _MASK32)


def _u16(value: int, what: str) -> bytes:
    if value > 0xFFFF:
        raise MessageFormatError(f"{what} of {value} does not fit in 16 bits")
    return struct.pack("<H", value)


def _sized(kind: int, name: int, payload: bytes) -> bytes:
    """Encode a length-prefixed value, using the one-byte form when it fits."""
    if len(payload) > 255:
        return _type_word(kind, name) + _u16(len(payload), "value length") + payload
    return _type_word(kind | SHORT_LENGTH, name) + bytes((len(payload),)) + payload


def _array_header(kind: int, name: int, count: int) -> bytes:
    return _type_word(kind, name) + _u16(count, "array size")


def _chunked_array(kind: int, name: int, chunks: List[bytes]) -> bytes:
    parts = [_array_header(kind, name, len(chunks))]
    for chunk in chunks:
        parts.append(_u16(len(chunk), "array entry length"))
        parts.append(chunk)
    return b"".join(parts)


def serialize_binary(message: WinboxMessage) -> bytes:
    """Serialize ``message`` to the binary format (without the leading ``M2``)."""
    out = []

    for name, flag in sorted(message.bools.items()):
        out.append(_type_word(SHORT_LENGTH if flag else VariableType.BOOL, name))

    for name, value in sorted(message.u32s.items()):
        if value > 255:
            out.append(_type_word(VariableType.U32, name) + struct.pack("<I", value))
        else:
            out.append(_type_word(VariableType.U32 | SHORT_LENGTH, name) + bytes((value,)))

    for name, value in sorted(message.u64s.items()):
        out.append(_type_word(VariableType.U64, name) + struct.pack("<Q", value))

    for name, address in sorted(message.ip6s.items()):
        out.append(_type_word(VariableType.IP6, name) + bytes(address))

    for name, text in sorted(message.strings.items()):
        out.append(_sized(VariableType.STRING, name, _encode_text(text)))

    for name, child in sorted(message.msgs.items()):
        out.append(_sized(VariableType.MESSAGE, name, M2_MAGIC + serialize_binary(child)))

    for name, data in sorted(message.raw.items()):
        out.append(_sized(VariableType.RAW, name, bytes(data)))

    for name, flags in sorted(message.bool_arrays.items()):
        out.append(_array_header(VariableType.BOOL_ARRAY, name, len(flags)))
        out.append(bytes(1 if flag else 0 for flag in flags))

    for name, values in sorted(message.u32_arrays.items()):
        out.append(_array_header(VariableType.U32_ARRAY, name, len(values)))
        out.append(struct.pack(f"<{len(values)}I", *values))

    for name, values in sorted(message.u64_arrays.items()):
        out.append(_array_header(VariableType.U64_ARRAY, name, len(values)))
        out.append(struct.pack(f"<{len(values)}Q", *values))

    for name, addresses in sorted(message.ip6_arrays.items()):
        out.append(_array_header(VariableType.IP6_ARRAY, name, len(addresses)))
        out.extend(bytes(address) for address in addresses)

    for name, texts in sorted(message.string_arrays.items()):
        out.append(_chunked_array(VariableType.STRING_ARRAY, name, [_encode_text(t) for t in texts]))

    # Entries of a message array are written without their own M2 prefix.
    for name, children in sorted(message.msg_arrays.items()):
        out.append(_chunked_array(VariableType.MESSAGE_ARRAY, name, [serialize_binary(c) for c in children]))

    for name, chunks in sorted(message.raw_arrays.items()):
        out.append(_chunked_array(VariableType.RAW_ARRAY, name, [bytes(c) for c in chunks]))

    return b"".join(out)


class _Parser:
    """Walks a binary message, storing each recognised variable (first value wins)."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.message = WinboxMessage()
        self._handlers = {
            VariableType.BOOL: self._bool,
            VariableType.U32: self._u32,
            VariableType.U64: self._u64,
            VariableType.IP6: self._ip6,
            VariableType.STRING: self._blob,
            VariableType.RAW: self._blob,
            VariableType.MESSAGE: self._message,
            VariableType.BOOL_ARRAY: self._bool_array,
            VariableType.U32_ARRAY: self._u32_array,
            VariableType.U64_ARRAY: self._u64_array,
            VariableType.IP6_ARRAY: self._ip6_array,
            VariableType.STRING_ARRAY: self._text_array,
            VariableType.RAW_ARRAY: self._text_array,
            VariableType.MESSAGE_ARRAY: self._message_array,
        }

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _take(self, count: int) -> bytes:
        chunk = self.data[self.pos:self.pos + count]
        self.pos += len(chunk)
        return chunk

    def _take_u16(self) -> int:
        return struct.unpack("<H", self._take(2))[0]

    def run(self) -> WinboxMessage:
        while self.remaining >= 4:
            (type_name,) = struct.unpack("<I", self._take(4))
            kind = type_name & TYPE_MASK
            handler = self._handlers.get(kind)
            if handler is not None:
                handler(VariableType(kind), type_name & NAME_MASK, bool(type_name & SHORT_LENGTH))
        return self.message

    def _bool(self, kind, name, short):
        self.message.bools.setdefault(name, short)

    def _u32(self, kind, name, short):
        if short and self.remaining:
            self.message.u32s.setdefault(name, self._take(1)[0])
        elif self.remaining >= 4:
            self.message.u32s.setdefault(name, struct.unpack("<I", self._take(4))[0])

    def _u64(self, kind, name, short):
        if self.remaining >= 8:
            self.message.u64s.setdefault(name, struct.unpack("<Q", self._take(8))[0])

    def _ip6(self, kind, name, short):
        if self.remaining >= 16:
            self.message.ip6s.setdefault(name, self._take(16))

    def _length(self, short) -> int:
        return self._take(1)[0] if short else self._take_u16()

    def _blob(self, kind, name, short):
        if self.remaining < 2:
            return
        length = self._length(short)
        # A value longer than what is left swallows the rest of the message.
        value = self._take(min(length, self.remaining))
        if kind is VariableType.RAW:
            self.message.raw.setdefault(name, value)
        else:
            self.message.strings.setdefault(name, _decode_text(value))

    def _message(self, kind, name, short):
        if self.remaining < 2:
            return
        length = self._length(short)
        if self.remaining >= length:
            value = self.data[self.pos:self.pos + length]
            if len(value) > 2 and value.startswith(M2_MAGIC):
                self.message.msgs.setdefault(name, parse_binary(value[2:]))
                self.pos += length
        elif self.remaining > 2 and self.data.startswith(M2_MAGIC, self.pos):
            rest = self._take(self.remaining)
            self.message.msgs.setdefault(name, parse_binary(rest[2:]))

    def _fixed_array(self, width: int, convert: Callable[[bytes], _T]) -> Optional[List[_T]]:
        if self.remaining < 2:
            return None
        entries = self._take_u16()
        if self.remaining < entries * width:
            return []
        return [convert(self._take(width)) for _ in range(entries)]

    def _bool_array(self, kind, name, short):
        items = self._fixed_array(1, lambda chunk: chunk[0] == 1)
        if items is not None:
            self.message.bool_arrays.setdefault(name, items)

    def _u32_array(self, kind, name, short):
        items = self._fixed_array(4, lambda chunk: struct.unpack("<I", chunk)[0])
        if items is not None:
            self.message.u32_arrays.setdefault(name, items)

    def _u64_array(self, kind, name, short):
        items = self._fixed_array(8, lambda chunk: struct.unpack("<Q", chunk)[0])
        if items is not None:
            self.message.u64_arrays.setdefault(name, items)

    def _ip6_array(self, kind, name, short):
        items = self._fixed_array(16, bytes)
        if items is not None:
            self.message.ip6_arrays.setdefault(name, items)

    def _chunked_array(self, min_width: int, convert: Callable[[bytes], Optional[_T]]) -> Optional[List[_T]]:
        if self.remaining < 2:
            return None
        entries = self._take_u16()
        items: List[_T] = []
        if self.remaining < entries * min_width:
            return items
        end = len(self.data)
        consumed = self.pos
        for _ in range(entries):
            if consumed >= end:
                break
            if consumed + 2 < end:
                (length,) = struct.unpack_from("<H", self.data, consumed)
                consumed += 2
                if consumed + length <= end:
                    item = convert(self.data[consumed:consumed + length])
                    if item is not None:
                        items.append(item)
                        consumed += length
        self.pos = consumed
        return items

    def _text_array(self, kind, name, short):
        if kind is VariableType.RAW_ARRAY:
            items = self._chunked_array(3, bytes)
            if items is not None:
                self.message.raw_arrays.setdefault(name, items)
        else:
            items = self._chunked_array(3, _decode_text)
            if items is not None:
                self.message.string_arrays.setdefault(name, items)

    def _message_array(self, kind, name, short):
        def convert(chunk: bytes) -> Optional[WinboxMessage]:
            if len(chunk) > 2 and chunk.startswith(M2_MAGIC):
                return parse_binary(chunk[2:])
            return None

        items = self._chunked_array(6, convert)
        if items is not None:
            self.message.msg_arrays.setdefault(name, items)


def parse_binary(data: _BytesLike) -> WinboxMessage:
    """Parse a binary message; a leading ``M2`` marker is skipped if present."""
    payload = bytes(data)
    if len(payload) > 2 and payload.startswith(M2_MAGIC):
        payload = payload[2:]
    return _Parser(payload).run()
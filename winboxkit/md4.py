"""MD4 message digest."""

import struct

_MASK32 = 0xFFFFFFFF

_K = (0, 0x5A827999, 0x6ED9EBA1)

# Right-rotation amounts per round (equivalent to left rotations 3,7,11,19 etc.).
_SHIFTS = (
    (29, 25, 21, 13),
    (29, 27, 23, 19),
    (29, 23, 21, 17),
)

_ORDER = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (0, 4, 8, 12, 1, 5, 9, 13, 2, 6, 10, 14, 3, 7, 11, 15),
    (0, 8, 4, 12, 2, 10, 6, 14, 1, 9, 5, 13, 3, 11, 7, 15),
)


def _rrotate(value: int, count: int) -> int:
    return ((value >> count) | (value << (32 - count))) & _MASK32


def _round_function(round_number: int, b: int, c: int, d: int) -> int:
    if round_number == 0:
        return ((c ^ d) & b) ^ d
    if round_number == 1:
        return (b & c) | (b & d) | (c & d)
    return b ^ c ^ d


def _pad(data: bytes) -> bytes:
    length = len(data)
    total = (length + 9 + 63) & ~63
    # Only the low 32 bits of the bit count are stored.
    return (
        data
        + b"\x80"
        + bytes(total - length - 9)
        + struct.pack("<II", (length * 8) & _MASK32, 0)
    )


def md4(data: bytes) -> bytes:
    """Return the 16-byte MD4 digest of ``data``."""
    message = _pad(bytes(data))
    h = [0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476]

    for offset in range(0, len(message), 64):
        words = struct.unpack_from("<16I", message, offset)
        a, b, c, d = h
        for step in range(48):
            round_number = step >> 4
            t = (
                a
                + words[_ORDER[round_number][step & 0xF]]
                + _K[round_number]
                + _round_function(round_number, b, c, d)
            ) & _MASK32
            t = _rrotate(t, _SHIFTS[round_number][step & 3])
            a, b, c, d = d, t, b, c
        h = [(x + y) & _MASK32 for x, y in zip(h, (a, b, c, d))]

    return struct.pack("<4I", *h)
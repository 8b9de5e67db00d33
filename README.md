# winboxkit

A Python library for building, reading and writing RouterOS `nv::Message`
values, the typed variable sets carried by the Winbox service and the WebFig
`/jsproxy` endpoint. It also provides the MD4 digest and the RC4 stream
cipher used when keying those channels.

It has no runtime dependencies beyond the standard library.

## Installation

```
pip install .
```

Tests need the `test` extra:

```
pip install .[test]
pytest
```

## Messages

`winboxkit.message.WinboxMessage` holds typed variables keyed by a 24-bit
numeric name: booleans, 32- and 64-bit integers, IPv6 addresses (16 bytes),
strings, raw bytes, nested messages, and arrays of each.

```python
from winboxkit.message import WinboxMessage

msg = WinboxMessage()
msg.set_to(13, 4)           # destination and handler
msg.set_command(4)
msg.set_request_id(2)
msg.set_reply_expected(True)
msg.add_string(1, "admin")
msg.add_raw(9, b"\x00\x01")

msg.get_string(1)           # "admin"
msg.get_u32(0x99)           # 0 when absent
```

`add_boolean`, `add_u32` and `set_to` replace an existing value; every other
`add_*` method keeps the first value stored under a name. Getters return a
zero, empty or default value when the name is absent. `erase_u32` removes a
32-bit value and `reset` empties the message.

`has_error()` reports whether the message carries an error string or error
code, and `get_error_string()` returns the server's text or a description of
a known code from `winboxkit.message.ErrorCode` ("Unknown error code"
otherwise). `get_session_id()` reads the session id variable.

## Binary format

`winboxkit.binary` reads and writes the M2 wire body:

```python
from winboxkit.binary import serialize_binary, parse_binary

wire = serialize_binary(msg)    # without the leading b"M2"
again = parse_binary(wire)      # a leading b"M2" is skipped if present
```

Variables are written grouped by type and sorted by name; short values use
the one-byte length form. `parse_binary` is lenient: unknown types are
skipped and truncated values are handled as the device does rather than
rejected. Lengths or counts that do not fit in 16 bits raise
`MessageFormatError` when serializing.

## WebFig text format

`winboxkit.nvjson` handles the loosely JSON-like text form:

```python
from winboxkit.nvjson import serialize_json, parse_json

text = serialize_json(msg)      # e.g. "{b0:...,u...}"
again = parse_json(text)
```

`serialize_json` does not write IPv6 values, IPv6 arrays or raw arrays.
`parse_json` raises `winboxkit.message.MessageFormatError` on malformed
input. It relies on simple patterns, so strings and nested messages
containing `,`, `'`, `}` or `]` may not read back correctly.

## Primitives

```python
from winboxkit.md4 import md4
from winboxkit.rc4 import RC4

digest = md4(b"abc")            # 16 bytes

cipher = RC4(b"secret")         # drops the first 768 keystream bytes
stream = cipher.keystream(8)
plain = cipher.decrypt(b"\x01\x02\x03", 0)
```

`RC4.decrypt(data, offset)` XORs `data[offset:]` with the keystream and pads
the result with zero bytes up to `len(data)`; as a stream cipher the same
call also encrypts. An empty key raises `ValueError`.

## What the package does not do

The package works on messages and primitives only. It opens no network
connections: it has no Winbox or `/jsproxy` client, no login or key
exchange, no DES challenge responses and no file transfer. Sending and
receiving the bytes it produces is left to the caller.
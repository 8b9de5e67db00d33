"""RC4 stream cipher that discards the first 768 keystream bytes."""

from typing import Optional, Union

_DROP = 768

_BytesLike = Union[bytes, bytearray, memoryview]


class RC4:
    """An RC4 generator; keying it resets the state and drops 768 bytes."""

    def __init__(self, key: Optional[Union[str, _BytesLike]] = None):
        self._state = [0] * 256
        self._i = 0
        self._j = 0
        if key is not None:
            self.set_key(key)

    def set_key(self, key: Union[str, _BytesLike]) -> None:
        """Run the key schedule and discard the first 768 keystream bytes."""
        material = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        if not material:
            raise ValueError("RC4 key must not be empty")
        state = list(range(256))
        j = 0
        for i in range(256):
            j = (j + material[i % len(material)] + state[i]) & 0xFF
            state[i], state[j] = state[j], state[i]
        self._state = state
        self._i = 0
        self._j = 0
        for _ in range(_DROP):
            self.gen()

    def gen(self) -> int:
        """Return the next keystream byte."""
        state = self._state
        i = self._i = (self._i + 1) & 0xFF
        j = self._j = (self._j + state[i]) & 0xFF
        state[i], state[j] = state[j], state[i]
        return state[(state[i] + state[j]) & 0xFF]

    def keystream(self, length: int) -> bytes:
        """Return the next ``length`` keystream bytes."""
        return bytes(self.gen() for _ in range(length))

    def decrypt(self, data: _BytesLike, offset: int = 0) -> bytes:
        """XOR ``data[offset:]`` with the keystream, zero-padded to ``len(data)``."""
        source = bytes(data)
        if not 0 <= offset <= len(source):
            raise ValueError("offset lies outside the data")
        body = bytes(byte ^ self.gen() for byte in source[offset:])
        return body + bytes(offset)
import pytest

from winboxkit.md4 import md4


def test_empty_message():
    assert md4(b"").hex() == "31d6cfe0d16ae931b73c59d7e0c089c0"


def test_abc():
    assert md4(b"abc").hex() == "a448017aaf21d8525fc10ae87aa6729d"


def test_message_digest():
    assert md4(b"message digest").hex() == "d9130a8164549fe818874806e1c7014b"


@pytest.mark.parametrize("length", [0, 1, 55, 56, 63, 64, 65, 119, 120, 200])
def test_digest_length_across_block_boundaries(length):
    assert len(md4(b"x" * length)) == 16


def test_padding_boundaries_give_distinct_digests():
    digests = {md4(b"y" * n) for n in (54, 55, 56, 57, 63, 64, 65)}
    assert len(digests) == 7


def test_deterministic_and_type_agnostic():
    data = bytes(range(256)) * 3
    assert md4(data) == md4(bytearray(data))
    assert md4(data) == md4(memoryview(data))


def test_single_bit_change_changes_digest():
    assert md4(b"\x00" * 64) != md4(b"\x00" * 63 + b"\x01")
import pytest

from winboxkit.message import MessageFormatError, WinboxMessage


def test_empty_message_defaults():
    msg = WinboxMessage()
    assert msg.get_boolean(1) is False
    assert msg.get_u32(1) == 0
    assert msg.get_u64(1) == 0
    assert msg.get_ip6(1) == bytes(16)
    assert msg.get_string(1) == ""
    assert msg.get_raw(1) == b""
    assert msg.get_msg(1) == WinboxMessage()
    assert msg.get_boolean_array(1) == []
    assert msg.get_u32_array(1) == []
    assert msg.get_u64_array(1) == []
    assert msg.get_ip6_array(1) == []
    assert msg.get_string_array(1) == []
    assert msg.get_msg_array(1) == []
    assert msg.get_raw_array(1) == []
    assert msg.has_error() is False
    assert msg.get_error_string() == ""


def test_scalar_values_round_trip():
    msg = WinboxMessage()
    msg.add_boolean(1, True)
    msg.add_u32(2, 4096)
    msg.add_u64(3, 1 << 40)
    msg.add_ip6(4, bytes(range(16)))
    msg.add_string(5, "admin")
    msg.add_raw(6, b"\x00\x01\xff")
    assert msg.get_boolean(1) is True
    assert msg.get_u32(2) == 4096
    assert msg.get_u64(3) == 1 << 40
    assert msg.get_ip6(4) == bytes(range(16))
    assert msg.get_string(5) == "admin"
    assert msg.get_raw(6) == b"\x00\x01\xff"


def test_array_values_round_trip():
    msg = WinboxMessage()
    inner = WinboxMessage()
    inner.add_u32(1, 7)
    msg.add_boolean_array(1, [True, False])
    msg.add_u32_array(2, [1, 2, 3])
    msg.add_u64_array(3, [1 << 33])
    msg.add_ip6_array(4, [bytes(16), bytes(range(16))])
    msg.add_string_array(5, ["a", "bc"])
    msg.add_msg_array(6, [inner])
    msg.add_raw_array(7, [b"x", b"yz"])
    assert msg.get_boolean_array(1) == [True, False]
    assert msg.get_u32_array(2) == [1, 2, 3]
    assert msg.get_u64_array(3) == [1 << 33]
    assert msg.get_ip6_array(4) == [bytes(16), bytes(range(16))]
    assert msg.get_string_array(5) == ["a", "bc"]
    assert msg.get_msg_array(6)[0].get_u32(1) == 7
    assert msg.get_raw_array(7) == [b"x", b"yz"]


def test_boolean_and_u32_overwrite():
    msg = WinboxMessage()
    msg.add_boolean(1, True)
    msg.add_boolean(1, False)
    msg.add_u32(2, 5)
    msg.add_u32(2, 9)
    assert msg.get_boolean(1) is False
    assert msg.get_u32(2) == 9


def test_other_kinds_keep_first_value():
    msg = WinboxMessage()
    msg.add_string(1, "first")
    msg.add_string(1, "second")
    msg.add_raw(2, b"a")
    msg.add_raw(2, b"b")
    msg.add_u64(3, 10)
    msg.add_u64(3, 20)
    msg.add_u32_array(4, [1])
    msg.add_u32_array(4, [2])
    assert msg.get_string(1) == "first"
    assert msg.get_raw(2) == b"a"
    assert msg.get_u64(3) == 10
    assert msg.get_u32_array(4) == [1]


def test_bytes_string_is_decoded():
    msg = WinboxMessage()
    msg.add_string(1, b"user")
    assert msg.get_string(1) == "user"


def test_set_to_replaces_destination():
    msg = WinboxMessage()
    msg.set_to(13, 4)
    assert msg.get_u32_array(0xFF0001) == [13, 4]
    msg.set_to(2)
    assert msg.get_u32_array(0xFF0001) == [2]


def test_header_setters_use_well_known_names():
    msg = WinboxMessage()
    msg.set_command(4)
    msg.set_request_id(2)
    msg.set_session_id(77)
    msg.set_reply_expected(True)
    assert msg.get_u32(0xFF0007) == 4
    assert msg.get_u32(0xFF0006) == 2
    assert msg.get_u32(0xFE0001) == 77
    assert msg.get_session_id() == 77
    assert msg.get_boolean(0xFF0005) is True


def test_error_string_takes_precedence():
    msg = WinboxMessage()
    msg.add_string(0xFF0009, "bad login")
    msg.add_u32(0xFF0008, 0xFE0012)
    assert msg.has_error() is True
    assert msg.get_error_string() == "bad login"


@pytest.mark.parametrize(
    "code, text",
    [
        (0x00FE0002, "Feature not implemented"),
        (0x00FE0003, "Feature not implemented"),
        (0x00FE0004, "Object doesn't exist"),
        (0x00FE0011, "Object doesn't exist"),
        (0x00FE0009, "Not permitted"),
        (0x00FE000D, "Timeout"),
        (0x00FE0012, "Busy"),
        (0x12345, "Unknown error code"),
    ],
)
def test_error_codes(code, text):
    msg = WinboxMessage()
    msg.add_u32(0xFF0008, code)
    assert msg.has_error() is True
    assert msg.get_error_string() == text


def test_erase_u32_and_reset():
    msg = WinboxMessage()
    msg.add_u32(1, 5)
    msg.add_u32(2, 6)
    msg.erase_u32(1)
    assert msg.get_u32(1) == 0
    assert msg.get_u32(2) == 6
    msg.add_string(3, "x")
    msg.add_raw_array(4, [b"y"])
    msg.reset()
    assert msg == WinboxMessage()


def test_u32_value_is_truncated_to_32_bits():
    msg = WinboxMessage()
    msg.add_u32(1, (1 << 32) + 3)
    assert msg.get_u32(1) == 3


def test_bad_ip6_length_raises():
    msg = WinboxMessage()
    with pytest.raises(MessageFormatError):
        msg.add_ip6(1, b"\x00" * 4)
    with pytest.raises(MessageFormatError):
        msg.add_ip6_array(1, [bytes(16), b"\x01"])


def test_nested_message_is_copied():
    inner = WinboxMessage()
    inner.add_u32(1, 1)
    outer = WinboxMessage()
    outer.add_msg(5, inner)
    inner.add_u32(1, 2)
    assert outer.get_msg(5).get_u32(1) == 1
    fetched = outer.get_msg(5)
    fetched.add_u32(1, 3)
    assert outer.get_msg(5).get_u32(1) == 1
import struct

import pytest

from camlmarshal.binary.codecs.bytecursor import Cursor
from camlmarshal.binary.errors import TruncatedInput


def test_big_endian_reads():
    data = (
        b"\xff"
        + (0x1234).to_bytes(2, "big")
        + (-2).to_bytes(4, "big", signed=True)
        + (1 << 40).to_bytes(8, "big")
        + struct.pack(">d", 0.5)
    )
    cur = Cursor(data)
    assert cur.s8() == -1
    assert cur.u16() == 0x1234
    assert cur.s32() == -2
    assert cur.u64() == 1 << 40
    assert cur.f64() == 0.5
    assert cur.remaining() == 0


def test_little_endian_reads():
    data = b"\x07" + (5).to_bytes(4, "little") + (9).to_bytes(8, "little") + struct.pack("<d", -3.0)
    cur = Cursor(data)
    assert cur.u8_le() == 7
    assert cur.u32_le() == 5
    assert cur.u64_le() == 9
    assert cur.f64_le() == -3.0


def test_f64_array_both_orders():
    assert Cursor(struct.pack(">2d", 1.0, 2.0)).f64_array(2) == [1.0, 2.0]
    assert Cursor(struct.pack("<2d", 1.0, 2.0)).f64_array(2, little=True) == [1.0, 2.0]
    assert Cursor(b"").f64_array(0) == []


def test_truncated_read_poisons_cursor():
    cur = Cursor(b"\x01\x02")
    with pytest.raises(TruncatedInput):
        cur.u32()
    assert cur.tell() == 0
    # even a read that would fit now fails
    with pytest.raises(TruncatedInput):
        cur.u8()


def test_peek_does_not_advance():
    cur = Cursor(b"\xaa\xbb")
    assert cur.peek(2) == b"\xaa\xbb"
    assert cur.tell() == 0
    assert cur.take(1) == b"\xaa"


def test_failed_peek_leaves_cursor_usable():
    cur = Cursor(b"\x05")
    with pytest.raises(TruncatedInput):
        cur.peek(2)
    assert cur.u8() == 5

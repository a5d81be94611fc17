import pytest

from camlmarshal.binary.codecs.bytecursor import Cursor
from camlmarshal.binary.codecs.header import MAGIC_BIG, MAGIC_COMPRESSED, decode_header
from camlmarshal.binary.errors import TruncatedInput, UnsupportedFeature, UnsupportedMagic

from marshal_bytes import frame


def test_small_header_layout():
    data = frame(b"\x41\x42", 3, size_32=4, size_64=5)
    cur = Cursor(data)
    h = decode_header(cur)
    assert (h.data_length, h.object_count, h.size_32, h.size_64) == (2, 3, 4, 5)
    assert h.total_size == 22
    assert cur.tell() == 20


@pytest.mark.parametrize("magic", [MAGIC_BIG, MAGIC_COMPRESSED])
def test_known_but_unsupported_headers(magic):
    with pytest.raises(UnsupportedFeature) as ei:
        decode_header(Cursor(frame(b"\x41", 0, magic=magic)))
    assert not isinstance(ei.value, UnsupportedMagic)


def test_bad_magic():
    with pytest.raises(UnsupportedMagic):
        decode_header(Cursor(frame(b"\x41", 0, magic=0xDEADBEEF)))


def test_short_header():
    with pytest.raises(TruncatedInput):
        decode_header(Cursor(frame(b"", 0)[:12]))

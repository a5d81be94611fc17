import pytest

from camlmarshal.binary.codecs.bytecursor import Cursor
from camlmarshal.binary.codecs.custom import custom_to_int
from camlmarshal.binary.codecs.value_codec import decode_value
from camlmarshal.binary.errors import IdentifierTooLong, TruncatedInput, UnsupportedFeature
from camlmarshal.binary.object_table import ObjectTable
from camlmarshal.binary.reader import decode
from camlmarshal.models.options import DecoderOptions
from camlmarshal.models.value import Custom

from marshal_bytes import custom_fixed, frame, shared8, small_block


def _decode(data: bytes, options=None):
    objects = ObjectTable()
    cur = Cursor(data)
    return decode_value(cur, objects, options), objects, cur


def test_int32_custom():
    v, objects, cur = _decode(custom_fixed(b"_i", b"\x00\x00\x00\x2a"))
    assert v == Custom(identifier="_i", payload=b"\x00\x00\x00\x2a")
    assert custom_to_int(v) == 42
    assert len(objects) == 1
    assert cur.remaining() == 0


def test_int64_custom():
    v, _, _ = _decode(custom_fixed(b"_j", (-5).to_bytes(8, "big", signed=True)))
    assert custom_to_int(v) == -5


def test_nativeint_width_from_size_64_hint():
    body = custom_fixed(b"_n", (42).to_bytes(8, "big"))
    header, v = decode(frame(body, 1, size_64=2))
    assert header.size_64 == 2
    assert v.payload == (42).to_bytes(8, "big")
    assert custom_to_int(v) == 42


def test_nativeint_four_bytes_without_size_64_hint():
    body = custom_fixed(b"_n", (-3).to_bytes(4, "big", signed=True))
    _, v = decode(frame(body, 1, size_32=2))
    assert custom_to_int(v) == -3


def test_nativeint_without_header_defaults_to_eight_bytes():
    v, _, cur = _decode(custom_fixed(b"_n", (7).to_bytes(8, "big")))
    assert custom_to_int(v) == 7
    assert cur.remaining() == 0


@pytest.mark.parametrize(
    "payload, expected",
    [
        (b"\x01" + (7).to_bytes(4, "big"), 7),
        (b"\x02" + (-(1 << 40)).to_bytes(8, "big", signed=True), -(1 << 40)),
    ],
)
def test_runtime_layout_size_coded_nativeint(payload, expected):
    v, _, cur = _decode(custom_fixed(b"_n", payload), DecoderOptions(runtime_layout=True))
    assert v.payload == payload
    assert custom_to_int(v) == expected
    assert cur.remaining() == 0


def test_runtime_layout_nativeint_bad_size_code():
    with pytest.raises(UnsupportedFeature):
        _decode(custom_fixed(b"_n", b"\x03" + b"\x00" * 8), DecoderOptions(runtime_layout=True))


def test_legacy_custom_code():
    v, _, _ = _decode(b"\x12_i\x00" + (9).to_bytes(4, "big"))
    assert custom_to_int(v) == 9


def test_custom_len():
    data = b"\x18_j\x00" + (8).to_bytes(4, "big") + (8).to_bytes(8, "big") + (123).to_bytes(8, "big")
    v, objects, cur = _decode(data)
    assert v.identifier == "_j"
    assert custom_to_int(v) == 123
    assert len(objects) == 1
    assert cur.remaining() == 0


def test_custom_len_payload_bounded_by_declared_length():
    data = b"\x18_j\x00" + (8).to_bytes(4, "big") + (16).to_bytes(8, "big") + b"\x00" * 8
    with pytest.raises(TruncatedInput):
        _decode(data)


@pytest.mark.parametrize("code", [b"\x19", b"\x18"])
def test_unknown_identifier(code):
    with pytest.raises(UnsupportedFeature):
        _decode(code + b"_bigarray\x00" + b"\x00" * 32)


def test_identifier_too_long():
    data = b"\x19" + b"a" * 40 + b"\x00" + b"\x00" * 8
    with pytest.raises(IdentifierTooLong):
        _decode(data)
    # a larger bound gets past the length check to the identifier lookup
    with pytest.raises(UnsupportedFeature):
        _decode(data, DecoderOptions(max_identifier_length=64))


def test_custom_is_sharable():
    data = small_block(0, 2) + custom_fixed(b"_i", b"\x00\x00\x00\x01") + shared8(1)
    v, _, _ = _decode(data)
    assert v.fields[0] is v.fields[1]

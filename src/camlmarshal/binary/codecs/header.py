from __future__ import annotations
from .bytecursor import Cursor
from ..errors import UnsupportedFeature, UnsupportedMagic
from camlmarshal.models.header import MarshalHeader

HEADER_SIZE = 20

MAGIC_SMALL = 0x8495A6BE
MAGIC_BIG = 0x8495A6BF
MAGIC_COMPRESSED = 0x8495A6BD

# Only the small magic has the fixed 20-byte layout read below; the other two
# markers of the same family (big, compressed) are recognized but unsupported.
ACCEPTED_MAGICS = frozenset({MAGIC_SMALL})
_UNSUPPORTED_MAGICS = {
    MAGIC_BIG: "big header (payloads over 4 GiB)",
    MAGIC_COMPRESSED: "compressed header",
}


def decode_header(cur: Cursor) -> MarshalHeader:
    """
    Parse the 20-byte small header: magic, then data length, object count,
    size-32 and size-64 hints (all u32 big-endian).
    The count and size fields are not checked here.
    """
    start = cur.tell()
    magic = cur.u32()
    if magic not in ACCEPTED_MAGICS:
        if magic in _UNSUPPORTED_MAGICS:
            raise UnsupportedFeature(f"{_UNSUPPORTED_MAGICS[magic]} is not supported", offset=start)
        raise UnsupportedMagic(f"bad magic 0x{magic:08x}", offset=start)

    data_length = cur.u32()
    object_count = cur.u32()
    size_32 = cur.u32()
    size_64 = cur.u32()

    return MarshalHeader(
        magic=magic,
        data_length=data_length,
        object_count=object_count,
        size_32=size_32,
        size_64=size_64,
    )

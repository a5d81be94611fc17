from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict

from .bytecursor import Cursor
from ..errors import IdentifierTooLong, UnsupportedFeature
from camlmarshal.models.value import Custom

# Identifiers of the runtime's built-in boxed integers.
INT32_ID = "_i"
INT64_ID = "_j"
NATIVEINT_ID = "_n"


def read_identifier(cur: Cursor, max_len: int) -> str:
    """Read a NUL-terminated identifier of at most `max_len` bytes (terminator excluded)."""
    start = cur.tell()
    raw = bytearray()
    while True:
        b = cur.u8()
        if b == 0:
            break
        if len(raw) >= max_len:
            raise IdentifierTooLong(f"custom identifier longer than {max_len} bytes", offset=start)
        raw.append(b)
    return raw.decode("ascii", errors="replace")


def native_width(size_64: int) -> int:
    """
    Byte width of a nativeint payload, from the header's size-64 hint:
    a producer that reported a 64-bit size wrote 8-byte nativeints, otherwise 4.
    """
    return 8 if size_64 > 0 else 4


def _size_coded_nativeint(cur: Cursor) -> bytes:
    # runtime layout: leading size byte, 1 -> int32 follows, 2 -> int64 follows
    at = cur.tell()
    flag = cur.u8()
    if flag == 1:
        return bytes([flag]) + cur.take(4)
    if flag == 2:
        return bytes([flag]) + cur.take(8)
    raise UnsupportedFeature(f"nativeint with size code {flag}", offset=at)


def _nativeint_to_int(payload: bytes) -> int:
    # size-coded payloads keep their leading size byte
    if len(payload) in (5, 9):
        payload = payload[1:]
    return int.from_bytes(payload, "big", signed=True)


def _be_int(payload: bytes) -> int:
    return int.from_bytes(payload, "big", signed=True)


@dataclass(frozen=True)
class CustomKind:
    identifier: str
    # (cursor, nativeint width) -> payload
    read: Callable[[Cursor, int], bytes]
    to_int: Callable[[bytes], int]


CUSTOM_KINDS: Dict[str, CustomKind] = {
    k.identifier: k
    for k in (
        CustomKind(INT32_ID, lambda c, _w: c.take(4), _be_int),
        CustomKind(INT64_ID, lambda c, _w: c.take(8), _be_int),
        CustomKind(NATIVEINT_ID, lambda c, w: c.take(w), _nativeint_to_int),
    )
}


def lookup(identifier: str, *, offset: int | None = None) -> CustomKind:
    kind = CUSTOM_KINDS.get(identifier)
    if kind is None:
        raise UnsupportedFeature(f"custom block {identifier!r} has no built-in decoder", offset=offset)
    return kind


def read_fixed_payload(
    cur: Cursor,
    identifier: str,
    *,
    width: int = 8,
    size_coded_nativeint: bool = False,
) -> bytes:
    """
    Payload of a CUSTOM_FIXED (or legacy CUSTOM) block. Its size comes from the
    identifier alone; `width` sizes nativeints. With `size_coded_nativeint`
    a nativeint carries its own leading size byte instead.
    """
    kind = lookup(identifier, offset=cur.tell())
    if size_coded_nativeint and identifier == NATIVEINT_ID:
        return _size_coded_nativeint(cur)
    return kind.read(cur, width)


def read_len_payload(cur: Cursor, identifier: str) -> bytes:
    """
    Payload of a CUSTOM_LEN block: u32 size_32, u64 size_64, then size_64 bytes.
    Only the 64-bit length is used, to bound the read.
    """
    lookup(identifier, offset=cur.tell())
    cur.take(4)  # size_32
    size_64 = cur.u64()
    return cur.take(size_64)


def custom_to_int(custom: Custom) -> int:
    """Interpret a built-in custom block (int32/int64/nativeint) as a Python int."""
    return lookup(custom.identifier).to_int(custom.payload)

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from .codecs.bytecursor import Cursor
from .codecs.header import HEADER_SIZE, decode_header
from .codecs.value_codec import decode_value
from .errors import DataLengthMismatch, ObjectCountMismatch, TruncatedInput
from .object_table import ObjectTable
from camlmarshal.models.header import MarshalHeader
from camlmarshal.models.options import DecoderOptions
from camlmarshal.models.value import Value

logger = logging.getLogger(__name__)

BytesLike = Union[str, Path, bytes, bytearray, memoryview]


# -----------------------------
# Helpers
# -----------------------------

def _load_bytes(inp: BytesLike) -> bytes:
    if isinstance(inp, (bytes, bytearray, memoryview)):
        return bytes(inp)
    p = Path(str(inp))
    return p.read_bytes()


def _report(exc: type, msg: str, strict: bool, offset: int | None = None) -> None:
    if strict:
        raise exc(msg, offset=offset)
    logger.warning(msg)


# -----------------------------
# Decoder
# -----------------------------

class Decoder:
    """
    One-shot decoder over a single marshaled value.

    Construction does no parsing. decode() reads the header and one value;
    afterwards `objects` holds the slot table, which is what Ref handles
    (cyclic back-references) resolve against.
    """

    def __init__(self, buffer: bytes | bytearray | memoryview, options: DecoderOptions | None = None):
        self.options = options or DecoderOptions()
        self.cursor = Cursor(buffer)
        self.objects = ObjectTable()
        self._used = False

    def decode(self) -> Tuple[MarshalHeader, Value]:
        if self._used:
            raise RuntimeError("Decoder.decode() can only be called once")
        self._used = True

        cur = self.cursor
        header = decode_header(cur)
        logger.debug(
            "header: data_length=%d objects=%d size_32=%d size_64=%d",
            header.data_length, header.object_count, header.size_32, header.size_64,
        )

        value = decode_value(cur, self.objects, self.options, header)
        self._check_counts(header)
        return header, value

    def _check_counts(self, header: MarshalHeader) -> None:
        strict = self.options.strict_counts
        used = self.cursor.tell() - HEADER_SIZE
        logger.debug("decoded %d bytes, %d slots", used, len(self.objects))

        if len(self.objects) != header.object_count:
            _report(
                ObjectCountMismatch,
                f"header announces {header.object_count} objects, decoded {len(self.objects)}",
                strict,
            )
        if used != header.data_length:
            _report(
                DataLengthMismatch,
                f"header announces {header.data_length} data bytes, decoded {used}",
                strict,
                offset=self.cursor.tell(),
            )


# -----------------------------
# Entry points
# -----------------------------

def decode(
    buffer: bytes | bytearray | memoryview,
    options: DecoderOptions | None = None,
) -> Tuple[MarshalHeader, Value]:
    return Decoder(buffer, options).decode()


def decode_file(path: Union[str, Path], options: DecoderOptions | None = None) -> Tuple[MarshalHeader, Value]:
    """Decode the first marshaled value stored in a file."""
    return decode(_load_bytes(path), options)


def read_header(buffer: BytesLike) -> MarshalHeader:
    return decode_header(Cursor(_load_bytes(buffer)[:HEADER_SIZE]))


def iter_values(
    data: BytesLike,
    options: DecoderOptions | None = None,
    *,
    max_values: Optional[int] = None,
) -> Iterator[Tuple[MarshalHeader, Value]]:
    """
    Stream consecutive marshaled values from one buffer, the layout produced
    by repeated output_value calls on one channel. Each value is decoded
    independently, with its own object table.
    """
    raw = memoryview(_load_bytes(data))
    pos = 0
    emitted = 0

    while pos < len(raw):
        if max_values is not None and emitted >= max_values:
            return
        header = decode_header(Cursor(raw[pos:pos + HEADER_SIZE]))
        end = pos + header.total_size
        if end > len(raw):
            raise TruncatedInput(
                f"value at {pos} needs {header.total_size} bytes, {len(raw) - pos} left", offset=pos
            )
        logger.debug("value #%d at offset %d (%d bytes)", emitted, pos, header.total_size)
        yield Decoder(raw[pos:end], options).decode()
        emitted += 1
        pos = end

from __future__ import annotations

from ..errors import UnknownTag


class Prefix:
    SMALL_BLOCK = 0x80
    SMALL_INT = 0x40
    SMALL_STRING = 0x20


class Code:
    INT8 = 0x00
    INT16 = 0x01
    INT32 = 0x02
    INT64 = 0x03
    SHARED8 = 0x04
    SHARED16 = 0x05
    SHARED32 = 0x06
    DOUBLE_ARRAY32_LITTLE = 0x07
    BLOCK32 = 0x08
    STRING8 = 0x09
    STRING32 = 0x0A
    DOUBLE_BIG = 0x0B
    DOUBLE_LITTLE = 0x0C
    DOUBLE_ARRAY8_BIG = 0x0D
    DOUBLE_ARRAY8_LITTLE = 0x0E
    DOUBLE_ARRAY32_BIG = 0x0F
    CODEPOINTER = 0x10
    INFIXPOINTER = 0x11
    CUSTOM = 0x12
    BLOCK64 = 0x13
    SHARED64 = 0x14
    STRING64 = 0x15
    DOUBLE_ARRAY64_BIG = 0x16
    DOUBLE_ARRAY64_LITTLE = 0x17
    CUSTOM_LEN = 0x18
    CUSTOM_FIXED = 0x19


KNOWN_CODES = frozenset(
    v for k, v in vars(Code).items() if not k.startswith("_") and isinstance(v, int)
)


def classify(byte: int, *, offset: int | None = None) -> tuple[int, int]:
    """
    Map one tag byte to (opcode, operand).
    Packed forms return their prefix as the opcode and the low bits as operand:
      - 0x80..0xFF: SMALL_BLOCK, operand = byte - 0x80 (tag low 4 bits, size high bits)
      - 0x40..0x7F: SMALL_INT, operand = the integer
      - 0x20..0x3F: SMALL_STRING, operand = the length
    Explicit codes return (code, 0).
    """
    if byte >= Prefix.SMALL_BLOCK:
        return Prefix.SMALL_BLOCK, byte - Prefix.SMALL_BLOCK
    if byte >= Prefix.SMALL_INT:
        return Prefix.SMALL_INT, byte - Prefix.SMALL_INT
    if byte >= Prefix.SMALL_STRING:
        return Prefix.SMALL_STRING, byte - Prefix.SMALL_STRING
    if byte in KNOWN_CODES:
        return byte, 0
    raise UnknownTag(f"unknown tag byte 0x{byte:02x}", offset=offset)


def small_block_fields(operand: int) -> tuple[int, int]:
    """(tag, size) of a packed small-block header."""
    return operand & 0x0F, operand >> 4


def block_header_fields(word: int) -> tuple[int, int]:
    """(tag, size) of a packed runtime-layout block header word; bits 8-9 are GC colour and ignored."""
    return word & 0xFF, word >> 10

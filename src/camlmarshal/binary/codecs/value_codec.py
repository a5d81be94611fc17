from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple

from .bytecursor import Cursor
from .custom import native_width, read_fixed_payload, read_identifier, read_len_payload
from .opcodes import Code, Prefix, block_header_fields, classify, small_block_fields
from ..errors import DepthLimitExceeded, UnknownTag, UnsupportedFeature
from ..object_table import ObjectTable
from camlmarshal.models.header import MarshalHeader
from camlmarshal.models.options import DecoderOptions
from camlmarshal.models.value import Block, Bytes, Custom, Float, FloatArray, Int, Value

# (value, children still to read, slot of the value when children are pending)
Step = Tuple[Value, int, Optional[int]]


class _State:
    __slots__ = ("cur", "objects", "options", "width")

    def __init__(self, cur: Cursor, objects: ObjectTable, options: DecoderOptions, width: int):
        self.cur = cur
        self.objects = objects
        self.options = options
        self.width = width  # nativeint bytes


class _Frame:
    __slots__ = ("block", "slot", "remaining")

    def __init__(self, block: Block, slot: Optional[int], remaining: int):
        self.block = block
        self.slot = slot
        self.remaining = remaining


# ---- construction rules ----

def _int(v: int) -> Step:
    return Int(value=v), 0, None


def _bytes(st: _State, n: int) -> Step:
    slot = st.objects.reserve()
    v = Bytes(data=st.cur.take(n))
    st.objects.finalize(slot, v)
    return v, 0, None


def _block(st: _State, tag: int, size: int) -> Step:
    block = Block(tag=tag)
    if size == 0:
        if st.options.share_atoms:
            st.objects.add(block)
        return block, 0, None
    # slot taken before any field is read, so fields can refer back to it
    return block, size, st.objects.reserve()


def _double(st: _State, v: float) -> Step:
    f = Float(value=v)
    if st.options.share_boxed_floats:
        st.objects.add(f)
    return f, 0, None


def _double_array(st: _State, count: int, little: bool) -> Step:
    slot = st.objects.reserve()
    v = FloatArray(values=st.cur.f64_array(count, little=little))
    st.objects.finalize(slot, v)
    return v, 0, None


def _shared(st: _State, offset: int, at: int) -> Step:
    return st.objects.resolve_offset(offset, at=at), 0, None


def _custom(st: _State, fixed: bool) -> Step:
    ident = read_identifier(st.cur, st.options.max_identifier_length)
    slot = st.objects.reserve()
    if fixed:
        payload = read_fixed_payload(
            st.cur, ident, width=st.width, size_coded_nativeint=st.options.runtime_layout
        )
    else:
        payload = read_len_payload(st.cur, ident)
    v = Custom(identifier=ident, payload=payload)
    st.objects.finalize(slot, v)
    return v, 0, None


def _explicit_block(st: _State, read: Callable[[Cursor], int]) -> Step:
    if st.options.runtime_layout:
        return _block(st, *block_header_fields(read(st.cur)))
    at = st.cur.tell()
    tag = read(st.cur)
    size = read(st.cur)
    if tag > 0xFF:
        raise UnknownTag(f"block tag {tag} outside 0..255", offset=at)
    return _block(st, tag, size)


def _le_count(st: _State, le: Callable[[Cursor], int], be: Callable[[Cursor], int]) -> int:
    # little-endian double arrays carry a little-endian count unless decoding the runtime layout
    return be(st.cur) if st.options.runtime_layout else le(st.cur)


def _unsupported(what: str):
    def read(st: _State, _operand: int) -> Step:
        raise UnsupportedFeature(f"{what} values are not supported", offset=st.cur.tell() - 1)
    return read


def _shared_reader(width: Callable[[Cursor], int]):
    def read(st: _State, _operand: int) -> Step:
        at = st.cur.tell() - 1
        return _shared(st, width(st.cur), at)
    return read


_HANDLERS: Dict[int, Callable[[_State, int], Step]] = {
    Prefix.SMALL_INT:    lambda st, n: _int(n),
    Prefix.SMALL_STRING: lambda st, n: _bytes(st, n),
    Prefix.SMALL_BLOCK:  lambda st, n: _block(st, *small_block_fields(n)),

    Code.INT8:  lambda st, _: _int(st.cur.s8()),
    Code.INT16: lambda st, _: _int(st.cur.s16()),
    Code.INT32: lambda st, _: _int(st.cur.s32()),
    Code.INT64: lambda st, _: _int(st.cur.s64()),

    Code.SHARED8:  _shared_reader(Cursor.u8),
    Code.SHARED16: _shared_reader(Cursor.u16),
    Code.SHARED32: _shared_reader(Cursor.u32),
    Code.SHARED64: _shared_reader(Cursor.u64),

    Code.BLOCK32: lambda st, _: _explicit_block(st, Cursor.u32),
    Code.BLOCK64: lambda st, _: _explicit_block(st, Cursor.u64),

    Code.STRING8:  lambda st, _: _bytes(st, st.cur.u8()),
    Code.STRING32: lambda st, _: _bytes(st, st.cur.u32()),
    Code.STRING64: lambda st, _: _bytes(st, st.cur.u64()),

    Code.DOUBLE_BIG:    lambda st, _: _double(st, st.cur.f64()),
    Code.DOUBLE_LITTLE: lambda st, _: _double(st, st.cur.f64_le()),

    Code.DOUBLE_ARRAY8_BIG:     lambda st, _: _double_array(st, st.cur.u8(), False),
    Code.DOUBLE_ARRAY8_LITTLE:  lambda st, _: _double_array(st, _le_count(st, Cursor.u8_le, Cursor.u8), True),
    Code.DOUBLE_ARRAY32_BIG:    lambda st, _: _double_array(st, st.cur.u32(), False),
    Code.DOUBLE_ARRAY32_LITTLE: lambda st, _: _double_array(st, _le_count(st, Cursor.u32_le, Cursor.u32), True),
    Code.DOUBLE_ARRAY64_BIG:    lambda st, _: _double_array(st, st.cur.u64(), False),
    Code.DOUBLE_ARRAY64_LITTLE: lambda st, _: _double_array(st, _le_count(st, Cursor.u64_le, Cursor.u64), True),

    Code.CUSTOM:       lambda st, _: _custom(st, True),
    Code.CUSTOM_FIXED: lambda st, _: _custom(st, True),
    Code.CUSTOM_LEN:   lambda st, _: _custom(st, False),

    Code.CODEPOINTER:  _unsupported("code pointer"),
    Code.INFIXPOINTER: _unsupported("infix pointer"),
}


def _read_one(st: _State) -> Step:
    at = st.cur.tell()
    opcode, operand = classify(st.cur.u8(), offset=at)
    return _HANDLERS[opcode](st, operand)


def decode_value(
    cur: Cursor,
    objects: ObjectTable,
    options: DecoderOptions | None = None,
    header: MarshalHeader | None = None,
) -> Value:
    """
    Decode exactly one value starting at the cursor.

    Blocks are filled from an explicit stack of open frames instead of
    recursing, so deeply right-nested data (OCaml lists) is not limited by
    the interpreter's recursion limit. A block's slot is reserved when its
    header is read and finalized once its last field is in.

    `header` supplies the size-64 hint that sizes nativeint payloads; without
    one they are taken as 8 bytes.
    """
    width = native_width(header.size_64) if header is not None else 8
    st = _State(cur, objects, options or DecoderOptions(), width)
    max_depth = st.options.max_depth
    stack: List[_Frame] = []

    while True:
        value, pending, slot = _read_one(st)
        if pending:
            if max_depth is not None and len(stack) >= max_depth:
                raise DepthLimitExceeded(f"nesting deeper than {max_depth}", offset=cur.tell())
            stack.append(_Frame(value, slot, pending))
            continue

        # close every block this value completes
        while stack:
            frame = stack[-1]
            frame.block.fields.append(value)
            frame.remaining -= 1
            if frame.remaining:
                break
            stack.pop()
            objects.finalize(frame.slot, frame.block)
            value = frame.block
        else:
            return value

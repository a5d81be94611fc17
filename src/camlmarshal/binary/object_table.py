from __future__ import annotations
from typing import List, Set

from .errors import InvalidSharedReference
from camlmarshal.models.value import Ref, Value


class ObjectTable:
    """
    Append-only registry of sharable values, indexed in the order their
    headers were read.

    A slot is reserved (holding a Ref placeholder) before its children are
    decoded and finalized once the value is complete, so back-references
    read inside a value can already point at it.
    """

    __slots__ = ("_slots", "_pending")

    def __init__(self):
        self._slots: List[Value] = []
        self._pending: Set[int] = set()

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def counter(self) -> int:
        """Allocation counter: the index the next reserve() will return."""
        return len(self._slots)

    def reserve(self) -> int:
        idx = len(self._slots)
        self._slots.append(Ref(index=idx))
        self._pending.add(idx)
        return idx

    def finalize(self, idx: int, value: Value) -> None:
        if idx not in self._pending:
            raise ValueError(f"slot {idx} is not awaiting a value")
        self._slots[idx] = value
        self._pending.discard(idx)

    def add(self, value: Value) -> int:
        """Reserve and finalize in one step, for values with no children."""
        idx = self.reserve()
        self.finalize(idx, value)
        return idx

    def is_pending(self, idx: int) -> bool:
        return idx in self._pending

    def resolve(self, idx: int) -> Value:
        """Current contents of a slot: the finished value, or its Ref placeholder."""
        if not (0 <= idx < len(self._slots)):
            raise InvalidSharedReference(f"slot {idx} outside [0, {len(self._slots)})")
        return self._slots[idx]

    def resolve_offset(self, offset: int, *, at: int | None = None) -> Value:
        """Resolve a SHARED back-offset, counted back from the allocation counter."""
        if offset == 0:
            raise InvalidSharedReference("shared back-offset of 0", offset=at)
        idx = self.counter - offset
        if idx < 0:
            raise InvalidSharedReference(
                f"shared back-offset {offset} exceeds the {self.counter} allocated slots", offset=at
            )
        return self._slots[idx]

    def follow(self, value: Value) -> Value:
        """The slot a Ref handle points to; any other value is returned as-is."""
        if isinstance(value, Ref):
            return self.resolve(value.index)
        return value

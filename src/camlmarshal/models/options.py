from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field


class DecoderOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_identifier_length: int = Field(32, ge=1)
    # None = only the cursor's length checks bound the decode
    max_depth: int | None = Field(None, ge=1)
    # OCaml itself gives boxed doubles a slot and never gives atoms one;
    # flip both to decode sharing in data written by a real runtime.
    share_boxed_floats: bool = False
    share_atoms: bool = True
    strict_counts: bool = False
    # runtime wire layout: packed BLOCK32/64 header word, big-endian counts on
    # little-endian double arrays, nativeints with a leading size byte
    runtime_layout: bool = False

    @classmethod
    def runtime_slots(cls, **overrides) -> "DecoderOptions":
        """Options using the OCaml runtime's own slot rules."""
        return cls(**{"share_boxed_floats": True, "share_atoms": False, **overrides})

    @classmethod
    def runtime(cls, **overrides) -> "DecoderOptions":
        """Slot rules and wire layout exactly as the OCaml runtime writes them."""
        return cls.runtime_slots(**{"runtime_layout": True, **overrides})

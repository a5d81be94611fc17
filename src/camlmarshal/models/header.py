from __future__ import annotations
from pydantic import BaseModel, Field


class MarshalHeader(BaseModel):
    magic: int = Field(..., ge=0, le=0xFFFFFFFF)
    data_length: int = Field(..., ge=0)
    object_count: int = Field(..., ge=0)
    # word-count estimates for 32/64-bit hosts; informational only
    size_32: int = Field(0, ge=0)
    size_64: int = Field(0, ge=0)

    @property
    def total_size(self) -> int:
        """Header plus value stream, i.e. the offset of the next marshaled value."""
        return 20 + self.data_length

from __future__ import annotations
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class _ValueModel(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64")


class Int(_ValueModel):
    kind: Literal["int"] = "int"
    value: int = Field(..., ge=INT64_MIN, le=INT64_MAX)


class Bytes(_ValueModel):
    kind: Literal["bytes"] = "bytes"
    data: bytes


class Float(_ValueModel):
    kind: Literal["float"] = "float"
    value: float


class FloatArray(_ValueModel):
    kind: Literal["float_array"] = "float_array"
    values: List[float] = Field(default_factory=list)


class Custom(_ValueModel):
    kind: Literal["custom"] = "custom"
    identifier: str
    payload: bytes


class Ref(_ValueModel):
    """
    Handle to an object-table slot that was still being built when a
    back-reference to it was read (a cycle). Resolve it through the
    decoder's ObjectTable once decoding has finished.
    """
    kind: Literal["ref"] = "ref"
    index: int = Field(..., ge=0)


class Block(_ValueModel):
    kind: Literal["block"] = "block"
    tag: int = Field(..., ge=0, le=255)
    fields: List["Value"] = Field(default_factory=list)


Value = Annotated[
    Union[Int, Bytes, Float, FloatArray, Block, Custom, Ref],
    Field(discriminator="kind"),
]

Block.model_rebuild()

from __future__ import annotations


class MarshalError(ValueError):
    """Base class for every decode failure. `offset` is the cursor position, when known."""

    def __init__(self, msg: str, *, offset: int | None = None):
        super().__init__(msg if offset is None else f"{msg} (at offset {offset})")
        self.offset = offset


class UnsupportedMagic(MarshalError):
    pass


class TruncatedInput(MarshalError):
    pass


class UnknownTag(MarshalError):
    pass


class InvalidSharedReference(MarshalError):
    pass


class UnsupportedFeature(MarshalError):
    """Recognized construct that is deliberately not decoded (big header, code pointers, ...)."""


class IdentifierTooLong(MarshalError):
    pass


class ObjectCountMismatch(MarshalError):
    pass


class DataLengthMismatch(MarshalError):
    pass


class DepthLimitExceeded(MarshalError):
    pass

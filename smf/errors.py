"""Error taxonomy for the SMF event codec.

Every decode failure derives from :class:`CodecError`, itself a
``ValueError`` so callers that already guard byte parsing with
``except ValueError`` keep working.  Offsets are relative to the buffer
handed to the top-level decode call (the track payload for
``decode_track``).
"""

from __future__ import annotations


class CodecError(ValueError):
    """A malformed byte sequence was found while decoding."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} at 0x{offset:04X}"
        super().__init__(message)


class MalformedLength(CodecError):
    """Variable-length quantity longer than 4 bytes or cut short."""


class InvalidDataByte(CodecError):
    """A 7-bit data field had its high bit set."""


class InvalidStatusByte(CodecError):
    """Status byte that names no message this codec knows."""


class InvalidModeMessage(CodecError):
    """Controller/value pair outside the channel mode table."""


class InvalidMetaLength(CodecError):
    """Fixed-size meta event declared the wrong payload length."""

    def __init__(
        self, meta_type: int, expected: int, actual: int, offset: int | None = None
    ) -> None:
        self.meta_type = meta_type
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"meta type 0x{meta_type:02X} declares length {actual}, expected {expected}",
            offset,
        )


class InvalidTextEncoding(CodecError):
    """Meta text bytes not representable in cp1252."""


class InvalidChunk(CodecError):
    """Chunk tag or header field is not what the container expects."""


class TruncatedData(CodecError):
    """Input ended before a complete item could be read."""


class TruncatedSysEx(TruncatedData):
    pass


class TruncatedMeta(TruncatedData):
    pass


class TruncatedChannelMessage(TruncatedData):
    pass


class TruncatedSystemMessage(TruncatedData):
    pass


class TruncatedChunk(TruncatedData):
    pass


class MissingRunningStatus(CodecError):
    """Data byte where a status byte was needed and none is carried."""


class MissingEndOfTrack(CodecError):
    """Track is empty or does not finish with an EndOfTrack meta event."""

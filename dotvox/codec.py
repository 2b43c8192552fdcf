"""Sequential .vox decoder and encoder.

Both classes work one record at a time on a caller supplied binary stream.
They only know that the header comes first; which chunks may follow which is
decided by dotvox.data.
"""

import enum
import logging
from typing import BinaryIO

from dotvox.errors import (
    BadContextError,
    MalformedHeaderError,
    UnknownChunkError,
    UnsupportedChunkError,
)
from dotvox.voxfile import (
    MAGIC,
    PAYLOAD_TYPES,
    Bytes,
    ChunkRecord,
    Header,
    Payload,
    Unsupported,
)

logger = logging.getLogger(__name__)


class State(enum.Enum):
    UNINITIALIZED = enum.auto()
    READY = enum.auto()


class Decoder:
    """Reads a header followed by (chunk record, payload) pairs."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.state = State.UNINITIALIZED

    def decode_header(self) -> Header:
        """Read the file header; must be called exactly once, first."""
        if self.state is not State.UNINITIALIZED:
            raise BadContextError("Header has already been decoded")

        header = Header.read(self.stream)
        if header.magic != MAGIC:
            raise MalformedHeaderError(
                f"Invalid .vox file header: {header.magic!r}; expected {MAGIC!r}"
            )

        logger.debug("decoded header, version %d", header.version)
        self.state = State.READY
        return header

    def decode_chunk(self) -> tuple[ChunkRecord, Payload]:
        """Read the next chunk.

        Chunks whose payload is not decoded (extensions and unknown tags) are
        skipped in full, children included, and reported by raising
        UnknownChunkError. The stream is left at the start of the next chunk
        in that case, so decoding may continue.

        This does not check whether the chunk is allowed at this position.
        """
        if self.state is not State.READY:
            raise BadContextError("Cannot decode a chunk before the header")

        record = ChunkRecord.read(self.stream)

        kind = record.kind
        if kind is None or not kind.supported:
            logger.warning("skipping chunk %s (%d bytes)", record.tag_name, record.span)
            Bytes.skip(self.stream, record.span)
            raise UnknownChunkError(record)

        return record, PAYLOAD_TYPES[kind].from_reader(record, self.stream)


class Encoder:
    """Writes a header followed by (chunk record, payload) pairs."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.state = State.UNINITIALIZED

    def encode_header(self, header: Header):
        """Write the file header; must be called exactly once, first."""
        if self.state is not State.UNINITIALIZED:
            raise BadContextError("Header has already been encoded")

        header.write(self.stream)
        self.state = State.READY

    def encode_chunk(self, record: ChunkRecord, payload: Payload):
        """Write a chunk record and its payload.

        The record is written as given; its lengths must already describe
        the payload and any children that will follow.
        """
        if self.state is not State.READY:
            raise BadContextError("Cannot encode a chunk before the header")
        if isinstance(payload, Unsupported):
            raise UnsupportedChunkError(f"Cannot write {payload.kind.tag!r} chunks")

        record.write(self.stream)
        payload.write(self.stream)

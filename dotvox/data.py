"""In-memory .vox data and the whole-file decode/encode entry points.

A Data object holds every model of a file (a SIZE chunk and its XYZI chunk)
plus the file palette. Extension chunks are skipped on decode and therefore
never written back.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO

from dotvox.codec import Decoder, Encoder
from dotvox.errors import (
    MalformedStreamError,
    NoModelsError,
    OutOfOrderChunkError,
    SizeOverflowError,
    UnknownChunkError,
    UnsupportedVersionError,
)
from dotvox.voxfile import (
    CHUNK_RECORD_SIZE,
    MAGIC,
    MAX_LENGTH,
    VERSION,
    Container,
    Dimensions,
    Header,
    ModelCount,
    Palette,
    VoxelList,
)

logger = logging.getLogger(__name__)


@dataclass
class Model:
    """One voxel grid: its dimensions and its voxel list."""

    dimensions: Dimensions
    voxels: VoxelList = field(default_factory=VoxelList)


@dataclass
class Data:
    """Data class.

    The chunks are always written in this order:

    Chunk 'MAIN'
    {
        Chunk 'PACK'

        Chunk 'SIZE'
        Chunk 'XYZI'
        ...

        Chunk 'RGBA'
    }
    """

    models: list[Model] = field(default_factory=list)
    palette: Palette = field(default_factory=Palette)

    @staticmethod
    def read(path: str) -> "Data":
        """Read a .vox file from the given path."""
        with open(path, "rb") as f:
            return decode(f)

    def write(self, path: str):
        """Write a .vox file to the given path."""
        with open(path, "wb") as f:
            self.encode(f)

    def __bytes__(self):
        stream = io.BytesIO()
        self.encode(stream)
        return stream.getvalue()

    def release(self):
        """Drop every voxel buffer and the model list."""
        for model in self.models:
            model.voxels.voxels = []
        self.models = []

    def encode(self, stream: BinaryIO):
        """Write the data to a binary stream as a complete .vox file."""
        if not self.models:
            raise NoModelsError("Cannot encode data without models")

        encoder = Encoder(stream)
        encoder.encode_header(Header(MAGIC, VERSION))

        model_count = ModelCount(len(self.models))

        # 'MAIN' contains everything but the header
        children_bytes = CHUNK_RECORD_SIZE + model_count.size
        for model in self.models:
            children_bytes += CHUNK_RECORD_SIZE + model.dimensions.size
            children_bytes += CHUNK_RECORD_SIZE + model.voxels.size
        children_bytes += CHUNK_RECORD_SIZE + self.palette.size
        if children_bytes > MAX_LENGTH:
            raise SizeOverflowError(f"Chunk 'MAIN' would hold {children_bytes} bytes")

        container = Container()
        encoder.encode_chunk(container.record(children_bytes), container)

        # 'PACK' must come before 'SIZE'/'XYZI' chunks
        encoder.encode_chunk(model_count.record(), model_count)

        # 'SIZE'/'XYZI' must be interleaved
        for model in self.models:
            encoder.encode_chunk(model.dimensions.record(), model.dimensions)
            encoder.encode_chunk(model.voxels.record(), model.voxels)

        # 'RGBA' must come last
        encoder.encode_chunk(self.palette.record(), self.palette)


def decode(stream: BinaryIO) -> Data:
    """Read a complete .vox file from a binary stream."""
    decoder = Decoder(stream)

    header = decoder.decode_header()
    if header.version != VERSION:
        raise UnsupportedVersionError(
            f"Unsupported .vox version: {header.version}; expected {VERSION}"
        )

    try:
        record, payload = decoder.decode_chunk()
    except UnknownChunkError as e:
        raise MalformedStreamError(
            f"Invalid chunk ID: {e.record.tag_name}; expected {Container.kind.tag!r}"
        ) from e
    if not isinstance(payload, Container):
        raise MalformedStreamError(
            f"Invalid chunk ID: {record.tag_name}; expected {Container.kind.tag!r}"
        )

    data = Data()
    try:
        _decode_children(decoder, data, record.children_bytes)
    except Exception:
        data.release()
        raise
    return data


def decode_bytes(buffer: bytes) -> Data:
    """Read a complete .vox file from bytes."""
    return decode(io.BytesIO(buffer))


def _decode_children(decoder: Decoder, data: Data, remaining: int):
    models = data.models
    # one model until a 'PACK' chunk says otherwise; slots are only
    # allocated as 'SIZE' chunks arrive
    model_count = 1
    seen_model_count = False
    size_i = 0
    xyzi_i = 0

    while remaining > 0:
        try:
            record, payload = decoder.decode_chunk()
        except UnknownChunkError as e:
            remaining -= CHUNK_RECORD_SIZE + e.record.span
            continue

        if isinstance(payload, ModelCount):
            if seen_model_count:
                raise OutOfOrderChunkError(f"Duplicate chunk {record.tag_name}")
            if size_i or xyzi_i:
                raise OutOfOrderChunkError(
                    f"Chunk {record.tag_name} found after {size_i} 'SIZE' chunks"
                )
            seen_model_count = True
            model_count = max(1, payload.count)
            logger.debug("file declares %d models", payload.count)
        elif isinstance(payload, Dimensions):
            if size_i >= model_count:
                raise OutOfOrderChunkError(
                    f"Chunk {record.tag_name} #{size_i + 1} exceeds the "
                    f"{model_count} declared models"
                )
            if size_i != xyzi_i:
                raise OutOfOrderChunkError(
                    f"Chunk {record.tag_name} found; expected b'XYZI' following b'SIZE'"
                )
            models.append(Model(payload))
            size_i += 1
        elif isinstance(payload, VoxelList):
            if xyzi_i >= size_i:
                raise OutOfOrderChunkError(
                    f"Chunk {record.tag_name} found without a preceding b'SIZE'"
                )
            models[xyzi_i].voxels = payload
            xyzi_i += 1
        elif isinstance(payload, Palette):
            data.palette = payload
        elif isinstance(payload, Container):
            raise MalformedStreamError(f"Nested chunk {record.tag_name}")

        # supported chunks never have children
        remaining -= CHUNK_RECORD_SIZE + record.content_span

    # these come in pairs
    if size_i != xyzi_i:
        raise MalformedStreamError(f"Found {size_i} 'SIZE' chunks but {xyzi_i} 'XYZI' chunks")
    if size_i != model_count:
        raise MalformedStreamError(f"File declares {model_count} models but holds {size_i}")

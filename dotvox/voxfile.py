"""VoxFile records and chunk payloads.

The goal of this module is to provide the byte-level building blocks of
MagicaVoxel .vox files: the file header, the chunk record that prefixes every
chunk, and the payloads of the chunks this package understands. Sequencing
these into a whole file is left to dotvox.codec and dotvox.data.

All integers are signed 32-bit little-endian on the wire and plain Python ints
in memory.
"""

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Optional, Union

from dotvox.errors import (
    InvalidVoxelCountError,
    MalformedChunkError,
    SizeOverflowError,
    TruncatedStreamError,
    UnsupportedChunkError,
)

MAGIC = b"VOX "
VERSION = 150

HEADER_SIZE = 8
CHUNK_RECORD_SIZE = 12

MAX_VOXELS = 256 * 256 * 256
PALETTE_SIZE = 256
MAX_LENGTH = 0x7FFFFFFF

# skipped chunks are consumed in blocks of at most this many bytes
SKIP_BLOCK_SIZE = 64 * 1024


class Bytes:
    """Representative of .vox file bytes."""

    @staticmethod
    def read(stream: BinaryIO, n: int) -> bytes:
        """Read exactly n bytes from the stream."""
        blocks = []
        remaining = n
        while remaining > 0:
            block = stream.read(remaining)
            if not block:
                break
            blocks.append(block)
            remaining -= len(block)
        if remaining > 0:
            raise TruncatedStreamError(n, n - remaining)
        return b"".join(blocks)

    @staticmethod
    def skip(stream: BinaryIO, n: int):
        """Consume n bytes from the stream without keeping them."""
        remaining = n
        while remaining > 0:
            block = stream.read(min(remaining, SKIP_BLOCK_SIZE))
            if not block:
                raise TruncatedStreamError(n, n - remaining)
            remaining -= len(block)


class Int32:
    """Representative of .vox file 32-bit integers."""

    @staticmethod
    def read(stream: BinaryIO) -> int:
        """Read a 32-bit integer from the stream."""
        return int.from_bytes(Bytes.read(stream, 4), "little", signed=True)

    @staticmethod
    def write(int32: int) -> bytes:
        """Write a 32-bit integer to bytes."""
        try:
            return int32.to_bytes(4, "little", signed=True)
        except OverflowError as e:
            raise SizeOverflowError(f"{int32} does not fit in a 32-bit integer") from e


class Int32Array:
    """Representative of runs of .vox file 32-bit integers."""

    @staticmethod
    def read(stream: BinaryIO, n: int) -> list[int]:
        """Read n 32-bit integers from the stream."""
        return list(struct.unpack(f"<{n}i", Bytes.read(stream, 4 * n)))

    @staticmethod
    def write(values: list[int]) -> bytes:
        """Write 32-bit integers to bytes."""
        try:
            return struct.pack(f"<{len(values)}i", *values)
        except struct.error as e:
            raise SizeOverflowError(f"Value does not fit in a 32-bit integer: {e}") from e


def pack_voxel(x: int, y: int, z: int, color_index: int) -> int:
    """Pack one voxel into the int32 stored in an XYZI chunk."""
    return int.from_bytes(bytes((x, y, z, color_index)), "little", signed=True)


def unpack_voxel(voxel: int) -> tuple[int, int, int, int]:
    """Split an XYZI int32 into (x, y, z, color_index)."""
    x, y, z, color_index = voxel.to_bytes(4, "little", signed=True)
    return x, y, z, color_index


def pack_color(r: int, g: int, b: int, a: int = 255) -> int:
    """Pack one color into the int32 stored in an RGBA chunk."""
    return int.from_bytes(bytes((r, g, b, a)), "little", signed=True)


def unpack_color(color: int) -> tuple[int, int, int, int]:
    """Split an RGBA int32 into (r, g, b, a)."""
    r, g, b, a = color.to_bytes(4, "little", signed=True)
    return r, g, b, a


class ChunkKind(enum.Enum):
    """Chunk kinds identified by their four byte tag."""

    MAIN = b"MAIN"
    PACK = b"PACK"
    SIZE = b"SIZE"
    XYZI = b"XYZI"
    RGBA = b"RGBA"

    # extensions, recognized but never decoded
    TRANSFORM = b"nTRN"
    GROUP = b"nGRP"
    SHAPE = b"nSHP"
    MATERIAL = b"MATL"
    LAYER = b"LAYR"
    RENDER_OBJECT = b"rOBJ"
    RENDER_CAMERA = b"rCAM"
    PALETTE_NOTE = b"NOTE"
    INDEX_MAP = b"IMAP"

    @classmethod
    def from_tag(cls, tag: bytes) -> Optional["ChunkKind"]:
        """Return the kind for a tag, or None if the tag is unknown."""
        try:
            return cls(tag)
        except ValueError:
            return None

    @property
    def tag(self) -> bytes:
        return self.value

    @property
    def supported(self) -> bool:
        return self in SUPPORTED_KINDS


SUPPORTED_KINDS = frozenset(
    (ChunkKind.MAIN, ChunkKind.PACK, ChunkKind.SIZE, ChunkKind.XYZI, ChunkKind.RGBA)
)


@dataclass
class Header:
    """File header.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | char       | 'V' 'O' 'X' ' '
    4        | int        | version number : 150
    -------------------------------------------------------------------------------
    """

    magic: bytes = MAGIC
    version: int = VERSION

    @classmethod
    def read(cls, stream: BinaryIO) -> "Header":
        data = Bytes.read(stream, HEADER_SIZE)
        return cls(data[:4], int.from_bytes(data[4:], "little", signed=True))

    def write(self, sink: BinaryIO):
        sink.write(bytes(self))

    def __bytes__(self):
        return self.magic + Int32.write(self.version)


@dataclass
class ChunkRecord:
    """Chunk record.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    1x4      | char       | chunk id
    4        | int        | num bytes of chunk content (N)
    4        | int        | num bytes of children chunks (M)

    N        |            | chunk content

    M        |            | children chunks
    -------------------------------------------------------------------------------

    Lengths come straight from the file and may be negative in corrupt input;
    use the *_span properties for any arithmetic.
    """

    id: bytes
    content_bytes: int = 0
    children_bytes: int = 0

    @classmethod
    def read(cls, stream: BinaryIO) -> "ChunkRecord":
        data = Bytes.read(stream, CHUNK_RECORD_SIZE)
        return cls(
            data[:4],
            int.from_bytes(data[4:8], "little", signed=True),
            int.from_bytes(data[8:12], "little", signed=True),
        )

    def write(self, sink: BinaryIO):
        sink.write(bytes(self))

    def __bytes__(self):
        return (
            self.id + Int32.write(self.content_bytes) + Int32.write(self.children_bytes)
        )

    @property
    def kind(self) -> Optional[ChunkKind]:
        return ChunkKind.from_tag(self.id)

    @property
    def tag_name(self) -> str:
        return repr(self.id)

    @property
    def content_span(self) -> int:
        return max(self.content_bytes, 0)

    @property
    def children_span(self) -> int:
        return max(self.children_bytes, 0)

    @property
    def span(self) -> int:
        """Number of bytes following the record that belong to this chunk."""
        return self.content_span + self.children_span

    def expect(self, content_bytes: int, children_bytes: int = 0):
        """Check that the declared lengths are exactly the given ones."""
        if self.children_bytes != children_bytes:
            raise MalformedChunkError(
                f"Chunk {self.tag_name} declares {self.children_bytes} children bytes; "
                f"expected {children_bytes}"
            )
        if self.content_bytes != content_bytes:
            raise MalformedChunkError(
                f"Chunk {self.tag_name} declares {self.content_bytes} content bytes; "
                f"expected {content_bytes}"
            )


class Chunk:
    """Chunk payload class."""

    kind: ClassVar[ChunkKind]

    @property
    def size(self) -> int:
        """Number of content bytes this payload serializes to."""
        return len(bytes(self))

    def record(self, children_bytes: int = 0) -> ChunkRecord:
        """Build the chunk record that precedes this payload."""
        return ChunkRecord(self.kind.tag, self.size, children_bytes)

    def write(self, sink: BinaryIO):
        sink.write(bytes(self))

    def __bytes__(self):
        return b""


@dataclass
class Container(Chunk):
    """Main chunk class.

    Chunk 'MAIN'
    {
        // pack of models
        Chunk 'PACK'    : optional

        // models
        Chunk 'SIZE'
        Chunk 'XYZI'

        ...

        // palette
        Chunk 'RGBA'    : optional
    }

    The chunk has no content of its own; its children length covers every
    other chunk in the file.
    """

    kind = ChunkKind.MAIN

    @property
    def size(self) -> int:
        return 0

    @classmethod
    def from_reader(cls, record: ChunkRecord, stream: BinaryIO) -> "Container":
        if record.content_bytes != 0:
            raise MalformedChunkError(
                f"Chunk {record.tag_name} declares {record.content_bytes} content bytes; "
                f"expected 0"
            )
        return cls()


@dataclass
class ModelCount(Chunk):
    """Pack chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | numModels : num of SIZE and XYZI chunks
    -------------------------------------------------------------------------------
    """

    count: int

    kind = ChunkKind.PACK

    @property
    def size(self) -> int:
        return 4

    @classmethod
    def from_reader(cls, record: ChunkRecord, stream: BinaryIO) -> "ModelCount":
        record.expect(4)
        return cls(Int32.read(stream))

    def __bytes__(self):
        return Int32.write(self.count)


@dataclass
class Dimensions(Chunk):
    """Size chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | size x
    4        | int        | size y
    4        | int        | size z : gravity direction
    -------------------------------------------------------------------------------
    """

    x: int
    y: int
    z: int

    kind = ChunkKind.SIZE

    @property
    def size(self) -> int:
        return 12

    @classmethod
    def from_reader(cls, record: ChunkRecord, stream: BinaryIO) -> "Dimensions":
        record.expect(12)
        x, y, z = Int32Array.read(stream, 3)
        return cls(x, y, z)

    def __bytes__(self):
        return Int32Array.write([self.x, self.y, self.z])


@dataclass
class VoxelList(Chunk):
    """XYZI chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type       | Value
    -------------------------------------------------------------------------------
    4        | int        | numVoxels (N)
    4 x N    | int        | (x, y, z, colorIndex) : 1 byte for each component
    -------------------------------------------------------------------------------

    Voxels are kept as the packed int32 values found in the file; see
    pack_voxel and unpack_voxel.
    """

    voxels: list[int] = field(default_factory=list)

    kind = ChunkKind.XYZI

    @property
    def count(self) -> int:
        return len(self.voxels)

    @property
    def size(self) -> int:
        n = 4 + 4 * self.count
        if n > MAX_LENGTH:
            raise SizeOverflowError(f"Voxel list of {self.count} voxels is {n} bytes long")
        return n

    @classmethod
    def from_reader(cls, record: ChunkRecord, stream: BinaryIO) -> "VoxelList":
        if record.children_bytes != 0:
            raise MalformedChunkError(
                f"Chunk {record.tag_name} declares {record.children_bytes} children bytes; "
                f"expected 0"
            )
        if record.content_bytes < 4:
            raise MalformedChunkError(
                f"Chunk {record.tag_name} declares {record.content_bytes} content bytes; "
                f"expected at least 4"
            )

        count = Int32.read(stream)
        if count < 0 or count > MAX_VOXELS:
            raise InvalidVoxelCountError(
                f"Chunk {record.tag_name} declares {count} voxels; expected 0 to {MAX_VOXELS}"
            )
        record.expect(4 + 4 * count)

        return cls(Int32Array.read(stream, count))

    def __bytes__(self):
        if self.count > MAX_VOXELS:
            raise InvalidVoxelCountError(
                f"Voxel list holds {self.count} voxels; at most {MAX_VOXELS} allowed"
            )
        return Int32.write(self.count) + Int32Array.write(self.voxels)


@dataclass
class Palette(Chunk):
    """Palette chunk class.

    -------------------------------------------------------------------------------
    # Bytes  | Type     | Value
    -------------------------------------------------------------------------------
    4 x 256  | int      | (R, G, B, A) : 1 byte for each component
                        | * <NOTICE>
                        | * color [0-254] are mapped to palette index [1-255]
    -------------------------------------------------------------------------------

    Entries are kept in file order as packed int32 values; see pack_color and
    unpack_color.
    """

    entries: list[int] = field(default_factory=lambda: [0] * PALETTE_SIZE)

    kind = ChunkKind.RGBA

    def __post_init__(self):
        if len(self.entries) != PALETTE_SIZE:
            raise ValueError(
                f"Palette must have {PALETTE_SIZE} entries, got {len(self.entries)}"
            )

    @property
    def size(self) -> int:
        return 4 * PALETTE_SIZE

    @classmethod
    def from_reader(cls, record: ChunkRecord, stream: BinaryIO) -> "Palette":
        record.expect(4 * PALETTE_SIZE)
        return cls(Int32Array.read(stream, PALETTE_SIZE))

    def __bytes__(self):
        return Int32Array.write(self.entries)


@dataclass
class Unsupported(Chunk):
    """Extension chunk whose payload is not decoded."""

    kind: ChunkKind

    def __bytes__(self):
        raise UnsupportedChunkError(f"Cannot write {self.kind.tag!r} chunks")


Payload = Union[Container, ModelCount, Dimensions, VoxelList, Palette, Unsupported]

PAYLOAD_TYPES = {
    ChunkKind.MAIN: Container,
    ChunkKind.PACK: ModelCount,
    ChunkKind.SIZE: Dimensions,
    ChunkKind.XYZI: VoxelList,
    ChunkKind.RGBA: Palette,
}

"""Read and write MagicaVoxel .vox files."""

from dotvox.codec import Decoder, Encoder
from dotvox.data import Data, Model, decode, decode_bytes
from dotvox.errors import (
    BadContextError,
    DotVoxError,
    InvalidVoxelCountError,
    MalformedChunkError,
    MalformedHeaderError,
    MalformedStreamError,
    NoModelsError,
    OutOfOrderChunkError,
    SizeOverflowError,
    TruncatedStreamError,
    UnknownChunkError,
    UnsupportedChunkError,
    UnsupportedVersionError,
)
from dotvox.volume import Color, Volume
from dotvox.voxfile import (
    ChunkKind,
    ChunkRecord,
    Container,
    Dimensions,
    Header,
    ModelCount,
    Palette,
    Unsupported,
    VoxelList,
    pack_color,
    pack_voxel,
    unpack_color,
    unpack_voxel,
)

__all__ = [
    "Decoder",
    "Encoder",
    "Data",
    "Model",
    "decode",
    "decode_bytes",
    "BadContextError",
    "DotVoxError",
    "InvalidVoxelCountError",
    "MalformedChunkError",
    "MalformedHeaderError",
    "MalformedStreamError",
    "NoModelsError",
    "OutOfOrderChunkError",
    "SizeOverflowError",
    "TruncatedStreamError",
    "UnknownChunkError",
    "UnsupportedChunkError",
    "UnsupportedVersionError",
    "Color",
    "Volume",
    "ChunkKind",
    "ChunkRecord",
    "Container",
    "Dimensions",
    "Header",
    "ModelCount",
    "Palette",
    "Unsupported",
    "VoxelList",
    "pack_color",
    "pack_voxel",
    "unpack_color",
    "unpack_voxel",
]

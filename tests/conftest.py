import struct

import pytest

from builders import PALETTE_BYTES, CUBE_VOXELS, chunk, int32s, rgba_chunk, size_chunk, vox, xyzi_chunk


@pytest.fixture
def cube_bytes():
    """A 3x3x3 model surrounded by extension chunks."""
    return vox(
        size_chunk(3, 3, 3),
        xyzi_chunk(CUBE_VOXELS),
        chunk(b"nTRN", int32s(0, 0, 1, -1, -1, 1, 0)),
        chunk(b"nGRP", int32s(1, 0, 1, 2)),
        chunk(b"nSHP", int32s(3, 0, 1, 0, 0)),
        chunk(b"LAYR", int32s(0, 1, 6) + b"_color" + int32s(3) + b"255" + int32s(-1)),
        rgba_chunk(),
        chunk(b"MATL", int32s(1, 1, 5) + b"_type" + int32s(8) + b"_diffuse"),
        chunk(b"rOBJ", int32s(0)),
        chunk(b"rCAM", int32s(0, 0)),
        chunk(b"NOTE", int32s(1, 3) + b"red"),
        chunk(b"IMAP", bytes(range(256))),
        chunk(b"ZZZZ", b"opaque", chunk(b"ZZZY", b"nested")),
    )


@pytest.fixture
def cube_palette():
    return list(struct.unpack("<256i", PALETTE_BYTES))

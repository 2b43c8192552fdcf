"""Exceptions raised while reading and writing .vox files.

Every exception derives from DotVoxError, which is itself a ValueError, so
code that only cares whether a file could be read can catch ValueError.
"""


class DotVoxError(ValueError):
    """Base class for all .vox codec errors."""


class BadContextError(DotVoxError):
    """A codec method was called before its required predecessor."""


class MalformedStreamError(DotVoxError):
    """The input bytes do not follow the .vox structure."""


class MalformedHeaderError(MalformedStreamError):
    """The file does not start with the .vox magic."""


class OutOfOrderChunkError(MalformedStreamError):
    """A chunk appeared somewhere it is not allowed."""


class TruncatedStreamError(MalformedStreamError):
    """The stream ended in the middle of a record."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Unexpected end of stream: wanted {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual


class MalformedChunkError(MalformedStreamError):
    """A chunk's declared lengths do not match its payload."""


class UnsupportedVersionError(DotVoxError):
    """The file version is not the one this package reads."""


class UnsupportedChunkError(DotVoxError):
    """An extension chunk was handed to the encoder."""


class UnknownChunkError(DotVoxError):
    """A chunk was skipped because its payload is not decoded.

    The chunk bytes have already been consumed when this is raised, so the
    stream is positioned at the next chunk.
    """

    def __init__(self, record):
        super().__init__(f"Skipped chunk {record.tag_name}")
        self.record = record


class InvalidVoxelCountError(DotVoxError):
    """A voxel list declares more voxels than a model can hold."""


class SizeOverflowError(DotVoxError):
    """A length or value does not fit in a signed 32-bit integer."""


class NoModelsError(DotVoxError):
    """Encoding was attempted on data without any model."""

import io
import logging

import pytest
import dotvox

from builders import chunk, int32s, size_chunk

HEADER = b"VOX " + int32s(150)


def test_decode_chunk_before_header():
    decoder = dotvox.Decoder(io.BytesIO(size_chunk(1, 1, 1)))
    with pytest.raises(dotvox.BadContextError):
        decoder.decode_chunk()


def test_decode_header_twice():
    decoder = dotvox.Decoder(io.BytesIO(HEADER + HEADER))
    decoder.decode_header()
    with pytest.raises(dotvox.BadContextError):
        decoder.decode_header()


def test_decode_header_bad_magic():
    decoder = dotvox.Decoder(io.BytesIO(b"VOX!" + int32s(150)))
    with pytest.raises(dotvox.MalformedHeaderError):
        decoder.decode_header()


def test_decode_header_keeps_version():
    decoder = dotvox.Decoder(io.BytesIO(b"VOX " + int32s(200)))
    assert decoder.decode_header().version == 200


def test_decode_chunk():
    decoder = dotvox.Decoder(io.BytesIO(HEADER + size_chunk(1, 2, 3)))
    decoder.decode_header()
    record, payload = decoder.decode_chunk()
    assert record == dotvox.ChunkRecord(b"SIZE", 12, 0)
    assert payload == dotvox.Dimensions(1, 2, 3)


def test_unknown_chunk_is_skipped(caplog):
    stream = io.BytesIO(
        HEADER
        + chunk(b"ZZZZ", b"abc", chunk(b"nTRN", b"12"))
        + chunk(b"MATL", int32s(1, 0))
        + size_chunk(1, 2, 3)
    )
    decoder = dotvox.Decoder(stream)
    decoder.decode_header()

    with caplog.at_level(logging.WARNING, logger="dotvox.codec"):
        with pytest.raises(dotvox.UnknownChunkError) as excinfo:
            decoder.decode_chunk()
    assert excinfo.value.record.id == b"ZZZZ"
    assert excinfo.value.record.kind is None
    assert "ZZZZ" in caplog.text

    with pytest.raises(dotvox.UnknownChunkError) as excinfo:
        decoder.decode_chunk()
    assert excinfo.value.record.kind is dotvox.ChunkKind.MATERIAL

    _, payload = decoder.decode_chunk()
    assert payload == dotvox.Dimensions(1, 2, 3)


def test_unknown_chunk_negative_lengths():
    stream = io.BytesIO(
        HEADER + chunk(b"ZZZZ", content_bytes=-8, children_bytes=-8) + size_chunk(4, 5, 6)
    )
    decoder = dotvox.Decoder(stream)
    decoder.decode_header()

    with pytest.raises(dotvox.UnknownChunkError):
        decoder.decode_chunk()
    _, payload = decoder.decode_chunk()
    assert payload == dotvox.Dimensions(4, 5, 6)


def test_unknown_chunk_truncated():
    decoder = dotvox.Decoder(io.BytesIO(HEADER + chunk(b"ZZZZ", bytes(10), content_bytes=100)))
    decoder.decode_header()
    with pytest.raises(dotvox.TruncatedStreamError):
        decoder.decode_chunk()


def test_encode_chunk_before_header():
    encoder = dotvox.Encoder(io.BytesIO())
    dimensions = dotvox.Dimensions(1, 1, 1)
    with pytest.raises(dotvox.BadContextError):
        encoder.encode_chunk(dimensions.record(), dimensions)


def test_encode_header_twice():
    encoder = dotvox.Encoder(io.BytesIO())
    encoder.encode_header(dotvox.Header())
    with pytest.raises(dotvox.BadContextError):
        encoder.encode_header(dotvox.Header())


def test_encode_unsupported_chunk():
    stream = io.BytesIO()
    encoder = dotvox.Encoder(stream)
    encoder.encode_header(dotvox.Header())
    with pytest.raises(dotvox.UnsupportedChunkError):
        encoder.encode_chunk(
            dotvox.ChunkRecord(b"nTRN", 0, 0), dotvox.Unsupported(dotvox.ChunkKind.TRANSFORM)
        )
    assert stream.getvalue() == HEADER


def test_encode_chunk():
    stream = io.BytesIO()
    encoder = dotvox.Encoder(stream)
    encoder.encode_header(dotvox.Header())

    container = dotvox.Container()
    encoder.encode_chunk(container.record(24), container)
    dimensions = dotvox.Dimensions(1, 2, 3)
    encoder.encode_chunk(dimensions.record(), dimensions)

    assert stream.getvalue() == HEADER + chunk(b"MAIN", children_bytes=24) + size_chunk(1, 2, 3)


@pytest.mark.parametrize(
    "kind", [kind for kind in dotvox.ChunkKind if not kind.supported]
)
def test_extension_chunks_are_skipped(kind):
    decoder = dotvox.Decoder(io.BytesIO(HEADER + chunk(kind.tag, int32s(1, 2)) + size_chunk(1, 1, 1)))
    decoder.decode_header()

    with pytest.raises(dotvox.UnknownChunkError) as excinfo:
        decoder.decode_chunk()
    assert excinfo.value.record.kind is kind

    _, payload = decoder.decode_chunk()
    assert payload == dotvox.Dimensions(1, 1, 1)

import logging

import pytest

from psd_extract.compression import decode_rle, decompress, encode_rle
from psd_extract.constants import Compression
from psd_extract.exceptions import DecodeFailed, UnsupportedCompression

logger = logging.getLogger(__name__)

RAW_IMAGE_3x3_8bit = b"\x00\x01\x02\x01\x01\x01\x01\x00\x00"


def test_decompress_raw() -> None:
    assert decompress(RAW_IMAGE_3x3_8bit, Compression.RAW, 3, 3) == RAW_IMAGE_3x3_8bit


@pytest.mark.parametrize(
    "fixture, width, height",
    [
        (RAW_IMAGE_3x3_8bit, 3, 3),
        (bytes(bytearray(range(256))), 128, 2),
        (b"\xff" * 300, 100, 3),
        (b"", 0, 0),
    ],
)
def test_rle(fixture: bytes, width: int, height: int) -> None:
    encoded = encode_rle(fixture, width, height)
    assert decompress(encoded, Compression.RLE, width, height) == fixture


def test_encode_rle_scanline_table() -> None:
    encoded = encode_rle(b"\x05\x05\x05\x01\x02\x03", 3, 2)
    assert encoded == b"\x00\x02\x00\x04" + b"\xfe\x05" + b"\x02\x01\x02\x03"


def test_decode_rle_ignores_trailing_bytes() -> None:
    data = b"\x00\x02\xfe\x05\x00\x00"
    assert decode_rle(data, 3, 1) == b"\x05\x05\x05"


@pytest.mark.parametrize(
    "data, width, height",
    [
        # scanline table cut off
        (b"\x00", 2, 2),
        # scanline declares more bytes than present
        (b"\x00\x04\xfe\x05", 3, 1),
        # scanline decodes to the wrong width
        (b"\x00\x02\xfe\x05", 4, 1),
    ],
)
def test_decode_rle_failure(
    data: bytes, width: int, height: int, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR):
        with pytest.raises(DecodeFailed):
            decode_rle(data, width, height)
    assert "RLE decoding" in caplog.text


@pytest.mark.parametrize(
    "compression",
    [Compression.ZIP, Compression.ZIP_WITH_PREDICTION, 7],
)
def test_unsupported_compression(compression: int) -> None:
    with pytest.raises(UnsupportedCompression):
        decompress(b"\x00" * 4, compression, 2, 2)

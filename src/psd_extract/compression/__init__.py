"""
Image compression utilities for PSD channel data.

Photoshop stores every channel of every layer separately, each prefixed with
a compression mode:

- **RAW** (``Compression.RAW``): Uncompressed raw pixel data
- **RLE** (``Compression.RLE``): Apple PackBits run-length encoding
- **ZIP** / **ZIP_WITH_PREDICTION**: deflate variants, not decoded here

RLE channel data starts with a table of 16-bit byte counts, one per
scanline, followed by the encoded scanlines.

Key functions:

- :py:func:`decompress`: Decompress channel data to a raw plane
- :py:func:`decode_rle`: RLE decoding for a single channel
- :py:func:`encode_rle`: RLE encoding for a single channel

Example usage::

    from psd_extract.compression import decompress, encode_rle
    from psd_extract.constants import Compression

    encoded = encode_rle(plane, width=100, height=100)
    assert decompress(encoded, Compression.RLE, 100, 100) == plane
"""

import logging
import struct
from typing import Union

from psd_extract.compression import rle
from psd_extract.constants import Compression
from psd_extract.exceptions import DecodeFailed, UnsupportedCompression

logger = logging.getLogger(__name__)


def decompress(
    data: bytes,
    compression: Union[Compression, int],
    width: int,
    height: int,
) -> bytes:
    """Decompress channel data.

    :param data: compressed data bytes, without the compression field.
    :param compression: compression type,
            see :py:class:`~psd_extract.constants.Compression`.
    :param width: width.
    :param height: height.
    :return: decompressed plane bytes, one byte per pixel.
    :raise UnsupportedCompression: ZIP variants and unknown modes.
    :raise DecodeFailed: corrupt RLE data.
    """
    if compression == Compression.RAW:
        return data
    elif compression == Compression.RLE:
        return decode_rle(data, width, height)
    elif compression in (Compression.ZIP, Compression.ZIP_WITH_PREDICTION):
        raise UnsupportedCompression(
            "%s compression is not supported" % Compression(compression).name
        )
    raise UnsupportedCompression("Unknown compression mode %d" % compression)


def decode_rle(data: bytes, width: int, height: int) -> bytes:
    """Decode an RLE channel: the scanline length table, then each scanline.

    :raise DecodeFailed: truncated table or stream, run overflow, or a
        result that is not ``width * height`` bytes.
    """
    try:
        result = _decode_scanlines(data, width, height)
    except DecodeFailed as e:
        logger.error("An error occurred during RLE decoding: %s" % e)
        logger.info(
            "Decompression of RLE data failed: width=%d height=%d size=%d"
            % (width, height, len(data))
        )
        raise

    if len(result) != width * height:
        raise DecodeFailed(
            "Expected %d bytes but decoded %d bytes" % (width * height, len(result))
        )
    return result


def _decode_scanlines(data: bytes, width: int, height: int) -> bytes:
    table_size = 2 * height
    if len(data) < table_size:
        raise DecodeFailed(
            "Scanline length table needs %d bytes, got %d" % (table_size, len(data))
        )
    bytes_counts = struct.unpack_from(">%dH" % height, data)

    rows = []
    offset = table_size
    for y, count in enumerate(bytes_counts):
        row = data[offset : offset + count]
        if len(row) != count:
            raise DecodeFailed(
                "Scanline %d declares %d bytes, only %d left" % (y, count, len(row))
            )
        rows.append(rle.decode(row, width))
        offset += count

    if offset < len(data):
        logger.debug("  %d trailing bytes after RLE data" % (len(data) - offset))
    return b"".join(rows)


def encode_rle(data: bytes, width: int, height: int) -> bytes:
    """Encode a ``width * height`` plane as an RLE channel."""
    rows = [rle.encode(data[y * width : (y + 1) * width]) for y in range(height)]
    bytes_counts = struct.pack(">%dH" % height, *map(len, rows))
    return bytes_counts + b"".join(rows)

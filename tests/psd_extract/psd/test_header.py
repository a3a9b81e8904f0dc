import logging
from typing import Iterator

import pytest

from psd_extract.constants import ColorMode
from psd_extract.exceptions import SignatureMismatch, Truncated, UnsupportedVersion
from psd_extract.psd.cursor import ByteCursor
from psd_extract.psd.header import FileHeader

from ..utils import make_header


@pytest.fixture
def fixture() -> Iterator[bytes]:
    yield (
        b"8BPS\x00\x01\x00\x00\x00\x00\x00\x00\x00\x03\x00\x00\x00\x96\x00"
        b"\x00\x00d\x00\x08\x00\x03"
    )


def test_header_read(fixture: bytes) -> None:
    header = FileHeader.frombytes(fixture)
    assert header.signature == b"8BPS"
    assert header.version == 1
    assert header.channels == 3
    assert header.height == 150
    assert header.width == 100
    assert header.depth == 8
    assert header.color_mode == ColorMode.RGB


def test_header_consumes_26_bytes(fixture: bytes) -> None:
    cursor = ByteCursor.frombytes(fixture + b"\x00\x00\x00\x00")
    FileHeader.read(cursor)
    assert cursor.position() == 26


def test_header_signature_mismatch(fixture: bytes) -> None:
    cursor = ByteCursor.frombytes(b"XXXX" + fixture[4:])
    with pytest.raises(SignatureMismatch):
        FileHeader.read(cursor)
    assert cursor.position() == 26


@pytest.mark.parametrize("version", [0, 2])
def test_header_unsupported_version(version: int) -> None:
    with pytest.raises(UnsupportedVersion):
        FileHeader.frombytes(make_header(version=version))


def test_header_truncated(fixture: bytes) -> None:
    with pytest.raises(Truncated):
        FileHeader.frombytes(fixture[:20])


def test_header_unknown_color_mode(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        header = FileHeader.frombytes(make_header(color_mode=42))
    assert header.color_mode == 42
    assert "Unknown color mode" in caplog.text


def test_header_depth_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        header = FileHeader.frombytes(make_header(depth=16))
    assert header.depth == 16
    assert "depth=16" in caplog.text

import io
import logging
import time

import pytest

from psd_extract.exceptions import DeadlineExceeded, Truncated
from psd_extract.psd.cursor import ByteCursor

logger = logging.getLogger(__name__)


def test_read_integers_big_endian() -> None:
    cursor = ByteCursor.frombytes(
        b"\x7f\x00\x01\xff\xfe\x00\x00\x01\x00\xff\xff\xff\xfd"
    )
    assert cursor.read_u8() == 127
    assert cursor.read_u16() == 1
    assert cursor.read_i16() == -2
    assert cursor.read_u32() == 256
    assert cursor.read_i32() == -3
    assert cursor.position() == 13
    assert cursor.remaining() == 0


def test_read_fmt() -> None:
    cursor = ByteCursor.frombytes(b"8BIM\x00\x02")
    assert cursor.read_fmt("4sH") == (b"8BIM", 2)


def test_position_starts_at_file_offset() -> None:
    fp = io.BytesIO(b"\x00\x00\x00\x2a")
    fp.seek(2)
    cursor = ByteCursor(fp)
    assert cursor.position() == 2
    assert cursor.remaining() == 2
    assert cursor.read_u16() == 42


def test_read_exact() -> None:
    cursor = ByteCursor.frombytes(b"abcdef")
    assert cursor.read(0) == b""
    assert cursor.read(4) == b"abcd"
    assert cursor.position() == 4


@pytest.mark.parametrize(
    "data, n",
    [
        (b"", 1),
        (b"\x00\x01", 4),
    ],
)
def test_read_truncated(data: bytes, n: int) -> None:
    cursor = ByteCursor.frombytes(data)
    with pytest.raises(Truncated):
        cursor.read(n)


def test_truncated_is_eof_error() -> None:
    with pytest.raises(EOFError):
        ByteCursor.frombytes(b"\x00").read_u32()


def test_read_negative() -> None:
    with pytest.raises(ValueError):
        ByteCursor.frombytes(b"\x00").read(-1)


def test_skip() -> None:
    cursor = ByteCursor.frombytes(b"\x00" * 8 + b"\x00\x05")
    cursor.skip(8)
    assert cursor.position() == 8
    assert cursor.read_u16() == 5


def test_skip_truncated() -> None:
    cursor = ByteCursor.frombytes(b"\x00" * 4)
    cursor.skip(2)
    with pytest.raises(Truncated):
        cursor.skip(3)
    assert cursor.position() == 2
    cursor.skip(2)
    assert cursor.remaining() == 0


def test_deadline_exceeded() -> None:
    cursor = ByteCursor.frombytes(b"\x00" * 4, deadline=time.monotonic() - 1.0)
    with pytest.raises(DeadlineExceeded):
        cursor.read_u16()
    with pytest.raises(DeadlineExceeded):
        cursor.skip(1)


def test_deadline_not_reached() -> None:
    cursor = ByteCursor.frombytes(b"\x00\x07", deadline=time.monotonic() + 60.0)
    assert cursor.read_u16() == 7

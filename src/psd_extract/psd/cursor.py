"""
Positional big-endian reader over a seekable byte source.

Every section reader in :py:mod:`psd_extract.psd` pulls its fields through a
:py:class:`ByteCursor`. The cursor is owned by a single
:py:class:`~psd_extract.psd.document.DocumentWalker` for the duration of a
decode pass and only ever moves forward.

Example::

    import io
    from psd_extract.psd.cursor import ByteCursor

    cursor = ByteCursor(io.BytesIO(b"\\x00\\x01\\xff\\xfe"))
    assert cursor.read_u16() == 1
    assert cursor.read_i16() == -2
    assert cursor.position() == 4
"""

import io
import logging
import os
import time
from typing import Any, BinaryIO, Optional

from psd_extract.exceptions import DeadlineExceeded, Truncated
from psd_extract.psd.bin_utils import calcsize, unpack

logger = logging.getLogger(__name__)


class ByteCursor:
    """
    Forward-only binary reader.

    :param fp: seekable binary file-like object.
    :param deadline: optional :py:func:`time.monotonic` timestamp; reads
        after it raise :py:class:`~psd_extract.exceptions.DeadlineExceeded`.
    """

    def __init__(self, fp: BinaryIO, deadline: Optional[float] = None):
        self._fp = fp
        self._deadline = deadline
        self._position = fp.tell()
        fp.seek(0, os.SEEK_END)
        self._size = fp.tell()
        fp.seek(self._position, os.SEEK_SET)

    @classmethod
    def frombytes(cls, data: bytes, **kwargs: Any) -> "ByteCursor":
        return cls(io.BytesIO(data), **kwargs)

    def position(self) -> int:
        """Current absolute offset."""
        return self._position

    def remaining(self) -> int:
        """Number of bytes left in the source."""
        return self._size - self._position

    def read(self, n: int) -> bytes:
        """Read exactly ``n`` bytes."""
        self._check_deadline()
        if n < 0:
            raise ValueError("negative read length %d" % n)
        data = self._fp.read(n)
        self._position += len(data)
        if len(data) != n:
            raise Truncated(
                "expected %d bytes at offset %d, only %d available"
                % (n, self._position - len(data), len(data))
            )
        return data

    def skip(self, n: int) -> None:
        """Advance ``n`` bytes without reading them."""
        self._check_deadline()
        if n < 0:
            raise ValueError("negative skip length %d" % n)
        if n > self.remaining():
            raise Truncated(
                "cannot skip %d bytes at offset %d, only %d remaining"
                % (n, self._position, self.remaining())
            )
        self._fp.seek(n, os.SEEK_CUR)
        self._position += n

    def read_fmt(self, fmt: str) -> tuple:
        """Read and unpack a big-endian :py:mod:`struct` format."""
        return unpack(fmt, self.read(calcsize(fmt)))

    def read_u8(self) -> int:
        return self.read_fmt("B")[0]

    def read_u16(self) -> int:
        return self.read_fmt("H")[0]

    def read_i16(self) -> int:
        return self.read_fmt("h")[0]

    def read_u32(self) -> int:
        return self.read_fmt("I")[0]

    def read_i32(self) -> int:
        return self.read_fmt("i")[0]

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise DeadlineExceeded("decode deadline passed at offset %d" % self._position)

"""
Binary processing utilities.

All multi-byte values in a PSD file are big-endian, so every format string
passed here is prefixed with ``>``.
"""

import struct


def unpack(fmt: str, data: bytes) -> tuple:
    fmt = str(">" + fmt)
    return struct.unpack(fmt, data)


def calcsize(fmt: str) -> int:
    return struct.calcsize(str(">" + fmt))


def pad(number: int, divisor: int) -> int:
    """Round ``number`` up to the next multiple of ``divisor``."""
    if number % divisor:
        number = (number // divisor + 1) * divisor
    return number


def padding(size: int, divisor: int = 2) -> int:
    """Number of padding bytes that align ``size`` to ``divisor``."""
    return pad(size, divisor) - size


def trimmed_repr(data: bytes, trim_length: int = 16) -> str:
    if isinstance(data, bytes):
        if len(data) > trim_length:
            return repr(
                data[:trim_length] + b" ... =" + str(len(data)).encode("ascii")
            )
    return repr(data)

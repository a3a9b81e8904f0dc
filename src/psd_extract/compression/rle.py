"""
Pure Python RLE (Run-Length Encoding) scanline codec.

PackBits is a simple byte-oriented run-length compression scheme used in PSD
files for channel data. Each scanline is a sequence of (control, payload)
pairs, where the control byte is read as a signed 8-bit value ``c``:

- ``0 <= c <= 127``: copy the next ``c + 1`` literal bytes
- ``-127 <= c <= -1``: repeat the next byte ``1 - c`` times
- ``c == -128``: no-op

Encoding example::

    Input:  [A, A, A, B, C, C, C, C]
    Output: [-2, A, 0, B, -3, C]
            (repeat A 3x, copy B 1x, repeat C 4x)

Functions:

- :py:func:`decode`: Decompress one RLE-encoded scanline
- :py:func:`encode`: Compress one scanline
"""

from psd_extract.exceptions import DecodeFailed

#: Longest run a single control byte can describe.
MAX_RUN = 128


def decode(data: bytes, size: int) -> bytes:
    """decode(data, size) -> bytes

    Apple PackBits RLE decoder for a single scanline of ``size`` bytes.

    :raise DecodeFailed: a run overflows ``size``, a run is cut off by the
        end of ``data``, or the result is shorter than ``size``.
    """
    i, j = 0, 0
    length = len(data)
    result = bytearray(size)

    while i < length:
        control = data[i]
        i += 1
        if control == 128:
            continue
        if control > 128:
            count = 257 - control
            if i >= length:
                raise DecodeFailed("Repeat run truncated at byte %d" % (i - 1))
            if j + count > size:
                raise DecodeFailed(
                    "Repeat run of %d overflows scanline width %d at %d"
                    % (count, size, j)
                )
            result[j : j + count] = data[i : i + 1] * count
            i += 1
        else:
            count = control + 1
            if i + count > length:
                raise DecodeFailed("Literal run truncated at byte %d" % (i - 1))
            if j + count > size:
                raise DecodeFailed(
                    "Literal run of %d overflows scanline width %d at %d"
                    % (count, size, j)
                )
            result[j : j + count] = data[i : i + count]
            i += count
        j += count

    if j != size:
        raise DecodeFailed("Expected %d bytes but decoded %d bytes" % (size, j))

    return bytes(result)


def encode(data: bytes) -> bytes:
    """encode(data) -> bytes

    Apple PackBits RLE encoder. Runs of three or more identical bytes become
    repeat runs; everything else is gathered into literal runs.
    """
    length = len(data)
    result = bytearray()
    literal_start = 0
    i = 0

    def flush_literal(end: int) -> None:
        start = literal_start
        while start < end:
            count = min(end - start, MAX_RUN)
            result.append(count - 1)
            result.extend(data[start : start + count])
            start += count

    while i < length:
        run = 1
        while i + run < length and run < MAX_RUN and data[i + run] == data[i]:
            run += 1
        if run >= 3:
            flush_literal(i)
            result.append(257 - run)
            result.append(data[i])
            i += run
            literal_start = i
        else:
            i += run

    flush_literal(length)
    return bytes(result)

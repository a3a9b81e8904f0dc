"""
Color mode data structure.
"""

import logging
from typing import Any, TypeVar

from attrs import define

from psd_extract.psd.base import BaseElement
from psd_extract.psd.cursor import ByteCursor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ColorModeData")


@define(repr=True, frozen=True)
class ColorModeData(BaseElement):
    """
    Color mode data section of the PSD file.

    For indexed color images the data is the color table for the image in a
    non-interleaved order. The payload is not interpreted; the cursor is
    advanced past it so the following sections stay aligned.

    .. py:attribute:: length

        Declared payload length.
    """

    length: int = 0

    @classmethod
    def read(cls: type[T], cursor: ByteCursor, **kwargs: Any) -> T:
        start_pos = cursor.position()
        length = cursor.read_u32()
        logger.debug("reading color mode data, len=%d, offset=%d" % (length, start_pos))
        cursor.skip(length)
        return cls(length)

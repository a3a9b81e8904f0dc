"""
Image resources section structure.

Image resource blocks (resolution, ICC profile, thumbnails, ...) are not
decoded; only the section length is kept.
"""

import logging
from typing import Any, TypeVar

from attrs import define

from psd_extract.psd.base import BaseElement
from psd_extract.psd.cursor import ByteCursor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ImageResources")


@define(repr=True, frozen=True)
class ImageResources(BaseElement):
    """
    Image resources section of the PSD file.

    .. py:attribute:: length

        Declared section length, skipped on read.
    """

    length: int = 0

    @classmethod
    def read(cls: type[T], cursor: ByteCursor, **kwargs: Any) -> T:
        start_pos = cursor.position()
        length = cursor.read_u32()
        logger.debug("reading image resources, len=%d, offset=%d" % (length, start_pos))
        cursor.skip(length)
        return cls(length)

"""
File header structure.
"""

import logging
from typing import Any, TypeVar, Union

from attrs import define, field

from psd_extract.constants import PSD_SIGNATURE, PSD_VERSION, ColorMode
from psd_extract.exceptions import SignatureMismatch, UnsupportedVersion
from psd_extract.psd.base import BaseElement
from psd_extract.psd.cursor import ByteCursor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="FileHeader")


@define(repr=True, frozen=True)
class FileHeader(BaseElement):
    """
    Header section of the PSD file.

    Example::

        from psd_extract.psd.header import FileHeader

        header = FileHeader.frombytes(data)
        print(header.width, header.height)

    .. py:attribute:: signature

        Signature: always equal to ``b'8BPS'``.

    .. py:attribute:: version

        Version number. Only 1 (PSD) is accepted.

    .. py:attribute:: channels

        The number of channels in the image, including any user-defined alpha
        channel.

    .. py:attribute:: height

        The height of the image in pixels.

    .. py:attribute:: width

        The width of the image in pixels.

    .. py:attribute:: depth

        The number of bits per channel.

    .. py:attribute:: color_mode

        The color mode of the file. See
        :py:class:`~psd_extract.constants.ColorMode`. Unknown modes are kept
        as plain integers.
    """

    _FORMAT = "4sH6xHIIHH"

    signature: bytes = field(default=PSD_SIGNATURE, repr=False)
    version: int = PSD_VERSION
    channels: int = 4
    height: int = 64
    width: int = 64
    depth: int = 8
    color_mode: Union[ColorMode, int] = ColorMode.RGB

    @classmethod
    def read(cls: type[T], cursor: ByteCursor, **kwargs: Any) -> T:
        start_pos = cursor.position()
        logger.debug("reading header, offset=%d" % start_pos)
        values = cursor.read_fmt(cls._FORMAT)
        signature, version, channels, height, width, depth, color_mode = values
        if signature != PSD_SIGNATURE:
            raise SignatureMismatch("This is not a PSD file: signature=%r" % signature)
        if version != PSD_VERSION:
            raise UnsupportedVersion("Unsupported PSD version (%d)" % version)

        try:
            color_mode = ColorMode(color_mode)
        except ValueError:
            logger.warning("Unknown color mode: %d" % color_mode)
        if depth != 8:
            logger.warning("Only 8-bit channels are decoded, depth=%d" % depth)

        return cls(signature, version, channels, height, width, depth, color_mode)

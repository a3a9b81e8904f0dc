"""
Channel compositing.

Layer channels are stored as separate planes. The compositor writes each
decoded plane into its byte lane of an interleaved RGBA raster::

    channel id   lane
    ----------   ----
     0           R
     1           G
     2           B
    -1           A

Lanes are disjoint, so planes can be composited in any order. Pixels start
as fully transparent black.
"""

import logging
from typing import Iterable, Optional, Union

import numpy as np
from attrs import cmp_using, define, field
from PIL import Image

from psd_extract.constants import ChannelID
from psd_extract.exceptions import PlaneSizeMismatch, UnknownChannel

logger = logging.getLogger(__name__)

LANES = {
    ChannelID.CHANNEL_0: 0,
    ChannelID.CHANNEL_1: 1,
    ChannelID.CHANNEL_2: 2,
    ChannelID.TRANSPARENCY_MASK: 3,
}


def new_raster(width: int, height: int) -> np.ndarray:
    """Create a transparent ``(height, width, 4)`` uint8 RGBA raster."""
    return np.zeros((height, width, 4), dtype=np.uint8)


def composite_channel(
    raster: np.ndarray, plane: bytes, channel_id: Union[ChannelID, int]
) -> np.ndarray:
    """
    Write one channel plane into ``raster`` in place.

    :param raster: destination from :py:func:`new_raster`.
    :param plane: decoded plane, one byte per pixel in row order.
    :param channel_id: channel id of the plane.
    :return: ``raster``.
    :raise UnknownChannel: ``channel_id`` has no lane.
    :raise PlaneSizeMismatch: ``plane`` does not cover the raster exactly.
    """
    lane = LANES.get(channel_id)
    if lane is None:
        raise UnknownChannel("Unknown channel id %d" % channel_id)

    height, width = raster.shape[:2]
    if len(plane) != width * height:
        raise PlaneSizeMismatch(
            "Channel %d has %d bytes, expected %d for %dx%d"
            % (channel_id, len(plane), width * height, width, height),
            expected=width * height,
            actual=len(plane),
        )

    raster[:, :, lane] = np.frombuffer(plane, dtype=np.uint8).reshape((height, width))
    return raster


def composite_layer(
    width: int, height: int, planes: Iterable[tuple[Union[ChannelID, int], bytes]]
) -> "LayerImage":
    """
    Composite ``(channel_id, plane)`` pairs of one layer into a
    :py:class:`LayerImage`.
    """
    raster = new_raster(width, height)
    for channel_id, plane in planes:
        composite_channel(raster, plane, channel_id)
    return LayerImage(raster)


def _freeze(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@define(repr=False, frozen=True)
class LayerImage:
    """
    Decoded layer raster.

    .. py:attribute:: pixels

        Read-only ``numpy.uint8`` array of shape ``(height, width, 4)`` in
        RGBA order.
    """

    pixels: np.ndarray = field(converter=_freeze, eq=cmp_using(eq=np.array_equal))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    def __repr__(self) -> str:
        return "LayerImage(width=%d, height=%d)" % self.size

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def numpy(self) -> np.ndarray:
        """Get the RGBA raster as a read-only array."""
        return self.pixels

    def tobytes(self) -> bytes:
        """Interleaved RGBA bytes in row order."""
        return self.pixels.tobytes()

    def topil(self) -> Optional[Image.Image]:
        """
        Get PIL Image of the layer.

        :return: RGBA :py:class:`PIL.Image.Image`, or `None` if the layer has
            no pixels.
        """
        if self.is_empty():
            return None
        return Image.frombytes("RGBA", self.size, self.tobytes())

"""
PSD Image module.

This module provides the main :py:class:`PSDImage` class, which is the primary
entry point for users of psd-extract. It wraps the low-level
:py:class:`~psd_extract.psd.PSD` structure and pairs each layer record with
its decoded raster.

Example usage::

    from psd_extract import PSDImage

    psd = PSDImage.open('document.psd')
    print("Size: %dx%d" % psd.size)

    for index, layer in enumerate(psd):
        image = layer.topil()
        if image is not None:
            image.save('layer%d.png' % index)
"""

import logging
import os
import time
from typing import Any, BinaryIO, Iterator, Optional, Union

import numpy as np
from PIL import Image

from psd_extract.composite import LayerImage
from psd_extract.constants import BlendMode, Clipping, ColorMode
from psd_extract.psd.document import PSD, Diagnostic
from psd_extract.psd.header import FileHeader
from psd_extract.psd.layer_and_mask import LayerRecord

logger = logging.getLogger(__name__)


class Layer:
    """
    Read-only view of one decoded layer.

    :param record: :py:class:`~psd_extract.psd.layer_and_mask.LayerRecord`.
    :param image: :py:class:`~psd_extract.composite.LayerImage`, or `None` if
        the layer could not be decoded.
    """

    def __init__(self, record: LayerRecord, image: Optional[LayerImage]):
        self._record = record
        self._image = image

    @property
    def left(self) -> int:
        return self._record.left

    @property
    def top(self) -> int:
        return self._record.top

    @property
    def right(self) -> int:
        return self._record.right

    @property
    def bottom(self) -> int:
        return self._record.bottom

    @property
    def width(self) -> int:
        """
        Width of the layer.

        :return: int
        """
        return self._record.width

    @property
    def height(self) -> int:
        """
        Height of the layer.

        :return: int
        """
        return self._record.height

    @property
    def size(self) -> tuple[int, int]:
        """
        (width, height) tuple.

        :return: `tuple`
        """
        return self.width, self.height

    @property
    def bbox(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple."""
        return self.left, self.top, self.right, self.bottom

    @property
    def blend_mode(self) -> Union[BlendMode, bytes, None]:
        """
        Blend mode of this layer.

        :return: :py:class:`~psd_extract.constants.BlendMode`, raw bytes for
            an unknown key, or `None` when the record signature is invalid.
        """
        return self._record.blend_mode

    @property
    def opacity(self) -> int:
        """
        Opacity of this layer in [0, 255] range.

        :return: int
        """
        return self._record.opacity

    @property
    def clipping(self) -> bool:
        """
        Clipping flag for this layer.

        :return: `bool`
        """
        return self._record.clipping == Clipping.NON_BASE

    @property
    def visible(self) -> bool:
        """
        Layer visibility.

        :return: `bool`
        """
        return self._record.flags.visible

    @property
    def image(self) -> Optional[LayerImage]:
        """Decoded raster. See :py:class:`~psd_extract.composite.LayerImage`."""
        return self._image

    def has_pixels(self) -> bool:
        """
        Returns True if the layer has a non-empty raster. When this is True,
        `topil` method returns :py:class:`PIL.Image.Image`.

        :return: `bool`
        """
        return self._image is not None and not self._image.is_empty()

    def topil(self) -> Optional[Image.Image]:
        """
        Get PIL Image of the layer.

        :return: :py:class:`PIL.Image.Image`, or `None` if the layer has no
            pixels.
        """
        if self._image is None:
            return None
        return self._image.topil()

    def numpy(self) -> Optional[np.ndarray]:
        """
        Get the layer raster as a ``(height, width, 4)`` uint8 array.

        :return: :py:class:`numpy.ndarray`, or `None` if the layer could not
            be decoded.
        """
        if self._image is None:
            return None
        return self._image.numpy()

    def __repr__(self) -> str:
        return "%s(size=%dx%d%s%s)" % (
            self.__class__.__name__,
            self.width,
            self.height,
            "" if self.visible else " hidden",
            " clip" if self.clipping else "",
        )


class PSDImage:
    """
    Photoshop PSD document.

    The low-level data structure is accessible at :py:attr:`PSDImage._record`.

    Example::

        from psd_extract import PSDImage

        psdimage = PSDImage.open('example.psd')
        for layer in psdimage:
            array = layer.numpy()
    """

    def __init__(self, data: PSD):
        if not isinstance(data, PSD):
            raise TypeError("Expected PSD instance, got %s" % type(data).__name__)
        self._record = data
        self._layers = [
            Layer(record, image)
            for record, image in zip(data.layer_records, data.layer_images)
        ]

    @classmethod
    def open(
        cls,
        fp: Union[BinaryIO, str, bytes, os.PathLike],
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> "PSDImage":
        """
        Open a PSD document.

        :param fp: filename or file-like object.
        :param timeout: seconds the decode may take before it raises
            :py:class:`~psd_extract.exceptions.DeadlineExceeded`.
        :return: A :py:class:`~psd_extract.api.psd_image.PSDImage` object.
        """
        if timeout is not None:
            kwargs["deadline"] = time.monotonic() + timeout
        if isinstance(fp, (str, bytes, os.PathLike)):
            with open(fp, "rb") as f:
                self = cls(PSD.read(f, **kwargs))
        else:
            self = cls(PSD.read(fp, **kwargs))
        return self

    @property
    def header(self) -> FileHeader:
        return self._record.header

    @property
    def width(self) -> int:
        """
        Document width.

        :return: `int`
        """
        return self._record.header.width

    @property
    def height(self) -> int:
        """
        Document height.

        :return: `int`
        """
        return self._record.header.height

    @property
    def size(self) -> tuple[int, int]:
        """
        (width, height) tuple.

        :return: `tuple`
        """
        return self.width, self.height

    @property
    def color_mode(self) -> Union[ColorMode, int]:
        """
        Document color mode, such as 'RGB' or 'GRAYSCALE'. See
        :py:class:`~psd_extract.constants.ColorMode`.

        :return: :py:class:`~psd_extract.constants.ColorMode`
        """
        return self._record.header.color_mode

    @property
    def has_merged_alpha(self) -> bool:
        """Whether the first alpha channel holds the merged transparency."""
        layer_info = self._record.layer_info
        return layer_info is not None and layer_info.has_merged_alpha

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """Length mismatches found while decoding."""
        return self._record.diagnostics

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]

    def __repr__(self) -> str:
        return ("%s(mode=%s size=%dx%d depth=%d channels=%d)") % (
            self.__class__.__name__,
            getattr(self.color_mode, "name", self.color_mode),
            self.width,
            self.height,
            self._record.header.depth,
            self._record.header.channels,
        )

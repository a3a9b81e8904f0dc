"""
PSD document structure and the walker that decodes it.

A PSD file is a fixed sequence of sections, each immediately following the
previous one::

    FileHeader
    ColorModeData           4-byte length + payload (skipped)
    ImageResources          4-byte length + payload (skipped)
    LayerAndMaskInformation 4-byte length, then
        LayerInfo               length, layer count, records, channel data
        GlobalLayerMaskInfo     length [+ fields]
        tagged blocks           until the section's byte budget is used up

:py:class:`DocumentWalker` drives a single
:py:class:`~psd_extract.psd.cursor.ByteCursor` through these sections in
order, counts the bytes it consumes and reconciles them against the declared
lengths. Length mismatches are common in files written by third-party tools,
so they are collected as :py:class:`Diagnostic` entries instead of failing
the decode.
"""

import logging
from enum import Enum
from typing import Any, BinaryIO, Optional, TypeVar

from attrs import define, evolve, field

from psd_extract.composite import LANES, LayerImage, composite_layer
from psd_extract.compression import decompress
from psd_extract.exceptions import (
    BudgetUnderrun,
    InvalidBlockSignature,
    PlaneSizeMismatch,
    Truncated,
)
from psd_extract.psd.base import BaseElement
from psd_extract.psd.bin_utils import padding
from psd_extract.psd.color_mode_data import ColorModeData
from psd_extract.psd.cursor import ByteCursor
from psd_extract.psd.header import FileHeader
from psd_extract.psd.image_resources import ImageResources
from psd_extract.psd.layer_and_mask import (
    ChannelDataList,
    GlobalLayerMaskInfo,
    LayerAndMaskInformation,
    LayerInfo,
    LayerRecord,
    LayerRecords,
)
from psd_extract.psd.tagged_blocks import TaggedBlocks

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="PSD")

#: Size of a 4-byte section length field.
LENGTH_FIELD_SIZE = 4

#: Size of the signed 16-bit layer count.
LAYER_COUNT_SIZE = 2


class Stage(Enum):
    """Decode stages, in document order."""

    HEADER = "header"
    COLOR_MODE_DATA = "color mode data"
    IMAGE_RESOURCES = "image resources"
    LAYER_AND_MASK_INFO = "layer and mask info"
    LAYER_INFO = "layer info"
    LAYER_RECORDS = "layer records"
    CHANNEL_DATA = "channel data"
    GLOBAL_LAYER_MASK_INFO = "global layer mask info"
    TAGGED_BLOCKS = "tagged blocks"
    DONE = "done"


@define(frozen=True)
class Diagnostic:
    """
    Non-fatal inconsistency between a declared and a consumed byte count.

    .. py:attribute:: section

        Section name.

    .. py:attribute:: declared

        Declared length.

    .. py:attribute:: actual

        Bytes actually accounted for.

    .. py:attribute:: message

        Human readable summary.
    """

    section: str
    declared: int
    actual: int
    message: str = ""


@define(repr=False, frozen=True)
class PSD(BaseElement):
    """
    Decoded PSD document.

    Example::

        from psd_extract.psd import PSD

        with open(input_file, 'rb') as f:
            psd = PSD.read(f)

        for record, image in zip(psd.layer_records, psd.layer_images):
            print(record.blend_mode, image.size)

    .. py:attribute:: header

        See :py:class:`~psd_extract.psd.header.FileHeader`.

    .. py:attribute:: color_mode_data

        See :py:class:`~psd_extract.psd.color_mode_data.ColorModeData`.

    .. py:attribute:: image_resources

        See :py:class:`~psd_extract.psd.image_resources.ImageResources`.

    .. py:attribute:: layer_and_mask_information

        See :py:class:`~psd_extract.psd.layer_and_mask.LayerAndMaskInformation`.

    .. py:attribute:: layer_images

        One :py:class:`~psd_extract.composite.LayerImage` per layer record,
        in document order. ``None`` for a layer whose channels did not fit
        its bounds; a :py:class:`Diagnostic` names it.

    .. py:attribute:: diagnostics

        List of :py:class:`Diagnostic`.

    .. py:attribute:: consumed_layer_info_size

        Bytes of layer count, layer records and their extra data.

    .. py:attribute:: channel_image_data_size

        Sum of the declared channel data lengths of all layers.
    """

    header: FileHeader = field(factory=FileHeader)
    color_mode_data: ColorModeData = field(factory=ColorModeData)
    image_resources: ImageResources = field(factory=ImageResources)
    layer_and_mask_information: LayerAndMaskInformation = field(
        factory=LayerAndMaskInformation
    )
    layer_images: list[Optional[LayerImage]] = field(factory=list)
    diagnostics: list[Diagnostic] = field(factory=list)
    consumed_layer_info_size: int = 0
    channel_image_data_size: int = 0

    @classmethod
    def read(
        cls: type[T],
        fp: BinaryIO,
        deadline: Optional[float] = None,
        **kwargs: Any,
    ) -> T:
        """
        Decode a document from a seekable binary file object.

        :param fp: file-like object positioned at the file header.
        :param deadline: optional :py:func:`time.monotonic` deadline.
        """
        return DocumentWalker(ByteCursor(fp, deadline=deadline)).walk()  # type: ignore[return-value]

    @property
    def layer_info(self) -> Optional[LayerInfo]:
        return self.layer_and_mask_information.layer_info

    @property
    def layer_records(self) -> LayerRecords:
        layer_info = self.layer_info
        if layer_info is None:
            return LayerRecords()
        return layer_info.layer_records

    def __repr__(self) -> str:
        return "PSD(header=%r, layers=%d, diagnostics=%d)" % (
            self.header,
            len(self.layer_images),
            len(self.diagnostics),
        )


class DocumentWalker:
    """
    Sequential decoder of one document.

    The walker moves through :py:class:`Stage` values strictly in order and
    stops at the first exception. :py:attr:`stage` tells where it stopped.

    :param cursor: cursor positioned at the file header.
    """

    def __init__(self, cursor: ByteCursor):
        self.cursor = cursor
        self.stage = Stage.HEADER
        self.consumed_layer_info_size = 0
        self.channel_image_data_size = 0
        self.diagnostics: list[Diagnostic] = []

    def walk(self) -> PSD:
        cursor = self.cursor
        header = FileHeader.read(cursor)
        logger.debug("read %s" % (header,))

        self._enter(Stage.COLOR_MODE_DATA)
        color_mode_data = ColorModeData.read(cursor)

        self._enter(Stage.IMAGE_RESOURCES)
        image_resources = ImageResources.read(cursor)

        self._enter(Stage.LAYER_AND_MASK_INFO)
        layer_and_mask_info = LayerAndMaskInformation.read(cursor)

        document = PSD(
            header=header,
            color_mode_data=color_mode_data,
            image_resources=image_resources,
            layer_and_mask_information=layer_and_mask_info,
        )
        if layer_and_mask_info.length == 0:
            self._enter(Stage.DONE)
            return document

        self._enter(Stage.LAYER_INFO)
        layer_info = LayerInfo.read(cursor)
        if layer_info.length:
            self.consumed_layer_info_size += LAYER_COUNT_SIZE

        self._enter(Stage.LAYER_RECORDS)
        layer_records = self._read_layer_records(abs(layer_info.layer_count))
        layer_info = evolve(layer_info, layer_records=layer_records)

        self._enter(Stage.CHANNEL_DATA)
        layer_images = self._read_layer_images(layer_records)
        channel_padding = padding(self.channel_image_data_size, 2)
        if channel_padding:
            logger.debug("  odd channel image data size, skip padding")
            cursor.skip(channel_padding)
        self._reconcile_layer_info(layer_info, channel_padding)

        self._enter(Stage.GLOBAL_LAYER_MASK_INFO)
        global_layer_mask_info = GlobalLayerMaskInfo.read(cursor)
        if global_layer_mask_info.is_broken:
            self._report(
                Stage.GLOBAL_LAYER_MASK_INFO,
                GlobalLayerMaskInfo._FIXED_SIZE,
                global_layer_mask_info.length,
                "global layer mask info is shorter than its fixed fields",
            )

        document = evolve(
            document,
            layer_and_mask_information=evolve(
                layer_and_mask_info,
                layer_info=layer_info,
                global_layer_mask_info=global_layer_mask_info,
            ),
            layer_images=layer_images,
            diagnostics=list(self.diagnostics),
            consumed_layer_info_size=self.consumed_layer_info_size,
            channel_image_data_size=self.channel_image_data_size,
        )

        self._enter(Stage.TAGGED_BLOCKS)
        budget = layer_and_mask_info.length - (
            LENGTH_FIELD_SIZE
            + self.consumed_layer_info_size
            + self.channel_image_data_size
            + channel_padding
            + LENGTH_FIELD_SIZE
            + global_layer_mask_info.length
        )
        logger.debug("  tagged block budget=%d" % budget)
        if budget < 0:
            self._report(
                Stage.TAGGED_BLOCKS,
                layer_and_mask_info.length,
                layer_and_mask_info.length - budget,
                "layer and mask info is %d bytes shorter than its content" % -budget,
            )
            tagged_blocks = TaggedBlocks()
        else:
            try:
                tagged_blocks = TaggedBlocks.read(cursor, budget)
            except (InvalidBlockSignature, BudgetUnderrun, Truncated) as e:
                e.document = document
                raise

        self._enter(Stage.DONE)
        return evolve(
            document,
            layer_and_mask_information=evolve(
                document.layer_and_mask_information, tagged_blocks=tagged_blocks
            ),
            diagnostics=list(self.diagnostics),
        )

    def _enter(self, stage: Stage) -> None:
        logger.debug("%s, offset=%d" % (stage.value, self.cursor.position()))
        self.stage = stage

    def _report(self, stage: Stage, declared: int, actual: int, message: str) -> None:
        logger.warning("%s: declared=%d, actual=%d" % (message, declared, actual))
        self.diagnostics.append(Diagnostic(stage.value, declared, actual, message))

    def _read_layer_records(self, count: int) -> LayerRecords:
        items = []
        for index in range(count):
            start_pos = self.cursor.position()
            record = LayerRecord.read(self.cursor)
            if not record.is_valid:
                logger.warning("layer %d has an invalid record signature" % index)
            self.cursor.skip(record.extra_length)
            self.consumed_layer_info_size += self.cursor.position() - start_pos
            items.append(record)
        return LayerRecords(items)

    def _read_layer_images(
        self, layer_records: LayerRecords
    ) -> list[Optional[LayerImage]]:
        # Compressed channel bytes are read for every layer first, then decoded
        # layer by layer; nothing but the decoded rasters is kept.
        channel_image_data = []
        for record in layer_records:
            start_pos = self.cursor.position()
            channels = ChannelDataList.read(self.cursor, record.channel_info)
            self.channel_image_data_size += record.channel_data_length
            logger.debug(
                "  read channel image data, len=%d, offset=%d"
                % (self.cursor.position() - start_pos, start_pos)
            )
            channel_image_data.append(channels)

        layer_images: list[Optional[LayerImage]] = []
        for index, (record, channels) in enumerate(
            zip(layer_records, channel_image_data)
        ):
            logger.debug(
                "  decoding layer %d, width=%d, height=%d"
                % (index, record.width, record.height)
            )
            try:
                layer_images.append(decode_layer(record, channels))
            except PlaneSizeMismatch as e:
                self._report(
                    Stage.CHANNEL_DATA,
                    e.expected,
                    e.actual,
                    "layer %d dropped: %s" % (index, e),
                )
                layer_images.append(None)
        return layer_images

    def _reconcile_layer_info(self, layer_info: LayerInfo, channel_padding: int) -> None:
        consumed = self.consumed_layer_info_size + self.channel_image_data_size
        logger.debug(
            "  consumed layer info size=%d, channel image data size=%d"
            % (self.consumed_layer_info_size, self.channel_image_data_size)
        )
        if layer_info.length not in (consumed, consumed + channel_padding):
            self._report(
                Stage.LAYER_INFO,
                layer_info.length,
                consumed,
                "layer info length mismatch",
            )


def decode_layer(record: LayerRecord, channels: ChannelDataList) -> LayerImage:
    """
    Decompress and composite the channels of one layer.

    Channels without an RGBA lane, such as user masks, are skipped.

    :raise UnsupportedCompression: a channel is ZIP compressed.
    :raise DecodeFailed: a channel's RLE data is corrupt.
    :raise PlaneSizeMismatch: a raw channel does not match the layer size.
    """
    width, height = record.width, record.height
    planes = []
    for info, channel in zip(record.channel_info, channels):
        if info.id not in LANES:
            logger.warning("Skipping channel %d without an RGBA lane" % info.id)
            continue
        plane = decompress(channel.data, channel.compression, width, height)
        planes.append((info.id, plane))
    return composite_layer(width, height, planes)

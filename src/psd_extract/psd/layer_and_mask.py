"""
Layer and mask data structures.

This module implements the readers for the "Layer and Mask Information"
section of PSD files. The section is nested::

    LayerAndMaskInformation (length)
        LayerInfo (length, layer count)
            LayerRecord * abs(layer count)   each followed by extra data
            ChannelData per layer, per channel, in record order
            padding to an even length
        GlobalLayerMaskInfo (length [+ fields])
        additional layer information blocks (see tagged_blocks)

Key classes:

- :py:class:`LayerAndMaskInformation`: Top-level container for all layer data
- :py:class:`LayerInfo`: Layer count and the parsed layer records
- :py:class:`LayerRecords`: List of individual layer records
- :py:class:`LayerRecord`: Single layer metadata (bounds, blend mode, etc.)
- :py:class:`ChannelInfo`: Channel id and stored length within a record
- :py:class:`ChannelData`: Single channel's compressed pixel data
- :py:class:`GlobalLayerMaskInfo`: Document-wide mask settings

Readers here consume exactly their own fields. Skipping a record's extra
data, reading channel data and reconciling declared lengths is the job of
:py:class:`~psd_extract.psd.document.DocumentWalker`.
"""

import logging
from typing import Any, Optional, TypeVar, Union

from attrs import define, field

from psd_extract.constants import (
    LAYER_SIGNATURE,
    BlendMode,
    ChannelID,
    Clipping,
    Compression,
    GlobalLayerMaskKind,
)
from psd_extract.exceptions import DecodeFailed
from psd_extract.psd.base import BaseElement, ListElement
from psd_extract.psd.bin_utils import trimmed_repr
from psd_extract.psd.cursor import ByteCursor
from psd_extract.validators import range_

logger = logging.getLogger(__name__)

T_LayerAndMaskInformation = TypeVar(
    "T_LayerAndMaskInformation", bound="LayerAndMaskInformation"
)
T_LayerInfo = TypeVar("T_LayerInfo", bound="LayerInfo")
T_ChannelInfo = TypeVar("T_ChannelInfo", bound="ChannelInfo")
T_LayerFlags = TypeVar("T_LayerFlags", bound="LayerFlags")
T_LayerRecord = TypeVar("T_LayerRecord", bound="LayerRecord")
T_ChannelDataList = TypeVar("T_ChannelDataList", bound="ChannelDataList")
T_ChannelData = TypeVar("T_ChannelData", bound="ChannelData")
T_GlobalLayerMaskInfo = TypeVar("T_GlobalLayerMaskInfo", bound="GlobalLayerMaskInfo")


def _to_enum(enum_cls: Any, value: Any, label: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown %s: %r" % (label, value))
        return value


@define(repr=False, frozen=True)
class LayerAndMaskInformation(BaseElement):
    """
    Layer and mask information section.

    .. py:attribute:: length

        Declared section length. It bounds everything from the layer info up
        to the end of the additional layer information blocks.

    .. py:attribute:: layer_info

        See :py:class:`.LayerInfo`.

    .. py:attribute:: global_layer_mask_info

        See :py:class:`.GlobalLayerMaskInfo`.

    .. py:attribute:: tagged_blocks

        See :py:class:`~psd_extract.psd.tagged_blocks.TaggedBlocks`.
    """

    length: int = 0
    layer_info: Optional["LayerInfo"] = None
    global_layer_mask_info: Optional["GlobalLayerMaskInfo"] = None
    tagged_blocks: Optional[Any] = None

    @classmethod
    def read(
        cls: type[T_LayerAndMaskInformation], cursor: ByteCursor, **kwargs: Any
    ) -> T_LayerAndMaskInformation:
        start_pos = cursor.position()
        length = cursor.read_u32()
        logger.debug(
            "reading layer and mask info, len=%d, offset=%d" % (length, start_pos)
        )
        return cls(length=length)

    def __repr__(self) -> str:
        return (
            "LayerAndMaskInformation(length=%d, layer_info=%r, "
            "global_layer_mask_info=%r, tagged_blocks=%r)"
            % (
                self.length,
                self.layer_info,
                self.global_layer_mask_info,
                self.tagged_blocks,
            )
        )


@define(repr=True, frozen=True)
class LayerInfo(BaseElement):
    """
    High-level organization of the layer information.

    .. py:attribute:: length

        Declared length of the layer info, from the layer count up to the end
        of the channel image data.

    .. py:attribute:: layer_count

        Layer count. If it is a negative number, its absolute value is the
        number of layers and the first alpha channel contains the transparency
        data for the merged result.

    .. py:attribute:: layer_records

        Information about each layer. See :py:class:`.LayerRecords`.
    """

    length: int = 0
    layer_count: int = 0
    layer_records: "LayerRecords" = field(factory=lambda: LayerRecords())

    @classmethod
    def read(
        cls: type[T_LayerInfo], cursor: ByteCursor, **kwargs: Any
    ) -> T_LayerInfo:
        start_pos = cursor.position()
        length = cursor.read_u32()
        logger.debug("reading layer info, len=%d, offset=%d" % (length, start_pos))
        if length == 0:
            return cls()
        layer_count = cursor.read_i16()
        logger.debug("  layer count=%d" % layer_count)
        return cls(length=length, layer_count=layer_count)

    @property
    def has_merged_alpha(self) -> bool:
        """Whether the first alpha channel is the merged result's transparency."""
        return self.layer_count < 0


@define(repr=True, frozen=True)
class ChannelInfo(BaseElement):
    """
    Channel information.

    .. py:attribute:: id

        Channel ID: 0 = red, 1 = green, etc.; -1 = transparency mask; -2 =
        user supplied layer mask, -3 real user supplied layer mask (when both
        a user mask and a vector mask are present). See
        :py:class:`~psd_extract.constants.ChannelID`.

    .. py:attribute:: length

        Length of the corresponding channel data, including the 2-byte
        compression field.
    """

    _FORMAT = "hI"

    id: Union[ChannelID, int] = ChannelID.CHANNEL_0
    length: int = 0

    @classmethod
    def read(
        cls: type[T_ChannelInfo], cursor: ByteCursor, **kwargs: Any
    ) -> T_ChannelInfo:
        channel_id, length = cursor.read_fmt(cls._FORMAT)
        try:
            channel_id = ChannelID(channel_id)
        except ValueError:
            pass
        return cls(id=channel_id, length=length)


@define(repr=True, frozen=True)
class LayerFlags(BaseElement):
    """
    Layer flags.

    Note there are undocumented flags. Maybe photoshop version.

    .. py:attribute:: transparency_protected
    .. py:attribute:: visible
    .. py:attribute:: pixel_data_irrelevant
    """

    transparency_protected: bool = False
    visible: bool = True
    obsolete: bool = field(default=False, repr=False)
    photoshop_v5_later: bool = field(default=False, repr=False)
    pixel_data_irrelevant: bool = False

    @classmethod
    def read(cls: type[T_LayerFlags], cursor: ByteCursor, **kwargs: Any) -> T_LayerFlags:
        return cls.from_byte(cursor.read_u8())

    @classmethod
    def from_byte(cls: type[T_LayerFlags], flags: int) -> T_LayerFlags:
        return cls(
            bool(flags & 1),
            not bool(flags & 2),  # bit 1 is "hidden"
            bool(flags & 4),
            bool(flags & 8),
            # Bit 4 is only meaningful when bit 3 is set.
            bool(flags & 8) and bool(flags & 16),
        )


class LayerRecords(ListElement):
    """
    List of layer records. See :py:class:`.LayerRecord`.
    """


@define(repr=False, frozen=True)
class LayerRecord(BaseElement):
    """
    Layer record.

    When the blend mode signature is not ``b'8BIM'`` the reader stops right
    after it: the rectangle and channel info are valid, while blend mode,
    opacity, clipping and extra length keep their defaults and every flag,
    visibility included, is cleared. Check :py:attr:`is_valid`.

    .. py:attribute:: top

        Top position.

    .. py:attribute:: left

        Left position.

    .. py:attribute:: bottom

        Bottom position.

    .. py:attribute:: right

        Right position.

    .. py:attribute:: channel_info

        List of :py:class:`.ChannelInfo` in storage order.

    .. py:attribute:: signature

        Blend mode signature ``b'8BIM'``.

    .. py:attribute:: blend_mode

        Blend mode key. See :py:class:`~psd_extract.constants.BlendMode`.
        Unknown keys are kept as bytes; ``None`` for an invalid record.

    .. py:attribute:: opacity

        Opacity, 0 = transparent, 255 = opaque.

    .. py:attribute:: clipping

        Clipping, 0 = base, 1 = non-base. See
        :py:class:`~psd_extract.constants.Clipping`.

    .. py:attribute:: flags

        See :py:class:`.LayerFlags`.

    .. py:attribute:: extra_length

        Length of the extra data (mask, blending ranges, name, tagged blocks)
        that follows the record. It is skipped, not decoded.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    channel_info: list[ChannelInfo] = field(factory=list)
    signature: bytes = LAYER_SIGNATURE
    blend_mode: Union[BlendMode, bytes, None] = None
    opacity: int = field(default=0, validator=range_(0, 255))
    clipping: Union[Clipping, int] = Clipping.BASE
    flags: LayerFlags = field(factory=lambda: LayerFlags.from_byte(0))
    extra_length: int = 0

    @classmethod
    def read(
        cls: type[T_LayerRecord], cursor: ByteCursor, **kwargs: Any
    ) -> T_LayerRecord:
        start_pos = cursor.position()
        top, left, bottom, right, num_channels = cursor.read_fmt("4iH")
        channel_info = [ChannelInfo.read(cursor) for _ in range(num_channels)]
        signature = cursor.read(4)
        if signature != LAYER_SIGNATURE:
            logger.warning(
                "Invalid layer record signature %r at offset %d"
                % (signature, cursor.position() - 4)
            )
            return cls(
                top=top,
                left=left,
                bottom=bottom,
                right=right,
                channel_info=channel_info,
                signature=signature,
                flags=LayerFlags(visible=False),
            )

        blend_mode, opacity, clipping, flags = cursor.read_fmt("4sBBB")
        cursor.read_u8()  # filler
        extra_length = cursor.read_u32()
        logger.debug(
            "  read layer record, len=%d, offset=%d"
            % (cursor.position() - start_pos, start_pos)
        )
        return cls(
            top=top,
            left=left,
            bottom=bottom,
            right=right,
            channel_info=channel_info,
            signature=signature,
            blend_mode=_to_enum(BlendMode, blend_mode, "blend mode"),
            opacity=opacity,
            clipping=_to_enum(Clipping, clipping, "clipping"),
            flags=LayerFlags.from_byte(flags),
            extra_length=extra_length,
        )

    def __repr__(self) -> str:
        return (
            "LayerRecord(top=%d, left=%d, bottom=%d, right=%d, channels=%r, "
            "blend_mode=%r, opacity=%d, clipping=%r, flags=%r, extra_length=%d)"
            % (
                self.top,
                self.left,
                self.bottom,
                self.right,
                [(int(c.id), c.length) for c in self.channel_info],
                self.blend_mode,
                self.opacity,
                self.clipping,
                self.flags,
                self.extra_length,
            )
        )

    @property
    def is_valid(self) -> bool:
        """Whether the blend mode signature was recognized."""
        return self.signature == LAYER_SIGNATURE

    @property
    def width(self) -> int:
        """Width of the layer."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the layer."""
        return max(self.bottom - self.top, 0)

    @property
    def channel_data_length(self) -> int:
        """Sum of the declared channel data lengths."""
        return sum(c.length for c in self.channel_info)


@define(repr=False, frozen=True)
class ChannelData(BaseElement):
    """
    Channel data.

    .. py:attribute:: compression

        Compression type. See :py:class:`~psd_extract.constants.Compression`.

    .. py:attribute:: data

        Compressed data, without the compression field.
    """

    compression: Union[Compression, int] = Compression.RAW
    data: bytes = b""

    @classmethod
    def read(
        cls: type[T_ChannelData], cursor: ByteCursor, length: int = 2, **kwargs: Any
    ) -> T_ChannelData:
        if length < 2:
            raise DecodeFailed(
                "channel data length %d at offset %d is shorter than its "
                "compression field" % (length, cursor.position())
            )
        compression = cursor.read_u16()
        try:
            compression = Compression(compression)
        except ValueError:
            pass
        data = cursor.read(length - 2)
        return cls(compression=compression, data=data)

    def __repr__(self) -> str:
        return "ChannelData(compression=%r, data=%s)" % (
            self.compression,
            trimmed_repr(self.data),
        )

    @property
    def _length(self) -> int:
        """Length of channel data block."""
        return 2 + len(self.data)


class ChannelDataList(ListElement):
    """
    List of channel image data of one layer, in the order of its
    :py:class:`.ChannelInfo` list.

    See :py:class:`.ChannelData`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_ChannelDataList],
        cursor: ByteCursor,
        channel_info: list[ChannelInfo],
        **kwargs: Any,
    ) -> T_ChannelDataList:
        items = []
        for c in channel_info:
            start_pos = cursor.position()
            items.append(ChannelData.read(cursor, c.length))
            logger.debug(
                "  read channel %d data, len=%d, offset=%d"
                % (c.id, c.length, start_pos)
            )
        return cls(items)  # type: ignore[arg-type]

    @property
    def _length(self) -> int:
        """Total bytes consumed by this layer's channels."""
        return sum(item._length for item in self)


@define(repr=True, frozen=True)
class GlobalLayerMaskInfo(BaseElement):
    """
    Global mask information.

    .. py:attribute:: length

        Declared length. 0 means the section is absent.

    .. py:attribute:: overlay_color_space

        Overlay color space (undocumented).

    .. py:attribute:: color_components

        Four 16-bit color components.

    .. py:attribute:: opacity

        Opacity. 0 = transparent, 100 = opaque.

    .. py:attribute:: kind

        Kind.
        0 = Color selected--i.e. inverted;
        1 = Color protected;
        128 = use value stored per layer. This value is preferred. The others
        are for backward compatibility with beta versions.
    """

    _FORMAT = "H4HHB"
    _FIXED_SIZE = 13

    length: int = 0
    overlay_color_space: Optional[int] = None
    color_components: Optional[tuple[int, int, int, int]] = None
    opacity: int = 0
    kind: Union[GlobalLayerMaskKind, int] = GlobalLayerMaskKind.PER_LAYER

    @classmethod
    def read(
        cls: type[T_GlobalLayerMaskInfo], cursor: ByteCursor, **kwargs: Any
    ) -> T_GlobalLayerMaskInfo:
        start_pos = cursor.position()
        length = cursor.read_u32()
        logger.debug(
            "reading global layer mask info, len=%d, offset=%d" % (length, start_pos)
        )
        if length == 0:
            return cls()
        elif length < cls._FIXED_SIZE:
            logger.warning(
                "global layer mask info is broken, expected 13 bytes but found"
                " only %d" % length
            )
            cursor.skip(length)
            return cls(length=length)

        values = cursor.read_fmt(cls._FORMAT)
        # Remaining bytes are zero filler.
        cursor.skip(length - cls._FIXED_SIZE)
        return cls(
            length=length,
            overlay_color_space=values[0],
            color_components=tuple(values[1:5]),  # type: ignore[arg-type]
            opacity=values[5],
            kind=_to_enum(GlobalLayerMaskKind, values[6], "global layer mask kind"),
        )

    @property
    def is_broken(self) -> bool:
        """Whether a non-zero length was too short for the fixed fields."""
        return 0 < self.length < self._FIXED_SIZE

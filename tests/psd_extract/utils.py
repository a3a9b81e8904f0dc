"""
Builders that assemble PSD byte streams for tests.
"""

import logging
import struct
from typing import Optional, Sequence

from attrs import define, field

from psd_extract.compression import encode_rle
from psd_extract.constants import Compression

logging.basicConfig(level=logging.DEBUG)


def u16(value: int) -> bytes:
    return struct.pack(">H", value)


def u32(value: int) -> bytes:
    return struct.pack(">I", value)


def make_header(
    signature: bytes = b"8BPS",
    version: int = 1,
    channels: int = 4,
    height: int = 2,
    width: int = 2,
    depth: int = 8,
    color_mode: int = 3,
) -> bytes:
    return struct.pack(
        ">4sH6xHIIHH", signature, version, channels, height, width, depth, color_mode
    )


def make_channel_data(
    plane: bytes,
    width: int,
    height: int,
    compression: int = Compression.RLE,
) -> bytes:
    """Compression field followed by the (encoded) plane."""
    if compression == Compression.RLE:
        data = encode_rle(plane, width, height)
    else:
        data = plane
    return u16(compression) + data


def make_tagged_block(key: bytes, payload: bytes, signature: bytes = b"8BIM") -> bytes:
    padding = (4 - len(payload) % 4) % 4
    return signature + key + u32(len(payload)) + payload + b"\x00" * padding


@define
class LayerSpec:
    """Layer to serialize; ``channels`` are ``(channel_id, channel_data)``."""

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    channels: list = field(factory=list)
    signature: bytes = b"8BIM"
    blend_mode: bytes = b"norm"
    opacity: int = 255
    clipping: int = 0
    flags: int = 0
    extra: bytes = b""

    @classmethod
    def rgba(
        cls,
        width: int,
        height: int,
        planes: dict,
        compression: int = Compression.RLE,
        **kwargs,
    ) -> "LayerSpec":
        """Layer at the origin with ``{channel_id: plane}`` channels."""
        channels = [
            (channel_id, make_channel_data(plane, width, height, compression))
            for channel_id, plane in planes.items()
        ]
        return cls(bottom=height, right=width, channels=channels, **kwargs)

    def record(self) -> bytes:
        data = struct.pack(
            ">4iH", self.top, self.left, self.bottom, self.right, len(self.channels)
        )
        for channel_id, channel_data in self.channels:
            data += struct.pack(">hI", channel_id, len(channel_data))
        data += self.signature
        if self.signature != b"8BIM":
            return data
        data += struct.pack(
            ">4sBBBx", self.blend_mode, self.opacity, self.clipping, self.flags
        )
        return data + u32(len(self.extra)) + self.extra

    def channel_image_data(self) -> bytes:
        return b"".join(channel_data for _, channel_data in self.channels)


def make_layer_info_content(
    layers: Sequence[LayerSpec], layer_count: Optional[int] = None
) -> bytes:
    """Layer count, records and channel data, padded to an even length."""
    if layer_count is None:
        layer_count = len(layers)
    content = struct.pack(">h", layer_count)
    content += b"".join(layer.record() for layer in layers)
    content += b"".join(layer.channel_image_data() for layer in layers)
    if len(content) % 2:
        content += b"\x00"
    return content


def make_psd(
    layers: Sequence[LayerSpec] = (),
    width: int = 2,
    height: int = 2,
    layer_count: Optional[int] = None,
    layer_info_length: Optional[int] = None,
    global_layer_mask_info: bytes = b"",
    tagged_blocks: bytes = b"",
    layer_and_mask_length: Optional[int] = None,
    color_mode_data: bytes = b"",
    image_resources: bytes = b"",
    empty_layer_and_mask: bool = False,
    trailer: bytes = b"",
) -> bytes:
    """
    Assemble a whole document.

    Length overrides write the given value while keeping the actual content,
    so that declared and consumed sizes disagree.
    """
    data = make_header(width=width, height=height)
    data += u32(len(color_mode_data)) + color_mode_data
    data += u32(len(image_resources)) + image_resources
    if empty_layer_and_mask:
        return data + u32(0) + trailer

    layer_info = make_layer_info_content(layers, layer_count)
    if layer_info_length is None:
        layer_info_length = len(layer_info)
    content = u32(layer_info_length) + layer_info
    content += u32(len(global_layer_mask_info)) + global_layer_mask_info
    content += tagged_blocks
    if layer_and_mask_length is None:
        layer_and_mask_length = len(content)
    return data + u32(layer_and_mask_length) + content + trailer


def make_global_layer_mask_info(
    overlay_color_space: int = 0,
    color_components: Sequence[int] = (0, 0, 0, 0),
    opacity: int = 100,
    kind: int = 128,
    filler: bytes = b"",
) -> bytes:
    return (
        struct.pack(">H4HHB", overlay_color_space, *color_components, opacity, kind)
        + filler
    )

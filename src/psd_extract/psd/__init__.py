"""
Low-level API that translates binary data to Python structure.

All the data structure in this subpackage inherits from one of the object
defined in :py:mod:`psd_extract.psd.base` module, and is read through a
:py:class:`~psd_extract.psd.cursor.ByteCursor`.
"""

# Main PSD document class
from .document import PSD as PSD
from .document import Diagnostic as Diagnostic
from .document import DocumentWalker as DocumentWalker
from .document import Stage as Stage

# Section structures
from .cursor import ByteCursor as ByteCursor
from .header import FileHeader as FileHeader
from .layer_and_mask import (
    ChannelDataList as ChannelDataList,
    GlobalLayerMaskInfo as GlobalLayerMaskInfo,
    LayerAndMaskInformation as LayerAndMaskInformation,
    LayerInfo as LayerInfo,
    LayerRecord as LayerRecord,
    LayerRecords as LayerRecords,
)
from .tagged_blocks import TaggedBlocks as TaggedBlocks

__all__ = [
    "PSD",
    "Diagnostic",
    "DocumentWalker",
    "Stage",
    "ByteCursor",
    "FileHeader",
    "LayerAndMaskInformation",
    "LayerInfo",
    "LayerRecords",
    "LayerRecord",
    "ChannelDataList",
    "GlobalLayerMaskInfo",
    "TaggedBlocks",
]

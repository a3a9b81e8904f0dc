"""
Additional layer information blocks.

The tail of the layer and mask information section is a sequence of tagged
blocks::

    signature   4 bytes   b'8BIM' or b'8B64'
    key         4 bytes   e.g. b'Patt', b'Txt2', b'Lr16'
    length      4 bytes
    data        length bytes, padded to a multiple of 4

There is no block count. The scan runs on a byte budget: the remaining
length of the enclosing section. Each block costs its padded payload plus
the 12 header bytes, and the scan stops when the budget reaches zero. Block
payloads are skipped, not decoded.
"""

import logging
from typing import Any, TypeVar

from attrs import define, field

from psd_extract.constants import TAGGED_BLOCK_SIGNATURES
from psd_extract.exceptions import BudgetUnderrun, InvalidBlockSignature
from psd_extract.psd.base import BaseElement, ListElement
from psd_extract.psd.bin_utils import padding
from psd_extract.psd.cursor import ByteCursor
from psd_extract.validators import in_

logger = logging.getLogger(__name__)

T_TaggedBlocks = TypeVar("T_TaggedBlocks", bound="TaggedBlocks")
T_TaggedBlock = TypeVar("T_TaggedBlock", bound="TaggedBlock")

#: Size of signature, key and length fields.
HEADER_SIZE = 12

#: Block payloads align to 4 bytes here, not to 2 as documented.
ALIGNMENT = 4


@define(repr=True, frozen=True)
class TaggedBlock(BaseElement):
    """
    Additional layer information block header.

    .. py:attribute:: signature

        ``b'8BIM'`` or ``b'8B64'``.

    .. py:attribute:: key

        4-character code.

    .. py:attribute:: length

        Declared payload length, excluding padding.
    """

    signature: bytes = field(
        default=b"8BIM", repr=False, validator=in_(TAGGED_BLOCK_SIGNATURES)
    )
    key: bytes = b""
    length: int = 0

    @classmethod
    def read(
        cls: type[T_TaggedBlock], cursor: ByteCursor, **kwargs: Any
    ) -> T_TaggedBlock:
        start_pos = cursor.position()
        signature = cursor.read(4)
        if signature not in TAGGED_BLOCK_SIGNATURES:
            raise InvalidBlockSignature(
                "Invalid tagged block signature %r at offset %d"
                % (signature, start_pos)
            )
        key, length = cursor.read_fmt("4sI")
        logger.debug(
            "reading tagged block %r, len=%d, offset=%d" % (key, length, start_pos)
        )
        return cls(signature, key, length)

    @property
    def padded_length(self) -> int:
        """Payload length including the alignment padding."""
        return self.length + padding(self.length, ALIGNMENT)

    @property
    def size(self) -> int:
        """Total bytes the block occupies, header included."""
        return self.padded_length + HEADER_SIZE


class TaggedBlocks(ListElement):
    """
    List of :py:class:`.TaggedBlock` found by a budgeted scan.

    Example::

        blocks = TaggedBlocks.read(cursor, budget=remaining)
        keys = [block.key for block in blocks]
    """

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_TaggedBlocks], cursor: ByteCursor, budget: int = 0, **kwargs: Any
    ) -> T_TaggedBlocks:
        """
        Scan blocks until ``budget`` bytes are used up.

        :param cursor: cursor positioned at the first block.
        :param budget: number of bytes the blocks occupy.
        :raise InvalidBlockSignature: a block signature is unrecognized.
        :raise BudgetUnderrun: the blocks do not add up to ``budget``. A block
            larger than the remaining budget is rejected before its payload
            is skipped.
        """
        items = []
        while budget > 0:
            if budget < HEADER_SIZE:
                raise BudgetUnderrun(
                    "%d bytes left at offset %d, too small for a tagged block"
                    % (budget, cursor.position())
                )
            block = TaggedBlock.read(cursor)
            if block.size > budget:
                raise BudgetUnderrun(
                    "tagged block %r overran the section by %d bytes"
                    % (block.key, block.size - budget)
                )
            cursor.skip(block.padded_length)
            budget -= block.size
            items.append(block)
        logger.debug("  read %d tagged blocks" % len(items))
        return cls(items)  # type: ignore[arg-type]

    def keys(self) -> list[bytes]:
        return [block.key for block in self]

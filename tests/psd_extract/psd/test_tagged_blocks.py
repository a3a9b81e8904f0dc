import logging

import pytest

from psd_extract.exceptions import BudgetUnderrun, InvalidBlockSignature
from psd_extract.psd.cursor import ByteCursor
from psd_extract.psd.tagged_blocks import TaggedBlock, TaggedBlocks

from ..utils import make_tagged_block

logger = logging.getLogger(__name__)


def test_tagged_block() -> None:
    block = TaggedBlock.frombytes(make_tagged_block(b"luni", b"\x00" * 5))
    assert block.signature == b"8BIM"
    assert block.key == b"luni"
    assert block.length == 5
    assert block.padded_length == 8
    assert block.size == 20


def test_tagged_block_invalid_signature() -> None:
    with pytest.raises(InvalidBlockSignature):
        TaggedBlock.frombytes(make_tagged_block(b"luni", b"", signature=b"8BPS"))


def test_tagged_block_signature_validator() -> None:
    with pytest.raises(ValueError):
        TaggedBlock(signature=b"XXXX")


def test_tagged_blocks_scan() -> None:
    data = (
        make_tagged_block(b"Patt", b"\x01" * 5)
        + make_tagged_block(b"Lr16", b"", signature=b"8B64")
        + make_tagged_block(b"Txt2", b"\x02" * 8)
    )
    cursor = ByteCursor.frombytes(data + b"\xff" * 4)
    blocks = TaggedBlocks.read(cursor, len(data))
    assert blocks.keys() == [b"Patt", b"Lr16", b"Txt2"]
    assert sum(block.size for block in blocks) == len(data)
    assert cursor.position() == len(data)


def test_tagged_blocks_zero_budget() -> None:
    cursor = ByteCursor.frombytes(b"")
    blocks = TaggedBlocks.read(cursor, 0)
    assert len(blocks) == 0
    assert cursor.position() == 0


def test_tagged_blocks_invalid_signature() -> None:
    data = make_tagged_block(b"Patt", b"") + make_tagged_block(
        b"Patt", b"", signature=b"XXXX"
    )
    with pytest.raises(InvalidBlockSignature):
        TaggedBlocks.read(ByteCursor.frombytes(data), len(data))


@pytest.mark.parametrize("budget", [1, 8, 11])
def test_tagged_blocks_budget_below_header(budget: int) -> None:
    data = make_tagged_block(b"Patt", b"")
    with pytest.raises(BudgetUnderrun):
        TaggedBlocks.read(ByteCursor.frombytes(data), budget)


def test_tagged_blocks_budget_overrun() -> None:
    data = make_tagged_block(b"Patt", b"\x00" * 8)
    with pytest.raises(BudgetUnderrun):
        TaggedBlocks.read(ByteCursor.frombytes(data), 16)


def test_tagged_blocks_overrun_checked_before_skip() -> None:
    data = b"8BIMPatt" + b"\x00\x00\x00\x64" + b"\x00" * 4
    cursor = ByteCursor.frombytes(data)
    with pytest.raises(BudgetUnderrun):
        TaggedBlocks.read(cursor, len(data))
    assert cursor.position() == 12


def test_tagged_blocks_leftover_budget() -> None:
    data = make_tagged_block(b"Patt", b"\x00" * 4) + b"\x00" * 4
    with pytest.raises(BudgetUnderrun):
        TaggedBlocks.read(ByteCursor.frombytes(data), len(data))

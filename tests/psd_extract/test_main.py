import logging

import pytest

from psd_extract.__main__ import main

from .utils import LayerSpec, make_psd, make_tagged_block

logger = logging.getLogger(__name__)


@pytest.fixture
def input_file(tmp_path) -> str:
    path = tmp_path / "input.psd"
    path.write_bytes(
        make_psd(
            [
                LayerSpec.rgba(2, 2, {0: bytes([10, 20, 30, 40]), -1: b"\xff" * 4}),
                LayerSpec(),
                LayerSpec.rgba(2, 2, {2: b"\x05" * 4}),
            ]
        )
    )
    return str(path)


def test_export(input_file: str, tmp_path) -> None:
    output_dir = tmp_path / "output"
    assert main(["export", input_file, str(output_dir)]) is None
    assert sorted(p.name for p in output_dir.iterdir()) == [
        "layer0.png",
        "layer2.png",
    ]


def test_export_verbose(input_file: str, tmp_path) -> None:
    assert main(["--verbose", "export", input_file, str(tmp_path)]) is None
    assert (tmp_path / "layer0.png").exists()


def test_show(input_file: str, capsys: pytest.CaptureFixture) -> None:
    assert main(["show", input_file]) is None
    out = capsys.readouterr().out
    assert "PSDImage(mode=RGB size=2x2" in out
    assert "[2] Layer(size=2x2)" in out


def test_decode_error(tmp_path) -> None:
    path = tmp_path / "broken.psd"
    path.write_bytes(b"XXXX" + make_psd()[4:])
    assert main(["show", str(path)]) == 1


@pytest.mark.parametrize("argv", [["-h"], ["--version"], []])
def test_main_exit(argv: list) -> None:
    with pytest.raises(SystemExit):
        main(argv)


@pytest.fixture
def broken_blocks_file(tmp_path) -> str:
    path = tmp_path / "broken_blocks.psd"
    path.write_bytes(
        make_psd(
            [
                LayerSpec.rgba(2, 2, {0: bytes([10, 20, 30, 40])}),
                LayerSpec.rgba(2, 2, {1: b"\x01" * 4}),
            ],
            tagged_blocks=make_tagged_block(b"Patt", b"", signature=b"XXXX"),
        )
    )
    return str(path)


def test_export_recovered_layers(broken_blocks_file: str, tmp_path) -> None:
    output_dir = tmp_path / "output"
    assert main(["export", broken_blocks_file, str(output_dir)]) == 1
    assert sorted(p.name for p in output_dir.iterdir()) == [
        "layer0.png",
        "layer1.png",
    ]


def test_show_recovered_layers(
    broken_blocks_file: str, capsys: pytest.CaptureFixture
) -> None:
    assert main(["show", broken_blocks_file]) == 1
    assert "[1] Layer(size=2x2)" in capsys.readouterr().out

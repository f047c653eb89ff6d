"""
Unit tests for the command-line entry point
"""

import pytest
import numpy as np
from PIL import Image

from src.cli import build_parser, main
from src.pod3_export import read_descriptor


@pytest.fixture
def input_image(tmp_path):
    """Write a 32x48 RGB test image"""
    data = np.random.default_rng(0).integers(0, 256, size=(48, 32, 3), dtype=np.uint8)
    path = tmp_path / "landscape.png"
    Image.fromarray(data).save(path)
    return path


class TestCli:
    """Test CLI runs"""

    def test_defaults(self):
        """Test default flag values"""
        args = build_parser().parse_args(["--input", "a.png"])

        assert args.author == "Unknown"
        assert args.title == "Untitled"
        assert args.out == "tiles"
        assert args.workers == 1

    def test_missing_input(self):
        """Test --input is required"""
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    def test_empty_input(self, capsys):
        """Test an empty --input is rejected as a usage error"""
        with pytest.raises(SystemExit) as excinfo:
            main(["--input", ""])

        assert excinfo.value.code == 2
        assert "--input" in capsys.readouterr().err

    def test_run(self, input_image, tmp_path):
        """Test full run writes two files per tile"""
        out_dir = tmp_path / "out"

        status = main([
            "--input", str(input_image),
            "--author", "Alice",
            "--title", "Valley",
            "--out", str(out_dir),
            "--no-progress"
        ])

        assert status == 0
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "landscape_0_0.bmp",
            "landscape_0_0.paint",
            "landscape_1_0.bmp",
            "landscape_1_0.paint",
        ]

        first = read_descriptor(str(out_dir / "landscape_0_0.paint"))
        second = read_descriptor(str(out_dir / "landscape_1_0.paint"))
        assert (first.ct, second.ct) == (1, 2)
        assert first.author == "Alice"
        assert first.title == "Valley"

        prefix, first_offset = first.name.rsplit("_", 1)
        _, second_offset = second.name.rsplit("_", 1)
        assert prefix == "d1ebe29f-f4e9-4572-83cd-8b2cdbfc2420"
        assert int(second_offset) == int(first_offset) + 1

    def test_run_rejects_unaligned(self, tmp_path):
        """Test unaligned images fail without writing anything"""
        path = tmp_path / "odd.png"
        Image.new("RGB", (20, 16)).save(path)
        out_dir = tmp_path / "out"

        status = main(["--input", str(path), "--out", str(out_dir), "--no-progress"])

        assert status == 1
        assert not out_dir.exists()

    def test_run_missing_file(self, tmp_path):
        """Test missing input file fails"""
        status = main(["--input", str(tmp_path / "nope.png"), "--out", str(tmp_path / "out")])

        assert status == 1

    def test_run_parallel(self, input_image, tmp_path):
        """Test threaded export"""
        out_dir = tmp_path / "out"

        status = main([
            "--input", str(input_image),
            "--out", str(out_dir),
            "--workers", "3",
            "--no-progress"
        ])

        assert status == 0
        assert len(list(out_dir.iterdir())) == 4

"""
Unit tests for Export (POD3)
"""

import gzip

import pytest
import numpy as np
from PIL import Image

from src.pod2_tiling import TilePlanner
from src.pod3_export import (
    IdentityAssigner,
    RunContext,
    TileExporter,
    extract_pixels,
    read_descriptor,
    tile_file_base
)
from src.common.config import PAINTING_NAMESPACE
from src.common.exceptions import ExportError


def make_image(width, height):
    """Create an opaque RGBA image whose pixels encode their coordinates"""
    ys, xs = np.mgrid[0:height, 0:width]
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[..., 0] = xs * 7 % 256
    image[..., 1] = ys * 5 % 256
    image[..., 2] = (xs * ys) % 256
    image[..., 3] = 255
    return image


@pytest.fixture
def context(tmp_path):
    return RunContext(
        author="Bob Ross",
        title="Happy Trees",
        output_dir=tmp_path / "tiles",
        name_root="forest",
        base_id=1_700_000_000_000_000_000
    )


@pytest.fixture
def exporter(context):
    return TileExporter(context)


class TestNaming:
    """Test file names and painting identities"""

    def test_file_base(self):
        """Test file base format"""
        assert tile_file_base("forest", 1, 0) == "forest_1_0"
        assert tile_file_base("my.photo", 12, 3) == "my.photo_12_3"

    def test_identity_format(self):
        """Test identity is namespace plus offset base id"""
        assigner = IdentityAssigner(PAINTING_NAMESPACE, 1000)

        assert assigner.next_identity() == f"{PAINTING_NAMESPACE}_1000"
        assert assigner.next_identity() == f"{PAINTING_NAMESPACE}_1001"
        assert assigner.counter == 2

    def test_identities_distinct(self):
        """Test identities are pairwise distinct and strictly increasing"""
        assigner = IdentityAssigner(PAINTING_NAMESPACE, 42)
        identities = assigner.assign(250)

        assert len(set(identities)) == 250
        offsets = [int(identity.rsplit("_", 1)[1]) for identity in identities]
        assert offsets == list(range(42, 292))

    def test_identity_at_is_pure(self):
        """Test identity_at does not advance the counter"""
        assigner = IdentityAssigner("ns", 5)

        assert assigner.identity_at(3) == "ns_8"
        assert assigner.counter == 0


class TestRunContext:
    """Test run context"""

    def test_from_input(self, tmp_path):
        """Test context derived from an input path"""
        context = RunContext.from_input(
            str(tmp_path / "images" / "sunset.png"),
            author="Alice",
            title="Dusk",
            output_dir=str(tmp_path / "out")
        )

        assert context.name_root == "sunset"
        assert context.author == "Alice"
        assert context.title == "Dusk"
        assert context.namespace == PAINTING_NAMESPACE
        assert context.base_id > 0

    def test_defaults(self):
        """Test default metadata"""
        context = RunContext.from_input("picture.jpg")

        assert context.author == "Unknown"
        assert context.title == "Untitled"
        assert str(context.output_dir) == "tiles"

    def test_invalid_namespace(self):
        """Test namespace must be a UUID"""
        with pytest.raises(ValueError):
            RunContext(name_root="x", base_id=1, namespace="not-a-uuid")

    def test_immutable(self, context):
        """Test context cannot be modified"""
        with pytest.raises((TypeError, ValueError)):
            context.author = "Someone else"


class TestPixelExtraction:
    """Test packed pixel extraction"""

    def test_row_major_argb(self):
        """Test element y*W+x is the packed pixel at (x, y)"""
        image = make_image(64, 32)
        plan = TilePlanner().plan(image)

        for tile in plan:
            pixels = extract_pixels(tile)
            assert pixels.dtype == np.uint32
            assert len(pixels) == tile.width * tile.height

            x0, y0 = tile.placement.x, tile.placement.y
            for y in range(tile.height):
                for x in range(tile.width):
                    r, g, b, _ = (int(v) for v in image[y0 + y, x0 + x])
                    assert int(pixels[y * tile.width + x]) == (0xFF << 24) | (r << 16) | (g << 8) | b

    def test_alpha_forced_opaque(self):
        """Test alpha byte is always 0xFF"""
        image = make_image(16, 16)
        image[..., 3] = 0
        tile = TilePlanner().plan(image).tiles[0]

        pixels = extract_pixels(tile)

        assert ((pixels >> 24) == 0xFF).all()
        assert (pixels == 0xFF000000).all()


class TestTileExporter:
    """Test artifact writing"""

    def test_export_tile(self, exporter, context):
        """Test both artifacts are written and readable"""
        context.output_dir.mkdir(parents=True)
        tile = TilePlanner().plan(make_image(32, 48)).tiles[1]

        record = exporter.export_tile(tile, "identity_7")

        assert record.file_base == "forest_1_0"
        assert record.code == 2

        with Image.open(record.bitmap_path) as bitmap:
            assert bitmap.format == "BMP"
            assert bitmap.size == (32, 16)
            np.testing.assert_array_equal(np.asarray(bitmap.convert("RGBA")), tile.pixels)

        with open(record.paint_path, "rb") as f:
            assert f.read(2) == b"\x1f\x8b"

    def test_descriptor_round_trip(self, exporter, context):
        """Test descriptor fields survive write and read"""
        context.output_dir.mkdir(parents=True)
        tile = TilePlanner().plan(make_image(32, 32)).tiles[0]

        record = exporter.export_tile(tile, "identity_0")
        descriptor = read_descriptor(record.paint_path)

        assert descriptor.generation == 1
        assert descriptor.ct == 1
        assert descriptor.v == 2
        assert descriptor.author == "Bob Ross"
        assert descriptor.title == "Happy Trees"
        assert descriptor.name == "identity_0"
        assert len(descriptor.pixels) == 32 * 32
        assert descriptor.pixels == extract_pixels(tile).tolist()

    def test_descriptor_is_gzip_nbt(self, exporter, context):
        """Test descriptor is an unnamed NBT compound inside gzip"""
        context.output_dir.mkdir(parents=True)
        tile = TilePlanner().plan(make_image(16, 16)).tiles[0]

        record = exporter.export_tile(tile, "identity_0")
        with gzip.open(record.paint_path, "rb") as f:
            raw = f.read()

        # TAG_Compound, empty root name
        assert raw[:3] == b"\x0a\x00\x00"
        # first entry: TAG_Int "generation"
        assert raw[3:4] == b"\x03"
        assert raw[4:6] == (10).to_bytes(2, "big")
        assert raw[6:16] == b"generation"
        assert raw[16:20] == (1).to_bytes(4, "big")
        # TAG_Byte "ct", 16x16 canvas code
        assert raw[20:21] == b"\x01"
        assert raw[21:23] == (2).to_bytes(2, "big")
        assert raw[23:25] == b"ct"
        assert raw[25] == 0
        # TAG_Int_Array "pixels", 256 values
        assert raw[26:27] == b"\x0b"
        assert raw[27:29] == (6).to_bytes(2, "big")
        assert raw[29:35] == b"pixels"
        assert raw[35:39] == (256).to_bytes(4, "big")

    def test_export_plan(self, exporter, context):
        """Test plan export writes two files per tile in planning order"""
        plan = TilePlanner().plan(make_image(32, 48))

        result = exporter.export_plan(plan, show_progress=False)

        assert result.total_tiles == 2
        assert result.total_files == 4
        assert sorted(p.name for p in context.output_dir.iterdir()) == [
            "forest_0_0.bmp",
            "forest_0_0.paint",
            "forest_1_0.bmp",
            "forest_1_0.paint",
        ]

        names = [read_descriptor(tile.paint_path).name for tile in result.tiles]
        assert names == [
            f"{PAINTING_NAMESPACE}_{context.base_id}",
            f"{PAINTING_NAMESPACE}_{context.base_id + 1}",
        ]
        assert result.get_tile_by_name("forest_1_0").code == 2

    def test_parallel_export_matches_sequential(self, context, tmp_path):
        """Test thread fan-out keeps identities and order deterministic"""
        plan = TilePlanner().plan(make_image(80, 64))

        sequential = TileExporter(context).export_plan(plan, show_progress=False)
        parallel_context = context.model_copy(update={"output_dir": tmp_path / "parallel"})
        parallel = TileExporter(parallel_context).export_plan(plan, max_workers=4, show_progress=False)

        assert [t.file_base for t in parallel.tiles] == [t.file_base for t in sequential.tiles]
        assert [t.identity for t in parallel.tiles] == [t.identity for t in sequential.tiles]
        assert len(list((tmp_path / "parallel").iterdir())) == 2 * len(plan)

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_failure_stops_later_tiles(self, context, max_workers):
        """Test a failing tile aborts the export before later tiles are written"""

        class FailingExporter(TileExporter):
            def encode_bitmap(self, tile):
                if self.file_base(tile) == "forest_0_1":
                    raise OSError("disk full")
                return super().encode_bitmap(tile)

        plan = TilePlanner().plan(make_image(64, 64))
        assert [TileExporter(context).file_base(t) for t in plan] == [
            "forest_0_0", "forest_0_1", "forest_1_0", "forest_1_1"
        ]

        with pytest.raises(ExportError) as excinfo:
            FailingExporter(context).export_plan(plan, max_workers=max_workers, show_progress=False)

        assert excinfo.value.path == str(context.output_dir / "forest_0_1.bmp")
        assert sorted(p.name for p in context.output_dir.iterdir()) == [
            "forest_0_0.bmp",
            "forest_0_0.paint",
        ]

    def test_overwrite(self, exporter, context):
        """Test re-exporting overwrites silently"""
        plan = TilePlanner().plan(make_image(16, 16))

        exporter.export_plan(plan, IdentityAssigner("ns", 1), show_progress=False)
        result = exporter.export_plan(plan, IdentityAssigner("ns", 9), show_progress=False)

        assert len(list(context.output_dir.iterdir())) == 2
        assert read_descriptor(result.tiles[0].paint_path).name == "ns_9"

    def test_output_dir_is_file(self, context):
        """Test failure to create the output directory"""
        context.output_dir.write_text("in the way")
        plan = TilePlanner().plan(make_image(16, 16))

        with pytest.raises(ExportError) as excinfo:
            TileExporter(context).export_plan(plan, show_progress=False)

        assert excinfo.value.path == str(context.output_dir)
        assert isinstance(excinfo.value, OSError)

#!/usr/bin/env python3
"""
Tests for sprite sheet composition and the metadata file.
"""

from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from spritepack.composer import SheetComposer, metadata_path_for, read_metadata
from spritepack.core import SpriteSheetPacker
from spritepack.errors import SheetWriteError
from spritepack.frames import alpha_bounding_box, trim_image

COLORS = ["red", "blue", "green", "yellow", "purple", "orange", "pink", "cyan"]


def sample_frames():
    """Frames of varied size, each a solid block on a transparent 48x48 canvas."""
    boxes = [(4, 4, 20, 40), (10, 2, 40, 12), (0, 0, 47, 47), (30, 30, 33, 33), (5, 20, 25, 30)]
    frames = []
    for index, box in enumerate(boxes, start=1):
        img = Image.new("RGBA", (48, 48), (0, 0, 0, 0))
        ImageDraw.Draw(img).rectangle(box, fill=COLORS[index % len(COLORS)])
        frames.append(trim_image(img, index))
    frames.append(trim_image(Image.new("RGBA", (48, 48), (0, 0, 0, 0)), 6))
    return frames


def test_metadata_path_sits_next_to_sheet():
    assert metadata_path_for(Path("out/run_spritesheet.png")) == Path("out/run_spritesheet_metadata.csv")


def test_sheet_has_packed_size():
    frames = sample_frames()
    result = SpriteSheetPacker().pack(frames)

    sheet = SheetComposer().compose(result, frames)

    assert sheet.mode == "RGBA"
    assert sheet.size == (result.used_width, result.used_height)


def test_round_trip_recovers_every_frame(tmp_path: Path):
    frames = sample_frames()
    result = SpriteSheetPacker().pack(frames)
    composer = SheetComposer()
    sheet_path = composer.write_sheet(composer.compose(result, frames), tmp_path / "sheet.png")
    metadata_path = composer.write_metadata(result, metadata_path_for(sheet_path))

    rows = read_metadata(metadata_path)
    by_index = {f.index: f for f in frames}
    with Image.open(sheet_path) as sheet:
        sheet = sheet.convert("RGBA")
        for index, (x, y, width, height, anchor_x, anchor_y) in zip(sorted(by_index), rows):
            frame = by_index[index]
            assert (width, height) == (frame.width, frame.height)
            assert (anchor_x, anchor_y) == (frame.anchor_x, frame.anchor_y)

            region = sheet.crop((x, y, x + width, y + height))
            assert region.tobytes() == frame.source.tobytes()
            if not frame.is_placeholder:
                assert alpha_bounding_box(region) == (0, 0, width - 1, height - 1)


def test_metadata_format(tmp_path: Path):
    img = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    ImageDraw.Draw(img).rectangle((25, 25, 74, 74), fill="black")
    frames = [trim_image(img, 2), trim_image(Image.new("RGBA", (64, 65), (0, 0, 0, 0)), 1)]
    result = SpriteSheetPacker().pack(frames)

    path = SheetComposer().write_metadata(result, tmp_path / "meta.csv")

    placed = {p.index: p for p in result.placements}
    expected = (f"{placed[1].x},{placed[1].y},1,1,32.0,32.5\n"
                f"{placed[2].x},{placed[2].y},50,50,25.0,25.0\n")
    assert path.read_text(encoding="utf-8") == expected


def test_metadata_progress_reaches_completion(tmp_path: Path):
    frames = sample_frames()
    result = SpriteSheetPacker().pack(frames)
    seen = []

    SheetComposer(progress=seen.append).write_metadata(result, tmp_path / "meta.csv")

    assert len(seen) == len(frames)
    assert seen[-1] == 1.0


def test_read_metadata_rejects_malformed_lines(tmp_path: Path):
    path = tmp_path / "bad.csv"
    path.write_text("1,2,3\n", encoding="utf-8")

    with pytest.raises(ValueError):
        read_metadata(path)


def test_unwritable_sheet_raises_sheet_write_error(tmp_path: Path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")

    with pytest.raises(SheetWriteError):
        SheetComposer().write_sheet(Image.new("RGBA", (2, 2)), blocker / "sheet.png")


def test_compose_requires_pixels_for_every_placement():
    frames = sample_frames()
    result = SpriteSheetPacker().pack(frames)

    with pytest.raises(ValueError):
        SheetComposer().compose(result, frames[1:])


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))

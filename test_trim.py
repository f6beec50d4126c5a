#!/usr/bin/env python3
"""
Tests for transparent border trimming and anchor points.
"""

from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from spritepack.errors import FrameDecodeError
from spritepack.frames import alpha_bounding_box, trim_file, trim_image, trim_sequence


def opaque_block(canvas_size, box, color=(200, 40, 40, 255)):
    """Transparent canvas with one opaque rectangle; box is inclusive (x0, y0, x1, y1)."""
    img = Image.new("RGBA", canvas_size, (0, 0, 0, 0))
    ImageDraw.Draw(img).rectangle(box, fill=color)
    return img


def test_centered_square_trims_to_square():
    frame = trim_image(opaque_block((100, 100), (25, 25, 74, 74)), index=1)

    assert (frame.width, frame.height) == (50, 50)
    # Original center (50, 50) minus the crop offset (25, 25).
    assert (frame.anchor_x, frame.anchor_y) == (25.0, 25.0)
    assert frame.original_size == (100, 100)
    assert not frame.is_placeholder


def test_fully_transparent_frame_becomes_placeholder():
    frame = trim_image(Image.new("RGBA", (64, 64), (0, 0, 0, 0)), index=7)

    assert (frame.width, frame.height) == (1, 1)
    assert (frame.anchor_x, frame.anchor_y) == (32.0, 32.0)
    assert frame.is_placeholder
    assert frame.source.size == (1, 1)
    assert frame.source.getpixel((0, 0))[3] == 0


def test_off_center_content_moves_anchor():
    frame = trim_image(opaque_block((40, 30), (10, 5, 19, 24)), index=2)

    assert (frame.width, frame.height) == (10, 20)
    assert (frame.anchor_x, frame.anchor_y) == (20.0 - 10, 15.0 - 5)


def test_single_pixel_gives_fractional_anchor():
    img = Image.new("RGBA", (5, 5), (0, 0, 0, 0))
    img.putpixel((2, 2), (255, 255, 255, 1))
    frame = trim_image(img, index=0)

    assert (frame.width, frame.height) == (1, 1)
    assert (frame.anchor_x, frame.anchor_y) == (0.5, 0.5)
    assert not frame.is_placeholder


def test_image_without_alpha_is_kept_whole():
    frame = trim_image(Image.new("RGB", (12, 7), "blue"), index=3)

    assert (frame.width, frame.height) == (12, 7)
    assert (frame.anchor_x, frame.anchor_y) == (6.0, 3.5)
    assert frame.source.mode == "RGBA"


def test_trimmed_sizes_are_always_positive():
    images = [
        Image.new("RGBA", (1, 1), (0, 0, 0, 0)),
        Image.new("RGBA", (0, 0)),
        opaque_block((8, 8), (7, 7, 7, 7)),
        opaque_block((30, 3), (0, 0, 29, 2)),
    ]
    for index, img in enumerate(images):
        frame = trim_image(img, index)
        assert frame.width >= 1 and frame.height >= 1


def test_alpha_bounding_box_is_inclusive():
    assert alpha_bounding_box(opaque_block((20, 20), (3, 4, 10, 12))) == (3, 4, 10, 12)
    assert alpha_bounding_box(Image.new("RGBA", (20, 20))) is None


def test_trim_file_can_stage_cropped_pixels(tmp_path: Path):
    source = tmp_path / "walk003.png"
    opaque_block((32, 32), (8, 8, 15, 23)).save(source)
    stage_dir = tmp_path / "stage"
    stage_dir.mkdir()

    frame = trim_file(source, 3, stage_dir=stage_dir, stage_prefix="walk")

    assert frame.source == stage_dir / "walk0000003.png"
    assert frame.source.is_file()
    pixels = frame.load_pixels()
    assert pixels.size == (8, 16)
    assert pixels.getpixel((0, 0)) == (200, 40, 40, 255)


def test_trim_file_reports_unreadable_images(tmp_path: Path):
    broken = tmp_path / "walk001.png"
    broken.write_bytes(b"not a png at all")

    with pytest.raises(FrameDecodeError):
        trim_file(broken, 1)


def test_trim_sequence_skips_bad_files(tmp_path: Path):
    good = tmp_path / "walk001.png"
    opaque_block((16, 16), (2, 2, 5, 5)).save(good)
    bad = tmp_path / "walk002.png"
    bad.write_bytes(b"garbage")
    seen = []

    frames, errors = trim_sequence([(1, good), (2, bad)], progress=seen.append)

    assert [f.index for f in frames] == [1]
    assert len(errors) == 1 and "walk002.png" in errors[0]
    assert seen == [0.5, 1.0]


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))

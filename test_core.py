#!/usr/bin/env python3
"""
Tests for the sheet height search.
"""

import pytest
from PIL import Image

from spritepack.core import Candidate, PackingConfig, SpriteSheetPacker
from spritepack.frames import Frame
from test_placer import assert_no_overlap, random_frames


def make_frame(index, width, height, anchor=(0.0, 0.0)):
    return Frame(index, width, height, anchor[0], anchor[1], Image.new("RGBA", (width, height)))


def three_frames():
    return [make_frame(1, 10, 20), make_frame(2, 15, 15), make_frame(3, 8, 8)]


def test_search_tries_heights_until_sheet_is_as_narrow_as_widest_frame():
    result = SpriteSheetPacker().pack(three_frames())

    assert result.candidates == [
        Candidate(20, 33, 660),
        Candidate(30, 25, 750),
        Candidate(40, 18, 720),
        Candidate(50, 15, 750),
    ]
    assert result.converged
    assert (result.used_width, result.used_height) == (33, 20)
    assert result.area == 660


def test_final_placements_come_from_best_height():
    result = SpriteSheetPacker().pack(three_frames())

    assert [(p.index, p.x, p.y) for p in result.placements] == [(1, 0, 0), (2, 10, 0), (3, 25, 0)]


def test_final_area_never_exceeds_first_trial():
    for seed in (4, 5, 6):
        result = SpriteSheetPacker().pack(random_frames(seed))
        assert result.area <= result.candidates[0].area
        assert result.area == min(c.area for c in result.candidates)


def test_result_is_consistent_with_placements():
    frames = random_frames(7, count=40)
    result = SpriteSheetPacker(PackingConfig(height_step=7)).pack(frames)

    assert result.used_width == max(p.x + p.width for p in result.placements)
    assert all(p.y + p.height <= result.used_height for p in result.placements)
    positions = {p.index: (p.x, p.y) for p in result.placements}
    assert_no_overlap(frames, positions)


def test_placements_are_ordered_by_index_and_keep_anchors():
    frames = [make_frame(3, 4, 4, (1.5, 2.0)), make_frame(1, 6, 9, (3.0, 4.5)), make_frame(2, 2, 2)]

    result = SpriteSheetPacker().pack(frames)

    assert [p.index for p in result.placements] == [1, 2, 3]
    assert (result.placements[0].anchor_x, result.placements[0].anchor_y) == (3.0, 4.5)
    assert (result.placements[2].anchor_x, result.placements[2].anchor_y) == (1.5, 2.0)


def test_height_floor_sets_first_candidate():
    result = SpriteSheetPacker(PackingConfig(min_height=45)).pack(three_frames())

    assert result.candidates == [Candidate(45, 15, 675)]
    assert (result.used_width, result.used_height) == (15, 45)


def test_height_ceiling_stops_search_with_best_so_far():
    result = SpriteSheetPacker(PackingConfig(max_height=35)).pack(three_frames())

    assert [c.height for c in result.candidates] == [20, 30]
    assert not result.converged
    assert (result.used_width, result.used_height) == (33, 20)


def test_height_ceiling_is_never_tried():
    result = SpriteSheetPacker(PackingConfig(max_height=30)).pack(three_frames())

    assert [c.height for c in result.candidates] == [20]
    assert not result.converged
    assert (result.used_width, result.used_height) == (33, 20)


def test_ceiling_below_tallest_frame_still_packs_once():
    result = SpriteSheetPacker(PackingConfig(max_height=10)).pack(three_frames())

    assert [c.height for c in result.candidates] == [20]
    assert result.used_height == 20


def test_single_frame_converges_immediately():
    result = SpriteSheetPacker().pack([make_frame(0, 50, 50)])

    assert result.candidates == [Candidate(50, 50, 2500)]
    assert result.efficiency == 1.0


def test_progress_estimates_stay_in_range():
    seen = []
    SpriteSheetPacker().pack(random_frames(8), progress=seen.append)

    assert seen
    assert all(0.0 <= value <= 1.0 for value in seen)
    assert seen[-1] == 1.0


@pytest.mark.parametrize("config", [
    PackingConfig(min_height=-1),
    PackingConfig(height_step=0),
    PackingConfig(max_height=0),
    PackingConfig(min_height=50, max_height=40),
])
def test_invalid_config_is_rejected(config):
    with pytest.raises(ValueError):
        SpriteSheetPacker(config)


def test_empty_or_duplicate_frames_are_rejected():
    packer = SpriteSheetPacker()
    with pytest.raises(ValueError):
        packer.pack([])
    with pytest.raises(ValueError):
        packer.pack([make_frame(1, 2, 2), make_frame(1, 3, 3)])


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
